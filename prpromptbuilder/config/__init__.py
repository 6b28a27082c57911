# prpromptbuilder/config/__init__.py

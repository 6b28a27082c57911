# prpromptbuilder/services/__init__.py

# prpromptbuilder/cli/__init__.py

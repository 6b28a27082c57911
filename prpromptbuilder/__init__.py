# prpromptbuilder/__init__.py

__version__ = "0.2.0"

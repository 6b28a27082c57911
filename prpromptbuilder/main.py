# prpromptbuilder/main.py
"""
Entry point for the PR PromptBuilder command line.

Ensures the project root is in sys.path when run directly, then hands
over to the Typer app (which sets up logging in its callback).
"""
import sys
import os

# Ensure the package root is discoverable, especially when run with `python -m`
# or from a PyInstaller bundle where paths can be tricky.
if __package__ is None and not hasattr(sys, "frozen"):
    path = os.path.realpath(os.path.abspath(__file__))
    sys.path.insert(0, os.path.dirname(os.path.dirname(path)))

from prpromptbuilder.cli.main import app

if __name__ == "__main__":
    app()

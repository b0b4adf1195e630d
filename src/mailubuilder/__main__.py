"""
Mailu Builder - Main entry point

Allows ``python -m mailubuilder`` by delegating to cli.py.
"""

from .cli import cli

if __name__ == "__main__":
    cli()

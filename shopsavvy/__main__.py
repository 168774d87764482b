"""Main entry point when executing shopsavvy as a package.

This allows running the package using python -m shopsavvy.
"""

from shopsavvy.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()

"""ISOGas command-line interface package.

Supports ``python -m isogas.cli`` as an alternative to the ``isogas`` entry point.
"""

from isogas.cli.main import cli, main

__all__ = ["cli", "main"]

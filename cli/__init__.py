"""Command-line client for the roast log service.

The Typer application lives in ``cli.app``; it is not re-exported here so that
``cli.app`` keeps resolving to the module for patching in tests.
"""

__all__: list[str] = []

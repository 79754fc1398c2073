"""Command line interface for the DSA hero tracker.

Submodules:
    main: Typer application and commands
    display: Rich output helpers and JSON payloads

Usage:
    Run the application with:
        dsa-tracker --hero alrik.json shell

    Or from Python:
        from dsa_tracker.cli import app
        app()
"""

from dsa_tracker.cli.main import app


__all__ = ["app"]

"""Entry point for running as `python -m syspass_cli`."""

from syspass_cli.cli import app

if __name__ == "__main__":
    app()

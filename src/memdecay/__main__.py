"""CLI entry point: python -m memdecay."""

from memdecay.cli import app

if __name__ == "__main__":
    app()

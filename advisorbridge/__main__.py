"""Entry point for running advisorbridge as a module: python -m advisorbridge."""

from advisorbridge.cli.commands import app

if __name__ == "__main__":
    app()

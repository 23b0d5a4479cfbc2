"""Allow running as python -m watercurtain."""

from watercurtain.cli.main import cli

if __name__ == "__main__":
    cli()

"""Allow ``python -m spec2bom``."""

from spec2bom.cli import cli

if __name__ == "__main__":
    cli()

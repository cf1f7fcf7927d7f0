"""Allow ``python -m publisher``."""

from publisher.cli import cli

cli()

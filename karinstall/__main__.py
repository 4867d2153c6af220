"""Allow ``python -m karinstall``."""

from karinstall.main import cli

cli()

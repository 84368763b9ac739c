"""retool_cli package."""

__version__ = "0.4.0"

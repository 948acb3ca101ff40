"""Weekly leveraged DCA simulator."""

__version__ = "1.0.0"

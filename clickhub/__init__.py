"""Click tracking services wired through a constructor-injection container."""

__version__ = "0.1.0"

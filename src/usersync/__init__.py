"""Identity provider webhook receiver that keeps a user store in sync."""

__version__ = "1.0.0"

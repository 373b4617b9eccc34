"""Storage, authentication and payload handling for a visual novel editor backend."""

__version__ = "0.1.0"
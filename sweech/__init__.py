"""sweech — switch between AI coding CLI accounts and providers."""

__version__ = "0.1.0"

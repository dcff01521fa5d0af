"""extkit - author, validate, distribute and package prompt-command extensions."""

__version__ = "0.1.0"

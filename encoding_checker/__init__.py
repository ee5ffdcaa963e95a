"""Encoding Checker - detects and validates the character encoding of files in a directory tree."""

__version__ = "0.1.0"

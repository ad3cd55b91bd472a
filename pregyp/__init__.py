"""Publish staged node-pre-gyp binaries to GitHub releases."""

__version__ = "0.3.0"

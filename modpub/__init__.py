"""modpub - release helper for multi-module package publishing."""

__version__ = "0.1.0"

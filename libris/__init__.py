"""libris-identity: account identity and credential lifecycle for the Libris library backend."""

__version__ = "1.0.0"

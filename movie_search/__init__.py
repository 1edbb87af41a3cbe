"""Movie search backend: OMDb title search plus a file-backed favorites list."""

__version__ = "0.1.0"

"""Blog API: post listing, search and CRUD over an async SQL store."""

__version__ = "1.0.0"

"""Import legacy package (billing plan) records into a package store."""

__version__ = "0.1.0"

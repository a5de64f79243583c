"""Balix - rigid-body ballistics, integration and guidance toolkit."""

__version__ = "1.0.0"

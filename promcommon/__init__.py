"""Shared monitoring data model, leveled logging setup, WSGI routing and static file serving."""

__version__ = "0.1.0"
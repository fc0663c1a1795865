"""Sangeet music client: upload, dashboard and library coordinators."""

__version__ = "0.1.0"

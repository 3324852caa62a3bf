"""Digify Attribution Server - FastAPI host for the digify tracker."""

__version__ = "0.1.0"

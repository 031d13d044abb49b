"""Booru Stage: media post ingestion and revision service."""

__version__ = "0.1.0"

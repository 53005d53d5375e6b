"""Performance Tracker API - revenue attribution ingestion and reporting."""

__version__ = "0.1.0"

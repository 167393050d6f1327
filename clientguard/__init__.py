"""Client resilience and security guard."""

__version__ = "0.1.0"

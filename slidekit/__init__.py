"""Model parsing, permission rules, message-bus streams and metrics for meeting services."""

__version__ = "0.1.0"

__all__ = ["bus", "catalog", "metric", "models", "oserror", "permission", "sets", "stream"]
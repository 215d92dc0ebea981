"""Restore workflows built on the storage layer."""

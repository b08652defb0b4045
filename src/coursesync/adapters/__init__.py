"""Adapters for external course catalogs and the HTTP layer they share."""

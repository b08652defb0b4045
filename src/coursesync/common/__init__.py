"""Shared helpers that are independent of providers and the domain."""

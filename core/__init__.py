"""Shared application core: configuration constants, errors and HTTP helpers."""

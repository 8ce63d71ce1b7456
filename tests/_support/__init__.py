"""Shared helpers for tablemodel tests."""

"""Shared helpers for squadlens."""

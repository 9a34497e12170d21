"""Shared helpers for logging and HTTP."""

"""Logging and operational signal helpers."""

"""Shared helpers for scriptconsole."""

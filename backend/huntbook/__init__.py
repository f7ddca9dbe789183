"""Hunting ranch booking backend."""

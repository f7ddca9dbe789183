"""Helpers for masking customer contact details in logs."""

from __future__ import annotations

from typing import Any


def mask_email(value: Any) -> str | None:
    # Contact data is opaque, so anything that is not a string is dropped.
    if not isinstance(value, str):
        return None
    if "@" not in value:
        return value or None
    local, _, domain = value.partition("@")
    if not local:
        return "***@" + domain
    return f"{local[0]}***@{domain}"


__all__ = ["mask_email"]

"""Utility helpers for roamrpc."""

from roamrpc.utils.sanitization import sanitize_url

__all__ = ["sanitize_url"]

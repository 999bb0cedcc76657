"""Utility helpers for jsonproxy."""

from .headers import HOP_BY_HOP_HEADERS, filter_response_headers, merge_raw_headers


__all__ = ["HOP_BY_HOP_HEADERS", "filter_response_headers", "merge_raw_headers"]

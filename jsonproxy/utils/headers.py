"""Header helpers for relaying upstream responses."""

from collections.abc import Iterable


# Hop-by-hop headers are owned by the server connection, not the payload
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}


def filter_response_headers(
    raw_headers: Iterable[tuple[bytes, bytes]],
) -> list[tuple[bytes, bytes]]:
    """Drop hop-by-hop headers from raw upstream headers, keeping order and repeats."""
    return [
        (name.lower(), value)
        for name, value in raw_headers
        if name.decode("latin-1").lower() not in HOP_BY_HOP_HEADERS
    ]


def merge_raw_headers(
    preset: Iterable[tuple[bytes, bytes]],
    upstream: Iterable[tuple[bytes, bytes]],
) -> list[tuple[bytes, bytes]]:
    """Combine headers set locally with upstream headers.

    Upstream headers win on name collisions; repeated upstream headers such as
    ``set-cookie`` are all kept.
    """
    upstream = list(upstream)
    upstream_names = {name.lower() for name, _ in upstream}
    merged = [
        (name.lower(), value)
        for name, value in preset
        if name.lower() not in upstream_names
    ]
    merged.extend(upstream)
    return merged

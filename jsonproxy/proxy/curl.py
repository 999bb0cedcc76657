"""Shell-reproducible rendering of an outbound request for debugging."""

import json
from urllib.parse import quote

from jsonproxy.proxy.request import ForwardDescriptor


CURL_HEADER = "x-curl-command"

# None of the backends need these to reproduce a call
CURL_OMIT_HEADERS = frozenset(
    {
        "content-security-policy",
        "x-dns-prefetch-control",
        "x-frame-options",
        "referer",
        "accept-language",
        "accept-encoding",
        "pragma",
        "cache-control",
        "host",
        "connection",
    }
)

# Servers commonly reject request headers totalling more than 8KB, so the
# generated header is conservatively kept to 4000 characters.
MAX_HEADER_SIZE = 4000
TRUNCATED = "...<truncated due to header size>"

# Characters left as-is by the web platform's encodeURI()
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def build_curl_command(descriptor: ForwardDescriptor) -> str:
    """Render ``descriptor`` as the arguments of a curl invocation."""
    header_flags = "".join(
        f"-H '{key}: {value}' "
        for key, value in descriptor.headers.items()
        if key not in CURL_OMIT_HEADERS
    )
    body = json.dumps(descriptor.body or {}, ensure_ascii=False)
    return f"'{descriptor.url}' -X {descriptor.method} {header_flags} -d {body}"


def encode_uri(value: str) -> str:
    """Percent-encode ``value`` so it is valid as a single header value."""
    return quote(value, safe=_URI_SAFE)


def cap_header_value(value: str, limit: int = MAX_HEADER_SIZE) -> str:
    """Truncate ``value`` to ``limit`` characters, ending with a marker when cut."""
    if len(value) <= limit:
        return value
    return f"{value[: limit - len(TRUNCATED)]}{TRUNCATED}"


def curl_header_value(descriptor: ForwardDescriptor) -> str:
    """Encoded and size-capped curl command for the response header."""
    return cap_header_value(encode_uri(build_curl_command(descriptor)))

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

# A scheme starts with a letter; "host:8080/x" is a host and port, not a scheme.
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:(?!\d+(?:[/?#]|$))")


def base_url(url: Optional[str]) -> Optional[str]:
    """Cut ``url`` right before the first "/" following "//"."""
    if url is None:
        return None
    i = url.find("//")
    if i == -1:
        return url
    j = url.find("/", i + 2)
    return url if j == -1 else url[:j]


def origin(url: Optional[str]) -> Tuple[str, str]:
    if not url:
        return ("", "")
    try:
        p = urlparse(url)
    except ValueError:
        return ("", base_url(url) or "")
    return (p.scheme.lower(), p.netloc.lower())


def same_origin(a: Optional[str], b: Optional[str]) -> bool:
    return origin(a) == origin(b)


def has_scheme(url: str) -> bool:
    return bool(_SCHEME_RE.match(url))


def export_href(url: str) -> str:
    # Bare host names get http://; absolute file paths stay as they are.
    if has_scheme(url) or url.startswith("/"):
        return url
    return "http://" + url

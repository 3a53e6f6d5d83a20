"""Allowed-source matching, content-type checks and proxy selection for loaders."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator
from urllib.parse import urlsplit


class _BadPattern(ValueError):
    pass


def _class_regex(chars: Iterator[str]) -> str:
    body: list[str] = []
    ch = next(chars, None)
    negate = ch == "^"
    if negate:
        ch = next(chars, None)
    while True:
        if ch is None:
            raise _BadPattern
        if ch == "]" and body:
            break
        if ch in "-]":
            raise _BadPattern
        if ch == "\\":
            ch = next(chars, None)
            if ch is None:
                raise _BadPattern
        low = ch
        ch = next(chars, None)
        if ch == "-":
            high = next(chars, None)
            if high is None or high in "-]":
                raise _BadPattern
            if high == "\\":
                high = next(chars, None)
                if high is None:
                    raise _BadPattern
            body.append(f"{re.escape(low)}-{re.escape(high)}")
            ch = next(chars, None)
        else:
            body.append(re.escape(low))
    return "[" + ("^" if negate else "") + "".join(body) + "]"


def _glob_regex(pattern: str) -> str:
    out: list[str] = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise _BadPattern
            out.append(re.escape(escaped))
        elif ch == "[":
            out.append(_class_regex(chars))
        else:
            out.append(re.escape(ch))
    return "".join(out)


def _path_match(pattern: str, name: str) -> bool:
    try:
        regex = _glob_regex(pattern)
    except _BadPattern:
        return False
    return re.fullmatch(regex, name, re.DOTALL) is not None


def _host(url: str) -> str:
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ""
    return netloc.rpartition("@")[2]


@dataclass(frozen=True)
class AllowedSource:
    """A source a loader may fetch from: a host glob or a full-URL regex."""

    host_pattern: str = ""
    url_regex: re.Pattern[str] | None = None

    def match(self, url: str) -> bool:
        """Return True if ``url`` is covered by this source."""
        if self.url_regex is not None:
            return self.url_regex.search(url) is not None
        return _path_match(self.host_pattern, _host(url))


def regexp_allowed_source(pattern: str) -> AllowedSource:
    """Build a source from a URL regex; raises ``re.error`` if it is invalid."""
    return AllowedSource(url_regex=re.compile(pattern))


def host_pattern_allowed_source(pattern: str) -> AllowedSource:
    """Build a source from a host glob such as ``*.example.com``."""
    return AllowedSource(host_pattern=pattern)


def is_url_allowed(url: str, sources: Iterable[AllowedSource]) -> bool:
    """Return True if no sources are configured or any of them matches."""
    sources = list(sources)
    if not sources:
        return True
    return any(source.match(url) for source in sources)


def parse_content_type(content_type: str) -> str:
    """Return the lower-cased media type without parameters."""
    return content_type.split(";", 1)[0].strip().lower()


def validate_content_type(content_type: str, accepts: Iterable[str]) -> bool:
    """Return True if ``content_type`` matches one of the accepted globs."""
    accepts = list(accepts)
    if not accepts:
        return True
    media_type = parse_content_type(content_type)
    return any(_path_match(accept, media_type) for accept in accepts)


def random_proxy_func(proxy_urls: str, hosts: str) -> Callable[[str], str | None]:
    """Return a function picking a random proxy for URLs of the allowed hosts."""
    urls = [u.strip() for u in proxy_urls.split(",") if u.strip()]
    sources = [
        host_pattern_allowed_source(h.strip()) for h in hosts.split(",") if h.strip()
    ]

    def proxy_for(url: str) -> str | None:
        if not urls or not is_url_allowed(url, sources):
            return None
        return random.choice(urls)

    return proxy_for
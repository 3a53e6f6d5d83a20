"""Normalisation of image keys into file-path friendly strings."""

from __future__ import annotations

from typing import Callable

_UNRESERVED = frozenset(b"-_.~")
_BREAKS = {ord(ch): None for ch in "\r\n\v\f\u0085\u2028\u2029"}


class SafeChars:
    """Decides which bytes of a storage path must be percent-escaped."""

    def __init__(self, chars: str = "") -> None:
        self._safe = frozenset(ord(ch) & 0xFF for ch in chars)

    def should_escape(self, c: int) -> bool:
        """Return True if the byte ``c`` has to be escaped."""
        if (
            ord("a") <= c <= ord("z")
            or ord("A") <= c <= ord("Z")
            or ord("0") <= c <= ord("9")
        ):
            return False
        if c == ord("/") or c in _UNRESERVED:
            return False
        return c not in self._safe


_DEFAULT_SAFE_CHARS = SafeChars()


def escape(s: str, should_escape: Callable[[int], bool]) -> str:
    """Percent-escape the UTF-8 bytes of ``s``; escaped spaces become ``+``."""
    out = bytearray()
    for byte in s.encode("utf-8", "surrogateescape"):
        if not should_escape(byte):
            out.append(byte)
        elif byte == 0x20:
            out += b"+"
        else:
            out += b"%%%02X" % byte
    return out.decode("utf-8", "surrogateescape")


def clean_breaks(text: str) -> str:
    """Remove line and page breaks from ``text``."""
    return text.translate(_BREAKS)


def _clean_path(path: str) -> str:
    rooted = path.startswith("/")
    stack: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if stack and stack[-1] != "..":
                stack.pop()
            elif not rooted:
                stack.append("..")
            continue
        stack.append(segment)
    cleaned = "/".join(stack)
    if rooted:
        return "/" + cleaned
    return cleaned or "."


def normalize(image: str, safe_chars: SafeChars | None = None) -> str:
    """Clean and escape an image key so it can be used as a storage path."""
    image = _clean_path(image)
    image = clean_breaks(image)
    image = image.strip("/")
    chars = safe_chars if safe_chars is not None else _DEFAULT_SAFE_CHARS
    return escape(image, chars.should_escape)
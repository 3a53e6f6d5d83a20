"""HMAC signatures for image endpoint paths."""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Any


class HMACSigner:
    """Signs paths with an HMAC, optionally truncating the signature."""

    def __init__(self, secret: str, digestmod: Any = hashlib.sha1, truncate: int = 0) -> None:
        self._secret = secret.encode()
        self._digestmod = digestmod
        self._truncate = truncate

    def sign(self, path: str) -> str:
        """Return the URL-safe base64 signature of ``path``."""
        digest = hmac.new(self._secret, path.encode("utf-8"), self._digestmod).digest()
        signature = base64.urlsafe_b64encode(digest).decode("ascii")
        if 0 < self._truncate < len(signature):
            return signature[: self._truncate]
        return signature


def default_signer(secret: str) -> HMACSigner:
    """Return the default SHA1 signer for ``secret``."""
    return HMACSigner(secret)
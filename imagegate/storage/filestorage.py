"""Image storage on the local file system."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from ..imagepath.normalize import SafeChars, normalize

_DOT_FILE = re.compile(r"/\.")


@dataclass(frozen=True)
class Stat:
    """Size and modification time of a stored object."""

    size: int
    modified_time: datetime
    etag: str = ""


class StorageError(Exception):
    """Base class of storage errors."""


class InvalidPathError(StorageError):
    """The image key is not allowed in this storage."""

    def __init__(self, image: str = "") -> None:
        super().__init__(f"invalid: {image}" if image else "invalid")


class NotFoundError(StorageError):
    """The image does not exist in this storage."""

    def __init__(self, image: str = "") -> None:
        super().__init__(f"not found: {image}" if image else "not found")


class ExpiredError(StorageError):
    """The stored image is older than the configured expiration."""

    def __init__(self, image: str = "") -> None:
        super().__init__(f"expired: {image}" if image else "expired")


def _normalize_prefix(prefix: str) -> str:
    if not prefix:
        return "/"
    prefix = "/" + prefix.strip("/")
    return prefix if prefix == "/" else prefix + "/"


def _parse_permission(perm: str, default: int) -> int:
    if not perm:
        return default
    text = perm.replace("_", "")
    try:
        if len(text) > 1 and text[0] == "0" and text[1].isdigit():
            value = int(text, 8)
        else:
            value = int(text, 0)
    except ValueError:
        return default
    return value if 0 <= value < 1 << 32 else default


class FileStorage:
    """Stores images as files under a base directory."""

    def __init__(
        self,
        base_dir: str | os.PathLike[str],
        *,
        path_prefix: str = "",
        blacklists: Iterable[re.Pattern[str] | str | None] = (),
        mkdir_permission: str = "",
        write_permission: str = "",
        save_err_if_exists: bool = False,
        safe_chars: str = "",
        expiration: timedelta | float | None = None,
    ) -> None:
        self.base_dir = os.fspath(base_dir)
        self.path_prefix = _normalize_prefix(path_prefix)
        self.blacklists = [_DOT_FILE] + [
            re.compile(p) if isinstance(p, str) else p for p in blacklists if p is not None
        ]
        self.mkdir_permission = _parse_permission(mkdir_permission, 0o755)
        self.write_permission = _parse_permission(write_permission, 0o666)
        self.save_err_if_exists = save_err_if_exists
        if expiration is not None and not isinstance(expiration, timedelta):
            expiration = timedelta(seconds=expiration)
        self.expiration = expiration if expiration and expiration > timedelta(0) else None
        self._safe_chars = SafeChars(safe_chars)

    def path(self, image: str) -> str | None:
        """Return the file path for ``image``, or None if it is not allowed."""
        key = "/" + normalize(image, self._safe_chars)
        if any(blacklist.search(key) for blacklist in self.blacklists):
            return None
        if not key.startswith(self.path_prefix):
            return None
        rest = key[len(self.path_prefix):].lstrip("/")
        joined = os.path.join(self.base_dir, rest) if self.base_dir else rest
        return os.path.normpath(joined) if joined else ""

    def _require_path(self, image: str) -> str:
        full = self.path(image)
        if full is None:
            raise InvalidPathError(image)
        return full

    def get(self, image: str) -> bytes:
        """Return the stored bytes of ``image``."""
        full = self._require_path(image)
        try:
            st = os.stat(full)
        except FileNotFoundError:
            raise NotFoundError(image) from None
        if self.expiration is not None and (
            time.time() - st.st_mtime > self.expiration.total_seconds()
        ):
            raise ExpiredError(image)
        try:
            with open(full, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(image) from None

    def put(self, image: str, data: bytes) -> None:
        """Write ``data`` as ``image``; fails if it exists when so configured."""
        full = self._require_path(image)
        directory = os.path.dirname(full)
        if directory:
            os.makedirs(directory, mode=self.mkdir_permission, exist_ok=True)
        flags = os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0)
        flags |= os.O_EXCL if self.save_err_if_exists else os.O_TRUNC
        fd = os.open(full, flags, self.write_permission)
        with os.fdopen(fd, "wb") as f:
            f.write(data)

    def delete(self, image: str) -> None:
        """Remove ``image`` from the storage."""
        os.remove(self._require_path(image))

    def stat(self, image: str) -> Stat:
        """Return size and modification time of ``image``."""
        full = self._require_path(image)
        try:
            st = os.stat(full)
        except FileNotFoundError:
            raise NotFoundError(image) from None
        return Stat(
            size=st.st_size,
            modified_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )
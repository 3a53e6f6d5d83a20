"""Storage keys derived from image names and endpoint parameters."""

from __future__ import annotations

import hashlib

from .generate import generate_path
from .params import Params


def _sha1_hex(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def _hex_digest_path(path: str) -> str:
    digest = _sha1_hex(path)
    return f"{digest[:2]}/{digest[2:4]}/{digest[4:]}"


def _result_path(params: Params) -> str:
    return params.path or generate_path(params)


def _with_suffix(params: Params, suffix: str) -> str:
    image = params.image
    dot = image.rfind(".")
    slash = image.rfind("/")
    if dot > -1 and slash < dot:
        ext = image[dot:]
        if params.meta:
            ext = ".json"
        else:
            for flt in params.filters:
                if flt.name == "format":
                    ext = "." + flt.args
        return image[:dot] + suffix + ext
    return image + suffix


def digest_storage_hasher(image: str) -> str:
    """Return a ``ab/cd/...`` SHA1 digest key for an image name."""
    return _hex_digest_path(image)


def digest_result_storage_hasher(params: Params) -> str:
    """Return a ``ab/cd/...`` SHA1 digest key for an endpoint path."""
    return _hex_digest_path(_result_path(params))


def suffix_result_storage_hasher(params: Params) -> str:
    """Return the image name with a digest suffix before its extension."""
    suffix = "." + _sha1_hex(_result_path(params))[:20]
    return _with_suffix(params, suffix)


def size_suffix_result_storage_hasher(params: Params) -> str:
    """Return the image name with digest and size suffix before its extension."""
    suffix = "." + _sha1_hex(_result_path(params))[:20]
    if params.width != 0 or params.height != 0:
        suffix += f"_{params.width}x{params.height}"
    return _with_suffix(params, suffix)
"""Generation of image endpoint paths from parameters."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol
from urllib.parse import quote_plus

from .params import (
    H_ALIGN_LEFT,
    H_ALIGN_RIGHT,
    TRIM_BY_BOTTOM_RIGHT,
    TRIM_BY_TOP_LEFT,
    V_ALIGN_BOTTOM,
    V_ALIGN_TOP,
    Params,
)

_KEYWORD_PREFIXES = (
    "trim/", "meta/", "fit-in/", "stretch/", "top/", "left/",
    "right/", "bottom/", "center/", "smart/",
)


class _Signer(Protocol):
    def sign(self, path: str) -> str: ...


def _format_float(value: float) -> str:
    return format(Decimal(repr(float(value))).normalize(), "f")


def generate_path(params: Params) -> str:
    """Build the endpoint path, without signature, for ``params``."""
    p = params
    parts: list[str] = []
    if p.meta:
        parts.append("meta")
    if p.trim or p.trim_by in (TRIM_BY_TOP_LEFT, TRIM_BY_BOTTOM_RIGHT):
        trims = ["trim"]
        if p.trim_by == TRIM_BY_BOTTOM_RIGHT:
            trims.append(TRIM_BY_BOTTOM_RIGHT)
        if p.trim_tolerance > 0:
            trims.append(str(p.trim_tolerance))
        parts.append(":".join(trims))
    if p.crop_top > 0 or p.crop_right > 0 or p.crop_left > 0 or p.crop_bottom > 0:
        parts.append(
            f"{_format_float(p.crop_left)}x{_format_float(p.crop_top)}:"
            f"{_format_float(p.crop_right)}x{_format_float(p.crop_bottom)}"
        )
    if p.fit_in:
        parts.append("fit-in")
    if p.stretch:
        parts.append("stretch")
    if (p.h_flip or p.width != 0 or p.v_flip or p.height != 0
            or p.padding_left > 0 or p.padding_top > 0):
        width, height, h_flip, v_flip = p.width, p.height, p.h_flip, p.v_flip
        if width < 0:
            h_flip, width = not h_flip, -width
        if height < 0:
            v_flip, height = not v_flip, -height
        parts.append(f"{'-' if h_flip else ''}{width}x{'-' if v_flip else ''}{height}")
    if p.padding_left > 0 or p.padding_top > 0 or p.padding_right > 0 or p.padding_bottom > 0:
        if p.padding_left == p.padding_right and p.padding_top == p.padding_bottom:
            parts.append(f"{p.padding_left}x{p.padding_top}")
        else:
            parts.append(
                f"{p.padding_left}x{p.padding_top}:{p.padding_right}x{p.padding_bottom}"
            )
    if p.h_align in (H_ALIGN_LEFT, H_ALIGN_RIGHT):
        parts.append(p.h_align)
    if p.v_align in (V_ALIGN_TOP, V_ALIGN_BOTTOM):
        parts.append(p.v_align)
    if p.smart:
        parts.append("smart")
    if p.filters:
        parts.append("filters:" + ":".join(f"{f.name}({f.args})" for f in p.filters))
    image = p.image
    if "?" in image or image.startswith(_KEYWORD_PREFIXES):
        image = quote_plus(image, safe="")
    parts.append(image)
    return "/".join(parts)


def generate_unsafe(params: Params) -> str:
    """Build an unsigned ``unsafe/`` endpoint for ``params``."""
    return generate(params, None)


def generate(params: Params, signer: _Signer | None = None) -> str:
    """Build an endpoint for ``params``, signed when a signer is given."""
    path = generate_path(params)
    if signer is not None:
        return f"{signer.sign(path)}/{path}"
    return "unsafe/" + path
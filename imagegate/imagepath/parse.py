"""Parsing of image endpoint paths into parameters."""

from __future__ import annotations

import dataclasses
import re
from typing import Any
from urllib.parse import unquote_plus

from .normalize import clean_breaks
from .params import TRIM_BY_TOP_LEFT, Filter, Params

_PATH_RE = re.compile(
    r"/*"
    r"(?P<params>params/)?"
    r"(?:(?P<unsafe>unsafe/)|(?P<hash>[A-Za-z0-9_=-]{8,})/)?"
    r"(?P<path>.+)?",
    re.ASCII,
)

_PARAMS_RE = re.compile(
    r"/*"
    r"(?P<meta>meta/)?"
    r"(?P<trim>trim(?::(?P<trim_by>top-left|bottom-right))?(?::(?P<trim_tolerance>\d+))?/)?"
    r"(?P<crop>(?P<crop_left>(?:0?\.)?\d+)x(?P<crop_top>(?:0?\.)?\d+)"
    r":(?P<crop_right>(?:[0-1]?\.)?\d+)x(?P<crop_bottom>(?:[0-1]?\.)?\d+)/)?"
    r"(?P<fit_in>fit-in/)?"
    r"(?P<stretch>stretch/)?"
    r"(?P<dimensions>(?P<h_flip>-?)(?P<width>\d*)x(?P<v_flip>-?)(?P<height>\d*)/)?"
    r"(?P<padding>(?P<padding_left>\d+)x(?P<padding_top>\d+)"
    r"(?::(?P<padding_right>\d+)x(?P<padding_bottom>\d+))?/)?"
    r"(?:(?P<h_align>left|right|center)/)?"
    r"(?:(?P<v_align>top|bottom|middle)/)?"
    r"(?P<smart>smart/)?"
    r"(?P<rest>.+)?",
    re.ASCII,
)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _to_int(text: str | None) -> int:
    return int(text) if text else 0


def _query_unescape(text: str) -> str:
    if _BAD_ESCAPE.search(text):
        return text
    return unquote_plus(text)


def parse(path: str) -> Params:
    """Parse an endpoint path into fresh :class:`Params`."""
    return apply(Params(), path)


def apply(params: Params, path: str) -> Params:
    """Parse an endpoint path on top of existing ``params``."""
    updates: dict[str, Any] = {}
    match = _PATH_RE.match(clean_breaks(path))
    if match is None:
        return params
    if match["params"]:
        updates["params"] = True
    if match["unsafe"]:
        updates["unsafe"] = True
    elif len(match["hash"] or "") > 8:
        updates["hash"] = match["hash"]
    rest = match["path"] or ""
    updates["path"] = rest

    m = _PARAMS_RE.match(rest)
    if m is None:
        return dataclasses.replace(params, **updates)
    if m["meta"]:
        updates["meta"] = True
    if m["trim"]:
        updates["trim"] = True
        updates["trim_by"] = m["trim_by"] or TRIM_BY_TOP_LEFT
        updates["trim_tolerance"] = _to_int(m["trim_tolerance"])
    if m["crop"]:
        updates["crop_left"] = float(m["crop_left"])
        updates["crop_top"] = float(m["crop_top"])
        updates["crop_right"] = float(m["crop_right"])
        updates["crop_bottom"] = float(m["crop_bottom"])
    if m["fit_in"]:
        updates["fit_in"] = True
    if m["stretch"]:
        updates["stretch"] = True
    if m["dimensions"]:
        updates["h_flip"] = bool(m["h_flip"])
        updates["width"] = _to_int(m["width"])
        updates["v_flip"] = bool(m["v_flip"])
        updates["height"] = _to_int(m["height"])
    if m["padding"]:
        left = _to_int(m["padding_left"])
        top = _to_int(m["padding_top"])
        updates["padding_left"] = left
        updates["padding_top"] = top
        if m["padding_right"] is not None:
            updates["padding_right"] = _to_int(m["padding_right"])
            updates["padding_bottom"] = _to_int(m["padding_bottom"])
        else:
            updates["padding_right"] = left
            updates["padding_bottom"] = top
    if m["h_align"]:
        updates["h_align"] = m["h_align"]
    if m["v_align"]:
        updates["v_align"] = m["v_align"]
    if m["smart"]:
        updates["smart"] = True
    if m["rest"]:
        filters, image = parse_filters(m["rest"])
        updates["filters"] = (*params.filters, *filters)
        if image:
            updates["image"] = _query_unescape(image)
    return dataclasses.replace(params, **updates)


def parse_filters(text: str) -> tuple[tuple[Filter, ...], str]:
    """Split ``filters:a(x):b(y)/image`` into its filters and image part."""
    if not text.startswith("filters:"):
        return (), text
    text = text[len("filters:"):]
    filters: list[Filter] = []
    buf: list[str] = []
    depth = 0
    name = args = path = ""
    for idx, ch in enumerate(text):
        if ch == "(":
            if depth == 0:
                name = "".join(buf)
                buf.clear()
            else:
                buf.append(ch)
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                args = "".join(buf)
                buf.clear()
            else:
                buf.append(ch)
        elif ch == "/":
            if depth == 0:
                path = text[idx + 1:]
            else:
                buf.append(ch)
        elif ch == ":":
            if depth == 0:
                filters.append(Filter(name, args))
                name = args = ""
                buf.clear()
            else:
                buf.append(ch)
        else:
            buf.append(ch)
        if path:
            break
    if name:
        filters.append(Filter(name, args))
    return tuple(filters), path
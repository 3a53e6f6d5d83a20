"""Image endpoint parameters."""

from __future__ import annotations

from dataclasses import dataclass

TRIM_BY_TOP_LEFT = "top-left"
TRIM_BY_BOTTOM_RIGHT = "bottom-right"
H_ALIGN_LEFT = "left"
H_ALIGN_RIGHT = "right"
V_ALIGN_TOP = "top"
V_ALIGN_BOTTOM = "bottom"


@dataclass(frozen=True)
class Filter:
    """A single endpoint filter, such as ``format(webp)``."""

    name: str = ""
    args: str = ""


@dataclass(frozen=True)
class Params:
    """Parameters of an image endpoint."""

    params: bool = False
    path: str = ""
    image: str = ""
    unsafe: bool = False
    hash: str = ""
    meta: bool = False
    trim: bool = False
    trim_by: str = ""
    trim_tolerance: int = 0
    crop_left: float = 0.0
    crop_top: float = 0.0
    crop_right: float = 0.0
    crop_bottom: float = 0.0
    fit_in: bool = False
    stretch: bool = False
    width: int = 0
    height: int = 0
    padding_left: int = 0
    padding_top: int = 0
    padding_right: int = 0
    padding_bottom: int = 0
    h_flip: bool = False
    v_flip: bool = False
    h_align: str = ""
    v_align: str = ""
    smart: bool = False
    filters: tuple[Filter, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))
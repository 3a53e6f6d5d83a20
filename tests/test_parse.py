import hashlib

import pytest

from imagegate.imagepath.params import TRIM_BY_BOTTOM_RIGHT, Filter, Params
from imagegate.imagepath.parse import apply, parse, parse_filters
from imagegate.imagepath.signer import HMACSigner, default_signer

WATERMARK_ARGS = "img.example.com/es/ge/f/original/2011/03/29/photo_60.jpg,0,0,0"
NESTED_ARGS = (
    "img.example.com/filters:label(abc):watermark(aaa.com/fit-in/filters:aaa(bbb))"
    "/aaa.jpg,0,0,0"
)
SHARPEN = "https://foobar/en/latest/_images/man_before_sharpen.png"

CASES = [
    (
        "non url image",
        "meta/trim/10x11:12x13/fit-in/-300x-200/left/top/smart/filters:some_filter()/img",
        Params(
            path="meta/trim/10x11:12x13/fit-in/-300x-200/left/top/smart/filters:some_filter()/img",
            image="img", trim=True, trim_by="top-left",
            crop_left=10, crop_top=11, crop_right=12, crop_bottom=13,
            width=300, height=200, meta=True, h_flip=True, v_flip=True,
            h_align="left", v_align="top", smart=True, fit_in=True,
            filters=[Filter("some_filter")],
        ),
    ),
    (
        "url image",
        "meta/trim:bottom-right:100/10x11:12x13/fit-in/-300x-200/left/top/smart/"
        "filters:some_filter()/img.example.com/es/ge/f/original/2011/03/29/photo_60.jpg",
        Params(
            path="meta/trim:bottom-right:100/10x11:12x13/fit-in/-300x-200/left/top/smart/"
            "filters:some_filter()/img.example.com/es/ge/f/original/2011/03/29/photo_60.jpg",
            image="img.example.com/es/ge/f/original/2011/03/29/photo_60.jpg",
            trim=True, trim_by=TRIM_BY_BOTTOM_RIGHT, trim_tolerance=100,
            crop_left=10, crop_top=11, crop_right=12, crop_bottom=13,
            width=300, height=200, meta=True, h_flip=True, v_flip=True,
            h_align="left", v_align="top", smart=True, fit_in=True,
            filters=[Filter("some_filter")],
        ),
    ),
    (
        "url in filter",
        f"filters:watermark({WATERMARK_ARGS})/img",
        Params(
            path=f"filters:watermark({WATERMARK_ARGS})/img",
            image="img",
            filters=[Filter("watermark", WATERMARK_ARGS)],
        ),
    ),
    (
        "multiple filters",
        f"filters:watermark({WATERMARK_ARGS}):brightness(-50):grayscale()/img",
        Params(
            path=f"filters:watermark({WATERMARK_ARGS}):brightness(-50):grayscale()/img",
            image="img",
            filters=[
                Filter("watermark", WATERMARK_ARGS),
                Filter("brightness", "-50"),
                Filter("grayscale"),
            ],
        ),
    ),
    (
        "nested filters",
        f"filters:watermark({NESTED_ARGS}):brightness(-50):grayscale()/img",
        Params(
            path=f"filters:watermark({NESTED_ARGS}):brightness(-50):grayscale()/img",
            image="img",
            filters=[
                Filter("watermark", NESTED_ARGS),
                Filter("brightness", "-50"),
                Filter("grayscale"),
            ],
        ),
    ),
    (
        "filters with unicode",
        "filters:label(哈哈,1,2,3):brightness(-50):grayscale()/img",
        Params(
            path="filters:label(哈哈,1,2,3):brightness(-50):grayscale()/img",
            image="img",
            filters=[
                Filter("label", "哈哈,1,2,3"),
                Filter("brightness", "-50"),
                Filter("grayscale"),
            ],
        ),
    ),
    (
        "no params",
        f"unsafe/{SHARPEN}",
        Params(path=SHARPEN, image=SHARPEN, unsafe=True),
    ),
    (
        "contains query",
        "unsafe/https%3A%2F%2Ffoobar%2Fen%2Flatest%2F_images%2Fman_before_sharpen.png%3Ffoo%3Dbar",
        Params(
            path="https%3A%2F%2Ffoobar%2Fen%2Flatest%2F_images%2Fman_before_sharpen.png%3Ffoo%3Dbar",
            image=SHARPEN + "?foo=bar",
            unsafe=True,
        ),
    ),
    *[
        (
            f"image contains keyword {kw}",
            f"unsafe/{kw}%2Fimg",
            Params(path=f"{kw}%2Fimg", image=f"{kw}/img", unsafe=True),
        )
        for kw in ("trim", "meta", "center", "smart", "fit-in", "stretch",
                   "top", "left", "right", "bottom")
    ],
    (
        "padding without dimensions",
        f"unsafe/fit-in/0x0/5x6:7x8/{SHARPEN}",
        Params(
            path=f"fit-in/0x0/5x6:7x8/{SHARPEN}",
            image=SHARPEN, unsafe=True, fit_in=True,
            padding_left=5, padding_top=6, padding_right=7, padding_bottom=8,
        ),
    ),
    (
        "url in filters",
        "unsafe/stretch/500x350/filters:watermark(http://example.org/static/img/beach.jpg,"
        "100,100,50)/http://example.org/static/img/beach.jpg",
        Params(
            path="stretch/500x350/filters:watermark(http://example.org/static/img/beach.jpg,"
            "100,100,50)/http://example.org/static/img/beach.jpg",
            image="http://example.org/static/img/beach.jpg",
            width=500, height=350, unsafe=True, stretch=True,
            filters=[Filter("watermark", "http://example.org/static/img/beach.jpg,100,100,50")],
        ),
    ),
    (
        "non url image with hash",
        "VTAq7YIRbEXgtwAcsTMhAjvBuT8=/meta/10x11:12x13/fit-in/-300x-200/5x6/left/top/smart/"
        "filters:some_filter()/img",
        Params(
            path="meta/10x11:12x13/fit-in/-300x-200/5x6/left/top/smart/filters:some_filter()/img",
            hash="VTAq7YIRbEXgtwAcsTMhAjvBuT8=", image="img",
            crop_left=10, crop_top=11, crop_right=12, crop_bottom=13,
            width=300, height=200, meta=True, h_flip=True, v_flip=True,
            h_align="left", v_align="top", smart=True, fit_in=True,
            padding_left=5, padding_top=6, padding_right=5, padding_bottom=6,
            filters=[Filter("some_filter")],
        ),
    ),
    (
        "non url image with hash and custom signer",
        "XBCO7esuLsNQuSF2v9ie36pESRGx2rzLjhUxXWnV/meta/10x11:12x13/fit-in/-300x-200/5x6/"
        "left/top/smart/filters:some_filter()/img",
        Params(
            path="meta/10x11:12x13/fit-in/-300x-200/5x6/left/top/smart/filters:some_filter()/img",
            hash="XBCO7esuLsNQuSF2v9ie36pESRGx2rzLjhUxXWnV", image="img",
            crop_left=10, crop_top=11, crop_right=12, crop_bottom=13,
            width=300, height=200, meta=True, h_flip=True, v_flip=True,
            h_align="left", v_align="top", smart=True, fit_in=True,
            padding_left=5, padding_top=6, padding_right=5, padding_bottom=6,
            filters=[Filter("some_filter")],
        ),
    ),
    (
        "non url image with crop by percentage",
        "meta/trim/0.2x0.15:0.45x0.67/fit-in/-300x-200/left/top/smart/filters:some_filter()/img",
        Params(
            path="meta/trim/0.2x0.15:0.45x0.67/fit-in/-300x-200/left/top/smart/"
            "filters:some_filter()/img",
            image="img", trim=True, trim_by="top-left",
            crop_left=0.2, crop_top=0.15, crop_right=0.45, crop_bottom=0.67,
            width=300, height=200, meta=True, h_flip=True, v_flip=True,
            h_align="left", v_align="top", smart=True, fit_in=True,
            filters=[Filter("some_filter")],
        ),
    ),
]


@pytest.mark.parametrize("uri,expected", [c[1:] for c in CASES], ids=[c[0] for c in CASES])
def test_parse(uri, expected):
    assert parse(uri) == expected


@pytest.mark.parametrize(
    "uri,signer",
    [
        (CASES[-3][1], default_signer("1234")),
        (CASES[-2][1], HMACSigner("1234", hashlib.sha256, 40)),
    ],
)
def test_parsed_hash_matches_signature(uri, signer):
    params = parse(uri)
    assert signer.sign(params.path) == params.hash


def test_hash_of_eight_chars_is_dropped():
    params = parse("abcdefgh/img")
    assert params.hash == ""
    assert params.path == "img"
    assert params.image == "img"


def test_params_prefix():
    params = parse("params/unsafe/100x0/img.jpg")
    assert params.params is True
    assert params.unsafe is True
    assert params.width == 100
    assert params.image == "img.jpg"


def test_breaks_are_removed():
    assert parse("unsafe/fo\no.jpg").image == "foo.jpg"


def test_image_query_unescape():
    assert parse("unsafe/a+b").image == "a b"
    assert parse("unsafe/a%zz").image == "a%zz"


def test_apply_appends_filters():
    base = Params(filters=[Filter("a", "1")])
    result = apply(base, "filters:b(2)/img")
    assert result.filters == (Filter("a", "1"), Filter("b", "2"))
    assert result.image == "img"


FILTERS = (
    Filter("watermark", NESTED_ARGS),
    Filter("brightness", "-50"),
    Filter("grayscale", ""),
)


def test_parse_filters_with_image():
    filters, img = parse_filters(
        f"filters:watermark({NESTED_ARGS}):brightness(-50):grayscale()/some/example/img"
    )
    assert filters == FILTERS
    assert img == "some/example/img"


def test_parse_filters_without_image():
    filters, img = parse_filters(f"filters:watermark({NESTED_ARGS}):brightness(-50):grayscale()")
    assert filters == FILTERS
    assert img == ""


def test_parse_filters_trailing_slash():
    filters, img = parse_filters(f"filters:watermark({NESTED_ARGS}):brightness(-50):grayscale()/")
    assert filters == FILTERS
    assert img == ""


def test_parse_filters_no_filters():
    filters, img = parse_filters("some/example/img")
    assert filters == ()
    assert img == "some/example/img"


def test_parse_filters_trailing_garbage_after_args():
    filters, img = parse_filters(
        f"filters:watermark({NESTED_ARGS}):format()jpg:brightness(-50):grayscale()"
    )
    assert filters == (
        Filter("watermark", NESTED_ARGS),
        Filter("format", ""),
        Filter("brightness", "-50"),
        Filter("grayscale", ""),
    )
    assert img == ""
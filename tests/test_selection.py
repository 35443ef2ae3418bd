import numpy as np
import pytest

from raw_probe import geometry
from raw_probe.errors import BoundsError, ArgumentError, ErrorKind
from raw_probe.geometry import FilterCode
from raw_probe.image import RawImage

from conftest import make_image


def _by_random_access(selection):
    return [selection.pixel(cx, cy) for cy in range(selection.height) for cx in range(selection.width)]


def test_red_channel_of_4x4(ramp4):
    channel = ramp4.channel(geometry.R)
    assert (channel.width, channel.height) == (2, 2)
    selection = channel.select()
    assert list(selection) == [1, 3, 9, 11]
    assert selection.pixel(1, 1) == 11


def test_green_union_alternates_phase(ramp4):
    channel = ramp4.channel(geometry.G)
    assert (channel.width, channel.height) == (2, 4)
    assert list(channel.select()) == [2, 4, 5, 7, 10, 12, 13, 15]


@pytest.mark.parametrize("pattern", list(geometry.GEOMETRIES.values()), ids=str)
@pytest.mark.parametrize("left_mask,top_mask", [(0, 0), (1, 1), (3, 2)])
def test_iteration_matches_random_access(ramp7x6, pattern, left_mask, top_mask):
    image = make_image(ramp7x6, left_mask, top_mask)
    selection = image.channel(pattern).select()
    assert list(selection) == _by_random_access(selection)


@pytest.mark.parametrize("pattern", list(geometry.GEOMETRIES.values()), ids=str)
def test_sub_selection_at_odd_offset(pattern):
    image = make_image(np.arange(12 * 10).reshape(10, 12))
    selection = image.channel(pattern).select().sub_select(1, 1, 2, 3)
    assert list(selection) == _by_random_access(selection)
    assert selection.pixel_count() == 6


def test_aligned_origin_follows_odd_mask(ramp7x6):
    image = make_image(ramp7x6, left_mask=1, top_mask=1)
    assert (image.bayer_width, image.bayer_height) == (6, 5)
    red = image.channel(geometry.R)
    assert (red.width, red.height) == (3, 2)
    assert red.select().pixel(0, 0) == 8


def test_selection_out_of_channel_bounds(ramp4):
    channel = ramp4.channel(geometry.R)
    with pytest.raises(BoundsError):
        channel.select(1, 0, 2, 1)
    with pytest.raises(BoundsError):
        channel.select(0, 0, 0, 1)


def test_sub_select_checked_against_parent(ramp7x6):
    image = make_image(ramp7x6)
    parent = image.channel(geometry.ALL).select(1, 1, 3, 3)
    with pytest.raises(BoundsError) as err:
        parent.sub_select(2, 0, 2, 1)
    assert err.value.kind is ErrorKind.BOUNDS


def test_random_access_bounds(ramp4):
    selection = ramp4.channel(geometry.B).select()
    assert selection.pixel(1, 1) == 16
    with pytest.raises(IndexError):
        selection.pixel(2, 0)
    with pytest.raises(BoundsError):
        selection.pixel(0, 2)


def test_iterator_increment_semantics(ramp4):
    it = ramp4.channel(geometry.R).select().iterator()
    assert it.current() == 1
    assert it.next_pixel() == 1
    assert it.current() == 3
    assert it.advance() is True
    assert it.current() == 9
    it.next_pixel()
    assert it.advance() is False
    assert not it.has_next()
    with pytest.raises(BoundsError):
        it.current()
    with pytest.raises(BoundsError):
        it.next_pixel()

    it.rewind()
    assert [it.next_pixel() for _ in range(4)] == [1, 3, 9, 11]


def test_loaded_images_are_read_only(ramp4):
    selection = ramp4.channel(geometry.ALL).select()
    with pytest.raises(ArgumentError):
        selection.set_pixel(0, 0, 7)
    with pytest.raises(ArgumentError):
        selection.iterator().set_current(7)


def test_layout_is_writable_and_uncalibrated(ramp4):
    ramp4.black_level[FilterCode.R] = 10.0
    out = ramp4.layout()
    assert out.same_size_as(ramp4)
    assert out.black_level == {}
    it = out.channel(geometry.G1).select().iterator()
    while it:
        it.set_current(42)
        it.advance()
    assert out.as_array()[0].tolist() == [0, 42, 0, 42]
    out.channel(geometry.R).select().set_pixel(1, 1, 7)
    assert out.as_array()[2, 2] == 7
    out.freeze()
    assert not out.writable


def test_from_code():
    assert geometry.from_code('g1') == geometry.G1
    assert geometry.from_code(FilterCode.ALL) == geometry.ALL
    with pytest.raises(ArgumentError):
        geometry.from_code('X')


def test_mismatched_sample_count():
    with pytest.raises(Exception) as err:
        RawImage(np.zeros(5, dtype=np.uint16), 2, 2)
    assert err.value.kind is ErrorKind.SHAPE

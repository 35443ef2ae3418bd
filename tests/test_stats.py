import math

import numpy as np
import pytest

from raw_probe import geometry, stats
from raw_probe.errors import ShapeError, ArgumentError
from raw_probe.stats import Histogram

from conftest import make_image


def test_analyze_small_block():
    image = make_image([[1, 2], [3, 4]])
    result = stats.analyze(image.channel(geometry.ALL).select())
    assert (result.min, result.max) == (1, 4)
    assert result.mean == pytest.approx(2.5)
    assert result.stdev == pytest.approx(math.sqrt(1.25))


def test_analyze_single_pixel():
    image = make_image([[7, 100], [3, 4]])
    result = stats.analyze(image.channel(geometry.R).select())
    assert result == (7, 7, 7.0, 0.0)


def test_analyze_ordering_on_noise():
    rng = np.random.default_rng(5)
    image = make_image(rng.integers(0, 65536, size=(40, 36)))
    for pattern in geometry.GEOMETRIES.values():
        result = stats.analyze(image.channel(pattern).select())
        assert result.min <= result.mean <= result.max
        assert result.stdev >= 0


def test_analyze_constant_full_scale_is_exact():
    image = make_image(np.full((512, 512), 65535))
    result = stats.analyze(image.channel(geometry.ALL).select())
    assert result.mean == 65535.0
    assert result.stdev == 0.0


def test_analyze_matches_numpy_on_green():
    rng = np.random.default_rng(1)
    array = rng.integers(0, 4096, size=(30, 24))
    image = make_image(array)
    green = np.concatenate([array[0::2, 1::2].ravel(), array[1::2, 0::2].ravel()])
    result = stats.analyze(image.channel(geometry.G).select())
    assert result.mean == pytest.approx(green.mean())
    assert result.stdev == pytest.approx(green.std())


def test_subtract_noise_and_symmetry():
    a = make_image([[1, 2], [3, 4]]).channel(geometry.ALL).select()
    b = make_image([[4, 3], [2, 1]]).channel(geometry.ALL).select()
    ab = stats.subtract(a, b)
    ba = stats.subtract(b, a)
    assert ab.stdev == pytest.approx(math.sqrt(2.5))
    assert ab.stdev == pytest.approx(ba.stdev)
    assert ab.a == ba.b
    assert ab.a.mean == pytest.approx(2.5)


def test_subtract_placement_mismatch():
    image = make_image(np.zeros((4, 4)))
    channel = image.channel(geometry.ALL)
    with pytest.raises(ShapeError):
        stats.subtract(channel.select(0, 0, 2, 2), channel.select(1, 0, 2, 2))


def test_histogram_totals_and_mode():
    image = make_image([[5, 5, 9, 9, 7]])
    histogram = stats.build_histogram(image.channel(geometry.ALL).select())
    assert histogram.total == 5
    assert sum(histogram.frequencies.values()) == histogram.total
    assert list(histogram.frequencies) == [5, 7, 9]
    # tie between 5 and 9: the higher value wins
    assert histogram.mode == 9


def test_histogram_compress():
    histogram = Histogram.from_frequencies({5: 2, 7: 1, 9: 2})
    compressed = histogram.compress(4)
    assert compressed.frequencies == {4: 3, 8: 2}
    assert compressed.bucket == 4
    assert compressed.total == histogram.total
    assert compressed.mode == 4
    with pytest.raises(ArgumentError):
        histogram.compress(0)


def test_dynamic_range():
    assert stats.dynamic_range(4096 + 128, 128, 2.0) == pytest.approx(11.0)
    with pytest.raises(ArgumentError):
        stats.dynamic_range(100, 128, 2.0)
    with pytest.raises(ArgumentError):
        stats.dynamic_range(4096, 128, 0)

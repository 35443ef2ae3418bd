import pytest

from raw_probe.errors import ArgumentError, EmptyInputError
from raw_probe.levels import auto_levels, get_level_strategy, highlights, Highlights, Levels
from raw_probe.logger import Logger
from raw_probe.stats import Histogram


def _flat(low, high, count):
    return {value: count for value in range(low, high)}


def test_highlights_single_value():
    assert highlights(Histogram.from_frequencies({500: 7})) == Highlights(500, 7)


def test_highlights_overexposed_plateau():
    frequencies = _flat(100, 1100, 100)
    frequencies[4095] = 4000
    assert highlights(Histogram.from_frequencies(frequencies)) == Highlights(1099, 4000)


def test_highlights_sparse_top_is_not_clipping():
    frequencies = _flat(1000, 1100, 1000)
    frequencies[4095] = 5
    assert highlights(Histogram.from_frequencies(frequencies)) == Highlights(999, 0)


def test_highlights_small_unclipped_area():
    histogram = Histogram.from_frequencies(_flat(1000, 2000, 2))
    assert highlights(histogram) == Highlights(1999, 0)


def test_highlights_empty():
    with pytest.raises(EmptyInputError):
        highlights(Histogram.from_frequencies({}))


def test_auto_levels_plateau():
    frequencies = _flat(100, 200, 10)
    frequencies[200] = 1000
    assert auto_levels(Histogram.from_frequencies(frequencies)) == Levels(128, 200, 1000)


def test_auto_levels_spill_into_lower_bin():
    frequencies = _flat(100, 199, 10)
    frequencies[199] = 400
    frequencies[200] = 1000
    assert auto_levels(Histogram.from_frequencies(frequencies)) == Levels(128, 199, 1400)


def test_auto_levels_ignores_bins_below_a_spike():
    frequencies = _flat(100, 200, 10)
    frequencies.update({200: 1000, 199: 100, 198: 20})
    assert auto_levels(Histogram.from_frequencies(frequencies)) == Levels(128, 200, 1000)


def test_auto_levels_scales_plateau_with_bucket():
    frequencies = _flat(0, 200, 1)
    frequencies.update({196: 40, 200: 1})
    compressed = Histogram.from_frequencies(frequencies).compress(4)
    assert compressed.frequencies[196] == 43
    assert auto_levels(compressed) == Levels(32, 200, 0)

    same_counts = Histogram.from_frequencies(compressed.frequencies)
    assert auto_levels(same_counts) == Levels(32, 196, 44)


def test_auto_levels_without_plateau():
    levels = auto_levels(Histogram.from_frequencies(_flat(0, 50, 3)))
    assert levels == Levels(8, 49, 0)


def test_auto_levels_black_from_zero():
    levels = auto_levels(Histogram.from_frequencies({0: 5}))
    assert levels.black_level == 0


def test_level_strategies():
    frequencies = _flat(100, 200, 10)
    frequencies[200] = 1000
    histogram = Histogram.from_frequencies(frequencies)
    messages = []
    logger = Logger(messages.append, 'frame')

    assert get_level_strategy('auto').estimate(histogram, logger) == Highlights(200, 1000)
    assert get_level_strategy('highlights').estimate(histogram) == Highlights(200, 0)
    assert messages and messages[0].startswith('[frame]')
    with pytest.raises(ArgumentError):
        get_level_strategy('median')

"""
统计分析: 单次遍历的矩统计、成对相减统计、频数直方图

和/平方和先由 numba 核函数逐行累加，再用 Python int 精确求总，
方差按 (n·Σx² - (Σx)²) / n² 计算，十亿级像素也不会丢失精度。
"""
import math
from typing import Dict, NamedTuple

from . import utils
from .errors import EmptyInputError, ArgumentError
from .selection import Selection, check_same_placement


class Stats1(NamedTuple):
    min: int
    max: int
    mean: float
    stdev: float


class Stats2(NamedTuple):
    a: Stats1
    b: Stats1
    stdev: float  # 差值的标准差 / sqrt(2)


def _mode(frequencies: Dict[int, int]) -> int:
    # 升序扫描，频数相同时取后出现 (更高) 的值
    mode = 0
    best = 0
    for value, count in frequencies.items():
        if count >= best:
            best = count
            mode = value
    return mode


class Histogram(NamedTuple):
    frequencies: Dict[int, int]  # 取值 (升序) -> 频数
    total: int
    mode: int
    bucket: int = 1  # 压缩后每个桶覆盖的取值宽度

    @classmethod
    def from_frequencies(cls, frequencies: Dict[int, int], bucket: int = 1) -> 'Histogram':
        ordered = {value: frequencies[value] for value in sorted(frequencies) if frequencies[value]}
        return cls(ordered, sum(ordered.values()), _mode(ordered), bucket)

    def count(self, value: int) -> int:
        return self.frequencies.get(value, 0)

    def compress(self, factor: int) -> 'Histogram':
        """Merge values into buckets `factor` times wider, keyed by the bucket start."""
        if factor < 1:
            raise ArgumentError(f"histogram compression factor must be >= 1, got {factor}")
        bucket = self.bucket * factor
        merged: Dict[int, int] = {}
        for value, count in self.frequencies.items():
            key = value // bucket * bucket
            merged[key] = merged.get(key, 0) + count
        return Histogram.from_frequencies(merged, bucket)


def _moments(count: int, total: int, total_sq: int):
    mean = total / count
    variance = (count * total_sq - total * total) / (count * count)
    return mean, math.sqrt(max(variance, 0.0))


def _exact_sum(partial_sums) -> int:
    return sum(int(v) for v in partial_sums.tolist())


def analyze(selection: Selection) -> Stats1:
    """Min, max, mean and population standard deviation in a single pass."""
    pixels = selection.pixel_count()
    if not pixels:
        raise EmptyInputError("analyze: empty selection")
    lo, hi, row_sum, row_sum_sq = utils.selection_moments(selection.image.samples, *selection.steps())
    mean, stdev = _moments(pixels, _exact_sum(row_sum), _exact_sum(row_sum_sq))
    return Stats1(int(lo), int(hi), mean, stdev)


def subtract(selection_a: Selection, selection_b: Selection) -> Stats2:
    """
    Statistics of two same-placed selections and of their per-pixel difference.

    The reported `stdev` is the difference's deviation divided by sqrt(2):
    both frames contribute the same noise, so this estimates a single
    frame's noise (read noise when the frames are dark).
    """
    check_same_placement(selection_a, selection_b, "subtract")
    pixels = selection_a.pixel_count()
    if not pixels:
        raise EmptyInputError("subtract: empty selection")
    steps_a = selection_a.steps()
    steps_b = selection_b.steps()
    lo_a, hi_a, lo_b, hi_b, sums = utils.paired_moments(
        selection_a.image.samples, steps_a.start, steps_a.column_step, steps_a.row_skip, steps_a.row_skip_alt,
        selection_b.image.samples, steps_b.start, steps_b.column_step, steps_b.row_skip, steps_b.row_skip_alt,
        steps_a.width, steps_a.height,
    )
    sum_a, sum_a2, sum_b, sum_b2, sum_d, sum_d2 = (_exact_sum(row) for row in sums)

    mean_a, stdev_a = _moments(pixels, sum_a, sum_a2)
    mean_b, stdev_b = _moments(pixels, sum_b, sum_b2)
    variance_d = (pixels * sum_d2 - sum_d * sum_d) / (pixels * pixels)
    return Stats2(
        Stats1(int(lo_a), int(hi_a), mean_a, stdev_a),
        Stats1(int(lo_b), int(hi_b), mean_b, stdev_b),
        math.sqrt(max(variance_d, 0.0) / 2),
    )


def build_histogram(selection: Selection) -> Histogram:
    if not selection.pixel_count():
        raise EmptyInputError("buildHistogram: empty selection")
    counts = utils.selection_histogram(selection.image.samples, *selection.steps())
    values = counts.nonzero()[0]
    return Histogram.from_frequencies({int(v): int(counts[v]) for v in values})


def dynamic_range(white_level: float, black_level: float, noise: float) -> float:
    """Stops between the saturation signal and the noise floor."""
    if noise <= 0:
        raise ArgumentError(f"dynamic range needs a positive noise, got {noise}")
    signal = white_level - black_level
    if signal <= 0:
        raise ArgumentError(f"white level {white_level} not above black level {black_level}")
    return math.log2(signal / noise)

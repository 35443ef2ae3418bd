"""
电平估计模块
基于直方图的白电平 / 剪切检测和自动黑白电平，使用策略模式供命令行选择
"""
import math
from typing import NamedTuple, Optional, Protocol

from . import config
from .errors import ArgumentError, EmptyInputError
from .logger import Logger
from .stats import Histogram


class Highlights(NamedTuple):
    white_level: int    # 最高未剪切取值
    clipped_count: int  # 剪切像素数


class Levels(NamedTuple):
    black_level: int
    white_level: int
    clipped_count: int


def highlights(histogram: Histogram) -> Highlights:
    """
    从最高取值向下扫描，查找过曝起点

    threshold = total / 10000。第一个频数超过 threshold 的取值:
      - 其上方累计的像素不足 threshold / 10: 视为过曝平台，
        白电平为下一个更低的取值 (没有则为该取值本身)，剪切数包含该取值
      - 否则: 剪切数清零；若该取值就是最高取值，白电平即为它本身，
        否则沿连续的非零取值继续向下，白电平为第一个零频数的取值
    只有一个取值的直方图整体视为剪切。

    Raises:
        EmptyInputError: 空直方图
    """
    frequencies = histogram.frequencies
    if not frequencies:
        raise EmptyInputError("highlights: empty histogram")

    descending = sorted(frequencies, reverse=True)
    if len(descending) == 1:
        return Highlights(descending[0], histogram.total)

    threshold = histogram.total // config.HIGHLIGHT_THRESHOLD_DIVISOR
    clipped = 0
    for i, value in enumerate(descending):
        count = frequencies[value]
        clipped += count
        if count <= threshold:
            continue
        if clipped - count < threshold // 10:
            white = descending[i + 1] if i + 1 < len(descending) else value
            return Highlights(white, clipped)
        if i == 0:
            return Highlights(value, 0)
        white = value
        while white > 0 and histogram.count(white):
            white -= histogram.bucket
        return Highlights(max(white, 0), 0)

    # 没有任何取值超过阈值 (threshold 较大时的稀疏直方图)
    return Highlights(descending[0], 0)


def auto_levels(histogram: Histogram) -> Levels:
    """
    自动黑白电平

    升序: 跳过最低的 8 个取值 (零附近的条带)，黑电平取下一个取值最接近的 2 的幂。
    降序 (最多 128 个取值): 记录已扫描过的最大单桶频数 (spike)；
    频数 >= 16 × 压缩因子 且 >= 16 × spike 的桶视为剪切平台，最后 (最低) 一个生效。
    找到平台后，若其下方相邻的桶频数超过累计剪切数的 1/4，则并入并降低白电平。
    """
    frequencies = histogram.frequencies
    if not frequencies:
        raise EmptyInputError("autoLevels: empty histogram")

    ascending = list(frequencies)
    first = ascending[min(config.AUTO_LEVELS_SKIP_LOW, len(ascending) - 1)]
    black = 2 ** int(round(math.log2(first))) if first > 0 else 0

    descending = ascending[::-1]
    factor = config.AUTO_LEVELS_SPIKE_FACTOR
    spike = 0
    accumulated = 0
    clipped = 0
    plateau = None
    for i, value in enumerate(descending[:config.AUTO_LEVELS_TOP_WINDOW]):
        count = frequencies[value]
        accumulated += count
        compression = 1 if i == 0 else histogram.bucket
        if count >= factor * compression and count >= factor * spike:
            plateau = i
            clipped = accumulated
        spike = max(spike, count)

    if plateau is None:
        return Levels(black, descending[0], 0)

    white = descending[plateau]
    if plateau + 1 < len(descending):
        below = descending[plateau + 1]
        # 剪切溢出到相邻的桶
        if frequencies[below] > clipped / 4:
            clipped += frequencies[below]
            white = below
    return Levels(black, white, clipped)


# ==========================================
#           白电平估计策略
# ==========================================

class LevelStrategy(Protocol):
    """白电平估计策略接口"""

    def estimate(self, histogram: Histogram, logger: Optional[Logger] = None) -> Highlights:
        ...


class HighlightsLevelStrategy:
    """过曝平台检测"""

    def estimate(self, histogram: Histogram, logger: Optional[Logger] = None) -> Highlights:
        result = highlights(histogram)
        if logger:
            logger.info(f"  [Levels] highlights: white={result.white_level} clipped={result.clipped_count}")
        return result


class AutoLevelStrategy:
    """尖峰启发式自动电平"""

    def estimate(self, histogram: Histogram, logger: Optional[Logger] = None) -> Highlights:
        result = auto_levels(histogram)
        if logger:
            logger.info(f"  [Levels] auto: black={result.black_level} white={result.white_level} "
                        f"clipped={result.clipped_count}")
        return Highlights(result.white_level, result.clipped_count)


# 策略注册表
LEVEL_STRATEGIES = {
    'highlights': HighlightsLevelStrategy(),
    'auto': AutoLevelStrategy(),
}


def get_level_strategy(method: str) -> LevelStrategy:
    """
    获取电平估计策略

    Raises:
        ArgumentError: 如果方法不存在
    """
    strategy = LEVEL_STRATEGIES.get(method)
    if strategy is None:
        raise ArgumentError(f"Unknown level method: {method}")
    return strategy

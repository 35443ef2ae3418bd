"""
黑电平 / 白电平标定
黑电平可以直接给出，也可以从左侧遮光区的均值获得；白电平可以直接给出或由直方图估计。
"""
from typing import Optional, Sequence

from . import geometry, stats
from .errors import ArgumentError
from .geometry import FilterCode
from .image import RawImage
from .levels import get_level_strategy
from .logger import Logger


def set_black_level(image: RawImage, points: Sequence[float]):
    """
    设置每个滤色片的黑电平

    Args:
        points: 1 个值 (所有滤色片) 或 4 个值 (R, G1, G2, B)
    """
    if len(points) == 1:
        for code in FilterCode:
            image.black_level[code] = float(points[0])
    elif len(points) == 4:
        red, green1, green2, blue = (float(p) for p in points)
        image.black_level[FilterCode.R] = red
        image.black_level[FilterCode.G1] = green1
        image.black_level[FilterCode.G2] = green2
        image.black_level[FilterCode.B] = blue
        image.black_level[FilterCode.G] = (green1 + green2) / 2
        image.black_level[FilterCode.ALL] = (red + green1 + green2 + blue) / 4
    else:
        raise ArgumentError(f"expected 1 or 4 black points, got {len(points)}")


def calibrate_black_level(image: RawImage, logger: Optional[Logger] = None):
    """Black level of every filter from the mean of its left optical-black strip."""
    for code, pattern in geometry.GEOMETRIES.items():
        mask_stats = stats.analyze(image.channel(pattern).left_mask())
        image.black_level[code] = mask_stats.mean
        if logger:
            logger.info(f"  [Black] {code.value}: {mask_stats.mean:.3f} (noise {mask_stats.stdev:.3f})")


def set_white_level(image: RawImage, white: Optional[int] = None, method: str = 'highlights',
                    logger: Optional[Logger] = None) -> int:
    """
    设置白电平

    Args:
        white: 明确的白电平；为 None 时从整幅图像的直方图估计
        method: 估计方法 ('highlights' 或 'auto')
    """
    if white is None:
        histogram = stats.build_histogram(image.channel(geometry.ALL).select())
        white = get_level_strategy(method).estimate(histogram, logger).white_level
    if not 0 < white <= 65535:
        raise ArgumentError(f"white level out of range: {white}")
    image.white_level = int(white)
    return image.white_level

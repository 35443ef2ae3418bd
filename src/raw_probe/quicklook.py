"""
快速预览: 过曝高亮的灰度缩略图
每个 2x2 Bayer 单元生成一个 RGB 像素，伽马查找表由调用方显式构建并传入。
"""
from typing import Optional

import colour
import numpy as np

from . import config, utils
from .errors import CalibrationError, ArgumentError
from .geometry import BAYER_GEOMETRIES
from .image import RawImage
from .logger import Logger


def build_gamma_table(size: int = config.GAMMA_TABLE_SIZE,
                      function: str = config.GAMMA_FUNCTION) -> np.ndarray:
    """
    线性 [0, 1] -> 16-bit 编码值的查找表

    Args:
        size: 表项数量
        function: colour 库的编码函数名称 (默认 sRGB)
    """
    if size < 2:
        raise ArgumentError(f"gamma table needs at least 2 entries, got {size}")
    linear = np.linspace(0.0, 1.0, size)
    encoded = colour.cctf_encoding(linear, function=function)
    return np.round(np.clip(encoded, 0.0, 1.0) * config.FULL_SCALE).astype(np.uint16)


def clipping(image: RawImage, gamma_table: np.ndarray, logger: Optional[Logger] = None) -> np.ndarray:
    """
    生成过曝高亮预览

    Returns:
        (height/2, width/2, 3) uint16 RGB 数组；未剪切单元为灰度，
        剪切的滤色片以满量程显示其颜色

    Raises:
        CalibrationError: 缺少黑电平或白电平
    """
    if image.white_level is None:
        raise CalibrationError("clipping: white level not defined", image.name or None)
    black = np.array([image.channel(g).black_level() for g in BAYER_GEOMETRIES], dtype=np.float64)
    if image.white_level <= black.mean():
        raise ArgumentError(f"clipping: white level {image.white_level} not above black level {black.mean():.1f}")

    starts, column_step, row_skips, row_skip_alts, width, height = utils.steps_arrays(
        [image.channel(g).select() for g in BAYER_GEOMETRIES]
    )
    if logger:
        logger.info(f"  [Preview] {width}x{height}, white={image.white_level}")

    table = np.ascontiguousarray(gamma_table, dtype=np.uint16)
    out = np.zeros((height, width, 3), dtype=np.uint16)
    utils.clipping_preview(
        image.samples, starts, column_step, row_skips, row_skip_alts, width, height,
        black, int(image.white_level), table, config.FULL_SCALE, out,
    )
    return out

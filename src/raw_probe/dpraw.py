"""
Dual Pixel RAW 处理

输入为同尺寸的两幅图像: combined (A+B) 与 secondary (B)，二者共享同一读出电路。
  - GetA:  恢复主信号 A = (AB - blackAB) - (B - blackB) + blackB
  - Blend: 用 B 替换 AB 的过曝区域，未过曝区域按 2^ev_shift 缩放 AB 以匹配 B 的曝光
两幅图像每个 Bayer 位置的黑电平都必须事先标定。
"""
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from . import utils
from .errors import ArgumentError, ShapeError
from .geometry import BAYER_GEOMETRIES
from .image import RawImage
from .logger import Logger


class DprawAction(Enum):
    GET_A = 'geta'
    BLEND = 'blend'


class DprawMode(Enum):
    PLAIN = 'plain'   # 每个位置独立判断
    BAYER = 'bayer'   # 2x2 单元整体判断


class DprawRequest(NamedTuple):
    combined: RawImage
    secondary: RawImage
    white_level: int
    ev_shift: Optional[float] = None
    action: DprawAction = DprawAction.GET_A  # 也接受名称 'geta' / 'blend'
    mode: DprawMode = DprawMode.PLAIN        # 也接受名称 'plain' / 'bayer'


def _bayer_black_levels(image: RawImage) -> np.ndarray:
    return np.array([image.channel(g).black_level() for g in BAYER_GEOMETRIES], dtype=np.float64)


def dpraw_process(request: DprawRequest, logger: Optional[Logger] = None) -> RawImage:
    """
    逐像素合成一幅新图像

    Args:
        request: 两幅输入图像、白电平、(Blend 所需的) EV 偏移、动作与模式

    Returns:
        与输入同尺寸的新图像 (只读)，不复制黑/白电平标定

    Raises:
        ShapeError: 两幅图像尺寸或遮光区不一致
        CalibrationError: 某个 Bayer 位置缺少黑电平
        ArgumentError: 非法的 action / mode，或 Blend 缺少 EV 偏移
    """
    try:
        action = DprawAction(request.action)
        mode = DprawMode(request.mode)
    except ValueError as e:
        raise ArgumentError(f"dpraw: {e}") from None

    combined = request.combined
    secondary = request.secondary
    if not combined.same_size_as(secondary):
        raise ShapeError(f"dpraw: image and subimage size don't match ({combined} vs {secondary})")

    black_combined = _bayer_black_levels(combined)
    black_secondary = _bayer_black_levels(secondary)

    scale = 1.0
    if action is DprawAction.BLEND:
        if request.ev_shift is None:
            raise ArgumentError("dpraw: blend requires an EV shift")
        scale = 2.0 ** request.ev_shift

    if logger:
        logger.info(f"  [DPRAW] {action.value}/{mode.value}, white={request.white_level}, scale={scale:.4f}")

    output = combined.layout()
    starts, column_step, row_skips, row_skip_alts, width, height = utils.steps_arrays(
        [output.channel(g).select() for g in BAYER_GEOMETRIES]
    )
    utils.dpraw_merge(
        combined.samples, secondary.samples, output.samples,
        starts, column_step, row_skips, row_skip_alts, width, height,
        black_combined, black_secondary,
        int(request.white_level), float(scale),
        utils.ACTION_GET_A if action is DprawAction.GET_A else utils.ACTION_BLEND,
        mode is DprawMode.BAYER,
    )
    return output.freeze()

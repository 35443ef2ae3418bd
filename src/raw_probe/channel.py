"""
颜色通道: 将 RawImage 与滤色片几何绑定，提供逻辑网格尺寸、黑电平和遮光区选区
"""
from typing import Optional

from . import config
from .errors import CalibrationError
from .geometry import FilterGeometry
from .selection import Selection


class Channel:
    """A filter pattern applied over a raw image."""

    def __init__(self, image, geometry: FilterGeometry):
        self.image = image
        self.geometry = geometry

    def __repr__(self):
        return f"Channel({self.geometry}, {self.width}x{self.height})"

    @property
    def width(self) -> int:
        return self.image.bayer_width // self.geometry.x_period

    @property
    def height(self) -> int:
        return self.image.bayer_height // self.geometry.y_period

    def black_level(self) -> float:
        try:
            return self.image.black_level[self.geometry.code]
        except KeyError:
            raise CalibrationError(f"black level not defined for {self.geometry}") from None

    def select(self, x: int = 0, y: int = 0,
               width: Optional[int] = None, height: Optional[int] = None) -> Selection:
        """Full channel by default, otherwise the given logical rectangle."""
        if width is None:
            width = self.width - x
        if height is None:
            height = self.height - y
        return Selection(self, x, y, width, height)

    def left_mask(self, safety_crop: bool = True, overlapping_top: bool = False) -> Selection:
        """
        左侧遮光区 (optical black) 的选区

        Args:
            safety_crop: 去掉靠近边缘和有效区域的安全边界
            overlapping_top: 包含与顶部遮光区重叠的部分

        Raises:
            CalibrationError: 图像没有左侧遮光区
        """
        image = self.image
        if not image.left_mask:
            raise CalibrationError("image lacks a left mask", image.name)

        factor_h = 1 if self.geometry.y_period == 1 else 2
        factor_w = 1 if self.geometry.x_period == 1 else 2

        cy = (0 if overlapping_top else image.top_mask) // factor_h
        mask = self.select(0, cy, image.left_mask // factor_w, self.height - cy)

        if not safety_crop:
            return mask

        border_h = config.MASK_SAFETY_FULL if self.geometry.y_period == 1 else config.MASK_SAFETY_SUBSAMPLED
        border_w = config.MASK_SAFETY_FULL if self.geometry.x_period == 1 else config.MASK_SAFETY_SUBSAMPLED
        border_h = min(border_h, mask.height // 4)
        border_w = min(border_w, mask.width // 4)

        return mask.sub_select(border_w, border_h, mask.width - border_w * 2, mask.height - border_h * 2)

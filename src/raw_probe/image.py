"""
RawImage: 内存中的 RAW 数据 (单通道 16-bit 扁平数组)

加载后只读；通过 layout() 分配的输出图像在生产者写完并调用 freeze() 前可写。
通道和选区只持有对图像的引用，不复制像素数据。
"""
from typing import Dict, Optional

import numpy as np

from .channel import Channel
from .errors import ArgumentError, ShapeError
from .geometry import FilterCode, FilterGeometry


class RawImage:
    """Samples of a single-channel sensor dump plus its optical-black border."""

    def __init__(
        self,
        samples: np.ndarray,
        width: int,
        height: int,
        left_mask: int = 0,
        top_mask: int = 0,
        name: str = '',
    ):
        samples = np.asarray(samples)
        if samples.size != width * height:
            raise ShapeError(f"{samples.size} samples don't match {width}x{height}", name or None)
        self.samples = np.ascontiguousarray(samples, dtype=np.uint16).reshape(-1)
        self.width = width
        self.height = height
        # 遮光区尺寸不合理时视为没有遮光区
        self.left_mask = left_mask if 0 <= left_mask < width else 0
        self.top_mask = top_mask if 0 <= top_mask < height else 0
        self.black_level: Dict[FilterCode, float] = {}
        self.white_level: Optional[int] = None
        self.name = name

    @classmethod
    def create(cls, width: int, height: int, left_mask: int = 0, top_mask: int = 0, name: str = '') -> 'RawImage':
        """Writable image, zero filled (pixels outside the Bayer area are never written by producers)."""
        return cls(np.zeros(width * height, dtype=np.uint16), width, height, left_mask, top_mask, name)

    @classmethod
    def from_array(cls, array: np.ndarray, left_mask: int = 0, top_mask: int = 0, name: str = '') -> 'RawImage':
        """Read-only image holding a copy of a 2D array."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise ArgumentError(f"expected a 2D array, got shape {array.shape}")
        height, width = array.shape
        image = cls(np.array(array, dtype=np.uint16), width, height, left_mask, top_mask, name)
        image.freeze()
        return image

    def layout(self) -> 'RawImage':
        """Same-shaped writable output image; calibration is not copied."""
        return RawImage.create(self.width, self.height, self.left_mask, self.top_mask, self.name)

    def freeze(self) -> 'RawImage':
        self.samples.flags.writeable = False
        return self

    @property
    def writable(self) -> bool:
        return self.samples.flags.writeable

    def check_writable(self):
        if not self.writable:
            raise ArgumentError("raw image is read-only", self.name or None)

    # 遮光区为奇数尺寸时，Bayer 相位随之偏移
    @property
    def x_align(self) -> int:
        return self.left_mask & 1

    @property
    def y_align(self) -> int:
        return self.top_mask & 1

    @property
    def bayer_width(self) -> int:
        return self.width - self.x_align

    @property
    def bayer_height(self) -> int:
        return self.height - self.y_align

    def same_size_as(self, other: 'RawImage') -> bool:
        return (self.width == other.width and self.height == other.height
                and self.left_mask == other.left_mask and self.top_mask == other.top_mask)

    def channel(self, geometry: FilterGeometry) -> Channel:
        return Channel(self, geometry)

    def as_array(self) -> np.ndarray:
        """2D view of the samples (height, width)."""
        return self.samples.reshape(self.height, self.width)

    def __repr__(self):
        return (f"RawImage({self.name!r}, {self.width}x{self.height}, "
                f"left_mask={self.left_mask}, top_mask={self.top_mask})")

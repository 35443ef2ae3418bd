"""
滤色片几何
用 (偶数行水平相位, 奇数行水平相位, 垂直相位, 水平周期, 垂直周期) 描述任意简单周期采样模式。

RGGB 示例:
            R  G1
            G2  B

    x_phase_even  0  1  0  1
    x_phase_odd   0  1  0  1
    y_phase       0  0  1  1
    x_period      2  2  2  2
    y_period      2  2  2  2
                  R G1 G2  B
"""
from enum import Enum
from typing import NamedTuple

from .errors import ArgumentError


class FilterCode(Enum):
    R = 'R'
    G1 = 'G1'
    G2 = 'G2'
    G = 'G'      # 两个绿色位置的并集
    B = 'B'
    ALL = 'ALL'  # 全部像素


class FilterGeometry(NamedTuple):
    code: FilterCode
    x_phase_even: int
    x_phase_odd: int
    y_phase: int
    x_period: int
    y_period: int

    def x_phase(self, physical_row: int) -> int:
        """Horizontal phase of a physical row (relative to the aligned origin)."""
        return self.x_phase_odd if physical_row & 1 else self.x_phase_even

    def __str__(self):
        return self.code.value


R = FilterGeometry(FilterCode.R, 0, 0, 0, 2, 2)
G1 = FilterGeometry(FilterCode.G1, 1, 1, 0, 2, 2)
G2 = FilterGeometry(FilterCode.G2, 0, 0, 1, 2, 2)
G = FilterGeometry(FilterCode.G, 1, 0, 0, 2, 1)
B = FilterGeometry(FilterCode.B, 1, 1, 1, 2, 2)
ALL = FilterGeometry(FilterCode.ALL, 0, 0, 0, 1, 1)

GEOMETRIES = {
    FilterCode.R: R,
    FilterCode.G1: G1,
    FilterCode.G2: G2,
    FilterCode.G: G,
    FilterCode.B: B,
    FilterCode.ALL: ALL,
}

# 2x2 Bayer 单元的四个物理位置
BAYER_GEOMETRIES = (R, G1, G2, B)


def from_code(code) -> FilterGeometry:
    """
    根据滤色片代码获取几何描述

    Args:
        code: FilterCode 或其名称 (不区分大小写，例如 'g1')

    Raises:
        ArgumentError: 未知的代码
    """
    if isinstance(code, FilterCode):
        return GEOMETRIES[code]
    try:
        return GEOMETRIES[FilterCode(str(code).upper())]
    except ValueError:
        raise ArgumentError(f"Unknown filter code: {code}") from None

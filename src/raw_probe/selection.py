"""
通道内的矩形选区与顺序迭代器

选区使用通道的逻辑 (子采样) 坐标。物理位置:
    physical_row = cy * y_period + y_phase
    physical_col = cx * x_period + x_phase(physical_row)
两者都相对于图像的对齐原点 (x_align, y_align)。

迭代器预先计算列步长和两个交替使用的换行跳跃值，
每一步只做加法，不需要除法或取模。
"""
from typing import NamedTuple

from .errors import BoundsError, ShapeError


class IteratorSteps(NamedTuple):
    """Precomputed walk over a selection, shared by the iterator and the numba kernels."""
    start: int         # 第一个像素的扁平偏移
    column_step: int   # 同一行内的步长
    row_skip: int      # 行尾 -> 下一行首 (当前行)
    row_skip_alt: int  # 行尾 -> 下一行首 (下一行)，每行交换
    width: int
    height: int


class Selection:
    """A rectangle in the logical grid of a channel."""

    def __init__(self, channel, x: int, y: int, width: int, height: int):
        if width < 1 or height < 1:
            raise BoundsError(f"out of range: width({width}) height({height})")
        if x < 0 or y < 0:
            raise BoundsError(f"out of range: X({x}) Y({y})")
        if x + width > channel.width:
            raise BoundsError(f"out of range: X({x}) + width({width}) beyond {channel.width}")
        if y + height > channel.height:
            raise BoundsError(f"out of range: Y({y}) + height({height}) beyond {channel.height}")

        self.channel = channel
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def __repr__(self):
        return (f"Selection({self.channel.geometry}, x={self.x}, y={self.y}, "
                f"width={self.width}, height={self.height})")

    @property
    def image(self):
        return self.channel.image

    def pixel_count(self) -> int:
        return self.width * self.height

    def same_as(self, other: 'Selection') -> bool:
        return (self.width == other.width and self.height == other.height
                and self.x == other.x and self.y == other.y)

    def _offset(self, cx: int, cy: int) -> int:
        if cx < 0 or cx >= self.width:
            raise BoundsError(f"out of range: X({cx}) beyond {self.width - 1}")
        if cy < 0 or cy >= self.height:
            raise BoundsError(f"out of range: Y({cy}) beyond {self.height - 1}")
        geometry = self.channel.geometry
        image = self.image
        row = (self.y + cy) * geometry.y_period + geometry.y_phase
        return ((row + image.y_align) * image.width
                + (self.x + cx) * geometry.x_period + image.x_align + geometry.x_phase(row))

    def random_pixel(self, cx: int, cy: int) -> int:
        """Random access, for low frequency use (masks, spot checks)."""
        return int(self.image.samples[self._offset(cx, cy)])

    pixel = random_pixel

    def set_pixel(self, cx: int, cy: int, value: int):
        offset = self._offset(cx, cy)
        self.image.check_writable()
        self.image.samples[offset] = value

    def sub_select(self, cx: int, cy: int, width: int, height: int) -> 'Selection':
        """Selection relative to this one, bounds checked against this rectangle."""
        if width < 1 or height < 1:
            raise BoundsError(f"out of range: width({width}) height({height})")
        if cx < 0 or cx + width > self.width:
            raise BoundsError(f"out of range: X({cx}) + width({width}) beyond {self.width}")
        if cy < 0 or cy + height > self.height:
            raise BoundsError(f"out of range: Y({cy}) + height({height}) beyond {self.height}")
        return Selection(self.channel, self.x + cx, self.y + cy, width, height)

    def steps(self) -> IteratorSteps:
        geometry = self.channel.geometry
        image = self.image
        first_row = self.y * geometry.y_period + geometry.y_phase
        x_shift = geometry.x_phase(first_row)
        # 奇数垂直周期时相邻行的奇偶性交替，相位差在两行之间来回切换
        shift = geometry.x_phase(first_row + geometry.y_period) - x_shift
        start = ((first_row + image.y_align) * image.width
                 + self.x * geometry.x_period + image.x_align + x_shift)
        base = image.width * geometry.y_period - (self.width - 1) * geometry.x_period
        return IteratorSteps(start, geometry.x_period, base + shift, base - shift,
                             self.width, self.height)

    def iterator(self) -> 'SelectionIterator':
        return SelectionIterator(self)

    def __iter__(self):
        return SelectionIterator(self)


def check_same_placement(a: Selection, b: Selection, operation: str):
    if not a.same_as(b):
        raise ShapeError(f"{operation}: selections of different size/placement ({a} vs {b})")


class SelectionIterator:
    """
    Sequential left-to-right, top-to-bottom cursor over a selection.

    `next_pixel()` returns the current value and moves on, `advance()` only
    moves and tells whether a pixel remains, `current()` reads in place.
    """

    def __init__(self, selection: Selection):
        self.selection = selection
        self._samples = selection.image.samples
        self._steps = selection.steps()
        self.rewind()

    def rewind(self):
        """Restart the same traversal."""
        steps = self._steps
        self._offset = steps.start
        self._column = steps.width
        self._rows = steps.height
        self._row_skip = steps.row_skip
        self._row_skip_alt = steps.row_skip_alt

    def has_next(self) -> bool:
        return self._rows > 0

    def __bool__(self):
        return self._rows > 0

    def _check(self):
        if not self._rows:
            raise BoundsError("iterator past end of data")

    def current(self) -> int:
        self._check()
        return int(self._samples[self._offset])

    def set_current(self, value: int):
        self._check()
        self.selection.image.check_writable()
        self._samples[self._offset] = value

    def _step(self):
        self._column -= 1
        if self._column:
            self._offset += self._steps.column_step
        else:
            self._column = self._steps.width
            self._offset += self._row_skip
            self._row_skip, self._row_skip_alt = self._row_skip_alt, self._row_skip
            self._rows -= 1

    def next_pixel(self) -> int:
        """Post-increment: value of the current pixel, then move."""
        value = self.current()
        self._step()
        return value

    def advance(self) -> bool:
        """Pre-increment: move, then tell whether a pixel remains."""
        self._check()
        self._step()
        return self._rows > 0

    def __iter__(self):
        return self

    def __next__(self) -> int:
        if not self._rows:
            raise StopIteration
        return self.next_pixel()


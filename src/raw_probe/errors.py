"""
错误类型
所有错误在检测点抛出，由顶层调用者（CLI）统一报告并以非零状态退出。
调用者既可以按 `kind` 匹配，也可以按异常类型捕获。
"""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    BOUNDS = 'bounds'            # 选区越界
    SHAPE = 'shape'              # 成对运算的尺寸/位置不一致
    CALIBRATION = 'calibration'  # 黑电平/白电平/遮光区缺失
    IO = 'io'                    # 文件不可读/格式错误/不可写
    EMPTY = 'empty'              # 零像素上的统计
    ARGUMENT = 'argument'        # 非法参数


class ImageError(Exception):
    """Base error of the toolkit."""

    kind = ErrorKind.ARGUMENT

    def __init__(self, message: str, path: Optional[str] = None):
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class BoundsError(ImageError, IndexError):
    kind = ErrorKind.BOUNDS


class ShapeError(ImageError):
    kind = ErrorKind.SHAPE


class CalibrationError(ImageError):
    kind = ErrorKind.CALIBRATION


class ImageIOError(ImageError, OSError):
    kind = ErrorKind.IO


class EmptyInputError(ImageError):
    kind = ErrorKind.EMPTY


class ArgumentError(ImageError, ValueError):
    kind = ErrorKind.ARGUMENT

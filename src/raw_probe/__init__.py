# __init__.py
"""
Raw Probe - 图像传感器特性分析工具包
"""

from .errors import ErrorKind, ImageError
from .geometry import FilterCode, FilterGeometry, from_code, R, G1, G2, G, B, ALL
from .image import RawImage
from .logger import Logger, create_logger
from .stats import Histogram, Stats1, Stats2, analyze, subtract, build_histogram
from .levels import Highlights, Levels, highlights, auto_levels, get_level_strategy
from .dpraw import DprawAction, DprawMode, DprawRequest, dpraw_process
from .file_io import load, save_image

__all__ = [
    # 错误
    'ErrorKind',
    'ImageError',
    # 几何与图像
    'FilterCode',
    'FilterGeometry',
    'from_code',
    'R', 'G1', 'G2', 'G', 'B', 'ALL',
    'RawImage',
    # 日志
    'Logger',
    'create_logger',
    # 统计
    'Histogram',
    'Stats1',
    'Stats2',
    'analyze',
    'subtract',
    'build_histogram',
    'Highlights',
    'Levels',
    'highlights',
    'auto_levels',
    'get_level_strategy',
    # DPRAW
    'DprawAction',
    'DprawMode',
    'DprawRequest',
    'dpraw_process',
    # 文件IO
    'load',
    'save_image',
]

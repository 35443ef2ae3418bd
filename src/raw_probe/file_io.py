"""
文件读写模块
读取: 16-bit PGM (P5)、原始 .dat 转储、相机 RAW (rawpy)
写入: .dat、.pgm、.ppm、.tif/.tiff；直方图 CSV 与图表
文件中的样本统一为大端字节序，与主机字节序无关。
"""
import csv
import os
import re
from typing import Dict, Optional, Union

import numpy as np
import rawpy
import tifffile

from . import config
from .errors import ArgumentError, ImageIOError
from .geometry import FilterCode
from .image import RawImage
from .logger import Logger
from .stats import Histogram

_PGM_HEADER = re.compile(rb'^P5\s+(\d+)\s+(\d+)\s+(\d+)\s')


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ImageIOError(f"opening: {e.strerror or e}", path) from e


def _load_pgm(path: str, left_mask: int, top_mask: int) -> RawImage:
    data = _read_bytes(path)
    if len(data) < 2 or data[:2] != b'P5':
        raise ImageIOError("seems not to be a valid PGM file", path)
    header = _PGM_HEADER.match(data[:config.PGM_HEADER_BYTES])
    if header is None:
        raise ImageIOError("too short file or malformed PGM header", path)
    width, height, maxval = (int(v) for v in header.groups())
    if maxval < 256 or maxval > 65535:
        raise ImageIOError("not a 16-bit PGM file", path)
    if width < 1 or height < 1:
        raise ImageIOError(f"unsupported file size ({width}x{height})", path)

    offset = header.end()
    if len(data) - offset < width * height * 2:
        raise ImageIOError("too short file", path)
    samples = np.frombuffer(data, dtype='>u2', count=width * height, offset=offset).astype(np.uint16)
    return RawImage(samples, width, height, left_mask, top_mask, os.path.basename(path))


def _load_dat(path: str, width: Optional[int], height: Optional[int], left_mask: int, top_mask: int) -> RawImage:
    if not width or not height:
        raise ArgumentError("raw dump needs explicit width and height", path)
    data = _read_bytes(path)
    if len(data) < width * height * 2:
        raise ImageIOError(f"too short file for {width}x{height}", path)
    samples = np.frombuffer(data, dtype='>u2', count=width * height).astype(np.uint16)
    return RawImage(samples, width, height, left_mask, top_mask, os.path.basename(path))


def _load_camera_raw(path: str, left_mask: Optional[int], top_mask: Optional[int]) -> RawImage:
    try:
        with rawpy.imread(path) as raw:
            # raw_image 包含遮光区
            samples = np.array(raw.raw_image, dtype=np.uint16)
            sizes = raw.sizes
            white = int(raw.white_level)
    except (rawpy.LibRawError, OSError) as e:
        raise ImageIOError(f"failed to decode RAW: {e}", path) from e

    height, width = samples.shape
    image = RawImage(
        samples, width, height,
        sizes.left_margin if left_mask is None else left_mask,
        sizes.top_margin if top_mask is None else top_mask,
        os.path.basename(path),
    )
    if 0 < white <= 65535:
        image.white_level = white
    return image


def load(path: str, left_mask: Optional[int] = None, top_mask: Optional[int] = None,
         width: Optional[int] = None, height: Optional[int] = None) -> RawImage:
    """
    读取 RAW 数据

    Args:
        path: 文件路径 (.pgm / .dat / 相机 RAW)
        left_mask: 左侧遮光区宽度；相机 RAW 为 None 时使用文件中的边距
        top_mask: 顶部遮光区高度
        width, height: 仅 .dat 需要

    Returns:
        只读的 RawImage

    Raises:
        ImageIOError: 文件不可读、过短、魔数错误或位深不支持
    """
    ext = os.path.splitext(path)[1].lower()
    if ext in config.SUPPORTED_RAW_EXTENSIONS:
        image = _load_camera_raw(path, left_mask, top_mask)
    elif ext == '.dat':
        image = _load_dat(path, width, height, left_mask or 0, top_mask or 0)
    else:
        image = _load_pgm(path, left_mask or 0, top_mask or 0)
    return image.freeze()


def _write_bytes(path: str, payload: bytes):
    try:
        with open(path, 'wb') as f:
            f.write(payload)
    except OSError as e:
        raise ImageIOError(f"writing: {e.strerror or e}", path) from e


def save_image(image: Union[RawImage, np.ndarray], path: str, logger: Optional[Logger] = None):
    """
    根据扩展名保存图像

    Args:
        image: RawImage，或 (H, W) / (H, W, 3) 的 uint16 数组
        path: .dat / .pgm (灰度)，.ppm (RGB)，.tif / .tiff (灰度或 RGB)
    """
    array = image.as_array() if isinstance(image, RawImage) else np.asarray(image)
    array = np.ascontiguousarray(array, dtype=np.uint16)
    ext = os.path.splitext(path)[1].lower()
    if ext not in config.WRITE_FORMATS:
        raise ImageIOError(f"unsupported write file format '{ext}'", path)

    if array.ndim == 2 and ext == '.ppm':
        array = np.repeat(array[:, :, np.newaxis], 3, axis=2)
    if array.ndim == 3 and (array.shape[2] != 3 or ext in ('.dat', '.pgm')):
        raise ArgumentError(f"can't write a {array.shape} array as '{ext}'", path)

    height, width = array.shape[:2]
    big_endian = array.astype('>u2').tobytes()
    if ext == '.dat':
        _write_bytes(path, big_endian)
    elif ext == '.pgm':
        _write_bytes(path, f"P5\n{width} {height}\n65535\n".encode('ascii') + big_endian)
    elif ext == '.ppm':
        _write_bytes(path, f"P6\n{width} {height}\n65535\n".encode('ascii') + big_endian)
    else:
        try:
            tifffile.imwrite(path, array, byteorder='>',
                             photometric='rgb' if array.ndim == 3 else 'minisblack')
        except OSError as e:
            raise ImageIOError(f"writing: {e}", path) from e

    if logger:
        logger.info(f"  [Save] {os.path.basename(path)} ({width}x{height})")


def write_histogram_csv(histograms: Dict[FilterCode, Histogram], path: str):
    """
    每个出现过的取值一行，每个 Bayer 位置一列 (固定顺序 R;G1;G2;B)
    """
    codes = [FilterCode(name) for name in config.CSV_CHANNEL_ORDER if FilterCode(name) in histograms]
    values = sorted(set().union(*(histograms[code].frequencies for code in codes)))
    try:
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f, delimiter=config.CSV_DELIMITER)
            writer.writerow(['value'] + [code.value for code in codes])
            for value in values:
                writer.writerow([value] + [histograms[code].count(value) for code in codes])
    except OSError as e:
        raise ImageIOError(f"writing: {e.strerror or e}", path) from e


def plot_histogram(histograms: Dict[FilterCode, Histogram], path: str, title: str = ''):
    """对数纵轴的直方图图表 (PNG 等 matplotlib 支持的格式)"""
    from matplotlib.figure import Figure

    fig = Figure(figsize=(10, 5))
    ax = fig.add_subplot(111)
    colors = {FilterCode.R: 'red', FilterCode.G1: 'green', FilterCode.G2: 'olive',
              FilterCode.G: 'green', FilterCode.B: 'blue', FilterCode.ALL: 'black'}
    for code, histogram in histograms.items():
        ax.plot(list(histogram.frequencies), list(histogram.frequencies.values()),
                label=code.value, color=colors[code], linewidth=0.8)
    ax.set_yscale('log')
    ax.set_xlabel('DN')
    ax.set_ylabel('pixels')
    ax.legend()
    if title:
        ax.set_title(title)
    try:
        fig.savefig(path)
    except OSError as e:
        raise ImageIOError(f"writing: {e}", path) from e

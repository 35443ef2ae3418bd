"""
Command orchestration: load inputs, apply calibration, run the analysis and
report through a logger. Each `run_*` function backs one CLI subcommand.
"""
import csv
import os
from typing import Optional, Sequence

from . import calibration, config, file_io, geometry, stats
from .dpraw import DprawRequest, dpraw_process
from .errors import ArgumentError, CalibrationError, ImageIOError
from .geometry import BAYER_GEOMETRIES
from .image import RawImage
from .levels import auto_levels, highlights
from .logger import create_logger
from .quicklook import build_gamma_table, clipping


def _select(image: RawImage, pattern, crop: Optional[Sequence[int]]):
    channel = image.channel(pattern)
    if crop is None:
        return channel.select()
    x, y, width, height = crop
    return channel.select(x, y, width, height)


def open_image(path, left_mask=None, top_mask=None, black_points=None, white=None,
               level_method: Optional[str] = None, width=None, height=None, calibrate_black: bool = True,
               logger=None) -> RawImage:
    """
    Load an image and apply the requested calibration.

    Black: explicit points win, otherwise the left mask when the image has one
    and `calibrate_black` is set.
    White: explicit value wins, otherwise estimated with `level_method` when given.
    """
    image = file_io.load(path, left_mask, top_mask, width, height)
    if logger:
        logger.info(f"Loaded {image.width}x{image.height} (left mask {image.left_mask}, top mask {image.top_mask})")

    if black_points:
        calibration.set_black_level(image, black_points)
    elif calibrate_black and image.left_mask:
        calibration.calibrate_black_level(image, logger)

    if white is not None or level_method:
        calibration.set_white_level(image, white, level_method or config.DEFAULT_LEVEL_METHOD, logger)
    return image


def _patterns(channel_names):
    if not channel_names:
        return list(BAYER_GEOMETRIES)
    return [geometry.from_code(name) for name in channel_names]


def run_histogram(input_path, output_path, left_mask=None, top_mask=None, crop=None,
                  bucket: int = 1, plot_path=None, logger_func=print):
    logger = create_logger(logger_func, os.path.basename(input_path))
    image = open_image(input_path, left_mask, top_mask, calibrate_black=False, logger=logger)

    histograms = {}
    for pattern in BAYER_GEOMETRIES:
        histogram = stats.build_histogram(_select(image, pattern, crop))
        if bucket > 1:
            histogram = histogram.compress(bucket)
        histograms[pattern.code] = histogram
        logger.info(f"  {pattern}: {len(histogram.frequencies)} values, mode {histogram.mode} "
                    f"({histogram.count(histogram.mode)} px)")

    file_io.write_histogram_csv(histograms, output_path)
    if plot_path:
        file_io.plot_histogram(histograms, plot_path, image.name)
    logger.success(f"Histogram written to {output_path}")
    return histograms


def run_stats(input_path, output_path=None, channel_names=None, left_mask=None, top_mask=None,
              crop=None, logger_func=print):
    logger = create_logger(logger_func, os.path.basename(input_path))
    image = open_image(input_path, left_mask, top_mask, calibrate_black=False, logger=logger)

    rows = []
    for pattern in _patterns(channel_names):
        selection = _select(image, pattern, crop)
        result = stats.analyze(selection)
        histogram = stats.build_histogram(selection)
        hl = highlights(histogram)
        levels = auto_levels(histogram)
        logger.info(
            f"  {pattern}: min={result.min} max={result.max} mean={result.mean:.3f} stdev={result.stdev:.3f} "
            f"mode={histogram.mode} white={hl.white_level} clipped={hl.clipped_count} "
            f"({hl.clipped_count / histogram.total * 100:.4f}%) auto=[{levels.black_level}, {levels.white_level}]"
        )
        rows.append([pattern.code.value, selection.x, selection.y, selection.width, selection.height,
                     result.min, result.max, f"{result.mean:.4f}", f"{result.stdev:.4f}", histogram.mode,
                     hl.white_level, hl.clipped_count, levels.black_level, levels.white_level])

    if output_path:
        try:
            with open(output_path, 'w', newline='') as f:
                writer = csv.writer(f, delimiter=config.CSV_DELIMITER)
                writer.writerow(['channel', 'x', 'y', 'width', 'height', 'min', 'max', 'mean', 'stdev',
                                 'mode', 'white', 'clipped', 'auto_black', 'auto_white'])
                writer.writerows(rows)
        except OSError as e:
            raise ImageIOError(f"writing: {e.strerror or e}", output_path) from e
        logger.success(f"Statistics written to {output_path}")
    return rows


def run_masked(input_path, left_mask=None, top_mask=None, channel_names=None,
               safety_crop: bool = True, logger_func=print):
    """Black level and read noise of the left optical-black strip."""
    logger = create_logger(logger_func, os.path.basename(input_path))
    image = file_io.load(input_path, left_mask, top_mask)
    if not image.left_mask:
        raise CalibrationError("image lacks a left mask (use --left)", input_path)

    results = {}
    for pattern in _patterns(channel_names):
        mask = image.channel(pattern).left_mask(safety_crop)
        result = stats.analyze(mask)
        results[pattern.code] = result
        logger.info(f"  {pattern}: {mask.width}x{mask.height} px, black={result.mean:.3f} "
                    f"read noise={result.stdev:.3f} DN (min {result.min}, max {result.max})")
    return results


def run_noise(path_a, path_b, left_mask=None, top_mask=None, black_points=None, white=None,
              crop=None, logger_func=print):
    """Per-filter noise of a pair of equally exposed frames and the derived dynamic range."""
    logger = create_logger(logger_func, os.path.basename(path_a))
    image_a = open_image(path_a, left_mask, top_mask, calibrate_black=False, logger=logger)
    image_b = open_image(path_b, left_mask, top_mask, calibrate_black=False, logger=logger)
    if white is None:
        white = image_a.white_level

    results = {}
    for index, pattern in enumerate(BAYER_GEOMETRIES):
        pair = stats.subtract(_select(image_a, pattern, crop), _select(image_b, pattern, crop))
        black = (pair.a.mean + pair.b.mean) / 2
        if black_points:
            black = float(black_points[index] if len(black_points) == 4 else black_points[0])
        message = f"  {pattern}: noise={pair.stdev:.3f} DN, mean A={pair.a.mean:.3f} B={pair.b.mean:.3f}"
        if white is not None and pair.stdev > 0 and white > black:
            message += f", dynamic range={stats.dynamic_range(white, black, pair.stdev):.2f} stops"
        logger.info(message)
        results[pattern.code] = pair
    return results


def run_dpraw(combined_path, secondary_path, output_path, action=config.DEFAULT_DPRAW_ACTION,
              mode=config.DEFAULT_DPRAW_MODE, white=None, ev_shift=None, left_mask=None, top_mask=None,
              black_points=None, level_method=None, logger_func=print):
    logger = create_logger(logger_func, os.path.basename(combined_path))
    combined = open_image(combined_path, left_mask, top_mask, black_points, white, level_method, logger=logger)
    secondary = open_image(secondary_path, left_mask, top_mask, black_points, logger=logger)
    if combined.white_level is None:
        raise CalibrationError("dpraw: white level not defined (use --white)", combined_path)

    request = DprawRequest(combined, secondary, combined.white_level, ev_shift, action, mode)
    result = dpraw_process(request, logger)
    file_io.save_image(result, output_path, logger)
    logger.success(f"DPRAW {action}/{mode} written to {output_path}")
    return result


def run_clipping(input_path, output_path, left_mask=None, top_mask=None, black_points=None, white=None,
                 level_method=config.DEFAULT_LEVEL_METHOD, logger_func=print):
    logger = create_logger(logger_func, os.path.basename(input_path))
    image = open_image(input_path, left_mask, top_mask, black_points, white, level_method, logger=logger)
    if not image.black_level:
        raise CalibrationError("clipping: black level not defined (use --black or --left)", input_path)
    if os.path.splitext(output_path)[1].lower() in ('.dat', '.pgm'):
        raise ArgumentError(f"preview is RGB, use .ppm or .tif: {output_path}")

    preview = clipping(image, build_gamma_table(), logger)
    file_io.save_image(preview, output_path, logger)
    logger.success(f"Preview written to {output_path}")
    return preview

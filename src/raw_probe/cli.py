import click

from . import config, orchestrator
from .errors import ImageError


def _parse_black(ctx, param, value):
    """'128' or '128,130,129,127' (R,G1,G2,B)"""
    if value is None:
        return None
    try:
        points = [float(v) for v in value.split(',')]
    except ValueError:
        raise click.BadParameter("expected 1 or 4 comma separated numbers")
    if len(points) not in (1, 4):
        raise click.BadParameter("expected 1 or 4 comma separated numbers")
    return points


def mask_options(func):
    func = click.option(
        "--top",
        "top_mask",
        type=click.IntRange(min=0),
        default=None,
        help="Height of the top optical-black (masked) border in pixels.",
    )(func)
    func = click.option(
        "--left",
        "left_mask",
        type=click.IntRange(min=0),
        default=None,
        help="Width of the left optical-black (masked) border in pixels. Camera RAW files default to their margins.",
    )(func)
    return func


def crop_option(func):
    return click.option(
        "--crop",
        type=int,
        nargs=4,
        default=None,
        metavar="X Y W H",
        help="Rectangle in logical (sub-sampled) channel coordinates.",
    )(func)


def black_option(func):
    return click.option(
        "--black",
        "black_points",
        callback=_parse_black,
        default=None,
        help="Black point(s): one value for all filters or R,G1,G2,B. Defaults to the left mask mean.",
    )(func)


def white_option(func):
    return click.option(
        "--white",
        type=click.IntRange(min=1, max=65535),
        default=None,
        help="White point (saturation DN).",
    )(func)


def _run(func, **kwargs):
    try:
        return func(logger_func=click.echo, **kwargs)
    except ImageError as e:
        raise click.ClickException(f"[{e.kind.value}] {e}")


@click.group()
@click.version_option(package_name="raw-probe")
def main():
    """
    Image sensor characterisation from RAW pixel dumps: histograms, noise,
    black/white levels, clipping and Dual Pixel RAW processing.

    Inputs are 16-bit PGM files (e.g. `dcraw -D -4 -j -t 0`), big-endian
    .dat dumps or camera RAW files.
    """


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_path", type=click.Path(dir_okay=False))
@mask_options
@crop_option
@click.option("--bucket", type=click.IntRange(min=1), default=1, help="Merge values into buckets of this width.")
@click.option("--plot", "plot_path", type=click.Path(dir_okay=False), help="Also plot the histogram to this image file.")
def histogram(input_path, output_path, left_mask, top_mask, crop, bucket, plot_path):
    """Export the per-filter histogram of INPUT_PATH as CSV (value;R;G1;G2;B)."""
    _run(orchestrator.run_histogram, input_path=input_path, output_path=output_path,
         left_mask=left_mask, top_mask=top_mask, crop=crop, bucket=bucket, plot_path=plot_path)


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "output_path", type=click.Path(dir_okay=False), help="Write the statistics as CSV.")
@click.option(
    "--channel",
    "channel_names",
    multiple=True,
    type=click.Choice(config.CHANNEL_NAMES, case_sensitive=False),
    help="Channel(s) to analyze. Default: R, G1, G2, B.",
)
@mask_options
@crop_option
def stats(input_path, output_path, channel_names, left_mask, top_mask, crop):
    """Per-channel statistics, highlights and auto levels of an area."""
    _run(orchestrator.run_stats, input_path=input_path, output_path=output_path, channel_names=channel_names,
         left_mask=left_mask, top_mask=top_mask, crop=crop)


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@mask_options
@click.option(
    "--channel",
    "channel_names",
    multiple=True,
    type=click.Choice(config.CHANNEL_NAMES, case_sensitive=False),
    help="Channel(s) to analyze. Default: R, G1, G2, B.",
)
@click.option("--safety-crop/--no-safety-crop", default=True,
              help="Drop the pixels next to the mask edges (default).")
def masked(input_path, left_mask, top_mask, channel_names, safety_crop):
    """Black level and read noise from the left masked pixels."""
    _run(orchestrator.run_masked, input_path=input_path, left_mask=left_mask, top_mask=top_mask,
         channel_names=channel_names, safety_crop=safety_crop)


@main.command()
@click.argument("path_a", type=click.Path(exists=True, dir_okay=False))
@click.argument("path_b", type=click.Path(exists=True, dir_okay=False))
@mask_options
@black_option
@white_option
@crop_option
def noise(path_a, path_b, left_mask, top_mask, black_points, white, crop):
    """Noise of two equally exposed frames (read noise for dark frames) and dynamic range."""
    _run(orchestrator.run_noise, path_a=path_a, path_b=path_b, left_mask=left_mask, top_mask=top_mask,
         black_points=black_points, white=white, crop=crop)


@main.command()
@click.argument("combined_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("secondary_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option(
    "--action",
    default=config.DEFAULT_DPRAW_ACTION,
    type=click.Choice(config.DPRAW_ACTIONS, case_sensitive=False),
    help="geta: recover the A subframe (AB - B). blend: replace AB highlights with B.",
)
@click.option(
    "--mode",
    default=config.DEFAULT_DPRAW_MODE,
    type=click.Choice(config.DPRAW_MODES, case_sensitive=False),
    help="plain: every filter position on its own. bayer: a clipped pixel invalidates its whole 2x2 cell.",
)
@click.option("--ev-shift", type=float, default=None, help="AB exposure shift in stops (required by blend).")
@click.option(
    "--levels",
    "level_method",
    type=click.Choice(config.LEVEL_METHODS, case_sensitive=False),
    default=None,
    help="Estimate the white point from the histogram when --white is not given.",
)
@mask_options
@black_option
@white_option
def dpraw(combined_path, secondary_path, output_path, action, mode, ev_shift, level_method,
          left_mask, top_mask, black_points, white):
    """Dual Pixel RAW: merge COMBINED_PATH (A+B) and SECONDARY_PATH (B) into OUTPUT_PATH."""
    _run(orchestrator.run_dpraw, combined_path=combined_path, secondary_path=secondary_path,
         output_path=output_path, action=action.lower(), mode=mode.lower(), white=white, ev_shift=ev_shift,
         left_mask=left_mask, top_mask=top_mask, black_points=black_points, level_method=level_method)


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.option(
    "--levels",
    "level_method",
    type=click.Choice(config.LEVEL_METHODS, case_sensitive=False),
    default=config.DEFAULT_LEVEL_METHOD,
    help="White point estimation when --white is not given.",
)
@mask_options
@black_option
@white_option
def clipping(input_path, output_path, level_method, left_mask, top_mask, black_points, white):
    """Half-size grey preview with clipped filters highlighted in colour (.ppm or .tif)."""
    _run(orchestrator.run_clipping, input_path=input_path, output_path=output_path, left_mask=left_mask,
         top_mask=top_mask, black_points=black_points, white=white, level_method=level_method.lower())


if __name__ == "__main__":
    main()

# src/hybridimg/cli/main.py
"""
Command-line interface: hybrid images, filters and scale pyramids.

Usage:
    hybridimg hybrid LOW_PATH HIGH_PATH OUTPUT [--low-sigma S] [--high-sigma S]
    hybridimg lowpass INPUT OUTPUT [--sigma S]
    hybridimg highpass INPUT OUTPUT [--sigma S] [--raw]
    hybridimg pyramid INPUT OUTPUT [--levels N]
    hybridimg convolve INPUT OUTPUT KERNEL_FILE
    hybridimg kernel [--sigma S]

Option defaults can be loaded with --settings FILE (json or csv) placed
before the subcommand.
"""
from __future__ import annotations

import contextlib
import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import click
import numpy as np

from hybridimg import __version__
from hybridimg.cli.settings import (
    SettingsError,
    build_default_map,
    load_settings,
    save_settings,
)
from hybridimg.conv2d import convolve_image, gaussian_kernel, validate_kernel
from hybridimg.errors import HybridImageError
from hybridimg.hybrid import display_high_pass, make_high_pass, make_hybrid, make_low_pass
from hybridimg.io import read_image, write_image
from hybridimg.pyramid import generate_scaled_images

logger = logging.getLogger(__name__)

MODES = ["L", "RGB", "RGBA"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@contextlib.contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except (HybridImageError, SettingsError) as exc:
        raise click.ClickException(str(exc)) from exc
    except OSError as exc:
        # Pillow raises UnidentifiedImageError (an OSError) for bad files
        raise click.ClickException(f"I/O error: {exc}") from exc


def _remember(ctx: click.Context, options: Dict[str, Any]) -> None:
    """Save this command's options when --save-settings was given."""
    path: Optional[Path] = (ctx.obj or {}).get("save_settings_path")
    if path is None:
        return
    save_settings(path, options, command=ctx.info_name)
    logger.debug("saved settings for %s to %s", ctx.info_name, path)


def _saved(path: Path, what: str) -> None:
    click.echo(f"Saved {what} → {path}")


def _load_kernel_file(path: Path) -> np.ndarray:
    """Kernel from a JSON list of rows or a CSV file with one row per line."""
    if path.suffix.lower() == ".csv":
        with path.open("r", newline="", encoding="utf-8") as handle:
            rows = [[float(v) for v in row] for row in csv.reader(handle) if row]
    else:
        with path.open("r", encoding="utf-8") as handle:
            rows = json.load(handle)
    return validate_kernel(rows)


def _workers_option(fn):
    return click.option(
        "--workers",
        default=1,
        show_default=True,
        type=click.IntRange(min=1),
        help="Threads per convolution (row bands).",
    )(fn)


def _mode_option(fn):
    return click.option(
        "--mode",
        default="RGB",
        show_default=True,
        type=click.Choice(MODES),
        help="Pillow mode images are converted to on load.",
    )(fn)


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(__version__, prog_name="hybridimg")
@click.option(
    "--settings",
    "settings_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Load option defaults from a settings file (json or csv).",
)
@click.option(
    "--save-settings",
    "save_settings_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Save the subcommand's option values to a settings file (json or csv).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def cli(ctx, settings_path, save_settings_path, verbose):
    """Hybrid images, Gaussian filtering and scale pyramids."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["save_settings_path"] = save_settings_path

    if settings_path is not None:
        with _reported_errors():
            data = load_settings(settings_path)
        ctx.default_map = build_default_map(data, list(cli.commands))
        logger.debug("loaded settings from %s", settings_path)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("low_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("high_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--low-sigma", default=4.0, show_default=True, type=float, help="Sigma of the low-pass filter.")
@click.option("--high-sigma", default=2.0, show_default=True, type=float, help="Sigma of the high-pass filter.")
@click.option(
    "--pyramid",
    "pyramid_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also save a scale pyramid of the hybrid image here.",
)
@click.option(
    "--save-components",
    "components_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Also save the low-pass and (shifted) high-pass images in this folder.",
)
@_workers_option
@_mode_option
@click.pass_context
def hybrid(ctx, low_path, high_path, output, low_sigma, high_sigma, pyramid_path, components_dir, workers, mode):
    """Low frequencies of LOW_PATH plus high frequencies of HIGH_PATH."""
    with _reported_errors():
        low_img = read_image(low_path, mode=mode)
        high_img = read_image(high_path, mode=mode)

        out = make_hybrid(low_img, low_sigma, high_img, high_sigma, workers=workers)
        write_image(output, out)
        _saved(output, "hybrid image")

        if components_dir is not None:
            low_out = components_dir / f"{low_path.stem}_low.png"
            high_out = components_dir / f"{high_path.stem}_high.png"
            write_image(low_out, make_low_pass(low_img, low_sigma, workers=workers))
            _saved(low_out, "low-pass image")
            write_image(
                high_out,
                display_high_pass(make_high_pass(high_img, high_sigma, workers=workers)),
            )
            _saved(high_out, "high-pass image")

        if pyramid_path is not None:
            write_image(pyramid_path, generate_scaled_images(out))
            _saved(pyramid_path, "pyramid")

        _remember(ctx, {"low_sigma": low_sigma, "high_sigma": high_sigma, "workers": workers, "mode": mode})


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--sigma", default=4.0, show_default=True, type=float)
@_workers_option
@_mode_option
@click.pass_context
def lowpass(ctx, input_path, output, sigma, workers, mode):
    """Gaussian blur of INPUT_PATH."""
    with _reported_errors():
        img = read_image(input_path, mode=mode)
        write_image(output, make_low_pass(img, sigma, workers=workers))
        _saved(output, "low-pass image")
        _remember(ctx, {"sigma": sigma, "workers": workers, "mode": mode})


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--sigma", default=2.0, show_default=True, type=float)
@click.option("--raw", is_flag=True, default=False, help="Skip the +0.5 display shift.")
@_workers_option
@_mode_option
@click.pass_context
def highpass(ctx, input_path, output, sigma, raw, workers, mode):
    """Fine detail of INPUT_PATH (image minus its Gaussian blur)."""
    with _reported_errors():
        img = read_image(input_path, mode=mode)
        out = make_high_pass(img, sigma, workers=workers)
        if not raw:
            out = display_high_pass(out)
        write_image(output, out)
        _saved(output, "high-pass image")
        _remember(ctx, {"sigma": sigma, "raw": raw, "workers": workers, "mode": mode})


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--levels", default=4, show_default=True, type=click.IntRange(min=1))
@_mode_option
@click.pass_context
def pyramid(ctx, input_path, output, levels, mode):
    """INPUT_PATH at successive half scales, side by side."""
    with _reported_errors():
        img = read_image(input_path, mode=mode)
        write_image(output, generate_scaled_images(img, levels=levels))
        _saved(output, "pyramid")
        _remember(ctx, {"levels": levels, "mode": mode})


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("kernel_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--offset", default=0.0, show_default=True, type=float, help="Added to the result before saving.")
@click.option("--progress/--no-progress", default=False, help="Progress bar over channels.")
@_workers_option
@_mode_option
@click.pass_context
def convolve(ctx, input_path, output, kernel_path, offset, progress, workers, mode):
    """Convolve INPUT_PATH with the kernel in KERNEL_PATH (json rows or csv)."""
    with _reported_errors():
        try:
            kernel = _load_kernel_file(kernel_path)
        except (json.JSONDecodeError, ValueError) as exc:
            raise click.ClickException(f"Cannot read kernel {kernel_path}: {exc}") from exc
        img = read_image(input_path, mode=mode)
        out = convolve_image(img, kernel, workers=workers, progress=progress)
        if offset:
            out = out.add_scalar(offset)
        write_image(output, out)
        _saved(output, "convolved image")
        _remember(ctx, {"offset": offset, "progress": progress, "workers": workers, "mode": mode})


@cli.command()
@click.option("--sigma", default=1.0, show_default=True, type=float)
@click.option("--precision", default=4, show_default=True, type=click.IntRange(min=0))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as a JSON list of rows.")
def kernel(sigma, precision, as_json):
    """Print the Gaussian kernel for SIGMA."""
    with _reported_errors():
        k = gaussian_kernel(sigma)
    if as_json:
        click.echo(json.dumps(np.round(k, precision).tolist()))
        return
    click.echo(f"# sigma={sigma:g} size={k.shape[0]}x{k.shape[1]} sum={k.sum():.6f}")
    click.echo(np.array2string(k, precision=precision, suppress_small=True, max_line_width=200))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

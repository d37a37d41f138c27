# tests/test_cli.py
import json
from pathlib import Path

import numpy as np
from click.testing import CliRunner
from PIL import Image

from hybridimg.cli.main import cli


def _size(path: Path):
    with Image.open(path) as im:
        return im.size


def test_hybrid_command(png_pair, tmp_path):
    low, high = png_pair
    out = tmp_path / "out" / "hybrid.png"
    parts = tmp_path / "parts"
    pyr = tmp_path / "pyr.png"

    result = CliRunner().invoke(
        cli,
        [
            "hybrid", str(low), str(high), str(out),
            "--low-sigma", "2", "--high-sigma", "1",
            "--save-components", str(parts),
            "--pyramid", str(pyr),
            "--workers", "2",
        ],
    )

    assert result.exit_code == 0, result.output
    assert _size(out) == (40, 32)
    assert (parts / "low_low.png").exists()
    assert (parts / "high_high.png").exists()
    # widths 40 + 20 + 10 + 5, height 32
    assert _size(pyr) == (75, 32)


def test_hybrid_size_mismatch_is_reported(png_pair, png_square, tmp_path):
    low, _ = png_pair
    result = CliRunner().invoke(cli, ["hybrid", str(low), str(png_square), str(tmp_path / "x.png")])
    assert result.exit_code == 1
    assert "differ in shape" in result.output


def test_lowpass_highpass_pyramid(png_square, tmp_path):
    runner = CliRunner()
    low = tmp_path / "low.png"
    high = tmp_path / "high.png"
    pyr = tmp_path / "pyr.png"

    assert runner.invoke(cli, ["lowpass", str(png_square), str(low), "--sigma", "1.5"]).exit_code == 0
    assert runner.invoke(cli, ["highpass", str(png_square), str(high), "--sigma", "1"]).exit_code == 0
    assert runner.invoke(cli, ["pyramid", str(png_square), str(pyr)]).exit_code == 0

    assert _size(low) == (64, 64)
    assert _size(pyr) == (120, 64)

    # a smooth gradient has almost no detail: shifted high-pass sits near mid-grey
    with Image.open(high) as im:
        centre = np.asarray(im.convert("RGB"), dtype=float)[16:48, 16:48]
    assert abs(centre.mean() - 127.5) < 3.0


def test_invalid_sigma(png_square, tmp_path):
    result = CliRunner().invoke(cli, ["lowpass", str(png_square), str(tmp_path / "o.png"), "--sigma", "0"])
    assert result.exit_code == 1
    assert "sigma" in result.output


def test_convolve_with_kernel_file(png_square, tmp_path):
    kernel_path = tmp_path / "k.json"
    kernel_path.write_text(json.dumps([[0, 0, 0], [0, 1, 0], [0, 0, 0]]))
    out = tmp_path / "same.png"

    result = CliRunner().invoke(cli, ["convolve", str(png_square), str(out), str(kernel_path)])
    assert result.exit_code == 0, result.output

    with Image.open(out) as a, Image.open(png_square) as b:
        np.testing.assert_array_equal(np.asarray(a.convert("RGB")), np.asarray(b.convert("RGB")))


def test_convolve_ragged_kernel_csv(png_square, tmp_path):
    kernel_path = tmp_path / "k.csv"
    kernel_path.write_text("1,2,3\n4,5\n")
    result = CliRunner().invoke(cli, ["convolve", str(png_square), str(tmp_path / "o.png"), str(kernel_path)])
    assert result.exit_code == 1
    assert "ragged" in result.output


def test_kernel_command_json():
    result = CliRunner().invoke(cli, ["kernel", "--sigma", "0.5", "--json", "--precision", "8"])
    assert result.exit_code == 0
    k = np.array(json.loads(result.output))
    assert k.shape == (5, 5)
    assert abs(k.sum() - 1.0) < 1e-6


def test_settings_file_supplies_defaults(png_square, tmp_path):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"lowpass": {"sigma": -1.0}}))

    result = CliRunner().invoke(
        cli, ["--settings", str(settings), "lowpass", str(png_square), str(tmp_path / "o.png")]
    )
    assert result.exit_code == 1
    assert "sigma" in result.output


def test_save_settings(png_square, tmp_path):
    saved = tmp_path / "cfg" / "saved.json"
    result = CliRunner().invoke(
        cli,
        [
            "--save-settings", str(saved),
            "pyramid", str(png_square), str(tmp_path / "p.png"), "--levels", "3",
        ],
    )
    assert result.exit_code == 0, result.output

    data = json.loads(saved.read_text())
    assert data["pyramid"]["levels"] == 3

    # loading them back reproduces the 3-level canvas: 64 + 32 + 16
    out = tmp_path / "p2.png"
    result = CliRunner().invoke(cli, ["--settings", str(saved), "pyramid", str(png_square), str(out)])
    assert result.exit_code == 0, result.output
    assert _size(out) == (112, 64)


def test_missing_settings_file(png_square, tmp_path):
    result = CliRunner().invoke(
        cli, ["--settings", str(tmp_path / "nope.json"), "kernel"]
    )
    assert result.exit_code == 1
    assert "not found" in result.output


def test_csv_settings_roundtrip(png_square, tmp_path):
    saved = tmp_path / "saved.csv"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["--save-settings", str(saved), "pyramid", str(png_square), str(tmp_path / "p.png"), "--levels", "2"],
    )
    assert result.exit_code == 0, result.output
    result = runner.invoke(
        cli,
        ["--save-settings", str(saved), "lowpass", str(png_square), str(tmp_path / "l.png"), "--sigma", "1.5"],
    )
    assert result.exit_code == 0, result.output

    lines = saved.read_text().splitlines()
    assert lines[0] == "command,key,value"
    assert "pyramid,levels,2" in lines
    assert "lowpass,sigma,1.5" in lines

    # pyramid picks up its own section only: 64 + 32
    out = tmp_path / "p2.png"
    result = runner.invoke(cli, ["--settings", str(saved), "pyramid", str(png_square), str(out)])
    assert result.exit_code == 0, result.output
    assert _size(out) == (96, 64)

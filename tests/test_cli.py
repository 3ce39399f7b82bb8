"""Tests for the Typer command line interface."""

import json

from typer.testing import CliRunner

from iCrop.cli import app
from iCrop.core.raster import Raster
from iCrop.editor import ImageEditor

runner = CliRunner()


def test_info_prints_size(image_file):
    result = runner.invoke(app, ["info", str(image_file)])
    assert result.exit_code == 0, result.output
    assert "40x30" in result.output


def test_crop_writes_output(image_file, tmp_path):
    output = tmp_path / "cropped.png"
    result = runner.invoke(
        app,
        ["crop", str(image_file), str(output), "--x", "10", "--y", "5", "--width", "20", "--height", "10"],
    )
    assert result.exit_code == 0, result.output
    assert Raster.open(output).image.size == (20, 10)


def test_crop_applies_ratio(image_file, tmp_path):
    output = tmp_path / "square.png"
    result = runner.invoke(
        app,
        ["crop", str(image_file), str(output), "--width", "20", "--height", "10", "--ratio", "1"],
    )
    assert result.exit_code == 0, result.output
    assert Raster.open(output).image.size == (20, 20)


def test_crop_force_skips_constraints(image_file, tmp_path):
    output = tmp_path / "forced.png"
    result = runner.invoke(
        app,
        [
            "crop", str(image_file), str(output),
            "--width", "20", "--height", "10", "--min-width", "30", "--force",
        ],
    )
    assert result.exit_code == 0, result.output
    assert Raster.open(output).image.size == (20, 10)


def test_crop_empty_selection_fails(image_file, tmp_path):
    output = tmp_path / "empty.png"
    result = runner.invoke(
        app,
        ["crop", str(image_file), str(output), "--width", "0", "--height", "0", "--force"],
    )
    assert result.exit_code == 1
    assert not output.exists()


def test_crop_without_crop_plugin_fails(image_file, tmp_path, monkeypatch):
    monkeypatch.setattr(ImageEditor, "plugin", lambda self, name: None)
    output = tmp_path / "none.png"
    result = runner.invoke(
        app,
        ["crop", str(image_file), str(output), "--width", "10", "--height", "10"],
    )
    assert result.exit_code == 1
    assert "crop plugin is not available" in result.output
    assert not output.exists()


def test_crop_invalid_ratio_fails(image_file, tmp_path):
    result = runner.invoke(
        app,
        ["crop", str(image_file), str(tmp_path / "x.png"), "--width", "5", "--height", "5", "--ratio", "0"],
    )
    assert result.exit_code == 1
    assert "Error" in result.output


def test_replay_applies_steps(image_file, tmp_path):
    steps = tmp_path / "steps.json"
    steps.write_text(
        json.dumps(
            [
                {"type": "crop", "left": 0, "top": 0, "width": 0.5, "height": 1},
                {"type": "rotate", "angle": 90},
            ]
        ),
        encoding="utf-8",
    )
    output = tmp_path / "replayed.png"

    result = runner.invoke(app, ["replay", str(image_file), str(steps), str(output)])

    assert result.exit_code == 0, result.output
    assert Raster.open(output).image.size == (30, 20)


def test_replay_rejects_unknown_step(image_file, tmp_path):
    steps = tmp_path / "steps.json"
    steps.write_text(json.dumps([{"type": "sharpen"}]), encoding="utf-8")
    result = runner.invoke(app, ["replay", str(image_file), str(steps), str(tmp_path / "out.png")])
    assert result.exit_code == 1


def test_replay_rejects_malformed_json(image_file, tmp_path):
    steps = tmp_path / "steps.json"
    steps.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["replay", str(image_file), str(steps), str(tmp_path / "out.png")])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_verbose_flag_is_accepted(image_file):
    result = runner.invoke(app, ["--verbose", "info", str(image_file)])
    assert result.exit_code == 0, result.output

"""
Tests for the command line parser.
"""

import pytest

from spindle_generator.cli import build_parser, main


def test_defaults():
    args = build_parser().parse_args([])
    assert args.config is None
    assert args.output_folder is None
    assert args.kinds is None
    assert not args.dry_run
    assert not args.check_metadata


def test_options():
    args = build_parser().parse_args([
        "-c", "config.yaml",
        "-o", "out",
        "-t", "templates",
        "--kind", "readers",
        "--kind", "policies",
        "--dry-run",
        "--no-color",
    ])
    assert args.config == "config.yaml"
    assert args.output_folder == "out"
    assert args.template_folder == "templates"
    assert args.kinds == ["readers", "policies"]
    assert args.dry_run
    assert args.no_color


def test_unknown_kind_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--kind", "widgets"])


def test_missing_config_file_exits_with_error(tmp_path):
    with pytest.raises(SystemExit) as raised:
        main(["-c", str(tmp_path / "missing.yaml"), "--no-color"])
    assert raised.value.code == 1

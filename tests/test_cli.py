import argparse
from collections.abc import Callable
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

import lls_gen


def test_import_module_smoke() -> None:
    assert callable(lls_gen.main)


def test_build_argument_parser_exposes_surface_and_defaults() -> None:
    parser = lls_gen.build_argument_parser()
    option_actions = {
        option: action for action in parser._actions for option in action.option_strings
    }

    assert {"--api-json", "--output-dir", "--clean", "--package"}.issubset(
        option_actions.keys()
    )
    assert option_actions["--api-json"].default == lls_gen.DEFAULT_API_JSON
    assert option_actions["--output-dir"].default == lls_gen.DEFAULT_OUTPUT_DIR
    assert option_actions["--clean"].default is False
    assert option_actions["--package"].default is None


def test_parse_args_maps_paths(existing_paths: dict[str, Path]) -> None:
    args = lls_gen.parse_args(
        [
            "--api-json",
            str(existing_paths["api_json"]),
            "--output-dir",
            str(existing_paths["output_dir"]),
            "--clean",
            "--package",
            "lovr.zip",
        ]
    )

    assert args.api_json == existing_paths["api_json"]
    assert isinstance(args.output_dir, Path)
    assert args.clean is True
    assert args.package == Path("lovr.zip")


def test_parse_args_unknown_flag_exits_with_code_2() -> None:
    with pytest.raises(SystemExit) as exc_info:
        lls_gen.parse_args(["--not-a-flag"])

    assert exc_info.value.code == 2


def test_validate_config_returns_frozen_generate_config(
    make_args: Callable[..., argparse.Namespace],
    existing_paths: dict[str, Path],
) -> None:
    config = lls_gen.validate_config(make_args(clean=True))

    assert isinstance(config, lls_gen.GenerateConfig)
    assert config.api_json == existing_paths["api_json"]
    assert config.output_dir == existing_paths["output_dir"]
    assert config.clean is True
    assert config.package is None
    with pytest.raises(FrozenInstanceError):
        config.clean = False  # type: ignore[misc]


def test_validate_config_missing_api_json_has_download_hint(
    make_args: Callable[..., argparse.Namespace], tmp_path: Path
) -> None:
    with pytest.raises(lls_gen.ConfigError) as exc_info:
        lls_gen.validate_config(make_args(api_json=tmp_path / "missing.json"))

    assert exc_info.value.code == "PATH_NOT_FOUND"
    assert "--api-json" in exc_info.value.message
    assert "https://lovr.org/api/data" in (exc_info.value.suggestion or "")


def test_validate_config_none_path_is_rejected(
    make_args: Callable[..., argparse.Namespace],
) -> None:
    with pytest.raises(lls_gen.ConfigError) as exc_info:
        lls_gen.validate_config(make_args(api_json=None))

    assert exc_info.value.code == "PATH_NOT_FOUND"


def test_validate_config_package_must_be_zip(
    make_args: Callable[..., argparse.Namespace],
) -> None:
    with pytest.raises(lls_gen.ConfigError) as exc_info:
        lls_gen.validate_config(make_args(package=Path("lovr.tar")))

    assert exc_info.value.code == "INVALID_PACKAGE_PATH"


def test_validate_config_accepts_zip_package(
    make_args: Callable[..., argparse.Namespace],
) -> None:
    config = lls_gen.validate_config(make_args(package=Path("dist/lovr.zip")))

    assert config.package == Path("dist/lovr.zip")


def test_config_error_rejects_unknown_code() -> None:
    with pytest.raises(ValueError):
        lls_gen.ConfigError("NOPE", "message")


def test_main_config_error_exits_1_with_hint(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        lls_gen.main(["--api-json", str(tmp_path / "missing.json")])

    assert exc_info.value.code == 1
    out = capsys.readouterr().out
    assert "Config error [PATH_NOT_FOUND]" in out
    assert "Hint:" in out


def test_main_generate_error_exits_1(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    api_json = tmp_path / "api.json"
    api_json.write_text('{"modules": []}', encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        lls_gen.main(
            ["--api-json", str(api_json), "--output-dir", str(tmp_path / "out")]
        )

    assert exc_info.value.code == 1
    assert "Error [INPUT_MALFORMED]" in capsys.readouterr().out


def test_main_success_returns_normally(existing_paths: dict[str, Path]) -> None:
    lls_gen.main(
        [
            "--api-json",
            str(existing_paths["api_json"]),
            "--output-dir",
            str(existing_paths["output_dir"]),
        ]
    )

    assert (existing_paths["output_dir"] / "lovr.lua").exists()

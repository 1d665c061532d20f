import argparse
import json
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import lls_gen  # noqa: E402


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    api_json = tmp_path / "api.json"
    api_json.write_text('{"modules": [], "callbacks": []}\n', encoding="utf-8")

    output_dir = tmp_path / "out"
    return {
        "api_json": api_json,
        "output_dir": output_dir,
    }


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "api_json": existing_paths["api_json"],
            "output_dir": existing_paths["output_dir"],
            "clean": False,
            "package": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_argument() -> Callable[..., lls_gen.Argument]:
    def _make_argument(
        name: str,
        type_name: str = "number",
        *,
        description: str = "",
        default: str | None = None,
    ) -> lls_gen.Argument:
        return lls_gen.Argument(
            name=name, type=type_name, description=description, default=default
        )

    return _make_argument


@pytest.fixture
def make_function() -> Callable[..., lls_gen.FunctionDef]:
    def _make_function(
        name: str,
        *,
        key: str | None = None,
        description: str = "",
        variants: tuple[lls_gen.Variant, ...] = (lls_gen.Variant(),),
        related: tuple[str, ...] = (),
    ) -> lls_gen.FunctionDef:
        return lls_gen.FunctionDef(
            key=key or name,
            name=name,
            description=description,
            variants=variants,
            related=related,
        )

    return _make_function


@pytest.fixture
def make_module() -> Callable[..., lls_gen.ModuleDef]:
    def _make_module(
        key: str,
        *,
        description: str = "",
        external: bool = False,
        enums: tuple[lls_gen.EnumDef, ...] = (),
        functions: tuple[lls_gen.FunctionDef, ...] = (),
        objects: tuple[lls_gen.ObjectDef, ...] = (),
    ) -> lls_gen.ModuleDef:
        return lls_gen.ModuleDef(
            key=key,
            description=description,
            external=external,
            enums=enums,
            functions=functions,
            objects=objects,
        )

    return _make_module


@pytest.fixture
def event_module_data() -> dict[str, object]:
    return {
        "key": "lovr.event",
        "name": "event",
        "external": False,
        "description": "The `lovr.event` module handles events.",
        "enums": [],
        "functions": [
            {
                "key": "lovr.event.clear",
                "name": "clear",
                "description": "Clears.",
                "related": [],
                "variants": [{"arguments": [], "returns": []}],
            }
        ],
        "objects": [],
    }


@pytest.fixture
def write_api_json(tmp_path: Path) -> Callable[[object], Path]:
    def _write_api_json(data: object) -> Path:
        path = tmp_path / "api.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write_api_json

"""LuaLS annotation generator for the LÖVR API.

Reads the LÖVR API description (api.json, as published at
https://lovr.org/api/data) and writes one `---@meta` stub file per module
into a lua-language-server addon library directory.

Usage:
    curl -o api.json https://lovr.org/api/data
    python lls_gen.py --api-json api.json --output-dir lovr --clean
"""

import argparse
import json
import shutil
import zipfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
DEFAULT_API_JSON = PROJECT_ROOT / "api.json"
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "lovr"

ROOT_NAMESPACE = "lovr"
OUTPUT_EXTENSION = ".lua"


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    api_json: Path
    output_dir: Path
    clean: bool
    package: Path | None


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "INVALID_PACKAGE_PATH",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


VALID_GENERATE_ERROR_CODES = {
    "INPUT_UNAVAILABLE",
    "INPUT_MALFORMED",
    "OUTPUT_UNWRITABLE",
}


class GenerateError(Exception):
    """Fatal generation failure. Every instance aborts the run."""

    def __init__(self, code: str, message: str):
        if code not in VALID_GENERATE_ERROR_CODES:
            raise ValueError(f"Unknown generate error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def validate_package_path(path: Path) -> Path:
    if path.suffix == ".zip":
        return path
    raise ConfigError(
        "INVALID_PACKAGE_PATH",
        f"Package archive must be a .zip file: {path}",
        "Pass a path ending in .zip, for example --package lovr.zip",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate lua-language-server annotations for the LÖVR API"
    )

    parser.add_argument("--api-json", type=Path, default=DEFAULT_API_JSON)
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--clean", action="store_true", default=False)
    parser.add_argument("--package", type=Path, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig:
    api_json = validate_path_exists(
        args.api_json,
        "--api-json",
        "Download the API description first:\n"
        "  curl -o api.json https://lovr.org/api/data\n"
        "Or pass a custom path: --api-json /your/path/to/api.json",
    )
    package = (
        validate_package_path(args.package) if args.package is not None else None
    )

    return GenerateConfig(
        api_json=api_json,
        output_dir=args.output_dir,
        clean=bool(args.clean),
        package=package,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig:
    return validate_config(parse_args(argv))


# ===--- Constants ---=== #

LUA_RESERVED = {
    "and",
    "break",
    "do",
    "else",
    "elseif",
    "end",
    "false",
    "for",
    "function",
    "if",
    "in",
    "local",
    "nil",
    "not",
    "or",
    "repeat",
    "return",
    "then",
    "true",
    "until",
    "while",
}

ANY_TYPE = "any"
VARIADIC = "..."

OPERATORS = {
    "add": "add",
    "sub": "sub",
    "div": "div",
    "mul": "mul",
    # "equals": "eq",
    # "length": "len",
}

SWIZZLE_COMPONENTS = {
    "Vec2": ("x", "y"),
    "Vec3": ("x", "y", "z"),
    "Vec4": ("x", "y", "z", "w"),
    "Quat": ("x", "y", "z", "w"),
}

SWIZZLE2_BASE = ("xy", "yx", "xx", "yy")
SWIZZLE2_VEC3 = ("xz", "yz", "zx", "zy")
SWIZZLE2_VEC4 = ("xw", "yw", "zw", "wx", "wy", "wz")

SWIZZLE3_BASE = ("xyz", "xzy", "yxz", "yzx", "zxy", "zyx", "xxx", "yyy", "zzz")
SWIZZLE3_VEC4 = ("xyw", "xzw", "yzw", "xyz", "wxy", "wxz", "wyz")

SWIZZLE4 = (
    "xyzw", "xywz", "xzyw", "xzwy", "xwyz", "xwzy",
    "yxzw", "yxwz", "yzxw", "yzwx", "ywxz", "ywzx",
    "zxyw", "zxwy", "zyxw", "zywx", "zwxy", "zwyx",
    "wxyz", "wxzy", "wyxz", "wyzx", "wzxy", "wzyx",
    "xxxx", "yyyy", "zzzz", "wwww",
)  # fmt: skip

SWIZZLE_SHAPE = "{ [string]: number|Vec2|Vec3|Vec4 }"
MODULE_SHAPE = "{ [any]: any }"

INDEX_DIAGNOSTICS = (
    "---@diagnostic disable: inject-field",
    "---@diagnostic disable: duplicate-set-field",
)

GLOBAL_SHORTCUTS = ("vec2", "vec3", "vec4", "mat4", "quat")
MATH_MODULE = "lovr.math"


# ===--- Data classes ---=== #


@dataclass(frozen=True)
class Argument:
    name: str
    type: str
    description: str = ""
    default: str | None = None


@dataclass(frozen=True)
class Return:
    type: str
    description: str | None = None


@dataclass(frozen=True)
class Variant:
    arguments: tuple[Argument, ...] = ()
    returns: tuple[Return, ...] = ()


@dataclass(frozen=True)
class FunctionDef:
    key: str
    name: str
    description: str
    variants: tuple[Variant, ...]
    related: tuple[str, ...] = ()


@dataclass(frozen=True)
class EnumValue:
    name: str
    description: str = ""


@dataclass(frozen=True)
class EnumDef:
    name: str
    description: str
    values: tuple[EnumValue, ...]


@dataclass(frozen=True)
class ObjectDef:
    key: str
    name: str
    methods: tuple[FunctionDef, ...]
    constructors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleDef:
    key: str
    description: str
    external: bool = False
    enums: tuple[EnumDef, ...] = ()
    functions: tuple[FunctionDef, ...] = ()
    objects: tuple[ObjectDef, ...] = ()

    @property
    def name(self) -> str:
        """Bare namespace name, the last dotted segment of the key."""
        return module_name(self.key)


@dataclass(frozen=True)
class ApiDocument:
    modules: tuple[ModuleDef, ...]
    callbacks: tuple[FunctionDef, ...]


def module_name(key: str) -> str:
    return key.rsplit(".", 1)[-1]


# ===--- Loader ---=== #


def _format_default(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_argument(raw: Mapping) -> Argument:
    default = raw.get("default")
    return Argument(
        name=raw["name"],
        type=raw["type"],
        description=raw.get("description") or "",
        default=None if default is None else _format_default(default),
    )


def _parse_return(raw: Mapping) -> Return:
    return Return(type=raw["type"], description=raw.get("description"))


def _parse_variant(raw: Mapping) -> Variant:
    return Variant(
        arguments=tuple(_parse_argument(a) for a in raw.get("arguments") or ()),
        returns=tuple(_parse_return(r) for r in raw.get("returns") or ()),
    )


def _parse_function(raw: Mapping) -> FunctionDef:
    variants = tuple(_parse_variant(v) for v in raw.get("variants") or ())
    if not variants:
        raise GenerateError(
            "INPUT_MALFORMED", f"Function {raw.get('key')!r} has no variants"
        )
    return FunctionDef(
        key=raw["key"],
        name=raw["name"],
        description=raw.get("description") or "",
        variants=variants,
        related=tuple(raw.get("related") or ()),
    )


def _parse_enum(raw: Mapping) -> EnumDef:
    return EnumDef(
        name=raw["name"],
        description=raw.get("description") or "",
        values=tuple(
            EnumValue(name=v["name"], description=v.get("description") or "")
            for v in raw.get("values") or ()
        ),
    )


def _parse_object(raw: Mapping) -> ObjectDef:
    return ObjectDef(
        key=raw.get("key", raw["name"]),
        name=raw["name"],
        methods=tuple(_parse_function(m) for m in raw.get("methods") or ()),
        constructors=tuple(raw.get("constructors") or ()),
    )


def _parse_module(raw: Mapping) -> ModuleDef:
    return ModuleDef(
        key=raw["key"],
        description=raw.get("description") or "",
        external=bool(raw.get("external", False)),
        enums=tuple(_parse_enum(e) for e in raw.get("enums") or ()),
        functions=tuple(_parse_function(f) for f in raw.get("functions") or ()),
        objects=tuple(_parse_object(o) for o in raw.get("objects") or ()),
    )


def parse_document(data: object) -> ApiDocument:
    """Build an ApiDocument from already-decoded JSON data.

    Only the top-level `modules` and `callbacks` collections are checked.
    Entries missing a required name/key/type are reported as malformed;
    anything else is trusted.

    Raises:
        GenerateError: INPUT_MALFORMED if a required collection or field
            is missing.
    """
    if not isinstance(data, Mapping):
        raise GenerateError(
            "INPUT_MALFORMED",
            f"API document must be a JSON object, got {type(data).__name__}",
        )
    for collection in ("modules", "callbacks"):
        if collection not in data:
            raise GenerateError(
                "INPUT_MALFORMED",
                f"API document has no top-level '{collection}' collection",
            )

    try:
        return ApiDocument(
            modules=tuple(_parse_module(m) for m in data["modules"]),
            callbacks=tuple(_parse_function(c) for c in data["callbacks"]),
        )
    except (KeyError, TypeError, AttributeError) as err:
        raise GenerateError(
            "INPUT_MALFORMED", f"API document entry is missing data: {err!r}"
        ) from err


def load_document(path: Path) -> ApiDocument:
    """Read and parse the API description at `path`.

    Raises:
        GenerateError: INPUT_UNAVAILABLE if the file cannot be read,
            INPUT_MALFORMED if it is not valid JSON or lacks the required
            collections.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as err:
        raise GenerateError(
            "INPUT_UNAVAILABLE", f"Could not read API document {path}: {err}"
        ) from err
    except UnicodeDecodeError as err:
        raise GenerateError(
            "INPUT_MALFORMED", f"API document {path} is not UTF-8: {err}"
        ) from err

    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise GenerateError(
            "INPUT_MALFORMED", f"API document {path} is not valid JSON: {err}"
        ) from err

    return parse_document(data)


# ===--- Type and name normalization ---=== #


def _matching_brace(text: str, start: int) -> int | None:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "{":
            depth += 1
        elif text[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _split_top_level(text: str, separator: str = "|") -> list[str]:
    pieces = []
    depth = 0
    current = []
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == separator and depth == 0:
            pieces.append("".join(current))
            current = []
        else:
            current.append(char)
    pieces.append("".join(current))
    return pieces


def normalize_type(raw: str) -> str:
    if raw == "*":
        return ANY_TYPE
    # Only a brace pair spanning the whole string marks an array.
    if raw.startswith("{") and _matching_brace(raw, 0) == len(raw) - 1:
        pieces = [normalize_type(p.strip()) for p in _split_top_level(raw[1:-1])]
        if len(pieces) == 1:
            return f"{pieces[0]}[]"
        return f"({'|'.join(pieces)})[]"
    return raw


def sanitize_param_name(raw: str) -> str:
    if raw.startswith(VARIADIC):
        return VARIADIC
    if raw in LUA_RESERVED:
        return f"{raw}_"
    return raw


def normalize_related(name: str) -> str:
    return name.replace(":", ".")


# ===--- Declaration emitter ---=== #


def comment_lines(text: str) -> list[str]:
    lines = text.replace("\r", "\n").split("\n")
    return [f"--- {line}" for line in lines if line]


def single_line(text: str) -> str:
    return text.replace("\n", "")


def render_enum(enum: EnumDef) -> list[str]:
    lines = comment_lines(enum.description)
    lines.append(f"---@alias {enum.name}")
    for value in enum.values:
        lines.append(f"---| '\"{value.name}\"' # {single_line(value.description)}")
    lines.append("")
    return lines


def _return_list(variant: Variant) -> str:
    if not variant.returns:
        return ""
    return ": " + ", ".join(normalize_type(ret.type) for ret in variant.returns)


def render_overload(variant: Variant) -> str:
    params = []
    for arg in variant.arguments:
        name = sanitize_param_name(arg.name)
        if arg.default is not None:
            name += "?"
        params.append(f"{name}: {normalize_type(arg.type)}")
    return f"---@overload fun({', '.join(params)}){_return_list(variant)}"


def render_param(arg: Argument) -> str:
    optional = "?" if arg.default is not None else ""
    line = (
        f"---@param {sanitize_param_name(arg.name)} "
        f"{normalize_type(arg.type)}{optional} # {single_line(arg.description)}"
    )
    if arg.default is not None:
        line += f" (default: {arg.default})"
    return line


def render_return(ret: Return) -> str:
    line = f"---@return {normalize_type(ret.type)}"
    if ret.description is not None:
        line += f" # {single_line(ret.description)}"
    return line


def render_function(func: FunctionDef, namespace: str, is_method: bool) -> list[str]:
    """Render one annotated stub for a namespace function, method or callback.

    Variants after the first become `---@overload` lines; the first variant
    drives the `---@param`/`---@return` lines and the stub's parameter list.
    """
    lines = comment_lines(func.description)
    lines.extend(f"---@see {normalize_related(rel)}" for rel in func.related)
    lines.extend(render_overload(variant) for variant in func.variants[1:])

    primary = func.variants[0]
    lines.extend(render_param(arg) for arg in primary.arguments)
    lines.extend(render_return(ret) for ret in primary.returns)

    separator = ":" if is_method else "."
    params = ", ".join(sanitize_param_name(arg.name) for arg in primary.arguments)
    lines.append(f"function {namespace}{separator}{func.name}({params}) end")
    lines.append("")
    return lines


def render_operators(func: FunctionDef) -> list[str]:
    operator = OPERATORS.get(func.name)
    if operator is None:
        return []

    lines = []
    for variant in func.variants:
        # LuaLS operator annotations are unary: one operand, one result.
        if len(variant.arguments) > 1 or len(variant.returns) > 1:
            continue
        operand = ", ".join(normalize_type(arg.type) for arg in variant.arguments)
        lines.append(f"---@operator {operator}({operand}){_return_list(variant)}")
    return lines


def is_swizzlable(name: str) -> bool:
    return name.startswith("Vec") or name == "Quat"


def generate_swizzles(name: str) -> list[str]:
    """Return `---@field` lines for the component swizzles of a vector type.

    Output order is fixed so regenerated files diff cleanly. Names outside
    Vec2/Vec3/Vec4/Quat produce no fields.
    """
    components = SWIZZLE_COMPONENTS.get(name, ())
    size = len(components)

    lines = [f"---@field {comp} number" for comp in components]

    if size >= 2:
        swizzles = list(SWIZZLE2_BASE)
        if size >= 3:
            swizzles.extend(SWIZZLE2_VEC3)
        if size >= 4:
            swizzles.extend(SWIZZLE2_VEC4)
        lines.extend(f"---@field {s} Vec2" for s in swizzles)

    if size >= 3:
        swizzles = list(SWIZZLE3_BASE)
        if size >= 4:
            swizzles.extend(SWIZZLE3_VEC4)
        lines.extend(f"---@field {s} Vec3" for s in dict.fromkeys(swizzles))

    if size == 4:
        lines.extend(f"---@field {s} Vec4" for s in SWIZZLE4)

    return lines


def render_object(obj: ObjectDef) -> list[str]:
    swizzlable = is_swizzlable(obj.name)

    header = f"---@class {obj.name}"
    if obj.name == "Mat4":
        header += ": number[]"
    elif swizzlable:
        header += f": {SWIZZLE_SHAPE}"
    lines = [header]

    if swizzlable:
        lines.extend(generate_swizzles(obj.name))

    for method in obj.methods:
        lines.extend(render_operators(method))

    lines.extend(f"---@see {ctor} # (Constructor)" for ctor in obj.constructors)

    lines.append(f"local {obj.name} = {{}}")
    lines.append("")

    for method in obj.methods:
        lines.extend(render_function(method, obj.name, is_method=True))
    return lines


def render_module(module: ModuleDef) -> list[str]:
    """Render the complete `---@meta` file body for one module.

    Returns an empty list for external modules, which are documented by
    their own addons.
    """
    if module.external:
        return []

    name = module.name
    lines = [f"---@meta {module.key}", ""]
    lines.extend(comment_lines(module.description))
    lines.append(f"---@class {module.key}: {MODULE_SHAPE}")
    lines.append(f"local {name} = {{}}")
    lines.append("")

    for enum in module.enums:
        lines.extend(render_enum(enum))
    for func in module.functions:
        lines.extend(render_function(func, name, is_method=False))
    for obj in module.objects:
        lines.extend(render_object(obj))

    lines.append(f"_G.{module.key} = {name}")
    return lines


def render_index(document: ApiDocument) -> list[str]:
    """Render the namespace index appended to the root namespace file.

    Each module registers itself as its own class, so the root table needs
    an explicit field per module for LuaLS to resolve `lovr.<name>`.
    """
    lines = [""]
    for module in document.modules:
        if module.external:
            continue
        lines.append(f"{ROOT_NAMESPACE}.{module.name} = {module.key}")

    lines.append("")
    lines.extend(INDEX_DIAGNOSTICS)
    lines.append("")

    for callback in document.callbacks:
        lines.extend(render_function(callback, ROOT_NAMESPACE, is_method=False))

    lines.append("")
    lines.extend(
        f"_G.{short} = _G.{MATH_MODULE}.{short}" for short in GLOBAL_SHORTCUTS
    )
    return lines


# ===--- File specs ---=== #


@dataclass(frozen=True)
class LuaFileSpec:
    """Complete input for one generated .lua file.

    Attributes:
        filename: Output filename including the .lua extension,
            e.g. "lovr.audio.lua".
        module_key: Dotted key of the module the file belongs to. Used to
            name the module in write errors.
        content_lines: File lines without trailing newlines.
    """

    filename: str
    module_key: str
    content_lines: tuple[str, ...]


def module_filename(key: str) -> str:
    return f"{key}{OUTPUT_EXTENSION}"


def build_file_specs(document: ApiDocument) -> tuple[LuaFileSpec, ...]:
    """Build one LuaFileSpec per non-external module, plus the index.

    The index is appended to the root namespace's file when the document
    has a module keyed `lovr`; otherwise it becomes a file of its own,
    written last.
    """
    specs: list[LuaFileSpec] = [
        LuaFileSpec(
            filename=module_filename(module.key),
            module_key=module.key,
            content_lines=tuple(render_module(module)),
        )
        for module in document.modules
        if not module.external
    ]

    index_lines = tuple(render_index(document))
    index_filename = module_filename(ROOT_NAMESPACE)
    for position, spec in enumerate(specs):
        if spec.filename == index_filename:
            specs[position] = LuaFileSpec(
                filename=spec.filename,
                module_key=spec.module_key,
                content_lines=spec.content_lines + index_lines,
            )
            break
    else:
        specs.append(
            LuaFileSpec(
                filename=index_filename,
                module_key=ROOT_NAMESPACE,
                content_lines=index_lines,
            )
        )

    return tuple(specs)


# ===--- Writer ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single generated file.

    Attributes:
        filename: Filename written, e.g. "lovr.audio.lua".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


@dataclass(frozen=True)
class PackageWriteResult:
    output_dir: Path
    files: tuple[FileWriteResult, ...]

    @property
    def total_lines(self) -> int:
        """Sum of line_count across all written files."""
        return sum(f.line_count for f in self.files)


def assemble_file_source(spec: LuaFileSpec) -> str:
    if not spec.filename.endswith(OUTPUT_EXTENSION):
        raise ValueError(
            f"spec.filename must end with {OUTPUT_EXTENSION!r}, got {spec.filename!r}"
        )
    return "\n".join(spec.content_lines) + "\n"


def prepare_output_dir(output_dir: Path, clean: bool = False) -> Path:
    """Create the output directory, removing it first when `clean` is set.

    Raises:
        GenerateError: OUTPUT_UNWRITABLE if the directory cannot be
            removed or created.
    """
    output_dir = Path(output_dir)
    try:
        if clean and output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise GenerateError(
            "OUTPUT_UNWRITABLE",
            f"Could not create output directory {output_dir}: {err}",
        ) from err
    return output_dir


def write_file(output_dir: Path, spec: LuaFileSpec) -> FileWriteResult:
    """Write one generated file. The file is closed before returning.

    Raises:
        ValueError: Propagated from assemble_file_source on invalid spec.
        GenerateError: OUTPUT_UNWRITABLE naming the module whose file
            could not be written.
    """
    content = assemble_file_source(spec)
    file_path = Path(output_dir) / spec.filename
    data = content.encode("utf-8")
    try:
        file_path.write_bytes(data)
    except OSError as err:
        raise GenerateError(
            "OUTPUT_UNWRITABLE",
            f"Could not write {file_path} for module {spec.module_key}: {err}",
        ) from err
    return FileWriteResult(
        filename=spec.filename,
        path=file_path.resolve(),
        line_count=content.count("\n"),
        byte_count=len(data),
    )


def write_package(
    output_dir: Path, specs: Iterable[LuaFileSpec]
) -> PackageWriteResult:
    """Write every spec into `output_dir`, in order.

    A failing write aborts the run. Files already written stay on disk
    untouched.
    """
    output_dir = prepare_output_dir(output_dir)
    files = tuple(write_file(output_dir, spec) for spec in specs)
    return PackageWriteResult(output_dir=output_dir, files=files)


def package_output(output_dir: Path, archive: Path) -> Path:
    """Zip `output_dir` into `archive`, entries rooted at the directory name."""
    output_dir = Path(output_dir)
    archive = Path(archive)
    try:
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(
            archive, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
        ) as zf:
            for path in sorted(output_dir.rglob("*")):
                if path.is_file():
                    arcname = Path(output_dir.name) / path.relative_to(output_dir)
                    zf.write(path, arcname.as_posix())
    except OSError as err:
        raise GenerateError(
            "OUTPUT_UNWRITABLE", f"Could not write package {archive}: {err}"
        ) from err
    return archive


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class GenerationCounts:
    """Declaration counts over the whole document.

    External modules count towards `external_modules` only; their
    declarations are not included anywhere else.
    """

    modules: int
    external_modules: int
    enums: int
    functions: int
    objects: int
    methods: int
    callbacks: int


@dataclass(frozen=True)
class GenerationSummary:
    source_label: str
    output_dir: str
    counts: GenerationCounts
    files: tuple[FileWriteResult, ...]
    archive: Path | None = None


def build_generation_counts(document: ApiDocument) -> GenerationCounts:
    rendered = [m for m in document.modules if not m.external]
    return GenerationCounts(
        modules=len(rendered),
        external_modules=len(document.modules) - len(rendered),
        enums=sum(len(m.enums) for m in rendered),
        functions=sum(len(m.functions) for m in rendered),
        objects=sum(len(m.objects) for m in rendered),
        methods=sum(len(o.methods) for m in rendered for o in m.objects),
        callbacks=len(document.callbacks),
    )


def build_generation_summary(
    source: Path,
    document: ApiDocument,
    write_result: PackageWriteResult,
    archive: Path | None = None,
) -> GenerationSummary:
    return GenerationSummary(
        source_label=Path(source).name,
        output_dir=str(write_result.output_dir),
        counts=build_generation_counts(document),
        files=write_result.files,
        archive=archive,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary as a console report with a trailing newline."""
    counts = summary.counts

    lines: list[str] = []
    lines.append("LOVR annotations generated:")
    lines.append("")
    lines.append(f"  Source:     {summary.source_label}")
    lines.append(f"  Output:     {summary.output_dir}")
    lines.append("")
    lines.append("  Declarations:")

    modules_row = f"    {'Modules:':<11}{counts.modules:>6}"
    if counts.external_modules > 0:
        modules_row += f"  ({counts.external_modules} external skipped)"
    lines.append(modules_row)
    for label, value in (
        ("Enums:", counts.enums),
        ("Functions:", counts.functions),
        ("Objects:", counts.objects),
        ("Methods:", counts.methods),
        ("Callbacks:", counts.callbacks),
    ):
        lines.append(f"    {label:<11}{value:>6}")

    lines.append("")
    lines.append("  Files written:")
    for file_result in summary.files:
        line_str = f"{file_result.line_count:>6,} lines"
        lines.append(f"    {file_result.filename:<28} {line_str}")

    total_lines = sum(f.line_count for f in summary.files)
    lines.append("")
    lines.append(f"  Total: {total_lines:,} lines across {len(summary.files)} files")
    if summary.archive is not None:
        lines.append(f"  Package: {summary.archive}")
    lines.append("")

    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Main generation ---=== #


def format_module_status(module: ModuleDef) -> str:
    status = "EXTERNAL (skip)" if module.external else "DONE"
    return f"- {module.key + '...':<20}{status}"


def run_generate(config: GenerateConfig) -> PackageWriteResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    load -> render -> write -> (optional) package -> summary.

    Raises:
        GenerateError: The API document cannot be read or parsed, or an
            output file, directory or archive cannot be written.
    """
    print(f"Loading: {config.api_json}")
    document = load_document(config.api_json)
    print(
        f"  Document: {len(document.modules)} modules, "
        f"{len(document.callbacks)} callbacks"
    )

    output_dir = prepare_output_dir(config.output_dir, clean=config.clean)
    specs = build_file_specs(document)

    print("Processing modules")
    result = write_package(output_dir, specs)
    for module in document.modules:
        print(format_module_status(module))

    archive = None
    if config.package is not None:
        archive = package_output(result.output_dir, config.package)

    summary = build_generation_summary(config.api_json, document, result, archive)
    print_generation_summary(summary)

    return result


def main(argv: list[str] | None = None):
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        run_generate(config)
    except GenerateError as err:
        print(f"Error [{err.code}]: {err.message}")
        raise SystemExit(1) from err
    except ValueError as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()

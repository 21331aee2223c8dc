"""Loading of ``.plot.yaml`` plot documents."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ploteq.errors import ParseError
from ploteq.models import PlotSpec

LATEST_VERSION: tuple[int, int] = (0, 1)

# Longest first, so "saddle.plot.yaml" loses both parts.
PLOT_SUFFIXES: tuple[str, ...] = (".plot.yaml", ".plot.yml", ".yaml", ".yml")


def default_output_path(source: Path, suffix: str = ".glb") -> Path:
    """``saddle.plot.yaml`` -> ``saddle.glb`` next to the source."""
    name = source.name
    for known in PLOT_SUFFIXES:
        if name.endswith(known):
            return source.with_name(name[: -len(known)] + suffix)
    return source.with_suffix(suffix)


def load_document(source: str | Path) -> dict:
    """Read a plot document into a plain mapping.

    A ``Path`` is read as UTF-8; a string is YAML text. Duplicate keys are
    rejected so that a repeated ``expression`` cannot silently win.
    """
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(f"Cannot read file: {e}") from e
    else:
        text = source

    yml = YAML(typ="safe")
    yml.allow_duplicate_keys = False
    try:
        data = yml.load(text)
    except YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Top-level YAML value must be a mapping")
    return data


def parse_version(value: object) -> tuple[int, int]:
    """Read ``"0.1"`` (quoted or not) as ``(0, 1)``; newer documents are refused."""
    if value is None:
        raise ParseError("Missing required field: version")
    text = str(value)
    major, sep, minor = text.partition(".")
    if not sep or not major.isdigit() or not minor.isdigit():
        raise ParseError(f"Invalid version format: {text!r}")

    version = (int(major), int(minor))
    if version > LATEST_VERSION:
        latest = ".".join(str(p) for p in LATEST_VERSION)
        raise ParseError(f"Unsupported version: {text!r} (latest supported is {latest})")
    return version


def parse_yaml(source: str | Path) -> PlotSpec:
    """Parse a plot document from a string or file path.

    Args:
        source: YAML string or path to a .plot.yaml file.

    Returns:
        Schema-validated PlotSpec.

    Raises:
        ParseError: On YAML syntax errors, schema violations, or version mismatches.
    """
    data = load_document(source)
    parse_version(data.get("version"))
    try:
        return PlotSpec.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"Schema validation failed:\n{_describe_errors(e)}") from e


def _describe_errors(error: PydanticValidationError) -> str:
    lines = []
    for item in error.errors():
        where = ".".join(str(part) for part in item["loc"]) or "document"
        lines.append(f"  {where}: {item['msg']}")
    return "\n".join(lines)

"""Blueprint loader - reads, parses and validates project requirements.

JSON files are parsed as JSON; everything else is parsed as YAML. Either
way the result is validated into the same frozen Blueprint, so equivalent
YAML and JSON inputs yield the same blueprint hash.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from contracts import Blueprint, BlueprintValidationError


FORMAT_JSON = "json"
FORMAT_YAML = "yaml"

KNOWN_FIELDS = frozenset(Blueprint.model_fields.keys())


@dataclass
class LoadedBlueprint:
    """A validated blueprint and what the loader had to do to get it."""
    blueprint: Blueprint
    source_format: str
    ignored_keys: List[str] = field(default_factory=list)


def detect_format(path: Union[str, Path]) -> str:
    return FORMAT_JSON if Path(path).suffix.lower() == ".json" else FORMAT_YAML


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into `field.path: message` lines."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "blueprint"
        message = item.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{location}: {message}")
    return "; ".join(parts)


def parse_blueprint_text(text: str, source_format: str = FORMAT_YAML, strict: bool = False) -> LoadedBlueprint:
    """Parse and validate blueprint text.

    Args:
        text: Raw file content
        source_format: "json" or "yaml"
        strict: Reject unknown top-level keys instead of dropping them

    Returns:
        LoadedBlueprint with the validated blueprint

    Raises:
        BlueprintValidationError: If the text cannot be parsed or validated
    """
    try:
        if source_format == FORMAT_JSON:
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise BlueprintValidationError(f"Failed to parse blueprint: {e}") from e

    if not isinstance(data, dict):
        raise BlueprintValidationError("Failed to parse blueprint: top level must be a mapping")

    unknown = sorted(str(key) for key in data if key not in KNOWN_FIELDS)
    if unknown and strict:
        raise BlueprintValidationError(f"Unknown blueprint fields: {', '.join(unknown)}")

    known: Dict[str, Any] = {key: value for key, value in data.items() if key in KNOWN_FIELDS}
    try:
        blueprint = Blueprint.model_validate(known)
    except ValidationError as e:
        raise BlueprintValidationError(f"Invalid blueprint: {format_validation_error(e)}") from e

    return LoadedBlueprint(blueprint=blueprint, source_format=source_format, ignored_keys=unknown)


def load_blueprint(path: Union[str, Path], strict: bool = False) -> LoadedBlueprint:
    """Read a blueprint file and validate it.

    Raises:
        BlueprintValidationError: If the file is unreadable, unparsable or invalid
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise BlueprintValidationError(f"Failed to read input file: {e}") from e

    return parse_blueprint_text(text, detect_format(path), strict=strict)

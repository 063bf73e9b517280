"""Rules-table loader: YAML text on disk -> RulesRepository."""

from pathlib import Path
from typing import Optional, Union

import yaml

from contracts import ConfigError
from .repository import RulesRepository, load_rules


BUNDLED_RULES_FILE = Path(__file__).resolve().parent / "data" / "rules.yaml"


def parse_rules_text(text: str) -> RulesRepository:
    """Parse a YAML (or JSON) rules document and validate it."""
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse rules: {e}") from e
    return load_rules(parsed)


def load_rules_file(path: Optional[Union[str, Path]] = None) -> RulesRepository:
    """Load a rules file, defaulting to the rules table shipped with the package.

    Args:
        path: Rules file path; None uses the bundled table

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    rules_path = Path(path) if path else BUNDLED_RULES_FILE
    if not rules_path.is_file():
        raise ConfigError(f"Failed to read rules file: {rules_path} not found")

    try:
        text = rules_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read rules file: {e}") from e

    return parse_rules_text(text)

"""Rules module: the validated, immutable scoring table."""

from .repository import RulesRepository, load_rules, WEIGHT_SUM_TOLERANCE
from .loader import load_rules_file, parse_rules_text, BUNDLED_RULES_FILE

__all__ = [
    "RulesRepository",
    "load_rules",
    "WEIGHT_SUM_TOLERANCE",
    "load_rules_file",
    "parse_rules_text",
    "BUNDLED_RULES_FILE",
]

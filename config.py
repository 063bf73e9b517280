"""Configuration settings for Runeforge."""

# Load .env into os.environ before settings are read
from dotenv import load_dotenv
load_dotenv()

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional
from pathlib import Path

from rules import BUNDLED_RULES_FILE


class Settings(BaseSettings):
    """Global settings for the Runeforge CLI.

    Settings can be overridden via environment variables with RUNEFORGE_ prefix.
    Example: RUNEFORGE_DEFAULT_SEED=7

    The selection engine never reads these; they only shape how the CLI and
    the planning manager call it.
    """

    # Rules
    rules_path: Optional[str] = Field(
        default=None,
        description="Rules table YAML; defaults to the bundled table"
    )

    # Selection
    default_seed: int = Field(
        default=42,
        ge=0,
        lt=2 ** 64,
        description="Tie-break seed used when --seed is not given"
    )
    strict: bool = Field(
        default=False,
        description="Reject blueprints with unknown top-level keys"
    )

    # Output
    output_indent: int = Field(
        default=2,
        ge=0,
        description="JSON indentation for printed plans"
    )
    verbose: bool = Field(
        default=False,
        description="Print per-topic score tables to stderr"
    )

    model_config = {
        "env_prefix": "RUNEFORGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def get_rules_path(self) -> Path:
        """Get rules path as Path object."""
        return Path(self.rules_path) if self.rules_path else BUNDLED_RULES_FILE


# Create singleton instance
settings = Settings()

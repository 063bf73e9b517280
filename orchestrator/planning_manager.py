"""Planning Manager - runs one blueprint through the selector end to end.

The Planning Manager:
1. Loads the rules table once and reuses it for every run
2. Reads and validates the blueprint
3. Runs the selection engine
4. Validates and writes the resulting plan
5. Maps every failure onto a CLI exit code
"""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from contracts import (
    BlueprintValidationError,
    ConfigError,
    InvalidSeed,
    NoEligibleCandidate,
    SelectionError,
    StackPlan,
    validate_stack_plan,
)
from rules import RulesRepository, load_rules_file
from selector import MAX_SEED, evaluate
from orchestrator.blueprint_loader import load_blueprint
from orchestrator.reporter import RunReporter
from config import settings


EXIT_OK = 0
EXIT_INPUT = 1
EXIT_OUTPUT = 2
EXIT_NO_STACK = 3


class PlanRunResult(BaseModel):
    """Outcome of one planning run."""
    status: str = Field(..., description="ok or error")
    exit_code: int = Field(EXIT_OK, description="Process exit code for the CLI")
    plan: Optional[StackPlan] = None
    output_json: Optional[str] = Field(None, description="Serialized plan as written")
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_OK


def render_plan(plan: StackPlan, indent: Optional[int] = None) -> str:
    """Pretty JSON for a plan; field order follows the plan model."""
    return json.dumps(
        plan.to_json_dict(),
        indent=settings.output_indent if indent is None else indent,
        ensure_ascii=False,
    )


class PlanningManager:
    """Coordinates loading, selection and output for the CLI."""

    def __init__(
        self,
        rules_path: Optional[Union[str, Path]] = None,
        strict: Optional[bool] = None,
        reporter: Optional[RunReporter] = None,
        rules: Optional[RulesRepository] = None,
    ):
        """Initialize the Planning Manager.

        Args:
            rules_path: Rules table YAML (default: settings, then the bundled table)
            strict: Reject unknown blueprint keys (default: settings.strict)
            reporter: Where progress goes (default: quiet reporter)
            rules: Pre-loaded rules; skips reading `rules_path`
        """
        self.rules_path = Path(rules_path) if rules_path else settings.get_rules_path()
        self.strict = settings.strict if strict is None else strict
        self.reporter = reporter or RunReporter(quiet=True)
        self._rules = rules

    @property
    def rules(self) -> RulesRepository:
        """Rules table, loaded on first use. Raises ConfigError."""
        if self._rules is None:
            self._rules = load_rules_file(self.rules_path)
        return self._rules

    def run(
        self,
        blueprint_path: Union[str, Path],
        seed: Optional[int] = None,
        out: Optional[Union[str, Path]] = None,
    ) -> PlanRunResult:
        """Execute a complete planning run.

        Args:
            blueprint_path: Blueprint YAML or JSON file
            seed: Tie-break seed (default: settings.default_seed)
            out: Write the plan here instead of returning it for stdout

        Returns:
            PlanRunResult; never raises for input, selection or output failures
        """
        seed = settings.default_seed if seed is None else seed
        if not 0 <= seed < MAX_SEED:
            return self._handle_error(InvalidSeed(f"seed must be in [0, 2^64), got {seed}"), EXIT_INPUT)

        try:
            loaded = load_blueprint(blueprint_path, strict=self.strict)
            self.reporter.ignored_keys(loaded.ignored_keys)
            rules = self.rules

            self.reporter.selection_started(loaded.blueprint, seed, str(self.rules_path))
            result = evaluate(loaded.blueprint, rules, seed)
            self.reporter.trace(result.trace)

            plan = validate_stack_plan(result.plan)
            output_json = render_plan(plan)
            if out is not None:
                self._write_output(Path(out), output_json)
            self.reporter.plan_ready(plan, str(out) if out is not None else None)

            return PlanRunResult(status="ok", plan=plan, output_json=output_json)

        except NoEligibleCandidate as e:
            self.reporter.no_eligible(e.failures)
            return self._handle_error(e, e.exit_code)
        except SelectionError as e:
            return self._handle_error(e, e.exit_code)
        except BlueprintValidationError as e:
            return self._handle_error(e, e.exit_code)
        except ConfigError as e:
            return self._handle_error(e, EXIT_INPUT)
        except OSError as e:
            return self._handle_error(e, EXIT_INPUT)

    def _write_output(self, path: Path, output_json: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(output_json + "\n", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Failed to write output file: {e}") from e

    def _handle_error(self, error: Exception, exit_code: int) -> PlanRunResult:
        """Turn an exception into an error result."""
        self.reporter.error(str(error))
        return PlanRunResult(
            status="error",
            exit_code=exit_code,
            error=str(error),
            error_type=type(error).__name__,
        )


def run_plan(
    blueprint_path: Union[str, Path],
    seed: Optional[int] = None,
    out: Optional[Union[str, Path]] = None,
    rules_path: Optional[Union[str, Path]] = None,
    strict: Optional[bool] = None,
    reporter: Optional[RunReporter] = None,
) -> PlanRunResult:
    """Convenience function to run one blueprint.

    Args:
        blueprint_path: Blueprint YAML or JSON file
        seed: Tie-break seed
        out: Output file path
        rules_path: Rules table YAML
        strict: Reject unknown blueprint keys
        reporter: Progress reporter

    Returns:
        PlanRunResult
    """
    manager = PlanningManager(rules_path=rules_path, strict=strict, reporter=reporter)
    return manager.run(blueprint_path, seed=seed, out=out)

"""Orchestrator module for Runeforge planning runs."""

from .blueprint_loader import (
    LoadedBlueprint,
    detect_format,
    load_blueprint,
    parse_blueprint_text,
)
from .reporter import RunReporter
from .planning_manager import (
    EXIT_OK,
    EXIT_INPUT,
    EXIT_OUTPUT,
    EXIT_NO_STACK,
    PlanningManager,
    PlanRunResult,
    render_plan,
    run_plan,
)

__all__ = [
    "LoadedBlueprint",
    "detect_format",
    "load_blueprint",
    "parse_blueprint_text",
    "RunReporter",
    "EXIT_OK",
    "EXIT_INPUT",
    "EXIT_OUTPUT",
    "EXIT_NO_STACK",
    "PlanningManager",
    "PlanRunResult",
    "render_plan",
    "run_plan",
]

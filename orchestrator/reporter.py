"""Run reporter - human-facing progress output on stderr.

Stdout is reserved for the JSON plan, so everything here goes to a rich
console bound to stderr.
"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from contracts import Blueprint, StackPlan, TopicFailure
from selector import SelectionTrace, TopicEvaluation


class RunReporter:
    """Prints selection progress, score tables and outcomes."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False, quiet: bool = False):
        self.console = console or Console(stderr=True)
        self.verbose = verbose
        self.quiet = quiet

    def _print(self, *args, **kwargs) -> None:
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def banner(self) -> None:
        self._print(Panel.fit(
            "[bold blue]Runeforge[/bold blue]\n"
            "[dim]Deterministic stack selection[/dim]",
            border_style="blue"
        ))

    def selection_started(self, blueprint: Blueprint, seed: int, rules_label: str) -> None:
        self._print(f"[Runeforge] Planning [bold]{blueprint.project_name}[/bold] (seed {seed})")
        self._print(f"  [dim]Rules:[/dim] {rules_label}")
        if blueprint.locked_language:
            self._print(f"  [dim]Language lock:[/dim] {blueprint.locked_language}")
        ceiling = blueprint.constraints.monthly_cost_usd_max
        if ceiling is not None:
            self._print(f"  [dim]Cost ceiling:[/dim] ${ceiling:,.2f}/month")

    def ignored_keys(self, keys: List[str]) -> None:
        if keys:
            self._print(f"[yellow]Ignoring unknown blueprint fields:[/yellow] {', '.join(keys)}")

    def trace(self, trace: SelectionTrace) -> None:
        """Per-topic rejections and score tables (verbose only)."""
        if not self.verbose:
            return
        for evaluation in trace.evaluations:
            self._topic(evaluation)
        self._spend(trace)

    def _spend(self, trace: SelectionTrace) -> None:
        if trace.plan_languages:
            self._print(f"\n[dim]Plan languages:[/dim] {', '.join(trace.plan_languages)}")

        summary = trace.budget_manifest.get("summary", {})
        if summary.get("max_budget_usd") is None:
            return
        table = Table(title="Cost ceiling", show_header=True, header_style="bold")
        table.add_column("Topic")
        table.add_column("Committed", justify="right")
        for topic, cost in trace.budget_manifest["by_topic"].items():
            table.add_row(topic, f"${cost:,.2f}")
        table.add_row(
            "[bold]total[/bold]",
            f"${summary['total_cost_usd']:,.2f} of ${summary['max_budget_usd']:,.2f} "
            f"({summary['budget_used_percent']}%)",
        )
        self._print(table)

    def _topic(self, evaluation: TopicEvaluation) -> None:
        self._print(f"\n[bold]{evaluation.topic}[/bold]")
        if evaluation.remaining_budget is not None:
            self._print(f"  [dim]Budget available:[/dim] ${max(evaluation.remaining_budget, 0.0):,.2f}")
        for violation in evaluation.outcome.violations:
            self._print(f"  [red]✗[/red] {violation.candidate} [dim]({violation.rule})[/dim] {violation.detail}")
        if evaluation.preferred_only:
            self._print("  [dim]Narrowed to preferred candidates[/dim]")
        if evaluation.ranking is None:
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Candidate")
        table.add_column("Score", justify="right")
        table.add_column("Penalty", justify="right")
        table.add_column("Tie")
        for position, entry in enumerate(evaluation.ranking.ranked, start=1):
            table.add_row(
                str(position),
                entry.name,
                f"{entry.score:.4f}",
                f"{entry.breakdown.penalty:.4f}",
                "yes" if entry.tied else "",
            )
        self._print(table)

    def plan_ready(self, plan: StackPlan, destination: Optional[str] = None) -> None:
        self._print("\n[bold]Selected stack:[/bold]")
        for decision in plan.decisions:
            self._print(f"  [green]{decision.topic:10}[/green] {decision.choice} [dim]({decision.score:.3f})[/dim]")
        for service in plan.stack.services or []:
            self._print(f"  [cyan]service[/cyan]    {service.name}: {service.framework} on {service.runtime}")
        self._print(f"\n[green]Estimated cost:[/green] ${plan.estimated.monthly_cost_usd:,.2f}/month")
        self._print(f"[green]Plan hash:[/green] {plan.meta.plan_hash}")
        if destination:
            self._print(f"\n[bold]Output saved to:[/bold] {destination}")

    def no_eligible(self, failures: List[TopicFailure]) -> None:
        self.console.print(f"[red]No eligible candidate for {len(failures)} topic(s):[/red]")
        for failure in failures:
            self.console.print(f"  - {failure.summary()}")
            if self.verbose:
                for violation in failure.violations:
                    self._print(f"      {violation.candidate}: {violation.detail}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]Error:[/red] {message}")

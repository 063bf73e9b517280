"""Tests for the CLI and the planning manager.

Covers the exit code contract: 0 success, 1 input error, 2 output schema
failure, 3 no eligible candidate.
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from contracts import OutputInvariantViolation
from main import cli
from orchestrator import (
    EXIT_INPUT,
    EXIT_NO_STACK,
    EXIT_OK,
    EXIT_OUTPUT,
    PlanningManager,
    run_plan,
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def blueprint_file(tmp_path, blueprint_data):
    path = tmp_path / "blueprint.yaml"
    path.write_text(yaml.safe_dump(blueprint_data()))
    return path


@pytest.fixture
def antarctica_files(tmp_path, blueprint_data, regional_rules_config):
    blueprint_path = tmp_path / "antarctica.json"
    blueprint_path.write_text(json.dumps(blueprint_data(constraints={"region_allow": ["antarctica"]})))
    rules_path = tmp_path / "regional_rules.yaml"
    rules_path.write_text(yaml.safe_dump(regional_rules_config, sort_keys=False))
    return blueprint_path, rules_path


class TestPlanCommand:
    """Test `plan`."""

    def test_plan_prints_json(self, runner, blueprint_file):
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "-q"])
        assert result.exit_code == EXIT_OK
        plan = json.loads(result.output)
        assert plan["stack"]["backend"] == "Actix Web"
        assert plan["meta"]["seed"] == 42
        assert plan["meta"]["plan_hash"].startswith("sha256:")

    def test_plan_with_seed(self, runner, blueprint_file):
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--seed", "7", "-q"])
        assert result.exit_code == EXIT_OK
        assert json.loads(result.output)["meta"]["seed"] == 7

    def test_plan_writes_out_file(self, runner, blueprint_file, tmp_path):
        out = tmp_path / "out" / "plan.json"
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--out", str(out), "-q"])
        assert result.exit_code == EXIT_OK
        assert result.output == ""
        assert json.loads(out.read_text())["stack"]["language"] == "Rust"

    def test_plan_verbose_runs(self, runner, blueprint_file, tmp_path):
        out = tmp_path / "plan.json"
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--out", str(out), "-v"])
        assert result.exit_code == EXIT_OK
        assert out.is_file()

    def test_missing_input_exits_1(self, runner, tmp_path):
        result = runner.invoke(cli, ["plan", "-f", str(tmp_path / "missing.yaml"), "-q"])
        assert result.exit_code == EXIT_INPUT

    def test_invalid_blueprint_exits_1(self, runner, tmp_path, blueprint_data):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(blueprint_data(goals=[])))
        result = runner.invoke(cli, ["plan", "-f", str(path), "-q"])
        assert result.exit_code == EXIT_INPUT

    def test_strict_rejects_unknown_keys(self, runner, tmp_path, blueprint_data):
        path = tmp_path / "extra.json"
        path.write_text(json.dumps(blueprint_data(owner="team")))
        assert runner.invoke(cli, ["plan", "-f", str(path), "-q"]).exit_code == EXIT_OK
        assert runner.invoke(cli, ["plan", "-f", str(path), "--strict", "-q"]).exit_code == EXIT_INPUT

    def test_bad_rules_exit_1(self, runner, blueprint_file, tmp_path):
        rules_path = tmp_path / "rules.yaml"
        rules_path.write_text("weights: {quality: 1.5}\ncandidates: {}\n")
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--rules", str(rules_path), "-q"])
        assert result.exit_code == EXIT_INPUT

    def test_no_eligible_exits_3(self, runner, antarctica_files):
        blueprint_path, rules_path = antarctica_files
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_path), "--rules", str(rules_path), "-q"])
        assert result.exit_code == EXIT_NO_STACK

    def test_out_of_range_score_exits_2(self, runner, blueprint_file, tmp_path, penalised_rules_config):
        rules_path = tmp_path / "penalised.yaml"
        rules_path.write_text(yaml.safe_dump(penalised_rules_config, sort_keys=False))
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--rules", str(rules_path), "-q"])
        assert result.exit_code == EXIT_OUTPUT

    def test_any_output_violation_exits_2(self, runner, blueprint_file, monkeypatch):
        def reject(plan):
            raise OutputInvariantViolation("Output schema validation failed: forced")

        monkeypatch.setattr("orchestrator.planning_manager.validate_stack_plan", reject)
        result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "-q"])
        assert result.exit_code == EXIT_OUTPUT

    def test_seed_out_of_range(self, runner, blueprint_file):
        for seed in ("-1", str(2 ** 64)):
            result = runner.invoke(cli, ["plan", "-f", str(blueprint_file), "--seed", seed, "-q"])
            assert result.exit_code == EXIT_INPUT, seed


class TestOtherCommands:
    """Test `validate` and `topics`."""

    def test_validate_prints_hash(self, runner, blueprint_file):
        result = runner.invoke(cli, ["validate", "-f", str(blueprint_file)])
        assert result.exit_code == EXIT_OK
        assert "sha256:" in result.output

    def test_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("project_name: demo\n")
        result = runner.invoke(cli, ["validate", "-f", str(path)])
        assert result.exit_code == EXIT_INPUT

    def test_topics(self, runner):
        result = runner.invoke(cli, ["topics"])
        assert result.exit_code == EXIT_OK
        assert "language" in result.output
        assert "database" in result.output


class TestPlanningManager:
    """Test the orchestrator directly."""

    def test_run_ok(self, blueprint_file, bundled_rules):
        result = PlanningManager(rules=bundled_rules).run(blueprint_file, seed=42)
        assert result.ok
        assert result.status == "ok"
        assert json.loads(result.output_json)["meta"]["seed"] == 42

    def test_run_plan_no_stack(self, antarctica_files):
        blueprint_path, rules_path = antarctica_files
        result = run_plan(blueprint_path, rules_path=rules_path)
        assert result.exit_code == EXIT_NO_STACK
        assert result.error_type == "NoEligibleCandidate"
        assert result.plan is None

    def test_rules_loaded_once(self, blueprint_file, bundled_rules):
        manager = PlanningManager(rules=bundled_rules)
        first = manager.run(blueprint_file, seed=1)
        second = manager.run(blueprint_file, seed=1)
        assert manager.rules is bundled_rules
        assert first.output_json == second.output_json

    def test_invalid_seed(self, blueprint_file, bundled_rules):
        result = PlanningManager(rules=bundled_rules).run(blueprint_file, seed=2 ** 64)
        assert result.exit_code == EXIT_INPUT

    def test_undecodable_rules_file(self, blueprint_file, tmp_path):
        rules_path = tmp_path / "rules.yaml"
        rules_path.write_bytes(b"\xff\xfe")
        result = PlanningManager(rules_path=rules_path).run(blueprint_file, seed=1)
        assert result.exit_code == EXIT_INPUT
        assert result.error_type == "ConfigError"

    def test_invalid_seed_type(self, blueprint_file, bundled_rules):
        result = PlanningManager(rules=bundled_rules).run(blueprint_file, seed=-3)
        assert result.error_type == "InvalidSeed"

"""Tests for the constraint filter and cost budget."""

import math

import pytest

from selector import (
    ConstraintFilter,
    CostBudget,
    RULE_COMPLIANCE,
    RULE_COST_CEILING,
    RULE_LANGUAGE,
    RULE_PERSISTENCE,
    RULE_REGION,
)


def eligible_names(outcome):
    return [c.name for c in outcome.eligible]


class TestRegionRule:
    """Test region filtering."""

    def test_no_region_allow_is_unrestricted(self, bundled_rules, blueprint):
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("frontend")
        assert eligible_names(outcome) == ["SvelteKit", "Next.js"]

    def test_region_allow_drops_regional_candidates(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"region_allow": ["sa-east-1"]})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("frontend")
        assert eligible_names(outcome) == ["SvelteKit"]
        assert [(v.candidate, v.rule) for v in outcome.violations] == [("Next.js", RULE_REGION)]

    def test_intersecting_region_allowed(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"region_allow": ["eu-west-1"]})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("database")
        assert "DynamoDB" in eligible_names(outcome)

    def test_no_wildcard_and_no_match_empties_topic(self, regional_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"region_allow": ["antarctica"]})
        constraint_filter = ConstraintFilter(regional_rules, blueprint)
        for topic in regional_rules.topics:
            outcome = constraint_filter.filter_static(topic)
            assert outcome.eligible == []
            assert outcome.failure().topic == topic


class TestLanguageRule:
    """Test the single-language lock."""

    def test_lock_applies_to_language_topic(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(single_language_mode="go")
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("language")
        assert eligible_names(outcome) == ["Go"]
        assert {v.rule for v in outcome.violations} == {RULE_LANGUAGE}

    def test_lock_applies_to_backend(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(single_language_mode="rust")
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("backend")
        assert eligible_names(outcome) == ["Actix Web", "Axum"]

    def test_lock_ignores_other_topics(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(single_language_mode="rust")
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("frontend")
        assert eligible_names(outcome) == ["SvelteKit", "Next.js"]

    def test_none_mode_is_unrestricted(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(single_language_mode="none")
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("backend")
        assert len(outcome.eligible) == 4


class TestPersistenceRule:
    """Test persistence compatibility on the database topic."""

    @pytest.mark.parametrize("requested,expected", [
        ("kv", ["Redis", "DynamoDB"]),
        ("sql", ["PostgreSQL", "DynamoDB"]),
        ("both", ["DynamoDB"]),
    ])
    def test_persistence(self, bundled_rules, make_blueprint, requested, expected):
        blueprint = make_blueprint(constraints={"persistence": requested})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("database")
        assert eligible_names(outcome) == expected
        assert all(v.rule == RULE_PERSISTENCE for v in outcome.violations)

    def test_persistence_ignores_cache_topic(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"persistence": "sql"})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("cache")
        assert eligible_names(outcome) == ["Redis", "Memcached"]


class TestComplianceRule:
    """Test compliance capability matching."""

    def test_hipaa_database(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"compliance": ["hipaa"]})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("database")
        assert eligible_names(outcome) == ["PostgreSQL", "DynamoDB"]
        [violation] = outcome.violations
        assert violation.candidate == "Redis"
        assert violation.rule == RULE_COMPLIANCE
        assert "audit_log" in violation.detail

    def test_sox_queue(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"compliance": ["sox"]})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("queue")
        assert eligible_names(outcome) == ["RabbitMQ"]

    def test_sbom_scoped_to_its_topics(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"compliance": ["sbom"]})
        constraint_filter = ConstraintFilter(bundled_rules, blueprint)
        assert eligible_names(constraint_filter.filter_static("infra")) == ["Terraform"]
        assert len(constraint_filter.filter_static("database").eligible) == 3

    def test_compliance_ignores_non_compliance_topics(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"compliance": ["pci", "hipaa"]})
        outcome = ConstraintFilter(bundled_rules, blueprint).filter_static("ai")
        assert len(outcome.eligible) == 3


class TestCostCeilingRule:
    """Test the per-topic cost ceiling."""

    def test_candidates_over_remaining_budget_dropped(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(constraints={"monthly_cost_usd_max": 600})
        constraint_filter = ConstraintFilter(bundled_rules, blueprint)
        outcome = constraint_filter.apply_cost_ceiling(constraint_filter.filter_static("ai"), 120)
        assert eligible_names(outcome) == ["RuneSage"]
        assert {v.rule for v in outcome.violations} == {RULE_COST_CEILING}

    def test_exact_fit_is_eligible(self, bundled_rules, blueprint):
        constraint_filter = ConstraintFilter(bundled_rules, blueprint)
        claude = bundled_rules.find_candidate("ai", "Claude")
        assert constraint_filter.check(claude, 150.0).eligible
        assert not constraint_filter.check(claude, 149.99).eligible

    def test_check_reports_first_failing_rule(self, bundled_rules, make_blueprint):
        blueprint = make_blueprint(
            constraints={"region_allow": ["sa-east-1"], "persistence": "sql"},
        )
        dynamo = bundled_rules.find_candidate("database", "DynamoDB")
        verdict = ConstraintFilter(bundled_rules, blueprint).check(dynamo, 0.0)
        assert verdict.rule == RULE_REGION


class TestCostBudget:
    """Test the cost ledger."""

    def test_unbounded(self):
        budget = CostBudget(None, {"a": 10})
        assert budget.is_unbounded
        assert budget.remaining_for("a") == math.inf

    def test_remaining_reserves_pending_topics(self):
        budget = CostBudget(100, {"a": 10, "b": 20, "c": 30})
        assert budget.remaining_for("a") == 50
        budget.commit("a", 25)
        assert budget.remaining_for("b") == 45
        budget.commit("b", 20)
        assert budget.remaining_for("c") == 55
        assert budget.total_committed_usd == 45

    def test_double_commit_rejected(self):
        budget = CostBudget(100, {"a": 10})
        budget.commit("a", 10)
        with pytest.raises(ValueError):
            budget.commit("a", 10)

    def test_manifest(self):
        budget = CostBudget(200, {"a": 10, "b": 20})
        budget.commit("a", 50)
        budget.commit("b", 50)
        manifest = budget.generate_manifest()
        assert manifest["summary"]["total_cost_usd"] == 100
        assert manifest["summary"]["budget_used_percent"] == 50.0
        assert manifest["by_topic"] == {"a": 50, "b": 50}

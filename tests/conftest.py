"""Shared fixtures: rules tables and blueprint builders."""

import copy

import pytest

from contracts import Blueprint
from rules import load_rules, load_rules_file


STANDARD_WEIGHTS = {"quality": 0.30, "slo": 0.25, "cost": 0.20, "security": 0.15, "ops": 0.10}

SMALL_RULES = {
    "version": 1,
    "weights": STANDARD_WEIGHTS,
    "service_topics": {"backend": "api"},
    "toolchains": {
        "Rust": {"runtime": "native", "build": "cargo build --release", "tests": "cargo test"},
    },
    "candidates": {
        "backend": [
            {
                "name": "Actix Web",
                "requires": {"language": "Rust"},
                "metrics": {"quality": 0.9, "slo": 0.9, "cost": 0.7, "security": 0.8, "ops": 0.8},
                "regions": ["*"],
                "monthly_cost_base": 100,
                "notes": ["Actor-based framework"],
            },
            {
                "name": "Axum",
                "requires": {"language": "Rust"},
                "metrics": {"quality": 0.85, "slo": 0.85, "cost": 0.7, "security": 0.8, "ops": 0.85},
                "regions": ["*"],
                "monthly_cost_base": 100,
            },
        ],
    },
}

TIED_METRICS = {"quality": 0.8, "slo": 0.8, "cost": 0.8, "security": 0.8, "ops": 0.8}

TIED_RULES = {
    "version": 1,
    "weights": STANDARD_WEIGHTS,
    "candidates": {
        "queue": [
            {"name": "Alpha", "metrics": TIED_METRICS, "regions": ["*"]},
            {"name": "Beta", "metrics": TIED_METRICS, "regions": ["*"]},
            {"name": "Gamma", "metrics": TIED_METRICS, "regions": ["*"]},
        ],
    },
}

REGIONAL_RULES = {
    "version": 1,
    "weights": STANDARD_WEIGHTS,
    "candidates": {
        "language": [
            {"name": "Rust", "metrics": TIED_METRICS, "regions": ["us-east-1"]},
            {"name": "Go", "metrics": TIED_METRICS, "regions": ["eu-west-1"]},
        ],
        "database": [
            {"name": "PostgreSQL", "persistence": "sql", "metrics": TIED_METRICS, "regions": ["us-east-1", "eu-west-1"]},
        ],
        "queue": [
            {"name": "NATS", "metrics": TIED_METRICS, "regions": ["ap-southeast-1"]},
        ],
    },
}


# A heavy polyglot penalty drives the only backend below zero.
PENALISED_RULES = {
    "version": 1,
    "weights": STANDARD_WEIGHTS,
    "selection": {"polyglot_penalty": 0.5},
    "candidates": {
        "language": [
            {"name": "Rust", "metrics": TIED_METRICS, "regions": ["*"]},
        ],
        "backend": [
            {
                "name": "Express",
                "requires": {"language": "TypeScript"},
                "metrics": {"quality": 0.1, "slo": 0.1, "cost": 0.1, "security": 0.1, "ops": 0.1},
                "regions": ["*"],
            },
        ],
    },
}


def build_blueprint_data(**overrides):
    """Minimal valid blueprint mapping with top-level overrides applied."""
    data = {
        "project_name": "demo",
        "goals": ["ship the first release"],
        "constraints": {},
        "traffic_profile": {"rps_peak": 100, "global": False, "latency_sensitive": False},
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_blueprint():
    def _make(**overrides):
        return Blueprint.model_validate(build_blueprint_data(**overrides))
    return _make


@pytest.fixture
def blueprint(make_blueprint):
    return make_blueprint()


@pytest.fixture
def small_rules_config():
    return copy.deepcopy(SMALL_RULES)


@pytest.fixture
def small_rules(small_rules_config):
    return load_rules(small_rules_config)


@pytest.fixture
def tied_rules():
    return load_rules(copy.deepcopy(TIED_RULES))


@pytest.fixture
def regional_rules():
    return load_rules(copy.deepcopy(REGIONAL_RULES))


@pytest.fixture(scope="session")
def bundled_rules():
    return load_rules_file()


@pytest.fixture
def blueprint_data():
    return build_blueprint_data


@pytest.fixture
def regional_rules_config():
    return copy.deepcopy(REGIONAL_RULES)


@pytest.fixture
def tied_rules_config():
    return copy.deepcopy(TIED_RULES)


@pytest.fixture
def penalised_rules_config():
    return copy.deepcopy(PENALISED_RULES)


@pytest.fixture
def penalised_rules(penalised_rules_config):
    return load_rules(penalised_rules_config)

"""Tests for the `context-playground` CLI."""

from __future__ import annotations

import json
import subprocess
import sys

import pytest
import yaml


@pytest.fixture()
def tmp_cwd(tmp_path, monkeypatch):
    """Run test in a clean temporary directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def _run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "context_playground.cli.main", *args],
        capture_output=True,
        text=True,
    )


def test_no_command_prints_help(tmp_cwd):
    result = _run_cli()
    assert result.returncode != 0
    assert "usage" in result.stdout.lower()


def test_init_creates_config(tmp_cwd):
    result = _run_cli("init")
    assert result.returncode == 0
    path = tmp_cwd / "context-playground.yaml"
    raw = yaml.safe_load(path.read_text())
    assert raw["capacity"] == 4096
    assert raw["token_cost_range"] == [5, 24]
    assert raw["initial_block"]["id"] == "system-1"


def test_init_refuses_overwrite(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("existing content")
    result = _run_cli("init")
    assert result.returncode != 0
    assert "already exists" in result.stderr
    assert (tmp_cwd / "context-playground.yaml").read_text() == "existing content"


def test_init_force_overwrites(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("existing content")
    result = _run_cli("init", "--force")
    assert result.returncode == 0
    assert "capacity" in (tmp_cwd / "context-playground.yaml").read_text()


def test_config_validate_defaults(tmp_cwd):
    result = _run_cli("config", "validate")
    assert result.returncode == 0
    assert "Config is valid." in result.stdout
    assert "Capacity: 4,096 tokens" in result.stdout


def test_config_validate_reports_errors(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("capacity: -5\ntoken_cost_range: [9, 2]\n")
    result = _run_cli("config", "validate")
    assert result.returncode != 0
    assert "capacity" in result.stdout
    assert "must be <= max" in result.stdout


def test_config_validate_rejects_bad_fixed_cost(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("token_source: 'fixed:abc'\n")
    result = _run_cli("config", "validate")
    assert result.returncode == 1
    assert "fixed:abc" in result.stdout


def test_headless_bad_token_source_exits_cleanly(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("token_source: 'fixed:abc'\n")
    (tmp_cwd / "steps.txt").write_text("add user\n")
    result = _run_cli("run", "--replay", "steps.txt", "--headless")
    assert result.returncode == 1
    assert "Config validation errors" in result.stderr
    assert "Traceback" not in result.stderr


def test_config_validate_empty_sections(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("initial_block:\nusage:\n")
    result = _run_cli("config", "validate")
    assert result.returncode == 0
    assert "Config is valid." in result.stdout


def test_config_validate_scalar_section(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("initial_block: 5\n")
    result = _run_cli("config", "validate")
    assert result.returncode == 1
    assert "Error loading config" in result.stderr
    assert "Traceback" not in result.stderr


def test_config_show(tmp_cwd):
    (tmp_cwd / "custom.yaml").write_text("capacity: 1234\n")
    result = _run_cli("--config", "custom.yaml", "config", "show")
    assert result.returncode == 0
    assert yaml.safe_load(result.stdout)["capacity"] == 1234


def test_missing_config_file(tmp_cwd):
    result = _run_cli("--config", "nope.yaml", "config", "validate")
    assert result.returncode != 0
    assert "Config file not found" in result.stderr


def test_headless_requires_replay(tmp_cwd):
    result = _run_cli("run", "--headless")
    assert result.returncode != 0
    assert "--headless requires --replay" in result.stderr


def test_replay_file_missing(tmp_cwd):
    result = _run_cli("run", "--headless", "--replay", "missing.txt")
    assert result.returncode != 0
    assert "Replay file not found" in result.stderr


def test_replay_file_invalid(tmp_cwd):
    (tmp_cwd / "steps.txt").write_text("add robot\n")
    result = _run_cli("run", "--headless", "--replay", "steps.txt")
    assert result.returncode != 0
    assert "Invalid replay file" in result.stderr


def test_headless_replay_json(tmp_cwd):
    (tmp_cwd / "context-playground.yaml").write_text("token_source: 'fixed:10'\n")
    (tmp_cwd / "steps.txt").write_text("add user\nadd assistant\nmove 2 0\nremove 1\n")
    result = _run_cli("run", "--headless", "--replay", "steps.txt", "--json")
    assert result.returncode == 0, result.stderr
    assert "Step 4/4" in result.stderr

    snapshot = json.loads(result.stdout)
    assert [b["kind"] for b in snapshot["blocks"]] == ["assistant", "user"]
    assert snapshot["usage"]["total_tokens"] == 20
    assert snapshot["gesture"]["active_id"] is None


def test_headless_seed_is_reproducible(tmp_cwd):
    (tmp_cwd / "steps.txt").write_text("add user\nadd assistant\nadd system\n")
    args = ("run", "--headless", "--replay", "steps.txt", "--seed", "11", "--json")
    first = json.loads(_run_cli(*args).stdout)
    second = json.loads(_run_cli(*args).stdout)
    costs = [b["token_cost"] for b in first["blocks"]]
    assert costs == [b["token_cost"] for b in second["blocks"]]
    assert all(5 <= c <= 24 for c in costs[1:])

"""Tests for the command line entry point."""

import json
import textwrap

import pytest
from click.testing import CliRunner

from content_mapper.__main__ import main

PLAN = textwrap.dedent(
    """
    directives:
      - strategy: 7
        slot_path: data[*].feed.title
        value_path: data[*].feed.url
    """
)


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    return CliRunner()


@pytest.fixture
def plan_file(tmp_path):
    path = tmp_path / "plan.yaml"
    path.write_text(PLAN, encoding="utf-8")
    return path


def test_json_output_from_sample_data(runner, plan_file):
    result = runner.invoke(main, [str(plan_file), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["mappings"]["title1"] == 0
    assert payload["content"]["0"] == "url1"


def test_table_output_from_file(runner, plan_file, tmp_path):
    source = tmp_path / "feed.json"
    source.write_text(
        json.dumps({"data": [{"feed": {"title": "home", "url": "https://x.test"}}]}),
        encoding="utf-8",
    )
    result = runner.invoke(main, [str(plan_file), "--source", str(source)])
    assert result.exit_code == 0
    assert "home" in result.output
    assert "1 content entries" in result.output


def test_missing_plan_exits_with_configuration_error(runner, tmp_path):
    result = runner.invoke(main, [str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1


def test_mapping_failure_exits_with_3(runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("directives:\n  - strategy: 0\n    value_path: x\n", encoding="utf-8")
    result = runner.invoke(main, [str(path)])
    assert result.exit_code == 3

"""Tests for the chatfeed command line interface."""

import json

from typer.testing import CliRunner

from chatfeed.cli import app
from chatfeed.errors import ProviderQueryFailure
from chatfeed.harness import ScrollTestResult

runner = CliRunner()


def _write_settings(tmp_path, document):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_limit_uses_default_settings():
    result = runner.invoke(app, ["limit", "--viewport", "740"])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "30"


def test_limit_reads_settings_file(tmp_path):
    path = _write_settings(tmp_path, {"scroll": {"min_page_size": 50}})
    result = runner.invoke(app, ["limit", "--viewport", "100", "--settings", str(path)])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "50"


def test_settings_prints_effective_document():
    result = runner.invoke(app, ["settings"])
    assert result.exit_code == 0, result.output
    document = json.loads(result.stdout)
    assert document["schema"] == "chatfeed/settings@1"
    assert document["scroll"]["query_factor"] == 3.0
    assert document["feed"]["order_by"] == "timestamp"


def test_invalid_settings_file_exits_with_2(tmp_path):
    path = _write_settings(tmp_path, {"scroll": {"query_factor": 1.0}})
    for command in (["settings"], ["limit", "--viewport", "740"]):
        result = runner.invoke(app, [*command, "--settings", str(path)])
        assert result.exit_code == 2
        assert "Error:" in result.output


def test_unreadable_settings_file_exits_with_2(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["settings", "--settings", str(path)])
    assert result.exit_code == 2


def test_harness_passes():
    result = runner.invoke(app, ["harness", "--messages", "200", "--viewport", "740"])
    assert result.exit_code == 0, result.output
    assert "All scroll anchor validations passed" in result.stdout


def test_harness_failure_exits_with_1(monkeypatch):
    async def _failing(cfg, settings, report=None):
        return ScrollTestResult(False, "anchor drifted by 12px")

    monkeypatch.setattr("chatfeed.cli.run_scroll_validation", _failing)
    result = runner.invoke(app, ["harness", "--messages", "50"])
    assert result.exit_code == 1
    assert "FAILED: anchor drifted by 12px" in result.stdout


def test_feed_error_exits_with_1(monkeypatch):
    def _broken(path=None):
        raise ProviderQueryFailure("provider unavailable")

    monkeypatch.setattr("chatfeed.cli.load_settings", _broken)
    result = runner.invoke(app, ["limit", "--viewport", "740"])
    assert result.exit_code == 1
    assert "Unexpected error: provider unavailable" in result.output

"""Tests for the command-line entry point."""

from __future__ import annotations

from typer.testing import CliRunner

from article_refresher import cli
from article_refresher.core.errors import ExtractionShortfall
from article_refresher.core.types import RunResult


runner = CliRunner()


def test_run_exits_zero_on_success(monkeypatch, tmp_path):
    captured = {}

    def fake_run_pipeline(cfg, console=None, log_dir=None, show_progress=True):
        captured["cfg"] = cfg
        captured["log_dir"] = log_dir
        return RunResult(status="done")

    monkeypatch.setattr(cli, "run_pipeline", fake_run_pipeline)

    result = runner.invoke(
        cli.app,
        [
            "--config",
            str(tmp_path / "missing.yaml"),
            "--api-url",
            "https://api.example.com/api",
            "--api-key",
            "test-key",
            "--log-level",
            "DEBUG",
        ],
    )

    assert result.exit_code == 0
    assert captured["cfg"].api.base_url == "https://api.example.com/api"
    assert captured["cfg"].provider.api_key == "test-key"
    assert captured["cfg"].logging.level == "DEBUG"
    assert captured["log_dir"] is None


def test_run_enables_file_logging_with_log_dir(monkeypatch, tmp_path):
    captured = {}

    def fake_run_pipeline(cfg, console=None, log_dir=None, show_progress=True):
        captured["cfg"] = cfg
        captured["log_dir"] = log_dir
        captured["show_progress"] = show_progress
        return RunResult(status="done")

    monkeypatch.setattr(cli, "run_pipeline", fake_run_pipeline)

    result = runner.invoke(
        cli.app,
        ["--config", str(tmp_path / "missing.yaml"), "--log-dir", str(tmp_path / "logs"), "--no-progress"],
    )

    assert result.exit_code == 0
    assert captured["cfg"].logging.file is True
    assert captured["log_dir"] == tmp_path / "logs"
    assert captured["show_progress"] is False


def test_run_exits_nonzero_on_abort(monkeypatch, tmp_path):
    def fake_run_pipeline(cfg, console=None, log_dir=None, show_progress=True):
        raise ExtractionShortfall("Not enough reference articles scraped successfully (1 of 2)")

    monkeypatch.setattr(cli, "run_pipeline", fake_run_pipeline)

    result = runner.invoke(cli.app, ["--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_run_exits_nonzero_on_configuration_error(monkeypatch, tmp_path):
    def fake_run_pipeline(cfg, console=None, log_dir=None, show_progress=True):
        raise ValueError("Missing Gemini API key")

    monkeypatch.setattr(cli, "run_pipeline", fake_run_pipeline)

    result = runner.invoke(cli.app, ["--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Missing Gemini API key" in result.output


def test_run_reports_invalid_config_without_running(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli, "run_pipeline", lambda *args, **kwargs: calls.append(args))
    path = tmp_path / "config.yaml"
    path.write_text("search:\n  max_results: 5\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(path)])

    assert result.exit_code == 1
    assert "max_results must be at most 2" in result.output
    assert calls == []


def test_run_reads_laravel_api_url_env(monkeypatch, tmp_path):
    captured = {}

    def fake_run_pipeline(cfg, console=None, log_dir=None, show_progress=True):
        captured["cfg"] = cfg
        return RunResult(status="done")

    monkeypatch.setattr(cli, "run_pipeline", fake_run_pipeline)
    monkeypatch.delenv("ARTICLE_API_URL", raising=False)
    monkeypatch.setenv("LARAVEL_API_URL", "https://laravel.example.com/api")

    result = runner.invoke(cli.app, ["--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 0
    assert captured["cfg"].api.base_url == "https://laravel.example.com/api"

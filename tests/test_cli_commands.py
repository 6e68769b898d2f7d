"""
Unit Tests for CLI Commands

Tests the CLI entry points with mock embeddings and mock generation.

PATTERNS:
---------
1. Mock-backed environment, no network calls
2. Test CLI argument parsing and dispatch
3. Verify exit codes
"""

import json

import pytest
from unittest.mock import patch

from medical_rag_pipeline.core import reset_config
from medical_rag_pipeline.observability import reset_tracer, reset_tracing_config


@pytest.fixture
def mock_env(monkeypatch):
    """Mock-only environment; .env loading disabled."""
    monkeypatch.setenv("USE_MOCK_EMBEDDINGS", "true")
    monkeypatch.setenv("USE_MOCK_GENERATION", "true")
    monkeypatch.setenv("EMBEDDING_DIM", "4096")
    monkeypatch.delenv("PHOENIX_ENABLED", raising=False)
    reset_config()
    reset_tracing_config()
    reset_tracer()
    with patch("medical_rag_pipeline.cli.commands.load_dotenv"):
        yield
    reset_config()
    reset_tracing_config()
    reset_tracer()


# ---------------------------------------------------------------------------
# LOAD_ENV TESTS
# ---------------------------------------------------------------------------


class TestLoadEnv:
    def test_load_env_calls_dotenv(self):
        from medical_rag_pipeline.cli import commands

        with patch.object(commands, "load_dotenv") as mock_load:
            commands._load_env()

        mock_load.assert_called_once()


# ---------------------------------------------------------------------------
# MAIN CLI DISPATCH TESTS
# ---------------------------------------------------------------------------


class TestMainCliDispatch:
    """Test main CLI dispatches to correct handlers."""

    @pytest.mark.parametrize(
        "command,handler",
        [("ask", "run_ask_cli"), ("classify", "run_classify_cli"), ("stats", "run_stats_cli")],
    )
    def test_dispatch(self, command, handler):
        from medical_rag_pipeline.cli import commands

        with patch.object(commands, handler, return_value=0) as mock_handler:
            result = commands.main([command, "extra"])

        mock_handler.assert_called_once_with(["extra"])
        assert result == 0

    def test_unknown_command_exits(self):
        from medical_rag_pipeline.cli import commands

        with pytest.raises(SystemExit):
            commands.main(["evaluate"])

    def test_keyboard_interrupt(self):
        from medical_rag_pipeline.cli import commands

        with patch.object(commands, "run_stats_cli", side_effect=KeyboardInterrupt):
            assert commands.main(["stats"]) == 130


# ---------------------------------------------------------------------------
# COMMAND TESTS
# ---------------------------------------------------------------------------


class TestClassifyCli:
    def test_emergency(self, capsys):
        from medical_rag_pipeline.cli import run_classify_cli

        assert run_classify_cli(["dor no peito"]) == 0

        out = capsys.readouterr().out
        assert "Urgency: emergency" in out
        assert "MEDICAL EMERGENCY" in out

    def test_low(self, capsys):
        from medical_rag_pipeline.cli import run_classify_cli

        run_classify_cli(["what is hypertension"])
        assert "Urgency: low" in capsys.readouterr().out


class TestAskCli:
    def test_answer_printed(self, mock_env, capsys):
        from medical_rag_pipeline.cli import run_ask_cli

        assert run_ask_cli(["hypertension blood pressure"]) == 0

        out = capsys.readouterr().out
        assert "MEDICAL ANSWER" in out
        assert "Hypertension" in out
        assert "Confidence:" in out

    def test_json_envelope(self, mock_env, capsys):
        from medical_rag_pipeline.cli import run_ask_cli

        assert run_ask_cli(["flu fever", "--json", "--patient-id", "p-1"]) == 0

        wire = json.loads(capsys.readouterr().out)
        assert wire["success"] is True
        assert "queryId" in wire["metadata"]

    def test_blank_question_fails(self, mock_env, capsys):
        from medical_rag_pipeline.cli import run_ask_cli

        assert run_ask_cli(["   "]) == 1
        assert "MISSING_TEXT" in capsys.readouterr().out

    def test_emergency_banner(self, mock_env, capsys):
        from medical_rag_pipeline.cli import run_ask_cli

        run_ask_cli(["chest pain"])
        assert "MEDICAL EMERGENCY" in capsys.readouterr().err


class TestStatsCli:
    def test_healthy(self, mock_env, capsys):
        from medical_rag_pipeline.cli import run_stats_cli

        assert run_stats_cli([]) == 0

        status = json.loads(capsys.readouterr().out)
        assert status["healthy"] is True
        assert status["store"]["documents"] == 5

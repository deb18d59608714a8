"""Unit tests for logging configuration."""

import json
from pathlib import Path

from loguru import logger

from condo_voting.core.logging import setup_logging


class TestLogging:
    """Tests for Loguru logging setup."""

    def test_setup_logging_does_not_raise(self) -> None:
        setup_logging("DEBUG")
        setup_logging("INFO")
        setup_logging("WARNING")

    def test_setup_logging_case_insensitive(self) -> None:
        setup_logging("info")
        setup_logging("debug")

    def test_records_without_context_use_placeholders(self, capsys) -> None:
        setup_logging("INFO")
        logger.info("no poll context")
        logger.bind(poll_id="p-1", unit_id="u-9").info("with context")
        err = capsys.readouterr().err
        assert "poll=- unit=- | no poll context" in err
        assert "poll=p-1 unit=u-9 | with context" in err

    def test_log_dir_adds_file_sink(self, tmp_path: Path) -> None:
        setup_logging("INFO", log_dir=str(tmp_path / "logs"))
        logger.bind(poll_id="p-2").info("written to file")
        logger.complete()
        setup_logging("INFO")
        content = (tmp_path / "logs" / "condo-voting.log").read_text()
        assert "poll=p-2 unit=- | written to file" in content

    def test_json_logs_serialize_records(self, capsys) -> None:
        setup_logging("INFO", json_logs=True)
        logger.bind(poll_id="p-3", unit_id="u-1").info("as json")
        setup_logging("INFO")
        line = next(line for line in capsys.readouterr().err.splitlines() if "as json" in line)
        record = json.loads(line)["record"]
        assert record["message"] == "as json"
        assert record["extra"] == {"poll_id": "p-3", "unit_id": "u-1"}

    def test_text_logs_are_not_json(self, capsys) -> None:
        setup_logging("INFO")
        logger.info("plain text")
        err = capsys.readouterr().err
        assert "plain text" in err
        assert '"record"' not in err

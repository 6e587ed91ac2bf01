"""
Tests for config_loader module and the event log.

Tests configuration handling including:
- Defaults when the file is missing
- Validation errors
- Sample config generation
- Event log formatting
"""

import json
import re
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from judge.config_loader import load_config, create_sample_config
from judge.event_log import EventLog
from judge.models import JudgeConfig


class TestLoadConfig:
    """Test loading configuration files."""

    def test_missing_file_uses_defaults(self, tmp_path, capsys):
        config = load_config(tmp_path / "nope.json")

        assert config == JudgeConfig.default()
        assert "Warning" in capsys.readouterr().out

    def test_defaults(self):
        config = JudgeConfig.default()

        assert config.max_concurrent_evaluations == 4
        assert config.default_time_limit_ms == 5000
        assert config.default_memory_limit_mb == 256
        assert config.validate() == (True, "")

    def test_loads_values(self, tmp_path):
        path = tmp_path / "judge_config.json"
        path.write_text(json.dumps({"max_concurrent_evaluations": 8, "feedback_enabled": False}), encoding='utf-8')

        config = load_config(path)

        assert config.max_concurrent_evaluations == 8
        assert config.feedback_enabled is False
        assert config.compile_timeout_seconds == 30.0

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "judge_config.json"
        path.write_text("{", encoding='utf-8')

        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    @pytest.mark.parametrize("data", [
        {"max_concurrent_evaluations": 0},
        {"default_time_limit_ms": -1},
        {"compile_timeout_seconds": 0},
        {"evaluation_grace_seconds": -5},
    ])
    def test_invalid_values(self, tmp_path, data):
        path = tmp_path / "judge_config.json"
        path.write_text(json.dumps(data), encoding='utf-8')

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_sample_config_loads(self, tmp_path):
        path = tmp_path / "sample.json"
        create_sample_config(path)

        config = load_config(path)

        assert config.log_path == "judge.log"
        assert config.validate()[0]


class TestEventLog:
    """Test the timestamped event log."""

    def test_in_memory_entries(self):
        log = EventLog()
        log.log("SUBMISSION_CREATED", "Submission: 1")
        log.log("PING")

        assert re.match(r"\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] - SUBMISSION_CREATED - Submission: 1$", log.entries[0])
        assert log.entries[1].endswith("] - PING")
        assert log.events() == ["SUBMISSION_CREATED", "PING"]

    def test_appends_to_file(self, tmp_path):
        path = tmp_path / "logs" / "judge.log"
        log = EventLog(path)
        log.log("A", "one")
        log.log("B", "two")

        lines = path.read_text(encoding='utf-8').splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("- A - one")

# tests/integration/logging/test_int_logging_subsystem.py — v1
"""Integration tests for the logging subsystem.

Covers: logging/logger.py, logging/handlers.py, logging/context.py
together with the record operations that log through them.
"""

from __future__ import annotations

import json
import logging

from recordkit.core.models import CombineOutcome, Precedence
from recordkit.logging.logger import setup_logging
from recordkit.records.sequence import SequenceSpec


def _entries(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestOperationContextInLogs:
    def test_combine_logged_with_context(self, people_set, tmp_path):
        log_file = tmp_path / "logs" / "recordkit.log"
        setup_logging(level="INFO", log_format="json", log_file=log_file)
        people_set.set_sequence(SequenceSpec.from_names(people_set.rec_def, ["Status"]))
        people_set.combine(Precedence.LATER_WINS, CombineOutcome.NO_DATA_LOSS)

        combine = [e for e in _entries(log_file) if e["message"].startswith("Combined")]
        assert len(combine) == 1
        assert combine[0]["logger"] == "recordkit.records.record_set"
        assert combine[0]["context"] == {
            "source_id": people_set.file_id,
            "operation": "combine",
        }

    def test_context_cleared_after_operation(self, people_set, tmp_path):
        log_file = tmp_path / "recordkit.log"
        setup_logging(level="INFO", log_format="json", log_file=log_file)
        people_set.set_sequence(SequenceSpec.from_names(people_set.rec_def, ["Name"]))
        people_set.combine(Precedence.LATER_WINS, CombineOutcome.OVERRIDE)

        logging.getLogger("recordkit.probe").info("after")
        last = _entries(log_file)[-1]
        assert last["message"] == "after"
        assert "context" not in last

    def test_rotation_keeps_backups(self, tmp_path):
        log_file = tmp_path / "small.log"
        root = setup_logging(level="INFO", log_file=log_file, rotation="1KB", retention=2)
        for n in range(100):
            root.info("line %03d %s", n, "x" * 40)
        backups = sorted(p.name for p in tmp_path.glob("small.log.*"))
        assert backups == ["small.log.1", "small.log.2"]

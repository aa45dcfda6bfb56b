"""Tests for structured logging helpers."""

import io
import logging
import unittest

from core.structured_logging import (
    configure_structured_logging,
    get_phase,
    get_run_id,
    phase_scope,
    resolve_log_level,
    set_run_id,
)


class TestStructuredLogging(unittest.TestCase):
    def setUp(self) -> None:
        self._root_level = logging.getLogger().level
        self._handler = None

    def tearDown(self) -> None:
        root_logger = logging.getLogger()
        if self._handler in root_logger.handlers:
            root_logger.removeHandler(self._handler)
        root_logger.setLevel(self._root_level)

    def _configure(self, level="INFO") -> io.StringIO:
        stream = io.StringIO()
        self._handler = configure_structured_logging(level, stream=stream)
        return stream

    def test_records_carry_run_and_phase(self) -> None:
        stream = self._configure()
        set_run_id("run-42")

        with phase_scope("extract"):
            self.assertEqual(get_phase(), "extract")
            logging.getLogger("rsextract.test").info("hello")
        logging.getLogger("rsextract.test").info("after")

        lines = stream.getvalue().splitlines()
        self.assertIn("run_id=run-42 | phase=extract", lines[0])
        self.assertIn("hello", lines[0])
        self.assertIn("phase=- ", lines[1])

    def test_reconfigure_replaces_handler(self) -> None:
        first = self._configure()
        second = self._configure("WARNING")

        logging.getLogger("rsextract.test").warning("once")

        self.assertEqual(first.getvalue(), "")
        self.assertEqual(second.getvalue().count("once"), 1)
        self.assertEqual(logging.getLogger().level, logging.WARNING)

    def test_generated_run_id(self) -> None:
        run_id = set_run_id()
        self.assertEqual(len(run_id), 12)
        self.assertEqual(get_run_id(), run_id)

    def test_resolve_log_level(self) -> None:
        self.assertEqual(resolve_log_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_log_level(logging.ERROR), logging.ERROR)
        with self.assertRaises(ValueError):
            resolve_log_level("chatty")


if __name__ == "__main__":
    unittest.main()

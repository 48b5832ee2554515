"""
Tests for logging configuration helpers.
"""

import logging
import tempfile
import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from postman_core.logging_config import (
    ROOT_LOGGER_NAME,
    LogTimer,
    get_logger,
    log_exception,
    setup_logging,
)


class TestLoggingConfig(unittest.TestCase):
    """Package logger setup."""

    def tearDown(self):
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in package_logger.handlers:
            handler.close()
        package_logger.handlers.clear()
        package_logger.propagate = True
        package_logger.setLevel(logging.NOTSET)

    def test_get_logger_nests_under_package(self):
        self.assertEqual(get_logger("tools").name, "postman_core.tools")
        self.assertEqual(get_logger("postman_core.geo").name, "postman_core.geo")

    def test_file_logging(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "logs" / "planner.log"
            logger = setup_logging(level=logging.DEBUG, log_file=log_file, console=False)
            logger.info("network loaded")
            for handler in logger.handlers:
                handler.flush()
                handler.close()

            self.assertIn("network loaded", log_file.read_text(encoding="utf-8"))
            self.assertFalse(logger.propagate)

    def test_log_timer_records_elapsed(self):
        logger = get_logger("timing")
        with self.assertLogs(logger, level="INFO") as captured:
            with LogTimer(logger, "Balancing") as timer:
                pass

        self.assertGreaterEqual(timer.elapsed, 0.0)
        self.assertTrue(captured.output[0].endswith("s"))
        self.assertIn("Balancing", captured.output[0])

    def test_log_exception(self):
        logger = get_logger("errors")
        with self.assertLogs(logger, level="ERROR") as captured:
            log_exception(logger, "Route planning failed", ValueError("bad input"))

        self.assertIn("Route planning failed: bad input", captured.output[0])


if __name__ == '__main__':
    unittest.main()

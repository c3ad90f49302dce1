# File: tests/integration/test_main_app.py
"""
Integration Tests for the application entry point
"""

import logging
import os
import tempfile
import unittest
from unittest.mock import patch

from tests.helpers import TODAY, make_clock
from ecoride.main import RentalApplication, create_application, setup_logging, main


class TestRentalApplication(unittest.TestCase):

    def test_create_default_application(self):
        app = create_application()
        self.assertIsInstance(app, RentalApplication)
        self.assertIs(app.command_handler.service, app.service)

    def test_configured_application_handles_commands(self):
        app = create_application({"clock": make_clock(), "lead_time_days": 2})
        status = app.service.get_system_status()
        self.assertEqual(status.lead_time_days, 2)
        self.assertEqual(status.system_date, TODAY)

        result = app.handle({"type": "register_vehicle",
                             "data": {"model": "Toyota Aqua", "tier_index": 0}})
        self.assertTrue(result["success"])
        self.assertEqual(result["data"]["id"], "V001")

    def test_invalid_configuration_raises(self):
        with self.assertRaises(ValueError):
            create_application({"lead_time_days": -1})


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level
        self.root.handlers = []

    def tearDown(self):
        for handler in self.root.handlers:
            handler.close()
        self.root.handlers = self.saved_handlers
        self.root.setLevel(self.saved_level)

    def test_file_handler_creates_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "ecoride.log")
            logger = setup_logging(logging.DEBUG, log_file)

            logger.info("hello")
            self.assertTrue(os.path.exists(log_file))
            self.assertEqual(self.root.level, logging.DEBUG)
            self.assertEqual(len(self.root.handlers), 2)

            for handler in self.root.handlers:
                handler.close()
            self.root.handlers = []

    def test_main_reports_status(self):
        with tempfile.TemporaryDirectory() as tmp, patch("builtins.print") as mock_print:
            self.assertEqual(main(log_file=os.path.join(tmp, "ecoride.log")), 0)
            for handler in self.root.handlers:
                handler.close()
            self.root.handlers = []

        printed = mock_print.call_args[0][0]
        self.assertIn("total_bookings", printed)

    def test_main_logs_to_stdout_only_by_default(self):
        with patch("ecoride.main.setup_logging", return_value=logging.getLogger("ecoride.main")) as mock_setup, \
                patch("builtins.print"):
            self.assertEqual(main(), 0)
        mock_setup.assert_called_once_with(log_file=None)


if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3
"""
Integration tests for the command-line entry point
"""

import io
import logging
import os
import tempfile
import unittest
from unittest.mock import patch

from parkledger import main as entry_point
from parkledger.domain.exceptions import ResourceExhaustionError


class TestMain(unittest.TestCase):

    def tearDown(self):
        # setup_logging replaces the root handlers
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
            handler.close()

    def run_main(self, script, *argv):
        stdout = io.StringIO()
        with patch("sys.stdin", io.StringIO(script)), patch("sys.stdout", stdout), \
                patch("sys.stderr", io.StringIO()):
            code = entry_point.main(["--log-level", "CRITICAL", *argv])
        return code, stdout.getvalue().splitlines()

    def test_runs_script(self):
        code, lines = self.run_main(
            "p Parking1 2 1.0 1.5 20.0\n"
            "e Parking1 AA-00-AA 01-01-2023 10:00\n"
            "s Parking1 AA-00-AA 01-01-2023 11:00\n"
            "q\n"
        )
        self.assertEqual(code, 0)
        self.assertEqual(lines, ["Parking1 1", "AA-00-AA 01-01-2023 10:00 01-01-2023 11:00 4.00"])

    def test_max_facilities_flag(self):
        code, lines = self.run_main("p A 1 1 2 3\np B 1 1 2 3\nq\n", "--max-facilities", "1")
        self.assertEqual(code, 0)
        self.assertEqual(lines, ["too many parks."])

    def test_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "parkledger.log")
            code, _ = self.run_main("p A 1 1 2 3\nq\n", "--log-file", log_file)
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(log_file))
            self.tearDown()

    def test_fatal_error_exit_code(self):
        with patch.object(entry_point.ConsoleApp, "run", side_effect=ResourceExhaustionError("out of memory.")):
            code, _ = self.run_main("")
        self.assertEqual(code, 1)

    def test_build_parser_defaults(self):
        args = entry_point.build_parser().parse_args([])
        self.assertEqual(args.max_facilities, 20)
        self.assertEqual(args.log_level, "WARNING")
        self.assertIsNone(args.log_file)


if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3
"""
Integration tests driving the console with whole command scripts
"""

import io
import unittest

from parkledger.application.parking_service import ParkingService
from parkledger.presentation.console import CommandLineParser, ConsoleApp


def run_script(script, service=None):
    """Feed a script to a fresh console and return (output lines, service)"""
    service = service or ParkingService()
    output = io.StringIO()
    ConsoleApp(service).run(io.StringIO(script), output)
    return output.getvalue().splitlines(), service


class TestCommandLineParser(unittest.TestCase):

    def setUp(self):
        self.parser = CommandLineParser()

    def test_tokenize_quoted_names(self):
        self.assertEqual(self.parser.tokenize(' "Central Park" 5 1 2 3'),
                         ["Central Park", "5", "1", "2", "3"])
        self.assertEqual(self.parser.tokenize("O'Hare 5"), ["O'Hare", "5"])

    def test_parse_lines(self):
        test_cases = [
            ("p", "list_facilities", {}),
            ("p P1 2 1.0 1.5 20.0", "add_facility", {
                "name": "P1", "capacity": "2", "first_hour_rate": "1.0",
                "after_hour_rate": "1.5", "daily_cap": "20.0"}),
            ("e P1 AA-00-AA 01-01-2023 10:00", "register_entry", {
                "facility_name": "P1", "plate": "AA-00-AA", "date": "01-01-2023", "time": "10:00"}),
            ("s P1 AA-00-AA", "register_exit", {"facility_name": "P1", "plate": "AA-00-AA"}),
            ("v AA-00-AA", "vehicle_history", {"plate": "AA-00-AA"}),
            ("f P1 01-01-2023", "revenue", {"facility_name": "P1", "date": "01-01-2023"}),
            ('r "My Park"', "remove_facility", {"facility_name": "My Park"}),
        ]
        for line, command_type, data in test_cases:
            parsed = self.parser.parse(line)
            self.assertEqual((parsed.command_type, parsed.data), (command_type, data), msg=line)

    def test_ignored_lines(self):
        for line in ["", "   ", "x something", "p P1 2 1", "e P1", "v", "f", "r", 'p "unterminated 1 2 3 4']:
            self.assertIsNone(self.parser.parse(line), msg=repr(line))


class TestConsoleScenarios(unittest.TestCase):

    def test_full_scenario(self):
        lines, _ = run_script(
            "p Parking1 2 1.0 1.5 20.0\n"
            "e Parking1 AA-00-AA 01-01-2023 10:00\n"
            "s Parking1 AA-00-AA 01-01-2023 11:00\n"
            "p\n"
            "f Parking1\n"
            "f Parking1 01-01-2023\n"
            "v AA-00-AA\n"
            "q\n"
        )
        self.assertEqual(lines, [
            "Parking1 1",
            "AA-00-AA 01-01-2023 10:00 01-01-2023 11:00 4.00",
            "Parking1 2 2",
            "01-01-2023 4.00",
            "AA-00-AA 11:00 4.00",
            "Parking1 01-01-2023 10:00 01-01-2023 11:00",
        ])

    def test_error_messages(self):
        lines, _ = run_script(
            "p P1 1 1 2 3\n"
            "p P1 1 1 2 3\n"
            "p P2 0 1 2 3\n"
            "p P2 5 3 2 1\n"
            "e Nowhere AA-00-AA 01-01-2023 10:00\n"
            "e P1 AA-AA-AA 01-01-2023 10:00\n"
            "e P1 AA-00-AA 01-01-2023 10:00\n"
            "e P1 BB-00-BB 01-01-2023 10:00\n"
            "s P1 BB-00-BB 01-01-2023 11:00\n"
            "s P1 AA-00-AA 01-01-2023 09:00\n"
            "s P1 AA-00-AA 31-02-2023 11:00\n"
            "v CC-00-CC\n"
            "f P1 02-01-2023\n"
            "r Nowhere\n"
        )
        self.assertEqual(lines, [
            "P1: parking already exists.",
            "0: invalid capacity.",
            "invalid cost.",
            "Nowhere: no such parking.",
            "AA-AA-AA: invalid licence plate.",
            "P1 0",
            "P1: parking is full.",
            "BB-00-BB: invalid vehicle exit.",
            "invalid date.",
            "invalid date.",
            "CC-00-CC: no entries found in any parking.",
            "invalid date.",
            "Nowhere: no such parking.",
        ])

    def test_exit_without_date_prints_nothing(self):
        lines, _ = run_script(
            "p P1 2 1 2 3\n"
            "e P1 AA-00-AA 01-01-2023 10:00\n"
            "s P1 AA-00-AA\n"
            "s P1 AA-00-AA 01-01-2023\n"
            "s P1 ZZ-99-ZZ\n"
            "s Nowhere AA-00-AA\n"
            "p\n"
        )
        self.assertEqual(lines, [
            "P1 1",
            "ZZ-99-ZZ: invalid vehicle exit.",
            "Nowhere: no such parking.",
            "P1 2 1",
        ])

    def test_unbillable_cap_rejected(self):
        lines, _ = run_script(
            "p P1 2 1 2 9e999999\n"
            "e P1 AA-00-AA 01-01-2023 10:00\n"
            "s P1 AA-00-AA 03-01-2023 10:00\n"
            "p\n"
        )
        self.assertEqual(lines, [
            "invalid cost.",
            "P1: no such parking.",
            "P1: no such parking.",
        ])

    def test_quoted_names_and_removal(self):
        lines, service = run_script(
            'p "Central Park" 5 1 2 30\n'
            "p Beta 5 1 2 30\n"
            "p Alpha 5 1 2 30\n"
            'e "Central Park" AA-00-AA 01-01-2023 08:00\n'
            'r "Central Park"\n'
            "v AA-00-AA\n"
            "p\n",
        )
        self.assertEqual(lines, [
            "Central Park 4",
            "Alpha",
            "Beta",
            "AA-00-AA: no entries found in any parking.",
            "Beta 5 5",
            "Alpha 5 5",
        ])

    def test_history_shows_open_event(self):
        lines, _ = run_script(
            "p B 5 1 2 30\n"
            "p A 5 1 2 30\n"
            "e B AA-00-AA 01-01-2023 08:00\n"
            "s B AA-00-AA 01-01-2023 08:20\n"
            "e A AA-00-AA 01-01-2023 09:00\n"
            "v AA-00-AA\n"
        )
        self.assertEqual(lines[-2:], [
            "A 01-01-2023 09:00",
            "B 01-01-2023 08:00 01-01-2023 08:20",
        ])
        self.assertEqual(lines[1], "AA-00-AA 01-01-2023 08:00 01-01-2023 08:20 2.00")

    def test_revenue_per_day(self):
        lines, _ = run_script(
            "p P 5 1 2 30\n"
            "e P AA-00-AA 01-01-2023 08:00\n"
            "e P BB-11-BB 01-01-2023 08:00\n"
            "s P AA-00-AA 01-01-2023 09:00\n"
            "s P BB-11-BB 02-01-2023 09:00\n"
            "f P\n"
            "f P 01-01-2023\n"
            "f P 31-12-2022\n"
            "f P 02-01-2023\n"
        )
        self.assertEqual(lines[-4:], [
            "01-01-2023 4.00",
            "02-01-2023 34.00",
            "AA-00-AA 09:00 4.00",
            "BB-11-BB 09:00 34.00",
        ])

    def test_quit_tears_down(self):
        lines, service = run_script(
            "p P 5 1 2 30\n"
            "q\n"
            "p\n"
        )
        self.assertEqual(lines, [])
        self.assertEqual(service.list_facilities(), [])

    def test_end_of_input_tears_down(self):
        _, service = run_script("p P 5 1 2 30\n")
        self.assertEqual(service.list_facilities(), [])


if __name__ == '__main__':
    unittest.main()

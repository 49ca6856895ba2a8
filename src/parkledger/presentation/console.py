# File: src/parkledger/presentation/console.py
"""
Line-oriented console for the parking ledger

Each input line starts with a one-letter command followed by its arguments:

    p [name capacity x y z]   list facilities, or add one
    e name plate date time    vehicle entry
    s name plate date time    vehicle exit
    v plate                   vehicle history
    f name [date]             facility revenue
    r name                    remove facility
    q                         quit

Facility names may be double-quoted to contain spaces. Lines with missing
arguments are ignored. Entries and exits without a date or time are still
sent on: an entry then reports an invalid date, while an exit is checked up
to the parked vehicle and otherwise prints nothing.

Architecture:
- CommandLineParser turns a raw line into a command type and request data
- CommandProcessor runs it against the ParkingService
- OutputFormatter renders the result, or the error message, as text lines
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, TextIO
import logging
import shlex
import sys

from ..application.commands import CommandFactory, CommandProcessor, CommandResult
from ..application.parking_service import ParkingService


QUIT = 'q'


@dataclass
class ParsedLine:
    """A console line resolved to a command type and its request data"""
    command_type: str
    data: Dict[str, Any]


class CommandLineParser:
    """Tokenizer and argument mapper for console lines"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._builders = {
            'p': self._facility,
            'e': self._entry,
            's': self._exit,
            'v': self._history,
            'f': self._revenue,
            'r': self._remove,
        }

    @staticmethod
    def tokenize(text: str) -> List[str]:
        """
        Split on whitespace, keeping double-quoted names together
        Raises: ValueError on an unterminated quote
        """
        lexer = shlex.shlex(text, posix=True)
        lexer.whitespace_split = True
        lexer.quotes = '"'
        lexer.escape = ''
        lexer.commenters = ''
        return list(lexer)

    def parse(self, line: str) -> Optional[ParsedLine]:
        """
        Map a line to a command
        Returns: None for blank, unknown or incomplete lines
        """
        line = line.strip()
        if not line:
            return None

        builder = self._builders.get(line[0])
        if builder is None:
            self.logger.debug(f"Ignoring unknown command {line[0]!r}")
            return None

        try:
            args = self.tokenize(line[1:])
        except ValueError as e:
            self.logger.warning(f"Ignoring malformed line {line!r}: {e}")
            return None

        parsed = builder(args)
        if parsed is None:
            self.logger.debug(f"Ignoring incomplete command {line!r}")
        return parsed

    def _facility(self, args: List[str]) -> Optional[ParsedLine]:
        if not args:
            return ParsedLine("list_facilities", {})
        if len(args) < 5:
            return None
        name, capacity, first_hour, after_hour, daily_cap = args[:5]
        return ParsedLine("add_facility", {
            "name": name,
            "capacity": capacity,
            "first_hour_rate": first_hour,
            "after_hour_rate": after_hour,
            "daily_cap": daily_cap
        })

    def _movement(self, command_type: str, args: List[str]) -> Optional[ParsedLine]:
        if len(args) < 2:
            return None
        data = {"facility_name": args[0], "plate": args[1]}
        if len(args) > 2:
            data["date"] = args[2]
        if len(args) > 3:
            data["time"] = args[3]
        return ParsedLine(command_type, data)

    def _entry(self, args: List[str]) -> Optional[ParsedLine]:
        return self._movement("register_entry", args)

    def _exit(self, args: List[str]) -> Optional[ParsedLine]:
        return self._movement("register_exit", args)

    def _history(self, args: List[str]) -> Optional[ParsedLine]:
        if not args:
            return None
        return ParsedLine("vehicle_history", {"plate": args[0]})

    def _revenue(self, args: List[str]) -> Optional[ParsedLine]:
        if not args:
            return None
        data = {"facility_name": args[0]}
        if len(args) > 1:
            data["date"] = args[1]
        return ParsedLine("revenue", data)

    def _remove(self, args: List[str]) -> Optional[ParsedLine]:
        if not args:
            return None
        return ParsedLine("remove_facility", {"facility_name": args[0]})


class OutputFormatter:
    """Renders command results as console lines"""

    def format(self, command_type: str, result: CommandResult) -> List[str]:
        if not result.success:
            return [result.error_message]

        renderer = getattr(self, f"_format_{command_type}", None)
        if renderer is None:
            return []
        return renderer(result.data)

    def _format_list_facilities(self, facilities) -> List[str]:
        return [f"{f.name} {f.capacity} {f.free_spaces}" for f in facilities]

    def _format_add_facility(self, facility) -> List[str]:
        return []

    def _format_register_entry(self, entry) -> List[str]:
        return [f"{entry.facility_name} {entry.free_spaces}"]

    def _format_register_exit(self, receipt) -> List[str]:
        if receipt is None:
            return []
        return [f"{receipt.plate} {receipt.entry} {receipt.exit} {receipt.cost:.2f}"]

    def _format_vehicle_history(self, history) -> List[str]:
        lines = []
        for item in history.entries:
            line = f"{item.facility_name} {item.entry}"
            if item.exit is not None:
                line += f" {item.exit}"
            lines.append(line)
        return lines

    def _format_revenue(self, report) -> List[str]:
        if report.date is None:
            return [f"{day.date.date_str()} {day.total:.2f}" for day in report.days]
        return [f"{v.plate} {v.exit.time_str()} {v.cost:.2f}" for v in report.vehicles]

    def _format_remove_facility(self, removal) -> List[str]:
        return list(removal.remaining)


class ConsoleApp:
    """Read-eval-print loop over a ParkingService"""

    def __init__(
        self,
        service: ParkingService,
        parser: Optional[CommandLineParser] = None,
        formatter: Optional[OutputFormatter] = None
    ):
        self.service = service
        self.processor = CommandProcessor(service)
        self.parser = parser or CommandLineParser()
        self.formatter = formatter or OutputFormatter()
        self.logger = logging.getLogger(self.__class__.__name__)

    def execute_line(self, line: str) -> List[str]:
        """Run one console line and return its output lines"""
        parsed = self.parser.parse(line)
        if parsed is None:
            return []

        command = CommandFactory.create_command(parsed.command_type, parsed.data)
        if command is None:
            return []

        result = self.processor.process(command)
        return self.formatter.format(parsed.command_type, result)

    def run(self, lines: Optional[Iterable[str]] = None, output: Optional[TextIO] = None) -> None:
        """
        Process lines until 'q' or end of input, then release the ledger
        Raises: ResourceExhaustionError, leaving teardown to the caller
        """
        lines = sys.stdin if lines is None else lines
        output = sys.stdout if output is None else output

        self.logger.info("Console started")
        for line in lines:
            if line.lstrip().startswith(QUIT):
                break
            for text in self.execute_line(line):
                output.write(text + "\n")

        self.service.shutdown()
        self.logger.info(f"Console stopped after {len(self.processor.command_history)} commands")

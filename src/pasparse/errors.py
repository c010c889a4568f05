"""Parse errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pasparse.source import Position, SourceLocation


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    location: SourceLocation
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    filename: str = "<stdin>"
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class PascalError(Exception):
    """Base class for errors raised while turning source text into an AST."""

    code = "E000"

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        self.message = message
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if self.location is None or self.location.is_zero:
            return self.message
        start = self.location.start
        return f"{self.message} at line {start.line}, column {start.column}"

    def to_diagnostic(self, filename: str = "<stdin>") -> Diagnostic:
        labels = []
        if self.location is not None:
            labels.append(DiagnosticLabel(location=self.location, message=""))
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            filename=filename,
            labels=labels,
        )


class ParseError(PascalError):
    """A grammar expectation was violated at a specific token."""

    code = "E200"


class LexError(ParseError):
    """An unrecognized character or unterminated literal in the source."""

    code = "E100"

    def __init__(self, message: str, char: str, line: int, column: int, offset: int) -> None:
        self.char = char
        self.line = line
        self.column = column
        start = Position(line, column, offset)
        end = Position(line, column + 1, offset + 1)
        super().__init__(message, SourceLocation(start, end))


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, filename: str, source: str) -> None:
        """Register in-memory source text so it is not read from disk."""
        self._file_cache[filename] = source.splitlines()

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text().splitlines()
                else:
                    self._file_cache[filename] = []
            except OSError:
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E200]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            start, end = label.location.start, label.location.end
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} "
                f"{diag.filename}:{start.line}:{start.column}"
            )
            gutter = f"{start.line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(diag.filename, start.line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )
                if start.line == end.line:
                    caret_len = max(1, end.column - start.column)
                else:
                    caret_len = max(1, len(source_line) - start.column + 1)
                padding = " " * max(0, start.column - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)

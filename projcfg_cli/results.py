"""Parse captured build output into a result list.

Each ``compiler`` name selects a set of line formats, the same way an editor's
``:compiler`` switches its error format. Lines that match none of the formats
are kept as plain text entries so nothing from the output is lost.
"""

import re
from dataclasses import dataclass

# Shared by gcc, clang, go, eslint --format unix, mypy, ruff and most linters
_UNIX = re.compile(
    r"^(?P<file>[^:\s][^:]*):(?P<lnum>\d+):(?:(?P<col>\d+):)?\s*"
    r"(?:(?P<type>error|warning|note|info)\b:?\s*)?(?P<text>.*)$",
    re.IGNORECASE,
)
_PYTHON = re.compile(r'^\s*File "(?P<file>[^"]+)", line (?P<lnum>\d+)(?:, in (?P<text>.*))?$')
_TSC = re.compile(
    r"^(?P<file>[^(\s][^(]*)\((?P<lnum>\d+),(?P<col>\d+)\):\s*"
    r"(?P<type>error|warning)\s*(?P<text>.*)$"
)
_RUSTC_HEADER = re.compile(r"^(?P<type>error|warning)(?:\[\w+\])?:\s*(?P<text>.*)$")
_RUSTC_LOCATION = re.compile(r"^\s*-->\s*(?P<file>[^:]+):(?P<lnum>\d+):(?P<col>\d+)$")

COMPILERS = ("generic", "gcc", "python", "tsc", "rustc", "cargo")


@dataclass
class ResultEntry:
    """One line of the result list (a quickfix item)."""

    text: str
    filename: str | None = None
    lnum: int | None = None
    col: int | None = None
    type: str | None = None

    @property
    def valid(self) -> bool:
        """True when the entry points at a location."""
        return self.filename is not None

    def location(self) -> str:
        if not self.valid:
            return ""
        parts = [self.filename, str(self.lnum or 0)]
        if self.col:
            parts.append(str(self.col))
        return ":".join(parts)


def _entry(match: re.Match, **overrides) -> ResultEntry:
    groups = {k: v for k, v in match.groupdict().items() if v is not None}
    groups.update(overrides)
    kind = groups.get("type")
    return ResultEntry(
        text=groups.get("text", "").strip(),
        filename=groups.get("file"),
        lnum=int(groups["lnum"]) if "lnum" in groups else None,
        col=int(groups["col"]) if "col" in groups else None,
        type=kind[0].upper() if kind else None,
    )


def _parse_unix(lines: list[str]) -> list[ResultEntry]:
    entries = []
    for line in lines:
        match = _UNIX.match(line)
        entries.append(_entry(match) if match else ResultEntry(text=line))
    return entries


def _parse_python(lines: list[str]) -> list[ResultEntry]:
    entries: list[ResultEntry] = []
    for line in lines:
        match = _PYTHON.match(line)
        if match:
            entries.append(_entry(match, type="error"))
        elif line.startswith(" ") and entries and entries[-1].valid:
            # Source line echoed below a frame
            continue
        else:
            entries.append(ResultEntry(text=line))
    return entries


def _parse_tsc(lines: list[str]) -> list[ResultEntry]:
    entries = []
    for line in lines:
        match = _TSC.match(line) or _UNIX.match(line)
        entries.append(_entry(match) if match else ResultEntry(text=line))
    return entries


def _parse_rustc(lines: list[str]) -> list[ResultEntry]:
    entries: list[ResultEntry] = []
    pending: re.Match | None = None
    for line in lines:
        header = _RUSTC_HEADER.match(line)
        if header:
            pending = header
            continue
        location = _RUSTC_LOCATION.match(line)
        if location and pending is not None:
            entries.append(
                _entry(location, text=pending.group("text"), type=pending.group("type"))
            )
            pending = None
            continue
        if pending is not None:
            # Header without a location, e.g. "error: aborting due to previous error"
            entries.append(ResultEntry(text=pending.group(0)))
            pending = None
        entries.append(ResultEntry(text=line))
    if pending is not None:
        entries.append(ResultEntry(text=pending.group(0)))
    return entries


_PARSERS = {
    "generic": _parse_unix,
    "gcc": _parse_unix,
    "python": _parse_python,
    "tsc": _parse_tsc,
    "rustc": _parse_rustc,
    "cargo": _parse_rustc,
}


def parse_output(output: str, compiler: str | None = None) -> list[ResultEntry]:
    """Split output into result entries using the format for compiler.

    Args:
        output: Captured stdout/stderr of the build command
        compiler: One of ``COMPILERS``; None or empty selects the generic format

    Raises:
        ValueError: If compiler is not a known format name.
    """
    name = (compiler or "generic").lower()
    parser = _PARSERS.get(name)
    if parser is None:
        raise ValueError(f"compiler not supported: {compiler}")

    lines = [line.rstrip() for line in output.splitlines() if line.strip()]
    return parser(lines)

from __future__ import annotations
import re
from typing import Iterable, Iterator, Optional

from ..utils.logging import get_logger
from .access import AccessKind, AccessRequest, MAX_ADDRESS

log = get_logger(__name__)

_LINE_RE = re.compile(r"^\s*0x([0-9a-fA-F]+)\s+(\S)")
_KINDS = {kind.value: kind for kind in AccessKind}


class TraceFormatError(ValueError):
    """Raised for a trace record that cannot be simulated."""
    def __init__(self, message: str, line_no: Optional[int] = None):
        self.line_no = line_no
        prefix = f"Malformed trace file (line {line_no}): " if line_no is not None else "Malformed trace file: "
        super().__init__(prefix + message)


def parse_trace_line(line: str, line_no: Optional[int] = None) -> Optional[AccessRequest]:
    """Parses ``0x<hex> <R|W|I>``.

    Lines of any other shape yield None and are skipped by the reader.
    """
    match = _LINE_RE.match(line)
    if match is None:
        return None
    address = int(match.group(1), 16)
    kind = _KINDS.get(match.group(2))
    if kind is None:
        raise TraceFormatError(f"invalid access type '{match.group(2)}'.", line_no)
    if address > MAX_ADDRESS:
        raise TraceFormatError(f"address {address:#x} does not fit in 32 bits.", line_no)
    return AccessRequest(address, kind)


def iter_trace(lines: Iterable[str]) -> Iterator[AccessRequest]:
    for line_no, line in enumerate(lines, start=1):
        request = parse_trace_line(line, line_no)
        if request is None:
            if line.strip():
                log.debug("Skipping unparsable trace line %d: %r", line_no, line.rstrip("\n"))
            continue
        yield request


def read_trace(path: str) -> Iterator[AccessRequest]:
    """Yields the access requests of a trace file one record at a time.

    Undecodable bytes become replacement characters, so such lines are
    skipped like any other unparsable line.
    """
    with open(path, 'r', errors='replace') as f:
        yield from iter_trace(f)

import pytest
from pathlib import Path
from pyv_cache.trace.access import AccessKind, AccessRequest
from pyv_cache.trace.reader import parse_trace_line, iter_trace, read_trace, TraceFormatError


def test_parse_each_access_kind():
    assert parse_trace_line("0x00000010 R") == AccessRequest(0x10, AccessKind.DATA_READ)
    assert parse_trace_line("0x00000010 W\n") == AccessRequest(0x10, AccessKind.DATA_WRITE)
    assert parse_trace_line("0xDEADBEEF I") == AccessRequest(0xDEADBEEF, AccessKind.INSTRUCTION_FETCH)


def test_unparsable_lines_are_skipped():
    lines = ["", "   ", "# comment", "10 R", "0x10", "0x20 R"]
    assert list(iter_trace(lines)) == [AccessRequest(0x20, AccessKind.DATA_READ)]


def test_unknown_access_kind_is_fatal():
    with pytest.raises(TraceFormatError, match="invalid access type 'X'") as excinfo:
        list(iter_trace(["0x0 R", "0x4 X"]))
    assert excinfo.value.line_no == 2


def test_address_wider_than_32_bits_is_rejected():
    with pytest.raises(TraceFormatError, match="32 bits"):
        parse_trace_line("0x100000000 R")


def test_access_request_validates_address():
    with pytest.raises(ValueError):
        AccessRequest(-1, AccessKind.DATA_READ)


def test_read_trace_file(tmp_path: Path):
    trace_file = tmp_path / "trace.txt"
    trace_file.write_text("0x00000000 I\n0x00000100 W\n\n0x00000104 R\n")

    requests = list(read_trace(str(trace_file)))

    assert [r.kind for r in requests] == [AccessKind.INSTRUCTION_FETCH, AccessKind.DATA_WRITE, AccessKind.DATA_READ]
    assert requests[-1].address == 0x104


def test_read_trace_skips_undecodable_bytes(tmp_path: Path):
    trace_file = tmp_path / "binary.txt"
    trace_file.write_bytes(b"0x0 I\n\xff\xfe garbage\n0x4 R\n")

    requests = list(read_trace(str(trace_file)))

    assert requests == [AccessRequest(0x0, AccessKind.INSTRUCTION_FETCH), AccessRequest(0x4, AccessKind.DATA_READ)]

import json
import yaml
import pytest
from pathlib import Path
from pyv_cache.cli.main import build_parser, main, EXIT_CONFIG_ERROR, EXIT_TRACE_ERROR


@pytest.fixture
def trace_file(tmp_path: Path) -> Path:
    path = tmp_path / "trace.txt"
    path.write_text("0x00000000 I\n0x00000100 R\n0x00000100 W\n0x00000000 I\n")
    return path


def test_parser_collects_cache_flags():
    args = build_parser().parse_args(["run", "-I", "4096:1:2:R", "-D", "1:4096:2:4:R:B:A",
                                      "-D", "2:16384:4:8:L:T:N", "trace.txt"])
    assert args.icache == "4096:1:2:R"
    assert args.dcache == ["1:4096:2:4:R:B:A", "2:16384:4:8:L:T:N"]
    assert args.trace == "trace.txt"
    assert args.html_report is None


def test_run_writes_reports(trace_file: Path, tmp_path: Path, capsys):
    report_dir = tmp_path / "out"
    rc = main(["run", "-I", "4:1:2:L", "-D", "1:4:2:1:L:B:A", "--report", str(report_dir),
               "--no-html", str(trace_file)])

    assert rc == 0
    data = json.loads((report_dir / "report.json").read_text())
    assert data["caches"]["icache"]["reads"]["hits"] == 1
    assert data["caches"]["dcache_l1"]["writes"]["hits"] == 1
    assert not (report_dir / "report.html").exists()
    assert "L1 D-cache Stats:" in capsys.readouterr().out


def test_run_from_yaml_config(trace_file: Path, tmp_path: Path):
    report_dir = tmp_path / "yaml_out"
    config_file = tmp_path / "sim.yaml"
    config_file.write_text(yaml.dump({
        'trace': str(trace_file),
        'report_dir': str(report_dir),
        'html_report': False,
        'icache': '4:1:1:R',
    }))

    assert main(["run", "-c", str(config_file)]) == 0
    data = json.loads((report_dir / "report.json").read_text())
    assert data["caches"]["icache"]["reads"]["accesses"] == 2
    assert "dcache_l1" not in data["caches"]


def test_run_rejects_bad_geometry(trace_file: Path):
    assert main(["run", "-I", "6:1:1:R", str(trace_file)]) == EXIT_CONFIG_ERROR


def test_run_rejects_skipped_level(trace_file: Path):
    assert main(["run", "-I", "4:1:1:R", "-D", "2:16:1:1:R:B:A", str(trace_file)]) == EXIT_CONFIG_ERROR


def test_run_requires_trace():
    assert main(["run", "-I", "4:1:1:R"]) == EXIT_CONFIG_ERROR


def test_run_reports_bad_trace(tmp_path: Path, capsys):
    bad = tmp_path / "bad.txt"
    bad.write_text("0x0 I\n0x4 Z\n")
    rc = main(["run", "-I", "4:1:1:R", "--report", str(tmp_path / "out"), str(bad)])
    assert rc == EXIT_TRACE_ERROR
    assert not (tmp_path / "out" / "report.json").exists()
    assert "Stats:" not in capsys.readouterr().out


def test_run_missing_trace_file(tmp_path: Path):
    assert main(["run", "-I", "4:1:1:R", str(tmp_path / "nope.txt")]) == EXIT_TRACE_ERROR


def test_info_prints_hierarchy(capsys):
    assert main(["info", "-I", "4096:1:2:R", "-D", "1:4096:2:4:L:T:N"]) == 0
    out = capsys.readouterr().out
    assert "I-cache:" in out
    assert "4096 blocks" in out
    assert "write-no-allocate" in out


def test_run_rejects_malformed_yaml(trace_file: Path, tmp_path: Path):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("icache: 4:1:1:R\ndcache: [1:4:1:1:L:B:A\n")

    assert main(["run", "-c", str(config_file), str(trace_file)]) == EXIT_CONFIG_ERROR


def test_run_rejects_non_string_log_level(trace_file: Path, tmp_path: Path):
    config_file = tmp_path / "sim.yaml"
    config_file.write_text(yaml.dump({'icache': '4:1:1:R', 'log_level': 10}))

    assert main(["run", "-c", str(config_file), str(trace_file)]) == EXIT_CONFIG_ERROR


def test_run_tolerates_undecodable_trace_bytes(tmp_path: Path):
    trace = tmp_path / "binary.txt"
    trace.write_bytes(b"0x0 I\n\xff\xfe garbage\n0x0 I\n")

    rc = main(["run", "-I", "4:1:1:R", "--report", str(tmp_path / "out"), "--no-html", str(trace)])

    assert rc == 0
    data = json.loads((tmp_path / "out" / "report.json").read_text())
    assert data["caches"]["icache"]["reads"]["accesses"] == 2

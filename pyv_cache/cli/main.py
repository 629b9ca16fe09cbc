from __future__ import annotations
import argparse
import sys
from ..config import SimConfig, ConfigError
from ..runtime.simulator import run as run_sim
from ..trace.reader import TraceFormatError
from ..utils.logging import get_logger, set_level
from ..utils.reporting import generate_report

log = get_logger("pyv_cache.cli")

EXIT_TRACE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def cmd_run(args):
    """Handles the 'run' command."""
    try:
        config = SimConfig.from_args(args)
        set_level(config.log_level)
        hierarchy = config.hierarchy()
        if not config.trace:
            raise ConfigError("No trace file specified.")
    except ValueError as e:
        log.error("%s", e)
        return EXIT_CONFIG_ERROR

    log.info("--- Cache Configuration ---\n%s", hierarchy.describe())

    try:
        stats = run_sim(config, hierarchy)
    except TraceFormatError as e:
        log.error("%s", e)
        return EXIT_TRACE_ERROR
    except OSError as e:
        log.error("Could not open trace file: %s", e)
        return EXIT_TRACE_ERROR

    generate_report(stats, hierarchy, config)
    return 0


def cmd_info(args):
    """Handles the 'info' command."""
    try:
        config = SimConfig.from_args(args)
        hierarchy = config.hierarchy()
    except ConfigError as e:
        log.error("%s", e)
        return EXIT_CONFIG_ERROR
    print(hierarchy.describe())
    return 0


def _add_cache_args(p):
    p.add_argument("-c", "--config", type=str, default=None,
                   help="Path to YAML config file to override defaults")
    p.add_argument("-I", dest="icache", type=str, default=None, metavar="BLOCKS:WORDS:ASSOC:REPL",
                   help="I-cache parameters, e.g. 4096:1:2:R (REPL is R or L)")
    p.add_argument("-D", dest="dcache", action="append", default=None,
                   metavar="LEVEL:BLOCKS:WORDS:ASSOC:REPL:WRITE:ALLOC",
                   help="D-cache parameters, e.g. 1:4096:2:4:R:B:A (WRITE is B or T, ALLOC is A or N); repeat per level")


def build_parser():
    p = argparse.ArgumentParser(
        prog="pyv-cache",
        description="Trace-driven multi-level cache simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Run Command ---
    pr = sub.add_parser("run", help="Replay a trace and report cache statistics",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_cache_args(pr)
    pr.add_argument("trace", nargs='?', default=None,
                    help="Path to the trace file (optional if specified in config)")
    pr.add_argument("--seed", type=int, default=None,
                    help="Seed for random replacement")
    pr.add_argument("--report", type=str, default=None, dest="report_dir",
                    help="Directory to save simulation reports")
    pr.add_argument("--no-html", action="store_const", const=False, default=None, dest="html_report",
                    help="Skip the HTML miss breakdown chart")
    pr.add_argument("--ascii-chart", action="store_const", const=True, default=None, dest="ascii_chart",
                    help="Print an ASCII miss breakdown chart to the console")
    pr.add_argument("--log-level", type=str, default=None, dest="log_level",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="Logging verbosity")
    pr.set_defaults(func=cmd_run)

    # --- Info Command ---
    pi = sub.add_parser("info", help="Print the configured cache hierarchy",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_cache_args(pi)
    pi.set_defaults(func=cmd_info)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

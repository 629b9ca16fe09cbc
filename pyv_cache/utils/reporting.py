from __future__ import annotations
import json
from pathlib import Path
from typing import List, Dict, Any
from ..config import SimConfig, HierarchyConfig, CacheConfig
from ..runtime.stats import Statistics, AccessCounters
from . import viz


def _config_dict(cache: CacheConfig) -> Dict[str, Any]:
    return {
        "level": cache.level,
        "blocks": cache.num_blocks,
        "words_per_block": cache.words_per_block,
        "associativity": cache.associativity,
        "replacement": cache.replacement.name if cache.replacement else None,
        "write_scheme": cache.write_scheme.name if cache.write_scheme else None,
        "allocate_scheme": cache.allocate_scheme.name if cache.allocate_scheme else None,
    }


def generate_report_json(stats: Statistics, hierarchy: HierarchyConfig, config: SimConfig) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary from the run statistics."""
    snapshot = stats.snapshot()
    rates = stats.miss_rates()
    caches = {}
    for cache in hierarchy.caches:
        entry = {"label": cache.label, "config": _config_dict(cache)}
        entry.update(snapshot[cache.name])
        entry["miss_rates"] = rates[cache.name]
        if cache.is_instruction:
            # Fetch traffic is derived here, the engines only count misses.
            entry["words_fetched"] = stats[cache.name].reads.misses * cache.words_per_block
            del entry["writes"]
        caches[cache.name] = entry

    return {
        "trace": config.trace,
        "seed": config.seed,
        "caches": caches,
    }


def miss_breakdown_rows(stats: Statistics, hierarchy: HierarchyConfig) -> List[Dict[str, Any]]:
    """Flattens miss counts into one row per (cache, direction, category)."""
    rows = []
    for cache in hierarchy.caches:
        s = stats[cache.name]
        directions = [("read", s.reads)] if cache.is_instruction else [("read", s.reads), ("write", s.writes)]
        for direction, counters in directions:
            for category in ("compulsory", "conflict", "capacity"):
                rows.append({
                    "cache": cache.label,
                    "direction": direction,
                    "category": category,
                    "misses": getattr(counters, category),
                })
    return rows


def _miss_lines(title: str, counters: AccessCounters, indent: str = "       ") -> List[str]:
    return [
        f"{title}:",
        f"{indent}Compulsory Misses: {counters.compulsory:>20}",
        f"{indent}Conflict Misses: {counters.conflict:>22}",
        f"{indent}Capacity Misses: {counters.capacity:>22}",
        f"{indent}Number of Misses: {counters.misses:>21}",
        f"{indent}Miss rate with Compulsory: {counters.miss_rate():>11.2f}%",
        f"{indent}Miss rate without Compulsory: {counters.miss_rate(include_compulsory=False):>8.2f}%",
    ]


def format_report(stats: Statistics, hierarchy: HierarchyConfig) -> str:
    """Renders the statistics as the console text report."""
    out = []
    for cache in hierarchy.caches:
        s = stats[cache.name]
        out.append(f"{cache.label} Stats:")
        if cache.is_instruction:
            out.append(f"Number of Reads: {s.reads.accesses:>30}")
            out.append(f"Number of Words: {s.reads.misses * cache.words_per_block:>30}")
            out.extend(_miss_lines("Read Misses", s.reads))
        else:
            out.append(f"Number of Reads: {s.reads.accesses:>30}")
            out.append(f"Number of Words Read: {s.words_read:>25}")
            out.append(f"Number of Writes: {s.writes.accesses:>29}")
            out.append(f"Number of Words Written: {s.words_written:>22}")
            out.extend(_miss_lines("Read Misses", s.reads))
            out.extend(_miss_lines("Write Misses", s.writes))
        out.append("")
    return "\n".join(out)


def generate_report(stats: Statistics, hierarchy: HierarchyConfig, config: SimConfig):
    """Generates all report artifacts."""
    report_data = generate_report_json(stats, hierarchy, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    if config.html_report:
        viz.export_miss_breakdown(miss_breakdown_rows(stats, hierarchy), str(output_dir / "report.html"))

    print(format_report(stats, hierarchy))
    if config.ascii_chart:
        print(viz.export_miss_breakdown_ascii(miss_breakdown_rows(stats, hierarchy)))
    print(f"Reports generated in {output_dir.absolute()}")

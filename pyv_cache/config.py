from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import yaml
from pathlib import Path

from .utils.logging import get_logger

log = get_logger(__name__)

ADDRESS_BITS = 32
BYTE_OFFSET_BITS = 2  # 4-byte words, the simulator is word addressable
INSTRUCTION_LEVEL = 0
MAX_DATA_LEVELS = 3


class ConfigError(ValueError):
    """Raised when a cache or simulator configuration cannot be used."""


class ReplacementPolicy(Enum):
    LRU = "L"
    RANDOM = "R"


class WriteScheme(Enum):
    WRITE_BACK = "B"
    WRITE_THROUGH = "T"


class AllocationScheme(Enum):
    ALLOCATE = "A"
    NO_ALLOCATE = "N"


def is_power_of_two(n: int) -> bool:
    return (n > 0) and (n & (n - 1) == 0)


def _parse_enum(enum_cls, value, what: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip()
        for member in enum_cls:
            if text.upper() in (member.value, member.name):
                return member
    raise ConfigError(f"Invalid {what}: {value!r}.")


def _parse_int(value, what: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigError(f"Invalid {what}: {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid {what}: {value!r}.") from None


@dataclass(frozen=True)
class CacheConfig:
    """Geometry and policies of one cache in the hierarchy.

    ``level`` is 0 for the instruction cache and 1-3 for data caches. The
    write and allocation schemes only exist for data caches; the replacement
    policy is only required when the cache is associative.
    """
    level: int
    num_blocks: int
    words_per_block: int
    associativity: int
    replacement: Optional[ReplacementPolicy] = None
    write_scheme: Optional[WriteScheme] = None
    allocate_scheme: Optional[AllocationScheme] = None

    def __post_init__(self):
        if not INSTRUCTION_LEVEL <= self.level <= MAX_DATA_LEVELS:
            raise ConfigError(f"Invalid cache level: {self.level}.")
        if not self.num_blocks > 0:
            raise ConfigError(f"{self.label}: number of blocks must be positive.")
        if not self.words_per_block > 0:
            raise ConfigError(f"{self.label}: words per block must be positive.")
        if not self.associativity > 0:
            raise ConfigError(f"{self.label}: associativity must be positive.")

        if not is_power_of_two(self.num_blocks):
            raise ConfigError(f"{self.label}: number of blocks must be a power of two.")
        if not is_power_of_two(self.words_per_block):
            raise ConfigError(f"{self.label}: words per block must be a power of two.")
        if self.num_blocks % self.associativity != 0:
            raise ConfigError(f"{self.label}: number of blocks must be a multiple of associativity.")
        if not is_power_of_two(self.num_sets):
            raise ConfigError(f"{self.label}: number of sets must be a power of two.")
        if self.tag_bits < 0:
            raise ConfigError(f"{self.label}: geometry does not fit in a {ADDRESS_BITS}-bit address.")

        if self.associativity > 1 and self.replacement is None:
            raise ConfigError(f"{self.label}: replacement scheme required for associative caches.")

        if self.is_instruction:
            if self.write_scheme is not None or self.allocate_scheme is not None:
                raise ConfigError("I-cache does not take write or allocation schemes.")
        else:
            if self.write_scheme is None:
                raise ConfigError(f"{self.label}: write scheme required.")
            if self.allocate_scheme is None:
                raise ConfigError(f"{self.label}: allocation scheme required.")

    @property
    def is_instruction(self) -> bool:
        return self.level == INSTRUCTION_LEVEL

    @property
    def name(self) -> str:
        return "icache" if self.is_instruction else f"dcache_l{self.level}"

    @property
    def label(self) -> str:
        return "I-cache" if self.is_instruction else f"L{self.level} D-cache"

    @property
    def num_sets(self) -> int:
        return self.num_blocks // self.associativity

    @property
    def offset_bits(self) -> int:
        return self.words_per_block.bit_length() - 1

    @property
    def index_bits(self) -> int:
        return self.num_sets.bit_length() - 1

    @property
    def tag_bits(self) -> int:
        return ADDRESS_BITS - self.offset_bits - self.index_bits - BYTE_OFFSET_BITS

    @classmethod
    def from_icache_spec(cls, text: str) -> CacheConfig:
        """Parses ``blocks:words:assoc:repl``, e.g. ``4096:1:2:R``."""
        fields = text.split(":")
        if len(fields) != 4:
            raise ConfigError("Invalid I-cache parameters.")
        num_blocks, words, assoc = (_parse_int(v, "I-cache parameters") for v in fields[:3])
        replacement = None
        if assoc > 1:
            replacement = _parse_enum(ReplacementPolicy, fields[3], "I-cache replacement scheme")
        return cls(INSTRUCTION_LEVEL, num_blocks, words, assoc, replacement)

    @classmethod
    def from_dcache_spec(cls, text: str) -> CacheConfig:
        """Parses ``level:blocks:words:assoc:repl:write:alloc``, e.g. ``1:4096:2:4:R:B:A``."""
        fields = text.split(":")
        if len(fields) != 7:
            raise ConfigError("Invalid D-cache parameters.")
        level, num_blocks, words, assoc = (_parse_int(v, "D-cache parameters") for v in fields[:4])
        if not 1 <= level <= MAX_DATA_LEVELS:
            raise ConfigError("Invalid D-cache level.")
        replacement = None
        if assoc > 1:
            replacement = _parse_enum(ReplacementPolicy, fields[4], "D-cache replacement scheme")
        write_scheme = _parse_enum(WriteScheme, fields[5], "D-cache write scheme")
        allocate_scheme = _parse_enum(AllocationScheme, fields[6], "D-cache allocation scheme")
        return cls(level, num_blocks, words, assoc, replacement, write_scheme, allocate_scheme)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any], level: Optional[int] = None) -> CacheConfig:
        """Builds a cache config from a YAML mapping."""
        try:
            level = _parse_int(data["level"], "cache level") if level is None else level
            num_blocks = _parse_int(data["blocks"], "number of blocks")
            words = _parse_int(data["words_per_block"], "words per block")
            assoc = _parse_int(data["associativity"], "associativity")
        except KeyError as e:
            raise ConfigError(f"Missing cache parameter: {e.args[0]}.") from None
        replacement = None
        if assoc > 1:
            replacement = _parse_enum(ReplacementPolicy, data.get("replacement"), "replacement scheme")
        write_scheme = allocate_scheme = None
        if level != INSTRUCTION_LEVEL:
            write_scheme = _parse_enum(WriteScheme, data.get("write_scheme"), "write scheme")
            allocate_scheme = _parse_enum(AllocationScheme, data.get("allocate_scheme"), "allocation scheme")
        return cls(level, num_blocks, words, assoc, replacement, write_scheme, allocate_scheme)

    def describe(self) -> str:
        lines = [f"{self.label}:",
                 f"\t{self.num_blocks} blocks",
                 f"\t{self.words_per_block} word(s) per block",
                 f"\t{self.associativity}-way associative"]
        if self.associativity > 1:
            lines.append(f"\treplacement: {'LRU' if self.replacement is ReplacementPolicy.LRU else 'Random'}")
        if not self.is_instruction:
            lines.append(f"\twrite scheme: "
                         f"{'write-back' if self.write_scheme is WriteScheme.WRITE_BACK else 'write-through'}")
            lines.append(f"\tallocation scheme: "
                         f"{'write-allocate' if self.allocate_scheme is AllocationScheme.ALLOCATE else 'write-no-allocate'}")
        return "\n".join(lines)


@dataclass(frozen=True)
class HierarchyConfig:
    """The instruction cache plus zero to three data cache levels, L1 first."""
    icache: CacheConfig
    dcaches: Tuple[CacheConfig, ...] = ()

    def __post_init__(self):
        if not self.icache.is_instruction:
            raise ConfigError("Instruction cache must be configured at level 0.")
        if len(self.dcaches) > MAX_DATA_LEVELS:
            raise ConfigError(f"At most {MAX_DATA_LEVELS} D-cache levels are supported.")
        for expected, dcache in enumerate(self.dcaches, start=1):
            if dcache.level != expected:
                raise ConfigError(f"D-cache levels must be consecutive from L1, got L{dcache.level} at position {expected}.")

    @classmethod
    def build(cls, icache: Optional[CacheConfig], dcaches: List[CacheConfig]) -> HierarchyConfig:
        """Orders data caches by level and checks that no level is skipped."""
        if icache is None:
            raise ConfigError("No I-cache parameters specified.")
        by_level: Dict[int, CacheConfig] = {}
        for dcache in dcaches:
            if dcache.level in by_level:
                raise ConfigError("Duplicate D-cache level parameters.")
            by_level[dcache.level] = dcache
        for level in range(2, MAX_DATA_LEVELS + 1):
            if level in by_level and level - 1 not in by_level:
                raise ConfigError(f"L{level} D-cache specified, but not L{level - 1}.")
        return cls(icache, tuple(by_level[lvl] for lvl in sorted(by_level)))

    @property
    def caches(self) -> Tuple[CacheConfig, ...]:
        return (self.icache,) + self.dcaches

    def describe(self) -> str:
        return "\n\n".join(c.describe() for c in self.caches)


CacheSpec = Union[str, Dict[str, Any]]


@dataclass
class SimConfig:
    """Run-level settings for a cache simulation."""
    # Trace input
    trace: str = ""

    # Config file
    config_file: str = ""

    # Reporting
    report_dir: str = "out/default_run"
    html_report: bool = True
    ascii_chart: bool = False

    # Random replacement seed
    seed: int = 1000

    log_level: str = "INFO"

    # Cache hierarchy, CLI strings or YAML mappings
    icache: Optional[CacheSpec] = None
    dcache: List[CacheSpec] = field(default_factory=list)

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        with open(yaml_path, 'r') as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse config file {yaml_path}: {e}") from None
        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Config file {yaml_path} must contain a mapping.")
        for key, value in yaml_config.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                log.warning("Ignoring unknown config key '%s' in %s", key, yaml_path)

    def hierarchy(self) -> HierarchyConfig:
        """Validates the cache settings and builds the hierarchy config."""
        icache = None
        if isinstance(self.icache, str):
            icache = CacheConfig.from_icache_spec(self.icache)
        elif isinstance(self.icache, dict):
            icache = CacheConfig.from_mapping(self.icache, level=INSTRUCTION_LEVEL)
        elif self.icache is not None:
            raise ConfigError("Invalid I-cache parameters.")

        dcaches = []
        for spec in self.dcache or []:
            if isinstance(spec, str):
                dcaches.append(CacheConfig.from_dcache_spec(spec))
            elif isinstance(spec, dict):
                dcaches.append(CacheConfig.from_mapping(spec))
            else:
                raise ConfigError("Invalid D-cache parameters.")
        return HierarchyConfig.build(icache, dcaches)

    @classmethod
    def from_args(cls, args) -> SimConfig:
        """Factory method to create a SimConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from YAML config file if provided
        if getattr(args, 'config', None):
            config.config_file = args.config
            if not Path(config.config_file).exists():
                raise ConfigError(f"Config file {config.config_file} not found.")
            config.update_from_yaml(config.config_file)

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if value is None or not hasattr(config, key):
                continue
            if key == "dcache" and not value:
                continue
            setattr(config, key, value)

        return config

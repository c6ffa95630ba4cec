"""Configuration loading for akainaa.

This module reads configuration from pyproject.toml [tool.akainaa]
section and provides sensible defaults when configuration is absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import tomllib
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


DEFAULT_REPORT_PATH = 'tmp/coverage.json'
DEFAULT_HISTORY_SIZE = 20
DEFAULT_NUM_BUCKETS = 8
DEFAULT_FLOOR = 5


@dataclass(frozen=True)
class HeatmapConfig:
    """Configuration for akainaa.

    Attributes:
        report_path: Location of the coverage report, relative to the project root.
        history_size: Number of report snapshots kept in the rolling history.
        num_buckets: Number of intensity levels in the heat map.
        floor: Lower bound for the bucketing divisor, keeps sparse files from
            being painted at full intensity.
        exclude: Glob patterns of files the line counter must not record.
    """

    report_path: str = DEFAULT_REPORT_PATH
    history_size: int = DEFAULT_HISTORY_SIZE
    num_buckets: int = DEFAULT_NUM_BUCKETS
    floor: int = DEFAULT_FLOOR
    exclude: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.report_path, str):
            msg = f'report_path must be a string, got {self.report_path!r}'
            raise ValueError(msg)
        for name in ('history_size', 'num_buckets', 'floor'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f'{name} must be an integer, got {value!r}'
                raise ValueError(msg)
        if not all(isinstance(pattern, str) for pattern in self.exclude):
            msg = f'exclude must be a list of glob strings, got {list(self.exclude)!r}'
            raise ValueError(msg)
        if self.history_size < 1:
            msg = f'history_size must be at least 1, got {self.history_size}'
            raise ValueError(msg)
        if self.num_buckets < 1:
            msg = f'num_buckets must be at least 1, got {self.num_buckets}'
            raise ValueError(msg)
        if self.floor < 0:
            msg = f'floor must not be negative, got {self.floor}'
            raise ValueError(msg)


def load_config(rootdir: Path) -> HeatmapConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.akainaa] section from pyproject.toml in the given
    directory. Returns default configuration if the file or section does
    not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        HeatmapConfig with values from pyproject.toml or defaults.

    Raises:
        ValueError: If a configured value has the wrong type or is out of range.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return HeatmapConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('akainaa', {})

    exclude = tool_config.get('exclude', ())
    if not isinstance(exclude, list | tuple):
        msg = f'exclude must be a list of glob strings, got {exclude!r}'
        raise ValueError(msg)

    return HeatmapConfig(
        report_path=tool_config.get('report_path', DEFAULT_REPORT_PATH),
        history_size=tool_config.get('history_size', DEFAULT_HISTORY_SIZE),
        num_buckets=tool_config.get('num_buckets', DEFAULT_NUM_BUCKETS),
        floor=tool_config.get('floor', DEFAULT_FLOOR),
        exclude=tuple(exclude),
    )


def merge_configs(
    file_config: HeatmapConfig,
    cli_report_path: str | None = None,
) -> HeatmapConfig:
    """Merge CLI arguments with file configuration.

    CLI arguments take precedence over pyproject.toml configuration.
    Empty strings are treated as not provided.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli_report_path: Report location from the command line (--report).

    Returns:
        HeatmapConfig with CLI values overriding file config where provided.
    """
    if cli_report_path and cli_report_path.strip():
        return replace(file_config, report_path=cli_report_path.strip())
    return file_config

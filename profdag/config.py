"""Configuration for profdag nets and the profiling layer."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass
class ProfilerConfig:
    """Configuration for net execution and statistics reporting."""

    # Worker threads used by the engine to run independent chains
    max_workers: int = 4

    # Emit the teardown report when a profiling net is closed
    report_on_close: bool = True

    # Display label for operators with neither a name nor an output
    unnamed_label: str = "NO_OUTPUT"

    # Multiplier from clock seconds to reported time unit (milliseconds)
    time_unit_scale: float = 1000.0

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.time_unit_scale <= 0:
            raise ValueError(
                f"time_unit_scale must be positive, got {self.time_unit_scale}"
            )


# Global configuration instance
PROFILER_CONFIG = ProfilerConfig()


def _normalize_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with string keys.

    YAML 1.1 turns keys like ``yes``/``on`` into booleans; they are converted
    back to ``"True"``/``"False"`` so they fail the unknown-key check loudly.
    """
    return {str(key): value for key, value in data.items()}


def _is_file(source: Union[str, Path]) -> bool:
    if isinstance(source, Path):
        return True
    if "\n" in source:
        return False
    try:
        return Path(source).is_file()
    except OSError:
        return False


def load_config(
    source: Union[str, Path], base: Optional[ProfilerConfig] = None
) -> ProfilerConfig:
    """Load a ``ProfilerConfig`` from a YAML path or YAML text.

    Only keys present in the document override ``base`` (or the defaults).

    Args:
        source: Path to a YAML file, or the YAML document itself.
        base: Configuration providing values for keys absent from the document.

    Returns:
        The resulting configuration.

    Raises:
        TypeError: If the document is not a mapping.
        ValueError: If the document has unknown keys or invalid values.
    """
    if _is_file(source):
        text = Path(source).read_text(encoding="utf-8")
    else:
        text = str(source)

    data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TypeError(
            f"Profiler config must be a mapping, got {type(data).__name__}"
        )

    data = _normalize_keys(data)
    known = {f.name for f in fields(ProfilerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown profiler config keys: {', '.join(unknown)}")

    return replace(base or ProfilerConfig(), **data)

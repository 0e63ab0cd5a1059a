"""Device descriptors for operator and blob placement.

Devices are written as ``"cpu"`` or ``"cuda:<index>"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class DeviceType(Enum):
    """Supported device categories."""

    CPU = "cpu"
    CUDA = "cuda"


_CUDA_PATTERN = re.compile(r"^cuda:(\d+)$")


@dataclass(frozen=True)
class Device:
    """Placement of an operator or blob.

    Attributes:
        type: Device category.
        index: Accelerator ordinal; ``None`` for CPU.
    """

    type: DeviceType = DeviceType.CPU
    index: Optional[int] = None

    def __post_init__(self) -> None:
        if self.type is DeviceType.CPU and self.index is not None:
            raise ValueError("CPU devices do not take an index")
        if self.type is DeviceType.CUDA and (self.index is None or self.index < 0):
            raise ValueError(
                f"CUDA devices need a non-negative index, got {self.index}"
            )

    @classmethod
    def parse(cls, device: Union[str, "Device"]) -> "Device":
        """Build a ``Device`` from ``"cpu"`` or ``"cuda:<index>"``.

        Args:
            device: Device string, or an existing ``Device`` (returned as is).

        Returns:
            The parsed device.

        Raises:
            ValueError: If the string is not a supported device identifier.
        """
        if isinstance(device, Device):
            return device
        if device == "cpu":
            return cls(DeviceType.CPU)
        match = _CUDA_PATTERN.match(device)
        if not match:
            raise ValueError(
                f"Invalid device '{device}'. Expected 'cpu' or 'cuda:<index>'"
            )
        return cls(DeviceType.CUDA, int(match.group(1)))

    def __str__(self) -> str:
        return "cpu" if self.type is DeviceType.CPU else f"cuda:{self.index}"


CPU = Device()

"""Named blob storage shared by the operators of a net."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Union

from profdag.device import CPU, Device


@dataclass
class Blob:
    """A named value with a device placement.

    Attributes:
        name: Blob identifier, unique within a workspace.
        device: Where the value lives.
        value: Payload; opaque to the profiling layer.
    """

    name: str
    device: Device = CPU
    value: Any = None


class Workspace:
    """Mapping of blob names to blobs."""

    def __init__(self) -> None:
        self._blobs: Dict[str, Blob] = {}

    def create_blob(
        self, name: str, value: Any = None, device: Union[str, Device] = CPU
    ) -> Blob:
        """Create or replace the blob ``name`` and return it."""
        blob = Blob(name=name, device=Device.parse(device), value=value)
        self._blobs[name] = blob
        return blob

    def feed(self, name: str, value: Any) -> Blob:
        """Set the value of ``name``, keeping its placement if it exists."""
        blob = self._blobs.get(name)
        if blob is None:
            return self.create_blob(name, value)
        blob.value = value
        return blob

    def get_blob(self, name: str) -> Blob:
        """Return the blob ``name``.

        Raises:
            KeyError: If no such blob exists.
        """
        try:
            return self._blobs[name]
        except KeyError:
            raise KeyError(f"Blob '{name}' does not exist in workspace") from None

    def fetch(self, name: str) -> Any:
        return self.get_blob(name).value

    def has_blob(self, name: str) -> bool:
        return name in self._blobs

    def __contains__(self, name: object) -> bool:
        return name in self._blobs

    def __iter__(self) -> Iterator[str]:
        return iter(self._blobs)

    def __len__(self) -> int:
        return len(self._blobs)

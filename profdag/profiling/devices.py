"""Advisory check of blob placement against operator expectations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from profdag.device import Device
from profdag.graph import Operator
from profdag.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeviceMismatch:
    """A blob that does not live where its operator expects it.

    Attributes:
        op_index: Node index of the operator.
        op_type: Operator type name.
        blob: Blob name.
        expected: Device from the operator definition.
        actual: Device the blob is placed on.
    """

    op_index: int
    op_type: str
    blob: str
    expected: Device
    actual: Device


def validate_tensor_devices(op_index: int, operator: Operator) -> List[DeviceMismatch]:
    """Compare every input and output blob of ``operator`` with its expected device.

    Blobs not present in the workspace are skipped.
    """
    definition = operator.definition
    mismatches: List[DeviceMismatch] = []
    seen = set()
    for blob_name in (*definition.inputs, *definition.outputs):
        if blob_name in seen or not operator.workspace.has_blob(blob_name):
            continue
        seen.add(blob_name)
        actual = operator.workspace.get_blob(blob_name).device
        if actual != definition.device:
            mismatches.append(
                DeviceMismatch(
                    op_index=op_index,
                    op_type=definition.type,
                    blob=blob_name,
                    expected=definition.device,
                    actual=actual,
                )
            )
    return mismatches


class DeviceValidator:
    """Log device mismatches across a graph; never raises for them."""

    def __init__(self, nodes: Sequence[Operator]) -> None:
        self._nodes = nodes

    def validate(self) -> List[DeviceMismatch]:
        """Check every operator and log one line per mismatch.

        Returns:
            All mismatches found, in node order.
        """
        found: List[DeviceMismatch] = []
        for idx, operator in enumerate(self._nodes):
            for mismatch in validate_tensor_devices(idx, operator):
                logger.info(
                    f"== PERFORMANCE WARNING == Operator {mismatch.op_type} "
                    f"expects {mismatch.expected} but tensor [{mismatch.blob}] "
                    f"is on {mismatch.actual}"
                )
                found.append(mismatch)

        if not found:
            logger.info("Analyzed operator & blob device assignments -- no mismatches")
        return found

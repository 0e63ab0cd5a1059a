"""Operators and graphs executed by profdag nets.

An ``Operator`` is a discrete computational step described by an
``OperatorDef`` (type, optional instance name, input and output blob names,
expected device). A ``Graph`` is a named, ordered list of operators; node
indices are positions in that list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from profdag.device import CPU, Device
from profdag.workspace import Workspace


@dataclass(frozen=True)
class OperatorDef:
    """Static description of an operator node.

    Attributes:
        type: Operator type name (e.g. ``"Add"``); used for per-type statistics.
        name: Optional instance name.
        inputs: Names of blobs the operator consumes.
        outputs: Names of blobs the operator produces.
        device: Device the operator expects its blobs on.
    """

    type: str
    name: str = ""
    inputs: Sequence[str] = field(default_factory=tuple)
    outputs: Sequence[str] = field(default_factory=tuple)
    device: Device = CPU

    def __post_init__(self) -> None:
        if not self.type:
            raise ValueError("Operator type must be a non-empty string")
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "device", Device.parse(self.device))


class Operator(ABC):
    """Base class for executable operators.

    Subclasses implement ``run()`` and report failure by returning ``False``.
    """

    def __init__(self, definition: OperatorDef, workspace: Workspace) -> None:
        self.definition = definition
        self.workspace = workspace

    @property
    def type(self) -> str:
        return self.definition.type

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def output_size(self) -> int:
        return len(self.definition.outputs)

    @abstractmethod
    def run(self) -> bool:
        """Execute the operator once and return whether it succeeded."""

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{self.__class__.__name__} {self.type}{label}>"


class FunctionOperator(Operator):
    """Operator backed by a plain callable.

    The callable receives the operator; a ``None`` return counts as success.
    """

    def __init__(
        self,
        definition: OperatorDef,
        workspace: Workspace,
        fn: Callable[["FunctionOperator"], Optional[bool]],
    ) -> None:
        super().__init__(definition, workspace)
        self._fn = fn

    def inputs(self) -> List[object]:
        """Return the current values of the input blobs."""
        return [self.workspace.fetch(name) for name in self.definition.inputs]

    def set_output(self, index: int, value: object) -> None:
        self.workspace.feed(self.definition.outputs[index], value)

    def run(self) -> bool:
        result = self._fn(self)
        return True if result is None else bool(result)


@dataclass
class Graph:
    """Named, ordered collection of operator nodes.

    Attributes:
        name: Graph name, used in per-operator report keys.
        operators: Operator nodes; a node's index is its list position.
    """

    name: str
    operators: List[Operator] = field(default_factory=list)

    def add(self, operator: Operator) -> int:
        """Append ``operator`` and return its node index."""
        self.operators.append(operator)
        return len(self.operators) - 1

    def __len__(self) -> int:
        return len(self.operators)


def make_operator(
    workspace: Workspace,
    op_type: str,
    fn: Callable[[FunctionOperator], Optional[bool]],
    inputs: Sequence[str] = (),
    outputs: Sequence[str] = (),
    name: str = "",
    device: Union[str, Device] = CPU,
) -> FunctionOperator:
    """Build a ``FunctionOperator`` from keyword arguments."""
    definition = OperatorDef(
        type=op_type,
        name=name,
        inputs=tuple(inputs),
        outputs=tuple(outputs),
        device=Device.parse(device),
    )
    return FunctionOperator(definition, workspace, fn)

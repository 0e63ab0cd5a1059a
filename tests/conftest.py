"""Shared fixtures: a manual clock and operators that advance it.

Durations are expressed in clock units; tests that build nets use
``time_unit_scale=1.0`` so recorded values equal the scripted durations
exactly.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import pytest

from profdag.config import ProfilerConfig
from profdag.graph import FunctionOperator, make_operator
from profdag.workspace import Workspace


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


class ScriptedOp:
    """Callable for ``FunctionOperator`` that advances a clock per call.

    ``durations[i]`` is used for the i-th call; the last value repeats.
    ``results`` works the same way for the returned success flag.
    """

    def __init__(
        self,
        clock: FakeClock,
        durations: Sequence[float],
        results: Optional[Sequence[bool]] = None,
    ) -> None:
        self.clock = clock
        self.durations = list(durations)
        self.results = list(results) if results is not None else [True]
        self.calls = 0

    def __call__(self, op: FunctionOperator) -> bool:
        idx = self.calls
        self.calls += 1
        self.clock.advance(self.durations[min(idx, len(self.durations) - 1)])
        return self.results[min(idx, len(self.results) - 1)]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def workspace() -> Workspace:
    return Workspace()


@pytest.fixture
def config() -> ProfilerConfig:
    """Single worker and unscaled timings, so a shared fake clock is exact."""
    return ProfilerConfig(max_workers=1, time_unit_scale=1.0, report_on_close=True)


def scripted(
    workspace: Workspace,
    clock: FakeClock,
    op_type: str,
    durations: Sequence[float],
    inputs: Sequence[str] = (),
    outputs: Sequence[str] = (),
    name: str = "",
    results: Optional[Sequence[bool]] = None,
    device: str = "cpu",
) -> FunctionOperator:
    """Build an operator whose calls take the scripted ``durations``."""
    return make_operator(
        workspace,
        op_type,
        ScriptedOp(clock, durations, results),
        inputs=inputs,
        outputs=outputs,
        name=name,
        device=device,
    )


def call_counts(ops: List[FunctionOperator]) -> List[int]:
    return [op._fn.calls for op in ops]

"""Build state machine states and the per-build report."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    """State of a single ``build()`` call.

    Idle -> CacheCheck -> {CacheHit, Generating} -> Persisted -> TestLoop
    -> {Done, Repairing -> Persisted -> TestLoop ...}
    """

    IDLE = "IDLE"
    CACHE_CHECK = "CACHE_CHECK"
    CACHE_HIT = "CACHE_HIT"
    GENERATING = "GENERATING"
    PERSISTED = "PERSISTED"
    TEST_LOOP = "TEST_LOOP"
    REPAIRING = "REPAIRING"

    # Terminal states
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildState.DONE, BuildState.FAILED)


class BuildReport(BaseModel):
    """What happened during one ``build()`` call."""

    description: str
    state: BuildState = BuildState.IDLE
    history: list[BuildState] = Field(default_factory=lambda: [BuildState.IDLE])
    cache_hit: bool = False
    generations: int = Field(default=0, description="Generator calls (synthesis and repair)")
    repair_attempts: dict[str, int] = Field(
        default_factory=dict, description="Repair attempts spent per test case label"
    )
    artifact_id: str | None = None
    discarded: list[str] = Field(
        default_factory=list, description="Artifact ids dropped because they never passed"
    )
    duration_seconds: float = 0.0

    @property
    def total_repair_attempts(self) -> int:
        return sum(self.repair_attempts.values())

    def transition(self, state: BuildState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Build already finished in state {self.state.value}")
        logger.debug(f"{self.description!r}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

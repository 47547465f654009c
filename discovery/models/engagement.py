"""
Engagement models: per-viewer engagement state, toggle results, and the
optimistic update state machine handed to callers.

Optimistic flow per (item, viewer):
    Applying(previous) -> Committed(confirmed) | RolledBack(previous)
The outcome is returned as a value; callers never need an except block to revert.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class EngagementKind(str, Enum):
    LIKE = "like"
    BOOKMARK = "bookmark"


# Ledger counter moved by each toggle kind
COUNTER_FOR_KIND = {
    EngagementKind.LIKE: "likes",
    EngagementKind.BOOKMARK: "saves",
}


class EngagementState(BaseModel):
    """What one viewer has done to one item. Reconstructed from server truth."""

    has_liked: bool = False
    has_bookmarked: bool = False

    def flag(self, kind: EngagementKind) -> bool:
        return self.has_liked if kind is EngagementKind.LIKE else self.has_bookmarked

    def flipped(self, kind: EngagementKind) -> "EngagementState":
        if kind is EngagementKind.LIKE:
            return self.model_copy(update={"has_liked": not self.has_liked})
        return self.model_copy(update={"has_bookmarked": not self.has_bookmarked})


class LikeToggleResult(BaseModel):
    item_id: str
    count: int
    liked: bool


class BookmarkToggleResult(BaseModel):
    item_id: str
    bookmarked: bool
    count: int


class TogglePhase(str, Enum):
    APPLYING = "applying"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class OptimisticToggle(BaseModel):
    """
    Caller-side view of one optimistic toggle.

    `state`/`count` are what the caller should render for the current phase:
    the guessed values while applying, server truth once committed, and the
    pre-toggle values after a rollback.
    """

    item_id: str
    kind: EngagementKind
    phase: TogglePhase
    previous_state: EngagementState
    previous_count: int
    state: EngagementState
    count: int
    error: Optional[str] = None

    @classmethod
    def applying(
        cls,
        item_id: str,
        kind: EngagementKind,
        previous_state: EngagementState,
        previous_count: int,
    ) -> "OptimisticToggle":
        guessed = previous_state.flipped(kind)
        delta = 1 if guessed.flag(kind) else -1
        return cls(
            item_id=item_id,
            kind=kind,
            phase=TogglePhase.APPLYING,
            previous_state=previous_state,
            previous_count=previous_count,
            state=guessed,
            count=max(0, previous_count + delta),
        )

    def committed(self, confirmed_flag: bool, confirmed_count: int) -> "OptimisticToggle":
        if self.phase is not TogglePhase.APPLYING:
            raise ValueError(f"cannot commit a toggle in phase {self.phase.value}")
        confirmed = self.previous_state.model_copy()
        if confirmed.flag(self.kind) != confirmed_flag:
            confirmed = confirmed.flipped(self.kind)
        return self.model_copy(
            update={"phase": TogglePhase.COMMITTED, "state": confirmed, "count": confirmed_count}
        )

    def rolled_back(self, error: str) -> "OptimisticToggle":
        if self.phase is not TogglePhase.APPLYING:
            raise ValueError(f"cannot roll back a toggle in phase {self.phase.value}")
        return self.model_copy(
            update={
                "phase": TogglePhase.ROLLED_BACK,
                "state": self.previous_state,
                "count": self.previous_count,
                "error": error,
            }
        )

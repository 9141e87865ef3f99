"""Resolution phase definitions: the tier state machine and its transitions."""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """All phases of one resolve() call. Each non-terminal phase is a tier."""

    INIT = "INIT"
    AI_ANALYZE = "AI_ANALYZE"
    ENRICH = "ENRICH"
    SCOUT = "SCOUT"
    DEMO = "DEMO"
    COMPLETE = "COMPLETE"


# There is no failure phase: DEMO always produces a record.
VALID_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.INIT: {Phase.AI_ANALYZE, Phase.DEMO},
    Phase.AI_ANALYZE: {Phase.ENRICH, Phase.SCOUT},
    Phase.ENRICH: {Phase.COMPLETE},
    Phase.SCOUT: {Phase.COMPLETE, Phase.DEMO},
    Phase.DEMO: {Phase.COMPLETE},
    Phase.COMPLETE: set(),  # terminal
}

TERMINAL_PHASES = {Phase.COMPLETE}

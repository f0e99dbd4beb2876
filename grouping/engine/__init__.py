"""Placement engine: full runs, late insertion, manual moves and run records."""

from __future__ import annotations

from .balancer import balance_groups
from .decision_log import PlacementLogger
from .engine import GroupingEngine, run_grouping_algorithm
from .incremental import insert_late_camper
from .moves import ManualMoveResult, apply_manual_move, validate_move
from .run_record import build_grouping_run
from .state import GroupState, ViolationLedger

__all__ = [
    "balance_groups",
    "PlacementLogger",
    "GroupingEngine",
    "run_grouping_algorithm",
    "insert_late_camper",
    "ManualMoveResult",
    "apply_manual_move",
    "validate_move",
    "build_grouping_run",
    "GroupState",
    "ViolationLedger",
]

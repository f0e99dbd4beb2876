"""
Placement Logger - decision log for a grouping run.

Records phase notes, placement decisions and emitted violations in memory
so a run can explain itself without anyone reading the process logs.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from ..violations import ConstraintViolation, ViolationSeverity

logger = logging.getLogger(__name__)


class PlacementLogger:
    """Logger for tracking placement decisions and violations during a run."""

    def __init__(self, debug_mode: bool = False) -> None:
        self.debug_mode = debug_mode
        self.phase_notes: dict[str, list[str]] = defaultdict(list)
        self.placements: dict[str, int] = defaultdict(int)
        self.violations: dict[str, list[dict[str, str]]] = defaultdict(list)
        self.decisions: list[str] = []

    def log_phase(self, phase: str, message: str) -> None:
        """Log a phase-level note (always kept, logged at INFO)."""
        self.phase_notes[phase].append(message)
        logger.info(f"[{phase.upper()}] {message}")

    def log_placement(self, phase: str, camper_ids: list[str], group_id: str, reason: str, score: float | None = None) -> None:
        """Log a placement decision."""
        self.placements[phase] += len(camper_ids)
        score_text = f" score={score:g}" if score is not None else ""
        detail = f"{', '.join(camper_ids)} -> {group_id}{score_text} ({reason})"
        if self.debug_mode:
            self.decisions.append(f"[{phase}] {detail}")
        logger.debug(f"[PLACE] {detail}")

    def log_violation(self, violation: ConstraintViolation) -> None:
        """Log a violation found during placement or validation."""
        self.violations[violation.violation_type].append(
            {"id": violation.id, "severity": violation.severity, "details": violation.description}
        )
        if violation.severity == ViolationSeverity.HARD:
            logger.warning(f"[VIOLATION] {violation.violation_type}: {violation.description}")
        else:
            logger.info(f"[VIOLATION] {violation.violation_type}: {violation.description}")

    def get_summary(self) -> dict[str, Any]:
        """Get summary of all logged information."""
        summary: dict[str, Any] = {
            "phases": dict(self.phase_notes),
            "placements": dict(self.placements),
            "violations": dict(self.violations),
        }
        if self.debug_mode:
            summary["decisions"] = list(self.decisions)
        return summary

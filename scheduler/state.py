"""
NEMT Matcher State Management.

This module acts as the 'Memory' of one matching pass. It tracks:
1. The occurrence claim pool (which pickups are still free, per client).
2. Confirmed appointment/occurrence pairs.
3. Why each unmatched appointment stayed unmatched.

The pool is mutated in appointment order, so one state must never be shared
by two passes running at the same time.
"""

from datetime import date as date_type
from typing import Any, Dict, List, Optional
from collections import defaultdict
from dataclasses import dataclass

from models import (
    Appointment, NEMTOccurrence, NemtMatchResult, NemtPair,
    UnmatchedAppointment, UnmatchedReason
)


@dataclass
class MatchFailure:
    """Record of an appointment no occurrence could be paired with."""
    appointment: Appointment
    reason: UnmatchedReason
    nearest_difference_minutes: Optional[int] = None


class MatchState:
    """
    Maintains the mutable state of the matcher during one pass.
    """

    def __init__(self):
        """Initialize an empty claim pool."""
        # Occurrence index (client_id -> occurrences, in input order)
        self.occurrences_by_client: Dict[int, List[NEMTOccurrence]] = defaultdict(list)

        # occurrence_id -> appointment_id that claimed it
        self.claims: Dict[int, int] = {}

        self.pairs: List[NemtPair] = []
        self.failures: Dict[int, MatchFailure] = {}

    def add_occurrence(self, occurrence: NEMTOccurrence) -> None:
        self.occurrences_by_client[occurrence.client_id].append(occurrence)

    def occurrences_for(self, client_id: int) -> List[NEMTOccurrence]:
        """Every pooled occurrence of a client, claimed or not."""
        return self.occurrences_by_client.get(client_id, [])

    def is_claimed(self, occurrence_id: int) -> bool:
        return occurrence_id in self.claims

    def claim(self, appointment: Appointment, occurrence: NEMTOccurrence, difference_minutes: int) -> None:
        """
        Commit a pair. The occurrence leaves the pool for every later appointment.
        """
        if occurrence.id in self.claims:
            raise ValueError(
                f"Occurrence {occurrence.id} already claimed by appointment {self.claims[occurrence.id]}"
            )
        self.claims[occurrence.id] = appointment.id
        self.pairs.append(NemtPair(
            appointment_id=appointment.id,
            occurrence_id=occurrence.id,
            difference_minutes=difference_minutes
        ))

    def record_failure(
        self,
        appointment: Appointment,
        reason: UnmatchedReason,
        nearest_difference_minutes: Optional[int] = None
    ) -> None:
        self.failures[appointment.id] = MatchFailure(appointment, reason, nearest_difference_minutes)

    # --- Reporting Methods ---

    def get_statistics(self) -> Dict[str, Any]:
        """Counts for logs and the demo report."""
        pooled = sum(len(v) for v in self.occurrences_by_client.values())
        reasons = defaultdict(int)
        for failure in self.failures.values():
            reasons[failure.reason.value] += 1

        return {
            "matched_count": len(self.pairs),
            "unmatched_count": len(self.failures),
            "pooled_occurrences": pooled,
            "unclaimed_occurrences": pooled - len(self.claims),
            "unmatched_reasons": dict(reasons),
        }

    def to_result(self, start_date: date_type, end_date: date_type) -> NemtMatchResult:
        return NemtMatchResult(
            start_date=start_date,
            end_date=end_date,
            matched_count=len(self.pairs),
            pairs=list(self.pairs),
            unmatched=[
                UnmatchedAppointment(
                    appointment_id=f.appointment.id,
                    reason=f.reason,
                    nearest_difference_minutes=f.nearest_difference_minutes
                )
                for f in self.failures.values()
            ]
        )

    def clear(self) -> None:
        """Reset state (useful for re-running a pass)."""
        self.occurrences_by_client.clear()
        self.claims.clear()
        self.pairs.clear()
        self.failures.clear()

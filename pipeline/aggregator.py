"""
Result aggregator: collects (port, outcome) pairs in completion order and
finalizes them into a report ordered by ascending port.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from core.errors import AggregationError
from core.models import PortState, ProbeOutcome, ScanReport


class ResultAggregator:
    def __init__(self, ports: Iterable[int]):
        self._expected = frozenset(ports)
        self._outcomes: Dict[int, ProbeOutcome] = {}
        self._lock = threading.Lock()

    @property
    def expected(self) -> int:
        return len(self._expected)

    @property
    def recorded(self) -> int:
        with self._lock:
            return len(self._outcomes)

    @property
    def pending(self) -> List[int]:
        with self._lock:
            return sorted(self._expected.difference(self._outcomes))

    def record(self, outcome: ProbeOutcome) -> None:
        with self._lock:
            if outcome.port not in self._expected:
                raise AggregationError(f"outcome for unscheduled port {outcome.port}")
            if outcome.port in self._outcomes:
                raise AggregationError(f"duplicate outcome for port {outcome.port}")
            self._outcomes[outcome.port] = outcome

    def finalize(
        self,
        target: str,
        include_status: bool = False,
        allow_partial: bool = False,
        duration_ms: Optional[float] = None,
        peak_in_flight: int = 0,
    ) -> ScanReport:
        with self._lock:
            missing = sorted(self._expected.difference(self._outcomes))
            if missing and not allow_partial:
                raise AggregationError(
                    f"{len(missing)} of {len(self._expected)} ports have no outcome (first: {missing[:5]})"
                )
            ordered = [self._outcomes[p] for p in sorted(self._outcomes)]

        counts = {state.value: 0 for state in PortState}
        for o in ordered:
            counts[o.state.value] += 1

        return ScanReport(
            target=target,
            open_ports=[o.port for o in ordered if o.is_open],
            outcomes={o.port: o for o in ordered} if include_status else None,
            counts=counts,
            ports_requested=len(self._expected),
            ports_scanned=len(ordered),
            complete=not missing,
            unscanned=missing,
            duration_ms=round(duration_ms or 0.0, 3),
            peak_in_flight=peak_in_flight,
        )

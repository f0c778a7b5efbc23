"""
Scan orchestrator: turns a Target and a ScanConfig into a ScanReport.

Ports are pulled from a shared work list by a fixed pool of workers, every
probe runs inside a limiter slot, and each outcome goes straight to the
aggregator. Per-port problems are data; only an invalid config raises.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Union

from core.errors import TargetError
from core.models import PortState, ProbeOutcome, ScanConfig, ScanReport, Target
from pipeline.aggregator import ResultAggregator
from policy.limiter import ConcurrencyLimiter
from probers.l4_tcp import tcp_probe

log = logging.getLogger(__name__)

ProbeFn = Callable[[str, int, float], Awaitable[ProbeOutcome]]

# Extra time a probe gets past its own timeout before it is abandoned.
WATCHDOG_GRACE_S = 1.0


def _coerce_target(target: Union[Target, str]) -> Target:
    if isinstance(target, Target):
        return target
    try:
        return Target(ip=target)
    except ValueError as exc:
        raise TargetError(f"target must be a resolved IP address, got {target!r}") from exc


class ScanOrchestrator:
    """Runs one scan at a time; `limiter` holds the most recent run's limiter."""

    def __init__(self, probe: ProbeFn = tcp_probe) -> None:
        self.probe = probe
        self.limiter: Optional[ConcurrencyLimiter] = None

    async def _probe_one(self, ip: str, port: int, timeout: float) -> ProbeOutcome:
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(self.probe(ip, port, timeout), timeout=timeout + WATCHDOG_GRACE_S)
        except asyncio.TimeoutError:
            log.warning("probe %s:%s overran its timeout, abandoned", ip, port)
            return ProbeOutcome(
                port=port,
                state=PortState.TIMEOUT,
                reason="probe overran its timeout",
                elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
            )
        except Exception as exc:  # noqa: BLE001
            log.exception("probe %s:%s failed unexpectedly", ip, port)
            return ProbeOutcome(
                port=port,
                state=PortState.ERROR,
                reason=f"{type(exc).__name__}: {exc}",
                elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
            )

        if not isinstance(result, ProbeOutcome) or result.port != port:
            log.error("probe %s:%s returned %r instead of an outcome for that port", ip, port, result)
            return ProbeOutcome(
                port=port,
                state=PortState.ERROR,
                reason=f"invalid probe result: {type(result).__name__}",
                elapsed_ms=round((time.perf_counter() - start) * 1000, 3),
            )
        return result

    async def run(self, target: Union[Target, str], config: ScanConfig) -> ScanReport:
        config = ScanConfig.check(config)
        target = _coerce_target(target)
        ip = str(target.ip)
        ports = config.work_list()
        aggregator = ResultAggregator(ports)

        if not ports:
            log.info("scan %s: empty port list, nothing to probe", ip)
            return aggregator.finalize(ip, include_status=config.include_status, duration_ms=0.0)

        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + config.scan_deadline if config.scan_deadline else None
        limiter = ConcurrencyLimiter(config.concurrency_limit)
        self.limiter = limiter
        work = iter(ports)
        workers = min(config.concurrency_limit, len(ports))

        log.info(
            "scan %s: %d ports, concurrency=%d, timeout=%.2fs",
            ip,
            len(ports),
            config.concurrency_limit,
            config.timeout_per_probe,
        )

        async def worker() -> None:
            # next() on the shared iterator never yields to the loop, so each port goes to one worker
            for port in work:
                if deadline is not None and loop.time() >= deadline:
                    return
                async with limiter.slot():
                    outcome = await self._probe_one(ip, port, config.timeout_per_probe)
                aggregator.record(outcome)

        await asyncio.gather(*(worker() for _ in range(workers)))

        report = aggregator.finalize(
            ip,
            include_status=config.include_status,
            allow_partial=deadline is not None,
            duration_ms=(loop.time() - started) * 1000,
            peak_in_flight=limiter.peak,
        )
        if not report.complete:
            log.warning(
                "scan %s: deadline of %.2fs reached, %d ports left unscanned",
                ip,
                config.scan_deadline,
                len(report.unscanned),
            )
        if report.counts.get(PortState.ERROR.value):
            log.warning("scan %s: %d ports hit local probe errors", ip, report.counts[PortState.ERROR.value])
        log.info(
            "scan %s finished in %.0fms: open=%s counts=%s peak_in_flight=%d",
            ip,
            report.duration_ms,
            report.open_ports,
            report.counts,
            limiter.peak,
        )
        return report


async def scan_async(target: Union[Target, str], config: ScanConfig, probe: ProbeFn = tcp_probe) -> ScanReport:
    return await ScanOrchestrator(probe=probe).run(target, config)


def scan(target: Union[Target, str], config: ScanConfig, probe: ProbeFn = tcp_probe) -> ScanReport:
    """Run a full scan synchronously. Raises ConfigError before any probe for an invalid config."""
    config = ScanConfig.check(config)
    target = _coerce_target(target)
    return asyncio.run(scan_async(target, config, probe=probe))

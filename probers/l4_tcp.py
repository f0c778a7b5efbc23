"""
TCP connect prober using a plain connect() without crafting raw packets.
One socket per call, closed before returning; nothing is sent or read.
"""

import asyncio
import errno
import logging
import time

from core.models import PortState, ProbeOutcome

log = logging.getLogger(__name__)

# Network-side "no usable answer" conditions reported as timeout/filtered.
_FILTERED_ERRNOS = {errno.EHOSTUNREACH, errno.ENETUNREACH, errno.ETIMEDOUT}
# Active refusal during the handshake.
_REFUSED_ERRNOS = {errno.ECONNREFUSED, errno.ECONNRESET}


def _errno_reason(exc: OSError) -> str:
    name = errno.errorcode.get(exc.errno, type(exc).__name__) if exc.errno else type(exc).__name__
    detail = exc.strerror or str(exc)
    return f"{name}: {detail}" if detail else name


async def _close(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except (ConnectionError, OSError):
        pass


async def tcp_probe(ip: str, port: int, timeout: float) -> ProbeOutcome:
    start = time.perf_counter()

    def outcome(state: PortState, reason=None) -> ProbeOutcome:
        elapsed = (time.perf_counter() - start) * 1000
        log.debug("probe %s:%s -> %s (%.1fms)%s", ip, port, state.value, elapsed, f" {reason}" if reason else "")
        return ProbeOutcome(port=port, state=state, reason=reason, elapsed_ms=round(elapsed, 3))

    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(str(ip), port), timeout=timeout)
    except asyncio.TimeoutError:
        # must precede OSError: TimeoutError subclasses it on 3.11+
        return outcome(PortState.TIMEOUT)
    except ConnectionRefusedError:
        return outcome(PortState.CLOSED)
    except OSError as exc:
        if exc.errno in _REFUSED_ERRNOS:
            return outcome(PortState.CLOSED)
        if exc.errno in _FILTERED_ERRNOS:
            return outcome(PortState.TIMEOUT, _errno_reason(exc))
        return outcome(PortState.ERROR, _errno_reason(exc))

    await _close(writer)
    return outcome(PortState.OPEN)

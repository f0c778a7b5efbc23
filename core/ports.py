from __future__ import annotations

from typing import List

from core.errors import ConfigError

MIN_PORT = 1
MAX_PORT = 65535
FULL_RANGE = range(MIN_PORT, MAX_PORT + 1)

_FULL_ALIASES = {"all", "-", "*"}


def _to_int(token: str, part: str) -> int:
    try:
        return int(token)
    except ValueError as exc:
        raise ConfigError(f"Invalid port token: {part!r}") from exc


def parse_ports(spec: str) -> List[int]:
    """
    Parses a port specification string into a sorted list of distinct ports.
    Supports:
    - Single ports: "80"
    - Ranges: "1-1024"
    - Comma-separated: "22,80,443"
    - Mixed: "1-1024,8080,9000-9005"
    - Full range: "all", "-" or "*"
    """
    spec = spec.strip()
    if not spec:
        raise ConfigError("Empty port spec")
    if spec.lower() in _FULL_ALIASES:
        return list(FULL_RANGE)

    ports = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start = _to_int(start_s.strip(), part)
            end = _to_int(end_s.strip(), part)
            if start < MIN_PORT or end > MAX_PORT or start > end:
                raise ConfigError(f"Invalid port range: {part}")
            ports.update(range(start, end + 1))
        else:
            p = _to_int(part, part)
            if p < MIN_PORT or p > MAX_PORT:
                raise ConfigError(f"Invalid port: {p}")
            ports.add(p)

    if not ports:
        raise ConfigError(f"No ports in spec: {spec!r}")
    return sorted(ports)

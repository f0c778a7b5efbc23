"""
Shared data models: Target and ScanConfig go in, ProbeOutcome flows from
prober to aggregator, ScanReport comes out. All models are frozen.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, StrictInt, ValidationError, field_validator

from core.config import settings
from core.errors import ConfigError
from core.ports import MAX_PORT, MIN_PORT, parse_ports


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip: IPvAnyAddress
    hostname: Optional[str] = None  # display only, never resolved here

    def __str__(self) -> str:
        return str(self.ip)


class ScanConfig(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)

    concurrency_limit: int = Field(default_factory=lambda: settings.scan_concurrency, gt=0)
    timeout_per_probe: float = Field(
        default_factory=lambda: settings.probe_timeout_s, gt=0, allow_inf_nan=False
    )
    ports: Tuple[StrictInt, ...] = Field(default_factory=lambda: tuple(parse_ports(settings.default_ports)))
    scan_deadline: Optional[float] = Field(
        default_factory=lambda: settings.scan_deadline_s, gt=0, allow_inf_nan=False
    )
    include_status: bool = False

    @field_validator("ports", mode="before")
    @classmethod
    def coerce_ports(cls, v: Any) -> Any:
        if isinstance(v, range):
            return tuple(v)
        if isinstance(v, (set, frozenset)):
            try:
                return tuple(sorted(v))
            except TypeError:
                return tuple(v)
        return v

    @field_validator("ports")
    @classmethod
    def validate_ports(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        bad = [p for p in v if p < MIN_PORT or p > MAX_PORT]
        if bad:
            raise ValueError(f"ports out of range {MIN_PORT}-{MAX_PORT}: {bad[:5]}")
        return v

    @classmethod
    def build(cls, **values: Any) -> "ScanConfig":
        """Construct a config, reporting validation failures as ConfigError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigError(f"invalid scan config: {problems}") from exc

    @classmethod
    def check(cls, config: Any) -> "ScanConfig":
        """Re-validate an arbitrary config object (e.g. one built with model_construct)."""
        if not isinstance(config, ScanConfig):
            raise ConfigError(f"expected ScanConfig, got {type(config).__name__}")
        return cls.build(**config.model_dump())

    def work_list(self) -> List[int]:
        return sorted(set(self.ports))


class PortState(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    TIMEOUT = "timeout"
    ERROR = "error"


class ProbeOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int
    state: PortState
    reason: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.state is PortState.OPEN


class ScanReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str
    open_ports: List[int] = Field(default_factory=list)
    outcomes: Optional[Dict[int, ProbeOutcome]] = None
    counts: Dict[str, int] = Field(default_factory=dict)
    ports_requested: int = 0
    ports_scanned: int = 0
    complete: bool = True
    unscanned: List[int] = Field(default_factory=list)
    duration_ms: float = 0.0
    peak_in_flight: int = 0

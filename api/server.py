"""
FastAPI wrapper exposing the scan engine over HTTP.
Targets go through the same allowlist as the CLI.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from core.config import settings
from core.models import ScanConfig
from core.ports import parse_ports
from core.targets import resolve_target
from pipeline.orchestrator import scan

log = logging.getLogger(__name__)

app = FastAPI(title="Port Sweep API", version="1.0")


class ScanPayload(BaseModel):
    target: str
    ports: Optional[str] = None
    concurrency: Optional[int] = None
    timeout: Optional[float] = None
    deadline: Optional[float] = None
    include_status: bool = False


@app.post("/api/scan")
def api_scan(payload: ScanPayload):
    try:
        target = resolve_target(payload.target)
        values = {"include_status": payload.include_status}
        if payload.ports is not None:
            values["ports"] = parse_ports(payload.ports)
        if payload.concurrency is not None:
            values["concurrency_limit"] = payload.concurrency
        if payload.timeout is not None:
            values["timeout_per_probe"] = payload.timeout
        if payload.deadline is not None:
            values["scan_deadline"] = payload.deadline
        report = scan(target, ScanConfig.build(**values))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        log.exception("scan failed")
        raise HTTPException(status_code=500, detail="scan failed") from exc
    return report.model_dump(mode="json")


@app.get("/api/health")
def api_health():
    return {
        "safe_mode": settings.safe_mode,
        "allowlist": bool(settings.allowlist_cidrs or settings.allowlist_domains),
        "scan_concurrency": settings.scan_concurrency,
        "probe_timeout_s": settings.probe_timeout_s,
    }

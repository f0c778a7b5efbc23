import argparse
import json
import logging
import sys

from core.config import settings
from core.errors import ConfigError, TargetError
from core.models import ScanConfig
from core.ports import parse_ports
from core.targets import resolve_target
from pipeline.orchestrator import scan


def _print(obj):
    print(json.dumps(obj, indent=2, default=str))


def cmd_scan(args):
    target = resolve_target(args.target)
    values = {"include_status": args.all_status}
    if args.ports is not None:
        values["ports"] = parse_ports(args.ports)
    if args.concurrency is not None:
        values["concurrency_limit"] = args.concurrency
    if args.timeout is not None:
        values["timeout_per_probe"] = args.timeout
    if args.deadline is not None:
        values["scan_deadline"] = args.deadline
    config = ScanConfig.build(**values)
    report = scan(target, config)
    out = report.model_dump(mode="json")
    if target.hostname:
        out["hostname"] = target.hostname
    _print(out)


def cmd_ports(args):
    _print(parse_ports(args.spec))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Concurrent TCP connect port scanner")
    sub = parser.add_subparsers()

    p_scan = sub.add_parser("scan", help="Full-connect scan of one host")
    p_scan.add_argument("target", help="IP or hostname (must be allowlisted in safe mode)")
    p_scan.add_argument("--ports", help=f"Port spec: 1-1024, 22,80,443, all (default: {settings.default_ports})")
    p_scan.add_argument("--concurrency", type=int, help=f"Max simultaneous probes (default: {settings.scan_concurrency})")
    p_scan.add_argument("--timeout", type=float, help=f"Per-probe timeout in seconds (default: {settings.probe_timeout_s})")
    p_scan.add_argument("--deadline", type=float, help="Overall scan deadline in seconds; returns a partial report")
    p_scan.add_argument("--all-status", action="store_true", default=False, help="Include per-port outcomes")
    p_scan.set_defaults(func=cmd_scan)

    p_ports = sub.add_parser("ports", help="Expand a port spec")
    p_ports.add_argument("spec")
    p_ports.set_defaults(func=cmd_ports)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    try:
        args.func(args)
    except (ConfigError, TargetError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

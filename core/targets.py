"""
Target resolution and scope enforcement: turns user input into a resolved
Target and refuses anything outside the allowlisted CIDRs/domains.
"""

import ipaddress
import logging
import socket
from typing import Iterable, List

from core.config import settings
from core.errors import TargetError
from core.models import Target

log = logging.getLogger(__name__)


def _resolve_host(host: str) -> List[str]:
    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except socket.gaierror:
        return []
    # IPv4 first, then IPv6, each in resolver order
    addrs = list(dict.fromkeys(info[4][0] for info in infos))
    return sorted(addrs, key=lambda a: ipaddress.ip_address(a).version)


def _cidr_match(ip: str, cidrs: Iterable[str]) -> bool:
    try:
        ip_obj = ipaddress.ip_address(ip)
    except ValueError:
        return False
    for cidr in cidrs:
        try:
            if ip_obj in ipaddress.ip_network(cidr, strict=False):
                return True
        except ValueError:
            continue
    return False


def _domain_match(host: str, domains: Iterable[str]) -> bool:
    host = host.lower().rstrip(".")
    for d in domains:
        d = d.lower()
        if host == d or host.endswith("." + d):
            return True
    return False


def is_authorized_target(target: str) -> bool:
    """
    Validate target (hostname or IP) against allowlist CIDRs/domains.
    DNS is resolved to bind host to IPs and checked against CIDR list.
    """
    cidrs = settings.allowlist_cidrs
    domains = settings.allowlist_domains
    if not cidrs and not domains:
        return False  # explicit allowlist required

    resolved_ips = _resolve_host(target)
    if _domain_match(target, domains):
        if cidrs:
            return any(_cidr_match(ip, cidrs) for ip in resolved_ips)
        return True
    return any(_cidr_match(ip, cidrs) for ip in resolved_ips)


def resolve_target(target: str) -> Target:
    """
    Accepts an IP literal or hostname and returns a resolved Target.
    In safe mode the target must pass is_authorized_target first.
    """
    target = target.strip()
    if not target:
        raise TargetError("empty target")

    if settings.safe_mode and not is_authorized_target(target):
        raise TargetError(f"target {target} not in allowlist or allowlist missing")

    try:
        return Target(ip=ipaddress.ip_address(target))
    except ValueError:
        pass

    addrs = _resolve_host(target)
    if not addrs:
        raise TargetError(f"could not resolve target {target!r}")
    log.debug("resolved %s -> %s", target, addrs)
    return Target(ip=addrs[0], hostname=target)

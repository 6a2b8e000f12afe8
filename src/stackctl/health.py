#!/usr/bin/env python3
"""
Liveness probes for the gateway and for the backend reached through it.

Each probe is a single HTTP GET; an endpoint is UP only when it answers with
status 200. Probes are independent: a failure of one never stops the other.
"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from enum import Enum

from .settings import Settings

logger = logging.getLogger(__name__)

USER_AGENT = 'stackctl-HealthCheck/1.0'

class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Surface 3xx answers as HTTPError instead of following them."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


# probes target local endpoints; environment proxies do not apply
_OPENER = urllib.request.build_opener(urllib.request.ProxyHandler({}), _NoRedirect)


class ProbeStatus(str, Enum):
    UP = 'UP'
    DOWN = 'DOWN'


@dataclass(frozen=True)
class ProbeResult:
    name: str
    url: str
    status: ProbeStatus
    detail: str = ''

    @property
    def is_up(self) -> bool:
        return self.status is ProbeStatus.UP


@dataclass(frozen=True)
class HealthReport:
    gateway: ProbeResult
    backend: ProbeResult

    def as_dict(self) -> dict[str, ProbeStatus]:
        return {'gateway': self.gateway.status, 'backend': self.backend.status}


def probe_endpoint(name: str, url: str, timeout: float = 5.0) -> ProbeResult:
    """GET ``url`` once and classify the answer."""
    try:
        req = urllib.request.Request(url, headers={'User-Agent': USER_AGENT})
        with _OPENER.open(req, timeout=timeout) as response:
            status = response.status
    except urllib.error.HTTPError as e:
        return ProbeResult(name, url, ProbeStatus.DOWN, f"HTTP {e.code}: {e.reason}")
    except urllib.error.URLError as e:
        return ProbeResult(name, url, ProbeStatus.DOWN, f"Connection failed: {e.reason}")
    except (OSError, http.client.HTTPException) as e:
        return ProbeResult(name, url, ProbeStatus.DOWN, f"Error: {e}")

    if status == 200:
        return ProbeResult(name, url, ProbeStatus.UP, f"HTTP {status}")
    return ProbeResult(name, url, ProbeStatus.DOWN, f"HTTP {status}")


def build_probe_urls(settings: Settings) -> dict[str, str]:
    port = settings.require_gateway_port()
    base = f"http://{settings.health_host}:{port}"
    return {
        'gateway': f"{base}{settings.gateway_health_path}",
        'backend': f"{base}{settings.backend_health_path}",
    }


def probe(settings: Settings) -> HealthReport:
    urls = build_probe_urls(settings)
    results = {}
    for name, url in urls.items():
        logger.debug(f"Probing {name}: {url}")
        results[name] = probe_endpoint(name, url, settings.health_timeout)
    return HealthReport(gateway=results['gateway'], backend=results['backend'])


def format_report(report: HealthReport) -> list[str]:
    lines = []
    for label, result in (('Gateway', report.gateway), ('Backend (via Gateway)', report.backend)):
        marker = 'OK' if result.is_up else 'DOWN'
        lines.append(f"{label}: {marker} ({result.detail})")
    return lines

from __future__ import annotations

import logging
import time
from typing import Any, Dict

from .errors import NSAuditError
from .extract import Section, extract_ns
from .locator import ParentLocator
from .models import DomainAuditResult, normalize_host
from .query import QueryEngine

logger = logging.getLogger(__name__)


class DomainAuditor:
    """
    Registrar view vs. zone view for a single domain.

      1) locate the parent zone's server and the zone's own server
      2) ask the parent server for the delegation (AUTHORITY section)
      3) ask the zone's server for its own NS RRset (ANSWER section)

    Any failure stops the sequence and is attached to the result instead of
    being raised, so one bad domain never takes a worker down.
    """

    def __init__(self, locator: ParentLocator, engine: QueryEngine) -> None:
        self.locator = locator
        self.engine = engine

    def audit(self, domain: str) -> DomainAuditResult:
        fqdn = normalize_host(domain)
        started = time.perf_counter()
        info: Dict[str, Any] = {}

        try:
            loc = self.locator.locate(fqdn)
            info.update(parent=loc.parent, parent_ns=loc.parent_ns, zone_server=loc.zone_ns)

            logger.debug("Fetching registrar NS records for %s from %s", fqdn, loc.parent_ns)
            registrar = extract_ns(self.engine.query_ns(fqdn, loc.parent_ns), Section.AUTHORITY, server=loc.parent_ns)

            logger.debug("Fetching zone NS records for %s from %s", fqdn, loc.zone_ns)
            zone = extract_ns(self.engine.query_ns(fqdn, loc.zone_ns), Section.ANSWER, server=loc.zone_ns)
        except NSAuditError as e:
            logger.warning("Error processing domain %s: %s", fqdn, e)
            return DomainAuditResult.failed(fqdn, e, elapsed_ms=_elapsed_ms(started), **info)

        return DomainAuditResult(
            domain=fqdn,
            registrar_ns=registrar,
            zone_ns=zone,
            elapsed_ms=_elapsed_ms(started),
            **info,
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)

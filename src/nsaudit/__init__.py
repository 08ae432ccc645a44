"""
DNS delegation auditing.

For every domain, compare the NS set its parent zone delegates to (registrar
view) with the NS set the zone serves for itself (zone view), and both with
an operator-supplied required set.

Public entrypoints: build_pipeline, AuditPipeline, DomainAuditor, Comparator
"""

from typing import Optional

from .auditor import DomainAuditor
from .cache import ResolverCache
from .compare import Comparator, compare
from .config import AuditConfig
from .errors import (
    BadResponseError,
    ConfigError,
    NoAuthorityError,
    NSAuditError,
    QueryExhaustedError,
    ResolverError,
)
from .extract import Section, extract_ns
from .locator import ParentLocator, parent_zone
from .models import AuditStats, Comparison, DomainAuditResult, Finding, normalize_host, ns_set
from .pipeline import AuditPipeline
from .query import QueryEngine
from .resolver import SystemResolver


def build_auditor(config: AuditConfig, cache: Optional[ResolverCache] = None) -> DomainAuditor:
    """Wire the real resolver, cache and query engine for `config`."""
    resolver = SystemResolver(timeout=config.resolver_timeout, lifetime=config.resolver_lifetime)
    locator = ParentLocator(resolver, cache if cache is not None else ResolverCache(ttl=config.cache_ttl))
    engine = QueryEngine(
        attempts=config.attempts,
        timeout=config.timeout,
        backoff=config.backoff,
        port=config.port,
        resolver=resolver,
    )
    return DomainAuditor(locator, engine)


def build_pipeline(config: AuditConfig) -> AuditPipeline:
    config.validate()
    return AuditPipeline(
        auditor=build_auditor(config),
        comparator=Comparator(config.required_set),
        workers=config.workers,
        queue_size=config.queue_size,
    )


__all__ = [
    "AuditConfig",
    "AuditPipeline",
    "AuditStats",
    "BadResponseError",
    "Comparator",
    "Comparison",
    "ConfigError",
    "DomainAuditResult",
    "DomainAuditor",
    "Finding",
    "NSAuditError",
    "NoAuthorityError",
    "ParentLocator",
    "QueryEngine",
    "QueryExhaustedError",
    "ResolverCache",
    "ResolverError",
    "Section",
    "SystemResolver",
    "build_auditor",
    "build_pipeline",
    "compare",
    "extract_ns",
    "normalize_host",
    "ns_set",
    "parent_zone",
]

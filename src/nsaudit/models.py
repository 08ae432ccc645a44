from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

# A set of canonical name-server hostnames (lower case, trailing dot).
NameServerSet = FrozenSet[str]


def normalize_host(raw: str) -> str:
    """
    Canonical form for every hostname we compare: stripped, lower case and
    terminated by exactly one dot. DNS responses return dot-terminated names,
    so operator input and resolver output are brought to the same form.
    """
    s = (raw or "").strip().rstrip(".").lower()
    return s + "."


def ns_set(hosts: Iterable[str]) -> NameServerSet:
    return frozenset(normalize_host(h) for h in hosts if h and h.strip().rstrip("."))


@dataclass
class DomainAuditResult:
    """
    Outcome of auditing one domain.

    Either both NS views are populated, or `error` is set and the views are
    empty. Build failures with `failed()` so the two never mix.
    """

    domain: str
    registrar_ns: NameServerSet = frozenset()
    zone_ns: NameServerSet = frozenset()
    error: Optional[BaseException] = None

    # Informational, filled in as far as the audit got.
    parent: Optional[str] = None
    parent_ns: Optional[str] = None
    zone_server: Optional[str] = None
    elapsed_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.error is not None and (self.registrar_ns or self.zone_ns):
            raise ValueError(f"{self.domain}: a failed audit result carries no NS data")

    @classmethod
    def failed(cls, domain: str, error: BaseException, **info: Any) -> "DomainAuditResult":
        return cls(domain=domain, error=error, **info)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "parent": self.parent,
            "parent_ns": self.parent_ns,
            "zone_server": self.zone_server,
            "registrar_ns": sorted(self.registrar_ns),
            "zone_ns": sorted(self.zone_ns),
            "error": (
                {"kind": type(self.error).__name__, "message": str(self.error)}
                if self.error is not None
                else None
            ),
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass
class Finding:
    domain: str
    issue: str
    severity: str = "warning"  # critical|error|warning
    servers: List[str] = field(default_factory=list)
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Comparison:
    domain: str
    issue_count: int = 0
    findings: List[Finding] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)
    overall: str = "ok"  # ok|warning|error|critical

    @property
    def has_issues(self) -> bool:
        return self.issue_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "issue_count": self.issue_count,
            "overall": self.overall,
            "lines": list(self.lines),
            "findings": [f.to_dict() for f in self.findings],
        }

    def finalize_overall(self) -> None:
        # roll-up: critical > error > warning > ok
        severities = {f.severity for f in self.findings}
        for level in ("critical", "error", "warning"):
            if level in severities:
                self.overall = level
                return
        self.overall = "ok"


def _percent(part: int, whole: int) -> int:
    # Empty runs report 0% rather than dividing by zero.
    if whole <= 0:
        return 0
    return int(part * 100 / whole)


@dataclass
class AuditStats:
    total_domains: int = 0
    domains_with_issues: int = 0
    total_issues: int = 0
    errors: int = 0

    def add(self, result: DomainAuditResult, comparison: Comparison) -> None:
        self.total_domains += 1
        if comparison.has_issues:
            self.domains_with_issues += 1
            self.total_issues += comparison.issue_count
        if result.error is not None:
            self.errors += 1

    @property
    def domains_ok(self) -> int:
        return self.total_domains - self.domains_with_issues

    @property
    def percent_with_issues(self) -> int:
        return _percent(self.domains_with_issues, self.total_domains)

    @property
    def percent_ok(self) -> int:
        return _percent(self.domains_ok, self.total_domains)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_domains": self.total_domains,
            "domains_with_issues": self.domains_with_issues,
            "domains_ok": self.domains_ok,
            "percent_with_issues": self.percent_with_issues,
            "percent_ok": self.percent_ok,
            "total_issues": self.total_issues,
            "errors": self.errors,
        }

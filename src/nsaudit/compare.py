from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import Comparison, DomainAuditResult, Finding, NameServerSet, ns_set

# (issue code, severity, rendered label), in report order
IN_ZONE_NOT_IN_REGISTRAR = ("IN_ZONE_NOT_IN_REGISTRAR", "warning", "WARN: In zone, not in registrar")
IN_REGISTRAR_NOT_IN_ZONE = ("IN_REGISTRAR_NOT_IN_ZONE", "warning", "WARN: In registrar, not in zone")
REQUIRED_NOT_IN_REGISTRAR = ("REQUIRED_NOT_IN_REGISTRAR", "error", "ERROR: Required, not in registrar")
IN_REGISTRAR_NOT_REQUIRED = ("IN_REGISTRAR_NOT_REQUIRED", "error", "ERROR: In registrar, not required")


def format_members(hosts: Iterable[str]) -> str:
    return "{" + ", ".join(sorted(hosts)) + "}"


class Comparator:
    """
    Classify one domain's audit result against the required NS set.

    An audit error is a single critical issue. Otherwise four independent set
    differences are checked; each non-empty one counts as one issue no matter
    how many servers it lists.
    """

    def __init__(self, required: Iterable[str]) -> None:
        self.required: NameServerSet = ns_set(required)

    def compare(self, result: DomainAuditResult) -> Comparison:
        out = Comparison(domain=result.domain)

        if result.error is not None:
            out.findings.append(
                Finding(
                    domain=result.domain,
                    issue="AUDIT_FAILED",
                    severity="critical",
                    detail=f"{type(result.error).__name__}: {result.error}",
                )
            )
            out.lines.append(f"CRITICAL: {result.error}")
            out.issue_count = 1
            out.finalize_overall()
            return out

        registrar, zone = result.registrar_ns, result.zone_ns
        checks: List[Tuple[Tuple[str, str, str], NameServerSet]] = [
            (IN_ZONE_NOT_IN_REGISTRAR, zone - registrar),
            (IN_REGISTRAR_NOT_IN_ZONE, registrar - zone),
            (REQUIRED_NOT_IN_REGISTRAR, self.required - registrar),
            (IN_REGISTRAR_NOT_REQUIRED, registrar - self.required),
        ]

        for (issue, severity, label), diff in checks:
            if not diff:
                continue
            members = sorted(diff)
            out.findings.append(Finding(domain=result.domain, issue=issue, severity=severity, servers=members))
            out.lines.append(f"{label}: {format_members(members)}")
            out.issue_count += 1

        if not out.issue_count:
            out.lines.append("OK")
        out.finalize_overall()
        return out


def compare(required: Iterable[str], result: DomainAuditResult) -> Comparison:
    return Comparator(required).compare(result)

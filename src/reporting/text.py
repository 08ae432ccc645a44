from typing import List

from nsaudit.models import AuditStats, Comparison


def render_domain(comparison: Comparison) -> List[str]:
    """Per-domain block: a header followed by the comparator's lines."""
    return [f"----- {comparison.domain} -----", *comparison.lines]


def render_stats(stats: AuditStats) -> List[str]:
    return [
        "",
        "Stats",
        "-----",
        f"Domains: {stats.total_domains}",
        f"Domains with Errors/Warnings: {stats.domains_with_issues} ({stats.percent_with_issues}%)",
        f"Domains without Errors/Warnings: {stats.domains_ok} ({stats.percent_ok}%)",
        f"Total Errors: {stats.total_issues}",
    ]

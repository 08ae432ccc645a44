"""
Report shaping for delegation audits: console text, JSON (via Assemble) and
pandas analytics over the findings.
"""

from .analytics import ReportAnalyzer, findings_frame
from .assembler import Assemble
from .recommendations import Recommendations
from .targets import InvalidDomain, InvalidTarget, require_domain, require_nameservers
from .text import render_domain, render_stats

__all__ = [
    "Assemble",
    "InvalidDomain",
    "InvalidTarget",
    "Recommendations",
    "ReportAnalyzer",
    "findings_frame",
    "render_domain",
    "render_stats",
    "require_domain",
    "require_nameservers",
]

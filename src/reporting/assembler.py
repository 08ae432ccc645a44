from typing import Any, Dict, List, Optional, Sequence, Tuple
from fastapi.encoders import jsonable_encoder

from nsaudit.models import AuditStats, Comparison, DomainAuditResult
from .recommendations import Recommendations

class Assemble:
    """
    Shapes audit output into one consistent JSON response.

    Design intent:
      - The audit engine focuses on detection (registrar view, zone view, required set)
      - The assembler is responsible for shaping results into a single response format:
          - JSON-safe output
          - findings list with recommendations
          - summary
    """

    def build(
        self,
        result: DomainAuditResult,
        comparison: Comparison,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Build the response for a single domain.

        Args:
            result: Raw audit result (both NS views, or an error).
            comparison: The comparator's classification of that result.
            meta: Optional metadata (version, timings, etc.).

        Returns:
            A dict containing only JSON-safe values (dict/list/str/int/etc.).
        """
        findings = [f.to_dict() for f in comparison.findings]

        # Attach a "what to do next" recommendation to each finding.
        self._attach_recommendations(findings)

        response: Dict[str, Any] = {
            "target": result.domain,
            "status": comparison.overall,
            "issue_count": comparison.issue_count,
            "lines": list(comparison.lines),
            "findings": findings,
            "summary": self._summarize(findings),
            "meta": meta or {},
            # Keep the raw audit output available for debugging.
            "audit": self._to_json(result),
        }

        # Final safety pass: ensure *everything* in response is JSON-safe.
        return jsonable_encoder(response)

    def build_run(
        self,
        items: Sequence[Tuple[DomainAuditResult, Comparison]],
        stats: AuditStats,
        required: Sequence[str],
        meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Whole-run response: one entry per domain plus the aggregate stats."""
        results = [self.build(r, c) for r, c in sorted(items, key=lambda rc: rc[0].domain)]
        return jsonable_encoder({
            "required": sorted(required),
            "results": results,
            "stats": stats.to_dict(),
            "meta": meta or {},
        })

    def _to_json(self, obj: Any) -> Any:
        """
        Convert a result into JSON-friendly structures.

        - If the object provides to_dict(), use it, but still run jsonable_encoder
          to handle nested non-JSON types (sets, enums, etc.).
        - Otherwise, encode the object directly.
        """
        if hasattr(obj, "to_dict"):
            return jsonable_encoder(obj.to_dict())
        return jsonable_encoder(obj)

    def _attach_recommendations(self, findings: List[Dict[str, Any]]) -> None:
        """Add a recommendation to each finding."""
        for f in findings:
            issue = (f.get("issue") or "").strip()
            f["recommendation"] = Recommendations.recommend(issue) if issue else ""

    def _summarize(self, findings: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Build a small summary:
          - counts by severity bucket
          - total findings
          - a simple score (0..100) where severe issues reduce the score
        """

        # Known buckets ensure the response always has consistent keys.
        counts = {"critical": 0, "error": 0, "warning": 0, "unknown": 0}

        for f in findings:
            # Normalize severity to a lowercase string; anything unexpected becomes "unknown".
            sev = f.get("severity")
            sev = sev.lower() if isinstance(sev, str) else "unknown"
            counts[sev] = counts.get(sev, 0) + 1

        total = sum(counts.values())

        # Simple scoring model: start at 100 and subtract penalties by severity.
        score = 100 - (counts["critical"] * 100 + counts["error"] * 30 + counts["warning"] * 10)

        # Clamp score to 0..100.
        score = max(0, min(100, score))

        return {"issues": total, **counts, "score": score}

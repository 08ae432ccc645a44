# This is the analytics model.
# It creates reports based on which delegation issues are encountered

from typing import Any, Dict, Iterable
import pandas as pd

from nsaudit.models import Comparison

FINDING_COLUMNS = ["domain", "issue", "severity", "servers"]


# One row per finding; a domain without issues becomes a single "OK" row
def findings_frame(comparisons: Iterable[Comparison]) -> pd.DataFrame:
    rows = []
    for c in comparisons:
        if not c.findings:
            rows.append({"domain": c.domain, "issue": "OK", "severity": "ok", "servers": ""})
            continue
        for f in c.findings:
            rows.append({
                "domain": f.domain,
                "issue": f.issue,
                "severity": f.severity,
                "servers": ", ".join(f.servers),
            })
    return pd.DataFrame(rows, columns=FINDING_COLUMNS)


# Uses a data frame to build a summary of the findings
class ReportAnalyzer:

    def analytics(self, df: pd.DataFrame) -> Dict[str, Any]:
        # Always return the same keys
        empty = {
            "counts_by_issue": pd.DataFrame(columns=["issue", "count"]),
            "counts_by_severity": pd.DataFrame(columns=["severity", "count"]),
            "worst_domains": pd.DataFrame(columns=["domain", "count", "issue_breakdown"]),
        }
        if df is None or df.empty:
            return empty

        broken = df[df["issue"] != "OK"].copy()
        if broken.empty:
            return empty

        counts_by_issue = (
            broken.groupby("issue")
                  .size()
                  .reset_index(name="count")
                  .sort_values(["count", "issue"], ascending=[False, True])
                  .reset_index(drop=True)
        )

        counts_by_severity = (
            broken.groupby("severity")
                  .size()
                  .reset_index(name="count")
                  .sort_values(["count", "severity"], ascending=[False, True])
                  .reset_index(drop=True)
        )

        # Worst domains + breakdown
        tmp = (
            broken.groupby(["domain", "issue"])
                  .size()
                  .reset_index(name="count")
                  .sort_values(["domain", "count", "issue"], ascending=[True, False, True])
        )

        domain_breakdown = (
            tmp.assign(issue_count=tmp["issue"] + ":" + tmp["count"].astype(str))
               .groupby("domain", as_index=False)["issue_count"]
               .agg("; ".join)
               .rename(columns={"issue_count": "issue_breakdown"})
        )

        worst_domains = (
            tmp.groupby("domain", as_index=False)["count"]
               .sum()
               .sort_values(["count", "domain"], ascending=[False, True])
               .merge(domain_breakdown, on="domain", how="left")
               .reset_index(drop=True)
        )

        return {
            "counts_by_issue": counts_by_issue,
            "counts_by_severity": counts_by_severity,
            "worst_domains": worst_domains,
        }

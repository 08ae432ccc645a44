import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from nsaudit import AuditConfig, ConfigError, build_pipeline
from nsaudit.models import Comparison, DomainAuditResult
from nsaudit.source import read_domains
from reporting.analytics import ReportAnalyzer, findings_frame
from reporting.assembler import Assemble
from reporting.text import render_domain, render_stats

"""
The command-line interface for the NS delegation auditor
  1) Build the configuration (environment first, then flags on top) and validate it up-front
  2) Stream the domain list through the audit pipeline
  3) Print each domain's comparison as it arrives, then the run statistics
     (or a single JSON document with --json)

"""

logger = logging.getLogger(__name__)


# Parse the command-line arguments
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Audit NS delegation (registrar vs. zone vs. required)")
    p.add_argument("nameservers", nargs="*", help="Required name servers (e.g., ns1.example.com)")
    p.add_argument("-f", "--domains", dest="domains_file", default=None,
                   help="File with one domain per line (default: domains.txt)")
    p.add_argument("--json", dest="as_json", action="store_true", help="Output JSON")
    p.add_argument("--analytics", action="store_true", help="Print issue breakdown tables after the stats")

    # Defaults come from AuditConfig / NSAUDIT_* environment variables; flags override them.
    p.add_argument("-w", "--workers", type=int, default=None, help="Concurrent workers (default: 4)")
    p.add_argument("--queue-size", type=int, default=None, help="Input/output queue capacity (default: 4096)")
    p.add_argument("--timeout", type=float, default=None, help="Per-attempt query timeout in seconds (default: 5)")
    p.add_argument("--attempts", type=int, default=None, help="Attempts per query (default: 3)")
    p.add_argument("--backoff", choices=["linear", "fixed"], default=None,
                   help="linear: attempt i waits i*timeout; fixed: every attempt waits timeout")
    p.add_argument("--port", type=int, default=None, help="DNS port for targeted queries (default: 53)")
    p.add_argument("--cache-ttl", type=float, default=None,
                   help="Seconds to keep a parent zone's name server (default: whole run)")

    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--version", default="0.1", help="Version string included in JSON meta")

    return p.parse_args(argv)


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> AuditConfig:
    """Environment first, flags on top, then validate everything before doing any work."""
    config = AuditConfig.from_env().merged(
        required=tuple(args.nameservers) or None,
        domains_file=args.domains_file,
        workers=args.workers,
        queue_size=args.queue_size,
        timeout=args.timeout,
        attempts=args.attempts,
        backoff=args.backoff,
        port=args.port,
        cache_ttl=args.cache_ttl,
    )
    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entrypoint.

    Returns:
        Process exit code (0 = all domains consistent, 1 = issues found, 2 = bad configuration).
    """
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        config = build_config(args)
        domains = read_domains(config.domains_file)
        pipeline = build_pipeline(config)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    required = sorted(config.required_set)
    logger.info("Loaded, checking for name servers: %s", ", ".join(required))

    items: List[Tuple[DomainAuditResult, Comparison]] = []

    def sink(result: DomainAuditResult, comparison: Comparison) -> None:
        items.append((result, comparison))
        if not args.as_json:
            print("\n".join(render_domain(comparison)), flush=True)

    try:
        stats = pipeline.run(domains, sink=sink)
    except (ConfigError, OSError) as e:
        print(f"Failed reading domains: {e}", file=sys.stderr)
        return 2

    # Output: JSON (machine-readable) or human-readable text
    if args.as_json:
        out = Assemble().build_run(items, stats, required=required, meta={"version": args.version, "source": "cli"})
        print(json.dumps(out, indent=2))
    else:
        print("\n".join(render_stats(stats)))
        if args.analytics:
            a = ReportAnalyzer().analytics(findings_frame(c for _, c in items))
            for name, df in a.items():
                print(f"\n{name}")
                print("No issues." if df.empty else df.to_string(index=False))

    return 1 if stats.domains_with_issues else 0


if __name__ == "__main__":
    raise SystemExit(main())

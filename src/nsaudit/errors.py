from __future__ import annotations

from typing import Optional


# Base error for everything raised by the audit engine
class NSAuditError(Exception):
    """Base error for delegation audit failures."""


# Bad operator input discovered at startup (fatal for the run)
class ConfigError(NSAuditError):
    """Raised when the audit configuration is unusable."""


class ResolverError(NSAuditError):
    """The system resolver failed to answer an NS lookup."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"NS lookup for {name} failed: {reason}")


class NoAuthorityError(ResolverError):
    """The resolver answered, but the zone has no NS records."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "no NS records found")


class QueryExhaustedError(NSAuditError):
    """Every attempt of a targeted NS query failed."""

    def __init__(self, target: str, server: str, attempts: int, last_error: Optional[BaseException]) -> None:
        self.target = target
        self.server = server
        self.attempts = attempts
        self.last_error = last_error
        last = f"{type(last_error).__name__}: {last_error}" if last_error is not None else "unknown"
        super().__init__(
            f"NS query for {target} to {server} failed after {attempts} attempt(s); last error: {last}"
        )


class BadResponseError(NSAuditError):
    """A targeted query was answered with a non-NOERROR rcode."""

    def __init__(self, domain: str, rcode: str, server: Optional[str] = None) -> None:
        self.domain = domain
        self.rcode = rcode
        self.server = server
        where = f" from {server}" if server else ""
        super().__init__(f"Bad response for domain {domain}{where}: {rcode}")

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

import dns.exception
import dns.flags
import dns.message
import dns.query
import dns.rdatatype

from .errors import ConfigError, QueryExhaustedError, ResolverError
from .models import normalize_host
from .resolver import SystemResolver, is_ip_address

logger = logging.getLogger(__name__)

BACKOFFS = ("linear", "fixed")

# (query, server address, timeout seconds, port) -> response
Transport = Callable[[dns.message.Message, str, float, int], dns.message.Message]

# Failures that consume one attempt.
RETRYABLE = (dns.exception.DNSException, OSError, EOFError, ResolverError)


class AddressLookup(Protocol):
    def lookup_addresses(self, host: str) -> List[str]: ...


def udp_with_tcp_fallback(query: dns.message.Message, address: str, timeout: float, port: int) -> dns.message.Message:
    """UDP exchange; a truncated (TC=1) reply is repeated over TCP."""
    r = dns.query.udp(query, address, timeout=timeout, port=port)
    if r.flags & dns.flags.TC:
        logger.debug("Truncated reply from %s, retrying over TCP", address)
        r = dns.query.tcp(query, address, timeout=timeout, port=port)
    return r


class QueryEngine:
    """
    Send a single NS query to one specific server, retrying on failure.

    Attempt i (1-based) waits i * timeout with backoff="linear" (5s, 10s, 15s
    for the defaults) or a flat `timeout` with backoff="fixed".
    """

    def __init__(
        self,
        attempts: int = 3,
        timeout: float = 5.0,
        backoff: str = "linear",
        port: int = 53,
        resolver: Optional[AddressLookup] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        if int(attempts) < 1:
            raise ConfigError(f"attempts must be a positive integer, got {attempts!r}")
        if float(timeout) <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout!r}")
        if backoff not in BACKOFFS:
            raise ConfigError(f"backoff must be one of {', '.join(BACKOFFS)}, got {backoff!r}")

        self.attempts = int(attempts)
        self.timeout = float(timeout)
        self.backoff = backoff
        self.port = int(port)
        self.resolver = resolver if resolver is not None else SystemResolver()
        self.transport = transport or udp_with_tcp_fallback

    def timeout_for(self, attempt: int) -> float:
        if self.backoff == "linear":
            return attempt * self.timeout
        return self.timeout

    def make_query(self, target: str) -> dns.message.Message:
        m = dns.message.make_query(normalize_host(target), dns.rdatatype.NS)
        # Talking to authoritative servers: do NOT request recursion.
        m.flags &= ~dns.flags.RD
        return m

    def query_ns(self, target: str, server: str) -> dns.message.Message:
        qname = normalize_host(target)
        query = self.make_query(qname)

        last_error: Optional[BaseException] = None
        for attempt in range(1, self.attempts + 1):
            timeout = self.timeout_for(attempt)
            try:
                address = self._address(server)
                logger.debug("NS %s @%s (%s), attempt %d, timeout %.1fs", qname, server, address, attempt, timeout)
                return self.transport(query, address, timeout, self.port)
            except RETRYABLE as e:
                last_error = e
                logger.warning(
                    "Attempt %d/%d for %s @%s failed: %s: %s",
                    attempt, self.attempts, qname, server, type(e).__name__, e,
                )

        raise QueryExhaustedError(qname, server, self.attempts, last_error)

    def _address(self, server: str) -> str:
        bare = server.strip().rstrip(".")
        if is_ip_address(bare):
            return bare
        return self.resolver.lookup_addresses(server)[0]

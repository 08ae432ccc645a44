from __future__ import annotations

import ipaddress
import logging
import threading
from typing import List, Optional, Sequence

import dns.exception
import dns.resolver

from .errors import NoAuthorityError, ResolverError
from .models import normalize_host

logger = logging.getLogger(__name__)


def is_ip_address(s: str) -> bool:
    try:
        ipaddress.ip_address(s)
        return True
    except ValueError:
        return False


class SystemResolver:
    """
    Thin wrapper around the host's configured recursive resolver.

    Used for *discovery* only: a zone's own NS set, its parent's NS set and
    the addresses of name servers we then query directly.
    """

    def __init__(
        self,
        timeout: float = 2.0,
        lifetime: float = 5.0,
        nameservers: Optional[Sequence[str]] = None,
    ) -> None:
        self.timeout = float(timeout)
        self.lifetime = float(lifetime)
        self.nameservers = list(nameservers) if nameservers is not None else None
        self._resolver: Optional[dns.resolver.Resolver] = None
        self._lock = threading.Lock()

    @property
    def resolver(self) -> dns.resolver.Resolver:
        # Built on first use so that constructing this object never reads resolv.conf.
        with self._lock:
            if self._resolver is None:
                r = dns.resolver.Resolver(configure=self.nameservers is None)
                if self.nameservers is not None:
                    r.nameservers = self.nameservers
                r.timeout = self.timeout
                r.lifetime = self.lifetime
                self._resolver = r
            return self._resolver

    def lookup_ns(self, name: str) -> List[str]:
        """NS targets for `name`, in the order the resolver returned them."""
        fqdn = normalize_host(name)
        try:
            ans = self.resolver.resolve(fqdn, "NS", raise_on_no_answer=False, search=False)
        except dns.resolver.NXDOMAIN:
            raise ResolverError(fqdn, "NXDOMAIN") from None
        except dns.resolver.NoNameservers as e:
            raise ResolverError(fqdn, f"no name servers answered: {e}") from e
        except dns.exception.Timeout as e:
            raise ResolverError(fqdn, "timeout") from e
        except dns.exception.DNSException as e:
            raise ResolverError(fqdn, f"{type(e).__name__}: {e}") from e

        hosts = [normalize_host(r.target.to_text()) for r in (ans.rrset or [])]
        if not hosts:
            raise NoAuthorityError(fqdn)
        logger.debug("NS %s -> %s", fqdn, hosts)
        return hosts

    def lookup_addresses(self, host: str) -> List[str]:
        """A then AAAA addresses for a name-server hostname (IP literals pass through)."""
        bare = (host or "").strip().rstrip(".")
        if is_ip_address(bare):
            return [bare]

        fqdn = normalize_host(host)
        ips: List[str] = []
        for rtype in ("A", "AAAA"):
            try:
                ans = self.resolver.resolve(fqdn, rtype, raise_on_no_answer=False, search=False)
            except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
                continue
            except dns.exception.DNSException as e:
                logger.debug("%s lookup for %s failed: %s", rtype, fqdn, e)
                continue
            ips.extend(str(r.address) for r in (ans.rrset or []))

        if not ips:
            raise ResolverError(fqdn, "no A/AAAA records")
        return ips

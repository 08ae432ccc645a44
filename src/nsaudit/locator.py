from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .cache import ResolverCache
from .errors import NoAuthorityError
from .models import normalize_host

logger = logging.getLogger(__name__)


class NSLookup(Protocol):
    def lookup_ns(self, name: str) -> List[str]: ...


@dataclass(frozen=True)
class Location:
    domain: str
    parent: str
    parent_ns: str  # a server for the parent zone (registrar view)
    zone_ns: str  # a server for the zone itself (zone view)


def parent_zone(domain: str) -> str:
    """
    Strip the leftmost label: www.example.com. -> example.com.
    The parent of a TLD is the root, ".".
    """
    fqdn = normalize_host(domain)
    if fqdn == ".":
        return "."
    _, _, rest = fqdn.partition(".")
    return rest or "."


class ParentLocator:
    """Find one server for a domain's own zone and one for its parent zone."""

    def __init__(self, resolver: NSLookup, cache: Optional[ResolverCache] = None) -> None:
        self.resolver = resolver
        self.cache = cache if cache is not None else ResolverCache()

    def locate(self, domain: str) -> Location:
        fqdn = normalize_host(domain)
        parent = parent_zone(fqdn)

        zone_ns = self._first_ns(fqdn)
        parent_ns = self.cache.get_or_resolve(parent, self._resolve_parent)

        logger.info("Domain: %s, Parent: %s, ParentNS: %s", fqdn, parent, parent_ns)
        return Location(domain=fqdn, parent=parent, parent_ns=parent_ns, zone_ns=zone_ns)

    def _resolve_parent(self, parent: str) -> str:
        logger.debug("Parent NS for %s not cached, resolving", parent)
        return self._first_ns(parent)

    def _first_ns(self, name: str) -> str:
        hosts = self.resolver.lookup_ns(name)
        if not hosts:
            raise NoAuthorityError(name)
        return normalize_host(hosts[0])

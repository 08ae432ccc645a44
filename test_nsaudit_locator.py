# test_nsaudit_locator.py
from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

import dns.exception
import dns.name
import dns.resolver
import pytest

from nsaudit.cache import ResolverCache
from nsaudit.errors import NoAuthorityError, ResolverError
from nsaudit.locator import ParentLocator, parent_zone
from nsaudit.resolver import SystemResolver


# ----------------------------
# Fake system resolver
# ----------------------------
class FakeResolver:
    """
    Answers lookup_ns() from a dict and counts calls per name.

    A name mapped to an exception instance raises it; `delay` makes every
    lookup slow enough for concurrent callers to overlap.
    """
    def __init__(self, ns: Dict[str, object], delay: float = 0.0):
        self.ns = ns
        self.delay = delay
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def lookup_ns(self, name: str) -> List[str]:
        with self._lock:
            self.calls[name] = self.calls.get(name, 0) + 1
        if self.delay:
            time.sleep(self.delay)
        value = self.ns.get(name, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


# ----------------------------
# parent_zone
# ----------------------------
@pytest.mark.parametrize(
    "domain, parent",
    [
        ("www.example.com.", "example.com."),
        ("example.com", "com."),
        ("Example.COM.AU", "com.au."),
        ("com.", "."),
        (".", "."),
    ],
)
def test_parent_zone_strips_leftmost_label(domain: str, parent: str):
    assert parent_zone(domain) == parent


# ----------------------------
# ResolverCache
# ----------------------------
def test_cache_get_put_normalizes_keys():
    c = ResolverCache()
    assert c.get("com.") is None
    c.put("COM", "a.gtld-servers.net.")
    assert c.get("com.") == "a.gtld-servers.net."
    assert "com" in c
    assert len(c) == 1


def test_cache_without_ttl_never_expires():
    now = [0.0]
    c = ResolverCache(clock=lambda: now[0])
    c.put("com.", "a.gtld-servers.net.")
    now[0] = 10 ** 9
    assert c.get("com.") == "a.gtld-servers.net."


def test_cache_ttl_expires_entries():
    now = [100.0]
    c = ResolverCache(ttl=60, clock=lambda: now[0])
    c.put("com.", "a.gtld-servers.net.")
    now[0] = 159.0
    assert c.get("com.") == "a.gtld-servers.net."
    now[0] = 160.0
    assert c.get("com.") is None
    assert len(c) == 0


def test_cache_failed_resolution_is_not_cached():
    c = ResolverCache()
    calls = []

    def boom(zone: str) -> str:
        calls.append(zone)
        raise NoAuthorityError(zone)

    with pytest.raises(NoAuthorityError):
        c.get_or_resolve("com.", boom)
    assert c.get("com.") is None

    assert c.get_or_resolve("com.", lambda z: "a.gtld-servers.net.") == "a.gtld-servers.net."
    assert calls == ["com."]


def test_cache_concurrent_misses_resolve_once():
    c = ResolverCache()
    calls = []
    lock = threading.Lock()

    def slow(zone: str) -> str:
        with lock:
            calls.append(zone)
        time.sleep(0.05)
        return "a.gtld-servers.net."

    with ThreadPoolExecutor(max_workers=8) as ex:
        hosts = list(ex.map(lambda _: c.get_or_resolve("com.", slow), range(16)))

    assert set(hosts) == {"a.gtld-servers.net."}
    assert calls == ["com."]


# ----------------------------
# ParentLocator
# ----------------------------
def test_locate_returns_parent_and_zone_servers():
    r = FakeResolver({
        "example.com.": ["NS1.Example.com", "ns2.example.com."],
        "com.": ["a.gtld-servers.net.", "b.gtld-servers.net."],
    })
    loc = ParentLocator(r).locate("example.com")

    assert loc.domain == "example.com."
    assert loc.parent == "com."
    assert loc.zone_ns == "ns1.example.com."
    assert loc.parent_ns == "a.gtld-servers.net."


def test_locate_uses_injected_cache():
    cache = ResolverCache()
    cache.put("com.", "cached.gtld-servers.net.")
    r = FakeResolver({"example.com.": ["ns1.example.com."]})

    loc = ParentLocator(r, cache).locate("example.com.")

    assert loc.parent_ns == "cached.gtld-servers.net."
    assert "com." not in r.calls


def test_same_parent_resolved_once_across_sequential_domains():
    r = FakeResolver({
        "a.com.": ["ns1.a.com."],
        "b.com.": ["ns1.b.com."],
        "com.": ["a.gtld-servers.net."],
    })
    locator = ParentLocator(r)

    first = locator.locate("a.com.")
    second = locator.locate("b.com.")

    assert first.parent_ns == second.parent_ns == "a.gtld-servers.net."
    assert r.calls["com."] == 1


def test_same_parent_resolved_once_across_concurrent_callers():
    domains = [f"d{i}.example.org." for i in range(12)] + [f"d{i}.example.net." for i in range(12)]
    ns: Dict[str, object] = {d: [f"ns1.{d}"] for d in domains}
    ns["example.org."] = ["ns.org-parent.test."]
    ns["example.net."] = ["ns.net-parent.test."]
    r = FakeResolver(ns, delay=0.02)
    locator = ParentLocator(r, ResolverCache())

    with ThreadPoolExecutor(max_workers=8) as ex:
        locs = list(ex.map(locator.locate, domains))

    assert {l.parent_ns for l in locs if l.parent == "example.org."} == {"ns.org-parent.test."}
    assert {l.parent_ns for l in locs if l.parent == "example.net."} == {"ns.net-parent.test."}
    assert r.calls["example.org."] == 1
    assert r.calls["example.net."] == 1


def test_locate_zone_without_ns_raises_no_authority():
    r = FakeResolver({"example.com.": [], "com.": ["a.gtld-servers.net."]})
    with pytest.raises(NoAuthorityError):
        ParentLocator(r).locate("example.com.")


def test_locate_parent_without_ns_raises_no_authority_and_caches_nothing():
    cache = ResolverCache()
    r = FakeResolver({"example.com.": ["ns1.example.com."], "com.": []})
    with pytest.raises(NoAuthorityError):
        ParentLocator(r, cache).locate("example.com.")
    assert len(cache) == 0


def test_locate_propagates_resolver_failure():
    r = FakeResolver({"missing.example.": ResolverError("missing.example.", "NXDOMAIN")})
    with pytest.raises(ResolverError) as ei:
        ParentLocator(r).locate("missing.example")
    assert "NXDOMAIN" in str(ei.value)


# ----------------------------
# SystemResolver (dnspython resolver replaced by a stub)
# ----------------------------
class _Rdata:
    def __init__(self, target=None, address=None):
        self.target = dns.name.from_text(target) if target else None
        self.address = address


class _Answer:
    def __init__(self, rrset):
        self.rrset = rrset


class StubDnsResolver:
    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def resolve(self, qname, rdtype, raise_on_no_answer=True, search=None):
        self.calls.append((qname, rdtype))
        value = self.answers.get((qname, rdtype), [])
        if isinstance(value, Exception):
            raise value
        return _Answer(value)


def system_resolver(answers) -> SystemResolver:
    r = SystemResolver()
    r._resolver = StubDnsResolver(answers)
    return r


def test_system_resolver_lookup_ns_keeps_order_and_normalizes():
    r = system_resolver({("example.com.", "NS"): [_Rdata("B.iana-servers.net."), _Rdata("a.iana-servers.net.")]})
    assert r.lookup_ns("Example.com") == ["b.iana-servers.net.", "a.iana-servers.net."]


def test_system_resolver_empty_ns_is_no_authority():
    with pytest.raises(NoAuthorityError):
        system_resolver({}).lookup_ns("example.com.")


@pytest.mark.parametrize(
    "exc, reason",
    [
        (dns.resolver.NXDOMAIN(), "NXDOMAIN"),
        (dns.exception.Timeout(), "timeout"),
        (dns.resolver.NoNameservers(), "no name servers answered"),
    ],
)
def test_system_resolver_failures_become_resolver_errors(exc, reason):
    with pytest.raises(ResolverError) as ei:
        system_resolver({("example.com.", "NS"): exc}).lookup_ns("example.com.")
    assert reason in str(ei.value)
    assert not isinstance(ei.value, NoAuthorityError)


def test_system_resolver_addresses():
    r = system_resolver({
        ("ns1.example.com.", "A"): [_Rdata(address="192.0.2.1")],
        ("ns1.example.com.", "AAAA"): dns.resolver.NoAnswer(),
    })
    assert r.lookup_addresses("ns1.example.com") == ["192.0.2.1"]
    assert r.lookup_addresses("2001:db8::53") == ["2001:db8::53"]
    with pytest.raises(ResolverError):
        r.lookup_addresses("ghost.example.com.")

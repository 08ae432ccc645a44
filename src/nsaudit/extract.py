from __future__ import annotations

import enum
from typing import Optional

import dns.message
import dns.rcode
import dns.rdatatype

from .errors import BadResponseError
from .models import NameServerSet, normalize_host


class Section(enum.Enum):
    # Referral from the parent: delegation NS records sit in AUTHORITY.
    AUTHORITY = "authority"
    # The zone's own server answers for itself in ANSWER.
    ANSWER = "answer"


def extract_ns(response: dns.message.Message, section: Section, server: Optional[str] = None) -> NameServerSet:
    """Collect NS targets from one section of `response`; other record types are ignored."""
    qname = response.question[0].name.to_text() if response.question else "?"
    if response.rcode() != dns.rcode.NOERROR:
        raise BadResponseError(qname, dns.rcode.to_text(response.rcode()), server=server)

    rrsets = response.authority if section is Section.AUTHORITY else response.answer
    hosts = set()
    for rrset in rrsets:
        if rrset.rdtype != dns.rdatatype.NS:
            continue
        for rdata in rrset:
            hosts.add(normalize_host(rdata.target.to_text()))
    return frozenset(hosts)

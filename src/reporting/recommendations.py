class Recommendations:
    _MAP = {
        "OK": "Registrar delegation, zone NS RRset and required name servers all agree. No action needed.",

        # Zone vs registrar
        "IN_ZONE_NOT_IN_REGISTRAR": (
            "The zone lists name servers that the parent does not delegate to. Either add them to the delegation "
            "at your registrar, or remove the NS records from the zone so both views agree."
        ),
        "IN_REGISTRAR_NOT_IN_ZONE": (
            "The parent delegates to name servers that the zone does not list in its own NS RRset. "
            "Add the missing NS records to the zone, or remove the stale servers from the registrar delegation."
        ),

        # Registrar vs required
        "REQUIRED_NOT_IN_REGISTRAR": (
            "A required name server is missing from the registrar delegation. Update the domain's name servers "
            "at the registrar to include every required server."
        ),
        "IN_REGISTRAR_NOT_REQUIRED": (
            "The registrar delegates to a name server outside the required set. Remove it at the registrar, "
            "or add it to the required set if it is expected."
        ),

        # Audit failures
        "AUDIT_FAILED": (
            "The delegation could not be audited. Check that the domain exists, that its parent and its own "
            "name servers answer NS queries, and that the network path to them is open (UDP/TCP 53)."
        ),
    }

    @classmethod
    def recommend(cls, issue: str) -> str:
        return cls._MAP.get((issue or "").strip().upper(), "No specific recommendation available for this finding.")

import re

# Invalid user input base error
class InvalidTarget(ValueError):
    """Base error for invalid user input targets."""

# Invalid domain name
class InvalidDomain(InvalidTarget):
    """Raised when a target is not a valid domain/zone."""

# Normalize the user input by trimming white space and removing trailing dots and turning it into lower case.
def normalize_target(raw: str) -> str:
    return (raw or "").strip().rstrip(".").lower()

# Check the format of a domain or name-server hostname. Checks only format, not existence
_LABEL = re.compile(r"^_?[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
def is_domain(s: str) -> bool:
    if not s or len(s) > 253 or any(c.isspace() for c in s):
        return False

    labels = s.split(".")
    if any(label == "" or len(label) > 63 for label in labels):
        return False

    return all(_LABEL.match(label) for label in labels)

# normalizes text, checks it is a domain and returns it in FQDN form (trailing dot)
def require_domain(raw: str) -> str:
    s = normalize_target(raw)
    if not is_domain(s):
        raise InvalidDomain(f"Invalid domain format: {raw!r}")
    return s + "."

# Same check for a comma separated list of name servers (API query parameter)
def require_nameservers(raw: str) -> list:
    parts = [p for p in (raw or "").split(",") if p.strip()]
    if not parts:
        raise InvalidDomain("At least one required name server must be given")
    return [require_domain(p) for p in parts]

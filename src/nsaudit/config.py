from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional, Tuple

from .errors import ConfigError
from .models import NameServerSet, ns_set
from .query import BACKOFFS


def normalize_required(raw: Iterable[str]) -> NameServerSet:
    """Required NS set in FQDN form; an empty set is a configuration error."""
    required = ns_set(raw)
    if not required:
        raise ConfigError("List all required name servers (at least one).")
    return required


@dataclass(frozen=True)
class AuditConfig:
    required: Tuple[str, ...] = ()
    workers: int = 4
    queue_size: int = 4096
    timeout: float = 5.0
    attempts: int = 3
    backoff: str = "linear"
    port: int = 53
    cache_ttl: Optional[float] = None
    resolver_timeout: float = 2.0
    resolver_lifetime: float = 5.0
    domains_file: str = "domains.txt"

    @property
    def required_set(self) -> NameServerSet:
        return normalize_required(self.required)

    def validate(self) -> "AuditConfig":
        normalize_required(self.required)
        for name in ("workers", "queue_size", "attempts"):
            if int(getattr(self, name)) < 1:
                raise ConfigError(f"{name} must be a positive integer, got {getattr(self, name)!r}")
        if not 1 <= int(self.port) <= 65535:
            raise ConfigError(f"port must be between 1 and 65535, got {self.port!r}")
        for name in ("timeout", "resolver_timeout", "resolver_lifetime"):
            if float(getattr(self, name)) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.cache_ttl is not None and float(self.cache_ttl) <= 0:
            raise ConfigError(f"cache_ttl must be positive when set, got {self.cache_ttl!r}")
        if self.backoff not in BACKOFFS:
            raise ConfigError(f"backoff must be one of {', '.join(BACKOFFS)}, got {self.backoff!r}")
        return self

    def merged(self, **overrides: Any) -> "AuditConfig":
        """Copy with every non-None override applied (CLI flags over env)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AuditConfig":
        env = os.environ if env is None else env
        kwargs: dict = {}

        required = env.get("NSAUDIT_REQUIRED", "")
        if required.strip():
            kwargs["required"] = tuple(s for s in (p.strip() for p in required.split(",")) if s)

        casts = {
            "NSAUDIT_WORKERS": ("workers", int),
            "NSAUDIT_QUEUE_SIZE": ("queue_size", int),
            "NSAUDIT_TIMEOUT": ("timeout", float),
            "NSAUDIT_ATTEMPTS": ("attempts", int),
            "NSAUDIT_BACKOFF": ("backoff", str),
            "NSAUDIT_PORT": ("port", int),
            "NSAUDIT_CACHE_TTL": ("cache_ttl", float),
            "NSAUDIT_DOMAINS_FILE": ("domains_file", str),
        }
        for var, (name, cast) in casts.items():
            raw = env.get(var)
            if raw is None or not raw.strip():
                continue
            try:
                kwargs[name] = cast(raw.strip())
            except ValueError:
                raise ConfigError(f"{var}={raw!r} is not a valid {cast.__name__}") from None

        return cls(**kwargs)

import logging
import os

# FastAPI creates the app object and defines the routes
from fastapi import FastAPI, Query, HTTPException
from fastapi.responses import JSONResponse

# The core engine that actually performs the delegation audit.
from nsaudit import AuditConfig, Comparator, ConfigError, ResolverCache, build_auditor

# input validation
from reporting.targets import InvalidDomain, require_domain, require_nameservers

# Combine the audit result into something the user can see
from reporting.assembler import Assemble

logger = logging.getLogger(__name__)

app = FastAPI(title="NS Delegation Auditor")

# Settings come from NSAUDIT_* environment variables; the required set may be
# supplied per request instead, so it is not validated here.
config = AuditConfig.from_env()
VERSION = os.getenv("NSAUDIT_VERSION", "0.1")

# Shared across requests so parent zone lookups are cached for the process.
cache = ResolverCache(ttl=config.cache_ttl)
auditor = build_auditor(config, cache=cache)
assembler = Assemble()


# Audit a domain
@app.get("/audit")
def audit(
    domain: str = Query(..., min_length=1, max_length=253),
    required: str = Query("", max_length=2048, description="Comma separated required name servers"),
):
    # Validate + normalize input
    try:
        domain = require_domain(domain)
        ns = require_nameservers(required) if required.strip() else list(config.required)
        comparator = Comparator(AuditConfig(required=tuple(ns)).required_set)
    except (InvalidDomain, ConfigError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = auditor.audit(domain)
    comparison = comparator.compare(result)

    response = assembler.build(result, comparison, meta={"version": VERSION, "required": sorted(comparator.required)})
    return JSONResponse(content=response)

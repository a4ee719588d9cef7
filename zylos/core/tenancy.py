"""
Tenant resolution middleware for Zylos

Each store is served at <subdomain>.<ROOT_DOMAIN>. The middleware looks the
subdomain up, stores the tenant on request.state and forwards it to handlers
as x-tenant-id / x-tenant-name / x-tenant-subdomain request headers. The
same headers are added to the response.

    acme.zylos.app      -> tenant "acme"
    zylos.app           -> no tenant (landing / registration)
    nope.zylos.app      -> 404 JSON
"""
import logging
from typing import Callable, Optional

from fastapi import HTTPException, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from zylos.core.config import settings
from zylos.domain.tenant import Tenant

logger = logging.getLogger(__name__)

TENANT_HEADERS = ("x-tenant-id", "x-tenant-name", "x-tenant-subdomain")

# Paths that never need a tenant lookup
EXEMPT_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
}

TenantResolver = Callable[[str], Optional[Tenant]]


def get_subdomain(host: Optional[str], root_domain: Optional[str] = None) -> Optional[str]:
    """
    Subdomain part of a Host header, or None for the root domain, "www" and
    hosts outside ROOT_DOMAIN
    """
    if not host:
        return None

    hostname = host.split(":")[0].strip().lower()
    root = (root_domain or settings.ROOT_DOMAIN).split(":")[0].strip().lower()

    if hostname == root or not hostname.endswith("." + root):
        return None

    subdomain = hostname[: -(len(root) + 1)]
    if not subdomain or subdomain == "www" or "." in subdomain:
        return None
    return subdomain


def default_tenant_resolver(subdomain: str) -> Optional[Tenant]:
    # Imported here so the app can start without Supabase credentials
    from zylos.repositories.tenant_repository import SupabaseTenantRepository
    return SupabaseTenantRepository().find_by_subdomain(subdomain)


class TenantMiddleware(BaseHTTPMiddleware):
    """Resolves the tenant for every request from the Host subdomain"""

    def __init__(self, app, resolver: Optional[TenantResolver] = None, root_domain: Optional[str] = None):
        super().__init__(app)
        self.resolver = resolver or default_tenant_resolver
        self.root_domain = root_domain

    async def dispatch(self, request: Request, call_next):
        # Client-supplied tenant headers are never trusted
        request.scope["headers"] = [
            (name, value) for name, value in request.scope["headers"]
            if name.decode("latin-1").lower() not in TENANT_HEADERS
        ]
        request.state.tenant = None

        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        subdomain = get_subdomain(request.headers.get("host"), self.root_domain)
        if subdomain is None:
            return await call_next(request)

        try:
            tenant = await run_in_threadpool(self.resolver, subdomain)
        except Exception as e:
            logger.error(f"Tenant lookup failed for '{subdomain}': {e}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": "Tenant lookup failed", "code": "TENANT_LOOKUP_FAILED"}
            )

        if not tenant or not tenant.is_active():
            logger.warning(f"Tenant not found or inactive for subdomain: {subdomain}")
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"detail": f"Tenant not found: {subdomain}", "code": "TENANT_NOT_FOUND"}
            )

        context = {f"x-tenant-{key}": str(value) for key, value in tenant.to_context().items()}
        request.state.tenant = tenant
        request.scope["headers"] = request.scope["headers"] + [
            (name.encode("latin-1"), value.encode("utf-8")) for name, value in context.items()
        ]

        response = await call_next(request)
        for name, value in context.items():
            response.headers[name] = value
        return response


def get_optional_tenant(request: Request) -> Optional[Tenant]:
    return getattr(request.state, "tenant", None)


def get_current_tenant(request: Request) -> Tenant:
    """
    Dependency for tenant-scoped endpoints.

    Usage:
        @router.get("/")
        async def list_things(tenant: Tenant = Depends(get_current_tenant)):
            ...
    """
    tenant = get_optional_tenant(request)
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This endpoint must be called on a tenant subdomain"
        )
    return tenant

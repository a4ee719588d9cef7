"""
Zylos - Backend API
Multi-tenant point of sale: catalog, inventory, sales and ledger
"""
import logging
import time
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zylos.api import customers, inventory, ledger, products, sales, suppliers, tenants
from zylos.core.config import settings
from zylos.core.database import get_db_connection_with_retry
from zylos.core.tenancy import TenantMiddleware
from zylos.domain.errors import DomainError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(tenant_resolver=None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        tenant_resolver: subdomain -> Tenant lookup for the tenant middleware
            (defaults to the Supabase tenants table)
    """
    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION
    )

    # Added first so CORS wraps it: tenant 404s still carry CORS headers
    app.add_middleware(TenantMiddleware, resolver=tenant_resolver)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["x-tenant-id", "x-tenant-name", "x-tenant-subdomain"],
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Include API routers
    app.include_router(tenants.router, prefix="/api/v1/tenants", tags=["Tenants"])
    app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["Inventory"])
    app.include_router(customers.router, prefix="/api/v1/customers", tags=["Customers"])
    app.include_router(suppliers.router, prefix="/api/v1/suppliers", tags=["Suppliers"])
    app.include_router(sales.router, prefix="/api/v1/sales", tags=["Sales"])
    app.include_router(ledger.router, prefix="/api/v1/ledger", tags=["Ledger"])

    @app.get("/")
    async def root(request: Request):
        """Root endpoint - API status, plus the tenant when called on a subdomain"""
        tenant = getattr(request.state, "tenant", None)
        return {
            "message": "Zylos API",
            "status": "online",
            "version": settings.API_VERSION,
            "tenant": tenant.to_context() if tenant else None
        }

    @app.get("/health")
    async def health():
        """Health check endpoint - tests database connectivity"""
        start_time = time.time()

        db_status = "unknown"
        db_latency_ms = None
        db_error = None

        try:
            # Minimal retry: a health check should answer fast
            conn = get_db_connection_with_retry(max_retries=1, retry_delay=0.5)
            cursor = conn.cursor()

            db_start = time.time()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            db_latency_ms = round((time.time() - db_start) * 1000, 2)

            cursor.close()
            conn.close()
            db_status = "connected"
        except Exception as e:
            db_status = "disconnected"
            db_error = str(e)

        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "service": "zylos-api",
            "version": settings.API_VERSION,
            "database": {
                "status": db_status,
                "latency_ms": db_latency_ms,
                "error": db_error
            },
            "total_latency_ms": round((time.time() - start_time) * 1000, 2)
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("zylos.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.API_DEBUG)

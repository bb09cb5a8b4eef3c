"""CryoChill storefront FastAPI application.

Serves the catalogue, the session cart and the PayFast checkout flow.
Commands are processed synchronously within each HTTP request.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
from checkout.domain import checkout  # noqa: E402
from checkout.utils.logging import get_logger  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import ConfigurationError, ObjectNotFoundError, ValidationError

checkout.init()

logger = get_logger(__name__)

from checkout.catalogue.seed import seed_catalogue  # noqa: E402

with checkout.domain_context():
    seed_catalogue()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="CryoChill Storefront API",
    description="Catalogue, cart and PayFast checkout",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the checkout domain context for each request."""
    with checkout.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from checkout.api import cart_router, payment_router, product_router, redirect_router  # noqa: E402

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(payment_router)
app.include_router(redirect_router)


# ---------------------------------------------------------------------------
# Fallback error mapping
# ---------------------------------------------------------------------------
# Routes translate the errors they expect; these catch what escapes them.
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.messages})


@app.exception_handler(ObjectNotFoundError)
async def not_found_handler(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Not found"})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Checkout is misconfigured", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "Payments are temporarily unavailable"})


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": checkout.name})

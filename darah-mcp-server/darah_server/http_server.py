"""HTTP server for the DARAH storefront cart."""

import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import Settings
from .errors import StorefrontError
from .inventory import is_purchasable
from .models import Item, ReconciledCart
from .storefront import Storefront, build_storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("darah-http-server")

# Global state
settings: Optional[Settings] = None
storefront: Optional[Storefront] = None


def configure(new_storefront: Optional[Storefront], new_settings: Optional[Settings] = None) -> None:
    """Install the storefront used by the endpoints (None resets to lazy startup)."""
    global storefront, settings
    storefront = new_storefront
    settings = new_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global settings, storefront

    # Startup
    logger.info("Starting DARAH HTTP Server...")
    if settings is None:
        settings = Settings.from_env()
    if storefront is None:
        storefront = build_storefront(settings)
    logger.info(f"Serving {len(storefront.inventory.list_items())} catalog item(s)")

    yield

    # Shutdown
    logger.info("Shutting down DARAH HTTP Server...")


app = FastAPI(
    title="DARAH Storefront",
    description="Session cart and WhatsApp checkout for the DARAH storefront",
    version=__version__,
    lifespan=lifespan,
)


# Request Models
class ItemRequest(BaseModel):
    """Body naming a catalog item, as ``item_id`` or ``itemId``."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId")


class AddToCartRequest(ItemRequest):
    pass


class RemoveFromCartRequest(ItemRequest):
    pass


class UpdateCartRequest(ItemRequest):
    quantity: int


class CheckoutRequest(BaseModel):
    note: Optional[str] = None


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Answer malformed bodies in the same envelope as rejected operations."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"ok": False, "error": f"Invalid request: {problems}", "code": "invalid_request"},
    )


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Answer rejected cart operations with their status and message."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "error": "Internal server error"})


def _session_id(request: Request, response: Response) -> str:
    """Return the caller's session ID, issuing a cookie when there is none."""
    cookie_name = settings.session_cookie if settings else "darah_session"
    session_id = request.cookies.get(cookie_name)
    if not session_id:
        session_id = secrets.token_urlsafe(24)
        response.set_cookie(
            cookie_name,
            session_id,
            max_age=settings.session_max_age if settings else None,
            httponly=True,
            samesite="lax",
        )
    return session_id


def _cart_response(cart: ReconciledCart) -> dict:
    return {"ok": True, "cart": cart.model_dump(mode="json")}


def _item_summary(item: Item) -> dict:
    data = item.model_dump(mode="json")
    data["purchasable"] = is_purchasable(item)
    return data


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "DARAH Storefront",
        "version": __version__,
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "products": "GET /products",
            "cart": {
                "get": "GET /cart",
                "add": "POST /cart/add",
                "update": "POST /cart/update",
                "remove": "POST /cart/remove",
                "clear": "POST /cart/clear",
            },
            "checkout": "POST /checkout-link",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True, "status": "healthy"}


# Catalog endpoints
@app.get("/products")
async def list_products():
    """List active items grouped by category."""
    grouped = storefront.inventory.items_by_category()
    return {
        "ok": True,
        "categories": [
            {"name": name, "items": [_item_summary(item) for item in items]}
            for name, items in grouped.items()
        ],
    }


# Cart endpoints
@app.get("/cart")
async def get_cart(request: Request, response: Response):
    """Get current shopping cart."""
    cart = storefront.get_cart(_session_id(request, response))
    return _cart_response(cart)


@app.post("/cart/add")
async def add_to_cart(body: AddToCartRequest, request: Request, response: Response):
    """Add one unit of an item to the cart."""
    cart = storefront.add_item(_session_id(request, response), body.item_id)
    return _cart_response(cart)


@app.post("/cart/update")
async def update_cart(body: UpdateCartRequest, request: Request, response: Response):
    """Set the quantity of an item in the cart."""
    cart = storefront.update_quantity(_session_id(request, response), body.item_id, body.quantity)
    return _cart_response(cart)


@app.post("/cart/remove")
async def remove_from_cart(body: RemoveFromCartRequest, request: Request, response: Response):
    """Remove an item from the cart."""
    cart = storefront.remove_item(_session_id(request, response), body.item_id)
    return _cart_response(cart)


@app.post("/cart/clear")
async def clear_cart(request: Request, response: Response):
    """Empty the cart."""
    cart = storefront.clear_cart(_session_id(request, response))
    return _cart_response(cart)


# Checkout endpoint
@app.post("/checkout-link")
async def checkout_link(request: Request, response: Response, body: Optional[CheckoutRequest] = None):
    """Build the WhatsApp checkout link for the current cart."""
    note = body.note if body else None
    link = storefront.checkout(_session_id(request, response), note=note)
    return {"ok": True, "url": link.url, "message": link.message}


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the HTTP server."""
    import uvicorn

    if reload:
        uvicorn.run("darah_server.http_server:app", host=host, port=port, reload=True, log_level="info")
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server()

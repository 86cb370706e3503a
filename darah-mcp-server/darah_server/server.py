"""MCP Server for the DARAH storefront cart."""

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .checkout import format_brl
from .config import Settings
from .errors import InvalidQuantityError, StorefrontError
from .inventory import is_purchasable
from .models import ReconciledCart
from .storefront import Storefront, build_storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("darah-mcp-server")

# Initialize server
app = Server("darah-mcp-server")

# A stdio server talks to a single client, so it holds a single cart.
SESSION_ID = "mcp-stdio"

# Global state
storefront: Optional[Storefront] = None


def configure(new_storefront: Optional[Storefront]) -> None:
    """Install the storefront used by the tools."""
    global storefront
    storefront = new_storefront


def quantity_argument(value: Any) -> int:
    """
    Read a tool's quantity argument as a whole number.

    Integral floats (``3.0``) and numeric strings are accepted; anything
    else is rejected rather than truncated.

    Raises:
        InvalidQuantityError: If the value is not a whole number
    """
    if isinstance(value, bool):
        raise InvalidQuantityError(f"Quantity must be a whole number (got {value!r})")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdecimal():
        return int(value)
    raise InvalidQuantityError(f"Quantity must be a whole number (got {value!r})")


def format_cart(cart: ReconciledCart) -> str:
    """Render a cart as readable text."""
    if cart.is_empty:
        return "Your cart is empty"

    result_lines = [f"Shopping Cart ({cart.item_count} items):\n"]
    for i, line in enumerate(cart.lines, 1):
        result_lines.append(f"\n{i}. {line.name}")
        result_lines.append(f"   Item ID: {line.item_id}")
        if line.category:
            result_lines.append(f"   Category: {line.category}")
        result_lines.append(f"   Price: {format_brl(line.price)}")
        result_lines.append(f"   Quantity: {line.quantity}")
        result_lines.append(f"   Subtotal: {format_brl(line.line_total)}")

    result_lines.append(f"\n{'='*50}")
    result_lines.append(f"Total: {format_brl(cart.total)}")
    return "\n".join(result_lines)


def format_catalog() -> str:
    grouped = storefront.inventory.items_by_category()
    if not grouped:
        return "The catalog is empty"

    result_lines = []
    for category, items in grouped.items():
        result_lines.append(f"\n{category or 'Sem categoria'}:")
        for item in items:
            availability = f"{item.stock} in stock" if is_purchasable(item) else "out of stock"
            result_lines.append(
                f"  - {item.name} (ID: {item.id}) - {format_brl(item.price)} - {availability}"
            )
    return "\n".join(result_lines).lstrip("\n")


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("darah://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        ),
        Resource(
            uri=AnyUrl("darah://catalog"),
            name="Catalog",
            mimeType="application/json",
            description="Active catalog items grouped by category",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "darah://cart":
        cart = storefront.get_cart(SESSION_ID)
        return cart.model_dump_json(indent=2)

    elif uri_str == "darah://catalog":
        grouped = storefront.inventory.items_by_category()
        result = {
            category: [item.model_dump(mode="json") for item in items]
            for category, items in grouped.items()
        }
        return json.dumps(result, indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    item_id_schema = {
        "type": "string",
        "description": "Catalog item ID",
    }
    return [
        Tool(
            name="darah_list_products",
            description="List the catalog grouped by category, with price and stock",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="darah_get_cart",
            description="Get current shopping cart contents with all items and total",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="darah_add_to_cart",
            description="Add one unit of an item to the shopping cart",
            inputSchema={
                "type": "object",
                "properties": {"item_id": item_id_schema},
                "required": ["item_id"],
            },
        ),
        Tool(
            name="darah_update_cart_quantity",
            description="Set the quantity of an item already in the cart (0 removes it)",
            inputSchema={
                "type": "object",
                "properties": {
                    "item_id": item_id_schema,
                    "quantity": {
                        "type": "integer",
                        "description": "New quantity to set",
                    },
                },
                "required": ["item_id", "quantity"],
            },
        ),
        Tool(
            name="darah_remove_from_cart",
            description="Remove an item from the shopping cart",
            inputSchema={
                "type": "object",
                "properties": {"item_id": item_id_schema},
                "required": ["item_id"],
            },
        ),
        Tool(
            name="darah_clear_cart",
            description="Remove every item from the shopping cart",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="darah_checkout_link",
            description="Build the WhatsApp link that sends the order to the store",
            inputSchema={
                "type": "object",
                "properties": {
                    "note": {
                        "type": "string",
                        "description": "Optional remarks for the store",
                    },
                },
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "darah_list_products":
            return [TextContent(type="text", text=format_catalog())]

        elif name == "darah_get_cart":
            cart = storefront.get_cart(SESSION_ID)
            return [TextContent(type="text", text=format_cart(cart))]

        elif name == "darah_add_to_cart":
            cart = storefront.add_item(SESSION_ID, arguments["item_id"])
            return [TextContent(type="text", text=format_cart(cart))]

        elif name == "darah_update_cart_quantity":
            cart = storefront.update_quantity(
                SESSION_ID, arguments["item_id"], quantity_argument(arguments.get("quantity"))
            )
            return [TextContent(type="text", text=format_cart(cart))]

        elif name == "darah_remove_from_cart":
            cart = storefront.remove_item(SESSION_ID, arguments["item_id"])
            return [TextContent(type="text", text=format_cart(cart))]

        elif name == "darah_clear_cart":
            storefront.clear_cart(SESSION_ID)
            return [TextContent(type="text", text="Cart cleared")]

        elif name == "darah_checkout_link":
            link = storefront.checkout(SESSION_ID, note=arguments.get("note"))
            return [
                TextContent(
                    type="text",
                    text=f"Checkout link: {link.url}\n\nMessage:\n{link.message}",
                )
            ]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except StorefrontError as e:
        logger.info(f"Tool {name} rejected: {e.message}")
        return [TextContent(type="text", text=f"Error: {e.message}")]
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [TextContent(type="text", text=f"Error: {str(e)}")]


async def main() -> None:
    """Main entry point for the MCP server."""
    global storefront

    if storefront is None:
        storefront = build_storefront(Settings.from_env())

    logger.info("Starting DARAH MCP Server...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )


if __name__ == "__main__":
    asyncio.run(main())

"""
Command-line client for the Pickup Point Orders API.

Run: python cli.py [--base-url URL] <command> [args]

Commands:
    add ORDER_ID CUSTOMER_ID DD-MM-YYYY KIND WEIGHT COST
    return ORDER_ID
    receive ID[,ID...]
    orders CUSTOMER_ID N
    refund ORDER_ID CUSTOMER_ID
    refunds PAGE LIMIT

Arguments are validated locally before anything is sent to the server.
Negative numbers must follow ``--`` (e.g. ``refunds -- -1 10``).
"""
import json
from datetime import datetime, timezone

import click
import httpx

from domain.errors import DomainError, ValidationError
from utils.validators import validate_cost, validate_positive_id, validate_weight

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DATE_LAYOUT = "%d-%m-%Y"


# ── Argument parsing ────────────────────────────────────────────────


def parse_date(value: str) -> datetime:
    """DD-MM-YYYY → midnight UTC of that day."""
    try:
        return datetime.strptime(value, DATE_LAYOUT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise ValidationError(f"date must look like DD-MM-YYYY, got {value!r}", field="expiration_time")


def parse_ids(value: str) -> list[int]:
    return [validate_positive_id(part, "order_ids") for part in value.split(",") if part.strip()]


def parse_int(value: str, field: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{field} must be an integer, got {value!r}", field=field)


# ── Request builders ────────────────────────────────────────────────
# Each returns the keyword arguments for httpx.Client.request.


def add_request(order_id, customer_id, expiration, package_kind, weight, cost) -> dict:
    return {
        "method": "POST",
        "url": "/orders",
        "json": {
            "orderId": validate_positive_id(order_id, "order_id"),
            "customerId": validate_positive_id(customer_id, "customer_id"),
            "expirationTime": parse_date(expiration).isoformat(),
            "packageKind": package_kind,
            "weight": str(validate_weight(weight)),
            "cost": validate_cost(cost),
        },
    }


def return_request(order_id) -> dict:
    order_id = validate_positive_id(order_id, "order_id")
    return {"method": "DELETE", "url": f"/orders/{order_id}"}


def receive_request(order_ids: str) -> dict:
    ids = parse_ids(order_ids)
    if not ids:
        raise ValidationError("at least one order id is required", field="order_ids")
    return {"method": "POST", "url": "/orders/receive", "json": {"orderIds": ids}}


def orders_request(customer_id, n) -> dict:
    customer_id = validate_positive_id(customer_id, "customer_id")
    return {
        "method": "GET",
        "url": f"/customers/{customer_id}/orders",
        "params": {"n": parse_int(n, "n")},
    }


def refund_request(order_id, customer_id) -> dict:
    order_id = validate_positive_id(order_id, "order_id")
    customer_id = validate_positive_id(customer_id, "customer_id")
    return {
        "method": "POST",
        "url": f"/orders/{order_id}/refund",
        "json": {"customerId": customer_id},
    }


def refunds_request(page, limit) -> dict:
    return {
        "method": "GET",
        "url": "/refunds",
        "params": {"page": parse_int(page, "page"), "limit": parse_int(limit, "limit")},
    }


# ── Transport ───────────────────────────────────────────────────────


def _send(ctx: click.Context, build, *args) -> None:
    try:
        request = build(*args)
    except DomainError as e:
        raise click.UsageError(e.message, ctx=ctx)

    client = ctx.obj.get("client")
    own_client = client is None
    if own_client:
        client = httpx.Client(base_url=ctx.obj["base_url"], timeout=ctx.obj["timeout"])
    try:
        response = client.request(**request)
    except httpx.HTTPError as e:
        raise click.ClickException(f"request to {ctx.obj['base_url']} failed: {e}")
    finally:
        if own_client:
            client.close()

    try:
        body = response.json()
    except ValueError:
        body = {"success": False, "error": {"message": response.text}}

    if not response.is_success:
        error = body.get("error") or {}
        raise click.ClickException(f"({response.status_code}) {error.get('message', 'request failed')}")
    click.echo(json.dumps(body.get("data", body), indent=2))


# ── Commands ────────────────────────────────────────────────────────


@click.group()
@click.option("--base-url", default=DEFAULT_BASE_URL, show_default=True, help="API base URL")
@click.option("--timeout", type=float, default=15.0, show_default=True, help="Request timeout in seconds")
@click.pass_context
def cli(ctx, base_url: str, timeout: float):
    """Pickup point orders client."""
    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout


@cli.command("add")
@click.argument("order_id")
@click.argument("customer_id")
@click.argument("expiration", metavar="DD-MM-YYYY")
@click.argument("package_kind", metavar="KIND")
@click.argument("weight")
@click.argument("cost")
@click.pass_context
def add_order(ctx, order_id, customer_id, expiration, package_kind, weight, cost):
    """Accept an order from the courier (KIND: bag, box or wrap)."""
    _send(ctx, add_request, order_id, customer_id, expiration, package_kind, weight, cost)


@cli.command("return")
@click.argument("order_id")
@click.pass_context
def return_order(ctx, order_id):
    """Return an order to the courier."""
    _send(ctx, return_request, order_id)


@cli.command("receive")
@click.argument("order_ids", metavar="ID[,ID...]")
@click.pass_context
def receive_orders(ctx, order_ids):
    """Hand orders to their customer."""
    _send(ctx, receive_request, order_ids)


@cli.command("orders")
@click.argument("customer_id")
@click.argument("n")
@click.pass_context
def get_orders(ctx, customer_id, n):
    """List a customer's orders (N = 0 lists all)."""
    _send(ctx, orders_request, customer_id, n)


@cli.command("refund")
@click.argument("order_id")
@click.argument("customer_id")
@click.pass_context
def refund_order(ctx, order_id, customer_id):
    """Accept a refund from a customer."""
    _send(ctx, refund_request, order_id, customer_id)


@cli.command("refunds")
@click.argument("page")
@click.argument("limit")
@click.pass_context
def get_refunds(ctx, page, limit):
    """List refunded orders, zero-based PAGE of LIMIT items."""
    _send(ctx, refunds_request, page, limit)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

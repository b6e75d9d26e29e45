"""Shopify Admin REST orders reader.

Fetches the paid orders created on one calendar day (UTC) and follows
``Link: <...>; rel="next"`` cursor pagination until the last page.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from config import settings
from services.errors import ShopifyFetchError
from services.ports import OrderSource
from services.schemas import Order

logger = logging.getLogger(__name__)

PAGE_LIMIT = 250
MAX_PAGES = 400

# REST leaky bucket: back off once this many calls are in flight
CALL_LIMIT_BACKOFF_AT = 35
CALL_LIMIT_BACKOFF_SECONDS = 1.0


def _headers(access_token: str) -> dict[str, str]:
    return {
        "X-Shopify-Access-Token": access_token,
        "Accept": "application/json",
    }


def _throttle(response: requests.Response) -> None:
    """Sleep briefly when the shop's API call bucket is nearly full."""
    raw = response.headers.get("X-Shopify-Shop-Api-Call-Limit", "")
    try:
        used, _, _capacity = raw.partition("/")
        if int(used) >= CALL_LIMIT_BACKOFF_AT:
            logger.warning(
                "Shopify call limit high (%s), sleeping %.1fs", raw, CALL_LIMIT_BACKOFF_SECONDS
            )
            time.sleep(CALL_LIMIT_BACKOFF_SECONDS)
    except ValueError:
        pass


def _get(url: str, access_token: str, params: dict[str, Any] | None = None) -> requests.Response:
    try:
        response = requests.get(
            url,
            params=params,
            headers=_headers(access_token),
            timeout=settings.http_timeout_seconds,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        msg = f"Failed to fetch orders: {exc}"
        raise ShopifyFetchError(msg) from exc
    _throttle(response)
    return response


def fetch_orders_for_date(
    shop: str,
    date: str,
    access_token: str | None = None,
    api_version: str | None = None,
) -> list[dict[str, Any]]:
    """Return raw Shopify order payloads for paid orders created on *date*."""
    token = access_token or settings.shopify_access_token
    if not token:
        msg = "Shopify access token not configured. Set SHOPIFY_ACCESS_TOKEN."
        raise ShopifyFetchError(msg)
    version = api_version or settings.shopify_api_version

    url: str | None = f"https://{shop}/admin/api/{version}/orders.json"
    params: dict[str, Any] | None = {
        "status": "any",
        "financial_status": "paid",
        "limit": PAGE_LIMIT,
        "created_at_min": f"{date}T00:00:00+00:00",
        "created_at_max": f"{date}T23:59:59+00:00",
    }

    orders: list[dict[str, Any]] = []
    pages = 0
    while url and pages < MAX_PAGES:
        response = _get(url, token, params)
        try:
            orders.extend(response.json().get("orders") or [])
        except ValueError as exc:
            msg = f"Invalid JSON in orders response: {exc}"
            raise ShopifyFetchError(msg) from exc
        pages += 1
        # The next-page URL already carries page_info and limit
        url = response.links.get("next", {}).get("url")
        params = None

    if url:
        msg = f"Order pagination exceeded {MAX_PAGES} pages for {shop} on {date}"
        raise ShopifyFetchError(msg)

    logger.info("Fetched %d paid orders for %s on %s (%d pages)", len(orders), shop, date, pages)
    return orders


class ShopifyOrderSource(OrderSource):
    def __init__(self, access_token: str | None = None, api_version: str | None = None) -> None:
        self.access_token = access_token
        self.api_version = api_version

    def fetch_orders_for_date(self, shop: str, date: str) -> list[Order]:
        payloads = fetch_orders_for_date(shop, date, self.access_token, self.api_version)
        return [Order.from_shopify(p) for p in payloads]

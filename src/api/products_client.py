# src/api/products_client.py

"""Synchronous client for the remote ``/products`` collection."""

import logging
from typing import Any

from curl_cffi import requests as curl_requests

from src.api.errors import (
    NotFoundError,
    TransportError,
    ValidationError,
)
from src.config.settings import Settings
from src.models.product import DeleteResult, Product, ProductList

_VALIDATION_STATUSES = (400, 422)


def _server_message(resp: curl_requests.Response) -> str | None:
    """Pull the ``message`` field out of an error body, if any."""
    try:
        body: Any = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class ProductsClient:
    """Maps the six catalog operations onto HTTP calls.

    One attempt per call: there is no retry loop, no circuit breaker
    and no fallback transport.  Failures surface as
    :class:`~src.api.errors.CatalogError` subclasses.
    """

    def __init__(self, base_url: str | None = None) -> None:
        self.settings = Settings()
        self.base_url = (base_url or self.settings.API_BASE_URL).rstrip("/")
        self.logger = logging.getLogger("catalog_admin.client")
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def close(self) -> None:
        self.session.close()

    # --- Transport ---

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> curl_requests.Response:
        """Send one request and map the status onto the error taxonomy."""
        url = f"{self.base_url}{path}"
        self.logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            self.logger.warning(
                "%s %s failed: %s", method, url, exc, exc_info=True
            )
            raise TransportError(f"Request failed: {exc}") from exc

        status = resp.status_code
        if 200 <= status < 300:
            return resp

        server_message = _server_message(resp)
        self.logger.warning(
            "%s %s returned HTTP %d (%s)",
            method,
            url,
            status,
            server_message or "no message",
        )
        detail = server_message or f"HTTP {status}"
        if status == 404:
            raise NotFoundError(detail, status, server_message)
        if status in _VALIDATION_STATUSES:
            raise ValidationError(detail, status, server_message)
        raise TransportError(detail, status, server_message)

    def _json(self, resp: curl_requests.Response) -> dict[str, Any]:
        try:
            data: Any = resp.json()
        except ValueError as exc:
            raise TransportError(
                "Server returned a non-JSON body", resp.status_code
            ) from exc
        if not isinstance(data, dict):
            raise TransportError(
                "Server returned an unexpected JSON shape",
                resp.status_code,
            )
        return data

    # --- Operations ---

    def list_products(self, limit: int, skip: int) -> ProductList:
        """``GET /products``; limit and skip are passed through as-is."""
        resp = self._request(
            "GET", "/products", params={"limit": limit, "skip": skip}
        )
        result = ProductList.from_api(self._json(resp))
        self.logger.info(
            "Listed %d of %d products (limit=%d, skip=%d)",
            len(result.products),
            result.total,
            limit,
            skip,
        )
        return result

    def get_product(self, product_id: int) -> Product:
        resp = self._request("GET", f"/products/{product_id}")
        return Product.from_api(self._json(resp))

    def create_product(self, data: dict[str, Any]) -> Product:
        """``POST /products/add``; the server assigns the id."""
        payload = {k: v for k, v in data.items() if k != "id"}
        resp = self._request("POST", "/products/add", payload=payload)
        product = Product.from_api(self._json(resp))
        self.logger.info(
            "Created product %d (%s)", product.id, product.title
        )
        return product

    def update_product(
        self, product_id: int, partial: dict[str, Any],
    ) -> Product:
        """``PUT /products/{id}`` with only the fields that change."""
        payload = {k: v for k, v in partial.items() if k != "id"}
        resp = self._request(
            "PUT", f"/products/{product_id}", payload=payload
        )
        product = Product.from_api(self._json(resp))
        self.logger.info(
            "Updated product %d (fields=%s)",
            product_id,
            sorted(payload),
        )
        return product

    def delete_product(self, product_id: int) -> DeleteResult:
        """``DELETE /products/{id}``.

        A 404 is reported as ``was_deleted=False`` rather than raised:
        the product is absent either way, which is what the caller
        asked for.
        """
        try:
            resp = self._request("DELETE", f"/products/{product_id}")
        except NotFoundError:
            self.logger.info(
                "Product %d already absent on delete", product_id
            )
            return DeleteResult(id=product_id, was_deleted=False)

        data = self._json(resp)
        result = DeleteResult(
            id=int(data.get("id", product_id)),
            was_deleted=bool(data.get("isDeleted", False)),
        )
        self.logger.info(
            "Deleted product %d (isDeleted=%s)",
            result.id,
            result.was_deleted,
        )
        return result

    def search_products(self, query: str) -> ProductList:
        """``GET /products/search``.

        Blank queries are a caller bug; the search overlay never sends
        them.
        """
        if not query.strip():
            msg = "search query must not be blank"
            raise ValueError(msg)
        resp = self._request(
            "GET", "/products/search", params={"q": query}
        )
        result = ProductList.from_api(self._json(resp))
        self.logger.info(
            "Search '%s' matched %d products", query, result.total
        )
        return result

# src/models/product.py

"""Catalog data models shared by the client, cache and UI.

Wire payloads use camelCase keys; attributes are snake_case.  All
models are frozen so cache entries cannot be mutated by readers.
Patched copies are produced with :func:`dataclasses.replace`.
"""

from dataclasses import dataclass, field, replace
from typing import Any

AVAILABILITY_STATUSES: tuple[str, ...] = (
    "In Stock",
    "Low Stock",
    "Out of Stock",
)

# attribute name -> wire key, for the editable scalar fields
FIELD_WIRE_NAMES: dict[str, str] = {
    "title": "title",
    "description": "description",
    "category": "category",
    "price": "price",
    "discount_percentage": "discountPercentage",
    "rating": "rating",
    "stock": "stock",
    "brand": "brand",
    "sku": "sku",
    "weight": "weight",
    "warranty_information": "warrantyInformation",
    "shipping_information": "shippingInformation",
    "availability_status": "availabilityStatus",
    "return_policy": "returnPolicy",
    "minimum_order_quantity": "minimumOrderQuantity",
}

WIRE_FIELD_NAMES: dict[str, str] = {
    wire: attr for attr, wire in FIELD_WIRE_NAMES.items()
}


@dataclass(frozen=True)
class Review:
    """A customer review owned by its parent product."""

    reviewer_name: str
    rating: float
    comment: str = ""
    date: str = ""
    reviewer_email: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Review":
        return cls(
            reviewer_name=str(data.get("reviewerName", "")),
            rating=float(data.get("rating", 0) or 0),
            comment=str(data.get("comment", "")),
            date=str(data.get("date", "")),
            reviewer_email=str(data.get("reviewerEmail", "")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "reviewerName": self.reviewer_name,
            "rating": self.rating,
            "comment": self.comment,
            "date": self.date,
            "reviewerEmail": self.reviewer_email,
        }


@dataclass(frozen=True)
class Product:
    """A catalog product as returned by the remote API."""

    id: int
    title: str
    description: str = ""
    category: str = ""
    price: float = 0.0
    discount_percentage: float = 0.0
    rating: float = 0.0
    stock: int = 0
    brand: str = ""
    sku: str = ""
    weight: float = 0.0
    warranty_information: str = ""
    shipping_information: str = ""
    availability_status: str = "In Stock"
    return_policy: str = ""
    minimum_order_quantity: int = 1
    thumbnail: str | None = None
    images: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    reviews: tuple[Review, ...] = ()

    @property
    def discounted_price(self) -> float:
        """Price after discount; derived, never sent to the server."""
        return self.price * (1 - self.discount_percentage / 100)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Product":
        """Build a product from a wire dict.

        Freshly created products come back from the demo server with
        only the submitted keys, so everything except ``id`` falls
        back to its default.
        """
        kwargs: dict[str, Any] = {}
        for wire, attr in WIRE_FIELD_NAMES.items():
            if data.get(wire) is not None:
                kwargs[attr] = data[wire]

        for attr in ("price", "discount_percentage", "rating", "weight"):
            if attr in kwargs:
                kwargs[attr] = float(kwargs[attr])
        for attr in ("stock", "minimum_order_quantity"):
            if attr in kwargs:
                kwargs[attr] = int(kwargs[attr])

        return cls(
            id=int(data["id"]),
            thumbnail=data.get("thumbnail"),
            images=tuple(data.get("images") or ()),
            tags=tuple(data.get("tags") or ()),
            reviews=tuple(
                Review.from_api(r) for r in data.get("reviews") or ()
            ),
            **kwargs,
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire dict for create/update requests (no ``id``)."""
        payload: dict[str, Any] = {
            wire: getattr(self, attr)
            for attr, wire in FIELD_WIRE_NAMES.items()
        }
        if self.thumbnail is not None:
            payload["thumbnail"] = self.thumbnail
        payload["images"] = list(self.images)
        payload["tags"] = list(self.tags)
        return payload

    def to_api(self) -> dict[str, Any]:
        """Full wire dict including ``id`` and reviews (CLI output)."""
        data = {"id": self.id, **self.to_payload()}
        data["reviews"] = [r.to_api() for r in self.reviews]
        return data


@dataclass(frozen=True)
class ProductList:
    """One page of products plus the server-side total."""

    products: tuple[Product, ...] = field(default_factory=tuple)
    total: int = 0
    skip: int = 0
    limit: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ProductList":
        products = tuple(
            Product.from_api(p) for p in data.get("products") or ()
        )
        return cls(
            products=products,
            total=int(data.get("total", len(products))),
            skip=int(data.get("skip", 0)),
            limit=int(data.get("limit", len(products))),
        )

    def contains(self, product_id: int) -> bool:
        return any(p.id == product_id for p in self.products)

    def with_products(
        self, products: list[Product], total: int,
    ) -> "ProductList":
        """Return a copy with a new product sequence and total."""
        return replace(self, products=tuple(products), total=total)


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete request."""

    id: int
    was_deleted: bool

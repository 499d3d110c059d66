# src/ui/screens.py

"""Modal dialogs and the product detail screen."""

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, cast

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Header, Input, Label, Select, Static

from src.api.errors import CatalogError, NotFoundError
from src.config.settings import Settings
from src.filters.product_form import (
    FORM_FIELDS,
    ProductFormValidator,
    form_defaults,
)
from src.filters.stock_summary import format_price, stock_style
from src.models.product import AVAILABILITY_STATUSES, Product

if TYPE_CHECKING:
    from src.ui.app import CatalogAdminApp

logger = logging.getLogger("catalog_admin.ui")

SubmitHandler = Callable[[dict[str, Any]], Awaitable[Product | None]]

_FIELD_LABELS: dict[str, str] = {
    "title": "Title *",
    "description": "Description *",
    "category": "Category *",
    "price": "Price *",
    "discountPercentage": "Discount %",
    "rating": "Rating (0-5)",
    "stock": "Stock *",
    "brand": "Brand",
    "sku": "SKU *",
    "weight": "Weight",
    "warrantyInformation": "Warranty",
    "shippingInformation": "Shipping",
    "availabilityStatus": "Availability *",
    "returnPolicy": "Return policy",
    "minimumOrderQuantity": "Minimum order quantity *",
}


def _category_label(category: str) -> str:
    """``home-decoration`` -> ``Home Decoration``."""
    return category.replace("-", " ").title()


class ProductFormScreen(ModalScreen[Product | None]):
    """Add/edit dialog.

    Validates locally, then hands the payload to *submit*.  The dialog
    stays open when the mutation fails so the user can correct the
    input; the failure itself is notified by the coordinator.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, product: Product | None, submit: SubmitHandler) -> None:
        super().__init__()
        self.product = product
        self.submit = submit
        self._defaults = form_defaults(product)

    def compose(self) -> ComposeResult:
        heading = "Edit Product" if self.product else "Add New Product"
        subtitle = (
            "Update product information"
            if self.product
            else "Fill in the details to add a new product"
        )
        rows: list[Vertical] = [
            Vertical(
                Label(_FIELD_LABELS[name]),
                self._field_widget(name),
                Static("", id=f"error_{name}", classes="field-error"),
                classes="form-row",
            )
            for name in FORM_FIELDS
        ]
        yield Vertical(
            Static(heading, id="dialog_title"),
            Static(subtitle, classes="dialog-subtitle"),
            VerticalScroll(*rows, id="form_fields"),
            Horizontal(
                Button("Save", variant="primary", id="save_btn"),
                Button("Cancel", id="cancel_btn"),
                classes="dialog-buttons",
            ),
            id="dialog",
        )

    def _field_widget(self, name: str) -> Input | Select[str]:
        value = self._defaults.get(name, "")
        if name == "category":
            options = [
                (_category_label(c), c) for c in Settings.CATEGORIES
            ]
            if value and value not in Settings.CATEGORIES:
                options.insert(0, (_category_label(value), value))
            return Select(
                options,
                value=value if value else Select.BLANK,
                prompt="Select category",
                id=f"field_{name}",
            )
        if name == "availabilityStatus":
            return Select(
                [(s, s) for s in AVAILABILITY_STATUSES],
                value=value or AVAILABILITY_STATUSES[0],
                allow_blank=False,
                id=f"field_{name}",
            )
        return Input(value=value, id=f"field_{name}")

    def collect(self) -> dict[str, str]:
        """Current raw text of every field."""
        values: dict[str, str] = {}
        for name in FORM_FIELDS:
            widget = self.query_one(f"#field_{name}")
            if isinstance(widget, Select):
                raw = widget.value
                values[name] = raw if isinstance(raw, str) else ""
            else:
                values[name] = cast(Input, widget).value
        return values

    def show_errors(self, errors: dict[str, str]) -> None:
        for name in FORM_FIELDS:
            self.query_one(f"#error_{name}", Static).update(
                errors.get(name, "")
            )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel_btn":
            self.dismiss(None)
        elif event.button.id == "save_btn":
            await self.save()

    async def save(self) -> None:
        payload, errors = ProductFormValidator.validate(
            self.collect(),
            self.product.category if self.product else None,
        )
        self.show_errors(errors)
        if errors:
            self.notify("Please fix the highlighted fields", severity="warning")
            return

        if self.product is not None:
            payload = ProductFormValidator.changed_fields(
                self.product, payload
            )
            if not payload:
                self.notify("No changes to save")
                self.dismiss(None)
                return

        save_btn = self.query_one("#save_btn", Button)
        save_btn.disabled = True
        save_btn.label = "Saving..."
        try:
            result = await self.submit(payload)
        finally:
            save_btn.disabled = False
            save_btn.label = "Save"
        if result is not None:
            self.dismiss(result)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Asks for confirmation before deleting a product."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, product: Product) -> None:
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static("Delete Product", id="dialog_title"),
            Static(
                f'Are you sure you want to delete "{self.product.title}"? '
                "This action cannot be undone.",
                classes="dialog-subtitle",
            ),
            Horizontal(
                Button("Delete", variant="error", id="confirm_btn"),
                Button("Cancel", id="cancel_btn"),
                classes="dialog-buttons",
            ),
            id="confirm_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm_btn")

    def action_cancel(self) -> None:
        self.dismiss(False)


class ProductDetailScreen(Screen[None]):
    """Full view of one product, loaded through the query cache."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
    ]

    def __init__(self, product_id: int) -> None:
        super().__init__()
        self.product_id = product_id
        self.product: Product | None = None

    @property
    def admin(self) -> "CatalogAdminApp":
        return cast("CatalogAdminApp", self.app)

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(
            Static("Loading product...", id="detail_body"),
            id="detail",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self.load())

    async def load(self) -> None:
        body = self.query_one("#detail_body", Static)
        try:
            product = await self.admin.queries.fetch_product(self.product_id)
        except CatalogError as exc:
            logger.error(
                "Loading product %d failed: %s", self.product_id, exc
            )
            if isinstance(exc, NotFoundError):
                body.update("😞 Product not found")
            else:
                body.update(f"❌ {exc.message}")
            return
        self.show(product)

    def show(self, product: Product) -> None:
        self.product = product
        self.query_one("#detail_body", Static).update(render_detail(product))

    def action_back(self) -> None:
        self.dismiss(None)

    def action_edit(self) -> None:
        if self.product is not None:
            self.admin.open_editor(self.product, on_saved=self.show)

    def action_delete(self) -> None:
        if self.product is not None:
            self.admin.confirm_delete(
                self.product, on_deleted=lambda: self.dismiss(None)
            )


def render_detail(product: Product) -> Text:
    """Rich text body of the detail screen."""
    text = Text()
    text.append(f"{product.title}\n", style="bold")
    if product.brand:
        text.append(f"{product.brand}\n", style="dim")
    text.append(f"\n{product.description}\n\n")

    text.append("Price: ", style="bold")
    if product.discount_percentage > 0:
        text.append(format_price(product.discounted_price), style="bold green")
        text.append(f"  {format_price(product.price)}", style="strike dim")
        text.append(f"  -{product.discount_percentage:g}%\n", style="red")
    else:
        text.append(f"{format_price(product.price)}\n", style="bold green")

    text.append("Rating: ", style="bold")
    text.append(f"⭐ {product.rating:.1f}\n")
    text.append("Stock: ", style="bold")
    text.append(str(product.stock), style=stock_style(product.stock))
    text.append(f"  ({product.availability_status})\n")

    details = [
        ("Category", product.category),
        ("SKU", product.sku),
        ("Weight", f"{product.weight:g}"),
        ("Minimum order", str(product.minimum_order_quantity)),
        ("Warranty", product.warranty_information),
        ("Shipping", product.shipping_information),
        ("Return policy", product.return_policy),
    ]
    text.append("\n")
    for label, value in details:
        text.append(f"{label}: ", style="bold")
        text.append(f"{value or '—'}\n")

    if product.tags:
        text.append("Tags: ", style="bold")
        text.append(", ".join(product.tags) + "\n")

    if product.reviews:
        text.append(f"\nReviews ({len(product.reviews)})\n", style="bold underline")
        for review in product.reviews:
            text.append(f"{review.reviewer_name}", style="bold")
            text.append(f"  ⭐ {review.rating:g}  {review.date[:10]}\n")
            text.append(f"  {review.comment}\n")
    return text

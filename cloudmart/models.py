"""Plain records returned by the store functions.

Documents come out of MongoDB as dicts; everything above the store layer works
with these dataclasses instead so templates and tests never see raw BSON.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from bson.decimal128 import Decimal128

CENTS = Decimal("0.01")

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CUSTOMER, ROLE_ADMIN)


def to_money(value) -> Decimal:
    """Convert a stored price (Decimal128, Decimal, float or str) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    elif not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class User:
    id: str
    email: str
    role: str = ROLE_CUSTOMER
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_doc(cls, doc):
        return cls(
            id=str(doc["_id"]),
            email=doc["email"],
            role=doc.get("role", ROLE_CUSTOMER),
            created_at=doc.get("created_at"),
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    image_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            price=to_money(doc.get("price")),
            description=doc.get("description"),
            category=doc.get("category"),
            image_url=doc.get("image_url"),
            image_key=doc.get("image_key"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


@dataclass(frozen=True)
class CartItem:
    id: str
    user_id: str
    product_id: str
    quantity: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc):
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            product_id=str(doc["product_id"]),
            quantity=doc["quantity"],
            created_at=doc.get("created_at"),
        )


@dataclass(frozen=True)
class CartLine:
    """One row of the cart page: a live product snapshot and its quantity."""

    item_id: str
    product: Product
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return (self.product.price * self.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartView:
    lines: List[CartLine] = field(default_factory=list)
    total: Decimal = Decimal("0.00")

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass(frozen=True)
class CheckoutResult:
    removed: int

    @property
    def already_empty(self) -> bool:
        return self.removed == 0


@dataclass(frozen=True)
class CatalogPage:
    products: List[Product]
    categories: List[str]
    search: str = ""
    category: str = ""


@dataclass(frozen=True)
class ProductChange:
    """Outcome of an admin create/update; ``warning`` is set when the image step failed."""

    product: Product
    warning: Optional[str] = None

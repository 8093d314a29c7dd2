from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

PRODUCT_TYPE_SELL = "SELL"
PRODUCT_TYPE_RENT = "RENT"
VALID_PRODUCT_TYPES = (PRODUCT_TYPE_SELL, PRODUCT_TYPE_RENT)


class _CategoryMixin:
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ProductCategory(_CategoryMixin, db.Model):
    __tablename__ = "product_categories"
    __table_args__ = {"sqlite_autoincrement": True}


class MenuCategory(_CategoryMixin, db.Model):
    __tablename__ = "menu_categories"
    __table_args__ = {"sqlite_autoincrement": True}


class Product(db.Model):
    """
    Retail or rental product.

    stock is owned by the transaction engine: checkout decrements it,
    cancel/complete/return restore it. Catalog edits never touch it.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_category_active", "product_category_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_category_id = db.Column(db.Integer, db.ForeignKey("product_categories.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=True, unique=True)

    # SELL products leave the venue; RENT products come back
    type = db.Column(db.String(8), nullable=False, default=PRODUCT_TYPE_SELL)

    price_cents = db.Column(db.Integer, nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=True)
    stock = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("ProductCategory", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} type={self.type} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_category_id": self.product_category_id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "sku": self.sku,
            "type": self.type,
            "price_cents": self.price_cents,
            "cost_price_cents": self.cost_price_cents,
            "stock": self.stock,
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Menu(db.Model):
    """
    Café menu item.

    stock NULL means untracked (made to order); a number is enforced like product stock.
    """
    __tablename__ = "menus"
    __table_args__ = (
        db.CheckConstraint("stock IS NULL OR stock >= 0", name="ck_menus_stock_non_negative"),
        db.Index("ix_menus_category_active", "menu_category_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    menu_category_id = db.Column(db.Integer, db.ForeignKey("menu_categories.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=True, unique=True)

    price_cents = db.Column(db.Integer, nullable=False)
    cost_price_cents = db.Column(db.Integer, nullable=True)
    stock = db.Column(db.Integer, nullable=True)

    is_available = db.Column(db.Boolean, nullable=False, default=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("MenuCategory", backref=db.backref("menus", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def tracks_stock(self) -> bool:
        return self.stock is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "menu_category_id": self.menu_category_id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "sku": self.sku,
            "price_cents": self.price_cents,
            "cost_price_cents": self.cost_price_cents,
            "stock": self.stock,
            "is_available": self.is_available,
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

"""SQLAlchemy models for the bike shop vertical.

Each model inherits from Base and uses CatalogMixin for its integer id and
audit columns. The to_domain() methods convert rows into the frozen value
types the configuration engine works with.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.models.base import Base, CatalogMixin
from verticals.bike_shop.models import domain


class Category(CatalogMixin, Base):
    """Top-level product family (bicycles, skis, surfboards...)."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Product(CatalogMixin, Base):
    """A configurable product with a base price."""

    __tablename__ = "products"

    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    part_type_links: Mapped[list["ProductPartType"]] = relationship(
        back_populates="product",
        order_by="ProductPartType.display_order",
        cascade="all, delete-orphan",
    )

    def to_domain(self) -> domain.Product:
        return domain.Product(
            id=self.id,
            name=self.name,
            base_price=self.base_price,
            part_type_ids=tuple(link.part_type_id for link in self.part_type_links),
        )


class PartType(CatalogMixin, Base):
    """A customizable slot on a product, e.g. "Frame Type"."""

    __tablename__ = "part_types"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> domain.PartType:
        return domain.PartType(id=self.id, name=self.name, required=self.required)


class ProductPartType(CatalogMixin, Base):
    """Ordered link between a product and one of its part types."""

    __tablename__ = "product_part_types"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id"), nullable=False, index=True
    )
    part_type_id: Mapped[int] = mapped_column(
        ForeignKey("part_types.id"), nullable=False
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product: Mapped["Product"] = relationship(back_populates="part_type_links")
    part_type: Mapped["PartType"] = relationship()


class PartOption(CatalogMixin, Base):
    """One concrete choice for a part type, e.g. "Diamond" frame."""

    __tablename__ = "part_options"

    part_type_id: Mapped[int] = mapped_column(
        ForeignKey("part_types.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> domain.PartOption:
        return domain.PartOption(
            id=self.id,
            part_type_id=self.part_type_id,
            name=self.name,
            base_price=self.base_price,
            description=self.description,
            active=self.active,
        )


class Inventory(CatalogMixin, Base):
    """Stock level for one part option.

    There is no stored in-stock flag; availability is derived from quantity
    when the row is read.
    """

    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    part_option_id: Mapped[int] = mapped_column(
        ForeignKey("part_options.id"), nullable=False, unique=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expected_restock_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def to_domain(self) -> domain.InventoryRecord:
        return domain.InventoryRecord(
            part_option_id=self.part_option_id,
            quantity=self.quantity,
            expected_restock_date=self.expected_restock_date,
        )


class IncompatibilityRule(CatalogMixin, Base):
    """A named group of option pairs that cannot coexist."""

    __tablename__ = "incompatibility_rules"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    conditions: Mapped[list["RuleCondition"]] = relationship(
        back_populates="rule", cascade="all, delete-orphan"
    )


class RuleCondition(CatalogMixin, Base):
    """Directed edge: selecting part_option_id excludes the other option."""

    __tablename__ = "rule_conditions"

    rule_id: Mapped[int] = mapped_column(
        ForeignKey("incompatibility_rules.id"), nullable=False, index=True
    )
    part_option_id: Mapped[int] = mapped_column(
        ForeignKey("part_options.id"), nullable=False, index=True
    )
    incompatible_with_part_option_id: Mapped[int] = mapped_column(
        ForeignKey("part_options.id"), nullable=False, index=True
    )

    rule: Mapped["IncompatibilityRule"] = relationship(back_populates="conditions")

    def to_domain(self) -> domain.IncompatibilityEdge:
        return domain.IncompatibilityEdge(
            rule_id=self.rule_id,
            from_option_id=self.part_option_id,
            to_option_id=self.incompatible_with_part_option_id,
        )


class PricingRule(CatalogMixin, Base):
    """Price adjustment that fires when all of its condition options are selected."""

    __tablename__ = "pricing_rules"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_adjustment: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_percentage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    conditions: Mapped[list["PricingRuleCondition"]] = relationship(
        back_populates="rule", cascade="all, delete-orphan"
    )

    def to_domain(self) -> domain.PricingRule:
        return domain.PricingRule(
            id=self.id,
            name=self.name,
            adjustment=self.price_adjustment,
            is_percentage=self.is_percentage,
            condition_option_ids=frozenset(c.part_option_id for c in self.conditions),
        )


class PricingRuleCondition(CatalogMixin, Base):
    """One member of a pricing rule's condition set."""

    __tablename__ = "pricing_rule_conditions"

    rule_id: Mapped[int] = mapped_column(
        ForeignKey("pricing_rules.id"), nullable=False, index=True
    )
    part_option_id: Mapped[int] = mapped_column(
        ForeignKey("part_options.id"), nullable=False, index=True
    )

    rule: Mapped["PricingRule"] = relationship(back_populates="conditions")

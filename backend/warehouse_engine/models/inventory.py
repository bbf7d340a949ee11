from __future__ import annotations

from ..extensions import db
from warehouse_engine.time_utils import to_utc_z


MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"

# Closed set of "why did stock change" tags; source_ref_id is interpreted per tag.
SOURCE_PURCHASE = "PURCHASE"                    # caller purchase/delivery reference
SOURCE_RETURNS_RESTOCK = "RETURNS_RESTOCK"      # "{settlement_id}:{product_template_id}"
SOURCE_SALES_FULFILLMENT = "SALES_FULFILLMENT"  # "{sales_log_id}:{day_key}:{qty_shipped_before}"

MOVEMENT_SOURCE_TYPES = (SOURCE_PURCHASE, SOURCE_RETURNS_RESTOCK, SOURCE_SALES_FULFILLMENT)


class InventoryItem(db.Model):
    """
    Stock of one product template in one warehouse.

    INVARIANTS:
    - 0 <= qty_reserved <= qty_on_hand
    - avg_unit_cost_cents changes only on PURCHASE inbound movements
      (moving weighted average). Returns and shipments never re-cost.

    qty_reserved is demand accepted into backlog but not yet shipped.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.UniqueConstraint("warehouse_id", "product_template_id", name="uq_inventory_items_warehouse_product"),
        db.CheckConstraint("qty_on_hand >= 0", name="ck_inventory_items_on_hand_nonneg"),
        db.CheckConstraint("qty_reserved >= 0", name="ck_inventory_items_reserved_nonneg"),
        db.CheckConstraint("qty_reserved <= qty_on_hand", name="ck_inventory_items_reserved_le_on_hand"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    product_template_id = db.Column(db.Integer, db.ForeignKey("product_templates.id"), nullable=False, index=True)

    qty_on_hand = db.Column(db.Integer, nullable=False, default=0)
    qty_reserved = db.Column(db.Integer, nullable=False, default=0)

    avg_unit_cost_cents = db.Column(db.Integer, nullable=False, default=0)
    last_unit_cost_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    warehouse = db.relationship("Warehouse", backref=db.backref("inventory_items", lazy=True))
    product_template = db.relationship("ProductTemplate")

    def __repr__(self) -> str:
        return (
            f"<InventoryItem id={self.id} warehouse_id={self.warehouse_id} "
            f"on_hand={self.qty_on_hand} reserved={self.qty_reserved}>"
        )

    @property
    def qty_available(self) -> int:
        """On-hand units not yet promised to backlog."""
        return max(0, self.qty_on_hand - self.qty_reserved)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "warehouse_id": self.warehouse_id,
            "product_template_id": self.product_template_id,
            "qty_on_hand": self.qty_on_hand,
            "qty_reserved": self.qty_reserved,
            "qty_available": self.qty_available,
            "avg_unit_cost_cents": self.avg_unit_cost_cents,
            "last_unit_cost_cents": self.last_unit_cost_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryMovement(db.Model):
    """
    Append-only audit of stock changes.

    IDEMPOTENCY: (warehouse_id, source_type, source_ref_id) is unique, so a
    given restock/purchase/shipment step can be recorded at most once.
    quantity is always positive; direction carries the sign.
    """
    __tablename__ = "inventory_movements"
    __table_args__ = (
        db.UniqueConstraint("warehouse_id", "source_type", "source_ref_id", name="uq_movements_source"),
        db.Index("ix_movements_warehouse_day_source", "warehouse_id", "day_key", "source_type"),
        db.CheckConstraint("quantity > 0", name="ck_movements_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=False, index=True)
    product_template_id = db.Column(db.Integer, db.ForeignKey("product_templates.id"), nullable=False)

    direction = db.Column(db.String(8), nullable=False)
    source_type = db.Column(db.String(32), nullable=False, index=True)
    source_ref_id = db.Column(db.String(128), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False, default=0)

    day_key = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    inventory_item = db.relationship("InventoryItem", backref=db.backref("movements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "warehouse_id": self.warehouse_id,
            "inventory_item_id": self.inventory_item_id,
            "product_template_id": self.product_template_id,
            "direction": self.direction,
            "source_type": self.source_type,
            "source_ref_id": self.source_ref_id,
            "quantity": self.quantity,
            "unit_cost_cents": self.unit_cost_cents,
            "day_key": self.day_key.isoformat(),
            "created_at": to_utc_z(self.created_at),
        }

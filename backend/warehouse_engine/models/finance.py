from __future__ import annotations

from ..extensions import db
from warehouse_engine.time_utils import to_utc_z


DIRECTION_IN = "IN"
DIRECTION_OUT = "OUT"

CURRENCY_USD = "USD"
CURRENCY_XP = "XP"
CURRENCY_DIAMOND = "DIAMOND"

# Ledger categories used by the engine
CATEGORY_PART_TIME = "PART_TIME"
CATEGORY_PURCHASE = "PURCHASE"
CATEGORY_FULFILLMENT_XP = "FULFILLMENT_XP"


class LedgerEntry(db.Model):
    """
    USD money movement.

    INVARIANTS:
    - idempotency_key is unique; posting the same key twice returns the
      first row and never changes a balance again.
    - amount_cents >= 0; direction carries the sign.
    - Rows are never updated after insert.
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        db.UniqueConstraint("idempotency_key", name="uq_ledger_entries_idempotency_key"),
        db.Index("ix_ledger_entries_company_day", "company_id", "day_key"),
        db.CheckConstraint("amount_cents >= 0", name="ck_ledger_entries_amount_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    idempotency_key = db.Column(db.String(128), nullable=False)

    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    day_key = db.Column(db.Date, nullable=False)

    direction = db.Column(db.String(8), nullable=False)  # IN, OUT
    amount_cents = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(32), nullable=False)

    scope_type = db.Column(db.String(32), nullable=True)
    scope_id = db.Column(db.Integer, nullable=True)
    counterparty_type = db.Column(db.String(32), nullable=True)
    counterparty_id = db.Column(db.Integer, nullable=True)
    ref_type = db.Column(db.String(32), nullable=True)
    ref_id = db.Column(db.String(128), nullable=True)

    note = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def signed_amount_cents(self) -> int:
        return self.amount_cents if self.direction == DIRECTION_IN else -self.amount_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "idempotency_key": self.idempotency_key,
            "company_id": self.company_id,
            "day_key": self.day_key.isoformat(),
            "direction": self.direction,
            "amount_cents": self.amount_cents,
            "category": self.category,
            "scope_type": self.scope_type,
            "scope_id": self.scope_id,
            "counterparty_type": self.counterparty_type,
            "counterparty_id": self.counterparty_id,
            "ref_type": self.ref_type,
            "ref_id": self.ref_id,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }


class PlayerWallet(db.Model):
    """
    Per-player balances. Changed only by increment-style updates issued by
    ledger_service on the first post of a key.
    """
    __tablename__ = "player_wallets"
    __table_args__ = (
        db.UniqueConstraint("player_id", name="uq_player_wallets_player"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False)

    balance_usd_cents = db.Column(db.Integer, nullable=False, default=0)
    balance_xp = db.Column(db.Integer, nullable=False, default=0)
    balance_diamond = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "balance_usd_cents": self.balance_usd_cents,
            "balance_xp": self.balance_xp,
            "balance_diamond": self.balance_diamond,
            "updated_at": to_utc_z(self.updated_at),
        }


class WalletTransaction(db.Model):
    """XP / DIAMOND movement. Same idempotency contract as LedgerEntry."""
    __tablename__ = "wallet_transactions"
    __table_args__ = (
        db.UniqueConstraint("idempotency_key", name="uq_wallet_transactions_idempotency_key"),
        db.CheckConstraint("amount >= 0", name="ck_wallet_transactions_amount_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    idempotency_key = db.Column(db.String(128), nullable=False)

    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=True)
    day_key = db.Column(db.Date, nullable=False)

    currency = db.Column(db.String(16), nullable=False)  # XP, DIAMOND
    direction = db.Column(db.String(8), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(32), nullable=False)

    ref_type = db.Column(db.String(32), nullable=True)
    ref_id = db.Column(db.String(128), nullable=True)
    note = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def signed_amount(self) -> int:
        return self.amount if self.direction == DIRECTION_IN else -self.amount

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "idempotency_key": self.idempotency_key,
            "player_id": self.player_id,
            "company_id": self.company_id,
            "day_key": self.day_key.isoformat(),
            "currency": self.currency,
            "direction": self.direction,
            "amount": self.amount,
            "category": self.category,
            "ref_type": self.ref_type,
            "ref_id": self.ref_id,
            "note": self.note,
            "created_at": to_utc_z(self.created_at),
        }


class Settlement(db.Model):
    """
    Billing period close for one warehouse.

    Created by the external billing process. returns_applied_at is stamped
    once returns have been restocked.
    """
    __tablename__ = "settlements"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)

    period_start_day_key = db.Column(db.Date, nullable=False)
    period_end_day_key = db.Column(db.Date, nullable=False)
    payout_day_key = db.Column(db.Date, nullable=False)

    returns_applied_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company")
    warehouse = db.relationship("Warehouse")
    lines = db.relationship("SettlementLine", backref="settlement", lazy=True, order_by="SettlementLine.id")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "warehouse_id": self.warehouse_id,
            "period_start_day_key": self.period_start_day_key.isoformat(),
            "period_end_day_key": self.period_end_day_key.isoformat(),
            "payout_day_key": self.payout_day_key.isoformat(),
            "returns_applied_at": to_utc_z(self.returns_applied_at),
            "lines": [line.to_dict() for line in self.lines],
        }


class SettlementLine(db.Model):
    __tablename__ = "settlement_lines"
    __table_args__ = (
        db.UniqueConstraint("settlement_id", "product_template_id", name="uq_settlement_lines_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    settlement_id = db.Column(db.Integer, db.ForeignKey("settlements.id"), nullable=False, index=True)
    product_template_id = db.Column(db.Integer, db.ForeignKey("product_templates.id"), nullable=False)

    fulfilled_qty = db.Column(db.Integer, nullable=False, default=0)
    return_qty = db.Column(db.Integer, nullable=False, default=0)
    gross_revenue_cents = db.Column(db.Integer, nullable=False, default=0)

    product_template = db.relationship("ProductTemplate")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "settlement_id": self.settlement_id,
            "product_template_id": self.product_template_id,
            "fulfilled_qty": self.fulfilled_qty,
            "return_qty": self.return_qty,
            "gross_revenue_cents": self.gross_revenue_cents,
        }

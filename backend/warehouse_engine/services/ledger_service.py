# Overview: Service-layer operations for the ledger; idempotent money/reward posts and wallet balances.

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date

from ..extensions import db
from ..models import LedgerEntry, PlayerWallet, WalletTransaction
from ..models.finance import CURRENCY_DIAMOND, CURRENCY_XP, DIRECTION_IN, DIRECTION_OUT
from warehouse_engine.time_utils import normalize_day_key
from warehouse_engine.validation import ValidationError
from .concurrency import lock_for_update
"""
Ledger & Wallet Invariants (authoritative)

- Every money (USD) effect is a LedgerEntry; every XP/DIAMOND effect is a
  WalletTransaction. Both carry a unique idempotency_key.
- Posting is check-then-create: an existing key returns the original row
  with is_new=False and no balance is touched.
- Wallet balances move only through increment-style SQL
  (balance = balance + :delta), and only for rows that were just created.
- The key is the only correctness mechanism. Payloads and timestamps of a
  replayed post are never compared against the stored row.
- Nothing here commits. Callers own the transaction.
"""

_WALLET_BALANCE_COLUMNS = {
    CURRENCY_XP: "balance_xp",
    CURRENCY_DIAMOND: "balance_diamond",
}


@dataclass(frozen=True)
class LedgerPostResult:
    entry: LedgerEntry
    is_new: bool


@dataclass(frozen=True)
class WalletPostResult:
    transaction: WalletTransaction
    is_new: bool


def generate_idempotency_key(action: str, *parts) -> str:
    """
    Deterministic key "ACTION:<first 24 hex chars of sha256(parts joined by '|')>".

    Parts are stringified; dates render as YYYY-MM-DD, so the same logical
    operation yields the same key in every process.
    """
    raw = "|".join("" if p is None else str(p) for p in parts)
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:24]
    return f"{action}:{digest}"


def _validate_direction_and_amount(direction: str, amount: int, field: str) -> None:
    if direction not in (DIRECTION_IN, DIRECTION_OUT):
        raise ValidationError("direction must be IN or OUT")
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError(f"{field} must be an integer")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")


def ensure_player_wallet(player_id: int) -> PlayerWallet:
    """
    Ensure a player has exactly one wallet row.

    Safe to call repeatedly (idempotent).
    """
    wallet = db.session.query(PlayerWallet).filter_by(player_id=player_id).first()
    if wallet:
        return wallet

    wallet = PlayerWallet(player_id=player_id, balance_usd_cents=0, balance_xp=0, balance_diamond=0)
    db.session.add(wallet)
    db.session.flush()
    return wallet


def get_wallet_for_update(player_id: int) -> PlayerWallet:
    """Wallet row locked for a funds check in the current transaction."""
    ensure_player_wallet(player_id)
    query = db.session.query(PlayerWallet).filter_by(player_id=player_id).populate_existing()
    return lock_for_update(query).one()


def _increment_wallet(player_id: int, column: str, delta: int) -> None:
    if delta == 0:
        return
    ensure_player_wallet(player_id)
    col = getattr(PlayerWallet, column)
    db.session.query(PlayerWallet).filter(PlayerWallet.player_id == player_id).update(
        {col: col + delta},
        synchronize_session="fetch",
    )


def post_ledger_entry(
    *,
    idempotency_key: str,
    company_id: int,
    day_key: date,
    direction: str,
    amount_cents: int,
    category: str,
    scope_type: str | None = None,
    scope_id: int | None = None,
    counterparty_type: str | None = None,
    counterparty_id: int | None = None,
    ref_type: str | None = None,
    ref_id: str | None = None,
    note: str | None = None,
) -> LedgerPostResult:
    """
    Insert a ledger entry unless one with the same key already exists.

    Returns the stored entry and whether this call created it.
    """
    if not idempotency_key:
        raise ValidationError("idempotency_key is required")
    _validate_direction_and_amount(direction, amount_cents, "amount_cents")

    existing = db.session.query(LedgerEntry).filter_by(idempotency_key=idempotency_key).first()
    if existing:
        return LedgerPostResult(entry=existing, is_new=False)

    entry = LedgerEntry(
        idempotency_key=idempotency_key,
        company_id=company_id,
        day_key=normalize_day_key(day_key),
        direction=direction,
        amount_cents=amount_cents,
        category=category,
        scope_type=scope_type,
        scope_id=scope_id,
        counterparty_type=counterparty_type,
        counterparty_id=counterparty_id,
        ref_type=ref_type,
        ref_id=None if ref_id is None else str(ref_id),
        note=note,
    )
    db.session.add(entry)
    db.session.flush()
    return LedgerPostResult(entry=entry, is_new=True)


def update_wallet_usd_from_ledger(player_id: int, result: LedgerPostResult) -> None:
    """Apply a just-created entry to the USD balance; replays are no-ops."""
    if not result.is_new:
        return
    _increment_wallet(player_id, "balance_usd_cents", result.entry.signed_amount_cents)


def update_wallet_usd_from_ledger_batch(player_id: int, results: list[LedgerPostResult]) -> int:
    """
    Apply many posts with a single aggregate increment.

    Only new entries count. Returns the applied delta (0 means no update was issued).
    """
    delta = sum(r.entry.signed_amount_cents for r in results if r.is_new)
    _increment_wallet(player_id, "balance_usd_cents", delta)
    return delta


def post_ledger_entry_and_update_wallet(*, player_id: int, **entry_fields) -> LedgerPostResult:
    result = post_ledger_entry(**entry_fields)
    update_wallet_usd_from_ledger(player_id, result)
    return result


def post_wallet_transaction_and_update_balance(
    *,
    idempotency_key: str,
    player_id: int,
    company_id: int | None,
    day_key: date,
    currency: str,
    direction: str,
    amount: int,
    category: str,
    ref_type: str | None = None,
    ref_id: str | None = None,
    note: str | None = None,
) -> WalletPostResult:
    """XP/DIAMOND counterpart of post_ledger_entry_and_update_wallet."""
    if not idempotency_key:
        raise ValidationError("idempotency_key is required")
    if currency not in _WALLET_BALANCE_COLUMNS:
        raise ValidationError("currency must be XP or DIAMOND")
    _validate_direction_and_amount(direction, amount, "amount")

    existing = db.session.query(WalletTransaction).filter_by(idempotency_key=idempotency_key).first()
    if existing:
        return WalletPostResult(transaction=existing, is_new=False)

    tx = WalletTransaction(
        idempotency_key=idempotency_key,
        player_id=player_id,
        company_id=company_id,
        day_key=normalize_day_key(day_key),
        currency=currency,
        direction=direction,
        amount=amount,
        category=category,
        ref_type=ref_type,
        ref_id=None if ref_id is None else str(ref_id),
        note=note,
    )
    db.session.add(tx)
    db.session.flush()

    _increment_wallet(player_id, _WALLET_BALANCE_COLUMNS[currency], tx.signed_amount)
    return WalletPostResult(transaction=tx, is_new=True)


def get_wallet(player_id: int) -> PlayerWallet | None:
    return db.session.query(PlayerWallet).filter_by(player_id=player_id).first()


def list_ledger_entries(*, company_id: int, limit: int = 200) -> list[LedgerEntry]:
    return (
        db.session.query(LedgerEntry)
        .filter(LedgerEntry.company_id == company_id)
        .order_by(LedgerEntry.id.desc())
        .limit(limit)
        .all()
    )

# Overview: Pytest coverage for ledger and wallet idempotency behavior.

"""
Ledger & Wallet Tests

A key posted twice must produce one row and one balance change. Replays
return the original row with is_new=False.
"""

from datetime import date

import pytest

from warehouse_engine.models import LedgerEntry, PlayerWallet, WalletTransaction
from warehouse_engine.models.finance import CURRENCY_XP, DIRECTION_IN, DIRECTION_OUT
from warehouse_engine.services.ledger_service import (
    ensure_player_wallet,
    generate_idempotency_key,
    post_ledger_entry,
    post_ledger_entry_and_update_wallet,
    post_wallet_transaction_and_update_balance,
    update_wallet_usd_from_ledger_batch,
)
from warehouse_engine.validation import ValidationError


GAME_DAY = date(2026, 3, 2)


class TestIdempotencyKeys:
    def test_key_is_deterministic(self):
        a = generate_idempotency_key("PART_TIME", 1, 2, GAME_DAY, 3)
        b = generate_idempotency_key("PART_TIME", 1, 2, "2026-03-02", 3)
        assert a == b

    def test_key_format(self):
        key = generate_idempotency_key("PART_TIME", 1, 2)
        action, digest = key.split(":")
        assert action == "PART_TIME"
        assert len(digest) == 24
        int(digest, 16)

    def test_different_parts_give_different_keys(self):
        assert generate_idempotency_key("X", 1, 2) != generate_idempotency_key("X", 1, 3)


class TestLedgerPosting:
    def _post(self, player_a, company_a, key="TEST:1", amount=2500, direction=DIRECTION_OUT):
        return post_ledger_entry_and_update_wallet(
            player_id=player_a.id,
            idempotency_key=key,
            company_id=company_a.id,
            day_key=GAME_DAY,
            direction=direction,
            amount_cents=amount,
            category="TEST",
            note="test charge",
        )

    def test_double_post_changes_balance_once(self, db_session, player_a, company_a, funded_wallet):
        first = self._post(player_a, company_a)
        db_session.commit()
        second = self._post(player_a, company_a)
        db_session.commit()

        assert first.is_new is True
        assert second.is_new is False
        assert second.entry.id == first.entry.id
        assert db_session.query(LedgerEntry).count() == 1

        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_usd_cents == 100_000 - 2500

    def test_replay_ignores_new_payload(self, db_session, player_a, company_a, funded_wallet):
        self._post(player_a, company_a, amount=2500)
        replay = self._post(player_a, company_a, amount=9999, direction=DIRECTION_IN)
        db_session.commit()

        assert replay.entry.amount_cents == 2500
        assert replay.entry.direction == DIRECTION_OUT
        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_usd_cents == 97_500

    def test_inbound_entry_credits_wallet(self, db_session, player_a, company_a):
        self._post(player_a, company_a, direction=DIRECTION_IN, amount=700)
        db_session.commit()
        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_usd_cents == 700

    def test_negative_amount_rejected(self, db_session, company_a):
        with pytest.raises(ValidationError):
            post_ledger_entry(
                idempotency_key="TEST:neg",
                company_id=company_a.id,
                day_key=GAME_DAY,
                direction=DIRECTION_OUT,
                amount_cents=-1,
                category="TEST",
            )

    def test_bad_direction_rejected(self, db_session, company_a):
        with pytest.raises(ValidationError):
            post_ledger_entry(
                idempotency_key="TEST:dir",
                company_id=company_a.id,
                day_key=GAME_DAY,
                direction="SIDEWAYS",
                amount_cents=1,
                category="TEST",
            )

    def test_batch_counts_only_new_entries(self, db_session, player_a, company_a):
        ensure_player_wallet(player_a.id)
        results = [
            post_ledger_entry(
                idempotency_key=f"TEST:batch:{i}",
                company_id=company_a.id,
                day_key=GAME_DAY,
                direction=DIRECTION_IN,
                amount_cents=100,
                category="TEST",
            )
            for i in range(3)
        ]
        assert update_wallet_usd_from_ledger_batch(player_a.id, results) == 300

        replays = [
            post_ledger_entry(
                idempotency_key=f"TEST:batch:{i}",
                company_id=company_a.id,
                day_key=GAME_DAY,
                direction=DIRECTION_IN,
                amount_cents=100,
                category="TEST",
            )
            for i in range(3)
        ]
        assert update_wallet_usd_from_ledger_batch(player_a.id, replays) == 0
        db_session.commit()

        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_usd_cents == 300


class TestWalletTransactions:
    def test_xp_double_post_awards_once(self, db_session, player_a, company_a):
        for _ in range(2):
            post_wallet_transaction_and_update_balance(
                idempotency_key="XP:1",
                player_id=player_a.id,
                company_id=company_a.id,
                day_key=GAME_DAY,
                currency=CURRENCY_XP,
                direction=DIRECTION_IN,
                amount=40,
                category="TEST",
            )
        db_session.commit()

        assert db_session.query(WalletTransaction).count() == 1
        wallet = db_session.query(PlayerWallet).filter_by(player_id=player_a.id).one()
        assert wallet.balance_xp == 40
        assert wallet.balance_usd_cents == 0

    def test_usd_is_not_a_wallet_currency(self, db_session, player_a):
        with pytest.raises(ValidationError):
            post_wallet_transaction_and_update_balance(
                idempotency_key="XP:usd",
                player_id=player_a.id,
                company_id=None,
                day_key=GAME_DAY,
                currency="USD",
                direction=DIRECTION_IN,
                amount=1,
                category="TEST",
            )

    def test_ensure_player_wallet_is_idempotent(self, db_session, player_a):
        first = ensure_player_wallet(player_a.id)
        second = ensure_player_wallet(player_a.id)
        assert first.id == second.id
        assert db_session.query(PlayerWallet).count() == 1

from __future__ import annotations

from ..extensions import db
from warehouse_engine.time_utils import to_utc_z


class Player(db.Model):
    """
    A human player. Owns one wallet and (in practice) one company.

    Authentication lives outside this service; the player row only anchors
    wallets and inbox messages.
    """
    __tablename__ = "players"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(120), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Player id={self.id} display_name={self.display_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "created_at": to_utc_z(self.created_at),
        }


class Company(db.Model):
    """
    Tenant root for all simulation data.

    Every warehouse, listing, ledger entry and settlement is scoped by
    company_id; lookups that take a company_id must reject rows owned by
    another company.
    """
    __tablename__ = "companies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    player = db.relationship("Player", backref=db.backref("companies", lazy=True))

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "name": self.name,
            "created_at": to_utc_z(self.created_at),
        }


class Country(db.Model):
    __tablename__ = "countries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(8), nullable=False, unique=True)
    name = db.Column(db.String(120), nullable=False)

    # Scales labour costs (part-time staff); 1.0 means base cost
    salary_multiplier = db.Column(db.Float, nullable=False, default=1.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "salary_multiplier": self.salary_multiplier,
        }


class Warehouse(db.Model):
    """
    A company warehouse selling into one market zone.

    Tier and daily shipping capacity are not stored here: the tier is the
    warehouse's SALES_COUNT metric level and capacity comes from
    MetricLevelConfig for that level.
    """
    __tablename__ = "warehouses"
    __table_args__ = (
        db.Index("ix_warehouses_company_zone", "company_id", "market_zone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=True, index=True)

    name = db.Column(db.String(120), nullable=True)
    market_zone = db.Column(db.String(32), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("warehouses", lazy=True))
    country = db.relationship("Country")

    def __repr__(self) -> str:
        return f"<Warehouse id={self.id} zone={self.market_zone} company_id={self.company_id}>"

    @property
    def label(self) -> str:
        """Display name, falling back to "Warehouse - <zone>"."""
        if self.name and self.name.strip():
            return self.name.strip()
        return f"Warehouse - {(self.market_zone or '-').replace('_', ' ')}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "country_id": self.country_id,
            "name": self.name,
            "market_zone": self.market_zone,
            "created_at": to_utc_z(self.created_at),
        }


class GameClock(db.Model):
    """Current simulated day of a company. Advanced by the external day loop."""
    __tablename__ = "game_clocks"
    __table_args__ = (
        db.UniqueConstraint("company_id", name="uq_game_clocks_company"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    current_day_key = db.Column(db.Date, nullable=False)

    def to_dict(self) -> dict:
        return {
            "company_id": self.company_id,
            "current_day_key": self.current_day_key.isoformat(),
        }

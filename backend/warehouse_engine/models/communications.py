from __future__ import annotations

from ..extensions import db
from warehouse_engine.time_utils import to_utc_z


MESSAGE_LEVEL_INFO = "INFO"
MESSAGE_LEVEL_WARNING = "WARNING"
MESSAGE_LEVEL_CRITICAL = "CRITICAL"


class PlayerMessage(db.Model):
    """
    Inbox message for a player.

    (player_id, dedupe_key) is unique: a producer that may run more than
    once (ticks, settlement replays) passes a deterministic dedupe_key and
    the second insert is skipped.
    """
    __tablename__ = "player_messages"
    __table_args__ = (
        db.UniqueConstraint("player_id", "dedupe_key", name="uq_player_messages_dedupe"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey("players.id"), nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=True)

    category = db.Column(db.String(32), nullable=False)    # LOGISTICS, FINANCE, ...
    department = db.Column(db.String(32), nullable=False)  # WAREHOUSE, ...
    level = db.Column(db.String(16), nullable=False, default=MESSAGE_LEVEL_INFO)
    kind = db.Column(db.String(32), nullable=False)

    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    context = db.Column(db.JSON, nullable=True)

    dedupe_key = db.Column(db.String(128), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "company_id": self.company_id,
            "category": self.category,
            "department": self.department,
            "level": self.level,
            "kind": self.kind,
            "title": self.title,
            "body": self.body,
            "context": self.context,
            "dedupe_key": self.dedupe_key,
            "created_at": to_utc_z(self.created_at),
            "read_at": to_utc_z(self.read_at),
        }

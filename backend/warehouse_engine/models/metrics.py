from __future__ import annotations

from ..extensions import db


METRIC_SALES_COUNT = "SALES_COUNT"
METRIC_STOCK_COUNT = "STOCK_COUNT"

BUILDING_ROLE_WAREHOUSE = "WAREHOUSE"


class BuildingMetricState(db.Model):
    """
    Running counter + level per (building, metric).

    The SALES_COUNT level doubles as the warehouse tier (1..5). Counters are
    only ever changed with increment-style updates.
    """
    __tablename__ = "building_metric_states"
    __table_args__ = (
        db.UniqueConstraint("building_id", "metric_type", name="uq_metric_states_building_metric"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    building_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)
    metric_type = db.Column(db.String(32), nullable=False)

    current_count = db.Column(db.Integer, nullable=False, default=0)
    current_level = db.Column(db.Integer, nullable=False, default=1)

    last_evaluated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "building_id": self.building_id,
            "metric_type": self.metric_type,
            "current_count": self.current_count,
            "current_level": self.current_level,
        }


class MetricLevelConfig(db.Model):
    """Per-level limits; for WAREHOUSE/SALES_COUNT max_allowed is daily shipping capacity."""
    __tablename__ = "metric_level_configs"
    __table_args__ = (
        db.UniqueConstraint("building_role", "metric_type", "level", name="uq_metric_level_configs"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    building_role = db.Column(db.String(32), nullable=False)
    metric_type = db.Column(db.String(32), nullable=False)
    level = db.Column(db.Integer, nullable=False)
    max_allowed = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "building_role": self.building_role,
            "metric_type": self.metric_type,
            "level": self.level,
            "max_allowed": self.max_allowed,
        }

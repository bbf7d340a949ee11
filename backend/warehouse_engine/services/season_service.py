# Overview: Service-layer operations for seasonality; weekly demand score per market zone.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..extensions import db
from ..models import SeasonScenario
from warehouse_engine.time_utils import week_index_from_day_key


@dataclass(frozen=True)
class SeasonScore:
    score: int
    missing_scenario: bool


def get_season_score(market_zone: str, definition_id: int | None, day_key: date) -> SeasonScore:
    """
    Score 0..100 for the day's week in the scenario of (definition, zone).

    No definition, no active scenario, or no value for the week -> 100 with
    missing_scenario=True.
    """
    if definition_id is None:
        return SeasonScore(score=100, missing_scenario=True)

    scenario = (
        db.session.query(SeasonScenario)
        .filter_by(definition_id=definition_id, market_zone=market_zone, is_active=True)
        .first()
    )
    if not scenario or not scenario.weeks:
        return SeasonScore(score=100, missing_scenario=True)

    weeks = scenario.weeks
    week_index = week_index_from_day_key(day_key)
    raw = weeks[week_index] if week_index < len(weeks) else None
    if raw is None:
        return SeasonScore(score=100, missing_scenario=True)

    score = int(round(float(raw)))
    return SeasonScore(score=min(100, max(0, score)), missing_scenario=False)

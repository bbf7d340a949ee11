# Overview: Flask CLI command groups for bootstrap, simulation runs, and reports.

# backend/warehouse_engine/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-levels
#   Create/update WAREHOUSE SALES_COUNT level configs (daily capacity per tier).
#
# Simulation (one warehouse, one day):
# - python -m flask sim demand --company-id 1 --warehouse-id 1 --day 2026-03-02
# - python -m flask sim fulfill --company-id 1 --warehouse-id 1 --day 2026-03-02
# - python -m flask sim tick --company-id 1 --warehouse-id 1 --day 2026-03-02
# - python -m flask sim apply-returns --settlement-id 7
# - python -m flask sim clear-backlog --company-id 1 --warehouse-id 1 --staff 3 [--key CUSTOM-KEY]
#
# Reports:
# - python -m flask report demand-debug --company-id 1 --day 2026-03-02 [--warehouse-id 1]

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import MetricLevelConfig
from .models.metrics import BUILDING_ROLE_WAREHOUSE, METRIC_SALES_COUNT
from .validation import EngineError


# Daily shipping capacity per warehouse tier
DEFAULT_WAREHOUSE_CAPACITY = {1: 100, 2: 250, 3: 500, 4: 1000, 5: 2000}


def _fail(e: EngineError):
    raise click.ClickException(f"{e.reason}: {e}")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-levels' next.")


@system_group.command('seed-levels')
@click.option(
    '--capacity',
    'overrides',
    multiple=True,
    help='LEVEL=UNITS override, e.g. --capacity 1=50 (repeatable)',
)
@with_appcontext
def seed_levels(overrides):
    """Create or update WAREHOUSE SALES_COUNT capacity per level (idempotent)."""
    capacities = dict(DEFAULT_WAREHOUSE_CAPACITY)
    for raw in overrides:
        try:
            level, units = (int(part) for part in raw.split('=', 1))
        except ValueError:
            raise click.BadParameter(f"expected LEVEL=UNITS, got {raw!r}", param_hint='--capacity')
        if level < 1 or units < 0:
            raise click.BadParameter(f"invalid level/capacity {raw!r}", param_hint='--capacity')
        capacities[level] = units

    for level, units in sorted(capacities.items()):
        row = (
            db.session.query(MetricLevelConfig)
            .filter_by(building_role=BUILDING_ROLE_WAREHOUSE, metric_type=METRIC_SALES_COUNT, level=level)
            .first()
        )
        if row:
            row.max_allowed = units
            click.echo(f"PASS Updated level {level}: capacity {units}")
        else:
            db.session.add(
                MetricLevelConfig(
                    building_role=BUILDING_ROLE_WAREHOUSE,
                    metric_type=METRIC_SALES_COUNT,
                    level=level,
                    max_allowed=units,
                )
            )
            click.echo(f"PASS Created level {level}: capacity {units}")
    db.session.commit()


@click.group('sim')
def sim_group():
    """Run simulation steps for one warehouse/day."""


@sim_group.command('demand')
@click.option('--company-id', type=int, required=True)
@click.option('--warehouse-id', type=int, required=True)
@click.option('--day', 'day_key', required=True, help='Day key YYYY-MM-DD')
@with_appcontext
def sim_demand(company_id, warehouse_id, day_key):
    """Generate the day's demand for every listed product of a warehouse."""
    from .services.demand_service import generate_daily_demand

    try:
        result = generate_daily_demand(company_id=company_id, warehouse_id=warehouse_id, day_key=day_key)
    except EngineError as e:
        _fail(e)
    click.echo(
        f"PASS Demand {day_key}: evaluated={result.listings_evaluated} skipped={result.listings_skipped} "
        f"units={result.units_ordered} paused={result.listings_paused}"
    )


@sim_group.command('fulfill')
@click.option('--company-id', type=int, required=True)
@click.option('--warehouse-id', type=int, required=True)
@click.option('--day', 'day_key', required=True, help='Day key YYYY-MM-DD')
@with_appcontext
def sim_fulfill(company_id, warehouse_id, day_key):
    """Ship backlog within the day's capacity."""
    from .services.fulfillment_service import fulfill

    try:
        result = fulfill(company_id=company_id, warehouse_id=warehouse_id, day_key=day_key)
    except EngineError as e:
        _fail(e)
    click.echo(
        f"PASS Fulfillment {day_key}: shipped={result.shipped_units} backlog={result.backlog_units} "
        f"capacity={result.capacity_used}/{result.capacity_total}"
        + (" (nothing to ship)" if result.was_idempotent else "")
    )


@sim_group.command('tick')
@click.option('--company-id', type=int, required=True)
@click.option('--warehouse-id', type=int, required=True)
@click.option('--day', 'day_key', required=True, help='Day key YYYY-MM-DD')
@with_appcontext
def sim_tick(company_id, warehouse_id, day_key):
    """Demand + fulfillment + rewards for one warehouse/day."""
    from .services.day_tick_service import run_warehouse_day_tick

    try:
        result = run_warehouse_day_tick(company_id=company_id, warehouse_id=warehouse_id, day_key=day_key)
    except EngineError as e:
        _fail(e)
    click.echo(
        f"PASS Tick {day_key}: ordered={result.demand.units_ordered} shipped={result.fulfillment.shipped_units} "
        f"backlog={result.fulfillment.backlog_units} xp={result.xp_awarded}"
    )
    if result.backlog_warning:
        click.echo("WARN  Backlog warning sent")


@sim_group.command('apply-returns')
@click.option('--settlement-id', type=int, required=True)
@with_appcontext
def sim_apply_returns(settlement_id):
    """Restock returned units of a settlement."""
    from .services.returns_service import apply_returns

    try:
        result = apply_returns(settlement_id)
    except EngineError as e:
        _fail(e)
    click.echo(
        f"PASS Settlement {settlement_id}: restocked={result.total_returned_units} "
        f"applied={result.lines_applied} skipped={result.lines_skipped}"
    )


@sim_group.command('clear-backlog')
@click.option('--company-id', type=int, required=True)
@click.option('--warehouse-id', type=int, required=True)
@click.option('--staff', 'staff_count', type=int, required=True)
@click.option('--key', 'idempotency_key', default=None, help='Idempotency key (default: derived from day/staff)')
@with_appcontext
def sim_clear_backlog(company_id, warehouse_id, staff_count, idempotency_key):
    """Hire part-time staff to clear backlog."""
    from .services.backlog_service import clear_backlog

    try:
        result = clear_backlog(
            company_id=company_id,
            building_id=warehouse_id,
            staff_count=staff_count,
            idempotency_key=idempotency_key,
        )
    except EngineError as e:
        _fail(e)
    prefix = "SKIP Replay" if result.was_replay else "PASS Cleared"
    click.echo(
        f"{prefix}: cleared={result.cleared_units} cost_cents={result.cost_cents} "
        f"backlog {result.backlog_before} -> {result.backlog_after}"
    )


@click.group('report')
def report_group():
    """Read-only diagnostics."""


@report_group.command('demand-debug')
@click.option('--company-id', type=int, required=True)
@click.option('--day', 'day_key', required=True, help='Day key YYYY-MM-DD')
@click.option('--warehouse-id', type=int, default=None)
@with_appcontext
def report_demand_debug(company_id, day_key, warehouse_id):
    """Print how each listing's demand was resolved on a day."""
    from .services.reporting_service import get_demand_debug_report

    try:
        rows = get_demand_debug_report(company_id=company_id, day_key=day_key, warehouse_id=warehouse_id)
    except EngineError as e:
        _fail(e)

    if not rows:
        click.echo("No demand snapshots for that day.")
        return

    click.echo(f"{'WH':<5} {'LISTING':<8} {'TIER':<5} {'BAND':<6} {'PIDX':<7} {'PMULT':<6} {'SEASON':<7} {'DESIRED':<8} {'ORD':<6} {'SHIP':<6} BLOCKS")
    for r in rows:
        blocks = ",".join(
            name for name, flag in (("price", r["blocked_by_price"]), ("season", r["blocked_by_season"])) if flag
        ) or "-"
        click.echo(
            f"{r['warehouse_id']:<5} {r['listing_id']:<8} {r['tier_used']:<5} "
            f"{('yes' if r['band_matched'] else 'no'):<6} {r['price_index']:<7.3f} {r['price_multiplier']:<6.2f} "
            f"{r['season_score']:<7} {r['final_desired']:<8} {r['qty_ordered']:<6} {r['qty_shipped']:<6} {blocks}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sim_group)
    app.cli.add_command(report_group)

"""Warehouse sales & fulfillment schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=nullable)


def upgrade():
    # Tenancy
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("salary_multiplier", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "warehouses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("market_zone", sa.String(32), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "game_clocks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("current_day_key", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", name="uq_game_clocks_company"),
        sqlite_autoincrement=True,
    )

    # Catalog
    op.create_table(
        "category_nodes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("level", sa.String(4), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.ForeignKeyConstraint(["parent_id"], ["category_nodes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "product_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("quality", sa.String(16), nullable=False, server_default="STANDARD"),
        sa.Column("suggested_sale_price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("season_definition_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["category_nodes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_product_templates_code"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "sales_band_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("quality", sa.String(16), nullable=False),
        sa.Column("tier_min", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("tier_max", sa.Integer(), nullable=False, server_default=sa.text("5")),
        sa.Column("min_daily", sa.Integer(), nullable=False),
        sa.Column("max_daily", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["category_id"], ["category_nodes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "market_zone_price_indexes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("market_zone", sa.String(32), nullable=False),
        sa.Column("multiplier", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("market_zone", name="uq_zone_price_index_zone"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "season_scenarios",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("definition_id", sa.Integer(), nullable=False),
        sa.Column("market_zone", sa.String(32), nullable=False),
        sa.Column("weeks", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("definition_id", "market_zone", name="uq_season_scenarios_definition_zone"),
        sqlite_autoincrement=True,
    )

    # Metrics
    op.create_table(
        "building_metric_states",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("building_id", sa.Integer(), nullable=False),
        sa.Column("metric_type", sa.String(32), nullable=False),
        sa.Column("current_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_level", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("last_evaluated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["building_id"], ["warehouses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("building_id", "metric_type", name="uq_metric_states_building_metric"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "metric_level_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("building_role", sa.String(32), nullable=False),
        sa.Column("metric_type", sa.String(32), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("max_allowed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("building_role", "metric_type", "level", name="uq_metric_level_configs"),
        sqlite_autoincrement=True,
    )

    # Inventory
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("product_template_id", sa.Integer(), nullable=False),
        sa.Column("qty_on_hand", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("qty_reserved", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("avg_unit_cost_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_unit_cost_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.ForeignKeyConstraint(["product_template_id"], ["product_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("warehouse_id", "product_template_id", name="uq_inventory_items_warehouse_product"),
        sa.CheckConstraint("qty_on_hand >= 0", name="ck_inventory_items_on_hand_nonneg"),
        sa.CheckConstraint("qty_reserved >= 0", name="ck_inventory_items_reserved_nonneg"),
        sa.CheckConstraint("qty_reserved <= qty_on_hand", name="ck_inventory_items_reserved_le_on_hand"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "inventory_movements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("product_template_id", sa.Integer(), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("source_type", sa.String(32), nullable=False),
        sa.Column("source_ref_id", sa.String(128), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_cost_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("day_key", sa.Date(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["product_template_id"], ["product_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("warehouse_id", "source_type", "source_ref_id", name="uq_movements_source"),
        sa.CheckConstraint("quantity > 0", name="ck_movements_quantity_positive"),
        sqlite_autoincrement=True,
    )

    # Sales
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("product_template_id", sa.Integer(), nullable=False),
        sa.Column("market_zone", sa.String(32), nullable=False),
        sa.Column("sale_price_cents", sa.Integer(), nullable=False),
        sa.Column("list_price_cents", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="LISTED"),
        sa.Column("paused_reason", sa.String(32), nullable=False, server_default="NONE"),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tier_used", sa.Integer(), nullable=False),
        sa.Column("base_min_daily", sa.Integer(), nullable=False),
        sa.Column("base_max_daily", sa.Integer(), nullable=False),
        sa.Column("base_qty", sa.Integer(), nullable=False),
        sa.Column("band_matched", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("band_missing", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("band_category_id", sa.Integer(), nullable=True),
        sa.Column("normal_price_cents", sa.Integer(), nullable=False),
        sa.Column("price_index", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.Column("price_multiplier", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.Column("blocked_by_price", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("launched_at_day_key", sa.Date(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["product_template_id"], ["product_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "market_zone", "product_template_id", name="uq_listings_company_zone_product"),
        sa.CheckConstraint("base_min_daily >= 1", name="ck_listings_band_min"),
        sa.CheckConstraint("base_max_daily >= base_min_daily", name="ck_listings_band_order"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "daily_sales_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("product_template_id", sa.Integer(), nullable=False),
        sa.Column("market_zone", sa.String(32), nullable=False),
        sa.Column("day_key", sa.Date(), nullable=False),
        sa.Column("qty_ordered", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("qty_shipped", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("qty_manual_cleared", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("sale_price_cents", sa.Integer(), nullable=True),
        sa.Column("list_price_cents", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"]),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["product_template_id"], ["product_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("listing_id", "day_key", name="uq_sales_logs_listing_day"),
        sa.CheckConstraint("qty_shipped >= 0", name="ck_sales_logs_shipped_nonneg"),
        sa.CheckConstraint("qty_shipped <= qty_ordered", name="ck_sales_logs_shipped_le_ordered"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "demand_snapshots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("day_key", sa.Date(), nullable=False),
        sa.Column("tier_used", sa.Integer(), nullable=False),
        sa.Column("band_matched", sa.Boolean(), nullable=False),
        sa.Column("base_qty", sa.Integer(), nullable=False),
        sa.Column("price_index", sa.Float(), nullable=False),
        sa.Column("price_multiplier", sa.Float(), nullable=False),
        sa.Column("season_score", sa.Integer(), nullable=False),
        sa.Column("missing_season", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("blocked_by_price", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("blocked_by_season", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("final_desired", sa.Integer(), nullable=False),
        sa.Column("qty_accepted", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("listing_id", "day_key", name="uq_demand_snapshots_listing_day"),
        sqlite_autoincrement=True,
    )

    # Finance
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("idempotency_key", sa.String(128), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("day_key", sa.Date(), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("scope_type", sa.String(32), nullable=True),
        sa.Column("scope_id", sa.Integer(), nullable=True),
        sa.Column("counterparty_type", sa.String(32), nullable=True),
        sa.Column("counterparty_id", sa.Integer(), nullable=True),
        sa.Column("ref_type", sa.String(32), nullable=True),
        sa.Column("ref_id", sa.String(128), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name="uq_ledger_entries_idempotency_key"),
        sa.CheckConstraint("amount_cents >= 0", name="ck_ledger_entries_amount_nonneg"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "player_wallets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("balance_usd_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("balance_xp", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("balance_diamond", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", name="uq_player_wallets_player"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("idempotency_key", sa.String(128), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("day_key", sa.Date(), nullable=False),
        sa.Column("currency", sa.String(16), nullable=False),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("ref_type", sa.String(32), nullable=True),
        sa.Column("ref_id", sa.String(128), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name="uq_wallet_transactions_idempotency_key"),
        sa.CheckConstraint("amount >= 0", name="ck_wallet_transactions_amount_nonneg"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "settlements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("warehouse_id", sa.Integer(), nullable=False),
        sa.Column("period_start_day_key", sa.Date(), nullable=False),
        sa.Column("period_end_day_key", sa.Date(), nullable=False),
        sa.Column("payout_day_key", sa.Date(), nullable=False),
        sa.Column("returns_applied_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.ForeignKeyConstraint(["warehouse_id"], ["warehouses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "settlement_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("settlement_id", sa.Integer(), nullable=False),
        sa.Column("product_template_id", sa.Integer(), nullable=False),
        sa.Column("fulfilled_qty", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("return_qty", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("gross_revenue_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["settlement_id"], ["settlements.id"]),
        sa.ForeignKeyConstraint(["product_template_id"], ["product_templates.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("settlement_id", "product_template_id", name="uq_settlement_lines_product"),
        sqlite_autoincrement=True,
    )

    # Communications
    op.create_table(
        "player_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("department", sa.String(32), nullable=False),
        sa.Column("level", sa.String(16), nullable=False, server_default="INFO"),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("context", sa.JSON(), nullable=True),
        sa.Column("dedupe_key", sa.String(128), nullable=False),
        _timestamp("created_at"),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "dedupe_key", name="uq_player_messages_dedupe"),
        sqlite_autoincrement=True,
    )

    # Indexes
    with op.batch_alter_table("companies") as batch_op:
        batch_op.create_index("ix_companies_player_id", ["player_id"])
    with op.batch_alter_table("warehouses") as batch_op:
        batch_op.create_index("ix_warehouses_company_id", ["company_id"])
        batch_op.create_index("ix_warehouses_country_id", ["country_id"])
        batch_op.create_index("ix_warehouses_company_zone", ["company_id", "market_zone"])
    with op.batch_alter_table("category_nodes") as batch_op:
        batch_op.create_index("ix_category_nodes_parent_id", ["parent_id"])
    with op.batch_alter_table("product_templates") as batch_op:
        batch_op.create_index("ix_product_templates_category_id", ["category_id"])
        batch_op.create_index("ix_product_templates_season_definition_id", ["season_definition_id"])
    with op.batch_alter_table("sales_band_configs") as batch_op:
        batch_op.create_index("ix_sales_bands_lookup", ["category_id", "quality", "is_active"])
    with op.batch_alter_table("season_scenarios") as batch_op:
        batch_op.create_index("ix_season_scenarios_definition_id", ["definition_id"])
    with op.batch_alter_table("building_metric_states") as batch_op:
        batch_op.create_index("ix_building_metric_states_building_id", ["building_id"])
    with op.batch_alter_table("inventory_items") as batch_op:
        batch_op.create_index("ix_inventory_items_warehouse_id", ["warehouse_id"])
        batch_op.create_index("ix_inventory_items_product_template_id", ["product_template_id"])
    with op.batch_alter_table("inventory_movements") as batch_op:
        batch_op.create_index("ix_inventory_movements_warehouse_id", ["warehouse_id"])
        batch_op.create_index("ix_inventory_movements_inventory_item_id", ["inventory_item_id"])
        batch_op.create_index("ix_inventory_movements_source_type", ["source_type"])
        batch_op.create_index("ix_movements_warehouse_day_source", ["warehouse_id", "day_key", "source_type"])
    with op.batch_alter_table("listings") as batch_op:
        batch_op.create_index("ix_listings_company_id", ["company_id"])
        batch_op.create_index("ix_listings_warehouse_id", ["warehouse_id"])
        batch_op.create_index("ix_listings_inventory_item_id", ["inventory_item_id"])
        batch_op.create_index("ix_listings_status", ["status"])
        batch_op.create_index("ix_listings_warehouse_status", ["warehouse_id", "status"])
    with op.batch_alter_table("daily_sales_logs") as batch_op:
        batch_op.create_index("ix_daily_sales_logs_company_id", ["company_id"])
        batch_op.create_index("ix_daily_sales_logs_listing_id", ["listing_id"])
        batch_op.create_index("ix_sales_logs_warehouse_day", ["warehouse_id", "day_key"])
    with op.batch_alter_table("demand_snapshots") as batch_op:
        batch_op.create_index("ix_demand_snapshots_warehouse_id", ["warehouse_id"])
        batch_op.create_index("ix_demand_snapshots_company_day", ["company_id", "day_key"])
    with op.batch_alter_table("ledger_entries") as batch_op:
        batch_op.create_index("ix_ledger_entries_company_id", ["company_id"])
        batch_op.create_index("ix_ledger_entries_company_day", ["company_id", "day_key"])
    with op.batch_alter_table("wallet_transactions") as batch_op:
        batch_op.create_index("ix_wallet_transactions_player_id", ["player_id"])
    with op.batch_alter_table("settlements") as batch_op:
        batch_op.create_index("ix_settlements_company_id", ["company_id"])
        batch_op.create_index("ix_settlements_warehouse_id", ["warehouse_id"])
    with op.batch_alter_table("settlement_lines") as batch_op:
        batch_op.create_index("ix_settlement_lines_settlement_id", ["settlement_id"])
    with op.batch_alter_table("player_messages") as batch_op:
        batch_op.create_index("ix_player_messages_player_id", ["player_id"])


def downgrade():
    for table in (
        "player_messages",
        "settlement_lines",
        "settlements",
        "wallet_transactions",
        "player_wallets",
        "ledger_entries",
        "demand_snapshots",
        "daily_sales_logs",
        "listings",
        "inventory_movements",
        "inventory_items",
        "metric_level_configs",
        "building_metric_states",
        "season_scenarios",
        "market_zone_price_indexes",
        "sales_band_configs",
        "product_templates",
        "category_nodes",
        "game_clocks",
        "warehouses",
        "countries",
        "companies",
        "players",
    ):
        op.drop_table(table)

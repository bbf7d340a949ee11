from .tenancy import Player, Company, Country, Warehouse, GameClock
from .catalog import CategoryNode, ProductTemplate, SalesBandConfig, MarketZonePriceIndex, SeasonScenario
from .metrics import BuildingMetricState, MetricLevelConfig
from .inventory import InventoryItem, InventoryMovement
from .sales import Listing, DailySalesLog, DemandSnapshot
from .finance import LedgerEntry, PlayerWallet, WalletTransaction, Settlement, SettlementLine
from .communications import PlayerMessage

__all__ = [
    'Player', 'Company', 'Country', 'Warehouse', 'GameClock',
    'CategoryNode', 'ProductTemplate', 'SalesBandConfig', 'MarketZonePriceIndex', 'SeasonScenario',
    'BuildingMetricState', 'MetricLevelConfig',
    'InventoryItem', 'InventoryMovement',
    'Listing', 'DailySalesLog', 'DemandSnapshot',
    'LedgerEntry', 'PlayerWallet', 'WalletTransaction', 'Settlement', 'SettlementLine',
    'PlayerMessage',
]

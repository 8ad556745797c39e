from foliosync.models.holding import Holding, HoldingsTable, holding_key
from foliosync.models.portfolio_tab import PortfolioTab
from foliosync.models.sync_state import DebugInfo, SyncState, TabDiagnostic, TabStatus
from foliosync.models.user_settings import UserSettings

__all__ = [
    "Holding",
    "HoldingsTable",
    "holding_key",
    "PortfolioTab",
    "DebugInfo",
    "SyncState",
    "TabDiagnostic",
    "TabStatus",
    "UserSettings",
]

"""
Persisted synchronization state.

SyncState is always written as a whole; nothing updates a single field of
the stored document.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from foliosync.models.holding import HoldingsTable, table_from_dict, table_to_dict


class TabStatus:
    OK = "ok"
    SKIPPED_NO_PUBLIC_ID = "skipped_no_public_id"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    IDENTITY_MISMATCH = "identity_mismatch"
    PARSE_ERROR = "parse_error"


@dataclass
class TabDiagnostic:
    """Outcome of the latest attempt at one portfolio tab."""
    numeric_id: str
    name: str = ""
    url: str = ""
    status: str = TabStatus.OK
    expected_id: str = ""
    observed_id: Optional[str] = None
    row_count: int = 0
    phase: int = 1
    status_code: Optional[int] = None
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == TabStatus.OK


@dataclass
class DebugInfo:
    portfolios_found: List[Dict[str, Any]] = field(default_factory=list)
    holdings_per_portfolio: Dict[str, TabDiagnostic] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "portfolios_found": list(self.portfolios_found),
            "holdings_per_portfolio": {
                key: asdict(diag) for key, diag in self.holdings_per_portfolio.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DebugInfo":
        data = data or {}
        return cls(
            portfolios_found=list(data.get("portfolios_found") or []),
            holdings_per_portfolio={
                key: TabDiagnostic(**value)
                for key, value in (data.get("holdings_per_portfolio") or {}).items()
            },
        )


@dataclass
class SyncState:
    holdings_table: HoldingsTable = field(default_factory=dict)
    last_sync_timestamp: Optional[datetime] = None
    debug_info: DebugInfo = field(default_factory=DebugInfo)

    @property
    def holdings_count(self) -> int:
        return len(self.holdings_table)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holdings_table": table_to_dict(self.holdings_table),
            "last_sync_timestamp": (
                self.last_sync_timestamp.isoformat() if self.last_sync_timestamp else None
            ),
            "debug_info": self.debug_info.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SyncState":
        data = data or {}
        raw_ts = data.get("last_sync_timestamp")
        return cls(
            holdings_table=table_from_dict(data.get("holdings_table")),
            last_sync_timestamp=datetime.fromisoformat(raw_ts) if raw_ts else None,
            debug_info=DebugInfo.from_dict(data.get("debug_info")),
        )

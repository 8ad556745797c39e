from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class PortfolioTab:
    """
    A holdings tab discovered on the landing page.

    Recreated on every discovery pass; never persisted as a fetch target.
    """
    numeric_id: str
    public_id: str = ""
    name: str = ""

    @property
    def addressable(self) -> bool:
        """Tabs without a public identifier cannot be fetched individually."""
        return bool(self.public_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

from ..core.exceptions import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableStatus:
    name: str
    count: Optional[int]
    status: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def table_statuses(counters: Dict[str, Callable[[], int]]) -> List[TableStatus]:
    """Probe every table independently; one failing table never hides the others."""

    results: List[TableStatus] = []
    for name, count in counters.items():
        try:
            results.append(TableStatus(name=name, count=int(count()), status="success"))
        except StoreError as exc:
            logger.warning("Health check failed for %s: %s", name, exc)
            results.append(TableStatus(name=name, count=None, status="error", error=str(exc)))
    return results

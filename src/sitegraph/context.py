from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import Field

from .ir import WireModel

logger = logging.getLogger(__name__)

TriggerKey = Tuple[str, str, str]  # (scope, graph id, node id)


class RuntimeContext(WireModel):
    """Interaction signals sampled once per evaluation tick."""
    is_hovered: bool = False
    is_clicked: bool = False
    time: float = 0.0


class Effect(WireModel):
    """A side effect requested by an action node on a rising edge."""
    kind: str  # navigate | open_link | alert
    node_id: str
    graph_id: str = ""
    scope: str = ""
    payload: Any = None
    options: Dict[str, Any] = Field(default_factory=dict)


class TriggerTable:
    """Previous trigger value per action node, kept across ticks.

    Keys are scoped (element/view id, graph id, node id) so one graph
    attached to several elements keeps separate histories.
    """

    def __init__(self) -> None:
        self._previous: Dict[TriggerKey, bool] = {}

    def rising(self, key: TriggerKey, current: bool) -> bool:
        previous = self._previous.get(key, False)
        self._previous[key] = current
        return current and not previous

    def reset(self, scope: Optional[str] = None) -> None:
        if scope is None:
            self._previous.clear()
            return
        stale = [k for k in self._previous if k[0] == scope]
        for k in stale:
            del self._previous[k]
        logger.debug("Cleared %d trigger entries for scope '%s'", len(stale), scope)

    def __len__(self) -> int:
        return len(self._previous)

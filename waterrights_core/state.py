# waterrights_core/state.py
from __future__ import annotations
from typing import Callable, List, Optional

from .aggregator import STATUS_FILTERS, MarketplaceAggregator, MarketSummary
from .ledger import ActionResult, ActionStatus, RightsLedger
from .logger import get_logger
from .models import WaterRight
from .reveal import RevealProtocol

log = get_logger("WR.State")

Listener = Callable[["MarketState"], None]


class MarketState:
    """
    The one shared view of the market for a client session.

    `rights` is only ever replaced from a completed load, so it never shows a
    write the substrate has not confirmed. Every mutation notifies listeners.
    """

    def __init__(self):
        self.rights: List[WaterRight] = []
        self.search_term: str = ""
        self.status_filter: str = "all"
        self.selected_id: Optional[str] = None
        self.last_action: Optional[ActionResult] = None
        self.reveal: Optional[RevealProtocol] = None
        self._listeners: List[Listener] = []

    # ---- subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- mutations ----

    def set_rights(self, rights: List[WaterRight]) -> None:
        self.rights = list(rights)
        if self.selected_id and self.selected is None:
            self.close_detail()
            return
        self._notify()

    def set_search(self, term: str) -> None:
        self.search_term = term or ""
        self._notify()

    def set_filter(self, status_filter: str) -> None:
        if status_filter not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status_filter}")
        self.status_filter = status_filter
        self._notify()

    def select(self, right_id: str, reveal: Optional[RevealProtocol] = None) -> None:
        if self.reveal is not None:
            self.reveal.clear()
        self.selected_id = right_id
        self.reveal = reveal
        self._notify()

    def close_detail(self) -> None:
        """Deselect and drop any revealed values."""
        if self.reveal is not None:
            self.reveal.clear()
        self.reveal = None
        self.selected_id = None
        self._notify()

    def set_action(self, result: Optional[ActionResult]) -> None:
        self.last_action = result
        self._notify()

    # ---- derived ----

    @property
    def selected(self) -> Optional[WaterRight]:
        return next((r for r in self.rights if r.id == self.selected_id), None)

    def visible(self) -> List[WaterRight]:
        return MarketplaceAggregator(self.rights).search(self.search_term, self.status_filter)

    def stats(self) -> MarketSummary:
        return MarketplaceAggregator(self.rights).summary()

    # ---- flows ----

    def refresh(self, ledger: RightsLedger) -> List[WaterRight]:
        rights = ledger.refresh()
        log.info(f"[STATE] loaded {len(rights)} right(s)")
        self.set_rights(rights)
        return self.rights

    def run(self, ledger: RightsLedger, action: Callable[[], ActionResult]) -> ActionResult:
        """Run a ledger action, publish its result, reload on success."""
        self.set_action(ActionResult.pending("Processing..."))
        try:
            result = action()
        except Exception as e:
            log.exception(f"[STATE] action failed: {e}")
            result = ActionResult(ActionStatus.ERROR, f"Action failed: {e}", kind=type(e).__name__)
        self.set_action(result)
        if result.ok:
            self.refresh(ledger)
        return result

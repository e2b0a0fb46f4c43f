"""Listing rows for the feed, owner, and responses panels.

Call context:
    ``bboard.app.main.App`` passes ``on_render`` and redraws one panel
    per call. The view model rebuilds rows whenever the cache republishes a
    projection or the response workflow changes a listing's affordance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from bboard.domain.entities import ListingId
from bboard.usecases.listing_cache import MINE, PROJECTIONS, ListingCache, ListingView
from bboard.usecases.response_workflow import RespondAffordance, ResponseWorkflow

RESPOND_LABELS: Dict[RespondAffordance, str] = {
    RespondAffordance.HIDDEN: "",
    RespondAffordance.LOGIN_REQUIRED: "Log in to respond",
    RespondAffordance.RESPOND: "Respond",
    RespondAffordance.PENDING: "Sending...",
    RespondAffordance.ALREADY_RESPONDED: "Already responded",
    RespondAffordance.RESPONDED: "Responded",
}


@dataclass(frozen=True)
class FeedRow:
    """Display row consumed by the listing panels."""

    listing_id: ListingId
    title: str
    description: str
    price: str
    owner: str
    created_at: str
    can_delete: bool
    responses_count: Optional[int]
    respond: RespondAffordance
    respond_label: str
    respond_enabled: bool


@dataclass(frozen=True)
class ToolbarState:
    """Which selection-bound toolbar actions the current row allows."""

    respond: bool = False
    responders: bool = False
    delete: bool = False


def toolbar_state(row: Optional[FeedRow]) -> ToolbarState:
    if row is None:
        return ToolbarState()
    return ToolbarState(
        respond=row.respond_enabled,
        responders=row.can_delete,
        delete=row.can_delete,
    )


RenderFn = Callable[[str, List[FeedRow]], None]


class FeedVM:
    """Turns projections plus affordances into rows; holds no I/O."""

    def __init__(
        self,
        cache: ListingCache,
        workflow: ResponseWorkflow,
        *,
        on_render: Optional[RenderFn] = None,
    ) -> None:
        self.cache = cache
        self.workflow = workflow
        self.on_render = on_render
        cache.subscribe(self._on_projection)
        workflow.subscribe(self._on_affordance)

    def rows(self, projection: str) -> List[FeedRow]:
        return [
            self._to_row(view, owner_panel=projection == MINE)
            for view in self.cache.projection(projection)
        ]

    # ------------------------------------------------------------------
    def _on_projection(self, name: str, _views: Tuple[ListingView, ...]) -> None:
        self._render(name)

    def _on_affordance(self, listing_id: ListingId, _affordance: RespondAffordance) -> None:
        for name in PROJECTIONS:
            if any(view.id == listing_id for view in self.cache.projection(name)):
                self._render(name)

    def _render(self, name: str) -> None:
        if self.on_render:
            self.on_render(name, self.rows(name))

    def _to_row(self, view: ListingView, *, owner_panel: bool) -> FeedRow:
        listing = view.listing
        affordance = self.workflow.affordance(view)
        return FeedRow(
            listing_id=listing.id,
            title=listing.title,
            description=listing.description,
            price=f"{listing.price:.2f}",
            owner=listing.owner_name,
            created_at=self._format_ts(listing.created_at),
            can_delete=owner_panel and view.mine,
            responses_count=view.responses_count,
            respond=affordance,
            respond_label=RESPOND_LABELS[affordance],
            respond_enabled=affordance.enabled,
        )

    @staticmethod
    def _format_ts(epoch_s: int) -> str:
        """Render epoch seconds as local ``YYYY-MM-DD HH:MM`` labels."""
        if not epoch_s:
            return ""
        return datetime.fromtimestamp(epoch_s).strftime("%Y-%m-%d %H:%M")


__all__ = ["FeedRow", "FeedVM", "RESPOND_LABELS", "ToolbarState", "toolbar_state"]

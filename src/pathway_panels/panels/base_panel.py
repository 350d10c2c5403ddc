"""
Panel interface shared by the pathways table and the enrichment plot.

A panel holds a reference to the data object and a state dataclass. The host
application (a marimo notebook, see :mod:`pathway_panels.marimo_views`) calls
:meth:`Panel.render` to get a :class:`PanelView` and forwards selections from
upstream panels with :meth:`Panel.on_selection_changed`.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple

import anndata as ad
import plotly.graph_objects as go
import polars as pl

from pathway_panels.config import PanelsConfig


@dataclass(frozen=True)
class Selection:
    """A pathway picked in `source`, optionally with its member features."""
    source: str
    pathway_id: Optional[str]
    result_name: Optional[str] = None
    features: Optional[FrozenSet[str]] = None


@dataclass
class PanelView:
    """
    What a panel hands to the host for display.

    Exactly one of `table`, `figure` or `message` is the main content.
    """
    panel: str
    kind: str  # "table", "plot" or "message"
    title: str = ""
    table: Optional[pl.DataFrame] = None
    figure: Optional[go.Figure] = None
    message: Optional[str] = None
    selected: Optional[str] = None
    details: Any = None
    extra: dict = field(default_factory=dict)

    @property
    def available(self) -> bool:
        return self.kind != "message"


class Panel(ABC):
    """
    Base class for panels.

    Subclasses define the state type, the selection kinds they consume and
    emit, and how the state turns into a view.
    """
    panel_type: str = "Panel"

    def __init__(self, adata: ad.AnnData, state, config: PanelsConfig = None, name: str = None):
        self.adata = adata
        self.state = state
        self.config = config or PanelsConfig()
        self.name = name or f"{self.panel_type}1"

    @abstractmethod
    def render(self, state=None) -> PanelView:
        """Build the view for `state` (defaults to the panel's own state)."""

    @abstractmethod
    def on_selection_changed(self, selection: Selection) -> None:
        """Update the state from a selection made in another panel."""

    @abstractmethod
    def declared_inputs(self) -> Tuple[str, ...]:
        """Selection kinds this panel consumes."""

    @abstractmethod
    def declared_outputs(self) -> Tuple[str, ...]:
        """Selection kinds this panel emits."""

    def accepts(self, selection: Selection) -> bool:
        """True when `selection` comes from this panel's configured source."""
        source = getattr(self.state, "selection_source", None)
        return source is None or source == selection.source

    def message_view(self, message: str, title: str = "") -> PanelView:
        return PanelView(panel=self.name, kind="message", title=title, message=message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self.state!r})"

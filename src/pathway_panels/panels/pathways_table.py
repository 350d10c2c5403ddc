from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

import polars as pl
from loguru import logger

from pathway_panels.app_options import details_function, map_function_for
from pathway_panels.embedding import PATHWAY_COLUMN, pathways_metadata
from pathway_panels.errors import PathwayNotFoundError
from pathway_panels.panels.base_panel import Panel, PanelView, Selection


@dataclass
class PathwaysTableState:
    result_name: Optional[str] = None
    selected: Optional[str] = None
    search: str = ""
    search_columns: Dict[str, str] = field(default_factory=dict)
    sort_by: Optional[str] = None
    descending: bool = False
    hidden_columns: List[str] = field(default_factory=list)
    column_order: List[str] = field(default_factory=list)
    selection_source: Optional[str] = None


def _contains(column: str, needle: str) -> pl.Expr:
    return (
        pl.col(column)
        .cast(pl.Utf8)
        .str.to_lowercase()
        .str.contains(needle.lower(), literal=True)
        .fill_null(False)
    )


def filter_table(table: pl.DataFrame, search: str = "", search_columns: Dict[str, str] = None) -> pl.DataFrame:
    """
    Keep rows matching the global search and every per-column search.

    Matching is a case-insensitive substring test on the string form of the
    value. The global search looks at the columns that are plain scalars.
    """
    searchable = [
        name for name, dtype in table.schema.items()
        if not isinstance(dtype, (pl.List, pl.Array, pl.Struct))
    ]
    if search:
        table = table.filter(pl.any_horizontal([_contains(c, search) for c in searchable]))
    for column, needle in (search_columns or {}).items():
        if not needle:
            continue
        if column not in table.columns:
            logger.warning(f"Ignoring search on unknown column '{column}'")
            continue
        table = table.filter(_contains(column, needle))
    return table


def arrange_columns(table: pl.DataFrame, hidden: List[str] = (), order: List[str] = ()) -> pl.DataFrame:
    """
    Drop hidden columns and move `order` columns to the front.

    The pathway column is never hidden.
    """
    visible = [c for c in table.columns if c not in hidden or c == PATHWAY_COLUMN]
    front = [c for c in order if c in visible]
    return table.select(front + [c for c in visible if c not in front])


class PathwaysTable(Panel):
    """
    Grid of one embedded pathway result set.

    Selecting a row emits a pathway selection, enriched with the member
    features when a map function is registered for the result's pathway type.
    """
    panel_type = "PathwaysTable"

    def __init__(self, adata, state: PathwaysTableState = None, config=None, name: str = None):
        super().__init__(adata, state or PathwaysTableState(), config, name)
        if self.state.result_name is None:
            names = pathways_metadata(adata).result_names()
            if names:
                self.state = replace(self.state, result_name=names[0])

    def declared_inputs(self) -> Tuple[str, ...]:
        return ("pathway",)

    def declared_outputs(self) -> Tuple[str, ...]:
        return ("pathway",)

    def result_table(self, state: PathwaysTableState = None) -> Optional[pl.DataFrame]:
        state = state or self.state
        return pathways_metadata(self.adata).results.get(state.result_name)

    def render(self, state: PathwaysTableState = None) -> PanelView:
        state = state or self.state
        table = self.result_table(state)
        if table is None:
            logger.warning(f"{self.name}: result set '{state.result_name}' is not available")
            return self.message_view(
                f"Pathway results '{state.result_name}' are not available.", title=str(state.result_name)
            )

        shown = filter_table(table, state.search, state.search_columns)
        if state.sort_by is not None:
            if state.sort_by in shown.columns:
                shown = shown.sort(state.sort_by, descending=state.descending, nulls_last=True)
            else:
                logger.warning(f"{self.name}: cannot sort by unknown column '{state.sort_by}'")
        shown = arrange_columns(shown, state.hidden_columns, state.column_order)

        details = self.details(state) if state.selected is not None else None
        return PanelView(
            panel=self.name,
            kind="table",
            title=state.result_name,
            table=shown,
            selected=state.selected,
            details=details,
            extra={"n_total": table.height, "n_shown": shown.height},
        )

    def pathway_ids(self, state: PathwaysTableState = None) -> List[str]:
        table = self.result_table(state)
        return [] if table is None else table[PATHWAY_COLUMN].cast(pl.Utf8).to_list()

    def select(self, pathway_id: Optional[str]) -> Selection:
        """
        Select a row and return the selection to broadcast downstream.

        Passing None clears the selection.
        """
        if pathway_id is not None and pathway_id not in self.pathway_ids():
            raise PathwayNotFoundError(
                f"Pathway '{pathway_id}' is not in result set '{self.state.result_name}'"
            )
        self.state = replace(self.state, selected=pathway_id)
        features = self.selected_features()
        return Selection(
            source=self.name,
            pathway_id=pathway_id,
            result_name=self.state.result_name,
            features=None if features is None else frozenset(features),
        )

    def on_selection_changed(self, selection: Selection) -> None:
        if not self.accepts(selection) or selection.pathway_id is None:
            return
        if selection.pathway_id in self.pathway_ids():
            self.state = replace(self.state, selected=selection.pathway_id)
        else:
            logger.debug(f"{self.name}: ignoring upstream pathway '{selection.pathway_id}' not in table")

    def selected_features(self, state: PathwaysTableState = None) -> Optional[set]:
        """Feature ids of the selected pathway, via the pathway type's map function."""
        state = state or self.state
        if state.selected is None:
            return None
        ptype = pathways_metadata(self.adata).pathway_types.get(state.result_name)
        fn = map_function_for(self.adata, ptype)
        if fn is None:
            logger.debug(f"{self.name}: no map function for pathway type '{ptype}'")
            return None
        try:
            return set(fn(state.selected, self.adata))
        except Exception as e:
            logger.warning(f"{self.name}: map function for '{ptype}' failed on '{state.selected}': {e!r}")
            return None

    def details(self, state: PathwaysTableState = None):
        state = state or self.state
        fn = details_function(self.adata)
        if fn is None or state.selected is None:
            return None
        try:
            return fn(state.selected)
        except Exception as e:
            logger.warning(f"{self.name}: details function failed on '{state.selected}': {e!r}")
            return None

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from loguru import logger

from pathway_panels.embedding import pathways_metadata
from pathway_panels.enrichment_curve import EnrichmentCurve, enrichment_curve_for
from pathway_panels.enrichment_plotting import plot_enrichment_plotly
from pathway_panels.errors import EnrichmentPlotError, PathwaysDataUnavailableError
from pathway_panels.panels.base_panel import Panel, PanelView, Selection


@dataclass
class FgseaEnrichmentPlotState:
    result_name: Optional[str] = None
    pathway_id: Optional[str] = None
    gsea_param: Optional[float] = None
    selection_source: Optional[str] = None

    def __post_init__(self):
        if self.gsea_param is not None and self.gsea_param < 0:
            raise ValueError(f"gsea_param must be >= 0, got {self.gsea_param}")


class FgseaEnrichmentPlot(Panel):
    """
    Running enrichment score of the pathway selected upstream.

    Missing data and unknown pathways render as a message, never raise.
    """
    panel_type = "FgseaEnrichmentPlot"

    def __init__(self, adata, state: FgseaEnrichmentPlotState = None, config=None, name: str = None):
        super().__init__(adata, state or FgseaEnrichmentPlotState(), config, name)
        if self.state.result_name is None:
            names = pathways_metadata(adata).result_names()
            if names:
                self.state = replace(self.state, result_name=names[0])

    def declared_inputs(self) -> Tuple[str, ...]:
        return ("pathway",)

    def declared_outputs(self) -> Tuple[str, ...]:
        return ()

    def on_selection_changed(self, selection: Selection) -> None:
        if not self.accepts(selection):
            return
        changes = {"pathway_id": selection.pathway_id}
        if selection.result_name is not None:
            changes["result_name"] = selection.result_name
        self.state = replace(self.state, **changes)

    def curve(self, state: FgseaEnrichmentPlotState = None) -> EnrichmentCurve:
        state = state or self.state
        if state.result_name is None:
            raise PathwaysDataUnavailableError("No pathway result set embedded")
        gsea_param = state.gsea_param if state.gsea_param is not None else self.config.gsea_param
        return enrichment_curve_for(self.adata, state.result_name, state.pathway_id, gsea_param=gsea_param)

    def render(self, state: FgseaEnrichmentPlotState = None) -> PanelView:
        state = state or self.state
        if state.pathway_id is None:
            return self.message_view("Select a pathway to draw its enrichment plot.")
        try:
            curve = self.curve(state)
        except (EnrichmentPlotError, ValueError) as e:
            # ValueError: gsea_param set to a negative value after construction
            logger.warning(f"{self.name}: {e}")
            return self.message_view(str(e), title=state.pathway_id)

        figure = plot_enrichment_plotly(curve, self.config)
        return PanelView(
            panel=self.name,
            kind="plot",
            title=state.pathway_id,
            figure=figure,
            selected=state.pathway_id,
            extra={
                "enrichment_score": curve.enrichment_score,
                "peak_rank": curve.peak_rank,
                "n_hits": len(curve.hit_ranks),
                "n_features": curve.n_features,
            },
        )

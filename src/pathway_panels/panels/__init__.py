"""Panels for pathway results: a results table and an enrichment plot."""

from pathway_panels.panels.base_panel import Panel, PanelView, Selection
from pathway_panels.panels.pathways_table import PathwaysTable, PathwaysTableState
from pathway_panels.panels.enrichment_plot import FgseaEnrichmentPlot, FgseaEnrichmentPlotState

__all__ = [
    "Panel",
    "PanelView",
    "Selection",
    "PathwaysTable",
    "PathwaysTableState",
    "FgseaEnrichmentPlot",
    "FgseaEnrichmentPlotState",
]

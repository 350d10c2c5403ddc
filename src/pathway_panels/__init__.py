"""Pathway result panels for AnnData objects."""

from pathway_panels.__about__ import __version__
from pathway_panels.app_options import (
    get_app_option,
    mapping_details_function,
    pathways_list_map_function,
    register_app_options,
    register_details_function,
    register_map_function,
)
from pathway_panels.embedding import (
    PathwaysMetadata,
    embed_pathways_results,
    features_stats,
    pathway_type,
    pathways_list,
    pathways_metadata,
    pathways_result_class,
    pathways_results,
    pathways_results_names,
)
from pathway_panels.enrichment_curve import EnrichmentCurve, compute_enrichment_curve, enrichment_curve_for
from pathway_panels.panels import (
    FgseaEnrichmentPlot,
    FgseaEnrichmentPlotState,
    PathwaysTable,
    PathwaysTableState,
    Selection,
)

__all__ = [
    "__version__",
    "PathwaysMetadata",
    "embed_pathways_results",
    "pathways_metadata",
    "pathways_results",
    "pathways_results_names",
    "pathways_result_class",
    "pathway_type",
    "pathways_list",
    "features_stats",
    "EnrichmentCurve",
    "compute_enrichment_curve",
    "enrichment_curve_for",
    "register_app_options",
    "register_map_function",
    "register_details_function",
    "get_app_option",
    "pathways_list_map_function",
    "mapping_details_function",
    "PathwaysTable",
    "PathwaysTableState",
    "FgseaEnrichmentPlot",
    "FgseaEnrichmentPlotState",
    "Selection",
]

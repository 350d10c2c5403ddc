"""
Pathways Explorer - Marimo Notebook

Embeds a simulated fgsea result in an AnnData object and links a pathways
table to an enrichment plot.
"""

import marimo

__generated_with = "0.16.5"
app = marimo.App(width="medium")


@app.cell
def _():
    import marimo as mo
    import numpy as np
    import pandas as pd
    import polars as pl
    import anndata as ad
    return ad, mo, np, pd, pl


@app.cell
def _(mo):
    mo.md(
        """
    # Pathways Explorer

    Select a row in the pathways table to draw the running enrichment score
    of that pathway. Pathway members are mapped back to the features of the
    AnnData object through the map function registered for the pathway type.
    """
    )
    return


@app.cell
def _(ad, np, pd, pl):
    from pathway_panels import embed_pathways_results

    rng = np.random.default_rng(1)
    genes = [f"gene{i}" for i in range(200)]
    adata = ad.AnnData(
        X=rng.normal(size=(20, len(genes))),
        var=pd.DataFrame(index=genes),
    )
    stats = dict(zip(genes, np.sort(rng.normal(size=len(genes)))[::-1]))
    pathways = {
        "simulated_up": genes[:15] + genes[100:105],
        "simulated_down": genes[-20:],
        "simulated_random": list(rng.choice(genes, size=25, replace=False)),
    }
    results = pl.DataFrame({
        "pathway": list(pathways),
        "pval": [1e-4, 3e-4, 0.6],
        "padj": [3e-4, 5e-4, 0.6],
        "NES": [2.1, -2.3, 0.2],
        "size": [len(v) for v in pathways.values()],
    })
    adata = embed_pathways_results(
        results, adata, name="simulated_fgsea", result_class="fgsea",
        pathway_type="simulated", pathways_list=pathways, features_stats=stats,
    )
    return adata, pathways


@app.cell
def _(adata, pathways):
    from pathway_panels import (
        mapping_details_function,
        pathways_list_map_function,
        register_details_function,
        register_map_function,
    )

    descriptions = {k: f"Simulated gene set with {len(v)} members." for k, v in pathways.items()}
    adata_opts = register_map_function(adata, "simulated", pathways_list_map_function("simulated"))
    adata_opts = register_details_function(adata_opts, mapping_details_function(descriptions))
    return (adata_opts,)


@app.cell
def _(adata_opts):
    from pathway_panels import FgseaEnrichmentPlot, FgseaEnrichmentPlotState, PathwaysTable
    from pathway_panels.marimo_views import table_element

    table_panel = PathwaysTable(adata_opts, name="PathwaysTable1")
    plot_panel = FgseaEnrichmentPlot(
        adata_opts, FgseaEnrichmentPlotState(selection_source="PathwaysTable1")
    )
    table_ui = table_element(table_panel)
    table_ui
    return plot_panel, table_panel, table_ui


@app.cell
def _(mo, plot_panel, table_panel, table_ui):
    from pathway_panels.marimo_views import details_element, sync_table_selection, view_element

    selection = sync_table_selection(table_panel, table_ui)
    plot_panel.on_selection_changed(selection)
    n_features = 0 if selection.features is None else len(selection.features)
    mo.vstack([
        details_element(table_panel.details()) or mo.md("_No pathway selected._"),
        mo.md(f"{n_features} features selected in the data object."),
        view_element(plot_panel.render()),
    ])
    return


if __name__ == "__main__":
    app.run()

import plotly.graph_objects as go
import polars as pl
import pytest

from pathway_panels.app_options import (
    mapping_details_function,
    pathways_list_map_function,
    register_details_function,
    register_map_function,
)
from pathway_panels.config import PanelsConfig
from pathway_panels.embedding import embed_pathways_results
from pathway_panels.errors import PathwayNotFoundError
from pathway_panels.panels import (
    FgseaEnrichmentPlot,
    FgseaEnrichmentPlotState,
    Panel,
    PathwaysTable,
    PathwaysTableState,
    Selection,
)


@pytest.fixture
def table_panel(embedded) -> PathwaysTable:
    return PathwaysTable(embedded, PathwaysTableState(result_name="fgsea_go"), name="PathwaysTable1")


class TestPathwaysTable:
    def test_is_a_panel(self, table_panel):
        assert isinstance(table_panel, Panel)
        assert table_panel.declared_outputs() == ("pathway",)
        assert table_panel.declared_inputs() == ("pathway",)

    def test_defaults_to_first_result_set(self, embedded):
        assert PathwaysTable(embedded).state.result_name == "fgsea_go"

    def test_render_full_table(self, table_panel, results):
        view = table_panel.render()
        assert view.kind == "table"
        assert view.available
        assert view.table.equals(results)
        assert view.extra == {"n_total": 3, "n_shown": 3}

    def test_unknown_result_renders_message(self, embedded):
        panel = PathwaysTable(embedded, PathwaysTableState(result_name="missing"))
        view = panel.render()
        assert view.kind == "message"
        assert "not available" in view.message

    def test_global_search_is_case_insensitive(self, table_panel):
        view = table_panel.render(PathwaysTableState(result_name="fgsea_go", search="go:2"))
        assert view.table["pathway"].to_list() == ["GO:2"]

    def test_column_search(self, table_panel):
        state = PathwaysTableState(result_name="fgsea_go", search_columns={"NES": "-"})
        view = table_panel.render(state)
        assert view.table["pathway"].to_list() == ["GO:2", "GO:3"]

    def test_sort_hide_and_order(self, table_panel):
        state = PathwaysTableState(
            result_name="fgsea_go",
            sort_by="padj",
            descending=True,
            hidden_columns=["pval", "pathway"],
            column_order=["NES"],
        )
        view = table_panel.render(state)
        assert view.table.columns == ["NES", "pathway", "padj", "size"]
        assert view.table["pathway"].to_list() == ["GO:3", "GO:2", "GO:1"]

    def test_select_emits_selection(self, table_panel):
        selection = table_panel.select("GO:1")
        assert selection == Selection(source="PathwaysTable1", pathway_id="GO:1", result_name="fgsea_go")
        assert table_panel.state.selected == "GO:1"
        assert table_panel.render().selected == "GO:1"

    def test_select_unknown_pathway_keeps_state(self, table_panel):
        table_panel.select("GO:1")
        with pytest.raises(PathwayNotFoundError):
            table_panel.select("GO:404")
        assert table_panel.state.selected == "GO:1"

    def test_clear_selection(self, table_panel):
        table_panel.select("GO:1")
        selection = table_panel.select(None)
        assert selection.pathway_id is None
        assert table_panel.state.selected is None

    def test_upstream_selection(self, table_panel):
        table_panel.on_selection_changed(Selection(source="other", pathway_id="GO:3"))
        assert table_panel.state.selected == "GO:3"
        table_panel.on_selection_changed(Selection(source="other", pathway_id="GO:404"))
        assert table_panel.state.selected == "GO:3"

    def test_map_function_adds_features(self, embedded):
        adata = register_map_function(embedded, "GO", pathways_list_map_function("GO"))
        panel = PathwaysTable(adata, PathwaysTableState(result_name="fgsea_go"))
        selection = panel.select("GO:2")
        # gX is not a feature of the data object
        assert selection.features == frozenset({"g5", "g6"})

    def test_no_map_function(self, table_panel):
        table_panel.select("GO:1")
        assert table_panel.selected_features() is None

    def test_details(self, embedded):
        adata = register_details_function(embedded, mapping_details_function({"GO:1": "first process"}))
        panel = PathwaysTable(adata, PathwaysTableState(result_name="fgsea_go"))
        assert panel.details() is None
        panel.select("GO:1")
        assert "first process" in panel.details()
        assert "first process" in panel.render().details

    def test_failing_details_function_yields_no_details(self, embedded):
        def lookup(pathway_id):
            raise KeyError(pathway_id)

        adata = register_details_function(embedded, lookup)
        panel = PathwaysTable(adata, PathwaysTableState(result_name="fgsea_go"))
        panel.select("GO:1")
        assert panel.details() is None
        view = panel.render()
        assert view.kind == "table"
        assert view.details is None

    def test_failing_map_function_yields_no_features(self, embedded):
        def members(pathway_id, adata):
            raise RuntimeError("lookup service down")

        adata = register_map_function(embedded, "GO", members)
        panel = PathwaysTable(adata, PathwaysTableState(result_name="fgsea_go"))
        selection = panel.select("GO:2")
        assert selection.pathway_id == "GO:2"
        assert selection.features is None

    def test_caller_state_is_not_mutated(self, embedded):
        state = PathwaysTableState()
        panel = PathwaysTable(embedded, state)
        assert panel.state.result_name == "fgsea_go"
        assert state.result_name is None

    def test_search_skips_list_columns(self, adata):
        results = pl.DataFrame({"pathway": ["A", "B"], "leadingEdge": [["g1"], ["g2"]]})
        embedded = embed_pathways_results(results, adata, name="le")
        view = PathwaysTable(embedded).render(PathwaysTableState(result_name="le", search="b"))
        assert view.table["pathway"].to_list() == ["B"]


class TestFgseaEnrichmentPlot:
    def test_interface(self, embedded):
        panel = FgseaEnrichmentPlot(embedded)
        assert panel.declared_inputs() == ("pathway",)
        assert panel.declared_outputs() == ()
        assert panel.state.result_name == "fgsea_go"

    def test_no_selection_renders_message(self, embedded):
        view = FgseaEnrichmentPlot(embedded).render()
        assert view.kind == "message"

    def test_render_plot(self, embedded):
        panel = FgseaEnrichmentPlot(embedded, FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:1"))
        view = panel.render()
        assert view.kind == "plot"
        assert isinstance(view.figure, go.Figure)
        assert view.extra["n_hits"] == 3
        assert view.extra["n_features"] == 6
        assert view.extra["enrichment_score"] > 0

    def test_pathway_not_found_renders_message(self, embedded):
        panel = FgseaEnrichmentPlot(embedded, FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:404"))
        view = panel.render()
        assert view.kind == "message"
        assert "not found" in view.message

    def test_missing_data_renders_message(self, adata, results):
        plain = embed_pathways_results(results, adata, name="plain")
        panel = FgseaEnrichmentPlot(plain, FgseaEnrichmentPlotState(pathway_id="GO:1"))
        view = panel.render()
        assert view.kind == "message"
        assert "not available" in view.message

    def test_nothing_embedded_renders_message(self, adata):
        view = FgseaEnrichmentPlot(adata, FgseaEnrichmentPlotState(pathway_id="GO:1")).render()
        assert view.kind == "message"

    def test_follows_table_selection(self, table_panel, embedded):
        plot = FgseaEnrichmentPlot(embedded, FgseaEnrichmentPlotState(selection_source="PathwaysTable1"))
        plot.on_selection_changed(table_panel.select("GO:2"))
        assert plot.state.pathway_id == "GO:2"
        assert plot.render().extra["enrichment_score"] < 0

    def test_ignores_other_sources(self, embedded):
        plot = FgseaEnrichmentPlot(embedded, FgseaEnrichmentPlotState(selection_source="PathwaysTable1"))
        plot.on_selection_changed(Selection(source="PathwaysTable2", pathway_id="GO:2"))
        assert plot.state.pathway_id is None

    def test_state_gsea_param_overrides_config(self, embedded):
        state = FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:1", gsea_param=0)
        curve = FgseaEnrichmentPlot(embedded, state).curve()
        assert curve.gsea_param == 0

    def test_pathway_missing_from_result_table_renders_message(self, adata, results, pathways, stats):
        # GO:3 has a gene set and ranked members but no row in this result table
        subset = embed_pathways_results(
            results.filter(pl.col("pathway") == "GO:1"), adata, name="fgsea_go",
            pathway_type="GO", pathways_list=pathways, features_stats=stats,
        )
        panel = FgseaEnrichmentPlot(subset, FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:3"))
        view = panel.render()
        assert view.kind == "message"
        assert "not found" in view.message

    def test_negative_gsea_param_rejected(self):
        with pytest.raises(ValueError, match="gsea_param"):
            FgseaEnrichmentPlotState(gsea_param=-1)

    def test_negative_gsea_param_renders_message(self, embedded):
        panel = FgseaEnrichmentPlot(embedded, FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:1"))
        panel.state.gsea_param = -1
        view = panel.render()
        assert view.kind == "message"
        assert "gsea_param" in view.message

    def test_negative_config_gsea_param_renders_message(self, embedded):
        config = PanelsConfig()
        config.gsea_param = -0.5
        panel = FgseaEnrichmentPlot(
            embedded, FgseaEnrichmentPlotState(result_name="fgsea_go", pathway_id="GO:1"), config=config
        )
        assert panel.render().kind == "message"

    def test_caller_state_is_not_mutated(self, embedded):
        state = FgseaEnrichmentPlotState(pathway_id="GO:1")
        panel = FgseaEnrichmentPlot(embedded, state)
        assert panel.state.result_name == "fgsea_go"
        assert state.result_name is None

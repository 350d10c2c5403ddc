import matplotlib
matplotlib.use("Agg")

import plotly.graph_objects as go
import pytest
from matplotlib.figure import Figure

from pathway_panels.config import PanelsConfig
from pathway_panels.enrichment_curve import compute_enrichment_curve
from pathway_panels.enrichment_plotting import plot_enrichment_matplotlib, plot_enrichment_plotly


@pytest.fixture
def curve(stats):
    return compute_enrichment_curve(["g1", "g2", "g3"], stats, pathway_id="GO:1")


def test_plotly_figure(curve):
    fig = plot_enrichment_plotly(curve, PanelsConfig(curve_color="blue"))
    assert isinstance(fig, go.Figure)
    line, ticks = fig.data
    assert line.line.color == "blue"
    assert list(line.x) == [0, 0, 1, 1, 2, 2, 3, 7]
    # three points per tick: bottom, top, gap
    assert len(ticks.x) == 3 * len(curve.hit_ranks)
    assert fig.layout.title.text == "GO:1"
    assert fig.layout.xaxis.title.text == "rank"


def test_plotly_custom_title(curve):
    assert plot_enrichment_plotly(curve, title="custom").layout.title.text == "custom"


def test_matplotlib_figure(curve):
    fig = plot_enrichment_matplotlib(curve)
    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert ax.get_title() == "GO:1"
    assert ax.get_xlim() == (0, curve.n_features + 1)


def test_matplotlib_draws_on_given_axes(curve):
    import matplotlib.pyplot as plt
    fig, ax = plt.subplots()
    assert plot_enrichment_matplotlib(curve, ax=ax) is fig

import matplotlib.pyplot as plt
import numpy as np
import plotly.graph_objects as go

from pathway_panels.config import PanelsConfig
from pathway_panels.enrichment_curve import EnrichmentCurve


def _tick_height(curve: EnrichmentCurve) -> float:
    spread = max(curve.tops.max(), 0.0) - min(curve.bottoms.min(), 0.0)
    return spread / 8 if spread > 0 else 0.1


def plot_enrichment_plotly(curve: EnrichmentCurve, config: PanelsConfig = None, title: str = None) -> go.Figure:
    """
    Interactive enrichment plot: step curve, ES lines and hit ticks.

    Ticks are drawn below the zero line, one per pathway member.
    """
    config = config or PanelsConfig()
    x, y = curve.step_points()
    tick = _tick_height(curve)
    max_top = float(curve.tops.max())
    min_bottom = float(curve.bottoms.min())

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=x, y=y,
        mode="lines",
        line=dict(color=config.curve_color, width=2),
        name="running score",
        hovertemplate="rank %{x}<br>score %{y:.3f}<extra></extra>",
    ))

    # one segment per hit, separated by None so a single trace draws them all
    tick_x = np.repeat(curve.hit_ranks, 3).astype(object)
    tick_y = np.tile([-tick / 2, tick / 2, None], len(curve.hit_ranks))
    tick_x[2::3] = None
    fig.add_trace(go.Scatter(
        x=tick_x, y=tick_y,
        mode="lines",
        line=dict(color=config.ticks_color, width=1),
        name="hits",
        customdata=np.repeat(curve.hit_features, 3),
        hovertemplate="%{customdata} (rank %{x})<extra></extra>",
    ))

    for level, dash in ((max_top, "dash"), (min_bottom, "dash"), (0.0, "solid")):
        color = config.es_line_color if level != 0.0 else "black"
        fig.add_hline(y=level, line=dict(color=color, dash=dash, width=1))

    fig.update_layout(
        title=title or curve.pathway_id,
        xaxis_title="rank",
        yaxis_title="enrichment score",
        width=config.plot_width,
        height=config.plot_height,
        showlegend=False,
        template="plotly_white",
    )
    fig.update_xaxes(range=[0, curve.n_features + 1])
    return fig


def plot_enrichment_matplotlib(curve: EnrichmentCurve, config: PanelsConfig = None, ax=None, title: str = None):
    """
    Static version of :func:`plot_enrichment_plotly` for PNG/PDF export.

    Returns the matplotlib Figure.
    """
    config = config or PanelsConfig()
    if ax is None:
        fig, ax = plt.subplots(figsize=(config.plot_width / 100, config.plot_height / 100), dpi=100)
    else:
        fig = ax.figure

    x, y = curve.step_points()
    tick = _tick_height(curve)
    ax.plot(x, y, color=config.curve_color, lw=1.5)
    ax.vlines(curve.hit_ranks, -tick / 2, tick / 2, color=config.ticks_color, lw=0.5)
    ax.axhline(curve.tops.max(), color=config.es_line_color, ls="--", lw=0.8)
    ax.axhline(curve.bottoms.min(), color=config.es_line_color, ls="--", lw=0.8)
    ax.axhline(0, color="k", lw=0.5)

    ax.set_xlim(0, curve.n_features + 1)
    ax.set_xlabel("rank")
    ax.set_ylabel("enrichment score")
    ax.set_title(title or curve.pathway_id, fontsize=10)
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)
    return fig

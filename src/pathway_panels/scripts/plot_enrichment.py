from pathlib import Path

from cyclopts import App
from loguru import logger

from pathway_panels.config import PanelsConfig, get_configuration
from pathway_panels.enrichment_curve import compute_enrichment_curve
from pathway_panels.enrichment_plotting import plot_enrichment_matplotlib, plot_enrichment_plotly
from pathway_panels.errors import PathwayNotFoundError
from pathway_panels.rank_io import read_gmt, read_rnk

app = App(help="Draw the running enrichment score of one gene set from a .rnk and a .gmt file.")


def load_config(use_config_file: bool) -> PanelsConfig:
    if not use_config_file:
        return PanelsConfig()
    try:
        return get_configuration()
    except FileNotFoundError as e:
        logger.warning(f"{e} Using defaults.")
        return PanelsConfig()


@app.default()
def plot_enrichment(
    rnk_file: Path,
    gmt_file: Path,
    pathway: str,
    out_file: Path | None = None,
    gsea_param: float | None = None,
    use_config_file: bool = True,
) -> Path:
    """
    Plot the enrichment curve of `pathway`.

    Args:
        rnk_file: Ranked features, two tab-separated columns without header.
        gmt_file: Gene sets in GMT format.
        pathway: Gene set name as in the first GMT column.
        out_file: Output file; .html writes an interactive plotly figure, other
            suffixes (.png, .pdf, .svg) a matplotlib figure. Defaults to <pathway>.html.
        gsea_param: Weighting exponent, overrides the configuration.
        use_config_file: Read settings from the user configuration file when present.
    """
    config = load_config(use_config_file)
    if gsea_param is not None:
        config.gsea_param = gsea_param

    ranks = read_rnk(rnk_file)
    gene_sets = read_gmt(gmt_file)
    if pathway not in gene_sets:
        logger.error(f"Gene set '{pathway}' not found in {gmt_file}")
        raise PathwayNotFoundError(f"Gene set '{pathway}' not found in {gmt_file}")

    stats = dict(zip(ranks["feature"].to_list(), ranks["value"].to_list()))
    curve = compute_enrichment_curve(gene_sets[pathway], stats, config.gsea_param, pathway_id=pathway)
    logger.info(
        f"{pathway}: ES={curve.enrichment_score:.4f} at rank {curve.peak_rank}, "
        f"{len(curve.hit_ranks)} of {len(gene_sets[pathway])} members ranked"
    )

    if out_file is None:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in pathway)
        out_file = Path(f"{safe}.html")
    out_file.parent.mkdir(parents=True, exist_ok=True)
    if out_file.suffix.lower() == ".html":
        plot_enrichment_plotly(curve, config).write_html(out_file)
    else:
        fig = plot_enrichment_matplotlib(curve, config)
        fig.savefig(out_file, bbox_inches="tight")
    logger.info(f"Wrote enrichment plot: {out_file}")
    return out_file


if __name__ == '__main__':
    app()

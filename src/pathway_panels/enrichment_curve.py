"""
Running enrichment score for a single pathway.

Follows the fgsea ``plotEnrichment`` / ``calcGseaStat`` convention so that the
displayed curve matches the enrichment score reported by fgsea.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import List, Tuple

import anndata as ad
import numpy as np
import polars as pl
from loguru import logger

from pathway_panels.embedding import PATHWAY_COLUMN, pathways_metadata
from pathway_panels.errors import (
    DegeneratePathwayError,
    PathwayNotFoundError,
    PathwaysDataUnavailableError,
)


@dataclass
class EnrichmentCurve:
    """
    Result of a running-score walk over N ranked features.

    ``running_scores[i]`` is the cumulative score after rank ``ranks[i]``.
    ``tops`` and ``bottoms`` hold the score right after and right before each
    hit, in the order of ``hit_ranks``.
    """
    pathway_id: str
    ranked_features: List[str]
    ranks: np.ndarray
    running_scores: np.ndarray
    steps: np.ndarray
    hit_ranks: np.ndarray
    tops: np.ndarray
    bottoms: np.ndarray
    enrichment_score: float
    peak_rank: int
    gsea_param: float

    @property
    def n_features(self) -> int:
        return len(self.ranked_features)

    @property
    def hit_features(self) -> List[str]:
        return [self.ranked_features[r - 1] for r in self.hit_ranks]

    @property
    def leading_edge(self) -> List[str]:
        """Hits on the peak side of the walk, as reported by fgsea."""
        if self.enrichment_score >= 0:
            return [f for r, f in zip(self.hit_ranks, self.hit_features) if r <= self.peak_rank]
        return [f for r, f in zip(self.hit_ranks, self.hit_features) if r > self.peak_rank]

    def step_points(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Coordinates of the step curve drawn by fgsea.

        Starts at (0, 0), jumps from the bottom to the top at each hit and
        ends at (N + 1, 0).
        """
        xs = np.column_stack([self.hit_ranks - 1, self.hit_ranks]).ravel()
        ys = np.column_stack([self.bottoms, self.tops]).ravel()
        x = np.concatenate([[0], xs, [self.n_features + 1]])
        y = np.concatenate([[0.0], ys, [0.0]])
        return x, y

    def to_frame(self) -> pl.DataFrame:
        """One row per ranked feature, with the running score and a hit flag."""
        hits = np.zeros(self.n_features, dtype=bool)
        hits[self.hit_ranks - 1] = True
        return pl.DataFrame({
            "rank": self.ranks,
            "feature": self.ranked_features,
            "step": self.steps,
            "runningScore": self.running_scores,
            "isHit": hits,
        })


def rank_features(stats: Mapping) -> Tuple[List[str], np.ndarray]:
    """
    Sort features by decreasing statistic, dropping missing values.

    Ties keep the input order.
    """
    df = pl.DataFrame(
        {
            "feature": [str(k) for k in stats.keys()],
            "stat": [None if v is None else float(v) for v in stats.values()],
        },
        schema={"feature": pl.Utf8, "stat": pl.Float64},
    )
    n_input = df.height
    df = df.filter(pl.col("stat").is_not_null() & pl.col("stat").is_not_nan())
    if df.height < n_input:
        logger.debug(f"Dropped {n_input - df.height} features with missing statistics")
    df = df.sort("stat", descending=True, maintain_order=True)
    return df["feature"].to_list(), df["stat"].to_numpy()


def compute_enrichment_curve(
    pathway_features: Iterable,
    stats: Mapping,
    gsea_param: float = 1.0,
    pathway_id: str = "pathway",
) -> EnrichmentCurve:
    """
    Compute the weighted Kolmogorov-Smirnov running score of one pathway.

    Args:
        pathway_features: feature ids belonging to the pathway. Ids missing
            from `stats` are ignored.
        stats: feature id -> ranking statistic.
        gsea_param: weighting exponent; 1 weights hits by the statistic, 0
            gives the unweighted walk.
        pathway_id: label stored on the result.

    Raises:
        PathwayNotFoundError: no pathway member is ranked.
        DegeneratePathwayError: every ranked feature is a pathway member.
    """
    if gsea_param < 0:
        raise ValueError(f"gsea_param must be >= 0, got {gsea_param}")

    ranked, values = rank_features(stats)
    n = len(ranked)
    position = {f: i for i, f in enumerate(ranked)}
    hit_idx = np.array(
        sorted({position[str(f)] for f in pathway_features if str(f) in position}),
        dtype=int,
    )
    m = len(hit_idx)
    if m == 0:
        raise PathwayNotFoundError(f"Pathway '{pathway_id}' has no members among the {n} ranked features")
    if m == n:
        raise DegeneratePathwayError(
            f"Pathway '{pathway_id}' contains all {n} ranked features, no enrichment curve"
        )

    adjusted = np.sign(values) * np.abs(values) ** gsea_param
    max_abs = np.max(np.abs(adjusted))
    if max_abs > 0:
        adjusted = adjusted / max_abs
    weights = np.abs(adjusted[hit_idx])
    total = weights.sum()

    steps = np.full(n, -1.0 / (n - m))
    steps[hit_idx] = weights / total if total > 0 else 1.0 / m
    running = np.cumsum(steps)

    hit_ranks = hit_idx + 1
    tops = running[hit_idx]
    bottoms = tops - steps[hit_idx]
    max_p = tops.max()
    min_p = bottoms.min()
    if max_p > -min_p:
        es, peak_rank = float(max_p), int(hit_ranks[np.argmax(tops)])
    elif max_p < -min_p:
        es, peak_rank = float(min_p), int(hit_ranks[np.argmin(bottoms)] - 1)
    else:
        es, peak_rank = 0.0, 0
    logger.debug(f"Pathway '{pathway_id}': {m}/{n} hits, ES={es:.4f} at rank {peak_rank}")

    return EnrichmentCurve(
        pathway_id=pathway_id,
        ranked_features=ranked,
        ranks=np.arange(1, n + 1),
        running_scores=running,
        steps=steps,
        hit_ranks=hit_ranks,
        tops=tops,
        bottoms=bottoms,
        enrichment_score=es,
        peak_rank=peak_rank,
        gsea_param=gsea_param,
    )


def enrichment_curve_for(
    adata: ad.AnnData,
    result_name: str,
    pathway_id: str,
    gsea_param: float = 1.0,
) -> EnrichmentCurve:
    """
    Running score of `pathway_id` using the data embedded for `result_name`.

    Raises:
        PathwaysDataUnavailableError: the result set is unknown or lacks a
            pathways list or feature statistics.
        PathwayNotFoundError: `pathway_id` is not in the result table or the
            pathways list.
    """
    meta = pathways_metadata(adata)
    if result_name not in meta.results:
        raise PathwaysDataUnavailableError(f"No pathway result set named '{result_name}'")
    if not meta.has_curve_data(result_name):
        raise PathwaysDataUnavailableError(
            f"Pathways list or feature statistics not available for result set '{result_name}' "
            f"(pathway type: {meta.pathway_types.get(result_name)})"
        )
    table_ids = meta.results[result_name][PATHWAY_COLUMN].cast(pl.Utf8)
    if pathway_id not in table_ids.to_list():
        raise PathwayNotFoundError(f"Pathway '{pathway_id}' not found in result set '{result_name}'")
    pathways = meta.pathways[meta.pathway_types[result_name]]
    if pathway_id not in pathways:
        raise PathwayNotFoundError(f"Pathway '{pathway_id}' not found in the pathways list")
    return compute_enrichment_curve(
        pathways[pathway_id],
        meta.features_stats[result_name],
        gsea_param=gsea_param,
        pathway_id=pathway_id,
    )

"""
Attach pathway-analysis results to an AnnData object.

Results, gene sets and ranking statistics live in a typed side table,
:class:`PathwaysMetadata`, stored under ``adata.uns["pathway_panels"]``.
Every write goes through :func:`embed_pathways_results`, which returns a copy
of the object and never mutates its input.
"""
import math
from collections.abc import Mapping, Iterable
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import anndata as ad
import pandas as pd
import polars as pl
from loguru import logger

from pathway_panels.errors import MissingPathwayColumnError

NAMESPACE = "pathway_panels"
PATHWAY_COLUMN = "pathway"


@dataclass
class PathwaysMetadata:
    """
    Typed metadata for all embedded pathway result sets of one data object.

    Result tables, classes and pathway types are keyed by result name,
    pathways lists by pathway type and feature statistics by result name.
    """
    results: Dict[str, pl.DataFrame] = field(default_factory=dict)
    result_classes: Dict[str, str] = field(default_factory=dict)
    pathway_types: Dict[str, Optional[str]] = field(default_factory=dict)
    pathways: Dict[str, Dict[str, Tuple[str, ...]]] = field(default_factory=dict)
    features_stats: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def copy(self) -> "PathwaysMetadata":
        # registries are replaced, never mutated, so copying the mappings is enough
        return PathwaysMetadata(
            results=dict(self.results),
            result_classes=dict(self.result_classes),
            pathway_types=dict(self.pathway_types),
            pathways=dict(self.pathways),
            features_stats=dict(self.features_stats),
        )

    def result_names(self) -> List[str]:
        return list(self.results.keys())

    def has_curve_data(self, name: str) -> bool:
        """True when `name` has both a pathways list and feature statistics."""
        ptype = self.pathway_types.get(name)
        return ptype is not None and ptype in self.pathways and name in self.features_stats


def _as_polars(results) -> pl.DataFrame:
    if isinstance(results, pl.DataFrame):
        return results
    if isinstance(results, pd.DataFrame):
        return pl.from_pandas(results)
    raise TypeError(
        f"Pathway results must be a polars or pandas DataFrame, got {type(results).__name__}"
    )


def normalize_pathways_list(pathways_list: Mapping) -> Dict[str, Tuple[str, ...]]:
    """
    Convert a pathway -> members mapping into str keys and de-duplicated tuples.

    Member order is the order of first appearance.
    """
    if not isinstance(pathways_list, Mapping):
        raise TypeError("pathways_list must be a mapping of pathway id to feature ids")
    normalized = {}
    for pathway_id, members in pathways_list.items():
        if isinstance(members, str) or not isinstance(members, Iterable):
            raise TypeError(f"Members of pathway {pathway_id!r} must be a collection of feature ids")
        normalized[str(pathway_id)] = tuple(dict.fromkeys(str(m) for m in members))
    return normalized


def normalize_features_stats(features_stats) -> Dict[str, float]:
    """
    Convert feature statistics into a ``{feature: value}`` dict.

    Accepts a mapping, a pandas Series indexed by feature, or a polars
    DataFrame whose first two columns are feature and value (the layout of a
    ``.rnk`` file).
    """
    if isinstance(features_stats, pd.Series):
        items = features_stats.items()
    elif isinstance(features_stats, pl.DataFrame):
        if features_stats.width < 2:
            raise ValueError("features_stats DataFrame needs a feature and a value column")
        feature_col, value_col = features_stats.columns[:2]
        items = zip(features_stats[feature_col].to_list(), features_stats[value_col].to_list())
    elif isinstance(features_stats, Mapping):
        items = features_stats.items()
    else:
        raise TypeError(
            f"features_stats must be a mapping, pandas Series or polars DataFrame, got {type(features_stats).__name__}"
        )
    return {str(k): (math.nan if v is None else float(v)) for k, v in items}


def pathways_metadata(adata: ad.AnnData) -> PathwaysMetadata:
    """
    Return the pathway metadata attached to `adata` (empty when none is).
    """
    meta = adata.uns.get(NAMESPACE)
    if meta is None:
        return PathwaysMetadata()
    if not isinstance(meta, PathwaysMetadata):
        raise TypeError(
            f"adata.uns['{NAMESPACE}'] holds {type(meta).__name__}, expected PathwaysMetadata"
        )
    return meta


def embed_pathways_results(
    results,
    adata: ad.AnnData,
    name: str,
    result_class: str = "fgsea",
    pathway_type: Optional[str] = None,
    pathways_list: Optional[Mapping] = None,
    features_stats=None,
) -> ad.AnnData:
    """
    Embed a pathway result table in a copy of `adata`.

    Args:
        results: polars or pandas DataFrame with one row per pathway and a
            ``pathway`` column. A pandas frame is converted with
            ``pl.from_pandas``, which drops its index; keep anything needed
            from the index as a column (``df.reset_index()``) before embedding.
        adata: the data object the results refer to. Not modified.
        name: result set name; an existing entry with this name is replaced.
        result_class: tag describing the producing method, e.g. ``"fgsea"``.
        pathway_type: label of the pathway universe, e.g. ``"GO"``. Result sets
            sharing a type share one pathways list.
        pathways_list: mapping pathway id -> feature ids, stored for
            `pathway_type`.
        features_stats: ranking statistic per feature used to run the test.

    Returns:
        A copy of `adata` carrying the updated :class:`PathwaysMetadata`.

    Raises:
        MissingPathwayColumnError: the table has no ``pathway`` column.
        ValueError: empty name, or a pathways list without a pathway type.
    """
    table = _as_polars(results)
    if PATHWAY_COLUMN not in table.columns:
        logger.error(f"Result set '{name}' has no '{PATHWAY_COLUMN}' column: {table.columns}")
        raise MissingPathwayColumnError(
            f"Pathway results must contain a '{PATHWAY_COLUMN}' column, found: {', '.join(table.columns)}"
        )
    if not name:
        raise ValueError("Result set name must be a non-empty string")
    if pathways_list is not None and pathway_type is None:
        raise ValueError("pathway_type is required when pathways_list is given")

    pathways = normalize_pathways_list(pathways_list) if pathways_list is not None else None
    stats = normalize_features_stats(features_stats) if features_stats is not None else None

    meta = pathways_metadata(adata).copy()
    if name in meta.results:
        logger.info(f"Overwriting embedded result set '{name}'")
    meta.results[name] = table
    meta.result_classes[name] = result_class
    meta.pathway_types[name] = pathway_type
    if pathways is not None:
        meta.pathways[pathway_type] = pathways
    if stats is not None:
        meta.features_stats[name] = stats
    else:
        # stale statistics from an earlier embedding no longer describe this table
        meta.features_stats.pop(name, None)

    out = adata.copy()
    out.uns[NAMESPACE] = meta
    logger.info(
        f"Embedded result set '{name}' ({result_class}, {table.height} pathways, "
        f"type={pathway_type}, stats={'yes' if stats is not None else 'no'})"
    )
    return out


def _unknown(kind: str, key: str, available: List[str]) -> KeyError:
    return KeyError(f"No {kind} named '{key}'. Available: {', '.join(available) or 'none'}")


def pathways_results_names(adata: ad.AnnData) -> List[str]:
    return pathways_metadata(adata).result_names()


def pathways_results(adata: ad.AnnData, name: str) -> pl.DataFrame:
    """Return the embedded result table `name`."""
    meta = pathways_metadata(adata)
    if name not in meta.results:
        raise _unknown("pathway result set", name, meta.result_names())
    return meta.results[name]


def pathways_result_class(adata: ad.AnnData, name: str) -> str:
    meta = pathways_metadata(adata)
    if name not in meta.result_classes:
        raise _unknown("pathway result set", name, meta.result_names())
    return meta.result_classes[name]


def pathway_type(adata: ad.AnnData, name: str) -> Optional[str]:
    """Pathway type recorded for result set `name` (None if it was embedded without one)."""
    meta = pathways_metadata(adata)
    if name not in meta.pathway_types:
        raise _unknown("pathway result set", name, meta.result_names())
    return meta.pathway_types[name]


def pathways_list(adata: ad.AnnData, pathway_type: str) -> Dict[str, Tuple[str, ...]]:
    meta = pathways_metadata(adata)
    if pathway_type not in meta.pathways:
        raise _unknown("pathways list for type", pathway_type, list(meta.pathways))
    return meta.pathways[pathway_type]


def features_stats(adata: ad.AnnData, name: str) -> Dict[str, float]:
    meta = pathways_metadata(adata)
    if name not in meta.features_stats:
        raise _unknown("feature statistics for result set", name, list(meta.features_stats))
    return meta.features_stats[name]

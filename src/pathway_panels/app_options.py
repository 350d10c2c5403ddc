"""
Option registry scoped to a data object.

The registry is a plain mapping stored in ``adata.uns["app_options"]``. This
package registers two kinds of callables there:

- map functions, one per pathway type, ``(pathway_id, adata) -> set[str]``,
  turning a selected pathway into the feature ids it contains;
- a details function, ``(pathway_id) -> content``, rendered next to the
  pathways table for the selected row.
"""
from collections.abc import Callable, Mapping
from typing import Any, Optional

import anndata as ad
from loguru import logger

from pathway_panels.embedding import pathways_metadata

APP_OPTIONS_KEY = "app_options"
PATHWAYS_MAP_FUNCTIONS = "Pathways.map.functions"
PATHWAYS_DETAILS_FUNCTION = "PathwaysTable.select.details"

MapFunction = Callable[[str, ad.AnnData], set]
DetailsFunction = Callable[[str], Any]


def get_app_options(adata: ad.AnnData) -> dict:
    return dict(adata.uns.get(APP_OPTIONS_KEY, {}))


def get_app_option(adata: ad.AnnData, name: str, default=None):
    return adata.uns.get(APP_OPTIONS_KEY, {}).get(name, default)


def register_app_options(adata: ad.AnnData, **options) -> ad.AnnData:
    """
    Return a copy of `adata` with `options` merged into its option registry.

    Keys with dots in them can be passed with ``**{"a.b": value}``.
    """
    merged = get_app_options(adata)
    merged.update(options)
    out = adata.copy()
    out.uns[APP_OPTIONS_KEY] = merged
    logger.info(f"Registered app options: {', '.join(options)}")
    return out


def register_map_function(adata: ad.AnnData, pathway_type: str, fn: MapFunction) -> ad.AnnData:
    """Register `fn` as the map function of `pathway_type`, keeping the others."""
    if not callable(fn):
        raise TypeError(f"Map function for '{pathway_type}' is not callable")
    functions = dict(get_app_option(adata, PATHWAYS_MAP_FUNCTIONS, {}))
    functions[pathway_type] = fn
    return register_app_options(adata, **{PATHWAYS_MAP_FUNCTIONS: functions})


def register_details_function(adata: ad.AnnData, fn: DetailsFunction) -> ad.AnnData:
    if not callable(fn):
        raise TypeError("Details function is not callable")
    return register_app_options(adata, **{PATHWAYS_DETAILS_FUNCTION: fn})


def map_function_for(adata: ad.AnnData, pathway_type: Optional[str]) -> Optional[MapFunction]:
    if pathway_type is None:
        return None
    return get_app_option(adata, PATHWAYS_MAP_FUNCTIONS, {}).get(pathway_type)


def details_function(adata: ad.AnnData) -> Optional[DetailsFunction]:
    return get_app_option(adata, PATHWAYS_DETAILS_FUNCTION)


def pathways_list_map_function(pathway_type: str) -> MapFunction:
    """
    Map function backed by the pathways list embedded for `pathway_type`.

    Returns the pathway members that are also features of the data object.
    """
    def _map(pathway_id: str, adata: ad.AnnData) -> set:
        members = pathways_metadata(adata).pathways.get(pathway_type, {}).get(pathway_id, ())
        var_names = set(adata.var_names)
        return {m for m in members if m in var_names}

    return _map


def mapping_details_function(descriptions: Mapping) -> DetailsFunction:
    """
    Details function rendering a markdown snippet from a pathway -> description mapping.
    """
    def _details(pathway_id: str) -> str:
        text = descriptions.get(pathway_id)
        if text is None:
            return f"**{pathway_id}**\n\nNo description available."
        return f"**{pathway_id}**\n\n{text}"

    return _details

import anndata as ad
import numpy as np
import pandas as pd
import polars as pl
import pytest

from pathway_panels.embedding import embed_pathways_results


GENES = ["g1", "g2", "g3", "g4", "g5", "g6"]


@pytest.fixture
def adata() -> ad.AnnData:
    rng = np.random.default_rng(0)
    obs = pd.DataFrame(index=[f"cell{i}" for i in range(4)])
    var = pd.DataFrame(index=GENES)
    return ad.AnnData(X=rng.normal(size=(4, len(GENES))), obs=obs, var=var)


@pytest.fixture
def pathways() -> dict:
    return {
        "GO:1": ["g1", "g2", "g3"],
        "GO:2": ["g5", "g6", "gX"],
        "GO:3": ["g4"],
    }


@pytest.fixture
def stats() -> dict:
    return {"g1": 2.0, "g2": 1.0, "g3": -0.5, "g4": -1.0, "g5": -1.5, "g6": -3.0}


@pytest.fixture
def results() -> pl.DataFrame:
    return pl.DataFrame({
        "pathway": ["GO:1", "GO:2", "GO:3"],
        "pval": [0.001, 0.02, 0.5],
        "padj": [0.003, 0.03, 0.5],
        "NES": [1.8, -1.6, -0.4],
        "size": [3, 2, 1],
    })


@pytest.fixture
def embedded(adata, results, pathways, stats) -> ad.AnnData:
    return embed_pathways_results(
        results, adata, name="fgsea_go", result_class="fgsea",
        pathway_type="GO", pathways_list=pathways, features_stats=stats,
    )

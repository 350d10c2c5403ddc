from pathlib import Path
from typing import Dict, List

import polars as pl
from loguru import logger


def read_rnk(path: Path) -> pl.DataFrame:
    """
    Read a GSEA ``.rnk`` file: two tab-separated columns, feature and value, no header.

    Lines starting with ``#`` are skipped.
    """
    df = pl.read_csv(
        path,
        separator="\t",
        has_header=False,
        comment_prefix="#",
        schema={"feature": pl.Utf8, "value": pl.Float64},
    )
    logger.info(f"Read {df.height} ranked features from {path}")
    return df


def write_rnk(df: pl.DataFrame, path: Path) -> Path:
    with open(path, "wb") as f:
        f.write(df.select(df.columns[:2]).write_csv(separator="\t", include_header=False).encode())
    logger.info(f"Wrote rank file: {path}")
    return path


def read_gmt(path: Path) -> Dict[str, List[str]]:
    """
    Read a ``.gmt`` gene set file into ``{pathway: [members]}``.

    Each line is: name, description, then one member per tab-separated field.
    """
    pathways = {}
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            fields = [x.strip() for x in line.rstrip("\n").split("\t")]
            if not fields[0]:
                continue
            if len(fields) < 2:
                raise ValueError(f"{path}:{lineno}: expected name and description columns")
            pathways[fields[0]] = [m for m in fields[2:] if m]
    logger.info(f"Read {len(pathways)} gene sets from {path}")
    return pathways


def read_gmt_descriptions(path: Path) -> Dict[str, str]:
    """Description column of a ``.gmt`` file, keyed by gene set name."""
    descriptions = {}
    with open(path, "r") as f:
        for line in f:
            fields = line.rstrip("\n").split("\t")
            if len(fields) >= 2 and fields[0]:
                descriptions[fields[0]] = fields[1]
    return descriptions


def read_results_tsv(path: Path) -> pl.DataFrame:
    """
    Read a tab-separated pathway result table, e.g. fgsea output written with ``fwrite``.
    """
    df = pl.read_csv(path, separator="\t", infer_schema_length=10000)
    logger.info(f"Read results {path} with shape {df.shape}")
    return df

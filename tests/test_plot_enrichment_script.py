from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import pytest

from pathway_panels.errors import PathwayNotFoundError
from pathway_panels.scripts.plot_enrichment import plot_enrichment

TEST_DATA_DIR = Path(__file__).parent / 'data'


@pytest.fixture
def no_config(mocker):
    return mocker.patch(
        'pathway_panels.scripts.plot_enrichment.get_configuration',
        side_effect=FileNotFoundError("no config."),
    )


def test_writes_html(tmp_path, no_config):
    out = plot_enrichment(
        TEST_DATA_DIR / 'example.rnk', TEST_DATA_DIR / 'example.gmt', 'GO:1',
        out_file=tmp_path / 'go1.html',
    )
    assert out.exists()
    assert 'plotly' in out.read_text()
    no_config.assert_called_once()


def test_writes_png(tmp_path):
    out = plot_enrichment(
        TEST_DATA_DIR / 'example.rnk', TEST_DATA_DIR / 'example.gmt', 'GO:2',
        out_file=tmp_path / 'plots' / 'go2.png', gsea_param=0.0, use_config_file=False,
    )
    assert out.exists()
    assert out.stat().st_size > 0


def test_default_output_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = plot_enrichment(
        TEST_DATA_DIR / 'example.rnk', TEST_DATA_DIR / 'example.gmt', 'GO:1', use_config_file=False,
    )
    assert out == Path('GO_1.html')
    assert (tmp_path / 'GO_1.html').exists()


def test_unknown_gene_set(tmp_path):
    with pytest.raises(PathwayNotFoundError):
        plot_enrichment(
            TEST_DATA_DIR / 'example.rnk', TEST_DATA_DIR / 'example.gmt', 'GO:404',
            out_file=tmp_path / 'x.html', use_config_file=False,
        )

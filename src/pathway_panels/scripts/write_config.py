from cyclopts import App
from loguru import logger

from pathway_panels.config import write_initial_configuration

app = App()


@app.default()
def write_config(gsea_param: float = 1.0, page_size: int = 10, overwrite: bool = False):
    """
    Write a configuration file with default plotting settings.

    Args:
        gsea_param: Weighting exponent of the enrichment walk (0 = unweighted).
        page_size: Rows per page in the pathways table.
        overwrite: Replace an existing configuration file.
    The configuration file is located in:
    - Windows: %APPDATA%/pathway_panels/config.toml
    - macOS/Linux: ~/.config/pathway_panels/config.toml
    """
    try:
        return write_initial_configuration(gsea_param, page_size, overwrite=overwrite)
    except Exception as e:
        logger.error(f"Failed to create configuration file: {e}")
        raise


if __name__ == '__main__':
    app()

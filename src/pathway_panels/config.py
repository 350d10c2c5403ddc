import os
import tomli
import tomli_w
from pathlib import Path
from loguru import logger
from typing import Optional
from datetime import datetime
from dataclasses import dataclass, asdict, fields


@dataclass
class PanelsConfig:
    gsea_param: float = 1.0
    page_size: int = 10
    plot_width: int = 700
    plot_height: int = 450
    curve_color: str = "green"
    ticks_color: str = "black"
    es_line_color: str = "red"
    significance_column: str = "padj"
    creation_date: Optional[str] = None

    required = ['gsea_param', 'page_size', 'significance_column']

    def __post_init__(self):
        if self.gsea_param < 0:
            raise ValueError(f"gsea_param must be >= 0, got {self.gsea_param}")

    @classmethod
    def from_dict(cls, data: dict) -> "PanelsConfig":
        """
        Initialize PanelsConfig from dict, ignoring unknown keys.
        """
        missing = [key for key in cls.required if key not in data]
        if missing:
            raise ValueError(
                f"Configuration is missing required keys: {', '.join(missing)}"
            )
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def read_toml(cls, path: Path) -> "PanelsConfig":
        """
        Read TOML from `path`, validate required fields, and return a PanelsConfig instance.
        """
        with open(path, 'rb') as f:
            data = tomli.load(f)
        return cls.from_dict(data)

    def write_toml(self, path: Path) -> None:
        """
        Write the current configuration to TOML at `path`.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        # TOML has no null, drop unset optionals
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, 'wb') as f:
            tomli_w.dump(data, f)


def _get_config_path() -> Path:
    """
    Determine the platform-specific config.toml path for pathway_panels.
    """
    if os.name == 'nt':  # Windows
        config_dir = Path(os.environ.get('APPDATA', '')) / 'pathway_panels'
    else:
        config_dir = Path.home() / '.config' / 'pathway_panels'
    return config_dir / 'config.toml'


def get_configuration() -> PanelsConfig:
    """
    Get the configuration from a TOML file in a platform-independent way.

    The configuration file is located in:
    - Windows: %APPDATA%/pathway_panels/config.toml
    - macOS/Linux: ~/.config/pathway_panels/config.toml
    """
    config_path = _get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found at {config_path}. "
            f"Please create a configuration file using write_initial_configuration() and update it with your settings."
        )

    # Let any tomli or I/O errors propagate
    return PanelsConfig.read_toml(config_path)


def write_initial_configuration(gsea_param: float = 1.0, page_size: int = 10, overwrite: bool = False) -> Path:
    """
    Write an initial configuration file with default plotting settings.

    The configuration file is located in:
    - Windows: %APPDATA%/pathway_panels/config.toml
    - macOS/Linux: ~/.config/pathway_panels/config.toml
    """
    config_path = _get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.exists() and not overwrite:
        logger.info(f"Configuration file already exists at {config_path}, keeping it.")
        return config_path

    config = PanelsConfig(
        gsea_param=gsea_param,
        page_size=page_size,
        creation_date=datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    )
    config.write_toml(config_path)
    logger.info(f"Created initial configuration file at {config_path}")
    return config_path

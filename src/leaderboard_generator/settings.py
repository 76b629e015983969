"""Generator settings.

Settings are a structured OmegaConf config: defaults come from
:class:`GeneratorSettings`, an optional YAML file overrides them and keyword
overrides (usually CLI options) win over both.

Examples
--------
>>> settings = load_settings(site_root="site")
>>> str(settings.leaderboard_root)
'site/leaderboard'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from leaderboard_generator.exceptions import ConfigFileError

logger = logging.getLogger(__name__)

PACKAGED_TEMPLATE = Path(__file__).parent / "templates" / "leaderboard.html"


@dataclass
class GeneratorSettings:
    """Where the generator reads its template and writes its output.

    Parameters
    ----------
    site_root : str
        Root of the static site; holds the datastore and the root HTML pages.
    template_path : str, optional
        Page template. ``None`` selects the template shipped with the package.
    data_file : str
        Datastore file name under ``site_root``.
    leaderboard_dir : str
        Directory under ``site_root`` with one folder per leaderboard.
    """

    site_root: str = "."
    template_path: Optional[str] = None
    data_file: str = "leaderboard_data.json"
    leaderboard_dir: str = "leaderboard"

    def __post_init__(self) -> None:
        if not self.data_file:
            raise ValueError("data_file must not be empty")
        if not self.leaderboard_dir:
            raise ValueError("leaderboard_dir must not be empty")

    @property
    def site_path(self) -> Path:
        return Path(self.site_root)

    @property
    def template(self) -> Path:
        return Path(self.template_path) if self.template_path else PACKAGED_TEMPLATE

    @property
    def leaderboard_root(self) -> Path:
        return self.site_path / self.leaderboard_dir

    def page_path(self, leaderboard_id: str) -> Path:
        return self.leaderboard_root / leaderboard_id / "index.html"

    @property
    def data_url(self) -> str:
        """Datastore URL relative to a generated page."""
        depth = len(Path(self.leaderboard_dir).parts) + 1
        return "../" * depth + self.data_file


def load_settings(path: Optional[Union[str, Path]] = None, **overrides: Any) -> GeneratorSettings:
    """Merge defaults, an optional YAML file and keyword overrides.

    Overrides whose value is ``None`` are ignored so unset CLI options do not
    clobber the file.

    Raises
    ------
    ConfigFileError
        If the YAML file is missing, malformed or sets unknown keys.
    """
    base = OmegaConf.structured(GeneratorSettings)
    layers = [base]
    if path is not None:
        settings_path = Path(path)
        if not settings_path.exists():
            raise ConfigFileError(f"Settings file not found: {settings_path}")
        try:
            layers.append(OmegaConf.load(settings_path))
        except Exception as e:
            raise ConfigFileError(f"Failed to parse settings file {settings_path}: {e}") from e
        logger.debug("Loaded settings from %s", settings_path)

    cli_values = {key: value for key, value in overrides.items() if value is not None}
    if cli_values:
        layers.append(OmegaConf.create({key: str(value) for key, value in cli_values.items()}))

    try:
        merged = OmegaConf.merge(*layers)
        settings = OmegaConf.to_object(merged)
    except (OmegaConfBaseException, ValueError) as e:
        raise ConfigFileError(f"Invalid settings: {e}") from e
    return settings

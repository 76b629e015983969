"""Leaderboard generation pipeline.

Generation runs as explicit stages, each returning the input of the next::

    validate_stage -> render_stage -> write_stage -> merge_stage -> navigation_stage

Validation errors abort before any file is touched and a rendering failure
aborts before the page is written. Navigation problems in individual pages
are reported as warnings and never fail the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from leaderboard_generator.datastore import load_datastore, merge_leaderboard
from leaderboard_generator.exceptions import ConfigValidationError, LeaderboardGeneratorError, RenderError
from leaderboard_generator.navigation import NavigationSyncReport, sync_navigation
from leaderboard_generator.render import render_page
from leaderboard_generator.settings import GeneratorSettings
from leaderboard_generator.validator import ValidationIssue, validate

logger = logging.getLogger(__name__)


@dataclass
class ValidatedConfig:
    config: Dict[str, Any]
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def leaderboard_id(self) -> str:
        return self.config["id"]


@dataclass
class RenderedPage:
    validated: ValidatedConfig
    html: str


@dataclass
class GeneratedPage:
    validated: ValidatedConfig
    path: Path


@dataclass
class GenerationResult:
    """Everything one generator run produced.

    Attributes
    ----------
    leaderboard_id : str
        Id of the generated leaderboard.
    page_path : Path
        Written ``index.html``.
    data_path : Path
        Updated datastore.
    navigation : NavigationSyncReport, optional
        ``None`` when navigation sync was skipped.
    warnings : List[str]
        Non-fatal problems (configuration warnings, overwritten ids,
        pages whose navigation could not be updated).
    """

    leaderboard_id: str
    page_path: Path
    data_path: Path
    navigation: Optional[NavigationSyncReport] = None
    warnings: List[str] = field(default_factory=list)


def validate_stage(config: Mapping[str, Any]) -> ValidatedConfig:
    """Validate ``config`` or raise :class:`ConfigValidationError`."""
    result = validate(config)
    for warning in result.warnings:
        logger.warning("Configuration warning at %s", warning)
    if not result.valid:
        raise ConfigValidationError(result.errors)
    return ValidatedConfig(config=dict(config), warnings=result.warnings)


def render_stage(validated: ValidatedConfig, settings: GeneratorSettings) -> RenderedPage:
    """Render the page in memory; nothing is written yet."""
    template = settings.template
    try:
        html = render_page(validated.config, template, data_url=settings.data_url)
    except OSError as e:
        logger.error("Cannot read template %s: %s", template, e)
        raise RenderError(f"cannot read template {template}: {e}") from e
    return RenderedPage(validated=validated, html=html)


def write_stage(page: RenderedPage, settings: GeneratorSettings) -> GeneratedPage:
    """Write ``<site_root>/<leaderboard_dir>/<id>/index.html``."""
    path = settings.page_path(page.validated.leaderboard_id)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(page.html)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise LeaderboardGeneratorError(f"Failed to write {path}: {e}", "Could not write the leaderboard page") from e
    logger.info("Generated HTML file: %s", path)
    return GeneratedPage(validated=page.validated, path=path)


def merge_stage(page: GeneratedPage, settings: GeneratorSettings, today: Optional[date] = None) -> Path:
    return merge_leaderboard(page.validated.config, settings.site_path, today=today, data_file=settings.data_file)


def navigation_stage(page: GeneratedPage, settings: GeneratorSettings) -> NavigationSyncReport:
    return sync_navigation(page.validated.config, settings.site_path, leaderboard_dir=settings.leaderboard_dir)


def generate_leaderboard(
    config: Mapping[str, Any],
    settings: GeneratorSettings,
    skip_navigation: bool = False,
    today: Optional[date] = None,
) -> GenerationResult:
    """Validate, render and publish one leaderboard.

    Parameters
    ----------
    config : Mapping[str, Any]
        Parsed leaderboard configuration. It is not modified.
    settings : GeneratorSettings
        Output locations and template.
    skip_navigation : bool, default=False
        Leave the site pages' navigation menus untouched.
    today : date, optional
        Date stamp for the datastore record; defaults to the current UTC date.

    Returns
    -------
    GenerationResult

    Raises
    ------
    ConfigValidationError
        If the configuration is invalid. No file is touched.
    RenderError
        If the page cannot be rendered. No file is touched.
    DatastoreError
        If the existing datastore cannot be read or written.
    NavigationError
        If the site root does not exist.
    """
    validated = validate_stage(config)
    leaderboard_id = validated.leaderboard_id
    logger.info("Generating leaderboard: %s (%s)", validated.config["title"], leaderboard_id)

    warnings = [str(w) for w in validated.warnings]
    if leaderboard_id in load_datastore(settings.site_path, settings.data_file):
        message = f"Leaderboard with ID '{leaderboard_id}' already exists and will be overwritten"
        logger.warning(message)
        warnings.append(message)

    rendered = render_stage(validated, settings)
    generated = write_stage(rendered, settings)
    data_path = merge_stage(generated, settings, today=today)

    report = None
    if skip_navigation:
        logger.info("Skipping navigation update")
    else:
        report = navigation_stage(generated, settings)
        warnings.extend(report.warnings)

    logger.info("Leaderboard generation complete: %s", leaderboard_id)
    return GenerationResult(
        leaderboard_id=leaderboard_id,
        page_path=generated.path,
        data_path=data_path,
        navigation=report,
        warnings=warnings,
    )

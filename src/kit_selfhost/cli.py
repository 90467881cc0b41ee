"""
Command line interface for Font Awesome kit self-hosting
========================================================

Creates a kit build, waits for it to become ready, and publishes it to a
local self-hosting directory.
"""

import json
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path

import click

from .api.kit_build import KitBuild, create_kit_build, fetch_kit_metadata
from .core.config import KitSettings
from .core.exceptions import KitError
from .core.models import BuildStatus
from .selfhost.pipeline import SelfHostingPipeline
from .styles.collection import FamilyStyleCollection

logger = logging.getLogger(__name__)


def wait_for_build(
    build: KitBuild,
    pipeline: SelfHostingPipeline,
    interval_seconds: float,
    max_polls: int,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll a build until it is terminal or max_polls is exhausted; True if READY."""
    for attempt in range(max_polls):
        if build.is_terminal():
            break

        sleep(interval_seconds)
        build.poll(pipeline.query_client, pipeline.token_provider)
        logger.debug(f"Poll {attempt + 1}/{max_polls}: {build.status.value}")

    return build.is_ready()


def _load_settings(config: Path | None) -> KitSettings:
    if config:
        return KitSettings.from_yaml(config)
    return KitSettings()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration YAML file (optional)",
)
@click.pass_context
def cli(ctx, verbose, config):
    """Font Awesome kit self-hosting CLI."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    ctx.ensure_object(dict)

    try:
        settings = _load_settings(config)
    except KitError as e:
        raise click.ClickException(str(e)) from e

    logging.getLogger().setLevel(logging.DEBUG if verbose else settings.log_level.upper())
    ctx.obj["settings"] = settings


def _create_pipeline(ctx, show_progress: bool = False) -> SelfHostingPipeline:
    try:
        return SelfHostingPipeline.from_settings(ctx.obj["settings"], show_progress=show_progress)
    except KitError as e:
        raise click.ClickException(str(e)) from e


@cli.command(name="download")
@click.argument("kit_token")
@click.option(
    "--dest",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    help="Base directory for self-hosted kits (overrides configuration)",
)
@click.option("--no-overwrite", is_flag=True, help="Reuse an existing build directory")
@click.option("--progress", is_flag=True, help="Show download progress")
@click.pass_context
def download(ctx, kit_token, dest, no_overwrite, progress):
    """Build a kit and publish it for self-hosting."""
    settings = ctx.obj["settings"]
    if dest:
        settings.destination_base_dir = dest

    pipeline = _create_pipeline(ctx, show_progress=progress)

    try:
        build = create_kit_build(pipeline.query_client, pipeline.token_provider, kit_token)
        ready = wait_for_build(
            build, pipeline, settings.poll_interval_seconds, settings.max_polls
        )
    except KitError as e:
        logger.exception(f"Kit build failed: {e}")
        sys.exit(1)

    if not ready:
        if build.is_failed():
            click.echo(f"Kit build {build.build_id} failed on the server", err=True)
        else:
            click.echo(
                f"Kit build {build.build_id} not ready after {settings.max_polls} polls", err=True
            )
        sys.exit(1)

    result = pipeline.download_and_prepare_self_hosting(build, overwrite=not no_overwrite)

    if not result.success:
        errors = "; ".join(result.errors)
        click.echo(f"Self-hosting failed ({result.error_kind}): {errors}", err=True)
        sys.exit(1)

    if result.skipped:
        click.echo(f"Already published: {result.path}")
    else:
        click.echo(f"Published kit to {result.path}")


@cli.command(name="status")
@click.argument("kit_token")
@click.argument("build_id")
@click.pass_context
def status(ctx, kit_token, build_id):
    """Poll a kit build once and print its status."""
    pipeline = _create_pipeline(ctx)

    try:
        build = KitBuild(kit_token, build_id, BuildStatus.PENDING, None)
        build.poll(pipeline.query_client, pipeline.token_provider)
    except KitError as e:
        logger.exception(f"Status query failed: {e}")
        sys.exit(1)

    click.echo(json.dumps(build.to_dict(), indent=2))


@cli.command(name="styles")
@click.argument("kit_token")
@click.pass_context
def styles(ctx, kit_token):
    """Print the family styles of a kit's release."""
    pipeline = _create_pipeline(ctx)

    try:
        metadata = fetch_kit_metadata(pipeline.query_client, pipeline.token_provider, kit_token)
    except KitError as e:
        logger.exception(f"Kit metadata query failed: {e}")
        sys.exit(1)

    collection = FamilyStyleCollection.from_records(metadata.family_style_records())
    click.echo(json.dumps(collection.to_json_list(), indent=2))


if __name__ == "__main__":
    cli()

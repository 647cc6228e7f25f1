#!/usr/bin/env python3
"""Command line interface for the importer."""

import asyncio

import click

from content_importer import __version__
from content_importer.core.config import settings
from content_importer.core.errors import ImporterError
from content_importer.core.logging import configure_logging
from content_importer.importer import OUTPUT_FORMATS, Importer


async def run_import(importer: Importer, output_format: str, within: str) -> None:
    try:
        entries = await importer.get_entries(
            content_type=output_format,
            within=within or None,
            # Skip documents outside --within and overwrite rules before fetching assets
            target="fs",
        )
        await importer.to_files(entries)
    finally:
        await importer.aclose()

    importer.log_results()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name=settings.app_name)
@click.argument("source_type", metavar="TYPE")
@click.argument("target")
@click.option("--output", default=settings.OUTPUT_FOLDER, show_default=True, help="Output folder")
@click.option("--quiet", is_flag=True, help="Limit console output")
@click.option("--dryrun", is_flag=True, help="Do not write files")
@click.option("--overwrite", is_flag=True, help="Allow overwriting existing files")
@click.option(
    "--overwrite-allow",
    default="",
    help="Allow some entries to overwrite existing files, e.g. drafts",
)
@click.option(
    "--cacheduration",
    default=settings.CACHE_DURATION,
    show_default=True,
    help="Local fetch cache duration, e.g. 20m",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="markdown",
    show_default=True,
)
@click.option("--persist", default="", help="Persist target, e.g. github:owner/repo")
@click.option(
    "--assetrefs",
    type=click.Choice(["relative", "absolute", "colocate", "disabled"]),
    default="relative",
    show_default=True,
    help="How asset URLs are rewritten",
)
@click.option("--within", default="", help="Only import entries newer than, e.g. 30d")
@click.option("--preserve", default="", help="CSS selectors kept as HTML in markdown")
def main(
    source_type: str,
    target: str,
    output: str,
    quiet: bool,
    dryrun: bool,
    overwrite: bool,
    overwrite_allow: str,
    cacheduration: str,
    output_format: str,
    persist: str,
    assetrefs: str,
    within: str,
    preserve: str,
) -> None:
    """Import content of TYPE (rss, atom, youtubeuser, wordpress, bluesky,
    fediverse) from TARGET."""
    configure_logging(json_logs=settings.JSON_LOGS, level=settings.LOG_LEVEL)

    try:
        importer = Importer()
        importer.set_output_folder(output)
        importer.set_cache_duration(cacheduration)
        importer.set_verbose(not quiet)
        importer.set_safe_mode(not overwrite)
        importer.set_dry_run(dryrun)
        importer.add_source(source_type, target)

        importer.set_drafts_folder(settings.DRAFTS_FOLDER)
        importer.set_assets_folder(settings.ASSETS_FOLDER)
        importer.set_asset_reference_type(assetrefs)

        if preserve:
            importer.add_preserved(preserve)
        if persist:
            importer.set_persist_target(persist)
        importer.set_overwrite_allow(overwrite_allow)

        asyncio.run(run_import(importer, output_format, within))
    except ImporterError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()

import logging
import os
import pathlib
import sys
from typing import Any

import yaml

import click
from jsontranslate import parser, report

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "check": {
        "translation_folder": None,
        "workers": None,
    },
}


def load_config(config_file_path: str) -> dict[str, Any]:
    config: dict[str, Any] = {}
    try:
        with open(config_file_path, "r") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.error(f"File not found: {config_file_path}")
    except yaml.YAMLError as exc:
        logger.error(sys._getframe().f_code.co_name + " " + str(exc))
        sys.exit(1)

    merged = {}
    for section, defaults in DEFAULT_CONFIG.items():
        merged[section] = {**defaults, **(config.get(section) or {})}
    return merged


@click.group()
@click.version_option()
def cli() -> None:
    pass


@cli.command("check")
@click.option("--config-folder", default="config", help="Configuration folder path.")
@click.option(
    "--translation-folder",
    help="Folder holding one sub-folder of *.json files per language.",
)
@click.option("--workers", type=click.IntRange(min=1), help="Maximum number of worker threads.")
@click.option(
    "--markdown",
    "markdown_path",
    type=click.Path(dir_okay=False, writable=True),
    help="Also write the report as markdown to this file.",
)
@click.version_option()
def check(
    config_folder: str,
    translation_folder: str | None,
    workers: int | None,
    markdown_path: str | None,
) -> None:
    config_folder_path = os.path.abspath(config_folder)
    config_file_path = os.path.abspath(f"{config_folder_path}/config.yml")
    config = load_config(config_file_path)

    logging.basicConfig(
        level=logging.getLevelName(config["logging"]["level"]),
        format=config["logging"]["format"],
        datefmt=config["logging"]["datefmt"],
    )

    translation_folder = translation_folder or config["check"]["translation_folder"]
    if not translation_folder:
        raise click.UsageError("Missing option '--translation-folder'.")
    translation_folder_path = os.path.abspath(translation_folder)
    if not os.path.isdir(translation_folder_path):
        raise click.UsageError(f"Translation folder not found: {translation_folder_path}")

    if workers is None and config["check"]["workers"] is not None:
        try:
            workers = click.IntRange(min=1).convert(
                config["check"]["workers"], None, None
            )
        except click.BadParameter as exc:
            raise click.UsageError(f"Invalid check.workers in {config_file_path}: {exc}")

    languages = parser.discover_languages(translation_folder_path)
    sources = parser.discover_sources(translation_folder_path)
    result = report.check(sources, workers, languages)

    for line in report.render_text(result):
        click.echo(line)

    if markdown_path:
        pathlib.Path(markdown_path).write_text(report.render_markdown(result), "utf-8")
        logger.info(f"Markdown report written to {markdown_path}")

    sys.exit(1 if result.has_issues else 0)

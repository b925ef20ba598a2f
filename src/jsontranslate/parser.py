#!/usr/bin/python3
# Copyright (c) 2026 jsontranslate contributors
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
import json
import logging
import pathlib
import re
from typing import Any, Iterable

from jsontranslate.classes import (
    DuplicateKeyNote,
    LanguageIndex,
    LanguageUnavailable,
    LeafEntry,
    SourceFile,
)
from jsontranslate.errors import MalformedDocument

logger = logging.getLogger(__name__)

VARIABLE_REGEX = re.compile(r"\{([^{}]+)\}")


def discover_languages(root: str) -> list[str]:
    """Every top-level directory of ``root`` is a language, even an empty one."""
    return sorted(x.name for x in pathlib.Path(root).iterdir() if x.is_dir())


def discover_sources(root: str) -> list[SourceFile]:
    """Read every ``<root>/<language>/*.json`` file.

    Files that cannot be read are still returned, with ``error`` set, so the
    language they belong to is reported instead of silently skipped.
    """
    root_path = pathlib.Path(root)
    languages = [root_path / x for x in discover_languages(root)]
    sources = []
    for folder in languages:
        for file in sorted(folder.glob("*.json")):
            if not file.is_file():
                continue
            relative = file.relative_to(root_path).as_posix()
            try:
                sources.append(
                    SourceFile(folder.name, relative, file.read_text("utf-8"))
                )
            except (OSError, UnicodeDecodeError) as ex:
                logger.error(f"Error reading {relative}: {ex}")
                sources.append(SourceFile(folder.name, relative, None, str(ex)))

    logger.info(f"{len(languages)} language folders found.")
    logger.info(f"{len(sources)} translation files found across all folders.")
    return sources


def load_document(source: SourceFile) -> Any:
    if source.error is not None or source.contents is None:
        raise MalformedDocument(source.path, source.error or "file could not be read")
    try:
        return json.loads(source.contents)
    except json.JSONDecodeError as ex:
        raise MalformedDocument(source.path, str(ex)) from ex
    except RecursionError as ex:
        raise MalformedDocument(source.path, "document is nested too deeply") from ex


def _leaf_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def flatten_document(document: Any, path: str) -> list[tuple[str, LeafEntry]]:
    """Flatten a parsed JSON document into ``(dotted key, LeafEntry)`` pairs.

    Arrays are kept whole as a single leaf and empty objects produce nothing.
    """
    if not isinstance(document, dict):
        raise MalformedDocument(path, "root is not a JSON object")

    pairs = []
    # explicit worklist, children pushed in reverse so output keeps file order;
    # the root has no prefix, an empty-string key is a real path segment
    stack: list[tuple[str | None, Any]] = [(None, document)]
    while stack:
        prefix, node = stack.pop()
        if isinstance(node, dict):
            for key, value in reversed(list(node.items())):
                stack.append((str(key) if prefix is None else f"{prefix}.{key}", value))
        elif prefix is not None:
            pairs.append((prefix, LeafEntry(_leaf_value(node), path)))
    return pairs


def expand_keys(mapping: dict[str, Any]) -> dict[str, Any]:
    """Re-nest a flat dotted mapping into a tree."""
    tree: dict[str, Any] = {}
    for key, value in mapping.items():
        node = tree
        *parents, leaf = key.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return tree


def extract_variables(text: str) -> frozenset[str]:
    names = (match.strip() for match in VARIABLE_REGEX.findall(text))
    return frozenset(name for name in names if name)


def _flatten_source(source: SourceFile) -> list[tuple[str, LeafEntry]]:
    logger.debug(f"Parsing {source.path}")
    return flatten_document(load_document(source), source.path)


def build_language_index(
    language: str, sources: Iterable[SourceFile], workers: int | None = None
) -> LanguageIndex:
    ordered = sorted(sources, key=lambda x: x.path)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        flattened = list(executor.map(_flatten_source, ordered))

    index = LanguageIndex(language)
    for pairs in flattened:
        for key, entry in pairs:
            previous = index.entries.get(key)
            if previous is not None:
                note = DuplicateKeyNote(
                    language, key, previous.source_file, entry.source_file
                )
                logger.warning(
                    f'Key "{key}" in {entry.source_file} overrides {previous.source_file}'
                )
                index.notes.append(note)
            index.entries[key] = entry
    return index


def build_indexes(
    sources: Iterable[SourceFile],
    workers: int | None = None,
    languages: Iterable[str] = (),
) -> tuple[dict[str, LanguageIndex], list[LanguageUnavailable]]:
    """Build one index per language.

    ``languages`` lists languages known to exist even without any file; they
    get an empty index so every key is reported missing for them.
    """
    by_language: dict[str, list[SourceFile]] = defaultdict(list)
    for language in languages:
        by_language.setdefault(language, [])
    for source in sources:
        by_language[source.language].append(source)

    indexes: dict[str, LanguageIndex] = {}
    unavailable = []
    for language in sorted(by_language):
        try:
            indexes[language] = build_language_index(
                language, by_language[language], workers
            )
        except MalformedDocument as ex:
            logger.error(f"Error parsing {ex.path}: {ex.reason}")
            unavailable.append(LanguageUnavailable(language, str(ex)))
    return indexes, unavailable

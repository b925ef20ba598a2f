from concurrent.futures import ThreadPoolExecutor
import logging
import threading

from jsontranslate.classes import (
    ExtraKey,
    Finding,
    LanguageIndex,
    LeafEntry,
    MissingKey,
    VariableMismatch,
)
from jsontranslate.parser import extract_variables

logger = logging.getLogger(__name__)


class FindingCollector:
    """Append-only finding list shared by the comparison workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._findings: list[Finding] = []

    def add(self, finding: Finding) -> None:
        with self._lock:
            self._findings.append(finding)

    def findings(self) -> list[Finding]:
        with self._lock:
            return list(self._findings)


def key_union(indexes: dict[str, LanguageIndex]) -> list[str]:
    keys: set[str] = set()
    for index in indexes.values():
        keys.update(index.entries)
    return sorted(keys)


def presence_matrix(
    indexes: dict[str, LanguageIndex],
) -> dict[str, dict[str, LeafEntry]]:
    """Map every key to the entries of the languages that define it.

    Inner dicts are filled in ascending language order, so their first item
    is always the alphabetically first language having the key.
    """
    matrix: dict[str, dict[str, LeafEntry]] = {key: {} for key in key_union(indexes)}
    for language in sorted(indexes):
        for key, entry in indexes[language].entries.items():
            matrix[key][language] = entry
    return matrix


def _compare_key(
    key: str,
    present: dict[str, LeafEntry],
    languages: list[str],
    collector: FindingCollector,
) -> None:
    baseline = languages[0]
    reference_language, reference = next(iter(present.items()))

    for language in languages:
        if language not in present:
            collector.add(
                MissingKey(key, language, reference_language, reference.source_file)
            )

    if baseline not in present:
        for language, entry in present.items():
            collector.add(ExtraKey(key, language, entry.source_file))

    if len(present) < 2:
        return
    reference_variables = extract_variables(reference.value)
    for language, entry in present.items():
        if language == reference_language:
            continue
        variables = extract_variables(entry.value)
        if variables != reference_variables:
            collector.add(
                VariableMismatch(
                    key,
                    reference_language,
                    reference_variables,
                    language,
                    variables,
                    reference.source_file,
                    entry.source_file,
                )
            )


def compare_indexes(
    indexes: dict[str, LanguageIndex], workers: int | None = None
) -> list[Finding]:
    """Find missing keys, extra keys and variable mismatches across languages.

    Every absent (key, language) cell yields one MissingKey. Keys the baseline
    language (alphabetically first) lacks yield one ExtraKey per language
    having them. Variable sets are compared against the alphabetically first
    language defining the key. The returned list is unordered.
    """
    languages = sorted(indexes)
    if not languages:
        return []
    matrix = presence_matrix(indexes)
    logger.info(f"Comparing {len(matrix)} keys across {len(languages)} languages")

    collector = FindingCollector()
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_compare_key, key, present, languages, collector)
            for key, present in matrix.items()
        ]
        for future in futures:
            future.result()
    return collector.findings()

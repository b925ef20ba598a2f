from collections import Counter
import logging
from typing import Iterable

import click

from jsontranslate.classes import (
    DuplicateKeyNote,
    ExtraKey,
    Finding,
    LanguageUnavailable,
    MissingKey,
    Report,
    SourceFile,
    VariableMismatch,
)
from jsontranslate.compare import compare_indexes
from jsontranslate.parser import build_indexes

logger = logging.getLogger(__name__)

KIND_ORDER = {MissingKey.kind: 0, ExtraKey.kind: 1, VariableMismatch.kind: 2}


def _sort_key(finding: Finding) -> tuple[str, int, str]:
    return (finding.language, KIND_ORDER[finding.kind], finding.key)


def aggregate(
    findings: Iterable[Finding],
    unavailable: Iterable[LanguageUnavailable] = (),
    notes: Iterable[DuplicateKeyNote] = (),
    languages: Iterable[str] = (),
) -> Report:
    ordered = tuple(sorted(findings, key=_sort_key))
    unavailable = tuple(sorted(unavailable, key=lambda x: x.language))
    all_languages = set(languages)
    all_languages.update(x.language for x in ordered)
    all_languages.update(x.language for x in unavailable)

    counts = Counter(x.language for x in ordered)
    return Report(
        findings=ordered,
        unavailable=unavailable,
        notes=tuple(sorted(notes, key=lambda x: (x.language, x.key, x.file))),
        languages=tuple(sorted(all_languages)),
        counts={language: counts[language] for language in sorted(all_languages)},
    )


def check(
    sources: Iterable[SourceFile],
    workers: int | None = None,
    languages: Iterable[str] = (),
) -> Report:
    """Run the full consistency check over the given translation files.

    ``languages`` adds languages that have no file at all.
    """
    sources = list(sources)
    languages = set(languages) | {x.language for x in sources}
    indexes, unavailable = build_indexes(sources, workers, languages)
    findings = compare_indexes(indexes, workers)
    notes = [note for index in indexes.values() for note in index.notes]
    report = aggregate(findings, unavailable, notes, languages=languages)

    for language in report.languages:
        if report.counts[language]:
            logger.error(f"Found {report.counts[language]} issues for {language}")
        elif language in indexes:
            logger.info(f"No issues found for {language}")
    return report


def _format_variables(variables: frozenset[str]) -> str:
    return "{" + ", ".join(sorted(variables)) + "}"


def render_text(report: Report) -> list[str]:
    lines = []
    for language in report.languages:
        findings = report.findings_for(language)
        if not findings:
            continue
        lines.append("")
        lines.append(f"Checking {click.style(language.upper(), fg='blue', bold=True)}")

        missing = [x for x in findings if isinstance(x, MissingKey)]
        if missing:
            lines.append(click.style("Missing keys:", fg="red", bold=True))
            for finding in missing:
                lines.append(
                    f"   - Key: {click.style(finding.key, fg='red')}"
                    f" | Expected from: {finding.expected_in_language}"
                    f" ({click.style(finding.expected_file, fg='blue')})"
                )

        extra = [x for x in findings if isinstance(x, ExtraKey)]
        if extra:
            lines.append(click.style("Extra keys:", fg="yellow", bold=True))
            for finding in extra:
                lines.append(
                    f"   - Key: {click.style(finding.key, fg='yellow')}"
                    f" | File: {click.style(finding.file, fg='blue')}"
                )

        for finding in findings:
            if not isinstance(finding, VariableMismatch):
                continue
            lines.append(click.style("Variable mismatch detected!", fg="magenta", bold=True))
            lines.append(f"   - Key: {click.style(finding.key, fg='magenta')}")
            lines.append(
                f"   - Expected variables ({finding.reference_language.upper()}): "
                + click.style(_format_variables(finding.reference_variables), fg="green")
            )
            lines.append(
                f"   - Found variables ({finding.offending_language.upper()}): "
                + click.style(_format_variables(finding.offending_variables), fg="cyan")
            )
            lines.append(
                f"   - Location: Expected in {finding.reference_file}"
                f" but found in {finding.offending_file}"
            )

    for error in report.unavailable:
        lines.append("")
        lines.append(
            click.style("Language unavailable:", fg="red", bold=True)
            + f" {error.language.upper()} ({error.cause})"
        )

    lines.append("")
    lines.append(click.style("Translation Consistency Check Complete", bold=True, underline=True))
    if report.has_issues:
        impacted = [x for x in report.languages if report.counts[x]]
        if impacted:
            lines.append(
                f"{click.style('Error:', fg='red', bold=True)} {len(impacted)}"
                " language(s) impacted with inconsistent keys/variables."
            )
            lines.append(
                f"{click.style('Error:', fg='red', bold=True)}"
                f" {len(report.impacted_files())} file(s) impacted."
            )
        if report.unavailable:
            lines.append(
                f"{click.style('Error:', fg='red', bold=True)} {len(report.unavailable)}"
                " language(s) could not be checked."
            )
    else:
        lines.append(f"{click.style('Success:', fg='green', bold=True)} No translation issues found.")
    return lines


def _describe(finding: Finding) -> str:
    if isinstance(finding, MissingKey):
        return (
            f"Key missing, exists in {finding.expected_in_language}"
            f" (`{finding.expected_file}`)"
        )
    if isinstance(finding, ExtraKey):
        return f"Extra key in `{finding.file}`"
    return (
        f"Has variables `{_format_variables(finding.offending_variables)}`,"
        f" but {finding.reference_language} has"
        f" `{_format_variables(finding.reference_variables)}`"
    )


def render_markdown(report: Report) -> str:
    """Render the report as one markdown section per language."""
    markdown = ""
    unavailable = {x.language: x for x in report.unavailable}
    for language in report.languages:
        markdown += f"## {language}\n"
        if language in unavailable:
            markdown += f"**Language unavailable: {unavailable[language].cause}**\n\n"
            continue
        findings = report.findings_for(language)
        if not findings:
            markdown += "No issues found\n\n"
            continue
        markdown += "| Key | Issue |\n| ------- | --------- |\n"
        for finding in findings:
            markdown += f"| `{finding.key}` | {_describe(finding)} |\n"
        markdown += "\n"
    return markdown

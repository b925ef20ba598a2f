from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceFile:
    language: str
    path: str
    contents: str | None
    error: str | None = None


@dataclass(frozen=True)
class LeafEntry:
    value: str
    source_file: str


@dataclass(frozen=True)
class DuplicateKeyNote:
    language: str
    key: str
    previous_file: str
    file: str


@dataclass
class LanguageIndex:
    language: str
    entries: dict[str, LeafEntry] = field(default_factory=dict)
    notes: list[DuplicateKeyNote] = field(default_factory=list)


@dataclass(frozen=True)
class MissingKey:
    key: str
    language_missing_in: str
    expected_in_language: str
    expected_file: str

    kind = "missing"

    @property
    def language(self) -> str:
        return self.language_missing_in


@dataclass(frozen=True)
class ExtraKey:
    key: str
    language_having_extra: str
    file: str

    kind = "extra"

    @property
    def language(self) -> str:
        return self.language_having_extra


@dataclass(frozen=True)
class VariableMismatch:
    key: str
    reference_language: str
    reference_variables: frozenset[str]
    offending_language: str
    offending_variables: frozenset[str]
    reference_file: str
    offending_file: str

    kind = "variable_mismatch"

    @property
    def language(self) -> str:
        return self.offending_language


Finding = MissingKey | ExtraKey | VariableMismatch


@dataclass(frozen=True)
class LanguageUnavailable:
    language: str
    cause: str


@dataclass(frozen=True)
class Report:
    findings: tuple[Finding, ...]
    unavailable: tuple[LanguageUnavailable, ...] = ()
    notes: tuple[DuplicateKeyNote, ...] = ()
    languages: tuple[str, ...] = ()
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def has_issues(self) -> bool:
        return bool(self.findings) or bool(self.unavailable)

    def findings_for(self, language: str) -> list[Finding]:
        return [x for x in self.findings if x.language == language]

    def impacted_files(self) -> set[str]:
        files = set()
        for finding in self.findings:
            if isinstance(finding, MissingKey):
                files.add(finding.expected_file)
            elif isinstance(finding, ExtraKey):
                files.add(finding.file)
            else:
                files.add(finding.reference_file)
                files.add(finding.offending_file)
        return files

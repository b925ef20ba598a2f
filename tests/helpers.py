import json

from jsontranslate.classes import LanguageIndex, LeafEntry, SourceFile


def source(language, name, document):
    contents = document if isinstance(document, str) else json.dumps(document)
    return SourceFile(language, f"{language}/{name}", contents)


def index(language, entries, name="messages.json"):
    return LanguageIndex(
        language,
        {key: LeafEntry(value, f"{language}/{name}") for key, value in entries.items()},
    )

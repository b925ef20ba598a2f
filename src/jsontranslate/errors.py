class TranslationError(Exception):
    """Base class for errors raised while reading translation files."""


class MalformedDocument(TranslationError):
    """A translation file is not a JSON document with an object at its root."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason

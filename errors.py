from __future__ import annotations


class QuizError(Exception):
    pass


class LoadError(QuizError):
    """Either bank document could not be fetched or parsed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"failed to load {source}: {reason}")
        self.source = source
        self.reason = reason


class MalformedStorageError(QuizError):
    """A stored entry exists but is not the JSON we expect. Never leaves the persister."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"malformed value for {key}: {reason}")
        self.key = key


class InvalidNavigation(QuizError):
    pass

from __future__ import annotations


class MarkupError(Exception):
    """Base class for caller defects. Malformed author markup never raises."""


class MarkupInputError(MarkupError, TypeError):
    pass


class ClusterInvariantError(MarkupError):
    pass


class InputTooLargeError(MarkupError, ValueError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"input has {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit

from __future__ import annotations


class DifferenceError(Exception):
    """
    Fatal failure while reducing a document. No output is produced.
    """

    def __init__(self, message: str, *, source: str | None = None):
        super().__init__(message)
        self.source = source


class MalformedJsonError(DifferenceError, ValueError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"Unable to parse JSON from {source}: {reason}", source=source)


class SourceUnreadableError(DifferenceError, OSError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"Unable to read {source}: {reason}", source=source)


class GeometryError(DifferenceError, ValueError):
    """
    A polygonal operand could not be built or differenced by shapely.
    """

"""
Error taxonomy for chart generation.
"""
from __future__ import annotations


class ChartError(Exception):
    """Base class for chart generation failures."""


class RequestValidationError(ChartError):
    """The request body is missing a required field or is malformed."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(f"Badly formed request: {'; '.join(problems[:5])}")


class ConfigValidationError(ChartError):
    """The layout configuration failed validation."""

    def __init__(self, source: str, problems: list[str]):
        self.source = source
        self.problems = problems
        detail = "; ".join(problems[:5])
        super().__init__(f"Invalid layout configuration {source}: {detail}")


class ResourceLoadError(ChartError):
    """A decorative resource (background, icon, logo) could not be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to load {path}: {reason}")


class InternalConsistencyError(ChartError):
    """An unexpected value reached an exhaustive dispatch."""

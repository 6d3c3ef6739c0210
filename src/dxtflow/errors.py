from __future__ import annotations
from typing import List

from .validator import ValidationIssue, format_validation_errors


class DxtError(Exception):
    """Base class for errors surfaced to the user."""


class DiagramParseError(DxtError):
    """The file is not valid JSON."""

    def __init__(self, message: str, lineno: int = 0, colno: int = 0):
        super().__init__(message)
        self.lineno = lineno
        self.colno = colno


class StructuralValidationError(DxtError):
    """The document parsed but does not match its schema."""

    def __init__(self, issues: List[ValidationIssue], kind: str = "diagram"):
        self.issues = list(issues)
        self.kind = kind
        super().__init__(format_validation_errors(self.issues))

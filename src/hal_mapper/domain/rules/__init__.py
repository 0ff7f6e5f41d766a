"""Domain rules for HAL Mapper."""

from hal_mapper.domain.rules.validation import (
    Issue,
    IssueCategory,
    Severity,
    summarize,
    validate,
)

__all__ = [
    "Issue",
    "IssueCategory",
    "Severity",
    "summarize",
    "validate",
]

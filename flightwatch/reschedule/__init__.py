# Reschedule module - safe departure window search
from .search import (
    SafeWindowSearch,
    SafeWindowResult,
    CandidateResult,
    STATUS_RANK,
    top_issues,
)

__all__ = [
    "SafeWindowSearch",
    "SafeWindowResult",
    "CandidateResult",
    "STATUS_RANK",
    "top_issues",
]

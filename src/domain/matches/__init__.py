"""Match submission, review and aggregation."""

from domain.matches.aggregation import AggregationFailure, RescoreSummary, StatsAggregator
from domain.matches.service import (
    MatchLifecycleService,
    MatchPage,
    SubmitMatchRequest,
    VerificationResult,
)

__all__ = [
    "AggregationFailure",
    "MatchLifecycleService",
    "MatchPage",
    "RescoreSummary",
    "StatsAggregator",
    "SubmitMatchRequest",
    "VerificationResult",
]

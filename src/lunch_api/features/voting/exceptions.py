"""Domain exceptions for daily voting."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = [
    "AlreadyVotedError",
    "NoVotesError",
    "RestaurantNotAvailableError",
    "RestaurantNotAvailableTodayError",
    "VotingEndedError",
    "VotingNotStartedError",
    "VotingPeriodNotFoundError",
]


class VotingNotStartedError(AppError):
    code = "VOTING_NOT_STARTED"
    default_message = "Voting has not started yet"


class VotingEndedError(AppError):
    code = "VOTING_ENDED"
    default_message = "Voting period has ended"


class AlreadyVotedError(AppError):
    code = "ALREADY_VOTED"
    default_message = "You have already voted for today"


class RestaurantNotAvailableError(AppError):
    """Raised when voting for an inactive restaurant."""

    code = "RESTAURANT_NOT_AVAILABLE"
    default_message = "Restaurant is not available"


class RestaurantNotAvailableTodayError(AppError):
    """Raised when the restaurant is not part of the day's offered set."""

    code = "RESTAURANT_NOT_AVAILABLE_TODAY"
    default_message = "Restaurant is not available for voting today"


class VotingPeriodNotFoundError(AppError):
    code = "VOTING_PERIOD_NOT_FOUND"
    default_message = "No voting period found for this date"


class NoVotesError(AppError):
    code = "NO_VOTES"
    default_message = "No votes cast yet"

"""Pydantic schemas for daily voting."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.features.restaurants.schemas import RestaurantOut


class VoteReceipt(BaseSchema):
    """Returned after a vote is recorded."""

    voting_period_id: UUIDStr
    restaurant_id: UUIDStr
    vote_count: int


class RestaurantTally(BaseSchema):
    restaurant: RestaurantOut
    vote_count: int


class VotingResults(BaseSchema):
    date: dt.date
    voting_period_id: UUIDStr | None = None
    restaurants: list[RestaurantTally] = Field(default_factory=list)
    total_votes: int = 0
    winner: RestaurantOut | None = None
    is_complete: bool = False


class VotingWinner(BaseSchema):
    date: dt.date
    voting_period_id: UUIDStr
    restaurant: RestaurantOut
    vote_count: int


__all__ = ["RestaurantTally", "VoteReceipt", "VotingResults", "VotingWinner"]

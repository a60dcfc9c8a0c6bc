"""Pydantic schemas for game endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PlayerCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    avatar: str
    tech_level: str = "beginner"


class PlayerResponse(BaseModel):
    id: int
    username: str
    avatar: str
    total_points: int
    tech_level: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionStart(BaseModel):
    player_id: int
    tech_level: str | None = None
    scenarios_played: list[int] = Field(default_factory=list)


class SessionComplete(BaseModel):
    total_score: int = Field(ge=0)


class GameSessionResponse(BaseModel):
    id: int
    player_id: int
    tech_level: str
    scenarios_played: list[int]
    total_score: int
    start_time: datetime
    end_time: datetime | None = None
    is_completed: bool

    model_config = {"from_attributes": True}


class LeaderboardEntryResponse(BaseModel):
    player_id: int
    username: str
    avatar: str
    total_points: int
    tech_level: str
    rank: int
    games_played: int
    last_updated: datetime

    model_config = {"from_attributes": True}


class RebuildResponse(BaseModel):
    entries: int

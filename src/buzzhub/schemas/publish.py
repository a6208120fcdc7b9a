"""Pydantic schemas for publish requests.

Learn: The game pages speak camelCase JSON (teamName, scoreChange,
handicapApplied). Fields are snake_case in Python with camelCase aliases,
and payloads are dumped by alias so displays get back the keys they sent.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ─── Teams ──────────────────────────────────────────────

class Team(BaseModel):
    """One team as the admin page stores it.

    Unknown keys are kept and forwarded; the display owns this shape.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    name: str
    signal: str = Field(..., description="Buzzer letter for the team (A, B, ...)")
    score: Union[int, float] = 0
    handicap_applied: Optional[bool] = Field(
        None,
        alias="handicapApplied",
        description="Preliminary mode only",
    )


# ─── Publish update (admin → relay) ─────────────────────

class PublishUpdate(BaseModel):
    """Body of POST /publish-update. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True)

    teams: Optional[list[Team]] = None
    team_name: Optional[str] = Field(None, alias="teamName")
    score_change: Optional[Union[int, float]] = Field(None, alias="scoreChange")

    def teams_payload(self) -> Optional[list[dict]]:
        """Teams as the publisher sent them, extra keys and nulls included."""
        if self.teams is None:
            return None
        return [
            team.model_dump(by_alias=True, exclude_unset=True) for team in self.teams
        ]

    def score_update_payload(self) -> Optional[dict]:
        """Present only when both the team and the change were sent."""
        if self.team_name is None or self.score_change is None:
            return None
        return {"teamName": self.team_name, "scoreChange": self.score_change}


# ─── Result (relay → publisher) ─────────────────────────

class PublishResult(BaseModel):
    success: bool
    message: Optional[str] = None

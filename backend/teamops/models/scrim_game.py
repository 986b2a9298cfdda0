from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from teamops.models.scrim import Scrim


class GameResult(str, Enum):
    win = "Win"
    loss = "Loss"
    draw = "Draw"
    not_applicable = "N/A"


class ScrimGame(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("scrim_id", "game_number", name="uq_scrim_game_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    scrim_id: int = Field(foreign_key="scrim.id")
    owner_id: str
    game_number: int  # 1..N, contiguous per scrim
    result: GameResult = Field(default=GameResult.not_applicable, sa_column=Column(String, nullable=False))
    duration: Optional[str] = None
    notes: Optional[str] = None
    blue_side_pick: Optional[str] = None
    red_side_pick: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationship
    scrim: "Scrim" = Relationship(back_populates="games")

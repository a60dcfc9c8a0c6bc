"""Player model: trivia game participants."""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docdesk.database import Base


class Player(Base):
    __tablename__ = "game_players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    avatar: Mapped[str] = mapped_column(String(200), nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tech_level: Mapped[str] = mapped_column(String(30), nullable=False, default="beginner")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    sessions = relationship("GameSession", back_populates="player", lazy="selectin")

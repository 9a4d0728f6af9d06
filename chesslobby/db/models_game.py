from __future__ import annotations
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class GameRecord(Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    white_username: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.username", ondelete="SET NULL"), nullable=True
    )
    black_username: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.username", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # serialized by the rules engine, never read by the lobby
    rules_state: Mapped[str] = mapped_column(Text, nullable=False)

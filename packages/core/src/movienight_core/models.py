"""ORM models for rooms, their users and the movies they propose."""
from datetime import datetime, timezone
from typing import NewType

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from movienight_core.db import Base

RoomId = NewType("RoomId", int)
UserId = NewType("UserId", int)

ROOM_OPEN = "open"
ROOM_FINISHED = "finished"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Room(Base):
    __tablename__ = "rooms"
    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(16), nullable=False, unique=True, index=True)
    status = Column(String(16), nullable=False, default=ROOM_OPEN)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    # Set together with status=finished, never before
    winner_movie_id = Column(
        Integer,
        ForeignKey("movies.id", use_alter=True, name="fk_rooms_winner_movie_id"),
        nullable=True,
    )

    users = relationship("User", back_populates="room", foreign_keys="User.room_id")
    movies = relationship(
        "Movie", back_populates="room", foreign_keys="Movie.room_id", order_by="Movie.id"
    )
    winner = relationship("Movie", foreign_keys=[winner_movie_id])

    @property
    def is_finished(self) -> bool:
        return self.status == ROOM_FINISHED


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    token = Column(String, nullable=False, unique=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    is_host = Column(Boolean, nullable=False, default=False)

    room = relationship("Room", back_populates="users", foreign_keys=[room_id])


class Movie(Base):
    __tablename__ = "movies"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    year = Column(Integer, nullable=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    room = relationship("Room", back_populates="movies", foreign_keys=[room_id])


__all__ = [
    "Room",
    "User",
    "Movie",
    "RoomId",
    "UserId",
    "ROOM_OPEN",
    "ROOM_FINISHED",
]

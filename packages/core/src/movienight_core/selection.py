"""Finishing a room: pick one proposal at random and lock the room.

Every proposal is one equally weighted entry, so a user who proposed five
titles holds five chances. There is no re-roll; a finished room stays
finished.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from movienight_core.errors import ForbiddenError, InvalidStateError, ValidationError
from movienight_core.models import ROOM_FINISHED, ROOM_OPEN, Movie, Room, RoomId
from movienight_core.rooms import authenticate, load_room
from movienight_core.tokens import RandomSource

logger = logging.getLogger("movienight_core.selection")

FINISHED_MESSAGE = "Room finished!"


def finish_room(db: Session, rng: RandomSource, token: Optional[str]) -> Dict:
    if not (token or "").strip():
        raise ValidationError("token is required")

    user = authenticate(db, token)
    if not user.is_host:
        logger.warning("room.finish forbidden room=%s user=%s", user.room_id, user.id)
        raise ForbiddenError("Only the host can finish the room")

    room_id = RoomId(user.room_id)
    room = load_room(db, room_id, lock=True)
    if room.is_finished:
        raise InvalidStateError("Room already finished")

    movies = db.query(Movie).filter(Movie.room_id == room_id).order_by(Movie.id).all()
    if not movies:
        raise InvalidStateError("No movies to select from")

    winner = rng.choice(movies)
    # Guarded on status so a concurrent finish cannot overwrite the winner
    result = db.execute(
        update(Room)
        .where(Room.id == room_id, Room.status == ROOM_OPEN)
        .values(status=ROOM_FINISHED, winner_movie_id=winner.id)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidStateError("Room already finished")
    db.commit()
    logger.info("room.finish room=%s winner=%s entries=%d", room_id, winner.id, len(movies))
    return {
        "message": FINISHED_MESSAGE,
        "winner": {"id": winner.id, "title": winner.title, "year": winner.year},
    }


__all__ = ["finish_room", "FINISHED_MESSAGE"]

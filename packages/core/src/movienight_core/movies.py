"""Movie proposals within an open room."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from movienight_core.errors import InvalidStateError, ValidationError
from movienight_core.models import Movie, RoomId, UserId
from movienight_core.rooms import authenticate, list_movies, load_room

logger = logging.getLogger("movienight_core.movies")


def add_movie(db: Session, token: Optional[str], title: Optional[str], year: Optional[int] = None) -> Dict:
    """Record a proposal for the token's room and return the room's full list.

    The room row is re-read with a lock before the status check so the check
    and the insert belong to the same transaction.
    """
    title = (title or "").strip()
    if not (token or "").strip() or not title:
        raise ValidationError("token and title are required")

    user = authenticate(db, token)
    room_id = RoomId(user.room_id)
    room = load_room(db, room_id, lock=True)
    if room.is_finished:
        raise InvalidStateError("Room already finished")

    movie = Movie(title=title, year=year or None, room_id=room_id, user_id=UserId(user.id))
    db.add(movie)
    db.flush()
    movies = list_movies(db, room_id)
    db.commit()
    logger.info("movie.add room=%s movie=%s count=%d", room_id, movie.id, len(movies))
    return {"movies": movies}


__all__ = ["add_movie"]

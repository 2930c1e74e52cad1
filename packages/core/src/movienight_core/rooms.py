"""Room lifecycle: creating rooms, joining them and reading their state."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movienight_core.errors import AuthError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from movienight_core.models import Movie, Room, RoomId, User
from movienight_core.tokens import RandomSource

logger = logging.getLogger("movienight_core.rooms")

DEFAULT_CODE_LENGTH = 4
DEFAULT_MAX_ATTEMPTS = 5

T = TypeVar("T")


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_code(code: Optional[str]) -> str:
    """Join codes are stored upper-case; lookups ignore case and padding."""
    return _clean(code).upper()


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == "23505"
    message = str(orig).lower()
    return "unique" in message or "duplicate" in message


def insert_unique(db: Session, build: Callable[[], T], attempts: int, what: str) -> T:
    """Add ``build()`` inside a savepoint, retrying on unique violations.

    ``build`` must produce a fresh object with newly generated random values
    each time it is called.
    """
    for attempt in range(1, attempts + 1):
        obj = build()
        try:
            with db.begin_nested():
                db.add(obj)
        except IntegrityError as exc:
            if not _is_unique_violation(exc):
                raise
            logger.warning("%s.collision attempt=%d", what, attempt)
            continue
        return obj
    raise ConflictError(f"could not generate a unique {what}")


def _new_user(db: Session, rng: RandomSource, name: str, room_id: RoomId, is_host: bool, attempts: int) -> User:
    return insert_unique(
        db,
        lambda: User(name=name, token=rng.token(), room_id=room_id, is_host=is_host),
        attempts,
        "token",
    )


def create_room(
    db: Session,
    rng: RandomSource,
    host_name: Optional[str],
    code_length: int = DEFAULT_CODE_LENGTH,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Dict:
    name = _clean(host_name)
    if not name:
        raise ValidationError("hostName is required")

    room = insert_unique(db, lambda: Room(code=rng.code(code_length)), max_attempts, "room code")
    host = _new_user(db, rng, name, RoomId(room.id), True, max_attempts)
    db.commit()
    logger.info("room.create id=%s code=%s", room.id, room.code)
    return {"roomCode": room.code, "host": {"name": host.name, "token": host.token}}


def find_room(db: Session, code: Optional[str]) -> Optional[Room]:
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.query(Room).filter(Room.code == normalized).first()


def join_room(
    db: Session,
    rng: RandomSource,
    room_code: Optional[str],
    display_name: Optional[str],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Dict:
    code = normalize_code(room_code)
    if not code:
        raise ValidationError("roomCode and displayName are required")

    # Room checks come first so a bad code or a closed room reports as such
    # whatever name was sent
    room = find_room(db, code)
    if room is None:
        raise NotFoundError("Room not found")
    if room.is_finished:
        raise InvalidStateError("Room already finished")
    name = _clean(display_name)
    if not name:
        raise ValidationError("roomCode and displayName are required")

    guest = _new_user(db, rng, name, RoomId(room.id), False, max_attempts)
    db.commit()
    logger.info("room.join room=%s user=%s", room.id, guest.id)
    return {"name": guest.name, "token": guest.token}


def authenticate(db: Session, token: Optional[str]) -> User:
    """Resolve a bearer token to its user or raise :class:`AuthError`."""
    token = _clean(token)
    if not token:
        raise AuthError("Invalid token")
    user = db.query(User).filter(User.token == token).first()
    if user is None:
        logger.warning("auth.token unknown")
        raise AuthError("Invalid token")
    return user


def load_room(db: Session, room_id: RoomId, lock: bool = False) -> Room:
    """Fetch a room by id. ``lock`` takes a row lock where the backend supports it."""
    query = db.query(Room).filter(Room.id == room_id)
    if lock:
        query = query.with_for_update()
    room = query.first()
    if room is None:
        logger.error("room.missing id=%s", room_id)
        raise NotFoundError("Room not found")
    return room


def list_movies(db: Session, room_id: RoomId) -> List[Dict]:
    """All proposals in a room, oldest first, with the proposer's name."""
    rows = (
        db.query(Movie.id, Movie.title, Movie.year, User.name)
        .join(User, Movie.user_id == User.id)
        .filter(Movie.room_id == room_id)
        .order_by(Movie.id)
        .all()
    )
    return [{"id": mid, "title": title, "year": year, "addedBy": added_by} for mid, title, year, added_by in rows]


def get_room(db: Session, room_code: Optional[str]) -> Dict:
    room = find_room(db, room_code)
    if room is None:
        raise NotFoundError("Room not found")
    winner = None
    if room.winner is not None:
        winner = {"id": room.winner.id, "title": room.winner.title, "year": room.winner.year}
    return {
        "roomCode": room.code,
        "status": room.status,
        "createdAt": room.created_at.isoformat() if room.created_at else None,
        "movies": list_movies(db, RoomId(room.id)),
        "winner": winner,
    }


__all__ = [
    "create_room",
    "join_room",
    "get_room",
    "find_room",
    "authenticate",
    "load_room",
    "list_movies",
    "insert_unique",
    "normalize_code",
]

from fastapi import APIRouter, Depends
import logging
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session
from movienight_core import rooms as room_service
from movienight_core import selection
from movienight_core.config import Settings
from movienight_core.tokens import RandomSource
from ..deps import get_db, get_rng, get_settings

router = APIRouter(prefix="/rooms", tags=["rooms"])
log = logging.getLogger("movienight_api")

# Fields are optional here so missing keys reach the services, which own
# the "required" checks and their messages.
class RoomCreateRequest(BaseModel):
    hostName: Optional[str] = None

class RoomJoinRequest(BaseModel):
    roomCode: Optional[str] = None
    displayName: Optional[str] = None

class RoomFinishRequest(BaseModel):
    token: Optional[str] = None

@router.post("")
@router.post("/", include_in_schema=False)
def create_room(
    data: RoomCreateRequest,
    db: Session = Depends(get_db),
    rng: RandomSource = Depends(get_rng),
    settings: Settings = Depends(get_settings),
):
    return room_service.create_room(
        db,
        rng,
        data.hostName,
        code_length=settings.code_length,
        max_attempts=settings.max_code_attempts,
    )

@router.post("/join")
def join_room(
    data: RoomJoinRequest,
    db: Session = Depends(get_db),
    rng: RandomSource = Depends(get_rng),
    settings: Settings = Depends(get_settings),
):
    return room_service.join_room(
        db, rng, data.roomCode, data.displayName, max_attempts=settings.max_code_attempts
    )

@router.post("/finish")
def finish_room(data: RoomFinishRequest, db: Session = Depends(get_db), rng: RandomSource = Depends(get_rng)):
    return selection.finish_room(db, rng, data.token)

@router.get("/{code}")
def get_room(code: str, db: Session = Depends(get_db)):
    state = room_service.get_room(db, code)
    log.debug("rooms.get code=%s status=%s movies=%d", state["roomCode"], state["status"], len(state["movies"]))
    return state

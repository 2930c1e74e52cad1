from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session
from movienight_core.movies import add_movie
from ..deps import get_db

router = APIRouter(prefix="/movies", tags=["movies"])

class MovieCreateRequest(BaseModel):
    token: Optional[str] = None
    title: Optional[str] = None
    year: Optional[int] = None

# Accept both with and without trailing slash to avoid 307 redirects from FastAPI
@router.post("")
@router.post("/", include_in_schema=False)
def create_movie(data: MovieCreateRequest, db: Session = Depends(get_db)):
    return add_movie(db, data.token, data.title, data.year)

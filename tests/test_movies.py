import pytest
from movienight_core.errors import AuthError, InvalidStateError, ValidationError
from movienight_core.models import Movie
from movienight_core.movies import add_movie
from movienight_core.rooms import create_room, join_room
from movienight_core.selection import finish_room


@pytest.fixture
def room(call, rng):
    host = call(create_room, rng, "Ana")
    guest = call(join_room, rng, host["roomCode"], "Bo")
    return {"code": host["roomCode"], "host": host["host"]["token"], "guest": guest["token"]}


def _movie_count(store):
    with store.session() as db:
        return db.query(Movie).count()


def test_add_movie_returns_room_list(call, room):
    out = call(add_movie, room["guest"], "Dune", 2021)
    assert len(out["movies"]) == 1
    movie = out["movies"][0]
    assert movie["title"] == "Dune"
    assert movie["year"] == 2021
    assert movie["addedBy"] == "Bo"
    assert isinstance(movie["id"], int)

    out = call(add_movie, room["host"], "Arrival")
    assert [(m["title"], m["year"], m["addedBy"]) for m in out["movies"]] == [
        ("Dune", 2021, "Bo"),
        ("Arrival", None, "Ana"),
    ]


def test_add_movie_keeps_duplicates(call, room):
    call(add_movie, room["guest"], "Dune")
    out = call(add_movie, room["host"], "Dune")
    assert [m["title"] for m in out["movies"]] == ["Dune", "Dune"]
    assert out["movies"][0]["id"] != out["movies"][1]["id"]


def test_add_movie_strips_title(call, room):
    out = call(add_movie, room["guest"], "  Heat  ", 1995)
    assert out["movies"][0]["title"] == "Heat"


def test_add_movie_only_lists_own_room(call, rng, room):
    other = call(create_room, rng, "Cy")
    call(add_movie, other["host"]["token"], "Alien")
    out = call(add_movie, room["guest"], "Dune")
    assert [m["title"] for m in out["movies"]] == ["Dune"]


def test_add_movie_unknown_token(store, call, room):
    with pytest.raises(AuthError):
        call(add_movie, "not-a-token", "Dune")
    assert _movie_count(store) == 0


@pytest.mark.parametrize("token,title", [(None, "Dune"), ("", "Dune"), ("{token}", None), ("{token}", "  ")])
def test_add_movie_requires_fields(store, call, room, token, title):
    if token:
        token = token.format(token=room["guest"])
    with pytest.raises(ValidationError):
        call(add_movie, token, title)
    assert _movie_count(store) == 0


def test_add_movie_to_finished_room(store, call, rng, room):
    call(add_movie, room["guest"], "Dune")
    call(finish_room, rng, room["host"])
    before = _movie_count(store)
    with pytest.raises(InvalidStateError):
        call(add_movie, room["guest"], "Arrival")
    with pytest.raises(InvalidStateError):
        call(add_movie, room["host"], "Arrival")
    assert _movie_count(store) == before == 1

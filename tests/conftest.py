import sys, os, tempfile, pytest

# Always force tests to use an isolated SQLite database file under a temp dir.
# Do this before importing any movienight modules.
if "MOVIENIGHT_DB_URL" not in os.environ and "MOVIENIGHT_DATABASE_URL" not in os.environ:
    _test_db_dir = tempfile.mkdtemp(prefix="movienight_test_db_")
    os.environ["MOVIENIGHT_DB_URL"] = f"sqlite:///{os.path.join(_test_db_dir, 'test_movienight.db')}"
# Ensure core and api src dirs are on sys.path for imports without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
for _src in (os.path.join(ROOT, 'packages', 'core', 'src'), os.path.join(ROOT, 'apps', 'api', 'src')):
    if _src not in sys.path:
        sys.path.insert(0, _src)

from movienight_core.config import Settings
from movienight_core.db import Store
from movienight_core.tokens import SeededRandomSource


class ScriptedRandomSource(SeededRandomSource):
    """Seeded source whose codes and picks can be scripted per test."""

    def __init__(self, codes=(), pick=None, seed=0):
        super().__init__(seed)
        self._codes = iter(codes)
        self._pick = pick
        self.choices = []

    def code(self, length):
        scripted = next(self._codes, None)
        return scripted if scripted is not None else super().code(length)

    def choice(self, items):
        self.choices.append(list(items))
        if self._pick is not None:
            return self._pick(items)
        return super().choice(items)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'movienight.db'}"


@pytest.fixture
def store(db_url):
    s = Store(db_url).open()
    yield s
    s.close()


@pytest.fixture
def rng():
    return SeededRandomSource(1234)


@pytest.fixture
def call(store):
    """Run a service function in its own session, like one HTTP request."""
    def _call(fn, *args, **kwargs):
        with store.session() as db:
            return fn(db, *args, **kwargs)
    return _call


@pytest.fixture
def client(db_url):
    from fastapi.testclient import TestClient
    from movienight_api.main import create_app

    app = create_app(settings=Settings(database_url=db_url), rng=SeededRandomSource(7))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def scripted():
    return ScriptedRandomSource

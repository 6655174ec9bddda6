import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# DB sqlite de test AVANT d'importer app (l'engine est créé à l'import)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient

from app.core.cache import MemoryCache
from app.core.database import Base, make_engine, make_session_factory
from app.main import app
from app.services.wiki_service import Wiki, get_wiki


class FakeClock:
    """Horloge manuelle pour tester l'expiration du cache"""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(tmp_path):
    """Une base sqlite neuve par test"""
    engine = make_engine(f"sqlite:///{tmp_path / 'wiki.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def cache(clock):
    return MemoryCache(clock=clock)


@pytest.fixture
def wiki(session_factory, cache):
    return Wiki(session_factory, cache)


@pytest.fixture
def client(wiki):
    """Client de test FastAPI branché sur le store de test"""
    app.dependency_overrides[get_wiki] = lambda: wiki
    yield TestClient(app)
    app.dependency_overrides.clear()

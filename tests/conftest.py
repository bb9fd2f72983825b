import os

# Must be set before config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

from catalog import MovieCatalog
from db import get_user_store, get_movie_catalog
from main import app
from store import InMemoryUserStore, MongoUserStore
from utils.auth_utils import create_access_token

MOVIES = [
    {
        "title": "Inception",
        "description": "A thief who steals corporate secrets through dream-sharing technology.",
        "genre": {"name": "Science Fiction", "description": "Speculative, futuristic stories."},
        "director": {"name": "Christopher Nolan", "bio": "British-American filmmaker.", "birth": "1970"},
        "image_path": "inception.png",
        "featured": True,
    },
    {
        "title": "Amelie",
        "description": "A shy waitress decides to change the lives of those around her.",
        "genre": {"name": "Comedy", "description": "Light-hearted stories."},
        "director": {"name": "Jean-Pierre Jeunet", "bio": "French film director.", "birth": "1953"},
        "image_path": "amelie.png",
        "featured": False,
    },
    {
        "title": "Memento",
        "description": "A man with short-term memory loss hunts his wife's killer.",
        "genre": {"name": "Thriller", "description": "Suspenseful stories."},
        "director": {"name": "Christopher Nolan", "bio": "British-American filmmaker.", "birth": "1970"},
        "image_path": "memento.png",
        "featured": False,
    },
]


@pytest.fixture
def memory_store():
    return InMemoryUserStore()


@pytest.fixture
def mongo_store():
    store = MongoUserStore(mongomock.MongoClient().myMoviesDB.users)
    store.ensure_indexes()
    return store


@pytest.fixture(params=["memory", "mongo"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def movies_collection():
    collection = mongomock.MongoClient().myMoviesDB.movies
    collection.insert_many([dict(movie) for movie in MOVIES])
    return collection


@pytest.fixture
def client(memory_store, movies_collection):
    app.dependency_overrides[get_user_store] = lambda: memory_store
    app.dependency_overrides[get_movie_catalog] = lambda: MovieCatalog(movies_collection)
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_header(username):
    return {"Authorization": f"Bearer {create_access_token(username)}"}

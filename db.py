# db.py
from pymongo import MongoClient

from config import MONGO_URI, MONGO_DB
from store import MongoUserStore
from catalog import MovieCatalog

# MongoClient connects lazily, so importing this module needs no running server
client = MongoClient(MONGO_URI)
db = client[MONGO_DB]
users_collection = db.users
movies_collection = db.movies


def get_user_store():
    return MongoUserStore(users_collection)


def get_movie_catalog():
    return MovieCatalog(movies_collection)


def init_db():
    get_user_store().ensure_indexes()

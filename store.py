"""
User record storage.

``UserStore`` is what the request handlers talk to. Two backends implement it:

* ``MongoUserStore`` wraps a pymongo collection. Every operation is one
  server-side command, and favorites are changed with ``$addToSet`` / ``$pull``
  so concurrent requests for the same user never lose an update.
* ``InMemoryUserStore`` keeps records in a dict guarded by a lock. It is used
  by the tests and for running the API without a database.

Records are plain dicts:
``{"username", "password", "email", "birthday", "favorite_movies"}``.
``password`` holds the bcrypt secret; stripping it from responses is the
handlers' job.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, time
from typing import Any, Dict, List

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from exceptions import Conflict, NotFound, StorageFault

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "password", "email", "birthday")


def _not_found(username: str) -> NotFound:
    return NotFound(f"{username} was not found")


def _conflict(username: str) -> Conflict:
    return Conflict(f"{username} already exists")


def _new_record(user: Dict[str, Any]) -> Dict[str, Any]:
    record = {field: user.get(field) for field in UPDATABLE_FIELDS}
    # keep first-seen order, drop duplicates
    record["favorite_movies"] = list(dict.fromkeys(user.get("favorite_movies") or []))
    return record


def _updates(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}


class UserStore(ABC):
    """Operations on user records keyed by username."""

    @abstractmethod
    def create(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new user; raises ``Conflict`` if the username is taken."""

    @abstractmethod
    def find_by_username(self, username: str) -> Dict[str, Any]:
        """Return the user or raise ``NotFound``."""

    @abstractmethod
    def list_users(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def update_fields(self, username: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the given profile fields in one write and return the updated user."""

    @abstractmethod
    def add_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        """Add ``movie_id`` to the favorites set. Adding a present id changes nothing."""

    @abstractmethod
    def remove_favorite(self, username: str, movie_id: str) -> Dict[str, Any]:
        """Remove ``movie_id`` from the favorites set. Removing an absent id changes nothing."""

    @abstractmethod
    def delete(self, username: str) -> Dict[str, Any]:
        """Delete the user and return the removed record."""


# ---------------------------
# MongoDB backend
# ---------------------------

PROJECTION = {"_id": 0}


def _to_document(values: Dict[str, Any]) -> Dict[str, Any]:
    # BSON has no plain date type
    doc = dict(values)
    birthday = doc.get("birthday")
    if isinstance(birthday, date) and not isinstance(birthday, datetime):
        doc["birthday"] = datetime.combine(birthday, time.min)
    return doc


def _from_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(doc)
    record.pop("_id", None)
    if isinstance(record.get("birthday"), datetime):
        record["birthday"] = record["birthday"].date()
    record.setdefault("favorite_movies", [])
    return record


@contextmanager
def _storage_errors(action: str, username: str):
    try:
        yield
    except DuplicateKeyError:
        raise _conflict(username)
    except PyMongoError:
        logger.exception("Storage failure during %s for %s", action, username)
        raise StorageFault()


class MongoUserStore(UserStore):

    def __init__(self, collection):
        self.collection = collection

    def ensure_indexes(self) -> None:
        with _storage_errors("index creation", "users"):
            self.collection.create_index("username", unique=True)

    def create(self, user):
        record = _new_record(user)
        username = record["username"]
        with _storage_errors("create", username):
            if self.collection.find_one({"username": username}, PROJECTION):
                raise _conflict(username)
            # insert_one adds _id to the dict it is given
            self.collection.insert_one(_to_document(record))
        logger.info("Created user %s", username)
        return record

    def find_by_username(self, username):
        with _storage_errors("lookup", username):
            doc = self.collection.find_one({"username": username}, PROJECTION)
        if doc is None:
            raise _not_found(username)
        return _from_document(doc)

    def list_users(self):
        with _storage_errors("list", "*"):
            return [_from_document(doc) for doc in self.collection.find({}, PROJECTION)]

    def update_fields(self, username, fields):
        updates = _updates(fields)
        if not updates:
            return self.find_by_username(username)
        with _storage_errors("update", updates.get("username", username)):
            doc = self.collection.find_one_and_update(
                {"username": username},
                {"$set": _to_document(updates)},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise _not_found(username)
        return _from_document(doc)

    def _modify_favorites(self, username, operator, movie_id):
        with _storage_errors(operator, username):
            doc = self.collection.find_one_and_update(
                {"username": username},
                {operator: {"favorite_movies": movie_id}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise _not_found(username)
        return _from_document(doc)

    def add_favorite(self, username, movie_id):
        return self._modify_favorites(username, "$addToSet", movie_id)

    def remove_favorite(self, username, movie_id):
        return self._modify_favorites(username, "$pull", movie_id)

    def delete(self, username):
        with _storage_errors("delete", username):
            doc = self.collection.find_one_and_delete({"username": username})
        if doc is None:
            raise _not_found(username)
        logger.info("Deleted user %s", username)
        return _from_document(doc)


# ---------------------------
# In-memory backend
# ---------------------------

class InMemoryUserStore(UserStore):

    def __init__(self):
        self._users: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _get(self, username):
        try:
            return self._users[username]
        except KeyError:
            raise _not_found(username) from None

    def create(self, user):
        record = _new_record(user)
        username = record["username"]
        with self._lock:
            if username in self._users:
                raise _conflict(username)
            self._users[username] = record
            return copy.deepcopy(record)

    def find_by_username(self, username):
        with self._lock:
            return copy.deepcopy(self._get(username))

    def list_users(self):
        with self._lock:
            return copy.deepcopy(list(self._users.values()))

    def update_fields(self, username, fields):
        updates = _updates(fields)
        with self._lock:
            record = self._get(username)
            new_name = updates.get("username", username)
            if new_name != username and new_name in self._users:
                raise _conflict(new_name)
            record.update(updates)
            if new_name != username:
                del self._users[username]
                self._users[new_name] = record
            return copy.deepcopy(record)

    def add_favorite(self, username, movie_id):
        with self._lock:
            record = self._get(username)
            if movie_id not in record["favorite_movies"]:
                record["favorite_movies"].append(movie_id)
            return copy.deepcopy(record)

    def remove_favorite(self, username, movie_id):
        with self._lock:
            record = self._get(username)
            if movie_id in record["favorite_movies"]:
                record["favorite_movies"].remove(movie_id)
            return copy.deepcopy(record)

    def delete(self, username):
        with self._lock:
            self._get(username)
            return self._users.pop(username)

import logging
import math
from typing import Any, Dict

from pymongo.errors import PyMongoError

from exceptions import NotFound, StorageFault

logger = logging.getLogger(__name__)


def _movie(doc: Dict[str, Any]) -> Dict[str, Any]:
    movie = dict(doc)
    if "_id" in movie:
        movie["id"] = str(movie.pop("_id"))
    return movie


class MovieCatalog:
    """
    Read-only access to the movies collection.
    """

    def __init__(self, collection):
        self.collection = collection

    def _find_one(self, query):
        try:
            return self.collection.find_one(query)
        except PyMongoError:
            logger.exception("Movie lookup failed for %s", query)
            raise StorageFault()

    # ---------------------------
    # Listing
    # ---------------------------

    def list_movies(self, page=1, page_size=20):
        try:
            total_results = self.collection.count_documents({})
            start = (page - 1) * page_size
            cursor = self.collection.find().sort("title", 1).skip(start).limit(page_size)
            movies = [_movie(doc) for doc in cursor]
        except PyMongoError:
            logger.exception("Listing movies failed")
            raise StorageFault()

        total_pages = math.ceil(total_results / page_size) if total_results > 0 else 0
        return {
            "movies": movies,
            "total_results": total_results,
            "total_pages": total_pages,
            "page": page,
            "page_size": page_size
        }

    # ---------------------------
    # Lookups
    # ---------------------------

    def find_by_title(self, title):
        doc = self._find_one({"title": title})
        if doc is None:
            raise NotFound(f"Movie '{title}' was not found")
        return _movie(doc)

    def find_genre(self, name):
        doc = self._find_one({"genre.name": name})
        if doc is None:
            raise NotFound(f"Genre '{name}' was not found")
        return doc["genre"]

    def find_director(self, name):
        doc = self._find_one({"director.name": name})
        if doc is None:
            raise NotFound(f"Director '{name}' was not found")
        return doc["director"]

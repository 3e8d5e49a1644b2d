"""
Database manager for the movie catalog.

Handles all MongoDB operations including:
- Connection management with pymongo
- CRUD operations for users, movies, genres and rankings
- Index setup and reference data seeding
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

import pymongo
from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo import errors as mongo_errors

from .config import Config
from .errors import DuplicateKeyError, StoreError
from .models import Ranking, StoreStatus, utcnow
from .utils import setup_logger

# Fields never returned by user listing/detail queries
USER_PRIVATE_FIELDS = ("password", "access_token", "refresh_token")


def new_object_id() -> str:
    """Generate a fresh hex ObjectId string."""
    return str(ObjectId())


def serialize_document(doc: Optional[dict]) -> Optional[dict]:
    """Replace Mongo's ``_id`` with a string ``id``."""
    if doc is None:
        return None
    out = dict(doc)
    object_id = out.pop("_id", None)
    if object_id is not None:
        out["id"] = str(object_id)
    return out


class DatabaseManager:
    """
    Handles all database operations.

    Responsibilities:
    - Connection management with pymongo
    - Per-operation timeouts
    - CRUD for users, movies, genres and rankings
    - Index setup and seeding
    """

    USERS = "users"
    MOVIES = "movies"
    GENRES = "genres"
    RANKINGS = "rankings"

    def __init__(self, config: Config, client: Optional[MongoClient] = None):
        self.config = config
        self.client = client or self._create_client()
        self.db = self.client[config.mongo_db_name]
        self.logger = setup_logger("database", config.log_dir)

    def _create_client(self) -> MongoClient:
        """Create the pymongo client with connection pooling."""
        return MongoClient(
            self.config.mongo_uri,
            serverSelectionTimeoutMS=10_000,
            tz_aware=True,
        )

    @contextmanager
    def _operation(self, description: str, timeout: Optional[float] = None) -> Iterator[None]:
        """Run a store operation under a timeout, mapping driver errors."""
        try:
            with pymongo.timeout(timeout or self.config.store_timeout):
                yield
        except mongo_errors.DuplicateKeyError as e:
            self.logger.warning(f"Duplicate key while {description}: {e}")
            raise DuplicateKeyError(f"Duplicate key while {description}")
        except mongo_errors.PyMongoError as e:
            self.logger.error(f"Error while {description}: {e}")
            raise StoreError(f"Error while {description}")

    def close(self) -> None:
        self.client.close()

    # ============ SETUP & STATUS ============

    def ping(self) -> None:
        """Check that the server is reachable. Raises StoreError if not."""
        with self._operation("pinging the database", timeout=10):
            self.client.admin.command("ping")

    def ensure_indexes(self) -> List[str]:
        """Create the unique indexes the catalog relies on."""
        with self._operation("creating indexes"):
            created = [
                self.db[self.USERS].create_index([("email", ASCENDING)], unique=True),
                self.db[self.USERS].create_index([("user_id", ASCENDING)], unique=True),
                self.db[self.MOVIES].create_index([("imdb_id", ASCENDING)], unique=True),
                self.db[self.MOVIES].create_index([("genres.genre_name", ASCENDING)]),
            ]
        self.logger.info(f"Indexes ensured: {created}")
        return created

    def seed_collection(self, name: str, documents: List[dict]) -> int:
        """Insert documents into an empty collection. Returns the insert count."""
        with self._operation(f"seeding {name}"):
            if self.db[name].count_documents({}) > 0:
                return 0
            result = self.db[name].insert_many([dict(d) for d in documents])
        return len(result.inserted_ids)

    def get_status(self) -> StoreStatus:
        """Get document counts for every collection."""
        with self._operation("counting documents"):
            return StoreStatus(
                users=self.db[self.USERS].count_documents({}),
                movies=self.db[self.MOVIES].count_documents({}),
                genres=self.db[self.GENRES].count_documents({}),
                rankings=self.db[self.RANKINGS].count_documents({}),
            )

    # ============ USERS ============

    def email_exists(self, email: str) -> bool:
        with self._operation("checking for existing user"):
            return self.db[self.USERS].count_documents({"email": email}, limit=1) > 0

    def insert_user(self, user: dict) -> str:
        """Insert a new user document. Returns its user_id."""
        with self._operation("creating user"):
            self.db[self.USERS].insert_one(dict(user))
        return user["user_id"]

    def get_user_by_email(self, email: str) -> Optional[dict]:
        """Get a user including credentials, for login."""
        with self._operation("fetching user"):
            return serialize_document(self.db[self.USERS].find_one({"email": email}))

    def get_user(self, user_id: str, include_private: bool = False) -> Optional[dict]:
        projection = None if include_private else {f: 0 for f in USER_PRIVATE_FIELDS}
        with self._operation("fetching user"):
            doc = self.db[self.USERS].find_one({"user_id": user_id}, projection)
        return serialize_document(doc)

    def list_users(self) -> List[dict]:
        projection = {f: 0 for f in USER_PRIVATE_FIELDS}
        with self._operation("fetching users"):
            docs = list(self.db[self.USERS].find({}, projection))
        return [serialize_document(d) for d in docs]

    def update_user(self, user_id: str, fields: Dict) -> bool:
        """Apply a partial update. Returns False if no user matched."""
        update = dict(fields)
        update["updated_at"] = utcnow()
        with self._operation("updating user"):
            result = self.db[self.USERS].update_one({"user_id": user_id}, {"$set": update})
        return result.matched_count > 0

    def delete_user(self, user_id: str) -> bool:
        with self._operation("deleting user"):
            result = self.db[self.USERS].delete_one({"user_id": user_id})
        return result.deleted_count > 0

    def update_tokens(self, user_id: str, access_token: str, refresh_token: str) -> bool:
        """Overwrite the stored token pair for a user."""
        update = {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "updated_at": utcnow(),
        }
        with self._operation("updating tokens", timeout=self.config.token_store_timeout):
            result = self.db[self.USERS].update_one({"user_id": user_id}, {"$set": update})
        return result.matched_count > 0

    def get_favourite_genres(self, user_id: str) -> List[str]:
        """Get a user's favourite genre names. Missing users have none."""
        with self._operation("fetching favourite genres"):
            doc = self.db[self.USERS].find_one(
                {"user_id": user_id},
                {"favourite_movies_genres": 1, "_id": 0},
            )
        if not doc:
            return []
        return [g for g in doc.get("favourite_movies_genres") or [] if g]

    # ============ MOVIES ============

    def movie_exists(self, imdb_id: str) -> bool:
        with self._operation("checking for existing movie"):
            return self.db[self.MOVIES].count_documents({"imdb_id": imdb_id}, limit=1) > 0

    def insert_movie(self, movie: dict) -> str:
        """Insert a movie document. Returns the new document id."""
        with self._operation("inserting movie"):
            result = self.db[self.MOVIES].insert_one(dict(movie))
        return str(result.inserted_id)

    def list_movies(self) -> List[dict]:
        with self._operation("fetching movies"):
            docs = list(self.db[self.MOVIES].find({}))
        return [serialize_document(d) for d in docs]

    def get_movie(self, imdb_id: str) -> Optional[dict]:
        with self._operation("fetching movie"):
            doc = self.db[self.MOVIES].find_one({"imdb_id": imdb_id})
        return serialize_document(doc)

    def search_movies(self, criteria: Dict[str, str]) -> List[dict]:
        """Find movies where every given field matches its regex, case-insensitively."""
        query = {
            key: {"$regex": value, "$options": "i"}
            for key, value in criteria.items()
            if value and not key.startswith("$")
        }
        with self._operation("searching movies"):
            docs = list(self.db[self.MOVIES].find(query))
        return [serialize_document(d) for d in docs]

    def update_movie_review(self, imdb_id: str, admin_review: str, ranking: Ranking) -> bool:
        """Store an admin review and its ranking. Returns False if no movie matched."""
        update = {"admin_review": admin_review, "ranking": ranking.to_dict()}
        with self._operation("updating admin review"):
            result = self.db[self.MOVIES].update_one({"imdb_id": imdb_id}, {"$set": update})
        return result.matched_count > 0

    def get_movies_by_genres(self, genres: List[str], limit: int) -> List[dict]:
        """Movies sharing any of the genres, lowest ranking value first."""
        with self._operation("fetching recommended movies"):
            cursor = (
                self.db[self.MOVIES]
                .find({"genres.genre_name": {"$in": list(genres)}})
                .sort("ranking.ranking_value", ASCENDING)
                .limit(limit)
            )
            docs = list(cursor)
        return [serialize_document(d) for d in docs]

    # ============ REFERENCE DATA ============

    def get_genres(self) -> List[dict]:
        with self._operation("fetching genres"):
            docs = list(self.db[self.GENRES].find({}, {"_id": 0}))
        return docs

    def get_rankings(self) -> List[Ranking]:
        with self._operation("fetching rankings"):
            docs = list(self.db[self.RANKINGS].find({}, {"_id": 0}))
        return [Ranking.from_document(d) for d in docs]

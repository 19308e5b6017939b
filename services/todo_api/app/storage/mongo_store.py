import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Dict, Any

from bson import ObjectId
from pymongo import MongoClient, ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from schemas.models import Task
from ..settings import Settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # BSON dates keep milliseconds only
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _oid(task_id: str) -> Optional[ObjectId]:
    # malformed ids can never match a document
    return ObjectId(task_id) if ObjectId.is_valid(task_id) else None


def connect(settings: Settings) -> MongoClient:
    """Create the process-wide client and make sure the server answers."""
    client = MongoClient(settings.MONGO_URI, serverSelectionTimeoutMS=settings.MONGO_TIMEOUT_MS)
    try:
        client.admin.command("ping")
    except PyMongoError:
        logger.error("MongoDB did not answer ping, aborting startup")
        client.close()
        raise
    logger.info("connected to MongoDB")
    return client


def get_database(client: MongoClient, settings: Settings) -> Database:
    return client.get_default_database(default=settings.MONGO_DB)


class TaskStore:
    """CRUD over the tasks collection. One document per operation, no transactions."""

    def __init__(self, collection: Collection, clock: Callable[[], datetime] = _utcnow):
        self.collection = collection
        self.clock = clock

    def ensure_indexes(self) -> None:
        # idempotent
        self.collection.create_index([("createdAt", ASCENDING)])

    def list_tasks(self) -> List[Task]:
        cur = self.collection.find({}).sort([("createdAt", ASCENDING), ("_id", ASCENDING)])
        return [Task.from_doc(d) for d in cur]

    def create_task(self, text: str) -> Task:
        now = self.clock()
        doc = {"text": text, "completed": False, "createdAt": now, "updatedAt": now}
        res = self.collection.insert_one(doc)
        doc["_id"] = res.inserted_id
        return Task.from_doc(doc)

    def update_task(self, task_id: str, changes: Dict[str, Any]) -> Optional[Task]:
        oid = _oid(task_id)
        if oid is None:
            return None
        fields = {k: v for k, v in changes.items() if k in ("text", "completed")}
        fields["updatedAt"] = self.clock()
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return Task.from_doc(doc) if doc else None

    def delete_task(self, task_id: str) -> bool:
        oid = _oid(task_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count == 1

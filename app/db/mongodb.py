"""
MongoDB Connection Utility

MongoDB stores every portal collection:
- students, mentors, admins, recruiters: user records
- internships: admin postings and recruiter submissions
- applications: one document per (student, internship) pair
- admin_audit: capped trail of admin mutations

Uniqueness lives in the indexes created here, not in read-then-write checks.
"""
import logging

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "mentors": "mentors",
    "admins": "admins",
    "recruiters": "recruiters",
    "internships": "internships",
    "applications": "applications",
    "audit_log": "admin_audit",
}

# Unique keys per collection, shared with the in-memory store
UNIQUE_KEYS = {
    "students": [("id",), ("email",)],
    "mentors": [("id",), ("email",)],
    "admins": [("id",), ("email",)],
    "recruiters": [("id",), ("email",)],
    "internships": [("id",)],
    "applications": [("id",), ("studentId", "internshipId")],
    "audit_log": [("id",)],
}


def init_mongo_indexes():
    """
    Create indexes for uniqueness and lookups.
    Call this once during app startup.
    """
    db = get_mongo_db()

    for key, fields_list in UNIQUE_KEYS.items():
        collection = db[COLLECTIONS[key]]
        for fields in fields_list:
            collection.create_index([(f, ASCENDING) for f in fields], unique=True)

    # Lookup indexes for the visibility filter
    db[COLLECTIONS["applications"]].create_index("mentorId")
    db[COLLECTIONS["applications"]].create_index("internshipId")
    db[COLLECTIONS["internships"]].create_index("postedBy")
    db[COLLECTIONS["internships"]].create_index("submittedBy")
    db[COLLECTIONS["audit_log"]].create_index("timestamp")

    logger.info("MongoDB indexes created successfully")

import logging

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config.settings import settings

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, mongo_uri=None, db_name=None, client=None):
        self.mongo_uri = mongo_uri or settings.MONGO_URI
        self.db_name = db_name or settings.DB_NAME
        self.client = client
        self.db = None

    def connect(self):
        """Connect to MongoDB"""
        if self.client is None:
            # For local MongoDB: mongodb://localhost:27017
            # For MongoDB Atlas: use connection string from .env
            self.client = MongoClient(self.mongo_uri)
        self.db = self.client[self.db_name]
        logger.info("Connected to MongoDB database %s", self.db_name)
        return self.db

    def get_collection(self, collection_name):
        """Get specific collection"""
        if self.db is None:
            self.connect()
        return self.db[collection_name]

    def ping(self):
        """True when the server answers a ping"""
        if self.db is None:
            self.connect()
        try:
            self.db.command('ping')
            return True
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False

    def close(self):
        """Close database connection"""
        if self.client:
            self.client.close()

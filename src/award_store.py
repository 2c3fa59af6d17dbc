#!/usr/bin/env python3
"""
Award store backed by the ornode MongoDB database.

The audit reads the whole `awards` collection in a single bulk fetch; there
is no pagination and no coordination with the chain scan.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import MongoClient

from audit_models import DatabaseAwardRecord
from award_schema import load_award_records

logger = logging.getLogger(__name__)


DEFAULT_AWARDS_COLLECTION = "awards"


class MongoAwardStore:
    """Read-only view of the awards collection"""

    def __init__(self, mongo_url: str, db_name: str, collection: str = DEFAULT_AWARDS_COLLECTION,
                 client: Optional[MongoClient] = None):
        self.db_name = db_name
        self.collection_name = collection
        self._owns_client = client is None
        self.client = client if client is not None else MongoClient(mongo_url)

    def __enter__(self) -> "MongoAwardStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._owns_client:
            self.client.close()

    def fetch_documents(self) -> List[Dict[str, Any]]:
        collection = self.client[self.db_name][self.collection_name]
        documents = list(collection.find({}, projection={"_id": 0}))
        logger.debug(f"Fetched {len(documents)} documents from {self.db_name}.{self.collection_name}")
        return documents

    def load_awards(self) -> List[DatabaseAwardRecord]:
        """Fetch and validate every award; malformed documents raise AwardSchemaError"""
        return load_award_records(self.fetch_documents())

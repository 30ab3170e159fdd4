"""Retrying reader for databases embedded in a page."""

import logging
from typing import List, Optional

from .client import NotionClient
from .models import CollectionRow
from .properties import row_from_page
from .retry import RetryPolicy


class CollectionClient:
    """Resolves child_database blocks into rows, retrying transient failures."""

    def __init__(self, client: NotionClient, retry_policy: Optional[RetryPolicy] = None):
        """
        Initialize collection client.

        Args:
            client: NotionClient used for database queries
            retry_policy: Policy wrapping each full query; defaults to 3 attempts
        """
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logging.getLogger(__name__)

    async def query(
        self, collection_id: str, deadline: Optional[float] = None
    ) -> List[CollectionRow]:
        """
        Fetch all rows of a database.

        Every attempt paginates from the first page; a failure on any page
        fails the attempt.

        Args:
            collection_id: Database ID (the child_database block ID)
            deadline: Optional absolute event-loop time bounding retries

        Returns:
            Rows in service order
        """

        async def attempt() -> List[CollectionRow]:
            pages = await self.client.query_database(collection_id)
            return [row_from_page(page) for page in pages]

        rows = await self.retry_policy.run(
            attempt, deadline=deadline, description=f"Query of database {collection_id}"
        )
        self.logger.debug(f"Database {collection_id}: {len(rows)} rows")
        return rows

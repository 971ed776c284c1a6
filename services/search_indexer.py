"""
Search Indexer - hosted search index (Algolia REST API) via requests.

Repositories push records here after writes so the product, booking, cost
estimate and quotation pickers can search them. Indexing is best effort:
when credentials are missing every call is a no-op, and failures are logged
rather than raised to the caller.
"""

import logging
from typing import Dict, Any, Optional

import requests

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = {
    'hits': [],
    'nbHits': 0,
    'page': 0,
    'nbPages': 0,
    'hitsPerPage': 0,
    'processingTimeMS': 0,
}


class SearchIndexError(Exception):
    """Raised by search() when the index cannot be queried."""


class SearchIndexer:
    """Thin client over the hosted search REST API."""

    def __init__(self, app_id: str = '', api_key: str = '', index_prefix: str = '',
                 timeout: int = 10):
        self.app_id = app_id
        self.api_key = api_key
        self.index_prefix = index_prefix
        self.timeout = timeout
        self.enabled = bool(app_id and api_key)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'SearchIndexer':
        return cls(
            app_id=config.get('SEARCH_APP_ID', ''),
            api_key=config.get('SEARCH_API_KEY', ''),
            index_prefix=config.get('SEARCH_INDEX_PREFIX', ''),
            timeout=config.get('SEARCH_TIMEOUT', 10),
        )

    def index_name(self, index: str) -> str:
        return f"{self.index_prefix}{index}"

    def _headers(self) -> Dict[str, str]:
        return {
            'X-Algolia-Application-Id': self.app_id,
            'X-Algolia-API-Key': self.api_key,
            'Content-Type': 'application/json',
        }

    def _write_url(self, index: str, object_id: str) -> str:
        return f"https://{self.app_id}.algolia.net/1/indexes/{self.index_name(index)}/{object_id}"

    def save_object(self, index: str, record: Dict[str, Any]) -> bool:
        """Add or replace a record in the index. Returns True when indexed."""
        if not self.enabled:
            logger.debug(f"Search indexing disabled, skipping {index}/{record.get('id')}")
            return False

        object_id = record.get('id')
        body = {key: value for key, value in record.items() if key != 'password'}
        body['objectID'] = object_id

        try:
            response = requests.put(
                self._write_url(index, object_id),
                headers=self._headers(),
                json=body,
                timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.warning(f"Failed to index {index}/{object_id}: {e}")
            return False

    def delete_object(self, index: str, object_id: str) -> bool:
        """Remove a record from the index. Returns True when removed."""
        if not self.enabled:
            logger.debug(f"Search indexing disabled, skipping delete {index}/{object_id}")
            return False

        try:
            response = requests.delete(
                self._write_url(index, object_id),
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.warning(f"Failed to remove {index}/{object_id} from index: {e}")
            return False

    def search(self, index: str, query: str, filters: Optional[str] = None,
               page: int = 0, hits_per_page: int = 10) -> Dict[str, Any]:
        """
        Query an index.

        Raises:
            SearchIndexError: if search is not configured or the request fails
        """
        if not self.enabled:
            raise SearchIndexError(
                "Search configuration is incomplete. Please check your environment variables."
            )

        payload = {'query': query, 'page': page, 'hitsPerPage': hits_per_page}
        if filters:
            payload['filters'] = filters

        url = f"https://{self.app_id}-dsn.algolia.net/1/indexes/{self.index_name(index)}/query"
        try:
            response = requests.post(url, headers=self._headers(), json=payload,
                                     timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Search on {index} failed: {e}")
            raise SearchIndexError(str(e))

        result = dict(EMPTY_RESPONSE)
        result.update({
            'hits': data.get('hits', []),
            'nbHits': data.get('nbHits', 0),
            'page': data.get('page', page),
            'nbPages': data.get('nbPages', 0),
            'hitsPerPage': data.get('hitsPerPage', hits_per_page),
            'processingTimeMS': data.get('processingTimeMS', 0),
        })
        result['query'] = query
        return result

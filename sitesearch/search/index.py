"""
Content index: the immutable collection of documents the local engine scans.

The index is built once and never mutated. Rebuilding means constructing a new
ContentIndex and swapping the reference, so readers always see a complete
collection.
"""

import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .content import SITE_CONTENT
from .models import SearchResultItem

logger = logging.getLogger(__name__)


class ContentIndex:
    """Read-only, insertion-ordered collection of SearchResultItem."""

    def __init__(self, items: Iterable[SearchResultItem] = ()):
        items = tuple(items)
        by_id: Dict[str, SearchResultItem] = {}
        for item in items:
            if item.id in by_id:
                raise ValueError(f"Duplicate document id in index: {item.id}")
            by_id[item.id] = item
        self._items: Tuple[SearchResultItem, ...] = items
        self._by_id = by_id

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> "ContentIndex":
        return cls(SearchResultItem.from_dict(record) for record in records)

    @classmethod
    def from_json_file(cls, path: str) -> "ContentIndex":
        """
        Load documents from a JSON file holding a list of records
        (or {"items": [...]}).
        """
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
        records = payload.get('items', []) if isinstance(payload, dict) else payload
        index = cls.from_dicts(records)
        logger.info(f"Loaded {len(index)} documents from {path}")
        return index

    @classmethod
    def default(cls) -> "ContentIndex":
        """Index over the built-in site content."""
        return cls.from_dicts(SITE_CONTENT)

    def with_items(self, extra: Iterable[SearchResultItem]) -> "ContentIndex":
        """Return a new index with `extra` appended."""
        return ContentIndex(self._items + tuple(extra))

    @property
    def items(self) -> Tuple[SearchResultItem, ...]:
        return self._items

    def get(self, item_id: str) -> Optional[SearchResultItem]:
        return self._by_id.get(item_id)

    def ids(self) -> List[str]:
        return [item.id for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SearchResultItem]:
        return iter(self._items)

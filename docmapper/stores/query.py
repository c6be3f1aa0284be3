"""
Per-call query options.

Filter, sort and limit always travel together as an explicit argument; the
Store never remembers them between calls.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from docmapper.errors import InvalidArgumentError

# Queries without an explicit limit return at most this many documents.
DEFAULT_LIMIT = 20

# pymongo uses 0 for "no limit"
UNLIMITED = 0

SortSpec = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


def _normalize_sort(sort: Optional[SortSpec]) -> Optional[List[Tuple[str, Any]]]:
    if sort is None:
        return None
    if isinstance(sort, Mapping):
        pairs = list(sort.items())
    elif isinstance(sort, (list, tuple)):
        pairs = []
        for entry in sort:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise InvalidArgumentError(f"Sort entries must be (field, direction) pairs, got {entry!r}")
            pairs.append((entry[0], entry[1]))
    else:
        raise InvalidArgumentError(f"Sort must be a mapping or a list of (field, direction) pairs, got {type(sort).__name__}")

    for key, direction in pairs:
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError(f"Sort field must be a non-empty string, got {key!r}")
        # bool is an int subclass; True/False are not valid directions
        if isinstance(direction, bool) or not (direction in (1, -1) or isinstance(direction, str)):
            raise InvalidArgumentError(f"Sort direction for '{key}' must be 1, -1 or an index kind, got {direction!r}")
    return pairs


def _normalize_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError(f"Limit must be an integer, got {limit!r}")
    if limit < 0:
        raise InvalidArgumentError(f"Limit must be >= 0 (0 means unlimited), got {limit}")
    return limit


@dataclass(frozen=True)
class QueryOptions:
    """Validated filter, sort and limit for one find call."""
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: Optional[List[Tuple[str, Any]]] = None
    limit: int = DEFAULT_LIMIT

    @classmethod
    def build(cls, filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None,
              limit: Optional[int] = None) -> "QueryOptions":
        """Validate raw arguments and return the options.

        Raises:
            InvalidArgumentError: If any argument is malformed
        """
        if filter is None:
            filter = {}
        if not isinstance(filter, Mapping):
            raise InvalidArgumentError(f"Filter must be a mapping, got {type(filter).__name__}")
        return cls(filter=dict(filter), sort=_normalize_sort(sort), limit=_normalize_limit(limit))

    def to_find_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"filter": self.filter, "limit": self.limit}
        if self.sort:
            kwargs["sort"] = self.sort
        return kwargs

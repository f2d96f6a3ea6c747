import base64
import datetime
import json
import re
from typing import Any, Dict, List, Literal, Optional, Union

from beartype import beartype

from . import datatypes
from .lingo_error import ErrorCode, LingoError
from .utils import parse_identifier

DATE_FILTER_TYPES = ("after", "before", "exactly", "between")

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateValue = Union[datetime.datetime, datetime.date, str, int]


class SearchQuery:
    """
    Chainable builder for a query against GET /search.

    Each filter method appends one clause and returns the builder. Only one
    date constraint is active at a time: setting a new one replaces the
    previous one. `fetch` sends the current state as a single request and does
    not page automatically; call `next_page` then `fetch` again for more.

    Example:
        results = client.search().assets().of_type("SVG").matching_keyword("logo").limit(20).fetch()
    """

    DEFAULT_LIMIT = 50

    def __init__(self, client: Any):
        self.client = client
        self._filters: List[Dict[str, Any]] = []
        self._query_type = "content"
        self._context: Optional[str] = None
        self._sort: Optional[str] = None
        self._limit = self.DEFAULT_LIMIT
        self._offset = 0

    # --- Scope ---

    def _jump_to(self, object_type: str) -> "SearchQuery":
        self._query_type = "jump_to"
        return self.of_type(object_type)

    def kits(self) -> "SearchQuery":
        """Search kits by name."""
        return self._jump_to("kit")

    def sections(self) -> "SearchQuery":
        """Search sections by name."""
        return self._jump_to("section")

    def headings(self) -> "SearchQuery":
        """Search headings by content."""
        return self._jump_to("heading")

    def items(self) -> "SearchQuery":
        """Search the content of kits."""
        self._query_type = "content"
        return self

    def assets(self) -> "SearchQuery":
        """Search the asset library."""
        self._context = "library"
        return self

    def tags(self) -> "SearchQuery":
        """Search the tags used in the library."""
        self._query_type = "tags"
        self._context = "library"
        return self

    # --- Filters ---

    @beartype
    def in_kit(self, kit_id: str, version: int = 0) -> "SearchQuery":
        self._filters.append(
            {"type": "kit", "kit_uuid": parse_identifier(kit_id), "version": version}
        )
        return self

    @beartype
    def in_section(self, section_id: str, version: int = 0) -> "SearchQuery":
        self._filters.append(
            {
                "type": "section",
                "section_uuid": parse_identifier(section_id),
                "version": version,
            }
        )
        return self

    @beartype
    def of_type(self, type: Union[str, datatypes.AssetType, datatypes.ItemType]) -> "SearchQuery":
        """
        Limit results to a type.

        Args:
            type: An item type, an asset type or an abstract type such as 'documents' or 'images'.
        """
        if isinstance(type, (datatypes.AssetType, datatypes.ItemType)):
            type = type.value
        self._filters.append({"type": "type", "value": type})
        return self

    @beartype
    def matching_keyword(self, keyword: str) -> "SearchQuery":
        self._filters.append({"type": "keyword", "value": keyword})
        return self

    @beartype
    def with_tag(self, tag: str) -> "SearchQuery":
        self._filters.append({"type": "tag", "value": tag})
        return self

    @beartype
    def orientation(
        self, orientation: Literal["vertical", "horizontal", "square"]
    ) -> "SearchQuery":
        self._filters.append({"type": "orientation", "value": orientation})
        return self

    # --- Dates ---

    @staticmethod
    def _date_clause(value: DateValue) -> Dict[str, Any]:
        # bool is an int subclass but never a meaningful day count
        if isinstance(value, bool):
            raise LingoError(ErrorCode.InvalidParams, f"Invalid date value: {value!r}")
        if isinstance(value, int):
            return {"period": "day", "length": value}
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(datetime.timezone.utc)
            return {"date": value.strftime("%Y-%m-%d")}
        if isinstance(value, datetime.date):
            return {"date": value.strftime("%Y-%m-%d")}
        if isinstance(value, str) and _DATE_PATTERN.match(value):
            return {"date": value}
        raise LingoError(
            ErrorCode.InvalidParams,
            f"Invalid date value {value!r}: expected a date, a yyyy-mm-dd string or a number of days",
        )

    def _set_date_filter(self, clause: Dict[str, Any]) -> "SearchQuery":
        self._filters = [
            f for f in self._filters if f.get("type") not in DATE_FILTER_TYPES
        ]
        self._filters.append(clause)
        return self

    @beartype
    def after(self, value: DateValue) -> "SearchQuery":
        """
        Limit results to content created after a date.

        Args:
            value: A date, a 'yyyy-mm-dd' string, or a number of days before now.
        """
        return self._set_date_filter({"type": "after", **self._date_clause(value)})

    @beartype
    def before(self, value: DateValue) -> "SearchQuery":
        """
        Limit results to content created before a date.

        Args:
            value: A date, a 'yyyy-mm-dd' string, or a number of days before now.
        """
        return self._set_date_filter({"type": "before", **self._date_clause(value)})

    @beartype
    def created_at(
        self,
        exactly: Optional[DateValue] = None,
        after: Optional[DateValue] = None,
        before: Optional[DateValue] = None,
    ) -> "SearchQuery":
        """
        Limit results by creation date, either on an exact day or within a range.

        Args:
            exactly: The day content was created on. Cannot be combined with a range.
            after: Start of the range.
            before: End of the range.

        Raises:
            LingoError: InvalidParams if no date is given, or `exactly` is combined with a range.
        """
        if exactly is not None:
            if after is not None or before is not None:
                raise LingoError(
                    ErrorCode.InvalidParams,
                    "created_at accepts either exactly or a before/after range, not both",
                )
            return self._set_date_filter(
                {"type": "exactly", **self._date_clause(exactly)}
            )
        if after is not None and before is not None:
            return self._set_date_filter(
                {
                    "type": "between",
                    "after": self._date_clause(after),
                    "before": self._date_clause(before),
                }
            )
        if after is not None:
            return self.after(after)
        if before is not None:
            return self.before(before)
        raise LingoError(
            ErrorCode.InvalidParams, "created_at requires exactly, after or before"
        )

    # --- Sorting and paging ---

    @beartype
    def sort_by(self, sort: str, reverse: bool = False) -> "SearchQuery":
        """
        Set the order of results.

        Args:
            sort: The sort key, e.g. 'relevance', 'recent', 'alpha'.
            reverse: Reverse the order. Not supported for 'relevance'.
        """
        if reverse and sort == "relevance":
            raise LingoError(
                ErrorCode.InvalidParams, "Relevance sort cannot be reversed"
            )
        self._sort = f"-{sort}" if reverse else sort
        return self

    @beartype
    def limit(self, limit: int) -> "SearchQuery":
        self._limit = limit
        return self

    @beartype
    def offset(self, offset: int) -> "SearchQuery":
        self._offset = offset
        return self

    def next_page(self) -> "SearchQuery":
        """Advance the offset by one page."""
        self._offset += self._limit
        return self

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        """The wire-keyed query, as sent to the API."""
        query: Dict[str, Any] = {
            "query_type": self._query_type,
            "filters": [dict(f) for f in self._filters],
            "limit": self._limit,
            "offset": self._offset,
        }
        if self._context is not None:
            query["context"] = self._context
        if self._sort is not None:
            query["sort"] = self._sort
        return query

    def serialize(self) -> str:
        """Encode the query as base64 of its UTF-8 JSON, so non-ASCII keywords survive."""
        raw = json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def fetch(self) -> Union[datatypes.SearchResult, Dict[str, Any]]:
        """
        Run the query. Corresponds to GET /search.

        Returns:
            datatypes.SearchResult: The page of results for the current offset and limit.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails.
        """
        res = self.client.call_api("GET", "/search", {"query": {"query": self.serialize()}})
        return self.client._validate(datatypes.SearchResult, res)

    def __repr__(self) -> str:
        return f"SearchQuery({self.to_dict()!r})"

import base64
import json
import os
import sys
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode

import requests
from beartype import beartype
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from . import datatypes
from .lingo_error import ErrorCode, LingoError
from .search import SearchQuery
from .upload import Upload
from .utils import format_date, parse_identifier, to_client_keys, to_wire_keys

DEFAULT_BASE_URL = "https://api.lingoapp.com/1"

# The API refuses section pages larger than this
SECTION_PAGE_LIMIT = 200

GUIDE_COLORS = {"Do": "green", "Don't": "red"}


class RequestOptions(BaseModel):
    """
    The recognized options of a logical API call.

    Attributes:
        query: Query parameters appended to the path. None values are dropped.
        headers: Header overrides. The client and auth headers always win.
        json_body: A mapping serialized as the JSON request body.
        form_body: Multipart fields, in the `files=` shape used by requests.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    query: Optional[Dict[str, Any]] = None
    headers: Optional[Dict[str, str]] = None
    json_body: Optional[Any] = None
    form_body: Optional[Dict[str, Any]] = None


def encode_query(query: Dict[str, Any]) -> str:
    """
    Encode query parameters as a flat `key=value` form-encoded string.

    None values are dropped, booleans become "true"/"false" and sequences are
    joined with commas. Nested mappings are sent as JSON.
    """
    flat = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, bool):
            flat[key] = str(value).lower()
        elif isinstance(value, (list, tuple)):
            flat[key] = ",".join(str(v) for v in value)
        elif isinstance(value, dict):
            flat[key] = json.dumps(value, separators=(",", ":"))
        else:
            flat[key] = value
    return urlencode(flat)


def parse_json_response(body: Any) -> Any:
    """
    Unwrap a decoded response envelope.

    Returns the client-keyed `result` of a successful envelope, raises the
    server's error for a failed one, and raises an Unknown error when the
    `success` flag is missing or malformed.
    """
    success = body.get("success") if isinstance(body, dict) else None
    if success is True:
        return to_client_keys(body.get("result"))
    if success is False:
        raise LingoError.from_wire(body.get("error"))
    log_body = repr(body)
    if len(log_body) > 500:
        log_body = log_body[:500] + "...(truncated)"
    logger.error(f"Response is missing success flag: {log_body}")
    raise LingoError(ErrorCode.Unknown, "Unexpected server response")


class LingoAPI:
    """
    A Python client for the Lingo API.

    Every endpoint method funnels through `call_api`, which builds the request,
    sends it and unwraps the `{success, result | error}` envelope. Keys are
    converted to snake_case on the way out and back to camelCase on the way in
    (with `uuid` renamed to `id`).

    Attributes:
        base_url (str): Root URL of the API, without trailing slash.
        session (requests.Session): Transport used for every request.
        timeout (float | None): Timeout passed to the transport, None to wait indefinitely.
        verbose (bool): Whether verbose logging is enabled.
        disable_response_validation (bool): Whether Pydantic response validation is disabled.
    """

    # Version reflects the client library version
    VERSION: str = "1.0.0"
    CLIENT_NAME: str = "LingoPython"

    def __init__(
        self,
        space_id: Optional[Union[int, str]] = None,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        verbose: Optional[bool] = None,
        disable_response_validation: Optional[bool] = None,
    ):
        """
        Initialize the Lingo API client.

        Args:
            space_id: The id of your Lingo space.
                      Defaults to the LINGO_PYTHON_API_SPACE_ID environment variable.
            token: An API token for your space.
                   Defaults to the LINGO_PYTHON_API_TOKEN environment variable.
            base_url: Override the root URL of the API.
                      Defaults to LINGO_PYTHON_API_BASE_URL, then to https://api.lingoapp.com/1.
            session: A requests.Session to send requests with. A new one is created if omitted.
            timeout: Timeout in seconds handed to the transport. None (default) waits indefinitely.
            verbose: Enable verbose logging. If None, reads LINGO_PYTHON_API_VERBOSE.
            disable_response_validation: If True, return raw client-keyed data instead of Pydantic models.
                                         If None, reads LINGO_PYTHON_API_DISABLE_RESPONSE_VALIDATION.

        Credentials may be left unset and provided later with `setup`; any API
        call made before that fails with an Unauthorized error.
        """
        if verbose is None:
            env_verbose = os.environ.get("LINGO_PYTHON_API_VERBOSE", "").lower()
            self.verbose = env_verbose in ("true", "1", "yes")
        else:
            self.verbose = verbose

        log_level = "DEBUG" if self.verbose else "INFO"
        logger.remove()
        if self.verbose:
            logger.add(
                sys.stderr,
                level=log_level,
                format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            )
        else:
            logger.add(sys.stderr, level=log_level)
        logger.debug("Logger configured for level: {}", log_level)

        resolved_base_url = (
            base_url or os.environ.get("LINGO_PYTHON_API_BASE_URL") or DEFAULT_BASE_URL
        )
        self.base_url = resolved_base_url.rstrip("/")

        if disable_response_validation is not None:
            self.disable_response_validation = disable_response_validation
        else:
            env_disable_validation = os.environ.get(
                "LINGO_PYTHON_API_DISABLE_RESPONSE_VALIDATION", "false"
            ).lower()
            self.disable_response_validation = env_disable_validation == "true"

        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

        self._auth: Optional[str] = None
        resolved_space_id = (
            space_id
            if space_id is not None
            else os.environ.get("LINGO_PYTHON_API_SPACE_ID")
        )
        resolved_token = token or os.environ.get("LINGO_PYTHON_API_TOKEN")
        if resolved_space_id is not None and resolved_token:
            self.setup(resolved_space_id, resolved_token)

        logger.debug("LingoAPI client initialized.")
        logger.debug(f"  Base URL: {self.base_url}")
        logger.debug(f"  Configured: {self.is_configured}")
        logger.debug(
            f"  Disable Response Validation: {self.disable_response_validation}"
        )

    # --- Credentials ---

    @beartype
    def setup(self, space_id: Union[int, str], token: str) -> None:
        """
        Set your API credentials before making any calls.

        Args:
            space_id: The id of your Lingo space.
            token: An API token for your space.
        """
        credentials = f"{space_id}:{token}".encode("utf-8")
        self._auth = "Basic " + base64.b64encode(credentials).decode("ascii")
        logger.debug(f"Credentials set for space {space_id}.")

    @property
    def is_configured(self) -> bool:
        return self._auth is not None

    # --- Making Requests ---

    def request_params(
        self,
        method: str,
        path: str,
        options: Optional[Union[RequestOptions, Dict[str, Any]]] = None,
    ) -> requests.PreparedRequest:
        """
        Build the fully resolved request for a logical API call.

        Args:
            method: HTTP method.
            path: API path relative to the base URL (e.g. '/kits').
            options: A RequestOptions or a dict with the same keys.

        Returns:
            requests.PreparedRequest: URL with query string, headers and serialized body.

        Raises:
            LingoError: InvalidParams if the options are unknown, both a JSON and a form body
                        are given, or the JSON body is not a mapping.
        """
        options = self._coerce_options(options)

        url = self.base_url + path
        if options.query:
            query_string = encode_query(options.query)
            if query_string:
                url = "?".join([url, query_string])

        if options.json_body is not None and options.form_body is not None:
            raise LingoError(
                ErrorCode.InvalidParams,
                "LingoPython Error: cannot add form data and json to a request.",
            )

        body: Optional[bytes] = None
        if options.json_body is not None:
            if not isinstance(options.json_body, dict):
                raise LingoError(
                    ErrorCode.InvalidParams,
                    "LingoPython Error: request data should be a mapping.",
                )
            try:
                body = json.dumps(options.json_body, ensure_ascii=False).encode("utf-8")
            except TypeError as e:
                raise LingoError(
                    ErrorCode.InvalidParams,
                    f"LingoPython Error: failed to JSON encode request data: {e}",
                ) from e

        headers: Dict[str, str] = {}
        if options.form_body is None:
            headers["Content-Type"] = "application/json"
        if options.headers:
            headers.update({str(k): str(v) for k, v in options.headers.items()})
        if options.form_body is not None:
            # requests derives the multipart boundary and content type
            headers.pop("Content-Type", None)
        headers["x-lingo-client"] = f"{self.CLIENT_NAME}/{self.VERSION}"
        headers["User-Agent"] = f"{self.CLIENT_NAME}/{self.VERSION}"
        if self._auth is not None:
            headers["Authorization"] = self._auth

        request = requests.Request(
            method=method.upper(),
            url=url,
            headers=headers,
            data=body,
            files=options.form_body,
        )
        return self.session.prepare_request(request)

    @staticmethod
    def _coerce_options(
        options: Optional[Union[RequestOptions, Dict[str, Any]]],
    ) -> RequestOptions:
        if options is None:
            return RequestOptions()
        if isinstance(options, RequestOptions):
            return options
        try:
            return RequestOptions.model_validate(options)
        except ValidationError as e:
            raise LingoError(
                ErrorCode.InvalidParams,
                f"LingoPython Error: invalid request options: {e}",
            ) from e

    def call_api(
        self,
        method: str,
        path: str,
        options: Optional[Union[RequestOptions, Dict[str, Any]]] = None,
    ) -> Any:
        """
        Make a call to the Lingo API and return its unwrapped, client-keyed result.

        This is the single entry point used by every endpoint method. It does not retry.

        Args:
            method: HTTP method.
            path: API path relative to the base URL (e.g. '/kits').
            options: A RequestOptions or a dict with the keys query, headers, json_body, form_body.

        Returns:
            The `result` of the response envelope, with keys converted to camelCase.

        Raises:
            LingoError: Unauthorized if no credentials are configured, InvalidParams for
                        malformed options, Unknown for transport failures or a malformed envelope,
                        or the error reported by the server.
            json.JSONDecodeError: If the response body is not JSON.
        """
        if not self.is_configured:
            raise LingoError(
                ErrorCode.Unauthorized,
                "Lingo client is not configured. Call setup(space_id, token) before making requests.",
            )

        prepared = self.request_params(method, path, options)

        if self.verbose:
            log_headers = {
                k: ("Basic ..." if k.lower() == "authorization" else v)
                for k, v in prepared.headers.items()
            }
            logger.debug("API Request:")
            logger.debug(f"  Method: {prepared.method}")
            logger.debug(f"  URL: {prepared.url}")
            logger.debug(f"  Headers: {log_headers}")
            if isinstance(prepared.body, bytes):
                logger.debug(f"  Body: {len(prepared.body)} bytes")

        try:
            settings = self.session.merge_environment_settings(
                prepared.url, {}, None, None, None
            )
            response = self.session.send(prepared, timeout=self.timeout, **settings)
        except requests.exceptions.RequestException as e:
            logger.error(
                f"API Error: request failed for {prepared.method} {prepared.url}: {e}"
            )
            raise LingoError(
                ErrorCode.Unknown,
                f"Request failed for {prepared.method} {prepared.url}: {e}",
                details={"url": prepared.url},
            ) from e

        if self.verbose:
            logger.debug("API Response:")
            logger.debug(f"  Status Code: {response.status_code}")

        text = response.text
        try:
            body = json.loads(text)
        except json.JSONDecodeError:
            log_text = text[:500] + "...(truncated)" if len(text) > 500 else text
            logger.error(
                f"API Error: Failed to decode JSON response from {prepared.method} {prepared.url}. Status: {response.status_code}. Content: {log_text}"
            )
            raise

        return parse_json_response(body)

    def _validate(self, model: type, data: Any) -> Any:
        if self.disable_response_validation:
            logger.debug("Skipping response validation as requested.")
            return data
        if isinstance(data, list):
            return [model.model_validate(entry) for entry in data]
        return model.model_validate(data)

    # --- Kits ---

    @beartype
    def fetch_kits(self) -> Union[List[datatypes.Kit], List[Any]]:
        """
        Fetch all kits in your space. Corresponds to GET /kits.

        Returns:
            list[datatypes.Kit]: The kits of the space.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If the API request fails.
        """
        res = self.call_api("GET", "/kits")
        return self._validate(datatypes.Kit, res["kits"])

    @beartype
    def fetch_kit(
        self, kit_id: str, include: Optional[str] = "use_versions"
    ) -> Union[datatypes.Kit, Dict[str, Any]]:
        """
        Fetch a single kit and its versions. Corresponds to GET /kits/{kitId}.

        Args:
            kit_id: The kit id or short id.
            include: Which versions to include: 'use_versions' (draft and recommended version),
                     'versions' (all versions) or None (no versions).

        Returns:
            datatypes.Kit: The kit.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails (e.g. KitNotFound).
        """
        path = f"/kits/{parse_identifier(kit_id)}"
        res = self.call_api("GET", path, {"query": {"options": include}})
        return self._validate(datatypes.Kit, res["kit"])

    @beartype
    def fetch_kit_outline(
        self, kit_id: str, version: int = 0
    ) -> Union[datatypes.KitOutline, Dict[str, Any]]:
        """
        Fetch the outline (sections and headings) of a kit version. Corresponds to GET /kits/{kitId}/outline.

        Args:
            kit_id: The kit id or short id.
            version: The version number of the kit. 0 is the draft.

        Returns:
            datatypes.KitOutline: The kit version with its sections and headings.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails.
        """
        path = f"/kits/{parse_identifier(kit_id)}/outline"
        res = self.call_api("GET", path, {"query": {"v": version}})
        return self._validate(datatypes.KitOutline, res["kitVersion"])

    # --- Sections ---

    def _fetch_section_page(
        self, section_id: str, version: int, page: int, limit: int
    ) -> Dict[str, Any]:
        path = f"/sections/{parse_identifier(section_id)}"
        res = self.call_api(
            "GET", path, {"query": {"v": version, "page": page, "limit": limit}}
        )
        return res["section"]

    @beartype
    def fetch_section(
        self, section_id: str, version: int = 0, page: int = 1, limit: int = 50
    ) -> Union[datatypes.Section, Dict[str, Any]]:
        """
        Fetch a section and one page of its items. Corresponds to GET /sections/{sectionId}.

        Args:
            section_id: The section id or short id.
            version: The version number of the section. 0 is the draft.
            page: The page of items, starting at 1.
            limit: The max number of items on the page (the API allows up to 200).

        Returns:
            datatypes.Section: The section and the items of the requested page.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails (e.g. SectionNotFound).
        """
        section = self._fetch_section_page(section_id, version, page, limit)
        return self._validate(datatypes.Section, section)

    @beartype
    def fetch_all_items_in_section(
        self, section_id: str, version: int = 0
    ) -> Union[List[datatypes.Item], List[Any]]:
        """
        Fetch every item in a section, paging automatically.

        Pages of 200 items are requested until a page comes back short.
        Use `fetch_section` to page manually.

        Args:
            section_id: The section id or short id.
            version: The version number of the section. 0 is the draft.

        Returns:
            list[datatypes.Item]: All items of the section, in order.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If any page request fails.
        """
        page = 1
        results: List[Any] = []
        while True:
            section = self._fetch_section_page(
                section_id, version, page, SECTION_PAGE_LIMIT
            )
            items = section.get("items") or []
            results.extend(items)
            logger.debug(
                f"Fetched {len(items)} items on page {page}. Total fetched: {len(results)}."
            )
            if len(items) < SECTION_PAGE_LIMIT:
                return self._validate(datatypes.Item, results)
            page += 1

    @beartype
    def fetch_items_for_heading(
        self, section_id: str, heading_id: str, version: int = 0
    ) -> Union[List[datatypes.Item], List[Any]]:
        """
        Fetch the items that fall under a heading in a section.

        Items are collected after the first heading matching `heading_id` (by id,
        short id or text content) until the next heading or the end of the section.
        When matching by text, the first heading with that text is used; ids are recommended.

        Args:
            section_id: The section id or short id the heading is in.
            heading_id: The id or the text content of the heading.
            version: The version number of the section. 0 is the draft.

        Returns:
            list[datatypes.Item]: The items under the heading. Empty if the heading is not found.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If any page request fails.
        """

        def is_heading(item: Dict[str, Any]) -> bool:
            return item.get("type") == datatypes.ItemType.Heading.value

        def is_match(item: Dict[str, Any]) -> bool:
            content = (item.get("data") or {}).get("content")
            return is_heading(item) and heading_id in (
                content,
                item.get("id"),
                item.get("shortId"),
            )

        page = 1
        found = False
        results: List[Any] = []
        while True:
            section = self._fetch_section_page(
                section_id, version, page, SECTION_PAGE_LIMIT
            )
            items = section.get("items") or []
            if not items:
                return self._validate(datatypes.Item, results)
            for item in items:
                if found and is_heading(item):
                    return self._validate(datatypes.Item, results)
                if found:
                    results.append(item)
                elif is_match(item):
                    found = True
            page += 1

    @beartype
    def fetch_assets_for_heading(
        self, section_id: str, heading_id: str, version: int = 0
    ) -> Union[List[datatypes.Item], List[Any]]:
        """
        Deprecated alias of `fetch_items_for_heading`.

        Args:
            section_id: The section id or short id the heading is in.
            heading_id: The id or the text content of the heading.
            version: The version number of the section. 0 is the draft.

        Returns:
            list[datatypes.Item]: The items under the heading.

        Raises:
            LingoError: If any page request fails.
        """
        logger.warning(
            "fetch_assets_for_heading() is deprecated, please use fetch_items_for_heading()"
        )
        return self.fetch_items_for_heading(section_id, heading_id, version)

    # --- Items and assets ---

    @beartype
    def fetch_item(
        self, item_id: str, version: int = 0
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Fetch a single item. Corresponds to GET /items/{itemId}.

        Args:
            item_id: The item id or short id.
            version: The version number of the kit the item is in. 0 is the draft.

        Returns:
            datatypes.Item: The item, including its asset if it has one.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails (e.g. ObjectNotFound).
        """
        path = f"/items/{parse_identifier(item_id)}"
        res = self.call_api("GET", path, {"query": {"v": version}})
        return self._validate(datatypes.Item, res["item"])

    @beartype
    def fetch_asset(self, asset_id: str) -> Union[datatypes.Asset, Dict[str, Any]]:
        """
        Fetch a single asset. Corresponds to GET /assets/{assetId}.

        Args:
            asset_id: The asset id.

        Returns:
            datatypes.Asset: The asset.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails (e.g. AssetNotFound).
        """
        res = self.call_api("GET", f"/assets/{parse_identifier(asset_id)}")
        return self._validate(datatypes.Asset, res["asset"])

    @beartype
    def fetch_asset_changelog(
        self, asset_id: str
    ) -> Union[List[datatypes.ChangelogEvent], List[Any]]:
        """
        Fetch the history of changes made to an asset. Corresponds to GET /assets/{assetId}/changelog.

        Args:
            asset_id: The asset id.

        Returns:
            list[datatypes.ChangelogEvent]: The events, the creation event first.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If the API request fails.
        """
        path = f"/assets/{parse_identifier(asset_id)}/changelog"
        res = self.call_api("GET", path)
        return self._validate(datatypes.ChangelogEvent, res["changelog"])

    @beartype
    def fetch_item_changelog(
        self, item_id: str
    ) -> Union[List[datatypes.ChangelogEvent], List[Any]]:
        """
        Fetch the history of changes made to an item. Corresponds to GET /items/{itemId}/changelog.

        Args:
            item_id: The item id or short id.

        Returns:
            list[datatypes.ChangelogEvent]: The events, the creation event first.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If the API request fails.
        """
        path = f"/items/{parse_identifier(item_id)}/changelog"
        res = self.call_api("GET", path)
        return self._validate(datatypes.ChangelogEvent, res["changelog"])

    @beartype
    def fetch_asset_direct_links(
        self, asset_id: str
    ) -> Union[List[datatypes.DirectLink], List[Any]]:
        """
        Fetch the direct links created for an asset. Corresponds to GET /assets/{assetId}/direct_links.

        Args:
            asset_id: The asset id.

        Returns:
            list[datatypes.DirectLink]: The direct links of the asset.
            If response validation is disabled, returns a list of dicts.

        Raises:
            LingoError: If the API request fails.
        """
        path = f"/assets/{parse_identifier(asset_id)}/direct_links"
        res = self.call_api("GET", path)
        return self._validate(datatypes.DirectLink, res["directLinks"])

    @beartype
    def get_asset_download_url(self, asset_id: str, type: Optional[str] = None) -> str:
        """
        Prepare an asset file and get a URL to download it. Corresponds to GET /assets/{assetId}/download.

        Args:
            asset_id: The asset id.
            type: The type of file cut to download (optional, defaults to the original file).

        Returns:
            str: A temporary URL to download the prepared file.

        Raises:
            LingoError: If the API request fails (e.g. AssetNotFound, FileCutUnavailable).
        """
        path = f"/assets/{parse_identifier(asset_id)}/download"
        res = self.call_api("GET", path, {"query": {"type": type, "response": "json"}})
        return res["url"]

    @beartype
    def download_asset(self, asset_id: str, type: Optional[str] = None) -> bytes:
        """
        Download the file of an asset.

        Args:
            asset_id: The asset id.
            type: The type of file cut to download (optional, defaults to the original file).

        Returns:
            bytes: The raw file content.

        Raises:
            LingoError: If preparing the download fails, or Unknown if the file download fails.
        """
        download_url = self.get_asset_download_url(asset_id, type)
        try:
            response = self.session.get(download_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise LingoError(
                ErrorCode.Unknown,
                "An error occurred downloading the asset",
                details={"rawError": str(e)},
            ) from e
        if response.status_code != 200:
            # Most likely a storage error, the body is not a Lingo envelope
            logger.error(
                f"Asset download failed with status {response.status_code}: {response.text[:500]}"
            )
            raise LingoError(
                ErrorCode.Unknown,
                "An error occurred downloading the asset",
                details={"rawError": response.text},
            )
        return response.content

    # --- Search ---

    def search(self) -> SearchQuery:
        """Start a new search query bound to this client."""
        return SearchQuery(self)

    @beartype
    def search_assets_in_kit(
        self,
        kit_id: str,
        version: int,
        query: str,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Search the items in a kit. Corresponds to GET /kits/{kitId}/search.

        Args:
            kit_id: The kit id or short id.
            version: The version of the kit to search.
            query: The text to search for.
            page: The page of results (optional).
            limit: The max number of results per page (optional).

        Returns:
            dict: The results, grouped by section.

        Raises:
            LingoError: If the API request fails.
        """
        path = f"/kits/{parse_identifier(kit_id)}/search"
        params = {"v": version, "query": query, "page": page, "limit": limit}
        return self.call_api("GET", path, {"query": params})

    # --- Creating Content ---

    @beartype
    def create_kit(self, name: str) -> Union[datatypes.Kit, Dict[str, Any]]:
        """
        Create a new kit. Corresponds to POST /kits.

        Args:
            name: The name of the kit.

        Returns:
            datatypes.Kit: The new kit.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails.
        """
        res = self.call_api("POST", "/kits", {"json_body": {"name": name}})
        return self._validate(datatypes.Kit, res["kit"])

    @beartype
    def create_section(
        self, kit_id: str, name: Optional[str] = None
    ) -> Union[datatypes.Section, Dict[str, Any]]:
        """
        Create a new section in a kit. Corresponds to POST /sections.

        Args:
            kit_id: The id of the kit to create the section in.
            name: The name of the section (optional).

        Returns:
            datatypes.Section: The new section.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails.
        """
        body = {"kit_uuid": parse_identifier(kit_id), "name": name}
        res = self.call_api("POST", "/sections", {"json_body": body})
        return self._validate(datatypes.Section, res["section"])

    @staticmethod
    def _item_payload(
        item_type: datatypes.ItemType,
        kit_id: str,
        section_id: str,
        display_order: Optional[Union[int, str]] = None,
        data: Optional[Dict[str, Any]] = None,
        display_properties: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Wire-keyed item descriptor used when creating items and placing uploads."""
        item: Dict[str, Any] = {
            "type": item_type.value,
            "kit_uuid": parse_identifier(kit_id),
            "section_uuid": parse_identifier(section_id),
        }
        if display_order is not None:
            item["display_order"] = display_order
        if data:
            item["data"] = to_wire_keys(data)
        if display_properties:
            item["display_properties"] = to_wire_keys(display_properties)
        return item

    def _create_text_item(
        self,
        item_type: datatypes.ItemType,
        kit_id: str,
        section_id: str,
        content: Optional[str],
        display_order: Optional[Union[int, str]] = None,
        **data: Any,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        if not content:
            raise LingoError(
                ErrorCode.InvalidParams,
                f"Text content is required when creating a {item_type.value} item",
            )
        body = self._item_payload(
            item_type,
            kit_id,
            section_id,
            display_order=display_order,
            data={"content": content, **{k: v for k, v in data.items() if v is not None}},
        )
        res = self.call_api("POST", "/items", {"json_body": body})
        return self._validate(datatypes.Item, res["item"])

    @beartype
    def create_heading(
        self,
        kit_id: str,
        section_id: str,
        content: str,
        display_order: Optional[Union[int, str]] = None,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Create a new heading. Corresponds to POST /items.

        Args:
            kit_id: The id of the kit to create the item in.
            section_id: The id of the section to create the item in (must be in the kit).
            content: The text of the heading.
            display_order: Where to place the item: 'append', 'prepend', 'before:<id>', 'after:<id>' or an index (optional).

        Returns:
            datatypes.Item: The new item.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: InvalidParams if the content is empty, or if the API request fails.
        """
        return self._create_text_item(
            datatypes.ItemType.Heading, kit_id, section_id, content, display_order
        )

    @beartype
    def create_note(
        self,
        kit_id: str,
        section_id: str,
        content: str,
        display_order: Optional[Union[int, str]] = None,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Create a new inline note. Corresponds to POST /items.

        Args:
            kit_id: The id of the kit to create the item in.
            section_id: The id of the section to create the item in (must be in the kit).
            content: The text of the note.
            display_order: Where to place the item: 'append', 'prepend', 'before:<id>', 'after:<id>' or an index (optional).

        Returns:
            datatypes.Item: The new item.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: InvalidParams if the content is empty, or if the API request fails.
        """
        return self._create_text_item(
            datatypes.ItemType.Note, kit_id, section_id, content, display_order
        )

    @beartype
    def create_code_snippet(
        self,
        kit_id: str,
        section_id: str,
        content: str,
        code_language: Optional[str] = None,
        display_order: Optional[Union[int, str]] = None,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Create a new code snippet. Corresponds to POST /items.

        Args:
            kit_id: The id of the kit to create the item in.
            section_id: The id of the section to create the item in (must be in the kit).
            content: The code.
            code_language: The language used for highlighting (optional).
            display_order: Where to place the item: 'append', 'prepend', 'before:<id>', 'after:<id>' or an index (optional).

        Returns:
            datatypes.Item: The new item.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: InvalidParams if the content is empty, or if the API request fails.
        """
        return self._create_text_item(
            datatypes.ItemType.CodeSnippet,
            kit_id,
            section_id,
            content,
            display_order,
            codeLanguage=code_language,
        )

    @beartype
    def create_guide(
        self,
        kit_id: str,
        section_id: str,
        content: str,
        title: str = "Do",
        file: Optional[str] = None,
        display_order: Optional[Union[int, str]] = None,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Create a new Do / Don't guide, optionally illustrated with an image.

        Args:
            kit_id: The id of the kit to create the item in.
            section_id: The id of the section to create the item in (must be in the kit).
            content: The text of the guide.
            title: Either "Do" (green) or "Don't" (red).
            file: Path to an image illustrating the guide (optional).
            display_order: Where to place the item: 'append', 'prepend', 'before:<id>', 'after:<id>' or an index (optional).

        Returns:
            datatypes.Item: The new item.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: InvalidParams if the title is not "Do" or "Don't" or the content is empty,
                        FileNotValid if the file cannot be read, or if the API request fails.
        """
        if title not in GUIDE_COLORS:
            raise LingoError(
                ErrorCode.InvalidParams,
                f"Guide title must be one of {list(GUIDE_COLORS)}, got {title!r}",
            )
        if not content:
            raise LingoError(
                ErrorCode.InvalidParams, "Text content is required when creating a guide"
            )
        item = self._item_payload(
            datatypes.ItemType.Guide,
            kit_id,
            section_id,
            display_order=display_order,
            data={"content": content, "title": title, "color": GUIDE_COLORS[title]},
            display_properties={"displayStyle": "image" if file else "text_only"},
        )
        if file is None:
            res = self.call_api("POST", "/items", {"json_body": item})
            return self._validate(datatypes.Item, res["item"])

        res = Upload(self, file).upload(item)
        return self._validate(datatypes.Item, res["item"])

    @beartype
    def create_supporting_content(
        self,
        file: str,
        kit_id: str,
        section_id: str,
        display_order: Optional[Union[int, str]] = None,
    ) -> Union[datatypes.Item, Dict[str, Any]]:
        """
        Deprecated: create a supporting image item. Prefer `create_file_asset` with display properties.

        Args:
            file: Path to the image file.
            kit_id: The id of the kit to create the item in.
            section_id: The id of the section to create the item in (must be in the kit).
            display_order: Where to place the item (optional).

        Returns:
            datatypes.Item: The new item.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: FileNotValid if the file cannot be read, or if the API request fails.
        """
        logger.warning(
            "Supporting content is deprecated, use create_file_asset() with display_properties instead"
        )
        item = self._item_payload(
            datatypes.ItemType.SupportingContent,
            kit_id,
            section_id,
            display_order=display_order,
        )
        res = Upload(self, file).upload(item)
        return self._validate(datatypes.Item, res["item"])

    def _asset_item(
        self, item_data: Optional[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        if not item_data:
            return None
        try:
            kit_id = item_data["kitId"]
            section_id = item_data["sectionId"]
        except KeyError as e:
            raise LingoError(
                ErrorCode.InvalidParams,
                f"Item data requires kitId and sectionId, missing {e}",
            ) from e
        return self._item_payload(
            datatypes.ItemType.Asset,
            kit_id,
            section_id,
            display_order=item_data.get("displayOrder"),
            display_properties=item_data.get("displayProperties"),
        )

    @beartype
    def create_color_asset(
        self,
        color: str,
        asset_data: Optional[Dict[str, Any]] = None,
        item_data: Optional[Dict[str, Any]] = None,
    ) -> Union[datatypes.UploadResult, Dict[str, Any]]:
        """
        Create a color asset, in the library or placed in a kit. Corresponds to POST /assets.

        Args:
            color: The color, as a hex string (e.g. '#FFFFFF').
            asset_data: Optional asset metadata: name, notes, keywords, dateAdded, dateUpdated.
            item_data: Optional placement: kitId, sectionId, displayOrder, displayProperties.
                       Without it the asset is added to the library only.

        Returns:
            datatypes.UploadResult: `asset` when created in the library, `item` when placed in a kit.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: If the API request fails.
        """
        asset_data = dict(asset_data or {})
        date_added = asset_data.pop("dateAdded", None)
        date_updated = asset_data.pop("dateUpdated", None)
        body: Dict[str, Any] = {
            **asset_data,
            "type": datatypes.AssetType.Color.value,
            "data": {**(asset_data.get("data") or {}), "color": color},
        }
        if date_added is not None:
            body["dateAdded"] = format_date(date_added)
        if date_updated is not None:
            body["dateUpdated"] = format_date(date_updated)
        item = self._asset_item(item_data)
        body = to_wire_keys(body)
        if item:
            body["item"] = item
        res = self.call_api("POST", "/assets", {"json_body": body})
        return self._validate(datatypes.UploadResult, res)

    @beartype
    def create_file_asset(
        self,
        file: str,
        asset_data: Optional[Dict[str, Any]] = None,
        item_data: Optional[Dict[str, Any]] = None,
    ) -> Union[datatypes.UploadResult, Dict[str, Any]]:
        """
        Upload a file as an asset, in the library or placed in a kit. Corresponds to POST /assets.

        Files larger than 20MB are sent in chunks through an upload session.

        Args:
            file: Path to the file to upload.
            asset_data: Optional asset metadata: name, type, notes, keywords, dateAdded, dateUpdated, data.
                        The name defaults to the filename and the type to the file extension.
            item_data: Optional placement: kitId, sectionId, displayOrder, displayProperties.
                       Without it the asset is added to the library only.

        Returns:
            datatypes.UploadResult: `asset` when created in the library, `item` when placed in a kit.
            If response validation is disabled, returns a dict.

        Raises:
            LingoError: FileNotValid if the file cannot be read, InvalidParams if the type cannot
                        be determined, or if the API request fails.
        """
        upload = Upload(self, file, asset_data)
        res = upload.upload(self._asset_item(item_data))
        return self._validate(datatypes.UploadResult, res)

    @beartype
    def validate_asset(
        self, file: str, asset_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Check that a file can be uploaded and return the metadata that would be sent, without uploading.

        Args:
            file: Path to the file.
            asset_data: Optional asset metadata, as for `create_file_asset`.

        Returns:
            dict: The resolved asset metadata (name, type, ...).

        Raises:
            LingoError: FileNotValid if the file cannot be read, InvalidParams if the type cannot be determined.
        """
        return Upload(self, file, asset_data).asset_data

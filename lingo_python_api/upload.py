import json
import math
import os
from typing import Any, Dict, Optional

from loguru import logger

from .datatypes import FONT_EXTENSIONS, AssetType
from .lingo_error import ErrorCode, LingoError
from .utils import (
    deep_merge,
    format_date,
    parse_file_path,
    resolve_file_path,
    retry,
    to_wire_keys,
)


class Upload:
    """
    Upload of a single file as a Lingo asset.

    Files up to `MAX_UNCHUNKED_SIZE` bytes are sent in one multipart request.
    Larger files go through an upload session: the session is started, the
    file is appended in chunks of `CHUNK_SIZE` bytes (numbered from 1), the
    session is completed with the total size, and the asset is then created
    from the upload id. Each session call is retried `RETRIES` times.

    A failed session is not cleaned up; uploading again starts a new session
    from the first byte.

    Attributes:
        file_path (str): Resolved path of the file.
        size (int): Size of the file in bytes.
        asset_data (dict): Client-keyed asset metadata sent with the file.
    """

    MAX_UNCHUNKED_SIZE = 20_000_000
    CHUNK_SIZE = 10_000_000
    RETRIES = 2

    def __init__(self, client: Any, file: str, asset_data: Optional[Dict[str, Any]] = None):
        """
        Resolve and validate the file to upload.

        Args:
            client: The LingoAPI client calls are made through.
            file: Path to the file. Paths starting with "." are resolved against the working directory.
            asset_data: Optional asset metadata: name, type, notes, keywords, dateAdded, dateUpdated, data.

        Raises:
            LingoError: FileNotValid if the file cannot be read, InvalidParams if no type can be determined.
        """
        self.client = client
        self.file_path = resolve_file_path(file)
        filename, extension = parse_file_path(file)

        if not os.path.isfile(self.file_path) or not os.access(self.file_path, os.R_OK):
            raise LingoError(
                ErrorCode.FileNotValid, f"Unable to access asset file: {file}"
            )

        data = dict(asset_data or {})
        asset_type = data.pop("type", None) or extension
        if isinstance(asset_type, AssetType):
            asset_type = asset_type.value
        if not asset_type:
            raise LingoError(
                ErrorCode.InvalidParams,
                "Unable to determine file type from path. Provide type in the asset data or a filename with a valid extension",
            )

        self.size = os.stat(self.file_path).st_size
        self.filename = os.path.basename(self.file_path)

        date_added = data.pop("dateAdded", None)
        date_updated = data.pop("dateUpdated", None)
        merged = deep_merge(
            {"name": data.pop("name", None) or filename, "type": asset_type},
            data,
        )
        if date_added is not None:
            merged["dateAdded"] = format_date(date_added)
        if date_updated is not None:
            merged["dateUpdated"] = format_date(date_updated)

        if asset_type.upper() in FONT_EXTENSIONS:
            merged["type"] = AssetType.TextStyle.value
            merged = deep_merge(merged, {"meta": {"font": {"extension": asset_type}}})

        self.asset_data = merged

    @property
    def is_chunked(self) -> bool:
        return self.size > self.MAX_UNCHUNKED_SIZE

    @property
    def chunk_count(self) -> int:
        """Number of chunks sent for a chunked upload."""
        return math.ceil(self.size / self.CHUNK_SIZE)

    def upload(self, item: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Upload the file and create the asset.

        Args:
            item: Optional wire-keyed item descriptor placing the asset in a kit.
                  Without it the asset is only added to the library.

        Returns:
            dict: The client-keyed result, holding `asset` or `item`.

        Raises:
            LingoError: If any call fails once its retries are exhausted.
        """
        body = to_wire_keys(self.asset_data)
        if item:
            body["item"] = item

        if not self.is_chunked:
            logger.debug(f"Uploading {self.filename} ({self.size} bytes) in one request")
            with open(self.file_path, "rb") as f:
                form = {
                    "asset": (self.filename, f),
                    "json": (None, json.dumps(body), "application/json"),
                }
                return self.client.call_api("POST", "/assets", {"form_body": form})

        logger.debug(
            f"Uploading {self.filename} ({self.size} bytes) in {self.chunk_count} chunks"
        )
        upload_id = self.start_session()
        for chunk_number in range(1, self.chunk_count + 1):
            self.append_chunk(upload_id, chunk_number)
        self.complete_session(upload_id)

        body["upload_id"] = upload_id
        return self.client.call_api("POST", "/assets", {"json_body": body})

    def _call_with_retry(self, method: str, path: str, options: Optional[Dict[str, Any]] = None) -> Any:
        return retry(
            lambda: self.client.call_api(method, path, options), self.RETRIES
        )

    def start_session(self) -> str:
        """Open an upload session and return its id."""
        res = self._call_with_retry("POST", "/upload_session/start")
        return res["uploadId"]

    def read_chunk(self, chunk_number: int) -> bytes:
        """Read the byte range of a 1-indexed chunk."""
        start = (chunk_number - 1) * self.CHUNK_SIZE
        length = min(self.CHUNK_SIZE, self.size - start)
        with open(self.file_path, "rb") as f:
            f.seek(start)
            return f.read(length)

    def append_chunk(self, upload_id: str, chunk_number: int) -> Any:
        """Send one chunk of the file to the session."""
        sidecar = json.dumps({"upload_id": upload_id, "chunk_number": chunk_number})

        def append():
            form = {
                "chunk": (self.filename, self.read_chunk(chunk_number)),
                "json": (None, sidecar, "application/json"),
            }
            return self.client.call_api(
                "POST", "/upload_session/append", {"form_body": form}
            )

        logger.debug(f"Appending chunk {chunk_number}/{self.chunk_count} to {upload_id}")
        return retry(append, self.RETRIES)

    def complete_session(self, upload_id: str) -> Any:
        """Close the session, confirming the total size."""
        return self._call_with_retry(
            "POST",
            "/upload_session/complete",
            {"json_body": {"upload_id": upload_id, "size": self.size}},
        )

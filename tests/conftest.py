import json
from typing import Any, List, Optional
from urllib.parse import urlparse

import pytest
import requests
import beartype  # to trigger the runtime typechecking

from lingo_python_api import LingoAPI

SPACE_ID = 1234
TOKEN = "secret-token"

ENV_VARS = (
    "LINGO_PYTHON_API_SPACE_ID",
    "LINGO_PYTHON_API_TOKEN",
    "LINGO_PYTHON_API_BASE_URL",
    "LINGO_PYTHON_API_VERBOSE",
    "LINGO_PYTHON_API_DISABLE_RESPONSE_VALIDATION",
    "LINGO_PYTHON_API_ENSURE_ASCII",
)


def make_response(
    body: Any = None,
    status: int = 200,
    text: Optional[str] = None,
    content: Optional[bytes] = None,
) -> requests.Response:
    """Build a requests.Response holding a JSON body, raw text or raw bytes."""
    response = requests.Response()
    response.status_code = status
    if content is None:
        content = (text if text is not None else json.dumps(body)).encode("utf-8")
    response._content = content
    response.encoding = "utf-8"
    response.url = "https://api.lingoapp.com/1"
    return response


class FakeSession(requests.Session):
    """
    A requests.Session that never touches the network.

    Every prepared request handed to `send` is recorded in `sent`, and answered
    with the next queued response. Queued exceptions are raised instead.
    """

    def __init__(self):
        super().__init__()
        self.sent: List[requests.PreparedRequest] = []
        self.send_kwargs: List[dict] = []
        self.responses: List[Any] = []

    def queue(self, *entries: Any) -> "FakeSession":
        self.responses.extend(entries)
        return self

    def queue_result(self, result: Any) -> "FakeSession":
        return self.queue(make_response({"success": True, "result": result}))

    def queue_error(self, code: int, message: str = "Failed", **extra: Any) -> "FakeSession":
        error = {"code": code, "message": message, **extra}
        return self.queue(make_response({"success": False, "error": error}))

    def send(self, request, **kwargs):
        self.sent.append(request)
        self.send_kwargs.append(kwargs)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        entry = self.responses.pop(0)
        if isinstance(entry, Exception):
            raise entry
        return entry

    @property
    def paths(self) -> List[str]:
        return [urlparse(r.url).path for r in self.sent]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment from configuring the clients under test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> LingoAPI:
    """A configured client whose requests are answered by the fake session."""
    return LingoAPI(space_id=SPACE_ID, token=TOKEN, session=session)


@pytest.fixture
def raw_client(session: FakeSession) -> LingoAPI:
    """Same as `client`, returning raw dicts instead of models."""
    return LingoAPI(
        space_id=SPACE_ID,
        token=TOKEN,
        session=session,
        disable_response_validation=True,
    )

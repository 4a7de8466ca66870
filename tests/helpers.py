"""Test doubles and request builders shared by the test modules."""

import json
from typing import Any, Dict, List, Optional

import azure.functions as func


class FakeQuestionStore:
    """In-memory stand-in for QuestionBlobStore."""

    base_url = "https://example.blob.core.windows.net/question-data/"

    def __init__(self):
        self.blobs: Dict[str, str] = {}
        self.fail_urls: set = set()
        self.deleted: List[str] = []

    def list_blobs(self, prefix: str) -> List[Dict[str, Any]]:
        return [
            {"pathname": name, "url": self.base_url + name, "uploadedAt": "2026-10-18T00:00:00+00:00"}
            for name in sorted(self.blobs)
            if name.startswith(prefix)
        ]

    def fetch_text(self, url: str) -> str:
        if url in self.fail_urls:
            raise ConnectionError(f"fetch failed: {url}")
        return self.blobs[url[len(self.base_url):]]

    def put_json(self, pathname: str, text: str) -> str:
        self.blobs[pathname] = text
        return self.base_url + pathname

    def delete(self, pathname: str) -> None:
        self.deleted.append(pathname)
        self.blobs.pop(pathname, None)

    def seed(self, pathname: str, record: Any) -> None:
        self.blobs[pathname] = record if isinstance(record, str) else json.dumps(record)


def make_request(method: str, params: Optional[Dict[str, str]] = None, body: Any = None) -> func.HttpRequest:
    if body is None:
        raw = b""
    elif isinstance(body, (bytes, str)):
        raw = body.encode("utf-8") if isinstance(body, str) else body
    else:
        raw = json.dumps(body).encode("utf-8")
    return func.HttpRequest(
        method=method,
        url="http://localhost:7071/api/questions",
        headers={"Content-Type": "application/json"},
        params=params or {},
        body=raw,
    )


def body_of(resp: func.HttpResponse) -> Any:
    return json.loads(resp.get_body().decode("utf-8"))

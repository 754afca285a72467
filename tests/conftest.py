"""Pytest fixtures: a fake Azure DevOps organization behind httpx.MockTransport."""
import re
from typing import Any, Dict, List, Tuple

import httpx
import pytest
from fastmcp import Client

from azure_boards_mcp import client as client_module
from azure_boards_mcp import tools  # noqa: F401
from azure_boards_mcp.client import Connection
from azure_boards_mcp.config import mcp

ORG_URL = "https://dev.azure.com/contoso"
PAT = "test-pat"

_COMMENTS = re.compile(r"/_apis/wit/workItems/(\d+)/comments(?:/(\d+))?$")
_WORK_ITEM = re.compile(r"/_apis/wit/workitems/(\d+)$")


class FakeAzureDevOps:
    """Serves the handful of REST endpoints the tools call."""

    def __init__(self):
        self.work_items: Dict[int, Dict[str, Any]] = {}
        self.wiql_ids: List[int] = []
        self.comments: Dict[int, List[Dict[str, Any]]] = {}
        self.comments_status = 200
        self.comments_error_body = ""
        self.files: Dict[str, Tuple[str, bytes]] = {}
        self.requests: List[httpx.Request] = []
        self.error_status = None

    def add_work_item(self, work_item_id: int, fields=None, relations=None) -> Dict[str, Any]:
        payload = {"id": work_item_id, "fields": fields or {}}
        if relations is not None:
            payload["relations"] = relations
        self.work_items[work_item_id] = payload
        return payload

    def requests_to(self, path_suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if self.error_status:
            return httpx.Response(self.error_status, text="server error")

        if path.endswith("/_apis/wit/wiql"):
            return httpx.Response(200, json={"workItems": [{"id": i} for i in self.wiql_ids]})

        match = _COMMENTS.search(path)
        if match:
            return self._comments(request, int(match.group(1)), match.group(2))

        match = _WORK_ITEM.search(path)
        if match:
            wi = self.work_items.get(int(match.group(1)))
            if wi is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=wi)

        if path.endswith("/_apis/wit/workitems"):
            ids = [int(i) for i in request.url.params["ids"].split(",")]
            return httpx.Response(200, json={"value": [self.work_items[i] for i in ids]})

        if path in self.files:
            content_type, body = self.files[path]
            headers = {"content-type": content_type} if content_type else {}
            return httpx.Response(200, content=body, headers=headers)

        return httpx.Response(404, text="no route")

    def _comments(self, request: httpx.Request, ticket: int, comment_id) -> httpx.Response:
        if self.comments_status != 200:
            return httpx.Response(self.comments_status, text=self.comments_error_body)

        comments = self.comments.get(ticket, [])
        if comment_id is not None:
            for comment in comments:
                if comment.get("id") == int(comment_id):
                    return httpx.Response(200, json=comment)
            return httpx.Response(404, text="comment not found")

        top = int(request.url.params.get("$top", "200"))
        page = comments[:top]
        return httpx.Response(
            200, json={"totalCount": len(comments), "count": len(page), "comments": page}
        )


@pytest.fixture
def ado() -> FakeAzureDevOps:
    return FakeAzureDevOps()


@pytest.fixture
def connection(ado, monkeypatch) -> Connection:
    conn = Connection(PAT, ORG_URL, transport=httpx.MockTransport(ado.handle))
    monkeypatch.setattr(client_module, "_connection", conn)
    yield conn
    conn.close()


@pytest.fixture
def call_tool(connection):
    """Call a registered tool through an in-memory MCP client; returns the content blocks."""
    async def _call(name: str, arguments: Dict[str, Any] = None):
        async with Client(mcp) as mcp_client:
            result = await mcp_client.call_tool(name, arguments or {})
        return result.content

    return _call


@pytest.fixture
def call_text(call_tool):
    async def _call(name: str, arguments: Dict[str, Any] = None) -> str:
        content = await call_tool(name, arguments)
        assert len(content) == 1
        return content[0].text

    return _call

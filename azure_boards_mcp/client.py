"""HTTP client for Azure DevOps API."""
import logging
import threading
from typing import Any, Dict, List, Optional

import httpx

from . import config
from .config import ConfigurationError, WIT_API_VERSION, WORK_ITEM_BATCH_SIZE
from .models import WorkItem

logger = logging.getLogger(__name__)


class WorkItemTrackingClient:
    """Work item tracking REST calls used by the tools."""

    def __init__(self, http: httpx.Client, organization_url: str):
        self.http = http
        self.base_url = organization_url.rstrip("/")

    def get_work_item(self, work_item_id: int, expand: Optional[str] = None) -> Optional[WorkItem]:
        """Fetch one work item; returns None when it does not exist (HTTP 404)."""
        url = f"{self.base_url}/_apis/wit/workitems/{work_item_id}"
        params = {"api-version": WIT_API_VERSION}
        if expand:
            params["$expand"] = expand

        logger.debug("GET work item %s (expand=%s)", work_item_id, expand)
        resp = self.http.get(url, params=params)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()

        return WorkItem.model_validate(resp.json())

    def get_work_items(self, ids: List[int]) -> List[WorkItem]:
        """Fetch up to WORK_ITEM_BATCH_SIZE work items in one call, in the order given."""
        if not ids:
            return []
        if len(ids) > WORK_ITEM_BATCH_SIZE:
            raise ValueError(
                f"At most {WORK_ITEM_BATCH_SIZE} work items can be fetched per call, got {len(ids)}"
            )

        url = f"{self.base_url}/_apis/wit/workitems"
        params = {
            "ids": ",".join(str(i) for i in ids),
            "api-version": WIT_API_VERSION,
        }

        logger.debug("GET %d work items", len(ids))
        resp = self.http.get(url, params=params)
        resp.raise_for_status()

        data = resp.json()
        return [WorkItem.model_validate(wi) for wi in data.get("value") or []]

    def query_by_wiql(self, query: str) -> List[int]:
        """Run a WIQL query and return the matching work item ids in result order."""
        url = f"{self.base_url}/_apis/wit/wiql?api-version={WIT_API_VERSION}"

        logger.debug("POST wiql: %s", query)
        resp = self.http.post(url, json={"query": query})
        resp.raise_for_status()

        data = resp.json()
        return [ref["id"] for ref in data.get("workItems") or [] if ref.get("id") is not None]


class Connection:
    """
    Authenticated access to one Azure DevOps organization.

    Holds the PAT, the organization URL and a shared httpx client using
    Basic auth with an empty user name. The work item tracking client is
    created on the first call to ``client()`` and reused afterwards.
    """

    def __init__(
        self,
        access_token: str,
        organization_url: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not access_token or not organization_url:
            raise ConfigurationError("AZDO_PAT and AZDO_ORG_URL env vars are required")

        self.access_token = access_token
        self.organization_url = organization_url.rstrip("/")
        self.http = httpx.Client(auth=("", access_token), transport=transport, timeout=timeout)

        self._client: Optional[WorkItemTrackingClient] = None
        self._client_lock = threading.Lock()

    def client(self) -> WorkItemTrackingClient:
        if self._client is None:
            with self._client_lock:
                # Concurrent first callers wait here and share one instance
                if self._client is None:
                    self._client = WorkItemTrackingClient(self.http, self.organization_url)
        return self._client

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Authenticated GET against an arbitrary URL; the response is fully read."""
        logger.debug("GET %s", url)
        return self.http.get(url, params=params, headers=headers)

    def close(self) -> None:
        self.http.close()


_connection: Optional[Connection] = None
_connection_lock = threading.Lock()


def get_connection() -> Connection:
    """Return the process-wide Connection, building it from configuration once."""
    global _connection
    if _connection is None:
        with _connection_lock:
            if _connection is None:
                _connection = Connection(
                    config.AZDO_PAT,
                    config.AZDO_ORG_URL,
                    timeout=config.AZDO_HTTP_TIMEOUT,
                )
    return _connection

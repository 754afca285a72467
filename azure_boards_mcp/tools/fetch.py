"""MCP tool for downloading attachment (or any other URL) content."""
import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit

from fastmcp.tools.tool import ToolResult
from mcp.types import BlobResourceContents, EmbeddedResource, ImageContent, TextContent

from ..client import get_connection
from ..config import mcp
from ..utils.helpers import soft_fail

logger = logging.getLogger(__name__)


def file_name_from_url(url: str) -> Optional[str]:
    """Return the ``fileName`` query parameter of ``url``, if it has one."""
    try:
        values = parse_qs(urlsplit(url).query).get("fileName")
    except ValueError:
        return None
    return values[0] if values else None


def build_content_block(url: str, body: bytes, mime_type: str, name: Optional[str]):
    """
    Pick the content block for a downloaded body based on its MIME type.

    - image/*  -> image block with base64 data
    - text/*   -> text block with the UTF-8 decoded body
    - anything else -> embedded binary resource (uri, base64 blob, mimeType)
    """
    extra: Dict[str, Any] = {"name": name} if name is not None else {}

    if mime_type.startswith("image/"):
        return ImageContent(
            type="image",
            data=base64.b64encode(body).decode("ascii"),
            mimeType=mime_type,
            **extra,
        )

    if mime_type.startswith("text/"):
        return TextContent(type="text", text=body.decode("utf-8", errors="replace"), **extra)

    return EmbeddedResource(
        type="resource",
        resource=BlobResourceContents(
            uri=url,
            blob=base64.b64encode(body).decode("ascii"),
            mimeType=mime_type or None,
        ),
        **extra,
    )


@mcp.tool(name="fetch-url")
@soft_fail("fetching URL")
def fetch_url(url: str, name: Optional[str] = None) -> ToolResult:
    """
    Fetches content from a URL using the Azure DevOps credentials.

    Typically used with the attachment URLs returned by get-work-item or
    list-attachments. Returns exactly one content block:
    - type=image: base64 image data (for image/* responses)
    - type=text: the text content (for text/* responses such as CSV)
    - type=resource: a binary blob with uri, blob and mimeType (PDF, Excel, Word, ...)

    Parameters:
    - url: The URL to fetch.
    - name: Optional file name for the content. Defaults to the URL's fileName
      query parameter when present.
    """
    resp = get_connection().get(url)
    if resp.is_error:
        logger.warning("GET %s returned %s", url, resp.status_code)

    mime_type = resp.headers.get("content-type", "")
    final_name = name if name is not None else file_name_from_url(url)

    block = build_content_block(url, resp.content, mime_type, final_name)
    return ToolResult(content=[block])

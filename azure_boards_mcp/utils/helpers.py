"""Helper functions shared by the Azure Boards tools."""
import functools
import logging
import re
from datetime import datetime
from typing import Any, Callable, Optional
from urllib.parse import quote

from markdownify import ATX, markdownify

logger = logging.getLogger(__name__)

# Python 3.10 fromisoformat only takes 3 or 6 fractional digits; Azure DevOps sends 1 to 7
_FRACTION = re.compile(r"\.(\d+)")


def encode_uri_component(value: str) -> str:
    """Percent-encode a URL component the same way browsers' encodeURIComponent does."""
    return quote(value, safe="-_.!~*'()")


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment (work item field or comment body) to Markdown."""
    return markdownify(html, heading_style=ATX).strip()


def format_date(value: Optional[str]) -> Optional[str]:
    """
    Render an ISO-8601 timestamp from Azure DevOps in local time.

    Returns None for an empty value. Strings that cannot be parsed are
    returned unchanged rather than failing the caller.
    """
    if not value:
        return None
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable date %r", value)
        return value
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def soft_fail(action: str) -> Callable:
    """
    Turn any exception raised by a tool into a readable text result.

    The MCP host then sees a normal response such as
    ``Error fetching comments: <message>`` instead of a protocol error.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                logger.exception("Tool %s failed", func.__name__)
                return f"Error {action}: {exc}"

        return wrapper

    return decorator

"""Work item comment MCP tools.

The comments endpoint is only available as a preview API, so every failure
here (missing work item, 404, other HTTP errors, exceptions) is reported as
a readable text result instead of a tool error.
"""
import logging
from typing import Optional, Tuple

from ..client import Connection, get_connection
from ..config import COMMENTS_API_VERSION, mcp
from ..models import Comment, CommentList
from ..utils.helpers import encode_uri_component, format_date, html_to_markdown, soft_fail

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def _resolve_project(connection: Connection, ticket: int) -> Tuple[Optional[str], Optional[str]]:
    """Return (project, None) or (None, message) when the project cannot be resolved."""
    work_item = connection.client().get_work_item(ticket)
    if work_item is None:
        return None, f"Work item {ticket} not found."
    if not work_item.project:
        return None, f"Could not determine project for work item {ticket}."
    return work_item.project, None


def _comments_url(connection: Connection, project: str, ticket: int) -> str:
    return (
        f"{connection.organization_url}/{encode_uri_component(project)}"
        f"/_apis/wit/workItems/{ticket}/comments"
    )


def _comment_body(comment: Comment) -> str:
    return html_to_markdown(comment.text) if comment.text is not None else "<no content>"


def render_comments(ticket: int, page: CommentList, limit: int) -> str:
    sections = []
    for comment in page.comments:
        created = format_date(comment.created_date) or "<no date>"
        sections.append(
            f"### Comment #{comment.display_id}\n\n"
            f"**Author:** {comment.author}  \n"
            f"**Date:** {created}\n\n"
            f"{_comment_body(comment)}\n\n---"
        )

    total = page.total
    header = f"# Comments for Work Item #{ticket}\n\n"
    if total > limit:
        header += f"⚠️ **Showing {limit} most recent comments out of {total} total.**\n\n"
    else:
        header += f"**Total:** {total} comment{'s' if total != 1 else ''}\n\n"

    return header + "\n\n".join(sections)


def render_comment(comment: Comment) -> str:
    created = format_date(comment.created_date) or "<no date>"
    modified = format_date(comment.modified_date)

    modified_section = ""
    if modified and modified != created:
        modified_section = f"  \n**Modified:** {modified}"

    return (
        f"# Comment #{comment.display_id}\n\n"
        f"**Author:** {comment.author}  \n"
        f"**Created:** {created}{modified_section}\n\n"
        f"---\n\n"
        f"{_comment_body(comment)}"
    )


@mcp.tool(name="list-comments")
@soft_fail("fetching comments")
def list_comments(ticket: int, limit: int = 100) -> str:
    """
    Fetches the comments of a work item, newest first.

    Returns a text block with a Markdown section per comment (author, date
    and the comment converted from HTML). When the work item has more
    comments than `limit`, only the most recent `limit` are returned and
    the header says so.

    Parameters:
    - ticket: The work item ID.
    - limit: Maximum number of comments to return (default: 100).
    """
    connection = get_connection()
    project, message = _resolve_project(connection, ticket)
    if message:
        return message

    resp = connection.get(
        _comments_url(connection, project, ticket),
        params={
            "$top": limit,
            "$orderby": "createdDate desc",
            "api-version": COMMENTS_API_VERSION,
        },
        headers=JSON_HEADERS,
    )

    if resp.is_error:
        logger.warning("Comments request for work item %s returned %s", ticket, resp.status_code)
        if resp.status_code == 404:
            return f"Work item {ticket} has no comments or comments API is not available."
        return f"Error fetching comments: {resp.status_code} {resp.text}"

    page = CommentList.model_validate(resp.json())
    if not page.comments:
        return f"No comments found for work item {ticket}."

    return render_comments(ticket, page, limit)


@mcp.tool(name="get-comment")
@soft_fail("fetching comment")
def get_comment(comment_id: int, ticket: int) -> str:
    """
    Fetches a single work item comment by its ID.

    Returns a text block with the comment's author, created date, modified
    date (only when it was edited) and its text converted to Markdown.

    Parameters:
    - comment_id: The comment ID (as shown by list-comments).
    - ticket: The work item ID that contains this comment.
    """
    connection = get_connection()
    project, message = _resolve_project(connection, ticket)
    if message:
        return message

    resp = connection.get(
        f"{_comments_url(connection, project, ticket)}/{comment_id}",
        params={"api-version": COMMENTS_API_VERSION},
        headers=JSON_HEADERS,
    )

    if resp.is_error:
        logger.warning("Comment %s of work item %s returned %s", comment_id, ticket, resp.status_code)
        if resp.status_code == 404:
            return f"Comment {comment_id} not found in work item {ticket}."
        return f"Error fetching comment: {resp.status_code} {resp.text}"

    return render_comment(Comment.model_validate(resp.json()))

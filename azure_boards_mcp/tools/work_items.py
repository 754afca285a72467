"""Work item-related MCP tools."""
import json
import logging
from typing import List

from ..client import get_connection
from ..config import mcp, MY_WORK_ITEM_STATES, WORK_ITEM_BATCH_SIZE
from ..models import Attachment, DESCRIPTION_FIELD, USER_STORY_FORMAT_FIELD, WorkItem
from ..utils.helpers import encode_uri_component, html_to_markdown, soft_fail

logger = logging.getLogger(__name__)

MY_WORK_ITEMS_WIQL = (
    "SELECT [System.Id] FROM WorkItems "
    "WHERE [System.AssignedTo] = @Me "
    "AND [System.State] IN ({states}) "
    "ORDER BY [System.ChangedDate] DESC"
).format(states=", ".join(f"'{s}'" for s in MY_WORK_ITEM_STATES))


def _html_field(work_item: WorkItem, name: str, placeholder: str) -> str:
    if not work_item.has_field(name):
        return placeholder
    return html_to_markdown(str(work_item.fields[name]))


def _edit_url(org_url: str, project: str, work_item_id: int) -> str:
    return f"{org_url.rstrip('/')}/{encode_uri_component(project)}/_workitems/edit/{work_item_id}"


def render_work_item(work_item: WorkItem, work_item_id: int, org_url: str) -> str:
    """Markdown summary: linked title, state, user story, description and attachments."""
    project = work_item.project or "<no project>"
    url = _edit_url(org_url, project, work_item_id)
    user_story = _html_field(work_item, USER_STORY_FORMAT_FIELD, "<no user story format>")
    description = _html_field(work_item, DESCRIPTION_FIELD, "<no description>")

    attachments_section = ""
    attachments = work_item.attachments()
    if attachments:
        attachments_section = "\n\n---\n**Attachments:**\n" + "\n".join(
            f"* [{att.name}]({att.url})" for att in attachments
        )

    return (
        f"# [{work_item.title}]({url})\n\n"
        f"**State:** {work_item.state}\n\n"
        f"---\n{user_story}\n\n"
        f"---\n{description}"
        f"{attachments_section}"
    )


@mcp.tool(name="get-work-item")
@soft_fail("fetching work item")
def get_work_item(id: int) -> str:
    """
    Fetches a single Azure Boards work item by its ID (read-only).

    Returns a text block with a Markdown summary: the title linked to the
    work item page, its state, the user story format and description
    converted from HTML, and a list of attachments when there are any.

    Parameters:
    - id: The work item ID.
    """
    connection = get_connection()
    work_item = connection.client().get_work_item(id, expand="relations")
    if work_item is None:
        logger.warning("Work item %s not found", id)
        return f"Work item {id} not found."

    return render_work_item(work_item, id, connection.organization_url)


@mcp.tool(name="list-my-work-items")
@soft_fail("listing work items")
def list_my_work_items() -> str:
    """
    Lists the Azure Boards work items assigned to the authenticated user (read-only).

    Only items in the Development, In Review, Merged, New and Requirements
    states are included, most recently changed first. Returns a Markdown
    bullet list with ID, title, state and sprint for each work item.
    """
    wit = get_connection().client()

    ids = wit.query_by_wiql(MY_WORK_ITEMS_WIQL)
    if not ids:
        return "No work items assigned to you."

    # Batches run one after another; results keep the query order
    work_items: List[WorkItem] = []
    for start in range(0, len(ids), WORK_ITEM_BATCH_SIZE):
        batch = ids[start:start + WORK_ITEM_BATCH_SIZE]
        work_items.extend(wit.get_work_items(batch))

    return "\n".join(
        f"* #{wi.id if wi.id is not None else '?'} – {wi.title} (**{wi.state}**) - {wi.sprint}"
        for wi in work_items
    )


@mcp.tool(name="list-attachments")
@soft_fail("listing attachments")
def list_attachments(id: int) -> str:
    """
    Lists all attachments (name and URL) of a work item.

    Returns a pretty-printed JSON array of {"name", "url"} objects. Each URL
    carries a fileName query parameter so it can be passed straight to
    fetch-url and keep the original file name.

    Parameters:
    - id: The work item ID.
    """
    work_item = get_connection().client().get_work_item(id, expand="relations")
    attachments: List[Attachment] = work_item.attachments() if work_item else []

    return json.dumps([att.model_dump() for att in attachments], indent=2, ensure_ascii=False)

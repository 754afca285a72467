"""Typed views over the Azure DevOps work item and comment payloads.

Only the handful of fields the tools render are modelled; everything else in
the REST responses is ignored. Every accessor has a placeholder so a missing
field never breaks a tool.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.helpers import encode_uri_component

ATTACHED_FILE = "AttachedFile"

TITLE_FIELD = "System.Title"
STATE_FIELD = "System.State"
PROJECT_FIELD = "System.TeamProject"
ITERATION_FIELD = "System.IterationPath"
DESCRIPTION_FIELD = "System.Description"
USER_STORY_FORMAT_FIELD = "Custom.UserStoryFormat"


class Attachment(BaseModel):
    """A file attached to a work item, with a download URL that keeps its name."""

    name: str
    url: str


class Relation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rel: str = ""
    url: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("attributes", mode="before")
    @classmethod
    def _none_attributes(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_attachment(self) -> Attachment:
        name = str(self.attributes.get("name") or "<no name>")
        # fileName makes the download keep the original name and extension
        separator = "&" if "?" in self.url else "?"
        url = f"{self.url}{separator}fileName={encode_uri_component(name)}"
        return Attachment(name=name, url=url)


class WorkItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    fields: Dict[str, Any] = Field(default_factory=dict)
    relations: List[Relation] = Field(default_factory=list)

    @field_validator("fields", mode="before")
    @classmethod
    def _none_fields(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("relations", mode="before")
    @classmethod
    def _none_relations(cls, v: Any) -> Any:
        return [] if v is None else v

    def field(self, name: str, placeholder: str) -> str:
        value = self.fields.get(name)
        return placeholder if value is None else str(value)

    def has_field(self, name: str) -> bool:
        return self.fields.get(name) is not None

    @property
    def title(self) -> str:
        return self.field(TITLE_FIELD, "<no title>")

    @property
    def state(self) -> str:
        return self.field(STATE_FIELD, "<no state>")

    @property
    def project(self) -> Optional[str]:
        """Team project name, or None when the work item does not carry one."""
        value = self.fields.get(PROJECT_FIELD)
        return str(value) if value else None

    @property
    def sprint(self) -> str:
        return self.field(ITERATION_FIELD, "<no sprint>")

    def attachments(self) -> List[Attachment]:
        """Attachments derived from the ``AttachedFile`` relations, in relation order."""
        return [r.to_attachment() for r in self.relations if r.rel == ATTACHED_FILE]


class IdentityRef(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    display_name: Optional[str] = Field(default=None, alias="displayName")


class Comment(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    created_by: Optional[IdentityRef] = Field(default=None, alias="createdBy")
    created_date: Optional[str] = Field(default=None, alias="createdDate")
    modified_date: Optional[str] = Field(default=None, alias="modifiedDate")
    text: Optional[str] = None

    @property
    def author(self) -> str:
        if self.created_by and self.created_by.display_name:
            return self.created_by.display_name
        return "<unknown>"

    @property
    def display_id(self) -> str:
        return "<no id>" if self.id is None else str(self.id)


class CommentList(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    comments: List[Comment] = Field(default_factory=list)
    count: Optional[int] = None
    total_count: Optional[int] = Field(default=None, alias="totalCount")

    @field_validator("comments", mode="before")
    @classmethod
    def _none_comments(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def total(self) -> int:
        """Number of comments on the work item, not just the returned page."""
        if self.total_count is not None:
            return self.total_count
        if self.count is not None:
            return self.count
        return len(self.comments)

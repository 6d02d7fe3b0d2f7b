"""Project and project documentation schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config import MAX_DOCUMENTATION_LENGTH


class Project(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class ProjectWithRole(Project):
    """A project together with the caller's role in it."""

    role: Optional[str] = None


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Project name")
    description: Optional[str] = Field(default=None, max_length=500)


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class ProjectDocumentation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    pr_template: Optional[str] = None
    code_nomenclature: Optional[str] = None
    gitflow_docs: Optional[str] = None
    additional_docs: Optional[str] = None
    file_attachments: List[Any] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SaveDocumentationRequest(BaseModel):
    pr_template: Optional[str] = Field(default=None, max_length=MAX_DOCUMENTATION_LENGTH)
    code_nomenclature: Optional[str] = Field(
        default=None, max_length=MAX_DOCUMENTATION_LENGTH
    )
    gitflow_docs: Optional[str] = Field(default=None, max_length=MAX_DOCUMENTATION_LENGTH)
    additional_docs: Optional[str] = Field(
        default=None, max_length=MAX_DOCUMENTATION_LENGTH
    )
    file_attachments: Optional[List[Any]] = None

"""Membership, email invitation and invite code schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectMember(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    role: str
    invited_by: Optional[str] = None
    joined_at: datetime


class MemberWithProfile(ProjectMember):
    """A membership joined with the member's profile display fields."""

    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProjectInvitation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    email: str
    role: str
    invited_by: str
    token: str
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: datetime


class InviteCode(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    code: str
    role: str
    created_by: str
    expires_at: datetime
    uses_left: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ProjectMembersResponse(BaseModel):
    members: List[MemberWithProfile]
    invitations: List[ProjectInvitation]
    invite_codes: List[InviteCode]


class InviteByEmailRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    role: str = Field(default="member", description="admin, member or viewer")


class AcceptInvitationRequest(BaseModel):
    token: str


class ChangeRoleRequest(BaseModel):
    role: str = Field(description="admin, member or viewer")


class GenerateInviteCodeRequest(BaseModel):
    project_id: Optional[str] = None
    role: str = "member"
    expires_in_days: int = 30
    uses_left: Optional[int] = None


class JoinWithCodeRequest(BaseModel):
    code: Optional[str] = None


class UpdateInviteCodeRequest(BaseModel):
    expires_in_days: int = Field(ge=1, le=365)


class JoinResult(BaseModel):
    member: ProjectMember
    project_name: str

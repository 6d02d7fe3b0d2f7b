"""Project, documentation and membership routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from api.errors import http_error
from api.routes.auth import get_current_user
from core.dependencies import MembershipManagerDep, ProjectManagerDep
from core.exceptions import OnboardingError
from schemas.member import (
    AcceptInvitationRequest,
    ChangeRoleRequest,
    InviteByEmailRequest,
    InviteCode,
    MemberWithProfile,
    ProjectInvitation,
    ProjectMember,
    ProjectMembersResponse,
)
from schemas.project import (
    CreateProjectRequest,
    Project,
    ProjectDocumentation,
    ProjectWithRole,
    SaveDocumentationRequest,
    UpdateProjectRequest,
)
from schemas.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])


def _with_role(model, role) -> ProjectWithRole:
    return ProjectWithRole(**Project.model_validate(model).model_dump(), role=role)


@router.post(
    "",
    response_model=ProjectWithRole,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
def create_project(
    req: CreateProjectRequest,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectWithRole:
    try:
        model = projects.create_project(current_user.user_id, req.name, req.description)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return _with_role(model, "owner")


@router.get("", response_model=List[ProjectWithRole], summary="List my projects")
def list_projects(
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> List[ProjectWithRole]:
    rows = projects.list_projects_for_user(current_user.user_id)
    return [_with_role(row["project"], row["role"]) for row in rows]


@router.post(
    "/invitations/accept",
    response_model=ProjectMember,
    summary="Accept an email invitation",
)
def accept_invitation(
    req: AcceptInvitationRequest,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectMember:
    try:
        member = memberships.accept_invitation(req.token, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return ProjectMember.model_validate(member)


@router.get("/{project_id}", response_model=ProjectWithRole, summary="Get a project")
def get_project(
    project_id: str,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectWithRole:
    try:
        model = projects.get_project(project_id)
        projects.require_member(project_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return _with_role(
        model, projects.get_user_role_in_project(project_id, current_user.user_id)
    )


@router.patch("/{project_id}", response_model=ProjectWithRole, summary="Update a project")
def update_project(
    project_id: str,
    req: UpdateProjectRequest,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectWithRole:
    try:
        model = projects.update_project(
            project_id, current_user.user_id, name=req.name, description=req.description
        )
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return _with_role(
        model, projects.get_user_role_in_project(project_id, current_user.user_id)
    )


@router.delete("/{project_id}", summary="Delete a project")
def delete_project(
    project_id: str,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        projects.delete_project(project_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return {"success": True}


@router.get("/{project_id}/documentation", summary="Get project documentation")
def get_documentation(
    project_id: str,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
):
    try:
        projects.get_project(project_id)
        projects.require_member(project_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    doc = projects.get_documentation(project_id)
    if doc is None:
        return None
    return ProjectDocumentation.model_validate(doc)


@router.put(
    "/{project_id}/documentation",
    response_model=ProjectDocumentation,
    summary="Save project documentation",
)
def save_documentation(
    project_id: str,
    req: SaveDocumentationRequest,
    projects: ProjectManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectDocumentation:
    try:
        doc = projects.save_documentation(
            project_id, current_user.user_id, req.model_dump(exclude_unset=True)
        )
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return ProjectDocumentation.model_validate(doc)


@router.get(
    "/{project_id}/members",
    response_model=ProjectMembersResponse,
    summary="List members, invitations and invite codes",
)
def list_members(
    project_id: str,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectMembersResponse:
    try:
        data = memberships.list_project(project_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return ProjectMembersResponse(
        members=[MemberWithProfile(**m) for m in data["members"]],
        invitations=[ProjectInvitation.model_validate(i) for i in data["invitations"]],
        invite_codes=[InviteCode.model_validate(c) for c in data["invite_codes"]],
    )


@router.post(
    "/{project_id}/invitations",
    response_model=ProjectInvitation,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user by email",
)
def invite_by_email(
    project_id: str,
    req: InviteByEmailRequest,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectInvitation:
    try:
        invitation = memberships.invite_by_email(
            project_id, current_user.user_id, req.email, req.role
        )
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return ProjectInvitation.model_validate(invitation)


@router.delete(
    "/{project_id}/invitations/{invitation_id}",
    summary="Cancel a pending invitation",
)
def cancel_invitation(
    project_id: str,
    invitation_id: str,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        memberships.cancel_invitation(invitation_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return {"success": True}


@router.patch(
    "/{project_id}/members/{member_id}",
    response_model=ProjectMember,
    summary="Change a member's role",
)
def change_member_role(
    project_id: str,
    member_id: str,
    req: ChangeRoleRequest,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> ProjectMember:
    try:
        member = memberships.change_role(member_id, current_user.user_id, req.role)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return ProjectMember.model_validate(member)


@router.delete("/{project_id}/members/{member_id}", summary="Remove a member")
def remove_member(
    project_id: str,
    member_id: str,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        memberships.remove_member(member_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return {"success": True}


@router.delete("/{project_id}/leave", summary="Leave a project")
def leave_project(
    project_id: str,
    memberships: MembershipManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        left = memberships.leave_project(project_id, current_user.user_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return {"success": left}

"""Invite code endpoint.

A single path dispatches on the HTTP method and the ``action`` query
parameter. Every failure is reported with the flat ``{"error": message}``
body and status 500, except an unsupported method or action (405).
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse, Response

from api.routes.auth import get_current_user
from core.dependencies import InviteCodeManagerDep, RequestGuardDep
from core.exceptions import OnboardingError, ValidationError
from schemas.member import (
    GenerateInviteCodeRequest,
    InviteCode,
    JoinResult,
    JoinWithCodeRequest,
    ProjectMember,
)
from schemas.user import User
from utils.invite_code_manager import normalize_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/project-invite-codes", tags=["Invite Codes"])


def _error(message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _method_not_allowed() -> JSONResponse:
    return _error("Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED)


def _json_object(body: Any) -> dict:
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


@router.options("", include_in_schema=False)
def preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.post("", summary="Generate or redeem an invite code")
def post_invite_code(
    invite_codes: InviteCodeManagerDep,
    guard: RequestGuardDep,
    action: Optional[str] = None,
    body: Any = Body(default=None),
    current_user: User = Depends(get_current_user),
):
    # Runs in the threadpool; the guard key is held for the whole insert
    if action not in ("generate", "join"):
        return _method_not_allowed()
    try:
        data = _json_object(body)
        if action == "generate":
            req = GenerateInviteCodeRequest.model_validate(data)
            key = (current_user.user_id, req.project_id, "generate_code")
            with guard.hold(key):
                model = invite_codes.generate_code(
                    project_id=req.project_id,
                    actor_id=current_user.user_id,
                    role=req.role,
                    expires_in_days=req.expires_in_days,
                    uses_left=req.uses_left,
                )
            payload = InviteCode.model_validate(model).model_dump(mode="json")
        else:
            req = JoinWithCodeRequest.model_validate(data)
            key = (current_user.user_id, normalize_code(req.code), "join")
            with guard.hold(key):
                result = invite_codes.redeem_code(req.code, current_user.user_id)
            payload = JoinResult(
                member=ProjectMember.model_validate(result["member"]),
                project_name=result["project_name"],
            ).model_dump(mode="json")
    except (OnboardingError, ValueError) as e:
        logger.error("Invite code %s failed: %s", action, e)
        return _error(str(e))
    return {"success": True, "data": payload}


@router.get("", summary="List active invite codes of a project")
def list_invite_codes(
    invite_codes: InviteCodeManagerDep,
    project_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
):
    try:
        models = invite_codes.list_codes(project_id, current_user.user_id)
    except OnboardingError as e:
        logger.error("Listing invite codes failed: %s", e)
        return _error(str(e))
    return {
        "success": True,
        "data": [InviteCode.model_validate(m).model_dump(mode="json") for m in models],
    }


@router.delete("", summary="Revoke an invite code")
def delete_invite_code(
    invite_codes: InviteCodeManagerDep,
    code_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
):
    try:
        invite_codes.revoke_code(code_id, current_user.user_id)
    except OnboardingError as e:
        logger.error("Deleting invite code failed: %s", e)
        return _error(str(e))
    return {"success": True}


@router.api_route("", methods=["PUT", "PATCH"], include_in_schema=False)
def unsupported_method() -> JSONResponse:
    return _method_not_allowed()

"""Festival permission and invitation endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from festival_scheduling.api.dependencies.common import (
    get_current_user_id,
    get_invitation_service,
)
from festival_scheduling.schemas.permission import (
    InvitationCreateRequest,
    OwnershipTransferRequest,
    PermissionCollectionResponse,
    PermissionResource,
    PermissionResponse,
    PermissionUpdateRequest,
)
from festival_scheduling.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)
router = APIRouter()


def _single(permission) -> PermissionResponse:
    return PermissionResponse(data=PermissionResource.from_model(permission))


def _collection(permissions) -> PermissionCollectionResponse:
    return PermissionCollectionResponse(
        data=[PermissionResource.from_model(p) for p in permissions],
        meta={"total": len(permissions)},
    )


# Festival-level

@router.post(
    "/festivals/{festival_id}/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_collaborator(
    festival_id: UUID,
    request: InvitationCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """
    Invite a user to a festival.

    The invitee is identified by user id or email. Administrators are always
    granted the All scope.
    """
    permission = await service.invite(
        festival_id=festival_id,
        inviter_id=user_id,
        invitee=request.invitee,
        role=request.role,
        scope=request.scope,
    )
    return _single(permission)


@router.get("/festivals/{festival_id}/permissions", response_model=PermissionCollectionResponse)
async def list_festival_permissions(
    festival_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """List active collaborators of a festival, highest role first."""
    permissions = await service.list_festival_permissions(festival_id, user_id)
    return _collection(permissions)


@router.post("/festivals/{festival_id}/transfer-ownership", response_model=PermissionResponse)
async def transfer_ownership(
    festival_id: UUID,
    request: OwnershipTransferRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Hand the festival to another user; the caller becomes an Administrator."""
    permission = await service.transfer_ownership(festival_id, user_id, request.new_owner_id)
    return _single(permission)


# Individual permissions

@router.get("/permissions/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    permission = await service.get_permission(permission_id, user_id)
    return _single(permission)


@router.patch("/permissions/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: UUID,
    request: PermissionUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Change a collaborator's role and/or scope."""
    permission = await service.update_permission(
        permission_id, user_id, role=request.role, scope=request.scope
    )
    return _single(permission)


@router.delete("/permissions/{permission_id}", response_model=PermissionResponse)
async def revoke_permission(
    permission_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    permission = await service.revoke(permission_id, user_id)
    return _single(permission)


# Invitee side

@router.get("/invitations", response_model=PermissionCollectionResponse)
async def list_my_invitations(
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Pending invitations addressed to the current user."""
    invitations = await service.list_pending_invitations(user_id)
    return _collection(invitations)


@router.post("/invitations/{permission_id}/accept", response_model=PermissionResponse)
async def accept_invitation(
    permission_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    permission = await service.accept(permission_id, user_id)
    return _single(permission)


@router.post("/invitations/{permission_id}/decline", response_model=PermissionResponse)
async def decline_invitation(
    permission_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    permission = await service.decline(permission_id, user_id)
    return _single(permission)

"""Permission invitation workflow and ownership transfer.

This service is the only writer of festival permissions. It covers:
- the owner grant made when a festival is created
- invitations (pending permissions) and the invitee's accept/decline
- revocation and role/scope changes by administrators
- ownership transfer, applied as a single transaction
"""

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.models.enums import FestivalRole, PermissionScope
from festival_scheduling.models.festival import Festival
from festival_scheduling.models.permission import FestivalPermission
from festival_scheduling.models.user import User
from festival_scheduling.stores.catalog import FestivalStore, UserStore
from festival_scheduling.stores.permissions import PermissionStore

from .authorization import FestivalAuthorizer
from .base import BaseService
from .business_rules import PermissionRules, ValidationError
from .errors import (
    ConflictError,
    DomainValidationError,
    FestivalNotFoundError,
    ForbiddenError,
    InvitationAlreadyProcessedError,
    PermissionAlreadyExistsError,
    PermissionNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class InvitationService(BaseService):
    """Invitation lifecycle and permission management for festivals."""

    def __init__(self, db_session: AsyncSession, authorizer: Optional[FestivalAuthorizer] = None):
        super().__init__(db_session)
        self.permissions = PermissionStore(db_session)
        self.festivals = FestivalStore(db_session)
        self.users = UserStore(db_session)
        self.authorizer = authorizer or FestivalAuthorizer(db_session)

    # Owner grant

    async def create_owner_permission(self, festival_id: UUID, owner_id: UUID) -> FestivalPermission:
        """
        Grant the creator of a festival an active Owner permission.

        Called as part of festival creation; the permission skips the
        invitation step entirely.
        """
        festival = await self._get_festival(festival_id)
        if await self.permissions.get_owner(festival_id) is not None:
            raise ConflictError("Festival already has an owner")

        permission = FestivalPermission(
            festival_id=festival_id,
            user_id=owner_id,
            role=FestivalRole.OWNER,
            scope=PermissionScope.ALL,
            is_pending=False,
        )
        permission.accept()
        festival.owner_user_id = owner_id

        async with self._writing():
            await self.permissions.add(permission)
            await self.db.commit()

        logger.info(f"Granted ownership of festival {festival_id} to user {owner_id}")
        return permission

    # Invitations

    async def invite(
        self,
        festival_id: UUID,
        inviter_id: UUID,
        invitee: Union[UUID, str],
        role: FestivalRole,
        scope: PermissionScope = PermissionScope.ALL,
    ) -> FestivalPermission:
        """
        Invite a user to collaborate on a festival.

        Args:
            festival_id: Festival to grant access to
            inviter_id: Acting user; must be Administrator or higher
            invitee: User id, or the email address of an existing user
            role: Any role except Owner
            scope: Functional area; forced to All for Administrators

        Returns:
            FestivalPermission: The pending permission

        Raises:
            FestivalNotFoundError, UserNotFoundError: Unknown festival or invitee
            ForbiddenError: Inviter cannot manage permissions
            DomainValidationError: Owner role requested
            PermissionAlreadyExistsError: Invitee already pending or active
        """
        logger.info(f"User {inviter_id} inviting {invitee} to festival {festival_id} as {role.name}")

        await self._get_festival(festival_id)
        if not await self.authorizer.can_manage_permissions(inviter_id, festival_id):
            logger.warning(f"User {inviter_id} may not invite to festival {festival_id}")
            raise ForbiddenError("Only administrators and the owner can invite collaborators")

        validation = PermissionRules.validate_invitation(role)
        if not validation.is_valid:
            raise DomainValidationError(validation.errors[0].message, validation.errors)

        user = await self._resolve_invitee(invitee)
        if await self.permissions.get_current(user.id, festival_id) is not None:
            raise PermissionAlreadyExistsError()

        permission = FestivalPermission(
            festival_id=festival_id,
            user_id=user.id,
            role=role,
            scope=PermissionRules.effective_scope(role, scope),
            invited_by_user_id=inviter_id,
            is_pending=True,
            is_revoked=False,
        )

        async with self._writing():
            await self.permissions.add(permission)
            await self.db.commit()

        logger.info(f"Invitation {permission.id} created for user {user.id} on festival {festival_id}")
        return permission

    async def accept(self, permission_id: UUID, user_id: UUID) -> FestivalPermission:
        """Accept a pending invitation addressed to ``user_id``."""
        permission = await self._get_invitation_for(permission_id, user_id)
        permission.accept()
        await self._commit()

        logger.info(f"User {user_id} accepted invitation {permission_id}")
        return permission

    async def decline(self, permission_id: UUID, user_id: UUID) -> FestivalPermission:
        """Decline a pending invitation addressed to ``user_id``."""
        permission = await self._get_invitation_for(permission_id, user_id)
        permission.revoke(by_user_id=user_id)
        await self._commit()

        logger.info(f"User {user_id} declined invitation {permission_id}")
        return permission

    async def list_pending_invitations(self, user_id: UUID) -> List[FestivalPermission]:
        return await self.permissions.list_pending_for_user(user_id)

    # Permission management

    async def get_permission(self, permission_id: UUID, requester_id: UUID) -> FestivalPermission:
        permission = await self.permissions.get(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)
        if permission.user_id != requester_id and not await self.authorizer.can_view_festival(
            requester_id, permission.festival_id
        ):
            raise ForbiddenError("You do not have access to this festival")
        return permission

    async def list_festival_permissions(
        self, festival_id: UUID, requester_id: UUID
    ) -> List[FestivalPermission]:
        await self._get_festival(festival_id)
        if not await self.authorizer.can_view_festival(requester_id, festival_id):
            raise ForbiddenError("You do not have access to this festival")
        return await self.permissions.list_active_for_festival(festival_id)

    async def update_permission(
        self,
        permission_id: UUID,
        requester_id: UUID,
        role: Optional[FestivalRole] = None,
        scope: Optional[PermissionScope] = None,
    ) -> FestivalPermission:
        """
        Change a collaborator's role and/or scope.

        Promoting to Administrator resets the scope to All, and scope changes
        on an Administrator are ignored.
        """
        permission = await self._get_live_permission(permission_id)
        festival_id = permission.festival_id

        requester_role = await self.authorizer.get_role(requester_id, festival_id)
        if requester_role is None or requester_role < FestivalRole.ADMINISTRATOR:
            raise ForbiddenError("Only administrators and the owner can change permissions")

        validation = PermissionRules.validate_role_change(permission.role, role, scope)
        if not validation.is_valid:
            raise DomainValidationError(validation.errors[0].message, validation.errors)

        if not requester_role.can_manage(permission.role):
            raise ForbiddenError(f"A {requester_role.name.lower()} cannot change this permission")

        new_role = role if role is not None else permission.role
        new_scope = scope if scope is not None else permission.scope
        permission.role = new_role
        permission.scope = PermissionRules.effective_scope(new_role, new_scope)

        await self._commit()

        logger.info(
            f"User {requester_id} set permission {permission_id} to "
            f"{permission.role.name}/{permission.scope.name}"
        )
        return permission

    async def revoke(self, permission_id: UUID, requester_id: UUID) -> FestivalPermission:
        """Tombstone a collaborator's permission. The owner's cannot be revoked."""
        permission = await self._get_live_permission(permission_id)
        festival_id = permission.festival_id

        requester_role = await self.authorizer.get_role(requester_id, festival_id)
        if requester_role is None or requester_role < FestivalRole.ADMINISTRATOR:
            logger.warning(f"User {requester_id} may not revoke permissions on festival {festival_id}")
            raise ForbiddenError("Only administrators and the owner can revoke permissions")

        if permission.role == FestivalRole.OWNER:
            raise DomainValidationError(
                "The owner's permission cannot be revoked; transfer ownership instead",
                [ValidationError(field="role", code="OWNER_NOT_REVOCABLE",
                                 message="Ownership is only removed by transfer")],
            )
        if permission.user_id == requester_id:
            raise DomainValidationError("You cannot revoke your own permission")
        if not requester_role.can_manage(permission.role):
            raise ForbiddenError(f"A {requester_role.name.lower()} cannot revoke this permission")

        permission.revoke(by_user_id=requester_id)
        await self._commit()

        logger.info(f"User {requester_id} revoked permission {permission_id} on festival {festival_id}")
        return permission

    # Ownership

    async def transfer_ownership(
        self, festival_id: UUID, current_owner_id: UUID, new_owner_id: UUID
    ) -> FestivalPermission:
        """
        Hand ownership of a festival to another user.

        The current owner is demoted to Administrator and stays an active
        collaborator. The new owner's existing permission (pending or active)
        is promoted, or a new active Owner permission is created. Both
        changes, plus the festival's owner pointer, commit together.
        """
        festival = await self._get_festival(festival_id)

        current = await self.permissions.get_active(current_owner_id, festival_id)
        if current is None or current.role != FestivalRole.OWNER:
            logger.warning(f"User {current_owner_id} attempted to transfer festival {festival_id} without owning it")
            raise ForbiddenError("Only the festival owner can transfer ownership")

        if new_owner_id == current_owner_id:
            raise DomainValidationError("You already own this festival")

        new_owner = await self.users.get(new_owner_id)
        if new_owner is None:
            raise UserNotFoundError(new_owner_id)

        async with self._writing():
            current.role = FestivalRole.ADMINISTRATOR
            current.scope = PermissionScope.ALL
            # The owner index must see the demotion before the promotion.
            await self.db.flush()

            promoted = await self.permissions.get_current(new_owner_id, festival_id)
            if promoted is None:
                promoted = FestivalPermission(
                    festival_id=festival_id,
                    user_id=new_owner_id,
                    invited_by_user_id=current_owner_id,
                    is_pending=False,
                    is_revoked=False,
                )
                promoted.activate_as_owner()
                await self.permissions.add(promoted)
            else:
                promoted.activate_as_owner()

            festival.owner_user_id = new_owner_id
            await self.db.commit()

        logger.info(f"Ownership of festival {festival_id} transferred from {current_owner_id} to {new_owner_id}")
        return promoted

    # Helpers

    async def _get_festival(self, festival_id: UUID) -> Festival:
        festival = await self.festivals.get(festival_id)
        if festival is None:
            raise FestivalNotFoundError(festival_id)
        return festival

    async def _resolve_invitee(self, invitee: Union[UUID, str]) -> User:
        if isinstance(invitee, UUID):
            user = await self.users.get(invitee)
        else:
            user = await self.users.get_by_email(invitee)
        if user is None:
            raise UserNotFoundError(invitee)
        return user

    async def _get_live_permission(self, permission_id: UUID) -> FestivalPermission:
        permission = await self.permissions.get(permission_id)
        if permission is None or permission.is_revoked:
            raise PermissionNotFoundError(permission_id)
        return permission

    async def _get_invitation_for(self, permission_id: UUID, user_id: UUID) -> FestivalPermission:
        permission = await self.permissions.get(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)
        if permission.user_id != user_id:
            raise ForbiddenError("This invitation is not addressed to you")
        if permission.is_revoked:
            raise InvitationAlreadyProcessedError("This invitation has been revoked")
        if not permission.is_pending:
            raise InvitationAlreadyProcessedError("This invitation has already been accepted")
        return permission

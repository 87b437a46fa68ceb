"""Tests for the invitation workflow, permission management, and ownership transfer."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from festival_scheduling.models import Festival, FestivalPermission, FestivalRole, PermissionScope
from festival_scheduling.services.errors import (
    ConflictError,
    DomainValidationError,
    ForbiddenError,
    InfrastructureError,
    InvitationAlreadyProcessedError,
    PermissionAlreadyExistsError,
    PermissionNotFoundError,
    UserNotFoundError,
)
from festival_scheduling.services.invitation_service import InvitationService


async def _role_of(db_session, user_id, festival_id):
    result = await db_session.execute(
        select(FestivalPermission.role).where(
            FestivalPermission.user_id == user_id,
            FestivalPermission.festival_id == festival_id,
            FestivalPermission.is_revoked.is_(False),
        )
    )
    return result.scalar_one_or_none()


async def _permission_id(db_session, user_id, festival_id):
    result = await db_session.execute(
        select(FestivalPermission.id).where(
            FestivalPermission.user_id == user_id,
            FestivalPermission.festival_id == festival_id,
            FestivalPermission.is_revoked.is_(False),
        )
    )
    return result.scalar_one()


class TestInvite:
    @pytest.mark.asyncio
    async def test_administrator_invite_is_forced_to_all_scope(self, db_session, seed):
        service = InvitationService(db_session)

        permission = await service.invite(
            seed.festival_id, seed.owner_id, seed.invitee_id,
            FestivalRole.ADMINISTRATOR, PermissionScope.ARTISTS,
        )

        assert permission.scope == PermissionScope.ALL
        assert permission.is_pending
        assert not permission.is_revoked
        assert permission.invited_by_user_id == seed.owner_id

        accepted = await service.accept(permission.id, seed.invitee_id)
        assert accepted.is_active
        assert accepted.accepted_at is not None
        assert await service.authorizer.has_scope(seed.invitee_id, seed.festival_id, PermissionScope.ARTISTS)

    @pytest.mark.asyncio
    async def test_manager_invite_keeps_requested_scope(self, db_session, seed):
        service = InvitationService(db_session)

        permission = await service.invite(
            seed.festival_id, seed.admin_id, seed.invitee_id,
            FestivalRole.MANAGER, PermissionScope.VENUES,
        )

        assert permission.role == FestivalRole.MANAGER
        assert permission.scope == PermissionScope.VENUES

    @pytest.mark.asyncio
    async def test_invite_by_email_is_case_insensitive(self, db_session, seed):
        service = InvitationService(db_session)

        permission = await service.invite(
            seed.festival_id, seed.owner_id, "  Invitee@Example.COM ",
            FestivalRole.VIEWER, PermissionScope.SCHEDULE,
        )

        assert permission.user_id == seed.invitee_id

    @pytest.mark.asyncio
    async def test_unknown_email_is_not_found(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(UserNotFoundError):
            await service.invite(
                seed.festival_id, seed.owner_id, "nobody@example.com", FestivalRole.VIEWER,
            )

    @pytest.mark.asyncio
    async def test_owner_role_cannot_be_invited(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(DomainValidationError):
            await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.OWNER)

    @pytest.mark.asyncio
    async def test_manager_cannot_invite(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(ForbiddenError):
            await service.invite(
                seed.festival_id, seed.manager_schedule_id, seed.invitee_id, FestivalRole.VIEWER,
            )

    @pytest.mark.asyncio
    async def test_duplicate_invitation_conflicts(self, db_session, seed):
        service = InvitationService(db_session)
        await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)

        with pytest.raises(PermissionAlreadyExistsError):
            await service.invite(seed.festival_id, seed.admin_id, seed.invitee_id, FestivalRole.MANAGER)

        # Existing collaborators are refused too
        with pytest.raises(PermissionAlreadyExistsError):
            await service.invite(seed.festival_id, seed.owner_id, seed.admin_id, FestivalRole.VIEWER)

    @pytest.mark.asyncio
    async def test_store_rejects_second_live_permission(self, db_session, seed):
        service = InvitationService(db_session)

        async def nobody_current(user_id, festival_id):
            return None

        service.permissions.get_current = nobody_current

        with pytest.raises(PermissionAlreadyExistsError):
            await service.invite(seed.festival_id, seed.owner_id, seed.admin_id, FestivalRole.VIEWER)

        assert await _role_of(db_session, seed.admin_id, seed.festival_id) == FestivalRole.ADMINISTRATOR


class TestAcceptDecline:
    @pytest.mark.asyncio
    async def test_only_the_invitee_can_accept(self, db_session, seed):
        service = InvitationService(db_session)
        permission = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)
        permission_id = permission.id

        with pytest.raises(ForbiddenError):
            await service.accept(permission_id, seed.outsider_id)

    @pytest.mark.asyncio
    async def test_accept_twice_conflicts(self, db_session, seed):
        service = InvitationService(db_session)
        permission = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)
        permission_id = permission.id
        await service.accept(permission_id, seed.invitee_id)

        with pytest.raises(InvitationAlreadyProcessedError):
            await service.accept(permission_id, seed.invitee_id)

    @pytest.mark.asyncio
    async def test_decline_tombstones_the_invitation(self, db_session, seed):
        service = InvitationService(db_session)
        permission = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)

        declined = await service.decline(permission.id, seed.invitee_id)

        assert declined.is_revoked
        assert declined.revoked_at is not None
        assert declined.revoked_by_user_id == seed.invitee_id
        assert declined.status == "revoked"
        assert await service.list_pending_invitations(seed.invitee_id) == []

        with pytest.raises(InvitationAlreadyProcessedError):
            await service.accept(declined.id, seed.invitee_id)

        # A fresh invitation is allowed once the old one is tombstoned
        again = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.MANAGER)
        assert again.id != declined.id

    @pytest.mark.asyncio
    async def test_list_pending_invitations(self, db_session, seed):
        service = InvitationService(db_session)
        permission = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)

        pending = await service.list_pending_invitations(seed.invitee_id)

        assert [p.id for p in pending] == [permission.id]

    @pytest.mark.asyncio
    async def test_unknown_invitation(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(PermissionNotFoundError):
            await service.accept(uuid.uuid4(), seed.invitee_id)


class TestPermissionManagement:
    @pytest.mark.asyncio
    async def test_list_festival_permissions_ordered_by_role(self, db_session, seed):
        service = InvitationService(db_session)

        permissions = await service.list_festival_permissions(seed.festival_id, seed.viewer_schedule_id)

        roles = [p.role for p in permissions]
        assert roles == sorted(roles, reverse=True)
        assert roles[0] == FestivalRole.OWNER
        assert len(permissions) == 5

    @pytest.mark.asyncio
    async def test_outsider_cannot_list_permissions(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(ForbiddenError):
            await service.list_festival_permissions(seed.festival_id, seed.outsider_id)

    @pytest.mark.asyncio
    async def test_get_permission_visible_to_subject(self, db_session, seed):
        service = InvitationService(db_session)
        invitation = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)

        fetched = await service.get_permission(invitation.id, seed.invitee_id)
        assert fetched.id == invitation.id

        with pytest.raises(ForbiddenError):
            await service.get_permission(invitation.id, seed.outsider_id)

    @pytest.mark.asyncio
    async def test_update_role_and_scope(self, db_session, seed):
        service = InvitationService(db_session)
        permission_id = await _permission_id(db_session, seed.manager_schedule_id, seed.festival_id)

        updated = await service.update_permission(permission_id, seed.admin_id, scope=PermissionScope.VENUES)
        assert updated.role == FestivalRole.MANAGER
        assert updated.scope == PermissionScope.VENUES

        promoted = await service.update_permission(permission_id, seed.owner_id, role=FestivalRole.ADMINISTRATOR)
        assert promoted.role == FestivalRole.ADMINISTRATOR
        assert promoted.scope == PermissionScope.ALL

    @pytest.mark.asyncio
    async def test_update_rules(self, db_session, seed):
        service = InvitationService(db_session)
        owner_permission_id = await _permission_id(db_session, seed.owner_id, seed.festival_id)
        admin_permission_id = await _permission_id(db_session, seed.admin_id, seed.festival_id)
        manager_permission_id = await _permission_id(db_session, seed.manager_schedule_id, seed.festival_id)

        with pytest.raises(DomainValidationError):
            await service.update_permission(manager_permission_id, seed.admin_id)
        with pytest.raises(DomainValidationError):
            await service.update_permission(owner_permission_id, seed.admin_id, role=FestivalRole.VIEWER)
        with pytest.raises(DomainValidationError):
            await service.update_permission(manager_permission_id, seed.owner_id, role=FestivalRole.OWNER)
        with pytest.raises(ForbiddenError):
            await service.update_permission(manager_permission_id, seed.manager_artists_id, role=FestivalRole.VIEWER)
        with pytest.raises(ForbiddenError):
            await service.update_permission(admin_permission_id, seed.admin_id, role=FestivalRole.VIEWER)

    @pytest.mark.asyncio
    async def test_revoke(self, db_session, seed):
        service = InvitationService(db_session)
        permission_id = await _permission_id(db_session, seed.manager_schedule_id, seed.festival_id)

        revoked = await service.revoke(permission_id, seed.admin_id)

        assert revoked.is_revoked
        assert revoked.revoked_by_user_id == seed.admin_id
        assert await service.authorizer.get_role(seed.manager_schedule_id, seed.festival_id) is None

        with pytest.raises(PermissionNotFoundError):
            await service.revoke(permission_id, seed.admin_id)

    @pytest.mark.asyncio
    async def test_revoke_rules(self, db_session, seed):
        service = InvitationService(db_session)
        owner_permission_id = await _permission_id(db_session, seed.owner_id, seed.festival_id)
        admin_permission_id = await _permission_id(db_session, seed.admin_id, seed.festival_id)
        viewer_permission_id = await _permission_id(db_session, seed.viewer_schedule_id, seed.festival_id)

        with pytest.raises(DomainValidationError):
            await service.revoke(owner_permission_id, seed.admin_id)
        with pytest.raises(DomainValidationError):
            await service.revoke(admin_permission_id, seed.admin_id)
        with pytest.raises(ForbiddenError):
            await service.revoke(viewer_permission_id, seed.manager_schedule_id)

        # The owner may revoke an administrator
        revoked = await service.revoke(admin_permission_id, seed.owner_id)
        assert revoked.is_revoked


class TestOwnership:
    @pytest.mark.asyncio
    async def test_create_owner_permission(self, db_session, seed):
        festival = Festival(id=uuid.uuid4(), name="New Festival", owner_user_id=seed.invitee_id)
        db_session.add(festival)
        await db_session.commit()
        service = InvitationService(db_session)

        permission = await service.create_owner_permission(festival.id, seed.invitee_id)

        assert permission.role == FestivalRole.OWNER
        assert permission.scope == PermissionScope.ALL
        assert permission.is_active

        with pytest.raises(ConflictError):
            await service.create_owner_permission(festival.id, seed.outsider_id)

    @pytest.mark.asyncio
    async def test_transfer_to_existing_collaborator(self, db_session, seed):
        service = InvitationService(db_session)

        promoted = await service.transfer_ownership(seed.festival_id, seed.owner_id, seed.manager_artists_id)

        assert promoted.user_id == seed.manager_artists_id
        assert promoted.role == FestivalRole.OWNER
        assert promoted.scope == PermissionScope.ALL
        assert await _role_of(db_session, seed.owner_id, seed.festival_id) == FestivalRole.ADMINISTRATOR

        owners = await db_session.execute(
            select(func.count()).select_from(FestivalPermission).where(
                FestivalPermission.festival_id == seed.festival_id,
                FestivalPermission.role == FestivalRole.OWNER,
                FestivalPermission.is_revoked.is_(False),
            )
        )
        assert owners.scalar() == 1

        festival = await service.festivals.get(seed.festival_id)
        assert festival.owner_user_id == seed.manager_artists_id

    @pytest.mark.asyncio
    async def test_transfer_to_user_without_permission(self, db_session, seed):
        service = InvitationService(db_session)

        promoted = await service.transfer_ownership(seed.festival_id, seed.owner_id, seed.invitee_id)

        assert promoted.is_active
        assert promoted.role == FestivalRole.OWNER
        assert await service.authorizer.can_transfer_ownership(seed.invitee_id, seed.festival_id)
        assert not await service.authorizer.can_transfer_ownership(seed.owner_id, seed.festival_id)

    @pytest.mark.asyncio
    async def test_transfer_activates_pending_invitation(self, db_session, seed):
        service = InvitationService(db_session)
        invitation = await service.invite(seed.festival_id, seed.owner_id, seed.invitee_id, FestivalRole.VIEWER)

        promoted = await service.transfer_ownership(seed.festival_id, seed.owner_id, seed.invitee_id)

        assert promoted.id == invitation.id
        assert promoted.is_active
        assert promoted.role == FestivalRole.OWNER

    @pytest.mark.asyncio
    async def test_only_owner_can_transfer(self, db_session, seed):
        service = InvitationService(db_session)

        with pytest.raises(ForbiddenError):
            await service.transfer_ownership(seed.festival_id, seed.admin_id, seed.invitee_id)
        with pytest.raises(DomainValidationError):
            await service.transfer_ownership(seed.festival_id, seed.owner_id, seed.owner_id)
        with pytest.raises(UserNotFoundError):
            await service.transfer_ownership(seed.festival_id, seed.owner_id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_failed_transfer_leaves_ownership_untouched(self, db_session, seed):
        service = InvitationService(db_session)

        async def failing_add(instance):
            raise OperationalError("INSERT INTO festival_permissions", {}, Exception("disk I/O error"))

        service.permissions.add = failing_add

        with pytest.raises(InfrastructureError):
            await service.transfer_ownership(seed.festival_id, seed.owner_id, seed.invitee_id)

        assert await _role_of(db_session, seed.owner_id, seed.festival_id) == FestivalRole.OWNER
        assert await _role_of(db_session, seed.invitee_id, seed.festival_id) is None
        owner_pointer = await db_session.execute(
            select(Festival.owner_user_id).where(Festival.id == seed.festival_id)
        )
        assert owner_pointer.scalar_one() == seed.owner_id

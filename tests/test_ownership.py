from __future__ import annotations

from cms_authz.auth.models import Permission, Role, User
from cms_authz.permissions.ownership import (
    OwnershipEvaluator,
    is_owner,
    is_owner_or_admin,
    is_owner_or_editor,
)
from cms_authz.permissions.resolver import PermissionResolver

UPDATE_PRODUCT = Permission.parse("products:update")


def test_is_owner(viewer: User) -> None:
    assert is_owner(viewer, "u1")
    assert not is_owner(viewer, "u2")
    assert not is_owner(None, "u1")
    assert not is_owner(User(id="u1", role=Role.VIEWER, is_active=False), "u1")


def test_empty_owner_id_never_matches() -> None:
    # An empty id must not match a user whose id is also empty.
    nobody = User(id="", role=Role.VIEWER)
    assert not is_owner(nobody, "")
    assert not is_owner(nobody, None)


def test_owner_or_admin(viewer: User, admin: User, editor: User) -> None:
    assert is_owner_or_admin(viewer, "u1")
    assert is_owner_or_admin(admin, "someone-else")
    assert is_owner_or_admin(admin, None)
    assert not is_owner_or_admin(editor, "someone-else")


def test_owner_or_editor(viewer: User, editor: User, admin: User) -> None:
    assert is_owner_or_editor(editor, "x")
    assert is_owner_or_editor(viewer, "u1")
    assert not is_owner_or_editor(viewer, "u2")
    # Exact role match, not minimum role.
    assert not is_owner_or_editor(admin, "x")


def test_owner_access_widens_but_never_narrows(resolver: PermissionResolver, viewer: User, editor: User) -> None:
    ownership = OwnershipEvaluator(resolver)

    assert not ownership.can_access(viewer, UPDATE_PRODUCT, resource_owner_id="u2", allow_owner_access=True)
    assert ownership.can_access(viewer, UPDATE_PRODUCT, resource_owner_id="u1", allow_owner_access=True)
    # Owner access must be enabled explicitly.
    assert not ownership.can_access(viewer, UPDATE_PRODUCT, resource_owner_id="u1")
    # Role grant still applies for non-owners.
    assert ownership.can_access(editor, UPDATE_PRODUCT, resource_owner_id="u2", allow_owner_access=True)

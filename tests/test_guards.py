from __future__ import annotations

import pytest

from cms_authz.auth.errors import Forbidden
from cms_authz.auth.models import Role, User
from cms_authz.permissions.guards import (
    can_manage_user,
    ensure_can_manage,
    ensure_not_self_deactivate,
    ensure_not_self_delete,
    ensure_role_change_allowed,
    strip_self_elevation,
)


def test_self_delete_rejected_even_for_admin(admin: User) -> None:
    with pytest.raises(Forbidden, match="Cannot delete your own account"):
        ensure_not_self_delete(admin, admin.id)
    ensure_not_self_delete(admin, "someone-else")


def test_admin_cannot_self_deactivate(admin: User, editor: User) -> None:
    with pytest.raises(Forbidden):
        ensure_not_self_deactivate(admin, admin.id)
    ensure_not_self_deactivate(editor, editor.id)
    ensure_not_self_deactivate(admin, editor.id)


def test_role_changes(admin: User, editor: User) -> None:
    with pytest.raises(Forbidden, match="Cannot change your own role"):
        ensure_role_change_allowed(admin, admin.id, Role.VIEWER)
    with pytest.raises(Forbidden, match="Only ADMIN"):
        ensure_role_change_allowed(editor, "u1", Role.EDITOR)
    ensure_role_change_allowed(admin, editor.id, Role.ADMIN)


def test_strip_self_elevation(editor: User, admin: User) -> None:
    changes = {"role": Role.ADMIN, "name": "Ed"}
    assert strip_self_elevation(editor, editor.id, changes) == {"name": "Ed"}
    # Input is not mutated.
    assert changes["role"] is Role.ADMIN
    assert strip_self_elevation(editor, "u1", changes) == changes
    assert strip_self_elevation(admin, admin.id, changes) == changes


def test_can_manage_user(admin: User, editor: User, viewer: User) -> None:
    assert can_manage_user(admin, editor)
    assert can_manage_user(editor, viewer)
    assert not can_manage_user(editor, User(id="e2", role=Role.EDITOR))
    assert not can_manage_user(viewer, editor)
    assert not can_manage_user(None, viewer)
    assert not can_manage_user(admin, None)
    assert not can_manage_user(User(id="a2", role=Role.ADMIN, is_active=False), viewer)


def test_ensure_can_manage_requires_strictly_higher_role(admin: User, editor: User, viewer: User) -> None:
    ensure_can_manage(editor, viewer)
    ensure_can_manage(editor, editor)
    ensure_can_manage(admin, User(id="a2", role=Role.ADMIN))
    with pytest.raises(Forbidden, match="equal or higher role"):
        ensure_can_manage(editor, User(id="e2", role=Role.EDITOR))
    with pytest.raises(Forbidden):
        ensure_can_manage(editor, admin)

from __future__ import annotations

import pytest

from cms_authz.auth.models import Action, Permission, Role, User
from cms_authz.permissions.resolver import (
    CONTENT_RESOURCES,
    KNOWN_RESOURCES,
    PermissionResolver,
)

RESTRICTED = ("users", "analytics", "security", "settings")


@pytest.mark.parametrize("resource", CONTENT_RESOURCES)
@pytest.mark.parametrize("action", list(Action))
def test_editor_allow_list(resolver: PermissionResolver, editor: User, resource: str, action: Action) -> None:
    assert resolver.can_access(editor, resource, action)


@pytest.mark.parametrize("resource", RESTRICTED)
@pytest.mark.parametrize("action", list(Action))
def test_editor_denied_outside_allow_list(
    resolver: PermissionResolver, editor: User, resource: str, action: Action
) -> None:
    assert not resolver.can_access(editor, resource, action)


def test_viewer_reads_content_only(resolver: PermissionResolver, viewer: User) -> None:
    for resource in CONTENT_RESOURCES:
        assert resolver.can_access(viewer, resource, Action.READ)
        assert not resolver.can_access(viewer, resource, Action.UPDATE)
        assert not resolver.can_access(viewer, resource, Action.MANAGE)
    for resource in RESTRICTED:
        assert not resolver.can_access(viewer, resource, Action.READ)


@pytest.mark.parametrize("resource", [*KNOWN_RESOURCES, "webhooks", "Products"])
def test_admin_is_universal_allow(resolver: PermissionResolver, admin: User, resource: str) -> None:
    for action in Action:
        assert resolver.can_access(admin, resource, action)


def test_missing_or_inactive_user_is_always_denied(resolver: PermissionResolver) -> None:
    inactive_admin = User(id="x", role=Role.ADMIN, is_active=False)
    for user in (None, inactive_admin):
        for resource in KNOWN_RESOURCES:
            for action in Action:
                assert not resolver.can_access(user, resource, action)


def test_resources_are_case_sensitive(resolver: PermissionResolver, editor: User) -> None:
    assert not resolver.can_access(editor, "Products", Action.READ)


def test_unknown_action_string_is_denied(resolver: PermissionResolver, editor: User) -> None:
    assert resolver.can_access(editor, "products", "read")
    assert not resolver.can_access(editor, "products", "publish")


def test_scope_does_not_narrow_role_grants(resolver: PermissionResolver, editor: User) -> None:
    assert resolver.can_access(editor, "products", Action.UPDATE, scope="own")
    assert resolver.can_access(editor, "products", Action.UPDATE, scope="all")
    assert not resolver.can_access(editor, "users", Action.UPDATE, scope="own")


def test_manage_grant_implies_other_actions() -> None:
    resolver = PermissionResolver(grants={Role.VIEWER: {"pages:manage"}})
    viewer = User(id="v", role=Role.VIEWER)
    for action in Action:
        assert resolver.can_access(viewer, "pages", action)
    assert not resolver.can_access(viewer, "products", Action.READ)


def test_overrides_replace_role_defaults() -> None:
    resolver = PermissionResolver(overrides={"e2": ["users:read"], "a2": []})
    editor = User(id="e2", role=Role.EDITOR)
    assert resolver.can_access(editor, "users", Action.READ)
    assert not resolver.can_access(editor, "products", Action.CREATE)
    # Other editors keep the defaults.
    assert resolver.can_access(User(id="e3", role=Role.EDITOR), "products", Action.CREATE)
    # Admin stays universal regardless of overrides.
    assert resolver.can_access(User(id="a2", role=Role.ADMIN), "settings", Action.UPDATE)


def test_permission_sets(resolver: PermissionResolver, editor: User) -> None:
    create = Permission.parse("products:create")
    delete_user = Permission.parse("users:delete")
    assert resolver.has_permission(editor, create)
    assert resolver.has_all_permissions(editor, [create])
    assert not resolver.has_all_permissions(editor, [create, delete_user])
    assert resolver.has_any_permission(editor, [create, delete_user])
    assert not resolver.has_any_permission(editor, [delete_user])
    assert resolver.has_all_permissions(editor, [])
    assert not resolver.has_any_permission(editor, [])


def test_accessible_resources(resolver: PermissionResolver, viewer: User, admin: User) -> None:
    assert resolver.accessible_resources(viewer) == list(CONTENT_RESOURCES)
    assert resolver.accessible_resources(admin) == list(KNOWN_RESOURCES)
    assert resolver.accessible_resources(None) == []


def test_filter_by_permission(resolver: PermissionResolver, editor: User) -> None:
    items = [("a", "products"), ("b", "users"), ("c", "media")]
    kept = resolver.filter_by_permission(editor, items, lambda i: i[1], Action.UPDATE)
    assert [i[0] for i in kept] == ["a", "c"]


def test_resource_wrappers(resolver: PermissionResolver, admin: User, editor: User, viewer: User) -> None:
    assert resolver.can_create_product(editor)
    assert not resolver.can_create_product(viewer)
    assert resolver.can_read_product(viewer)
    assert resolver.can_delete_category(editor)
    assert resolver.can_update_page(editor)
    assert resolver.can_read_media(viewer)
    assert resolver.can_read_order(viewer)
    assert not resolver.can_delete_user(editor)
    assert resolver.can_delete_user(admin)
    assert not resolver.can_read_analytics(editor)
    assert not resolver.can_manage_security(editor)
    assert resolver.can_manage_security(admin)
    assert not resolver.can_update_settings(viewer)
    assert resolver.can_manage_settings(admin)


def test_permission_parse() -> None:
    p = Permission.parse("products:update:own")
    assert (p.resource, p.action, p.scope) == ("products", Action.UPDATE, "own")
    assert p.key == "products:update"
    assert str(p) == "products:update:own"
    assert str(Permission.parse("users:delete")) == "users:delete"
    for bad in ("products", ":read", "products:publish", "a:b:c:d"):
        with pytest.raises(ValueError):
            Permission.parse(bad)

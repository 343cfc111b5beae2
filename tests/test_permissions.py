import pytest

from permissions import (
    DELETE_BUDGET_ITEM,
    DELETE_TRANSACTION,
    DELETE_WALLET,
    EDIT_WALLET,
    MANAGE_BUDGETS,
    MANAGE_MEMBERS,
    VIEW_WALLET,
    WRITE_BUDGET_ITEM,
    WRITE_TRANSACTION,
    has_permission,
    is_valid_role,
)


@pytest.mark.parametrize(
    "action,allowed",
    [
        (VIEW_WALLET, {"owner", "manager", "contributor", "viewer"}),
        (EDIT_WALLET, {"owner", "manager"}),
        (DELETE_WALLET, {"owner"}),
        (WRITE_TRANSACTION, {"owner", "manager", "contributor"}),
        (DELETE_TRANSACTION, {"owner", "manager"}),
        (MANAGE_MEMBERS, {"owner", "manager"}),
        (MANAGE_BUDGETS, {"owner", "manager"}),
        (WRITE_BUDGET_ITEM, {"owner", "manager", "contributor"}),
        (DELETE_BUDGET_ITEM, {"owner", "manager"}),
    ],
)
def test_permission_table(action, allowed):
    for role in ("owner", "manager", "contributor", "viewer"):
        assert has_permission(role, action) is (role in allowed)


def test_unknown_action_or_role_is_denied():
    assert not has_permission("owner", "launch_rockets")
    assert not has_permission("admin", VIEW_WALLET)


def test_is_valid_role():
    assert is_valid_role("contributor")
    assert not is_valid_role("admin")

from types import SimpleNamespace

import pytest

from tasklane.auth import task_policy
from tasklane.auth.permissions import Role
from tasklane.errors import ForbiddenError


def _task(creator_id="creator", assignee_id=None, status="todo"):
    return SimpleNamespace(id="task-1", creator_id=creator_id, assignee_id=assignee_id, status=status)


@pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
def test_managers_can_do_everything(role):
    task = _task(creator_id="someone", assignee_id="someone-else", status="draft")

    assert task_policy.can_view(task, "manager", role)
    assert task_policy.can_edit(task, "manager", role)
    assert task_policy.can_delete(task, "manager", role)


def test_member_sees_own_or_assigned_but_edits_only_own_tasks():
    created = _task(creator_id="m1")
    assigned = _task(creator_id="other", assignee_id="m1")
    unrelated = _task(creator_id="other", assignee_id="other2")

    assert task_policy.can_view(created, "m1", Role.MEMBER)
    assert task_policy.can_view(assigned, "m1", Role.MEMBER)
    assert not task_policy.can_view(unrelated, "m1", Role.MEMBER)

    assert task_policy.can_edit(created, "m1", Role.MEMBER)
    assert not task_policy.can_edit(assigned, "m1", Role.MEMBER)
    assert not task_policy.can_edit(unrelated, "m1", Role.MEMBER)


def test_member_never_deletes():
    assert not task_policy.can_delete(_task(creator_id="m1"), "m1", Role.MEMBER)


def test_viewer_sees_only_assigned_and_never_edits():
    assigned = _task(creator_id="other", assignee_id="v1")
    created = _task(creator_id="v1")

    assert task_policy.can_view(assigned, "v1", Role.VIEWER)
    assert not task_policy.can_view(created, "v1", Role.VIEWER)
    assert not task_policy.can_edit(assigned, "v1", Role.VIEWER)
    assert not task_policy.can_delete(assigned, "v1", Role.VIEWER)


def test_unassigned_task_is_not_assigned_to_anyone():
    task = _task(creator_id="other", assignee_id=None)
    assert not task_policy.can_view(task, "v1", Role.VIEWER)
    assert not task_policy.can_mark_complete(task, "v1", Role.MEMBER)


def test_unknown_role_gets_nothing():
    task = _task(creator_id="x", assignee_id="x")
    assert not task_policy.can_view(task, "x", "superuser")
    assert not task_policy.can_edit(task, "x", None)
    assert not task_policy.can_delete(task, "x", "superuser")


def test_mark_complete_requires_assignee_open_task_and_member_role():
    open_task = _task(creator_id="other", assignee_id="m1", status="in_progress")
    done_task = _task(creator_id="other", assignee_id="m1", status="done")

    assert task_policy.can_mark_complete(open_task, "m1", Role.MEMBER)
    assert not task_policy.can_mark_complete(done_task, "m1", Role.MEMBER)
    assert not task_policy.can_mark_complete(open_task, "m2", Role.MEMBER)
    assert not task_policy.can_mark_complete(open_task, "m1", Role.VIEWER)


def test_is_completion_only():
    assert task_policy.is_completion_only({"status": "done"})
    assert not task_policy.is_completion_only({"status": "review"})
    assert not task_policy.is_completion_only({"status": "done", "title": "x"})
    assert not task_policy.is_completion_only({})


def test_authorize_update_routes_completion_to_lenient_check():
    task = _task(creator_id="other", assignee_id="m1")

    task_policy.authorize_update(task, {"status": "done"}, "m1", Role.MEMBER)

    with pytest.raises(ForbiddenError, match="permission to edit"):
        task_policy.authorize_update(task, {"status": "done", "title": "x"}, "m1", Role.MEMBER)


def test_authorize_update_denies_completion_of_someone_elses_task():
    task = _task(creator_id="m1", assignee_id="m2")

    with pytest.raises(ForbiddenError, match="assigned to you"):
        task_policy.authorize_update(task, {"status": "done"}, "m1", Role.MEMBER)


def test_authorize_update_requires_edit_rights_for_other_fields():
    task = _task(creator_id="other", assignee_id="v1")

    with pytest.raises(ForbiddenError, match="permission to edit"):
        task_policy.authorize_update(task, {"title": "renamed"}, "v1", Role.VIEWER)

    with pytest.raises(ForbiddenError):
        task_policy.authorize_update(task, {"status": "done", "title": "x"}, "v1", Role.VIEWER)

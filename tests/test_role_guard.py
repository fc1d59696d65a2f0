# tests/test_role_guard.py

import random
import threading

import pytest
from sqlmodel import Session, SQLModel, create_engine

from core.repository import MapRepository
from core.role_guard import RoleMutationGuard, breaks_last_editor, validate_role_change
from models.enums import Role
from models.results import Rejection
from models.tables import Map
from models.user import Principal
from tests.conftest import grant, make_user


OWNER = Principal(id="owner", email="owner@example.com")
MAP = Map(id="m1", owner_id="owner", name="Map")


# ============================================================
# Pure rule set
# ============================================================
def test_only_owner_may_change_roles():
    editor = Principal(id="u1", email="u1@example.com")
    result = validate_role_change(MAP, editor, "u2", "viewer", None, 1)
    assert result.reason == Rejection.forbidden


def test_owner_role_cannot_be_targeted():
    result = validate_role_change(MAP, OWNER, "owner", "viewer", None, 0)
    assert result.reason == Rejection.invalid_target


@pytest.mark.parametrize("new_role", ["banned", None])
def test_owner_cannot_ban_or_remove_themself(new_role):
    result = validate_role_change(MAP, OWNER, OWNER.id, new_role, None, 0)
    assert result.reason == Rejection.self_action_forbidden


def test_editor_cannot_remove_own_role():
    editor = Principal(id="u1", email="u1@example.com")
    result = validate_role_change(MAP, editor, editor.id, None, "editor_all", 1)
    assert result.reason == Rejection.self_action_forbidden


def test_owner_taking_a_regular_role_is_invalid_target():
    result = validate_role_change(MAP, OWNER, OWNER.id, "editor_all", None, 0)
    assert result.reason == Rejection.invalid_target


def test_last_editor_cannot_be_downgraded_or_removed():
    for new_role in ("viewer", "contributor", "banned", None):
        result = validate_role_change(MAP, OWNER, "u1", new_role, "editor_all", 0)
        assert result.reason == Rejection.last_editor_protected


def test_editor_to_editor_is_allowed_for_last_editor():
    assert validate_role_change(MAP, OWNER, "u1", "editor_own", "editor_all", 0).ok


def test_downgrade_allowed_when_another_editor_remains():
    assert validate_role_change(MAP, OWNER, "u1", "viewer", "editor_all", 1).ok


def test_invalid_role_rejected():
    result = validate_role_change(MAP, OWNER, "u1", "owner", None, 0)
    assert result.reason == Rejection.invalid_role


def test_breaks_last_editor_helper():
    assert breaks_last_editor("editor_all", None, 0)
    assert breaks_last_editor("editor", "viewer", 0)
    assert not breaks_last_editor("viewer", None, 0)
    assert not breaks_last_editor("editor_all", "viewer", 2)
    assert not breaks_last_editor(None, "banned", 0)


# ============================================================
# Guarded writes
# ============================================================
def test_assign_persists_role(repo, guard, private_map, owner, alice):
    result = guard.assign(private_map, owner, alice.id, "Editor")

    assert result.ok
    assert result.data["role"] == "editor_all"
    assert repo.get_role(private_map, alice.id) == "editor_all"


def test_assign_then_authority_sees_it(guard, authority, private_map, owner, alice):
    assert not authority.can_edit(private_map, alice)

    assert guard.assign(private_map, owner, alice.id, "editor_all").ok

    assert authority.can_edit(private_map, alice)


def test_non_owner_cannot_assign(repo, guard, private_map, owner, alice, bob):
    grant(repo, private_map, alice.id, "editor_all")

    result = guard.assign(private_map, alice, bob.id, "viewer")

    assert result.reason == Rejection.forbidden
    assert repo.get_role(private_map, bob.id) is None


def test_last_editor_protected_end_to_end(repo, guard, private_map, owner, alice, bob):
    grant(repo, private_map, alice.id, "editor_all")

    result = guard.assign(private_map, owner, alice.id, "viewer")
    assert result.reason == Rejection.last_editor_protected
    assert repo.get_role(private_map, alice.id) == "editor_all"

    assert guard.assign(private_map, owner, bob.id, "editor_own").ok
    assert guard.assign(private_map, owner, alice.id, "viewer").ok
    assert repo.count_editors(private_map) == 1


def test_remove_role(repo, guard, private_map, owner, alice):
    grant(repo, private_map, alice.id, "viewer")

    assert guard.remove(private_map, owner, alice.id).ok
    assert repo.get_role(private_map, alice.id) is None


def test_remove_missing_role_is_not_found(guard, private_map, owner, alice):
    assert guard.remove(private_map, owner, alice.id).reason == Rejection.not_found


def test_assign_to_unknown_user_is_not_found(guard, private_map, owner):
    assert guard.assign(private_map, owner, "nobody", "viewer").reason == Rejection.not_found


def test_missing_map_is_not_found(guard, owner, alice):
    assert guard.assign("no-such-map", owner, alice.id, "viewer").reason == Rejection.not_found


def test_sharing_scenario(guard, private_map, owner, alice, bob):
    assert guard.assign(private_map, owner, alice.id, "editor").ok

    assert guard.remove(private_map, alice, alice.id).reason == Rejection.self_action_forbidden
    assert guard.remove(private_map, owner, alice.id).reason == Rejection.last_editor_protected

    assert guard.assign(private_map, owner, bob.id, "editor").ok
    assert guard.remove(private_map, owner, alice.id).ok


def test_rejection_leaves_roles_version_untouched(repo, guard, private_map, owner, alice):
    before = repo.get_map(private_map).roles_version

    guard.assign(private_map, owner, alice.id, "owner")

    repo.session.expire_all()
    assert repo.get_map(private_map).roles_version == before


# ============================================================
# Invariant: an edited map keeps at least one editing role
# ============================================================
@pytest.mark.parametrize("seed", range(5))
def test_random_mutations_never_drop_last_editor(seed, repo, guard, private_map, owner, alice, bob, carol):
    rng = random.Random(seed)
    users = [alice, bob, carol]
    choices = Role.list() + ["editor", None]

    grant(repo, private_map, rng.choice(users).id, "editor_all")

    for _ in range(40):
        had_editor = repo.count_editors(private_map) > 0
        target = rng.choice(users)
        new_role = rng.choice(choices)

        result = guard.apply(private_map, owner, target.id, new_role)

        if had_editor:
            assert repo.count_editors(private_map) >= 1, (new_role, result)
        if result.reason == Rejection.last_editor_protected:
            assert had_editor


# ============================================================
# Concurrent demotions on a file-backed database
# ============================================================
def test_concurrent_demotions_keep_one_editor(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'roles.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        repo = MapRepository(session)
        owner = make_user(repo, "owner@example.com", "Owner")
        alice = make_user(repo, "alice@example.com", "Alice")
        bob = make_user(repo, "bob@example.com", "Bob")
        with repo.transaction():
            map_id = repo.add_map(owner_id=owner.id, name="Shared").id
        grant(repo, map_id, alice.id, "editor_all")
        grant(repo, map_id, bob.id, "editor_all")

    barrier = threading.Barrier(2)
    reasons, errors = [], []

    def demote(target_id):
        try:
            with Session(engine) as session:
                guard = RoleMutationGuard(MapRepository(session))
                barrier.wait(timeout=10)
                reasons.append(guard.assign(map_id, owner, target_id, "viewer").reason)
        except Exception as e:  # surfaced by the assertion below
            errors.append(e)

    threads = [threading.Thread(target=demote, args=(user.id,)) for user in (alice, bob)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert reasons.count(None) == 1
    assert reasons.count(Rejection.last_editor_protected) == 1

    with Session(engine) as session:
        assert MapRepository(session).count_editors(map_id) == 1

    engine.dispose()

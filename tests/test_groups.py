# tests/test_groups.py
"""グループ作成・招待・メンバーのグリッド読み込みのテスト"""

from __future__ import annotations

import pytest

from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.identity import nickname_to_id
from whenmeet_core.groups.service import GroupService, load_member_grids
from whenmeet_core.validation.validator import ValidationError

from conftest import make_grid


@pytest.fixture
def groups(store):
    return GroupService(store)


@pytest.fixture
def group(groups):
    return groups.create_group("study", "alice", ["bob", "carol"], group_id="g1")


class TestCreateGroup:
    def test_creator_auto_accepted(self, group):
        assert group.accepted_members == ["alice"]
        assert group.members == ["bob", "carol"]
        assert group.creator_id == nickname_to_id("alice")

    def test_members_invited(self, groups, group):
        assert [i.group_id for i in groups.list_invitations("bob")] == ["g1"]
        assert [i.group_id for i in groups.list_invitations("carol")] == ["g1"]
        assert groups.list_invitations("alice") == []

    def test_duplicate_members_and_creator_removed(self, groups):
        g = groups.create_group("dup", "alice", ["bob", "bob", "alice", " "], group_id="g2")
        assert g.members == ["bob"]
        assert groups.list_invitations("bob")[0].group_id == "g2"

    def test_creator_is_stripped(self, groups):
        g = groups.create_group("x", " alice ", ["alice", "bob"])
        assert g.creator == "alice"
        assert g.members == ["bob"]
        assert g.accepted_members == ["alice"]
        assert groups.list_invitations("alice") == []

    def test_generated_id(self, groups):
        g = groups.create_group("auto", "alice", ["bob"])
        assert g.group_id
        assert groups.get_group(g.group_id).name == "auto"

    @pytest.mark.parametrize("name,creator,members", [("", "a", ["b"]), ("x", "", ["b"]), ("x", "a", [])])
    def test_required_fields(self, groups, name, creator, members):
        with pytest.raises(ValidationError):
            groups.create_group(name, creator, members)


class TestRespond:
    def test_accept(self, groups, group):
        updated = groups.respond("g1", "bob", True)
        assert updated.accepted_members == ["alice", "bob"]
        assert groups.list_invitations("bob") == []
        assert [g.group_id for g in groups.list_groups("bob")] == ["g1"]

    def test_decline(self, groups, group):
        groups.respond("g1", "carol", False)
        assert groups.list_invitations("carol") == []
        assert groups.list_groups("carol") == []
        assert groups.get_group("g1").accepted_members == ["alice"]

    def test_accept_twice_is_idempotent(self, groups, group):
        groups.respond("g1", "bob", True)
        groups.respond("g1", "bob", True)
        assert groups.get_group("g1").accepted_members == ["alice", "bob"]

    def test_unknown_group(self, groups):
        assert groups.respond("nope", "bob", True) is None


class TestListGroups:
    def test_creator_sees_group(self, groups, group):
        assert [g.name for g in groups.list_groups("alice")] == ["study"]

    def test_legacy_record_without_accepted_members(self, store, groups):
        store.set("group:old", {"id": "old", "name": "old", "creator": "dave", "members": ["eve"]})
        assert [g.group_id for g in groups.list_groups("dave")] == ["old"]


class TestLoadMemberGrids:
    def test_missing_as_empty(self, schedules, group):
        bob = make_grid([(0, 1)])
        schedules.save_schedule(nickname_to_id("bob"), bob)
        names, grids = load_member_grids(group, schedules)
        assert names == ["alice", "bob", "carol"]
        assert grids[0] == Grid.empty()
        assert grids[1] == bob

    def test_skip_missing(self, schedules, group):
        schedules.save_schedule(nickname_to_id("carol"), Grid.empty())
        names, _ = load_member_grids(group, schedules, missing_as_empty=False)
        assert names == ["carol"]

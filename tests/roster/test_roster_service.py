from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from camp_watch.core.enums import Methodology, Presence, RankLevel
from camp_watch.core.exceptions import DuplicateMembershipError, NotFoundError, StoreError, ValidationError
from camp_watch.database.bootstrap import default_groups
from camp_watch.groups.model import GroupWithMembers
from camp_watch.persons.model import Person
from camp_watch.presence.model import PresenceEvent
from camp_watch.roster.service import RosterService


class FakeDB:
    def __init__(self):
        self.persons: dict[int, Person] = {}
        self.groups: dict[int, str] = dict(default_groups())
        self.members: set[tuple[int, int]] = set()
        self.log: list[PresenceEvent] = []
        self.fail_reads = False
        self.fail_presence_on: Optional[int] = None
        self.fail_writes = False
        self._next_person = 1
        self._next_group = 6


class FakePersons:
    def __init__(self, db: FakeDB):
        self._db = db

    def insert_person(self, *, name, surname, rank, methodology):
        if self._db.fail_writes:
            raise StoreError("write failed")
        pid = self._db._next_person
        self._db._next_person += 1
        self._db.persons[pid] = Person(pid, name, surname, rank, methodology)
        self._db.members |= {(1, pid), (methodology.group_id, pid)}
        return pid

    def update_person(self, *, person_id, name, surname, rank, methodology):
        old = self._db.persons.get(person_id)
        if not old:
            return False
        self._db.persons[person_id] = Person(person_id, name, surname, rank, methodology, old.presence)
        self._db.members.discard((old.methodology.group_id, person_id))
        self._db.members.add((methodology.group_id, person_id))
        return True

    def delete_person(self, person_id):
        if self._db.persons.pop(person_id, None) is None:
            return False
        self._db.members = {m for m in self._db.members if m[1] != person_id}
        return True


class FakeGroups:
    def __init__(self, db: FakeDB):
        self._db = db

    def load_groups_with_members(self):
        if self._db.fail_reads:
            raise StoreError("disk gone")
        # reverse id order: the service must sort
        return [
            GroupWithMembers(
                group_id=gid,
                name=name,
                members=tuple(self._db.persons[pid] for (g, pid) in sorted(self._db.members) if g == gid),
            )
            for gid, name in sorted(self._db.groups.items(), reverse=True)
        ]

    def insert_group(self, *, name):
        gid = self._db._next_group
        self._db._next_group += 1
        self._db.groups[gid] = name
        return gid

    def rename_group(self, *, group_id, name):
        if group_id not in self._db.groups:
            return False
        self._db.groups[group_id] = name
        return True

    def delete_group(self, group_id):
        if self._db.groups.pop(group_id, None) is None:
            return False
        self._db.members = {m for m in self._db.members if m[0] != group_id}
        return True

    def membership_exists(self, *, group_id, person_id):
        return (group_id, person_id) in self._db.members

    def insert_membership(self, *, group_id, person_id):
        self._db.members.add((group_id, person_id))

    def delete_membership(self, *, group_id, person_id):
        if (group_id, person_id) not in self._db.members:
            return False
        self._db.members.discard((group_id, person_id))
        return True


class FakePresence:
    def __init__(self, db: FakeDB):
        self._db = db

    def set_presence(self, *, person_id, presence, at):
        if self._db.fail_presence_on == person_id:
            raise StoreError("write failed")
        person = self._db.persons.get(person_id)
        if not person:
            return False
        self._db.persons[person_id] = Person(
            person.person_id, person.name, person.surname, person.rank, person.methodology, presence
        )
        self._db.log.append(PresenceEvent(len(self._db.log) + 1, person_id, presence, at))
        return True

    def load_presence_log(self):
        if self._db.fail_reads:
            raise StoreError("disk gone")
        return list(self._db.log)


class StepClock:
    def __init__(self, start: datetime):
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=20)
        return current


@pytest.fixture
def db():
    return FakeDB()


@pytest.fixture
def svc(db):
    service = RosterService(
        FakePersons(db),
        FakeGroups(db),
        FakePresence(db),
        tz=timezone.utc,
        clock=StepClock(datetime(2026, 7, 10, 10, 0, 5, tzinfo=timezone.utc)),
    )
    service.reload()
    return service


def _add(svc, name, surname, methodology=Methodology.SCOUT, rank=RankLevel.NONE) -> int:
    return svc.add_person(name=name, surname=surname, rank=int(rank), methodology=int(methodology))


def test_reload_sorts_groups_and_members(svc):
    _add(svc, "Piotr", "Zalewski", Methodology.CUB)
    _add(svc, "anna", "nowak", Methodology.ROVER)
    _add(svc, "Adam", "Kowal", Methodology.CUB)
    svc.add_group("Kitchen")

    proj = svc.projections

    assert [g.group_id for g in proj.groups] == [1, 2, 3, 4, 5, 6]
    assert [p.surname for p in proj.roster] == ["Kowal", "Zalewski", "nowak"]
    assert [p.surname for p in proj.groups[1].members] == ["Kowal", "Zalewski"]
    assert proj.user_group_names == ("Kitchen",)


def test_reload_is_idempotent(svc):
    _add(svc, "Jan", "Kos")
    svc.add_group("Guard")
    svc.toggle_selection(1)

    first = svc.reload()
    second = svc.reload()

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_every_person_lands_in_exactly_one_partition(svc, db):
    for i in range(4):
        _add(svc, f"N{i}", f"S{i}")
    svc.toggle_selection(2)
    svc.toggle_selection(4)
    svc.check_in_selected()

    proj = svc.projections
    outside = {p.person_id for p in proj.outside.persons}
    inside = {p.person_id for p in proj.inside.persons}

    assert inside == {2, 4}
    assert outside == {1, 3}
    assert outside | inside == {p.person_id for p in proj.roster}
    assert not outside & inside


def test_add_person_links_all_and_methodology_group_only(svc):
    svc.add_group("Kitchen")
    pid = _add(svc, "Ola", "Lis", Methodology.SCOUT)

    proj = svc.projections
    member_groups = {g.group_id for g in proj.groups if pid in g.member_ids}

    assert member_groups == {1, Methodology.SCOUT.group_id}
    assert proj.roster[0].presence is Presence.OUT


@pytest.mark.parametrize("rank, methodology", [(11, 1), (0, 4), ("x", 0)])
def test_add_person_with_invalid_codes_writes_nothing(svc, db, rank, methodology):
    with pytest.raises(ValidationError):
        svc.add_person(name="Ola", surname="Lis", rank=rank, methodology=methodology)

    assert db.persons == {}
    assert db.members == set()


def test_duplicate_membership_is_rejected_without_write(svc, db):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    svc.add_group("Kitchen")
    svc.add_group("Guard")

    svc.add_membership(person_id=3, group_id=7)
    with pytest.raises(DuplicateMembershipError):
        svc.add_membership(person_id=3, group_id=7)

    assert [m for m in db.members if m == (7, 3)] == [(7, 3)]
    assert svc.member_ids(7) == frozenset({3})


def test_membership_in_reserved_group_is_rejected(svc, db):
    pid = _add(svc, "Jan", "Kos", Methodology.CUB)
    before = set(db.members)

    with pytest.raises(ValidationError):
        svc.add_membership(person_id=pid, group_id=Methodology.ROVER.group_id)

    assert db.members == before


def test_toggle_selection_updates_markers_without_store_reads(svc, db):
    _add(svc, "A", "A")
    _add(svc, "B", "B")
    db.fail_reads = True

    assert svc.toggle_selection(2) is True
    assert svc.projections.outside.selected == (False, True)

    assert svc.toggle_selection(2) is False
    assert svc.projections.outside.selected == (False, False)


def test_toggle_unknown_person_raises(svc):
    with pytest.raises(NotFoundError):
        svc.toggle_selection(99)


def test_select_group_replaces_selection(svc):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    gid = svc.add_group("Kitchen")
    svc.add_membership(person_id=1, group_id=gid)
    svc.add_membership(person_id=3, group_id=gid)
    svc.toggle_selection(2)

    svc.select_group(gid)

    assert svc.selection == frozenset({1, 3})
    assert svc.projections.outside.selected == (True, False, True)


def test_select_unknown_group_keeps_selection(svc):
    _add(svc, "A", "A")
    svc.toggle_selection(1)

    with pytest.raises(NotFoundError):
        svc.select_group(42)

    assert svc.selection == frozenset({1})


def test_selection_survives_reload(svc):
    _add(svc, "A", "A")
    svc.toggle_selection(1)

    svc.reload()

    assert svc.selection == frozenset({1})
    assert svc.projections.outside.selected == (True,)


def test_bulk_check_in_clears_selection_and_logs_each_person(svc, db):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    svc.toggle_selection(1)
    svc.toggle_selection(3)

    changed = svc.check_in_selected()

    assert changed == [1, 3]
    assert svc.selection == frozenset()
    assert db.persons[1].presence is Presence.IN
    assert db.persons[3].presence is Presence.IN
    assert db.persons[2].presence is Presence.OUT
    assert [(e.subject_id, e.presence) for e in db.log] == [(1, Presence.IN), (3, Presence.IN)]
    assert [p.person_id for p in svc.projections.inside.persons] == [1, 3]
    assert svc.projections.inside.selected == (False, False)


def test_bulk_check_out_after_check_in(svc, db):
    pid = _add(svc, "A", "A")
    svc.toggle_selection(pid)
    svc.check_in_selected()
    svc.toggle_selection(pid)

    svc.check_out_selected()

    assert db.persons[pid].presence is Presence.OUT
    assert [e.presence for e in db.log] == [Presence.IN, Presence.OUT]
    assert svc.projections.outside.persons[0].person_id == pid


def test_published_log_is_grouped_by_day_and_minute(svc):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    for pid in (1, 2, 3):
        svc.toggle_selection(pid)
    svc.check_in_selected()

    log = svc.projections.log

    # clock ticks 20s per write starting 10:00:05 -> 10:00:05, 10:00:25, 10:00:45
    assert len(log) == 1
    assert [m.label for m in log[0].minutes] == ["10:00"]
    assert [e.subject_id for e in log[0].minutes[0].entries] == [1, 2, 3]


def test_failed_reload_keeps_previous_projections(svc, db):
    _add(svc, "A", "A")
    before = svc.projections
    db.fail_reads = True

    with pytest.raises(StoreError):
        svc.reload()

    assert svc.projections is before


def test_failed_bulk_write_keeps_unprocessed_ids_selected(svc, db):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    for pid in (1, 2, 3):
        svc.toggle_selection(pid)
    db.fail_presence_on = 2

    with pytest.raises(StoreError):
        svc.check_in_selected()

    assert svc.selection == frozenset({2, 3})
    assert db.persons[1].presence is Presence.IN
    assert [p.person_id for p in svc.projections.inside.persons] == [1]


def test_bulk_skips_persons_deleted_after_selection(svc, db):
    _add(svc, "A", "A")
    _add(svc, "B", "B")
    svc.toggle_selection(1)
    svc.toggle_selection(2)
    del db.persons[2]
    db.members = {m for m in db.members if m[1] != 2}

    assert svc.check_in_selected() == [1]
    assert [e.subject_id for e in db.log] == [1]
    assert svc.selection == frozenset()


def test_picker_excludes_members_of_active_group(svc):
    for i in range(3):
        _add(svc, f"N{i}", f"S{i}")
    first = svc.add_group("Kitchen")
    second = svc.add_group("Guard")
    svc.add_membership(person_id=1, group_id=first)
    svc.add_membership(person_id=2, group_id=second)

    assert [p.person_id for p in svc.projections.picker] == [2, 3]

    picker = svc.change_picker_group(1)
    assert [p.person_id for p in picker] == [1, 3]
    assert svc.projections.active_group_index == 1

    with pytest.raises(NotFoundError):
        svc.change_picker_group(5)
    assert svc.projections.active_group_index == 1
    assert [p.person_id for p in svc.projections.picker] == [1, 3]


def test_picker_index_falls_back_when_group_deleted(svc):
    svc.add_group("Kitchen")
    gid = svc.add_group("Guard")
    svc.change_picker_group(1)

    svc.delete_group(gid)

    assert svc.projections.active_group_index == 0


def test_reserved_groups_cannot_be_renamed_or_deleted(svc):
    with pytest.raises(ValidationError):
        svc.rename_group(group_id=1, name="Everyone")
    with pytest.raises(ValidationError):
        svc.delete_group(3)


def test_update_person_moves_methodology_group(svc):
    pid = _add(svc, "Ola", "Lis", Methodology.CUB)

    svc.update_person(person_id=pid, name="Ola", surname="Lis", rank=2, methodology=int(Methodology.SCOUT))

    groups = {g.group_id for g in svc.projections.groups if pid in g.member_ids}
    assert groups == {1, Methodology.SCOUT.group_id}
    assert svc.projections.roster[0].rank is RankLevel.FIRST_FEMALE


def test_delete_person_drops_selection_and_log_lines(svc, db):
    pid = _add(svc, "A", "A")
    svc.toggle_selection(pid)
    svc.check_in_selected()
    svc.toggle_selection(pid)

    svc.delete_person(pid)

    assert svc.selection == frozenset()
    assert svc.projections.roster == ()
    assert svc.projections.log == ()
    assert len(db.log) == 1


def test_remove_missing_membership_raises(svc):
    _add(svc, "A", "A")
    gid = svc.add_group("Kitchen")

    with pytest.raises(NotFoundError):
        svc.remove_membership(person_id=1, group_id=gid)


def test_membership_with_unknown_person_or_group_raises_not_found(svc, db):
    _add(svc, "A", "A")
    gid = svc.add_group("Kitchen")
    before = set(db.members)

    with pytest.raises(NotFoundError):
        svc.add_membership(person_id=99, group_id=gid)
    with pytest.raises(NotFoundError):
        svc.add_membership(person_id=1, group_id=77)

    assert db.members == before


def test_picker_rejects_index_without_user_group(svc):
    _add(svc, "A", "A")

    with pytest.raises(NotFoundError):
        svc.change_picker_group(0)
    assert svc.projections.active_group_index == 0

    svc.add_group("Kitchen")
    assert [p.person_id for p in svc.change_picker_group(0)] == [1]


def test_failed_write_keeps_previous_projections(svc, db):
    _add(svc, "A", "A")
    before = svc.projections
    db.fail_writes = True

    with pytest.raises(StoreError):
        _add(svc, "B", "B")

    assert svc.projections is before
    assert list(db.persons) == [1]

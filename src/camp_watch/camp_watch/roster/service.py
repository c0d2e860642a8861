from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from ..common.datetime_utils import now_utc
from ..common.validators import decode_methodology, decode_rank, require_int, require_non_empty
from ..core.constants import ALL_PERSONS_GROUP_ID
from ..core.enums import Presence
from ..core.exceptions import DuplicateMembershipError, NotFoundError, StoreError, ValidationError
from ..groups.model import GroupWithMembers, is_user_group_id
from ..groups.repository import GroupRepository
from ..persons.model import Person
from ..persons.repository import PersonRepository
from ..presence.log_aggregator import aggregate_log
from ..presence.repository import PresenceRepository
from .membership_filter import filter_persons_excluding_group
from .ordering import sort_persons
from .projections import PresencePartition, Projections

logger = logging.getLogger(__name__)


class RosterService:
    """Owns the derived caches and keeps them consistent with the store.

    Every mutating handler writes to the store and then calls :meth:`reload`, which
    rebuilds all caches from scratch and publishes a new :class:`Projections`
    snapshot. The selection set is the only cache that survives a reload; it is
    cleared after a bulk check-in/out.

    Runs on a single thread: each call completes before the next one starts.
    """

    def __init__(
        self,
        persons: PersonRepository,
        groups: GroupRepository,
        presence: PresenceRepository,
        *,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._persons = persons
        self._groups = groups
        self._presence = presence
        self._tz = tz
        self._clock = clock

        self._roster: Tuple[Person, ...] = ()
        self._user_groups: Tuple[GroupWithMembers, ...] = ()
        self._member_ids: Dict[int, FrozenSet[int]] = {}
        self._selection: set[int] = set()
        self._active_group_index = 0
        self._projections = Projections()

    @property
    def projections(self) -> Projections:
        return self._projections

    @property
    def selection(self) -> FrozenSet[int]:
        return frozenset(self._selection)

    def member_ids(self, group_id: int) -> FrozenSet[int]:
        ids = self._member_ids.get(int(group_id))
        if ids is None:
            raise NotFoundError(f"Group {group_id} does not exist")
        return ids

    # ------------------------------------------------------------------
    # Reload
    # ------------------------------------------------------------------

    def reload(self) -> Projections:
        """Rebuild every cache from the store and publish one new snapshot.

        Raises StoreError when a read fails; nothing is published in that case.
        """
        loaded = self._groups.load_groups_with_members()
        events = self._presence.load_presence_log()

        groups = tuple(
            replace(g, members=tuple(sort_persons(g.members)))
            for g in sorted(loaded, key=lambda g: g.group_id)
        )

        roster: Tuple[Person, ...] = ()
        for g in groups:
            if g.group_id == ALL_PERSONS_GROUP_ID:
                roster = g.members
                break
        else:
            logger.warning("All-persons group %s is missing, roster is empty", ALL_PERSONS_GROUP_ID)

        member_ids = {g.group_id: g.member_ids for g in groups}
        user_groups = tuple(g for g in groups if g.is_user_group)

        active_index = self._active_group_index
        if not 0 <= active_index < len(user_groups):
            active_index = 0
        picker = self._picker_for(active_index, roster, user_groups)

        outside, inside = self._partition(roster)
        log = aggregate_log(events, {p.person_id: p for p in roster}, tz=self._tz)

        self._roster = roster
        self._user_groups = user_groups
        self._member_ids = member_ids
        self._active_group_index = active_index
        self._projections = Projections(
            roster=roster,
            groups=groups,
            user_groups=user_groups,
            user_group_names=tuple(g.name for g in user_groups),
            outside=outside,
            inside=inside,
            active_group_index=active_index,
            picker=picker,
            log=log,
        )
        logger.debug(
            "Reloaded: %d persons, %d groups, %d log days, %d selected",
            len(roster), len(groups), len(log), len(self._selection),
        )
        return self._projections

    def _partition(self, roster: Sequence[Person]) -> Tuple[PresencePartition, PresencePartition]:
        outside = tuple(p for p in roster if not p.is_inside)
        inside = tuple(p for p in roster if p.is_inside)
        return (
            PresencePartition(outside, tuple(p.person_id in self._selection for p in outside)),
            PresencePartition(inside, tuple(p.person_id in self._selection for p in inside)),
        )

    @staticmethod
    def _picker_for(
        index: int,
        roster: Tuple[Person, ...],
        user_groups: Tuple[GroupWithMembers, ...],
    ) -> Tuple[Person, ...]:
        if 0 <= index < len(user_groups):
            return tuple(filter_persons_excluding_group(roster, user_groups[index]))
        return roster

    def _republish_partitions(self) -> None:
        outside, inside = self._partition(self._roster)
        self._projections = replace(self._projections, outside=outside, inside=inside)

    @contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        try:
            yield
        except StoreError:
            logger.error("Store write failed during %s", action, exc_info=True)
            raise

    # ------------------------------------------------------------------
    # Persons
    # ------------------------------------------------------------------

    def add_person(self, *, name: str, surname: str, rank: object, methodology: object) -> int:
        rank_level = decode_rank(rank)
        methodology_value = decode_methodology(methodology)
        name = require_non_empty(name, "Name")
        surname = require_non_empty(surname, "Surname")

        with self._writing("add person"):
            person_id = self._persons.insert_person(
                name=name,
                surname=surname,
                rank=rank_level,
                methodology=methodology_value,
            )
        logger.info("Added person %s (%s %s)", person_id, name, surname)

        self.reload()
        return person_id

    def update_person(self, *, person_id: object, name: str, surname: str, rank: object, methodology: object) -> None:
        pid = require_int(person_id, "Person id")
        rank_level = decode_rank(rank)
        methodology_value = decode_methodology(methodology)
        name = require_non_empty(name, "Name")
        surname = require_non_empty(surname, "Surname")

        with self._writing("update person"):
            updated = self._persons.update_person(
                person_id=pid,
                name=name,
                surname=surname,
                rank=rank_level,
                methodology=methodology_value,
            )
        if not updated:
            raise NotFoundError(f"Person {pid} does not exist")

        self.reload()

    def delete_person(self, person_id: object) -> None:
        pid = require_int(person_id, "Person id")
        with self._writing("delete person"):
            deleted = self._persons.delete_person(pid)
        if not deleted:
            raise NotFoundError(f"Person {pid} does not exist")

        self._selection.discard(pid)
        logger.info("Deleted person %s", pid)
        self.reload()

    # ------------------------------------------------------------------
    # Groups and memberships
    # ------------------------------------------------------------------

    def add_group(self, name: str) -> int:
        name = require_non_empty(name, "Group name")
        with self._writing("add group"):
            group_id = self._groups.insert_group(name=name)
        logger.info("Added group %s (%s)", group_id, name)

        self.reload()
        return group_id

    def rename_group(self, *, group_id: object, name: str) -> None:
        gid = self._require_user_group(group_id)
        name = require_non_empty(name, "Group name")
        with self._writing("rename group"):
            renamed = self._groups.rename_group(group_id=gid, name=name)
        if not renamed:
            raise NotFoundError(f"Group {gid} does not exist")

        self.reload()

    def delete_group(self, group_id: object) -> None:
        gid = self._require_user_group(group_id)
        with self._writing("delete group"):
            deleted = self._groups.delete_group(gid)
        if not deleted:
            raise NotFoundError(f"Group {gid} does not exist")

        logger.info("Deleted group %s", gid)
        self.reload()

    def add_membership(self, *, person_id: object, group_id: object) -> None:
        pid = require_int(person_id, "Person id")
        gid = self._require_user_group(group_id)
        if gid not in self._member_ids:
            raise NotFoundError(f"Group {gid} does not exist")
        self._require_on_roster(pid)

        with self._writing("add membership"):
            if self._groups.membership_exists(group_id=gid, person_id=pid):
                logger.warning("Relation already exists: person %s in group %s", pid, gid)
                raise DuplicateMembershipError(f"Person {pid} is already in group {gid}")
            self._groups.insert_membership(group_id=gid, person_id=pid)

        self.reload()

    def remove_membership(self, *, person_id: object, group_id: object) -> None:
        pid = require_int(person_id, "Person id")
        gid = self._require_user_group(group_id)

        with self._writing("remove membership"):
            removed = self._groups.delete_membership(group_id=gid, person_id=pid)
        if not removed:
            raise NotFoundError(f"Person {pid} is not in group {gid}")

        self.reload()

    def change_picker_group(self, index: object) -> Tuple[Person, ...]:
        """Switch the "add to group" picker; uses cached lists only."""
        idx = require_int(index, "Group index")
        if not 0 <= idx < len(self._user_groups):
            raise NotFoundError(f"No user group at index {idx}")
        picker = self._picker_for(idx, self._roster, self._user_groups)
        self._active_group_index = idx
        self._projections = replace(self._projections, active_group_index=idx, picker=picker)
        return picker

    def _require_user_group(self, group_id: object) -> int:
        gid = require_int(group_id, "Group id")
        if not is_user_group_id(gid):
            logger.warning("Rejected change to reserved group %s", gid)
            raise ValidationError(f"Group {gid} is reserved and cannot be edited")
        return gid

    def _require_on_roster(self, person_id: int) -> int:
        if all(p.person_id != person_id for p in self._roster):
            raise NotFoundError(f"Person {person_id} is not on the roster")
        return person_id

    # ------------------------------------------------------------------
    # Selection and presence
    # ------------------------------------------------------------------

    def toggle_selection(self, person_id: object) -> bool:
        """Flip one id in the selection. Returns True when it is now selected."""
        pid = self._require_on_roster(require_int(person_id, "Person id"))

        if pid in self._selection:
            self._selection.remove(pid)
        else:
            self._selection.add(pid)
        self._republish_partitions()
        return pid in self._selection

    def select_group(self, group_id: object) -> FrozenSet[int]:
        """Replace the selection with exactly the members of the group."""
        ids = self.member_ids(require_int(group_id, "Group id"))
        self._selection = set(ids)
        self._republish_partitions()
        return ids

    def clear_selection(self) -> None:
        self._selection.clear()
        self._republish_partitions()

    def check_in_selected(self) -> List[int]:
        return self._set_presence_for_selection(Presence.IN)

    def check_out_selected(self) -> List[int]:
        return self._set_presence_for_selection(Presence.OUT)

    def _set_presence_for_selection(self, presence: Presence) -> List[int]:
        changed: List[int] = []
        handled: List[int] = []
        try:
            for pid in sorted(self._selection):
                if self._presence.set_presence(person_id=pid, presence=presence, at=self._clock()):
                    changed.append(pid)
                else:
                    logger.warning("Skipping person %s: no longer in the store", pid)
                handled.append(pid)
        except StoreError:
            logger.error("Bulk %s stopped after %d of %d persons", presence.name, len(handled), len(self._selection), exc_info=True)
            self._selection.difference_update(handled)
            try:
                self.reload()
            except StoreError:
                logger.error("Reload after failed bulk %s also failed", presence.name, exc_info=True)
            raise

        self._selection.clear()
        logger.info("Checked %s %d persons", presence.name, len(changed))
        self.reload()
        return changed

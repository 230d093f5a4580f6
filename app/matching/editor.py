"""
Manual editing of a working table set
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from app.matching.assignment import MAX_TABLE_SIZE, MIN_TABLE_SIZE, auto_assign, new_table_id
from app.matching.constraints import BlockIndex
from app.matching.errors import (
    MemberNotFoundError,
    SessionClosedError,
    TableNotFoundError,
)
from app.matching.groups import extract_groups
from app.matching.models import (
    TABLE_FIELDS,
    BlockRelation,
    EventRoster,
    Guest,
    GuestRef,
    MemberRef,
    Table,
)
from app.matching.scoring import TableScore, score_table
from app.matching.serialization import member_to_wire, table_from_wire, table_to_wire

logger = logging.getLogger(__name__)


@dataclass
class TableIssue:
    """Why a table cannot be saved yet."""

    message: str
    is_block_error: bool = False


class MatchingSession:
    """The working table set of one event, plus the roster it seats.

    Every mutating method either applies completely or raises before touching
    state. Validity is always derived from the current tables; the only stored
    state flag is ``persisted``, after which the session is read-only.
    """

    def __init__(
        self,
        event_id: str,
        roster: EventRoster,
        block_relations: Iterable[BlockRelation] = (),
        tables: Optional[List[Table]] = None,
    ):
        self.event_id = event_id
        self.roster = roster
        self.block_relations = list(block_relations)
        self.block_index = BlockIndex(self.block_relations)
        self._tables: List[Table] = [self._known_members_only(t) for t in tables or []]
        self.persisted = False

    @classmethod
    def from_wire(
        cls,
        event_id: str,
        roster: EventRoster,
        block_relations: Iterable[BlockRelation],
        tables: List[Dict[str, Any]],
    ) -> "MatchingSession":
        return cls(event_id, roster, block_relations, [table_from_wire(t) for t in tables])

    # -------- read side --------

    @property
    def tables(self) -> List[Table]:
        return [t.copy() for t in self._tables]

    @property
    def status(self) -> str:
        if self.persisted:
            return "persisted"
        return "valid" if self.is_valid() else "invalid"

    def get_table(self, table_id: str) -> Table:
        return self._find(table_id).copy()

    def score(self, table_id: str) -> TableScore:
        return score_table(self._find(table_id).members, self.roster, self.block_index)

    def unassigned_members(self) -> List[MemberRef]:
        assigned = {m for t in self._tables for m in t.members}
        return [m for m in self.roster.all_members() if m not in assigned]

    def split_pair_violations(self) -> List[str]:
        """One message per group whose members sit at more than one table.

        Members that are simply unassigned do not make a split.
        """
        location: Dict[MemberRef, str] = {}
        for table in self._tables:
            for member in table.members:
                location.setdefault(member, table.id)

        errors = []
        for group in extract_groups(self.roster.participants, self.roster.guests):
            if group.size <= 1:
                continue
            table_ids = {location[m] for m in group.members if m in location}
            if len(table_ids) > 1:
                names = " and ".join(group.display_names)
                errors.append(f"{names} signed up together and must share a table")
        return errors

    def table_issue(self, table: Table) -> Optional[TableIssue]:
        count = len(table.members)
        if self.block_index.has_block_conflict_in_table(table.members):
            return TableIssue("Users who blocked each other are seated together", True)
        if not table.restaurant_name.strip():
            return TableIssue("Enter a restaurant")
        if count < MIN_TABLE_SIZE:
            return TableIssue(f"Add at least {MIN_TABLE_SIZE - count} more")
        if count > MAX_TABLE_SIZE:
            return TableIssue(f"At most {MAX_TABLE_SIZE} members (currently {count})")
        return None

    def validation_problems(self) -> List[str]:
        problems = list(self.split_pair_violations())
        for table in self._tables:
            issue = self.table_issue(table)
            if issue:
                problems.append(f"{table.id}: {issue.message}")
        if not self._tables:
            problems.append("Add at least one table")
        return problems

    def is_valid(self) -> bool:
        return not self.validation_problems()

    def to_wire(self) -> List[Dict[str, Any]]:
        return [table_to_wire(t) for t in self._tables]

    # -------- table operations --------

    def add_table(self) -> Table:
        self._check_open()
        table = Table(id=new_table_id("new"))
        self._tables = self._tables + [table]
        return table.copy()

    def remove_table(self, table_id: str) -> None:
        """Delete a table; its members become unassigned."""
        self._check_open()
        self._find(table_id)
        self._tables = [t for t in self._tables if t.id != table_id]

    def update_table(self, table_id: str, field: str, value: str) -> None:
        self._check_open()
        if field not in TABLE_FIELDS:
            raise ValueError(f"Unknown table field '{field}'")
        self._find(table_id)
        self._tables = [
            self._with_field(t, field, value) if t.id == table_id else t
            for t in self._tables
        ]

    # -------- member operations --------

    def add_member(self, table_id: str, member: MemberRef) -> None:
        """Seat the member's whole group at the table, taking it from anywhere else."""
        self._check_open()
        self._find(table_id)
        group = self._group_of(member)

        updated = []
        for table in self._tables:
            table = table.copy()
            table.members = [m for m in table.members if m not in group]
            if table.id == table_id:
                table.members.extend(group)
            updated.append(table)
        self._tables = updated

    def remove_member(self, table_id: str, member: MemberRef) -> None:
        """Unseat the member's whole group from the table."""
        self._check_open()
        self._find(table_id)
        group = self._group_of(member)

        updated = []
        for table in self._tables:
            if table.id == table_id:
                table = table.copy()
                table.members = [m for m in table.members if m not in group]
            updated.append(table)
        self._tables = updated

    # -------- roster operations --------

    def add_guest(self, guest: Guest) -> None:
        self._check_open()
        self.roster = self.roster.with_guest(guest)

    def remove_guest(self, guest_id: str) -> None:
        """Drop a guest from the roster and from every table."""
        self._check_open()
        ref = GuestRef(guest_id)
        if not self.roster.contains(ref):
            raise MemberNotFoundError(member_to_wire(ref))

        updated = []
        for table in self._tables:
            table = table.copy()
            table.members = [m for m in table.members if m != ref]
            updated.append(table)
        self.roster = self.roster.without_guest(guest_id)
        self._tables = updated

    # -------- auto-assign --------

    def auto_assign(self) -> List[Table]:
        """Replace every table with a freshly computed assignment.

        Computed into a scratch list; on ``AutoAssignError`` the current tables
        are left exactly as they were.
        """
        self._check_open()
        result = auto_assign(self.roster, self.block_index)
        self._tables = result
        logger.info(f"Session for event {self.event_id} replaced by {len(result)} auto-assigned tables")
        return self.tables

    def mark_persisted(self) -> None:
        self.persisted = True

    # -------- helpers --------

    def _check_open(self) -> None:
        if self.persisted:
            raise SessionClosedError(f"Matching for event {self.event_id} is already saved")

    def _find(self, table_id: str) -> Table:
        for table in self._tables:
            if table.id == table_id:
                return table
        raise TableNotFoundError(table_id)

    def _group_of(self, member: MemberRef) -> List[MemberRef]:
        group = self.roster.co_members(member)
        if group is None:
            raise MemberNotFoundError(member_to_wire(member))
        return group

    def _known_members_only(self, table: Table) -> Table:
        """Copy of a saved table without members who have left the event."""
        table = table.copy()
        stale = [m for m in table.members if not self.roster.contains(m)]
        if stale:
            logger.warning(
                f"Dropping {len(stale)} members no longer in event {self.event_id} "
                f"from table {table.id}: {', '.join(member_to_wire(m) for m in stale)}"
            )
            table.members = [m for m in table.members if self.roster.contains(m)]
        return table

    @staticmethod
    def _with_field(table: Table, field: str, value: str) -> Table:
        table = table.copy()
        setattr(table, field, value)
        return table

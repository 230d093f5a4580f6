"""
Greedy table assignment.

Groups are placed one at a time, hardest first, into the table where the
five sub-scores (after placement) plus a fill bias come out highest. Tables
holding a group this group is blocked against are never candidates; if no
table qualifies the group goes to the emptiest table with room, or to a new
overflow table.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from app.matching.constraints import BlockIndex, blocked_group_pairs
from app.matching.errors import AutoAssignError
from app.matching.groups import extract_groups
from app.matching.models import EventRoster, Group, Table
from app.matching.scoring import (
    budget_match_score,
    gender_balance_score,
    mood_match_score,
    personality_score,
    verification_match_score,
)

logger = logging.getLogger(__name__)

TARGET_TABLE_SIZE = 5
MIN_TABLE_SIZE = 3
MAX_TABLE_SIZE = 8
SIZE_BALANCE_WEIGHT = 5


def new_table_id(prefix: str = "table") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def compute_table_count(total_people: int) -> int:
    """Number of tables to open for ``total_people`` attendees."""
    count = max(1, round(total_people / TARGET_TABLE_SIZE))

    while count * MAX_TABLE_SIZE < total_people:
        count += 1

    while count > 1 and total_people / count < MIN_TABLE_SIZE:
        count -= 1

    return count


@dataclass
class TableStats:
    """Running aggregates of a table under construction."""

    male: int = 0
    female: int = 0
    total: int = 0
    user_count: int = 0
    moods: List[str] = field(default_factory=list)
    budget_levels: List[int] = field(default_factory=list)
    personality_types: List[str] = field(default_factory=list)
    verified_count: int = 0
    assigned_group_keys: Set[str] = field(default_factory=set)

    def has_room_for(self, group: Group) -> bool:
        return self.total + group.size <= MAX_TABLE_SIZE

    def add(self, group: Group) -> None:
        self.male += group.male_count
        self.female += group.female_count
        self.total += group.size
        self.user_count += len(group.user_ids)
        self.moods.extend(group.moods)
        self.budget_levels.extend(group.budget_levels)
        self.personality_types.extend(group.personality_types)
        self.verified_count += group.verified_count
        self.assigned_group_keys.add(group.key)


def placement_score(stats: TableStats, group: Group) -> int:
    """Construction-time desirability of putting ``group`` at this table.

    This is the plain sum of the five sub-scores as they would be after
    placement, plus a bias toward emptier tables. It is not the display
    score: no averaging and no block veto (blocked tables are filtered out
    before scoring).
    """
    return (
        gender_balance_score(stats.male + group.male_count, stats.female + group.female_count)
        + mood_match_score(stats.moods + group.moods)
        + budget_match_score(stats.budget_levels + group.budget_levels)
        + personality_score(stats.personality_types + group.personality_types)
        + verification_match_score(
            stats.verified_count + group.verified_count,
            stats.user_count + len(group.user_ids),
        )
        + (MAX_TABLE_SIZE - stats.total) * SIZE_BALANCE_WEIGHT
    )


def sort_groups_for_placement(groups: List[Group]) -> List[Group]:
    """Largest groups first, then by gendered head count; otherwise stable."""
    return sorted(groups, key=lambda g: (-g.size, -(g.male_count + g.female_count)))


def _best_table(group: Group, stats: List[TableStats], blocked: Set[str]) -> Optional[int]:
    best_index = None
    best_score = None
    for index, table_stats in enumerate(stats):
        if not table_stats.has_room_for(group):
            continue
        if table_stats.assigned_group_keys & blocked:
            continue
        score = placement_score(table_stats, group)
        if best_score is None or score > best_score:
            best_score = score
            best_index = index
    return best_index


def _fallback_table(group: Group, stats: List[TableStats]) -> Optional[int]:
    fallback_index = None
    for index, table_stats in enumerate(stats):
        if not table_stats.has_room_for(group):
            continue
        if fallback_index is None or table_stats.total < stats[fallback_index].total:
            fallback_index = index
    return fallback_index


def auto_assign(roster: EventRoster, block_index: BlockIndex) -> List[Table]:
    """Build a fresh table set for every participant and guest of the roster.

    Returns only non-empty tables. Raises ``AutoAssignError`` if none remain.
    """
    groups = extract_groups(roster.participants, roster.guests)
    blocked_map: Dict[str, Set[str]] = blocked_group_pairs(groups, block_index)

    total_people = sum(group.size for group in groups)
    table_count = compute_table_count(total_people)

    tables = [Table(id=new_table_id("auto")) for _ in range(table_count)]
    stats = [TableStats() for _ in range(table_count)]
    overflow_count = 0

    for group in sort_groups_for_placement(groups):
        index = _best_table(group, stats, blocked_map[group.key])

        if index is None:
            index = _fallback_table(group, stats)
            if index is None:
                tables.append(Table(id=new_table_id("overflow")))
                stats.append(TableStats())
                index = len(tables) - 1
                overflow_count += 1
            logger.warning(
                f"No unblocked table for group {group.key} (size {group.size}); "
                f"placed at table {tables[index].id}"
            )

        tables[index].members.extend(group.members)
        stats[index].add(group)

    result = [table for table in tables if table.members]
    if not result:
        raise AutoAssignError("Auto-assignment produced no tables")

    logger.info(
        f"Auto-assigned {total_people} people in {len(groups)} groups "
        f"to {len(result)} tables ({overflow_count} overflow)"
    )
    return result

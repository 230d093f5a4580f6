"""
Hard constraints: block relations between users
"""

from typing import Dict, Iterable, List, Set, Tuple

from app.matching.models import BlockRelation, Group, MemberRef, UserRef


class BlockIndex:
    """Symmetric lookup over directional block relations.

    A block recorded by either side keeps both users apart, so every relation
    is stored in both directions.
    """

    def __init__(self, relations: Iterable[BlockRelation] = ()):
        self._pairs: Set[Tuple[str, str]] = set()
        self._relations: Set[Tuple[str, str]] = set()
        for relation in relations:
            self._relations.add((relation.reviewer_id, relation.target_user_id))
            self._pairs.add((relation.reviewer_id, relation.target_user_id))
            self._pairs.add((relation.target_user_id, relation.reviewer_id))

    def __len__(self) -> int:
        return len(self._relations)

    def has_block_relation(self, user_a: str, user_b: str) -> bool:
        return (user_a, user_b) in self._pairs

    def has_block_conflict_in_table(self, members: Iterable[MemberRef]) -> bool:
        """True if any two user members of the list block each other.

        Guests are skipped entirely.
        """
        user_ids = [m.id for m in members if isinstance(m, UserRef)]
        for i in range(len(user_ids)):
            for j in range(i + 1, len(user_ids)):
                if self.has_block_relation(user_ids[i], user_ids[j]):
                    return True
        return False

    def groups_conflict(self, group_a: Group, group_b: Group) -> bool:
        return any(
            self.has_block_relation(user_a, user_b)
            for user_a in group_a.user_ids
            for user_b in group_b.user_ids
        )


def blocked_group_pairs(groups: List[Group], block_index: BlockIndex) -> Dict[str, Set[str]]:
    """Map each group key to the keys of groups it may not share a table with."""
    blocked: Dict[str, Set[str]] = {group.key: set() for group in groups}
    for i in range(len(groups)):
        for j in range(i + 1, len(groups)):
            group_a, group_b = groups[i], groups[j]
            if block_index.groups_conflict(group_a, group_b):
                blocked[group_a.key].add(group_b.key)
                blocked[group_b.key].add(group_a.key)
    return blocked

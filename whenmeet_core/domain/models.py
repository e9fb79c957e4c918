# whenmeet_core/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Segment:
    """1日の中で「予定あり人数」が一定の最大連続区間"""
    day: int
    start_hour: int
    end_hour: int  # この時刻のコマを含む
    busy_count: int

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour + 1

    @property
    def end_hour_exclusive(self) -> int:
        return self.end_hour + 1


@dataclass(frozen=True)
class Recommendation:
    day: int
    day_name: str
    start_hour: int
    end_hour_exclusive: int
    duration_hours: int
    busy_count: int
    free_count: int
    total_participants: int
    message: str


@dataclass
class Group:
    group_id: str
    name: str
    creator: str
    members: List[str]                              # 招待したニックネーム（作成者を除く）
    created_at: str
    creator_id: Optional[int] = None
    accepted_members: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return dict(
            id=self.group_id,
            name=self.name,
            creator=self.creator,
            creatorId=self.creator_id,
            members=list(self.members),
            createdAt=self.created_at,
            acceptedMembers=list(self.accepted_members),
        )

    @classmethod
    def from_dict(cls, d: dict) -> "Group":
        creator = d["creator"]
        return cls(
            group_id=d["id"],
            name=d["name"],
            creator=creator,
            members=list(d.get("members") or []),
            created_at=d.get("createdAt") or "",
            creator_id=d.get("creatorId"),
            # 古いデータには acceptedMembers が無いので作成者のみとみなす
            accepted_members=list(d.get("acceptedMembers") or [creator]),
        )


@dataclass(frozen=True)
class GroupInvitation:
    group_id: str
    group_name: str
    creator: str
    members: List[str]
    created_at: str

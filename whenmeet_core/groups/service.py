# whenmeet_core/groups/service.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from whenmeet_core.config import DEFAULT_CONFIG, StorageConfig
from whenmeet_core.domain.grid import Grid
from whenmeet_core.domain.identity import nickname_to_id
from whenmeet_core.domain.models import Group, GroupInvitation
from whenmeet_core.io_layer.storage import KeyValueStore, ScheduleRepository
from whenmeet_core.logging import get_logger
from whenmeet_core.validation.validator import ValidationError, validate_required

log = get_logger(__name__)


class GroupService:
    """グループ作成・招待・参加の管理（比較ロジックは持たない）"""

    def __init__(self, store: KeyValueStore, cfg: StorageConfig = DEFAULT_CONFIG.storage):
        self.store = store
        self.group_prefix = cfg.group_key_prefix
        self.invitation_prefix = cfg.invitation_key_prefix

    def _group_key(self, group_id: str) -> str:
        return f"{self.group_prefix}{group_id}"

    def _invitation_key(self, nickname: str) -> str:
        return f"{self.invitation_prefix}{nickname}"

    def get_group(self, group_id: str) -> Optional[Group]:
        raw = self.store.get(self._group_key(group_id))
        return Group.from_dict(raw) if raw else None

    def _save_group(self, group: Group) -> None:
        self.store.set(self._group_key(group.group_id), group.to_dict())

    def _pending_ids(self, nickname: str) -> List[str]:
        return list(self.store.get(self._invitation_key(nickname)) or [])

    def create_group(
        self,
        name: str,
        creator: str,
        members: Sequence[str],
        group_id: Optional[str] = None,
    ) -> Group:
        validate_required({"name": name, "creator": creator})
        name = name.strip()
        creator = creator.strip()
        # 空欄・重複・作成者自身は除く
        invited = list(dict.fromkeys(m.strip() for m in members if m and m.strip() and m.strip() != creator))
        if not invited:
            raise ValidationError("グループには作成者以外のメンバーが1人以上必要です。")

        group = Group(
            group_id=group_id or uuid.uuid4().hex,
            name=name,
            creator=creator,
            members=invited,
            created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            creator_id=nickname_to_id(creator),
            accepted_members=[creator],  # 作成者は自動参加
        )
        self._save_group(group)

        for m in group.members:
            pending = self._pending_ids(m)
            if group.group_id not in pending:
                pending.append(group.group_id)
                self.store.set(self._invitation_key(m), pending)

        log.info("group_created", group_id=group.group_id, creator=creator, members=len(group.members))
        return group

    def list_groups(self, nickname: str) -> List[Group]:
        """参加済み（招待を受けた or 作成した）グループ"""
        validate_required({"nickname": nickname})
        out = []
        for key in self.store.keys(self.group_prefix):
            raw = self.store.get(key)
            if not raw:
                continue
            g = Group.from_dict(raw)
            if nickname in g.accepted_members:
                out.append(g)
        return out

    def list_invitations(self, nickname: str) -> List[GroupInvitation]:
        validate_required({"nickname": nickname})
        out = []
        for gid in self._pending_ids(nickname):
            g = self.get_group(gid)
            # 削除済みグループ・参加済みグループは除外
            if g is None or nickname in g.accepted_members:
                continue
            out.append(GroupInvitation(
                group_id=g.group_id,
                group_name=g.name,
                creator=g.creator,
                members=list(g.members),
                created_at=g.created_at,
            ))
        return out

    def respond(self, group_id: str, nickname: str, accept: bool) -> Optional[Group]:
        """招待を消し、accept なら参加者に加える。グループが無ければ None"""
        validate_required({"group_id": group_id, "nickname": nickname})

        pending = [gid for gid in self._pending_ids(nickname) if gid != group_id]
        self.store.set(self._invitation_key(nickname), pending)

        group = self.get_group(group_id)
        if group is None:
            log.warning("group_not_found", group_id=group_id, nickname=nickname)
            return None
        if accept and nickname not in group.accepted_members:
            group.accepted_members.append(nickname)
            self._save_group(group)
        log.info("invitation_answered", group_id=group_id, nickname=nickname, accept=accept)
        return group


def load_member_grids(
    group: Group,
    schedules: ScheduleRepository,
    missing_as_empty: bool = True,
) -> Tuple[List[str], List[Grid]]:
    """
    作成者→メンバーの順に Grid を読む。
    未保存のメンバーは missing_as_empty のときだけ空グリッドとして含める。
    """
    names: List[str] = []
    grids: List[Grid] = []
    for nickname in [group.creator] + list(group.members):
        g = schedules.load_schedule(nickname_to_id(nickname))
        if g is None:
            if not missing_as_empty:
                log.info("member_schedule_missing", group_id=group.group_id, nickname=nickname)
                continue
            g = Grid.empty()
        names.append(nickname)
        grids.append(g)
    return names, grids

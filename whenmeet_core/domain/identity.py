# whenmeet_core/domain/identity.py
"""
ニックネーム → 数値ID の変換。

保存キーを引くための便宜的なハッシュであり、認証ではない。
暗号学的な強度はなく、別のニックネームが同じIDになることもあり得る（許容）。
"""
from __future__ import annotations

from typing import List

from whenmeet_core.validation.validator import validate_required


def _to_int32(v: int) -> int:
    v &= 0xFFFFFFFF
    return v - 0x100000000 if v >= 0x80000000 else v


def _utf16_units(s: str) -> List[int]:
    raw = s.encode("utf-16-le")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def nickname_to_id(nickname: str) -> int:
    """
    31倍ローリングハッシュ（UTF-16コード単位）。左シフトのみ32bitで折り返し、
    最後に絶対値を取る。既存の保存データのキーと一致させるためこの計算順を保つ。
    """
    validate_required({"nickname": nickname})
    acc = 0
    for unit in _utf16_units(nickname):
        acc = _to_int32(_to_int32(acc) << 5) - acc + unit
    return abs(acc)

"""顧客の契約ステータス判定"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from core.models import Customer

DEFAULT_ATTENTION_DAYS = 365
DEFAULT_OVERDUE_DAYS = 730


class ContractStatus(Enum):
    """一覧に表示する 3 段階ステータス。値は (キー, ラベル, アイコン)。"""
    ACTIVE = ('active', '契約中', '●')
    ATTENTION = ('attention', '要対応', '■')
    OVERDUE = ('overdue', '滞納注意', '▲')

    @property
    def key(self) -> str:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @property
    def icon(self) -> str:
        return self.value[2]


def compute_status(
    customer: Customer,
    *,
    now: datetime | None = None,
    attention_days: int = DEFAULT_ATTENTION_DAYS,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
) -> ContractStatus:
    """顧客の表示ステータスを判定する。

    - 非アクティブ契約 → ATTENTION（ACTIVE にはならない）
    - 最終更新が overdue_days より前 → OVERDUE
    - 最終更新が attention_days より前 → ATTENTION
    - それ以外 → ACTIVE
    """
    if attention_days > overdue_days:
        raise ValueError('attention_days は overdue_days 以下にしてください')
    if not customer.is_active:
        return ContractStatus.ATTENTION

    now = now or datetime.now()
    age = now - customer.updated_at
    if age > timedelta(days=overdue_days):
        return ContractStatus.OVERDUE
    if age > timedelta(days=attention_days):
        return ContractStatus.ATTENTION
    return ContractStatus.ACTIVE


def status_thresholds(config: dict) -> dict[str, int]:
    """config の status セクションから compute_status の引数を作る。"""
    section = config.get('status', {})
    return {
        'attention_days': int(section.get('attention_days', DEFAULT_ATTENTION_DAYS)),
        'overdue_days': int(section.get('overdue_days', DEFAULT_OVERDUE_DAYS)),
    }

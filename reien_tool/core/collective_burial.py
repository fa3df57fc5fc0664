"""合祀の収容人数制限と残数判定

合祀堂全体・区画ごと・申込ごとの上限人数を管理し、
新しい申込を受け付けたときの使用率ステータスを判定する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class CollectiveBurialLimits:
    """合祀の上限設定。閾値は % で指定する。"""
    max_persons_per_application: int = 10
    max_persons_per_plot: int = 50
    max_total_capacity: int = 500
    warning_threshold: int = 80
    critical_threshold: int = 95

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> CollectiveBurialLimits:
        section = config.get('collective_burial', {})
        defaults = cls()
        return cls(**{
            name: int(section.get(name, getattr(defaults, name)))
            for name in cls.__dataclass_fields__
        })


DEFAULT_LIMITS = CollectiveBurialLimits()


class CapacityStatus(str, Enum):
    SAFE = 'safe'
    WARNING = 'warning'
    CRITICAL = 'critical'
    FULL = 'full'


def capacity_status(
    current: int, maximum: int, limits: CollectiveBurialLimits = DEFAULT_LIMITS,
) -> CapacityStatus:
    """使用人数と上限から使用率ステータスを判定する。"""
    if maximum <= 0 or current >= maximum:
        return CapacityStatus.FULL
    percentage = current / maximum * 100
    if percentage >= limits.critical_threshold:
        return CapacityStatus.CRITICAL
    if percentage >= limits.warning_threshold:
        return CapacityStatus.WARNING
    return CapacityStatus.SAFE


def remaining_capacity(current: int, maximum: int) -> int:
    """残り受入可能人数（0 未満にはならない）。"""
    return max(0, maximum - current)


def capacity_percentage(current: int, maximum: int) -> int:
    """使用率（%）。100 を上限に四捨五入する。"""
    if maximum <= 0:
        return 100
    return min(100, int(current / maximum * 100 + 0.5))


@dataclass(slots=True)
class CapacityCheck:
    """合祀申込の受入チェック結果。"""
    status: CapacityStatus
    remaining: int
    percentage: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def check_application(
    current_total: int,
    new_persons: int,
    *,
    plot_total: int = 0,
    limits: CollectiveBurialLimits = DEFAULT_LIMITS,
) -> CapacityCheck:
    """新しい合祀申込（new_persons 名）を受け入れた後の状態を判定する。

    Args:
        current_total: 合祀堂の現在の合祀人数
        new_persons: 今回の申込の故人数
        plot_total: 対象区画の累計合祀人数
        limits: 上限設定
    """
    future_total = current_total + new_persons
    maximum = limits.max_total_capacity
    result = CapacityCheck(
        status=capacity_status(future_total, maximum, limits),
        remaining=remaining_capacity(future_total, maximum),
        percentage=capacity_percentage(future_total, maximum),
    )

    if new_persons < 1:
        result.errors.append('合祀対象者を1名以上登録してください')
    if new_persons > limits.max_persons_per_application:
        result.errors.append(
            f'1つの申込で登録できる故人数は{limits.max_persons_per_application}名までです'
            f'（現在: {new_persons}名）'
        )
    if plot_total + new_persons > limits.max_persons_per_plot:
        result.errors.append(
            f'1区画あたりの合祀人数は{limits.max_persons_per_plot}名までです'
            f'（申込後: {plot_total + new_persons}名）'
        )
    if future_total > maximum:
        result.errors.append(
            f'合祀堂の収容上限（{maximum}名）を超えます（申込後: {future_total}名）'
        )
    elif result.status is CapacityStatus.FULL:
        result.warnings.append('この申込で合祀堂が満杯になります')
    elif result.status is CapacityStatus.CRITICAL:
        result.warnings.append(
            f'合祀堂の使用率が{limits.critical_threshold}%を超えます（残り{result.remaining}名）'
        )
    elif result.status is CapacityStatus.WARNING:
        result.warnings.append(
            f'合祀堂の使用率が{limits.warning_threshold}%を超えます（残り{result.remaining}名）'
        )
    return result

"""区画管理ユーティリティ — 面積・価格・割当チェック・表示整形"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from core.models import PlotUsage

PLOT_SIZE_FULL = 3.6   # 1区画 = 3.6㎡
PLOT_SIZE_HALF = 1.8   # 半区画 = 1.8㎡

# 種別ごとの㎡単価（円）
UNIT_PRICES: dict[str, int] = {
    'grave_site': 150000,    # 墓地区画
    'columbarium': 200000,   # 納骨堂
    'ossuary': 100000,       # 合葬墓
    'other': 100000,
}

MIN_CAPACITY = 1
MAX_CAPACITY = 50
AREA_WARNING_SQM = 100


@dataclass(slots=True)
class OwnedPlot:
    """顧客が所有する区画。"""
    plot_number: str
    size_type: str = 'full'   # 'full' | 'half'
    area_sqm: float = PLOT_SIZE_FULL
    plot_period: str = ''
    section: str = ''
    purchase_date: date | None = None
    price: int | None = None
    status: PlotUsage = PlotUsage.IN_USE


@dataclass(slots=True)
class OwnedPlotsInfo:
    total_area_sqm: float
    plot_count: int
    plot_numbers: list[str]
    display_text: str


@dataclass(slots=True)
class PlotUnit:
    """在庫上の区画ユニット。"""
    plot_number: str
    section: str = ''
    unit_type: str = 'grave_site'
    area_sqm: float | None = None
    base_capacity: int = 1
    allow_goushi: bool = True
    base_price: int | None = None
    current_status: PlotUsage = PlotUsage.AVAILABLE


@dataclass(slots=True)
class PlotAssignment:
    """顧客への区画割当（既存区画 or 新規ユニット）。"""
    plot_number: str = ''
    draft_unit: PlotUnit | None = None
    effective_capacity: int | None = None
    allow_goushi: bool | None = None
    price: int | None = None


@dataclass(slots=True)
class PlotValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def owned_plots_info(plots: Sequence[OwnedPlot] | None) -> OwnedPlotsInfo:
    """所有区画を集計する。表示例: "3.6㎡（C-29／C-30）"。"""
    if not plots:
        return OwnedPlotsInfo(0, 0, [], '-')
    total = round(sum(p.area_sqm for p in plots), 2)
    numbers = [p.plot_number for p in plots]
    area_text = f'{total:g}㎡'
    return OwnedPlotsInfo(
        total_area_sqm=total,
        plot_count=len(plots),
        plot_numbers=numbers,
        display_text=f'{area_text}（{"／".join(numbers)}）',
    )


def plot_area(size_type: str) -> float:
    """区画サイズ種別（'full' / 'half'）の面積。"""
    return PLOT_SIZE_FULL if size_type == 'full' else PLOT_SIZE_HALF


def effective_capacity(base_capacity: int, capacity_override: int | None = None) -> int:
    """上書き指定があればそれを、なければ基本収容人数を返す。"""
    return base_capacity if capacity_override is None else capacity_override


def suggested_price(area_sqm: float | None, unit_type: str) -> int | None:
    """面積 × 種別単価の提案価格。面積未指定なら None。"""
    if not area_sqm:
        return None
    unit_price = UNIT_PRICES.get(unit_type, UNIT_PRICES['other'])
    return int(area_sqm * unit_price + 0.5)


def validate_plot_assignment(
    assignment: PlotAssignment,
    existing_units: Iterable[PlotUnit] | None = None,
) -> PlotValidation:
    """区画割当の業務ルールを検証する。"""
    errors: list[str] = []
    warnings: list[str] = []

    if not assignment.plot_number and assignment.draft_unit is None:
        errors.append('既存区画の選択または新規区画の情報が必要です')

    capacity = assignment.effective_capacity
    if capacity is not None:
        if capacity < MIN_CAPACITY:
            errors.append(f'収容人数は{MIN_CAPACITY}人以上である必要があります')
        if capacity > MAX_CAPACITY:
            errors.append(f'収容人数は{MAX_CAPACITY}人以下である必要があります')

    if assignment.allow_goushi is False and (capacity or 0) > 1:
        warnings.append(
            '合祀不可に設定されていますが、収容人数が2人以上になっています。'
            '将来的に複数名の埋葬が必要な場合は、合祀可に変更してください。'
        )

    if assignment.price is not None and assignment.price < 0:
        errors.append('価格は0以上である必要があります')

    draft = assignment.draft_unit
    if draft is not None and draft.area_sqm is not None:
        if draft.area_sqm <= 0:
            errors.append('面積は正の数値である必要があります')
        if draft.area_sqm > AREA_WARNING_SQM:
            warnings.append(f'面積が{AREA_WARNING_SQM}㎡を超えています。正しい値かご確認ください。')

    if assignment.plot_number and existing_units is not None:
        unit = next((u for u in existing_units if u.plot_number == assignment.plot_number), None)
        if unit is not None:
            if unit.current_status == PlotUsage.IN_USE:
                warnings.append(
                    f'区画 {assignment.plot_number} は既に使用中です。'
                    '重複して割り当てる場合は、共同使用であることをご確認ください。'
                )
            elif unit.current_status == PlotUsage.RESERVED:
                warnings.append(
                    f'区画 {assignment.plot_number} は既に予約済みです。'
                    '別の顧客が予約している可能性があります。'
                )

    return PlotValidation(is_valid=not errors, errors=errors, warnings=warnings)


def validate_plot_assignments(assignments: Sequence[PlotAssignment]) -> PlotValidation:
    """複数割当の重複チェック + 個別チェック。メッセージには「区画N:」を付ける。"""
    errors: list[str] = []
    warnings: list[str] = []

    counts = Counter(a.plot_number for a in assignments if a.plot_number)
    duplicates = [num for num, n in counts.items() if n > 1]
    if duplicates:
        errors.append(f'同一の区画が複数回選択されています: {", ".join(duplicates)}')

    for i, assignment in enumerate(assignments, 1):
        result = validate_plot_assignment(assignment)
        errors.extend(f'区画{i}: {e}' for e in result.errors)
        warnings.extend(f'区画{i}: {w}' for w in result.warnings)

    return PlotValidation(is_valid=not errors, errors=errors, warnings=warnings)


def format_plot_number(section: str, number: str) -> str:
    """区画番号の表示形式（例: "東区-A-56"）。"""
    return f'{section}-{number}'


def format_price(price: int | None) -> str:
    """価格を「¥1,500,000」形式にする。None は「未設定」。"""
    if price is None:
        return '未設定'
    sign = '-' if price < 0 else ''
    return f'{sign}¥{abs(int(price)):,}'

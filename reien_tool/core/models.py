"""顧客台帳のデータ型 — Customer / CustomerDraft / CustomerPatch"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum

STATUS_ACTIVE = 'active'
STATUS_INACTIVE = 'inactive'
_STATUSES = frozenset({STATUS_ACTIVE, STATUS_INACTIVE})


class CustomerValidationError(ValueError):
    """顧客データの入力値が不正（必須項目の空欄・顧客コード重複など）。"""


class PlotUsage(str, Enum):
    """区画の利用状況。"""
    IN_USE = 'in_use'
    AVAILABLE = 'available'
    RESERVED = 'reserved'


@dataclass(slots=True)
class PlotInfo:
    """顧客に紐付く墓地区画。"""
    plot_number: str = ''
    section: str = ''
    usage: PlotUsage = PlotUsage.AVAILABLE
    size: str = ''
    price: int | None = None
    contract_date: date | None = None


@dataclass(slots=True)
class FeeInfo:
    """使用料・管理料の請求情報。"""
    amount: int | None = None
    unit_price: int | None = None
    billing_years: int | None = None


@dataclass(slots=True)
class CustomerDraft:
    """新規登録用の入力（id・タイムスタンプなし）。"""
    customer_code: str
    name: str
    name_kana: str
    phone_number: str = ''
    address: str = ''
    email: str = ''
    fax_number: str = ''
    postal_code: str = ''
    plot_period: str = ''
    plot_number: str = ''
    section: str = ''
    plot_info: PlotInfo | None = None
    usage_fee: FeeInfo | None = None
    management_fee: FeeInfo | None = None
    status: str = STATUS_ACTIVE

    def validate(self) -> None:
        """必須項目とステータス値を検証する。不正なら CustomerValidationError。"""
        _require_text('customer_code', self.customer_code)
        _require_text('name', self.name)
        _require_text('name_kana', self.name_kana)
        _check_status(self.status)


@dataclass(slots=True)
class Customer:
    """顧客台帳の 1 レコード。"""
    id: str
    customer_code: str
    name: str
    name_kana: str
    created_at: datetime
    updated_at: datetime
    phone_number: str = ''
    address: str = ''
    email: str = ''
    fax_number: str = ''
    postal_code: str = ''
    plot_period: str = ''
    plot_number: str = ''
    section: str = ''
    plot_info: PlotInfo | None = None
    usage_fee: FeeInfo | None = None
    management_fee: FeeInfo | None = None
    status: str = STATUS_ACTIVE

    @classmethod
    def from_draft(
        cls, draft: CustomerDraft, *, customer_id: str, now: datetime,
    ) -> Customer:
        values = {f.name: getattr(draft, f.name) for f in fields(draft)}
        return cls(id=customer_id, created_at=now, updated_at=now, **values)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass(slots=True)
class CustomerPatch:
    """部分更新。None のフィールドは変更しない。

    文字列項目を空にしたい場合は '' を指定する。
    """
    customer_code: str | None = None
    name: str | None = None
    name_kana: str | None = None
    phone_number: str | None = None
    address: str | None = None
    email: str | None = None
    fax_number: str | None = None
    postal_code: str | None = None
    plot_period: str | None = None
    plot_number: str | None = None
    section: str | None = None
    plot_info: PlotInfo | None = None
    usage_fee: FeeInfo | None = None
    management_fee: FeeInfo | None = None
    status: str | None = None
    _cleared: frozenset[str] = field(default=frozenset(), repr=False)

    @classmethod
    def clearing(cls, *names: str, **values) -> CustomerPatch:
        """plot_info などの入れ子項目を None に戻すパッチを作る。"""
        allowed = {'plot_info', 'usage_fee', 'management_fee'}
        unknown = set(names) - allowed
        if unknown:
            raise CustomerValidationError(f'クリアできない項目です: {sorted(unknown)}')
        return cls(_cleared=frozenset(names), **values)

    def changes(self) -> dict[str, object]:
        """適用される変更を {項目名: 値} で返す。"""
        out = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if not f.name.startswith('_') and getattr(self, f.name) is not None
        }
        for name in self._cleared:
            out[name] = None
        return out

    def validate(self) -> None:
        """必須項目を空にする変更・不正なステータスを拒否する。"""
        for name in ('customer_code', 'name', 'name_kana'):
            value = getattr(self, name)
            if value is not None:
                _require_text(name, value)
        if self.status is not None:
            _check_status(self.status)

    def apply_to(self, customer: Customer) -> None:
        """変更を customer に上書きする（in-place）。"""
        for name, value in self.changes().items():
            setattr(customer, name, value)


def _require_text(name: str, value) -> None:
    if not isinstance(value, str) or not value.strip():
        raise CustomerValidationError(f'{name} は必須です')


def _check_status(status: str) -> None:
    if status not in _STATUSES:
        raise CustomerValidationError(f'status が不正です: {status!r}')


# ── 検索ヘルパー（ストアに依存しない純粋関数） ─────────────────────────────────

_SEARCH_FIELDS = ('name', 'name_kana', 'customer_code', 'phone_number', 'address')


def search_customers(customers: Iterable[Customer], query: str) -> list[Customer]:
    """氏名・ふりがな・顧客コード・電話番号・住所の部分一致で検索する。

    大文字小文字は区別しない。空白のみのクエリは全件を返す。
    """
    items = list(customers)
    if not query or not query.strip():
        return items
    q = query.lower()
    return [
        c for c in items
        if any(q in (getattr(c, name) or '').lower() for name in _SEARCH_FIELDS)
    ]


def filter_by_usage(customers: Iterable[Customer], usage: PlotUsage | str) -> list[Customer]:
    """区画の利用状況で絞り込む。区画情報のない顧客は含めない。"""
    try:
        tag = PlotUsage(usage)
    except ValueError:
        return []
    return [c for c in customers if c.plot_info is not None and c.plot_info.usage == tag]

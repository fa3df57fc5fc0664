"""顧客リポジトリ — 一覧・検索・登録・更新・削除

画面側はこのインターフェースだけに依存する。メモリ上の実装を差し替えれば
別の永続化層に移行できる。
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from core.models import (
    Customer,
    CustomerDraft,
    CustomerPatch,
    CustomerValidationError,
    PlotUsage,
    filter_by_usage,
    search_customers,
)

logger = logging.getLogger(__name__)


class CustomerRepository(ABC):
    """顧客データの取得・変更インターフェース。"""

    @abstractmethod
    def list(self) -> list[Customer]:
        """全件を登録順で返す。"""

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """id で 1 件取得する。なければ None。"""

    @abstractmethod
    def get_by_code(self, customer_code: str) -> Customer | None:
        """顧客コードで 1 件取得する。なければ None。"""

    @abstractmethod
    def create(self, draft: CustomerDraft) -> Customer:
        """新規登録して登録済みレコードを返す。"""

    @abstractmethod
    def update(self, customer_id: str, patch: CustomerPatch) -> Customer | None:
        """部分更新して更新後レコードを返す。対象がなければ None。"""

    @abstractmethod
    def delete(self, customer_id: str) -> bool:
        """削除できたら True。"""

    def search(self, query: str) -> list[Customer]:
        return search_customers(self.list(), query)

    def get_by_usage(self, usage: PlotUsage | str) -> list[Customer]:
        return filter_by_usage(self.list(), usage)

    def __len__(self) -> int:
        return len(self.list())


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryCustomerRepository(CustomerRepository):
    """リスト 1 本で保持するリポジトリ（デモ・テスト・一括処理用）。"""

    def __init__(
        self,
        customers: Iterable[Customer] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._customers: list[Customer] = list(customers or [])
        self._clock = clock or datetime.now
        self._id_factory = id_factory or _new_id

    # ── 参照 ────────────────────────────────────────────────────────────────

    def list(self) -> list[Customer]:
        return list(self._customers)

    def get_by_id(self, customer_id: str) -> Customer | None:
        return next((c for c in self._customers if c.id == customer_id), None)

    def get_by_code(self, customer_code: str) -> Customer | None:
        return next(
            (c for c in self._customers if c.customer_code == customer_code), None,
        )

    def __len__(self) -> int:
        return len(self._customers)

    # ── 変更 ────────────────────────────────────────────────────────────────

    def create(self, draft: CustomerDraft) -> Customer:
        draft.validate()
        if self.get_by_code(draft.customer_code) is not None:
            raise CustomerValidationError(
                f'顧客コードが重複しています: {draft.customer_code}',
            )
        customer_id = self._id_factory()
        while self.get_by_id(customer_id) is not None:
            customer_id = self._id_factory()
        customer = Customer.from_draft(draft, customer_id=customer_id, now=self._clock())
        self._customers.append(customer)
        logger.debug('顧客を登録しました: %s (%s)', customer.customer_code, customer.id)
        return customer

    def update(self, customer_id: str, patch: CustomerPatch) -> Customer | None:
        patch.validate()
        customer = self.get_by_id(customer_id)
        if customer is None:
            return None
        if patch.customer_code is not None and patch.customer_code != customer.customer_code:
            if self.get_by_code(patch.customer_code) is not None:
                raise CustomerValidationError(
                    f'顧客コードが重複しています: {patch.customer_code}',
                )
        patch.apply_to(customer)
        # updated_at は単調増加
        now = self._clock()
        if now <= customer.updated_at:
            now = customer.updated_at + timedelta(microseconds=1)
        customer.updated_at = now
        logger.debug('顧客を更新しました: %s', customer_id)
        return customer

    def delete(self, customer_id: str) -> bool:
        before = len(self._customers)
        self._customers = [c for c in self._customers if c.id != customer_id]
        removed = len(self._customers) != before
        if removed:
            logger.debug('顧客を削除しました: %s', customer_id)
        return removed

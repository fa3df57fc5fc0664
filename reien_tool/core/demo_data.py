"""デモ用の顧客データ"""

from __future__ import annotations

from datetime import datetime

from core.models import Customer, FeeInfo, PlotInfo, PlotUsage
from core.repository import InMemoryCustomerRepository


def demo_customers() -> list[Customer]:
    """デモ顧客を毎回新しいオブジェクトで返す。"""
    return [
        Customer(
            id='DEMO001',
            customer_code='A-001',
            name='田中 太郎',
            name_kana='たなか たろう',
            phone_number='090-1234-5678',
            fax_number='093-561-2345',
            email='tanaka.taro@example.com',
            postal_code='803-0841',
            address='福岡県北九州市小倉北区清水2-12-15',
            plot_period='1期',
            section='A',
            plot_number='A-001',
            plot_info=PlotInfo(plot_number='A-001', section='A', usage=PlotUsage.IN_USE,
                               size='4㎡', price=300000),
            usage_fee=FeeInfo(amount=300000, unit_price=75000, billing_years=1),
            management_fee=FeeInfo(amount=12000, unit_price=3000, billing_years=1),
            created_at=datetime(2024, 1, 15, 9, 0),
            updated_at=datetime(2024, 4, 1, 9, 0),
        ),
        Customer(
            id='DEMO002',
            customer_code='B-012',
            name='佐藤 花子',
            name_kana='さとう はなこ',
            phone_number='080-2345-6789',
            postal_code='802-0001',
            address='福岡県北九州市小倉北区浅野1-1-1',
            plot_period='2期',
            section='3',
            plot_number='B-012',
            plot_info=PlotInfo(plot_number='B-012', section='3', usage=PlotUsage.RESERVED),
            created_at=datetime(2023, 6, 1, 10, 0),
            updated_at=datetime(2023, 6, 1, 10, 0),
        ),
        Customer(
            id='DEMO003',
            customer_code='C-033',
            name='鈴木 一郎',
            name_kana='すずき いちろう',
            phone_number='070-3456-7890',
            address='福岡県北九州市八幡西区黒崎3-3-3',
            status='inactive',
            created_at=datetime(2021, 3, 10, 11, 0),
            updated_at=datetime(2022, 3, 10, 11, 0),
        ),
    ]


def demo_repository() -> InMemoryCustomerRepository:
    """デモ顧客を入れたリポジトリを返す。"""
    return InMemoryCustomerRepository(demo_customers())

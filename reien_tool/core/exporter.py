"""顧客一覧の CSV/Excel エクスポート"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from core.models import Customer
from core.status import compute_status
from utils.wareki import format_plain_date

EXPORT_COLUMNS = [
    '顧客コード', '氏名', 'ふりがな', '電話番号', '住所',
    '区域', '許可番号', '利用状況', 'ステータス', '登録日', '更新日',
]

_USAGE_DISPLAY = {
    'in_use': '使用中',
    'available': '空き',
    'reserved': '予約済',
}


def customers_to_dataframe(
    customers: Iterable[Customer],
    *,
    now: datetime | None = None,
    attention_days: int = 365,
    overdue_days: int = 730,
) -> pd.DataFrame:
    """顧客レコードを一覧表示・出力用の DataFrame にする（並び順は入力順）。"""
    rows = []
    for c in customers:
        status = compute_status(
            c, now=now, attention_days=attention_days, overdue_days=overdue_days,
        )
        usage = c.plot_info.usage.value if c.plot_info is not None else ''
        rows.append({
            '顧客コード': c.customer_code,
            '氏名': c.name,
            'ふりがな': c.name_kana,
            '電話番号': c.phone_number,
            '住所': c.address,
            '区域': c.section,
            '許可番号': c.plot_number,
            '利用状況': _USAGE_DISPLAY.get(usage, ''),
            'ステータス': status.label,
            '登録日': format_plain_date(c.created_at),
            '更新日': format_plain_date(c.updated_at),
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(
    df: pd.DataFrame, filepath: str, *, encoding: str = 'utf-8-sig',
) -> None:
    """DataFrame を CSV ファイルに書き出す。

    デフォルトは UTF-8 with BOM（Excel で開いた時に文字化けしない）。
    """
    df.to_csv(filepath, index=False, encoding=encoding)


def export_excel(df: pd.DataFrame, filepath: str) -> None:
    """DataFrame を Excel ファイルに書き出す。"""
    df.to_excel(filepath, index=False, engine='openpyxl')

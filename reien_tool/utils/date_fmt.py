"""日付値の解析ユーティリティ"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

import pandas as pd

_YMD_RE = re.compile(r'\s*(\d{4})[-/](\d{1,2})[-/](\d{1,2})(?:[ T].*)?\s*$')
_SERIAL_RE = re.compile(r'\d{5}(?:\.\d+)?$')
_YEAR_RE = re.compile(r'(?<!\d)\d{4}(?!\d)')
_DIGIT_GROUPS_RE = re.compile(r'\d+')

# Excel シリアル値の基準日（1900 年うるう年バグ込み）
_EXCEL_EPOCH = datetime(1899, 12, 30)


def parse_date(value) -> date | None:
    """日付・日時・日付文字列を ``date`` に変換する。変換不能なら None。

    対応形式:
        - date / datetime / pandas.Timestamp（各フィールドをそのまま使う）
        - "2019-05-01" / "2019/5/1" / "2019-05-01 10:00:00"
        - Excel シリアル値 ("43586" / "43586.0"、5 桁のみ)
        - 西暦 4 桁と月日を含み pandas.to_datetime が解釈できる文字列
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        # pd.Timestamp も datetime のサブクラス
        if pd.isna(value):
            return None
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    m = _YMD_RE.match(s)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None

    # シリアル値は 5 桁（1927-05-18 〜 2173-10-14）のみ。'2019' などは年とみなさない
    if _SERIAL_RE.match(s):
        return (_EXCEL_EPOCH + timedelta(days=int(float(s)))).date()

    # 西暦 4 桁と日を含む文字列だけ pandas に任せる（'now' / '10:00' は不可）
    if not _YEAR_RE.search(s) or len(_DIGIT_GROUPS_RE.findall(s)) < 2:
        return None
    ts = pd.to_datetime(s, errors='coerce')
    if ts is None or pd.isna(ts):
        return None
    return date(ts.year, ts.month, ts.day)

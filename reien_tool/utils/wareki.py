"""西暦 → 和暦の日付表示ユーティリティ"""

from __future__ import annotations

from datetime import date

from utils.date_fmt import parse_date

# 元号テーブル（新しい順）。昭和以前は扱わない。
_GENGO = [
    ('令和', 2019, 5, 1),   # 2019-05-01 〜
    ('平成', 1989, 1, 8),   # 1989-01-08 〜 2019-04-30
]


def format_plain_date(value: date | None) -> str:
    """日付を「YYYY/MM/DD」形式で返す。None は空文字。

    Examples:
        >>> format_plain_date(date(2023, 1, 5))
        '2023/01/05'
    """
    if value is None:
        return ''
    return f'{value.year:04d}/{value.month:02d}/{value.day:02d}'


def era_of(value: date, *, exact: bool = False) -> tuple[str, int] | None:
    """日付の (元号, 元号年) を返す。該当元号がなければ None。

    既定では西暦年だけで判定し、改元年は 1 月 1 日から新元号とみなす。
    ``exact=True`` のときは改元日（平成 1989-01-08 / 令和 2019-05-01）で判定する。

    Examples:
        >>> era_of(date(2019, 1, 1))
        ('令和', 1)
        >>> era_of(date(2019, 4, 30), exact=True)
        ('平成', 31)
    """
    for gengo, g_year, g_month, g_day in _GENGO:
        if exact:
            matched = (value.year, value.month, value.day) >= (g_year, g_month, g_day)
        else:
            matched = value.year >= g_year
        if matched:
            return gengo, value.year - g_year + 1
    return None


def format_era_date(value, *, exact: bool = False) -> str:
    """日付を「令和1年 5月1日」形式で返す。

    月日はゼロ埋めしない。None・空文字・解析できない文字列は空文字を返す。
    元号に該当しない日付（1989 年より前）は元号部分を空にした
    「年 12月31日」を返す。

    Examples:
        >>> format_era_date(date(2019, 5, 1))
        '令和1年 5月1日'
        >>> format_era_date('1998-06-10')
        '平成10年 6月10日'
        >>> format_era_date(date(1988, 12, 31))
        '年 12月31日'
    """
    d = parse_date(value)
    if d is None:
        return ''
    era = era_of(d, exact=exact)
    label = f'{era[0]}{era[1]}' if era else ''
    return f'{label}年 {d.month}月{d.day}日'

"""ふりがなの五十音行判定・あいう順フィルタ・かな順ソート

一覧画面の「あ か さ た な …」タブと、ふりがな順の並べ替えに使う。
いずれの関数も例外を送出しない（判定不能は「その他」扱い）。
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

T = TypeVar('T')


class GojuonRow(Enum):
    """五十音の行。値はタブに表示する代表文字。"""
    A = 'あ'
    KA = 'か'
    SA = 'さ'
    TA = 'た'
    NA = 'な'
    HA = 'は'
    MA = 'ま'
    YA = 'や'
    RA = 'ら'
    WA = 'わ'


# 行ごとのひらがなコードポイント範囲（両端含む）。小書き・濁音・半濁音を含む。
_ROW_BANDS: list[tuple[GojuonRow, str, str]] = [
    (GojuonRow.A,  'ぁ', 'お'),
    (GojuonRow.KA, 'か', 'ご'),
    (GojuonRow.SA, 'さ', 'ぞ'),
    (GojuonRow.TA, 'た', 'ど'),
    (GojuonRow.NA, 'な', 'の'),
    (GojuonRow.HA, 'は', 'ぽ'),
    (GojuonRow.MA, 'ま', 'も'),
    (GojuonRow.YA, 'ゃ', 'よ'),
    (GojuonRow.RA, 'ら', 'ろ'),
    (GojuonRow.WA, 'ゎ', 'ん'),
]

ALL_KEY = '全'
OTHER_KEY = 'その他'


def row_of(kana: str) -> GojuonRow | None:
    """先頭文字が属する五十音行を返す。どの行にも属さなければ None。

    Examples:
        >>> row_of('だいち')
        <GojuonRow.TA: 'た'>
        >>> row_of('アイ') is None
        True
    """
    if not kana or not isinstance(kana, str):
        return None
    ch = kana[0]
    for row, lo, hi in _ROW_BANDS:
        if lo <= ch <= hi:
            return row
    return None


# ── 行フィルタ ───────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class AllRows:
    """絞り込みなし。"""


@dataclass(frozen=True, slots=True)
class SpecificRow:
    """指定行のみ。"""
    row: GojuonRow


@dataclass(frozen=True, slots=True)
class Unclassified:
    """どの行にも属さない（「その他」タブ）。"""


RowFilter = AllRows | SpecificRow | Unclassified

_ROW_BY_KEY: dict[str, GojuonRow] = {row.value: row for row in GojuonRow}


def parse_row_filter(key: str) -> RowFilter:
    """タブのキー文字列をフィルタに変換する。

    '全' と未知のキーは AllRows（絞り込みなし）になる。
    """
    if key in _ROW_BY_KEY:
        return SpecificRow(_ROW_BY_KEY[key])
    if key == OTHER_KEY:
        return Unclassified()
    return AllRows()


def filter_by_row(customers: Iterable[T], key: str | RowFilter) -> list[T]:
    """ふりがな先頭文字の行で絞り込んだ新しいリストを返す。"""
    flt = key if isinstance(key, (AllRows, SpecificRow, Unclassified)) else parse_row_filter(key)
    items = list(customers)
    match flt:
        case SpecificRow(row=row):
            return [c for c in items if row_of(c.name_kana) is row]
        case Unclassified():
            # 空のふりがなは「その他」にも含めない
            return [c for c in items if c.name_kana and row_of(c.name_kana) is None]
        case _:
            return items


# ── かな順ソート ─────────────────────────────────────────────────────────────

_KATA2HIRA_TABLE = str.maketrans({chr(i): chr(i - 0x60) for i in range(0x30A1, 0x30F7)})  # ァ-ヶ
_SMALL2LARGE = str.maketrans('ぁぃぅぇぉっゃゅょゎゕゖ', 'あいうえおつやゆよわかけ')
_SMALL_KANA = frozenset('ぁぃぅぇぉっゃゅょゎゕゖ')
_DIGITS_RE = re.compile(r'(\d+)')

# 長音符「ー」は直前の母音として比較する
_VOWEL_OF: dict[str, str] = {}
for _vowel, _chars in (
    ('あ', 'あかさたなはまやらわがざだばぱぁゃゎ'),
    ('い', 'いきしちにひみりぎじぢびぴぃ'),
    ('う', 'うくすつぬふむゆるぐずづぶぷぅっゅゔ'),
    ('え', 'えけせてねへめれげぜでべぺぇ'),
    ('お', 'おこそとのほもよろをごぞどぼぽぉょ'),
):
    _VOWEL_OF.update(dict.fromkeys(_chars, _vowel))

# 濁点・半濁点（結合文字）の二次キー
_MARK_WEIGHT = {'\u3099': 1, '\u309a': 2}


def _split_numeric(s: str) -> tuple:
    """数字列を数値として比較できるように分割する。"""
    parts = []
    for i, chunk in enumerate(_DIGITS_RE.split(s)):
        if not chunk:
            continue
        if i % 2:
            parts.append((0, int(chunk), ''))
        else:
            parts.append((1, 0, chunk))
    return tuple(parts)


def _expand_long_vowels(s: str) -> str:
    out: list[str] = []
    for ch in s:
        if ch == 'ー' and out and out[-1] in _VOWEL_OF:
            ch = _VOWEL_OF[out[-1]]
        out.append(ch)
    return ''.join(out)


def kana_sort_key(text: str) -> tuple:
    """日本語の照合順に近い並べ替えキーを返す。

    一次: 清音・大書きのひらがなに寄せた文字列（長音符は直前の母音、数字列は数値比較）
    二次: 濁点・半濁点
    三次: 小書きかな
    四次: ひらがな < カタカナ
    """
    if not text:
        return ((), (), (), ())
    s = unicodedata.normalize('NFKC', str(text))
    kata_flags = tuple(1 if 'ァ' <= ch <= 'ヶ' else 0 for ch in s)
    hira = s.translate(_KATA2HIRA_TABLE)
    hira = _expand_long_vowels(hira)

    base_chars: list[str] = []
    marks: list[int] = []
    for ch in unicodedata.normalize('NFD', hira):
        if ch in _MARK_WEIGHT:
            if marks:
                marks[-1] = _MARK_WEIGHT[ch]
            continue
        base_chars.append(ch)
        marks.append(0)

    base = ''.join(base_chars)
    primary = _split_numeric(base.translate(_SMALL2LARGE))
    smalls = tuple(0 if ch in _SMALL_KANA else 1 for ch in base)
    return (primary, tuple(marks), smalls, kata_flags)


def sort_by_kana_reading(customers: Iterable[T]) -> list[T]:
    """ふりがな順に並べた新しいリストを返す（安定ソート・元のリストは変更しない）。"""
    return sorted(customers, key=lambda c: kana_sort_key(c.name_kana))

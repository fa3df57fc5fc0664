"""utils/kana.py のテスト

テスト対象:
  - row_of: 五十音行の判定
  - parse_row_filter / filter_by_row: あいう順タブの絞り込み
  - kana_sort_key / sort_by_kana_reading: ふりがな順ソート
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from utils.kana import (
    AllRows,
    GojuonRow,
    SpecificRow,
    Unclassified,
    filter_by_row,
    kana_sort_key,
    parse_row_filter,
    row_of,
    sort_by_kana_reading,
)


@dataclass
class _Rec:
    name: str
    name_kana: str


def _records() -> list[_Rec]:
    return [
        _Rec('田中太郎', 'たなか たろう'),
        _Rec('青木一郎', 'あおき いちろう'),
        _Rec('伊達政宗', 'だて まさむね'),
        _Rec('John', 'John'),
        _Rec('佐藤花子', 'さとう はなこ'),
        _Rec('渡辺', 'わたなべ'),
        _Rec('空欄', ''),
        _Rec('服部', 'はっとり'),
        _Rec('馬場', 'ばば'),
        _Rec('朴', 'ぱく'),
    ]


# ── row_of ───────────────────────────────────────────────────────────────────


class TestRowOf:
    @pytest.mark.parametrize('kana, row', [
        ('あい', GojuonRow.A),
        ('おか', GojuonRow.A),
        ('かき', GojuonRow.KA),
        ('ごとう', GojuonRow.KA),
        ('ざいつ', GojuonRow.SA),
        ('ぞの', GojuonRow.SA),
        ('ちば', GojuonRow.TA),
        ('どい', GojuonRow.TA),
        ('のだ', GojuonRow.NA),
        ('ばば', GojuonRow.HA),
        ('ぽち', GojuonRow.HA),
        ('もり', GojuonRow.MA),
        ('ゆき', GojuonRow.YA),
        ('ろくごう', GojuonRow.RA),
        ('わだ', GojuonRow.WA),
        ('をの', GojuonRow.WA),
        ('ん', GojuonRow.WA),
    ])
    def test_rows(self, kana, row):
        assert row_of(kana) is row

    def test_small_kana_belongs_to_row(self):
        assert row_of('ぁ') is GojuonRow.A
        assert row_of('っ') is GojuonRow.TA
        assert row_of('ゃ') is GojuonRow.YA

    @pytest.mark.parametrize('kana', ['', 'アオキ', 'John', '田中', '1ばん', ' たなか'])
    def test_unclassified(self, kana):
        assert row_of(kana) is None

    def test_none(self):
        assert row_of(None) is None


# ── parse_row_filter ─────────────────────────────────────────────────────────


class TestParseRowFilter:
    def test_all(self):
        assert parse_row_filter('全') == AllRows()

    def test_specific(self):
        assert parse_row_filter('た') == SpecificRow(GojuonRow.TA)

    def test_other(self):
        assert parse_row_filter('その他') == Unclassified()

    @pytest.mark.parametrize('key', ['', 'x', 'ち', 'タ', 'garbage'])
    def test_unknown_is_all(self, key):
        assert parse_row_filter(key) == AllRows()


# ── filter_by_row ────────────────────────────────────────────────────────────


class TestFilterByRow:
    def test_all_returns_everything_in_order(self):
        records = _records()
        result = filter_by_row(records, '全')
        assert result == records
        assert result is not records

    def test_unknown_key_returns_everything(self):
        records = _records()
        assert filter_by_row(records, 'zzz') == records

    def test_ta_row_includes_voiced(self):
        result = filter_by_row(_records(), 'た')
        assert [r.name for r in result] == ['田中太郎', '伊達政宗']
        allowed = set('たちつてとだぢづでど')
        assert all(r.name_kana[0] in allowed for r in result)

    def test_ha_row_includes_voiced_and_semi_voiced(self):
        result = filter_by_row(_records(), 'は')
        assert [r.name for r in result] == ['服部', '馬場', '朴']

    def test_other_returns_unclassified(self):
        result = filter_by_row(_records(), 'その他')
        assert [r.name for r in result] == ['John']

    def test_empty_reading_only_in_all(self):
        assert '空欄' in [r.name for r in filter_by_row(_records(), '全')]
        assert '空欄' not in [r.name for r in filter_by_row(_records(), 'その他')]

    def test_unclassified_never_in_specific_row(self):
        for row in GojuonRow:
            names = [r.name for r in filter_by_row(_records(), row.value)]
            assert 'John' not in names
            assert '空欄' not in names

    def test_accepts_filter_variant(self):
        result = filter_by_row(_records(), SpecificRow(GojuonRow.WA))
        assert [r.name for r in result] == ['渡辺']

    def test_empty_row(self):
        assert filter_by_row(_records(), 'や') == []

    def test_input_unchanged(self):
        records = _records()
        snapshot = list(records)
        filter_by_row(records, 'あ')
        assert records == snapshot


# ── sort ─────────────────────────────────────────────────────────────────────


class TestKanaSortKey:
    def test_gojuon_order(self):
        words = ['わ', 'ら', 'や', 'ま', 'は', 'な', 'た', 'さ', 'か', 'あ']
        assert sorted(words, key=kana_sort_key) == list(reversed(words))

    def test_voiced_after_plain(self):
        assert kana_sort_key('か') < kana_sort_key('が')

    def test_voiced_groups_with_base_letter(self):
        # が は か行の中で並ぶ（き より前）
        assert kana_sort_key('がく') < kana_sort_key('きく')

    def test_semi_voiced_after_voiced(self):
        assert kana_sort_key('ば') < kana_sort_key('ぱ')

    def test_katakana_sorts_with_hiragana(self):
        assert kana_sort_key('アオキ') < kana_sort_key('いとう')
        assert kana_sort_key('あおき') < kana_sort_key('アオキ')

    def test_half_width_katakana(self):
        assert kana_sort_key('ｶﾄｳ')[0] == kana_sort_key('かとう')[0]

    def test_numeric_substrings(self):
        assert kana_sort_key('くかく2') < kana_sort_key('くかく10')

    def test_empty(self):
        assert kana_sort_key('') < kana_sort_key('あ')

    def test_long_vowel_takes_preceding_vowel(self):
        assert kana_sort_key('ラーメン')[0] == kana_sort_key('らあめん')[0]
        assert kana_sort_key('ラーメン') < kana_sort_key('らいめん')

    def test_long_vowel_after_small_kana(self):
        assert kana_sort_key('キャー')[0] == kana_sort_key('きやあ')[0]

    def test_long_vowel_sorts_inside_kana(self):
        assert kana_sort_key('ターナー') < kana_sort_key('たいら')


class TestSortByKanaReading:
    def test_sorted(self):
        result = sort_by_kana_reading(_records())
        kana = [r.name_kana for r in result if r.name_kana and row_of(r.name_kana)]
        # 濁点・半濁点・小書きは一次比較では清音・大書きとみなす
        assert kana == [
            'あおき いちろう', 'さとう はなこ', 'だて まさむね', 'たなか たろう',
            'ぱく', 'はっとり', 'ばば', 'わたなべ',
        ]

    def test_unclassified_readings_first(self):
        result = sort_by_kana_reading(_records())
        assert [r.name for r in result[:2]] == ['空欄', 'John']

    def test_is_permutation(self):
        records = _records()
        result = sort_by_kana_reading(records)
        assert len(result) == len(records)
        assert sorted(map(id, result)) == sorted(map(id, records))

    def test_input_not_mutated(self):
        records = _records()
        snapshot = list(records)
        sort_by_kana_reading(records)
        assert records == snapshot

    def test_idempotent(self):
        once = sort_by_kana_reading(_records())
        twice = sort_by_kana_reading(once)
        assert twice == once

    def test_stable_for_equal_kana(self):
        records = [_Rec('A', 'やまだ'), _Rec('B', 'あべ'), _Rec('C', 'やまだ')]
        result = sort_by_kana_reading(records)
        assert [r.name for r in result] == ['B', 'A', 'C']

    def test_empty(self):
        assert sort_by_kana_reading([]) == []

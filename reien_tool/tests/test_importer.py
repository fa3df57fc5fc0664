"""core/importer.py のテスト

テスト対象:
  - detect_header_row / detect_header_row_csv: ヘッダー行自動検出
  - detect_encoding: CSV の文字コード判定
  - import_excel / import_csv / import_file: 読み込み + カラムマッピング
  - row_to_draft / rows_to_drafts: CustomerDraft への変換
"""

from __future__ import annotations

import pandas as pd
from openpyxl import Workbook

from core.importer import (
    detect_encoding,
    detect_header_row,
    detect_header_row_csv,
    import_csv,
    import_excel,
    import_file,
    row_to_draft,
    rows_to_drafts,
)
from core.models import PlotUsage

_HEADER = ['顧客コード', '氏名', 'ふりがな', '電話番号', '住所', '区域', '許可番号', '利用状況']
_ROW1 = ['A-001', '田中 太郎', 'たなか たろう', '090-1234-5678', '北九州市', 'A', 'A-001', '使用中']
_ROW2 = ['B-012', '佐藤 花子', 'さとう はなこ', '080-2345-6789', '小倉北区', '3', 'B-012', '予約済']


def _create_excel(path, rows: list[list], start_row: int = 1) -> str:
    """テスト用 Excel ファイルを作成する。"""
    wb = Workbook()
    ws = wb.active
    for i, row_data in enumerate(rows, start_row):
        for j, val in enumerate(row_data, 1):
            ws.cell(row=i, column=j, value=val)
    wb.save(str(path))
    return str(path)


def _create_csv(path, lines: list[str], encoding: str = 'utf-8') -> str:
    path.write_bytes(('\n'.join(lines) + '\n').encode(encoding))
    return str(path)


# ── detect_header_row ─────────────────────────────────────────────────────────


class TestDetectHeaderRow:
    def test_header_on_first_row(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [_HEADER, _ROW1])
        assert detect_header_row(path) == 1

    def test_header_after_meta_rows(self, tmp_path):
        """行1-2にメタ情報、行3にヘッダーがある場合。"""
        path = _create_excel(tmp_path / 'test.xlsx', [
            ['霊園名: テスト霊園', None, None],
            ['出力日: 2025-01-01', None, None],
            _HEADER,
            _ROW1,
        ])
        assert detect_header_row(path) == 3

    def test_no_header_defaults_to_1(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [[1, 2, 3], [4, 5, 6]])
        assert detect_header_row(path) == 1

    def test_numeric_meta_rows_skipped(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [[2025, 1, 15, None], _HEADER])
        assert detect_header_row(path) == 2


class TestDetectHeaderRowCsv:
    def test_meta_line_skipped(self, tmp_path):
        path = _create_csv(tmp_path / 'a.csv', [
            '顧客台帳,,', ','.join(_HEADER), ','.join(_ROW1),
        ])
        assert detect_header_row_csv(path, 'utf-8') == 2

    def test_fallback(self, tmp_path):
        path = _create_csv(tmp_path / 'a.csv', ['a', 'b'])
        assert detect_header_row_csv(path, 'utf-8') == 1


# ── detect_encoding ───────────────────────────────────────────────────────────


class TestDetectEncoding:
    def test_bom(self, tmp_path):
        path = tmp_path / 'bom.csv'
        path.write_bytes(b'\xef\xbb\xbf' + '氏名,ふりがな\n'.encode('utf-8'))
        assert detect_encoding(str(path)) == 'utf-8-sig'

    def test_ascii_is_utf8(self, tmp_path):
        path = _create_csv(tmp_path / 'a.csv', ['code,name,kana', 'A-1,x,y'])
        assert detect_encoding(str(path)) == 'utf-8'

    def test_cp932_readable(self, tmp_path):
        lines = [','.join(_HEADER)] + [','.join(_ROW1), ','.join(_ROW2)] * 20
        path = _create_csv(tmp_path / 'sjis.csv', lines, encoding='cp932')
        encoding = detect_encoding(path)
        with open(path, encoding=encoding) as f:
            assert f.readline().startswith('顧客コード')


# ── import ────────────────────────────────────────────────────────────────────


class TestImportExcel:
    def test_basic_import(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [_HEADER, _ROW1, _ROW2])
        df, unmapped = import_excel(path)
        assert len(df) == 2
        assert unmapped == []
        assert df.iloc[0]['氏名'] == '田中 太郎'

    def test_all_columns_are_string(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [
            ['顧客コード', '氏名', 'ふりがな', '使用料'],
            ['A-1', '田中', 'たなか', 300000],
        ])
        df, _ = import_excel(path)
        assert df.iloc[0]['使用料'] == '300000'

    def test_unmapped_columns_reported(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [
            _HEADER + ['独自カラム'], _ROW1 + ['xxx'],
        ])
        _, unmapped = import_excel(path)
        assert unmapped == ['独自カラム']

    def test_empty_rows_dropped(self, tmp_path):
        path = _create_excel(tmp_path / 'test.xlsx', [
            _HEADER, _ROW1, [None] * len(_HEADER), _ROW2,
        ])
        df, _ = import_excel(path)
        assert len(df) == 2


class TestImportCsv:
    def test_utf8_with_alias_headers(self, tmp_path):
        path = _create_csv(tmp_path / 'a.csv', [
            '顧客番号,契約者氏名,フリガナ,TEL',
            'A-001,田中 太郎,たなか たろう,090-1234-5678',
        ])
        df, unmapped = import_csv(path)
        assert list(df.columns) == ['顧客コード', '氏名', 'ふりがな', '電話番号']
        assert unmapped == []

    def test_cp932(self, tmp_path):
        lines = [','.join(_HEADER)] + [','.join(_ROW1), ','.join(_ROW2)] * 20
        path = _create_csv(tmp_path / 'sjis.csv', lines, encoding='cp932')
        df, _ = import_csv(path)
        assert len(df) == 40
        assert df.iloc[1]['氏名'] == '佐藤 花子'

    def test_import_file_dispatch(self, tmp_path):
        csv_path = _create_csv(tmp_path / 'a.csv', [','.join(_HEADER), ','.join(_ROW1)])
        xlsx_path = _create_excel(tmp_path / 'a.xlsx', [_HEADER, _ROW1])
        assert import_file(csv_path)[0].iloc[0]['顧客コード'] == 'A-001'
        assert import_file(xlsx_path)[0].iloc[0]['顧客コード'] == 'A-001'


# ── row_to_draft / rows_to_drafts ─────────────────────────────────────────────


class TestRowToDraft:
    def test_basic_fields(self):
        draft = row_to_draft(dict(zip(_HEADER, _ROW1)))
        assert draft.customer_code == 'A-001'
        assert draft.name_kana == 'たなか たろう'
        assert draft.section == 'A'
        assert draft.plot_info.usage is PlotUsage.IN_USE
        assert draft.plot_info.plot_number == 'A-001'
        assert draft.status == 'active'

    def test_no_plot(self):
        draft = row_to_draft({'顧客コード': 'X', '氏名': 'x', 'ふりがな': 'x'})
        assert draft.plot_info is None
        assert draft.usage_fee is None

    def test_nan_is_blank(self):
        draft = row_to_draft({'顧客コード': 'X', '氏名': 'x', 'ふりがな': 'x',
                              '住所': float('nan')})
        assert draft.address == ''

    def test_fees(self):
        draft = row_to_draft({
            '顧客コード': 'X', '氏名': 'x', 'ふりがな': 'x',
            '使用料': '300,000円', '管理料': '12000', '管理料単価': '3000', '管理料請求年数': '4',
        })
        assert draft.usage_fee.amount == 300000
        assert draft.management_fee.unit_price == 3000
        assert draft.management_fee.billing_years == 4

    def test_inactive_label(self):
        draft = row_to_draft({'顧客コード': 'X', '氏名': 'x', 'ふりがな': 'x', '契約状態': '解約'})
        assert draft.status == 'inactive'


class TestRowsToDrafts:
    def test_skips_incomplete_rows(self):
        df = pd.DataFrame([
            dict(zip(_HEADER, _ROW1)),
            {'顧客コード': 'Z-1', '氏名': '', 'ふりがな': 'なし'},
            dict(zip(_HEADER, _ROW2)),
        ])
        drafts = rows_to_drafts(df)
        assert [d.customer_code for d in drafts] == ['A-001', 'B-012']
        assert drafts[1].plot_info.usage is PlotUsage.RESERVED

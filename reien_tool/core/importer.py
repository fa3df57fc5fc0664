"""顧客台帳 Excel / CSV の一括取り込み

ヘッダー行自動検出 + 全列 dtype=str で読み込み、CustomerDraft に変換する。
"""

from __future__ import annotations

import csv
import logging
import os

import chardet
import pandas as pd
from openpyxl import load_workbook

from core.mapper import FIELD_MAP, STATUS_LABELS, USAGE_LABELS, map_columns
from core.models import CustomerDraft, FeeInfo, PlotInfo, PlotUsage

logger = logging.getLogger(__name__)

# ヘッダー行とみなす文字列セル数
HEADER_MIN_CELLS = 3


def detect_header_row(filepath: str, max_scan: int = 10) -> int:
    """
    Excel ファイルのヘッダー行を自動検出する。
    判定基準: 文字列セルが HEADER_MIN_CELLS 個以上ある最初の行（1-indexed）。
    """
    wb = load_workbook(filepath, read_only=True, data_only=True)
    try:
        ws = wb.active
        result = 1  # フォールバック
        for row_idx, row in enumerate(ws.iter_rows(max_row=max_scan), 1):
            str_count = sum(
                1 for cell in row
                if cell.value is not None and isinstance(cell.value, str)
            )
            if str_count >= HEADER_MIN_CELLS:
                result = row_idx
                break
    finally:
        wb.close()
    return result


def detect_encoding(filepath: str) -> str:
    """ファイルのエンコーディングを自動検出する。

    chardet で推定し、判定できない場合は cp932 にフォールバックする。
    """
    with open(filepath, 'rb') as f:
        raw = f.read(65536)  # 先頭 64KB で判定
    if raw.startswith(b'\xef\xbb\xbf'):
        return 'utf-8-sig'
    result = chardet.detect(raw)
    encoding = (result.get('encoding') or 'cp932').lower()
    if encoding == 'ascii':
        encoding = 'utf-8'
    # Windows-31J / ISO-2022-JP 系は cp932 に統一
    if encoding in ('windows-1252', 'iso-2022-jp', 'shift_jis'):
        encoding = 'cp932'
    return encoding


def detect_header_row_csv(
    filepath: str, encoding: str, max_scan: int = 10,
) -> int:
    """
    CSV ファイルのヘッダー行を自動検出する。
    判定基準: 非空セルが HEADER_MIN_CELLS 個以上ある最初の行（1-indexed）。
    """
    result = 1  # フォールバック
    with open(filepath, encoding=encoding, newline='') as f:
        reader = csv.reader(f)
        for row_idx, row in enumerate(reader, 1):
            if row_idx > max_scan:
                break
            str_count = sum(1 for cell in row if cell.strip())
            if str_count >= HEADER_MIN_CELLS:
                result = row_idx
                break
    return result


def import_excel(filepath: str) -> tuple[pd.DataFrame, list[str]]:
    """
    顧客台帳 Excel を読み込み、マッピング済み DataFrame を返す。

    Returns:
        df_mapped: 内部論理名にリネーム済みの DataFrame
        unmapped:  マッピングできなかったカラム名リスト
    """
    header_row = detect_header_row(filepath)
    df = pd.read_excel(
        filepath,
        header=header_row - 1,  # 0-indexed
        dtype=str,
        engine='openpyxl',
    )
    return _clean_and_map(df)


def import_csv(filepath: str) -> tuple[pd.DataFrame, list[str]]:
    """顧客台帳 CSV を読み込み、マッピング済み DataFrame を返す。"""
    encoding = detect_encoding(filepath)
    header_row = detect_header_row_csv(filepath, encoding)
    df = pd.read_csv(
        filepath,
        header=header_row - 1,  # 0-indexed
        dtype=str,
        encoding=encoding,
    )
    return _clean_and_map(df)


def import_file(filepath: str) -> tuple[pd.DataFrame, list[str]]:
    """拡張子に応じて Excel または CSV を読み込む統合関数。"""
    ext = os.path.splitext(filepath)[1].lower()
    if ext == '.csv':
        return import_csv(filepath)
    return import_excel(filepath)


def _clean_and_map(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str]]:
    """空白カラム・空白行を除去し、カラムマッピングを適用する。"""
    df = df.loc[:, df.columns.notna()]
    df = df.dropna(how='all')
    df = df.reset_index(drop=True)
    df_mapped, unmapped = map_columns(df)
    if unmapped:
        logger.info('マッピングできなかった列: %s', ', '.join(map(str, unmapped)))
    return df_mapped, unmapped


# ── DataFrame → CustomerDraft ─────────────────────────────────────────────────

def _val(row: dict, key: str) -> str:
    v = row.get(key, '')
    return '' if (v is None or str(v).strip().lower() == 'nan') else str(v).strip()


def _int_or_none(text: str) -> int | None:
    text = text.replace(',', '').replace('¥', '').replace('円', '').strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def _fee(row: dict, amount_key: str, unit_key: str, years_key: str | None = None) -> FeeInfo | None:
    amount = _int_or_none(_val(row, amount_key))
    unit_price = _int_or_none(_val(row, unit_key))
    years = _int_or_none(_val(row, years_key)) if years_key else None
    if amount is None and unit_price is None:
        return None
    return FeeInfo(amount=amount, unit_price=unit_price, billing_years=years)


def row_to_draft(row: dict) -> CustomerDraft:
    """論理名の辞書 1 行を CustomerDraft に変換する（検証はしない）。"""
    values = {attr: _val(row, logical) for logical, attr in FIELD_MAP.items()}

    plot_info = None
    usage = USAGE_LABELS.get(_val(row, '利用状況'))
    if usage or values['plot_number']:
        plot_info = PlotInfo(
            plot_number=values['plot_number'],
            section=values['section'],
            usage=PlotUsage(usage or 'in_use'),
        )

    status = STATUS_LABELS.get(_val(row, '契約状態'), 'active')
    return CustomerDraft(
        **values,
        plot_info=plot_info,
        usage_fee=_fee(row, '使用料', '使用料単価'),
        management_fee=_fee(row, '管理料', '管理料単価', '管理料請求年数'),
        status=status,
    )


def rows_to_drafts(df: pd.DataFrame) -> list[CustomerDraft]:
    """マッピング済み DataFrame を CustomerDraft のリストにする。

    顧客コード・氏名・ふりがなのいずれかが空の行はスキップする。
    """
    drafts: list[CustomerDraft] = []
    for idx, row in enumerate(df.to_dict('records'), 1):
        draft = row_to_draft(row)
        if not (draft.customer_code and draft.name and draft.name_kana):
            logger.warning('必須項目が空のため %d 行目をスキップしました', idx)
            continue
        drafts.append(draft)
    return drafts

"""区画在庫の集計（期別・全体・使用率順）

在庫表は 期 / 区画 / 総数 / 使用数 / 残数 列を持つ DataFrame。
"""

from __future__ import annotations

import logging
import os

import pandas as pd

from core.importer import detect_encoding

logger = logging.getLogger(__name__)

INVENTORY_COLUMNS = ['期', '区画', '総数', '使用数', '残数']


def _usage_rate(used, total):
    """使用率（%、小数 1 桁）。総数 0 は 0。"""
    rate = (used / total * 100).where(total > 0, 0.0)
    return rate.round(1)


def _numeric(df: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in INVENTORY_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f'在庫表に必要な列がありません: {missing}')
    out = df.copy()
    for col in ('総数', '使用数', '残数'):
        out[col] = pd.to_numeric(out[col], errors='coerce').fillna(0).astype(int)
    return out


def with_usage_rate(df: pd.DataFrame) -> pd.DataFrame:
    """区画ごとの使用率列を追加したコピーを返す。"""
    out = _numeric(df)
    out['使用率'] = _usage_rate(out['使用数'], out['総数'])
    return out


def summarize_by_period(df: pd.DataFrame) -> pd.DataFrame:
    """期ごとに総数・使用数・残数・使用率を集計する（期は出現順）。"""
    out = _numeric(df)
    grouped = (
        out.groupby('期', sort=False)[['総数', '使用数', '残数']]
        .sum()
        .reset_index()
    )
    grouped['使用率'] = _usage_rate(grouped['使用数'], grouped['総数'])
    return grouped


def summarize_inventory(df: pd.DataFrame) -> dict[str, float]:
    """全体の総数・使用数・残数・使用率を返す。"""
    out = _numeric(df)
    total = int(out['総数'].sum())
    used = int(out['使用数'].sum())
    remaining = int(out['残数'].sum())
    rate = round(used / total * 100, 1) if total > 0 else 0.0
    return {'総数': total, '使用数': used, '残数': remaining, '使用率': rate}


def available_sections(df: pd.DataFrame) -> pd.DataFrame:
    """残数のある区画のみ。"""
    out = _numeric(df)
    return out[out['残数'] > 0].reset_index(drop=True)


def sold_out_sections(df: pd.DataFrame) -> pd.DataFrame:
    """残数 0（完売）の区画のみ。"""
    out = _numeric(df)
    return out[out['残数'] == 0].reset_index(drop=True)


def sort_by_usage_rate(df: pd.DataFrame, ascending: bool = False) -> pd.DataFrame:
    """使用率順（既定は高い順）に並べる。同率は元の順序を保つ。"""
    out = with_usage_rate(df)
    return out.sort_values('使用率', ascending=ascending, kind='stable').reset_index(drop=True)


def read_inventory(filepath: str) -> pd.DataFrame:
    """在庫表（Excel / CSV、1 行目が見出し）を読み込み、数値列を整える。"""
    if os.path.splitext(filepath)[1].lower() == '.csv':
        df = pd.read_csv(filepath, dtype=str, encoding=detect_encoding(filepath))
    else:
        df = pd.read_excel(filepath, dtype=str, engine='openpyxl')
    df.columns = [str(c).strip() for c in df.columns]
    df = df.dropna(how='all').reset_index(drop=True)
    return _numeric(df)


def export_inventory_summary(df: pd.DataFrame, output_path: str) -> dict[str, float]:
    """期別・使用率順・空き区画の 3 シートを Excel に書き出し、全体集計を返す。"""
    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        summarize_by_period(df).to_excel(writer, sheet_name='期別', index=False)
        sort_by_usage_rate(df).to_excel(writer, sheet_name='使用率順', index=False)
        available_sections(df).to_excel(writer, sheet_name='空き区画', index=False)
    summary = summarize_inventory(df)
    sold_out = len(sold_out_sections(df))
    logger.info(
        '区画在庫: 総数 %d / 使用数 %d / 残数 %d（使用率 %.1f%%、完売 %d 区画）',
        summary['総数'], summary['使用数'], summary['残数'], summary['使用率'], sold_out,
    )
    return summary

"""御請求書（Excel）の生成

A4縦・1枚。使用料と管理料を明細に並べ、日付は和暦で表示する。

レイアウト（列 A〜H、A/H は余白）:
  2-3 行  タイトル
  4-5 行  請求No. / 請求日（右寄せ）
  6-7 行  宛名・住所（左）
  7-11 行 差出人（F 列）・印（G 列）
  10-17 行 件名・お支払期限・お振込先
  19 行   合計金額
  22 行〜 明細（No. / 項目 / 数量 / 単位 / 単価 / 金額）
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.page import PageMargins
from openpyxl.worksheet.properties import PageSetupProperties

from core.models import Customer
from utils.wareki import format_era_date

# ────────────────────────────────────────────────────────────────────────────
# スタイル定数
# ────────────────────────────────────────────────────────────────────────────

FONT_FAMILY = 'Meiryo'

_THIN   = Side(style='thin',   color='000000')
_THICK  = Side(style='thick',  color='000000')
_DOTTED = Side(style='dotted', color='000000')
_DOUBLE = Side(style='double', color='000000')
_RED    = Side(style='medium', color='FF0000')

BORDER_FULL   = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)
BORDER_ITEM   = Border(left=_THIN, right=_THIN, bottom=_DOTTED)
BORDER_STAMP  = Border(top=_RED, bottom=_RED, left=_RED, right=_RED)

FILL_HEADER = PatternFill(fill_type='solid', fgColor='D3D3D3')

ALIGN_CENTER = Alignment(horizontal='center', vertical='center')
ALIGN_RIGHT  = Alignment(horizontal='right')

FONT_TITLE     = Font(name=FONT_FAMILY, size=24, bold=True)
FONT_RECIPIENT = Font(name=FONT_FAMILY, size=16, bold=True, underline='single')
FONT_TOTAL     = Font(name=FONT_FAMILY, size=16, bold=True)
FONT_BOLD      = Font(name=FONT_FAMILY, size=11, bold=True)
FONT_SMALL     = Font(name=FONT_FAMILY, size=10)
FONT_STAMP     = Font(name=FONT_FAMILY, size=11, color='FF0000')

HEADER_ROW = 22
ITEM_COLUMNS = ['B', 'C', 'D', 'E', 'F', 'G']
ITEM_HEADERS = ['No.', '項目', '数量', '単位', '単価', '金額']


# ────────────────────────────────────────────────────────────────────────────
# 金額計算
# ────────────────────────────────────────────────────────────────────────────

def invoice_lines(customer: Customer) -> list[tuple[str, int, str, int, int]]:
    """明細行 (項目, 数量, 単位, 単価, 金額) を返す。金額のない料金は含めない。"""
    lines = []
    usage = customer.usage_fee
    if usage is not None and usage.amount:
        plot = f'{customer.section} {customer.plot_number}'.strip()
        lines.append((f'永代使用料 ({plot})', 1, '式', usage.unit_price or 0, usage.amount))
    mgmt = customer.management_fee
    if mgmt is not None and mgmt.amount:
        years = mgmt.billing_years or 1
        lines.append((f'年間管理料 ({years}年分)', 1, '式', mgmt.unit_price or 0, mgmt.amount))
    return lines


def invoice_total(customer: Customer) -> int:
    """請求合計（使用料 + 管理料）。"""
    return sum(line[4] for line in invoice_lines(customer))


def invoice_number(customer: Customer, issued_on: date) -> str:
    """請求番号（例: INV-202405-A-001）。"""
    return f'INV-{issued_on.year}{issued_on.month:02d}-{customer.customer_code}'


# ────────────────────────────────────────────────────────────────────────────
# ヘルパー
# ────────────────────────────────────────────────────────────────────────────

def _cell(ws, ref: str, *,
          value=None, font=None, fill=None, border=None, alignment=None,
          number_format=None):
    c = ws[ref]
    if value is not None:
        c.value = value
    if font is not None:
        c.font = font
    if fill is not None:
        c.fill = fill
    if border is not None:
        c.border = border
    if alignment is not None:
        c.alignment = alignment
    if number_format is not None:
        c.number_format = number_format
    return c


def _apply_print_settings(ws) -> None:
    ws.page_setup.paperSize   = 9
    ws.page_setup.orientation = 'portrait'
    ws.page_setup.fitToWidth  = 1
    ws.page_setup.fitToHeight = 0
    if ws.sheet_properties.pageSetUpPr is None:
        ws.sheet_properties.pageSetUpPr = PageSetupProperties()
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    ws.page_margins = PageMargins(
        left=0.40, right=0.40,
        top=0.40,  bottom=0.40,
        header=0.20, footer=0.20,
    )
    ws.print_options.horizontalCentered = True


# ────────────────────────────────────────────────────────────────────────────
# 公開 API
# ────────────────────────────────────────────────────────────────────────────

def build_invoice(
    customer: Customer,
    *,
    issued_on: date | None = None,
    config: dict[str, Any] | None = None,
) -> Workbook:
    """顧客 1 名分の御請求書ワークブックを作る。"""
    config = config or {}
    office = config.get('office', {})
    payment_days = int(config.get('invoice', {}).get('payment_days', 14))
    issued_on = issued_on or date.today()

    wb = Workbook()
    ws = wb.active
    ws.title = '御請求書'

    for col, width in zip('ABCDEFGH', [2, 5, 35, 8, 6, 30, 10, 2], strict=True):
        ws.column_dimensions[col].width = width

    # タイトル
    ws.merge_cells('B2:G3')
    _cell(ws, 'B2', value='御 請 求 書', font=FONT_TITLE, alignment=ALIGN_CENTER,
          border=Border(bottom=_DOUBLE))

    # 請求No. / 請求日
    ws.merge_cells('F4:G4')
    _cell(ws, 'F4', value=f'請求No.  {invoice_number(customer, issued_on)}',
          font=FONT_SMALL, alignment=ALIGN_RIGHT)
    ws.merge_cells('F5:G5')
    _cell(ws, 'F5', value=f'請求日:  {format_era_date(issued_on)}',
          font=FONT_SMALL, alignment=ALIGN_RIGHT)

    # 宛名
    ws.merge_cells('B6:E6')
    _cell(ws, 'B6', value=f'{customer.name}  様', font=FONT_RECIPIENT)
    ws.merge_cells('B7:E7')
    _cell(ws, 'B7', value=f'〒{customer.postal_code} {customer.address}'.strip(),
          font=FONT_SMALL)

    # 差出人・印
    sender_lines = [
        office.get('name', ''),
        f'〒{office["postal_code"]}' if office.get('postal_code') else '',
        office.get('address', ''),
        f'TEL: {office["phone"]}' if office.get('phone') else '',
        f'担当者: {office["staff_name"]}' if office.get('staff_name') else '',
    ]
    for offset, text in enumerate(sender_lines):
        if text:
            _cell(ws, f'F{7 + offset}', value=text,
                  font=FONT_BOLD if offset == 0 else FONT_SMALL)
    ws.merge_cells('G7:G10')
    _cell(ws, 'G7', value='印', font=FONT_STAMP, alignment=ALIGN_CENTER, border=BORDER_STAMP)

    # 件名・支払期限・振込先
    ws.merge_cells('B10:E10')
    _cell(ws, 'B10', value='件名： 永代使用料および管理料のご請求', border=Border(bottom=_THIN))
    ws.merge_cells('B12:E12')
    _cell(ws, 'B12', value='下記の通り、ご請求申し上げます。')

    _cell(ws, 'B14', value='お支払期限：', font=FONT_BOLD)
    ws.merge_cells('C14:E14')
    _cell(ws, 'C14', value=format_era_date(issued_on + timedelta(days=payment_days)))

    _cell(ws, 'B15', value='お振込先：', font=FONT_BOLD)
    for offset, text in enumerate(office.get('bank_lines', [])[:3]):
        row = 15 + offset
        ws.merge_cells(f'C{row}:E{row}')
        _cell(ws, f'C{row}', value=text)

    # 合計
    ws.merge_cells('B19:C19')
    _cell(ws, 'B19', value='合計金額：', font=FONT_BOLD, border=Border(bottom=_THICK))
    ws.merge_cells('D19:E19')
    _cell(ws, 'D19', value=invoice_total(customer), font=FONT_TOTAL,
          alignment=ALIGN_RIGHT, border=Border(bottom=_THICK),
          number_format='"¥"#,##0')

    # 明細
    for col, label in zip(ITEM_COLUMNS, ITEM_HEADERS, strict=True):
        _cell(ws, f'{col}{HEADER_ROW}', value=label, font=FONT_BOLD,
              fill=FILL_HEADER, border=BORDER_FULL, alignment=ALIGN_CENTER)

    for no, (item, qty, unit, price, amount) in enumerate(invoice_lines(customer), 1):
        row = HEADER_ROW + no
        for col, value in zip(ITEM_COLUMNS, [no, item, qty, unit, price, amount], strict=True):
            c = _cell(ws, f'{col}{row}', value=value, border=BORDER_ITEM)
            if col in ('B', 'D', 'E'):
                c.alignment = Alignment(horizontal='center')
            elif col in ('F', 'G'):
                c.alignment = ALIGN_RIGHT
                c.number_format = '#,##0'

    _apply_print_settings(ws)
    return wb


def save_invoice(
    customer: Customer,
    output_path: str,
    *,
    issued_on: date | None = None,
    config: dict[str, Any] | None = None,
) -> None:
    """御請求書を output_path に保存する。"""
    wb = build_invoice(customer, issued_on=issued_on, config=config)
    wb.save(output_path)

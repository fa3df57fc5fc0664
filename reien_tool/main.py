"""霊園顧客管理ツール — 一括処理エントリーポイント

顧客台帳（Excel/CSV）を取り込み、検索・あいう順絞り込み・ふりがな順ソートを
適用した一覧と、指定顧客の御請求書を出力する。
区画在庫表の集計出力と、合祀申込の受入チェックもここから行う。
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from core.collective_burial import CollectiveBurialLimits, check_application
from core.config import get_output_dir, load_config
from core.demo_data import demo_repository
from core.exporter import customers_to_dataframe, export_csv, export_excel
from core.importer import import_file, rows_to_drafts
from core.invoice import save_invoice
from core.models import CustomerValidationError
from core.plot import PlotAssignment, PlotValidation, validate_plot_assignments
from core.plot_inventory import export_inventory_summary, read_inventory
from core.repository import InMemoryCustomerRepository
from core.status import status_thresholds
from utils.kana import ALL_KEY, filter_by_row, sort_by_kana_reading

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='顧客台帳の一覧・請求書出力')
    src = parser.add_mutually_exclusive_group()
    src.add_argument('input', nargs='?', help='顧客台帳 Excel / CSV')
    src.add_argument('--demo', action='store_true', help='デモデータを使う')
    parser.add_argument('--config', help='設定ファイル（省略時はプロジェクトの config.json）')
    parser.add_argument('--query', default='', help='検索語（氏名・ふりがな・コード・電話・住所）')
    parser.add_argument('--row', default=ALL_KEY, help="あいう順タブ（'全' / 'あ'〜'わ' / 'その他'）")
    parser.add_argument('--output', help='一覧の出力先（.xlsx / .csv）')
    parser.add_argument('--invoice', metavar='CODE', help='御請求書を出力する顧客コード')
    parser.add_argument('--inventory', metavar='FILE', help='区画在庫表（期 / 区画 / 総数 / 使用数 / 残数）')
    parser.add_argument('--burial', nargs=2, type=int, metavar=('CURRENT', 'NEW'),
                        help='合祀申込チェック（現在の合祀人数と申込人数）')
    parser.add_argument('--plot-total', type=int, default=0,
                        help='申込区画の累計合祀人数（--burial と併用）')
    return parser


def check_plots(repo: InMemoryCustomerRepository) -> PlotValidation:
    """台帳の区画番号を検証し、重複などを警告ログに出す。"""
    assignments = [
        PlotAssignment(plot_number=c.plot_number) for c in repo.list() if c.plot_number
    ]
    result = validate_plot_assignments(assignments)
    for msg in result.errors + result.warnings:
        logger.warning('区画の確認: %s', msg)
    return result


def load_repository(filepath: str) -> InMemoryCustomerRepository:
    """台帳ファイルを読み込んでリポジトリを作る。重複コードは警告してスキップする。"""
    df, _unmapped = import_file(filepath)
    repo = InMemoryCustomerRepository()
    for draft in rows_to_drafts(df):
        try:
            repo.create(draft)
        except CustomerValidationError as exc:
            logger.warning('取り込みをスキップしました: %s', exc)
    logger.info('%d 件の顧客を読み込みました: %s', len(repo), filepath)
    check_plots(repo)
    return repo


def _export_list(args, config) -> int:
    repo = demo_repository() if args.demo else load_repository(args.input)

    customers = sort_by_kana_reading(filter_by_row(repo.search(args.query), args.row))
    df = customers_to_dataframe(customers, **status_thresholds(config))

    output = args.output or os.path.join(get_output_dir(config), '顧客一覧.xlsx')
    if output.lower().endswith('.csv'):
        export_csv(df, output)
    else:
        export_excel(df, output)
    logger.info('一覧を出力しました: %s（%d 件）', output, len(df))

    if args.invoice:
        customer = repo.get_by_code(args.invoice)
        if customer is None:
            logger.error('顧客コードが見つかりません: %s', args.invoice)
            return 1
        path = os.path.join(get_output_dir(config), f'御請求書_{customer.customer_code}.xlsx')
        save_invoice(customer, path, config=config)
        logger.info('御請求書を出力しました: %s', path)
    return 0


def _check_burial(args, config) -> int:
    current, new = args.burial
    result = check_application(
        current, new,
        plot_total=args.plot_total,
        limits=CollectiveBurialLimits.from_config(config),
    )
    for msg in result.warnings:
        logger.warning('合祀: %s', msg)
    for msg in result.errors:
        logger.error('合祀: %s', msg)
    logger.info('合祀堂 使用率 %d%%（残り %d 名）', result.percentage, result.remaining)
    return 0 if result.is_valid else 1


def run(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not (args.input or args.demo or args.inventory or args.burial):
        parser.error('台帳ファイル・--demo・--inventory・--burial のいずれかを指定してください')

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, str(config.get('log_level', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    code = 0
    try:
        if args.input or args.demo:
            code = _export_list(args, config)
        if args.inventory:
            path = os.path.join(get_output_dir(config), '区画在庫集計.xlsx')
            export_inventory_summary(read_inventory(args.inventory), path)
            logger.info('区画在庫集計を出力しました: %s', path)
        if args.burial:
            code = _check_burial(args, config) or code
    except Exception:
        logger.exception('処理に失敗しました')
        return 1
    return code


def main():
    sys.exit(run())


if __name__ == '__main__':
    main()

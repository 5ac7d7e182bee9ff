"""
販売員別レポート作成スクリプト
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import get_config
from .aggregator import (
    SalesAggregator, AnalysisOptions, ReportSummary, ExcelExporter,
    SalesAnalysisError, get_policies
)
from .aggregator.policies import BONUS_POLICIES
from .aggregator.sales import SALES_COUNT_MODES
from .services import FileHandler

logger = logging.getLogger(__name__)


def build_parser(cfg) -> argparse.ArgumentParser:
    """コマンドライン引数の定義"""
    parser = argparse.ArgumentParser(
        description='販売員別売上レポート作成'
    )
    parser.add_argument(
        'dataset',
        nargs='?',
        type=Path,
        help='販売データJSON（sellers / products / purchase_records）'
    )
    parser.add_argument('--sellers', type=Path, help='販売員マスタ（CSV/Excel）')
    parser.add_argument('--products', type=Path, help='商品マスタ（CSV/Excel）')
    parser.add_argument('--items', type=Path, help='購買明細（CSV/Excel）')
    parser.add_argument(
        '--bonus',
        choices=sorted(BONUS_POLICIES),
        default=cfg.BONUS_POLICY,
        help=f'ボーナス計算方法（デフォルト: {cfg.BONUS_POLICY}）'
    )
    parser.add_argument(
        '--sales-count',
        choices=SALES_COUNT_MODES,
        default=cfg.SALES_COUNT_MODE,
        help=f'販売件数のカウント方法（デフォルト: {cfg.SALES_COUNT_MODE}）'
    )
    parser.add_argument(
        '--include-inactive',
        action=argparse.BooleanOptionalAction,
        default=cfg.INCLUDE_INACTIVE_SELLERS,
        help='購買記録のない販売員もレポートに含める（--no-include-inactive で除外）'
    )
    parser.add_argument(
        '--top',
        type=int,
        default=cfg.TOP_PRODUCTS_LIMIT,
        help=f'売れ筋商品の件数（デフォルト: {cfg.TOP_PRODUCTS_LIMIT}）'
    )
    parser.add_argument('--excel', action='store_true', help='Excelファイルを出力')
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=cfg.OUTPUT_DIR,
        help=f'Excel出力先（デフォルト: {cfg.OUTPUT_DIR}）'
    )
    parser.add_argument('--json', action='store_true', help='JSON形式で出力')
    parser.add_argument('--debug', action='store_true', help='デバッグログを出力')
    return parser


def load_data(args, handler: FileHandler):
    """引数に応じて販売データを読み込み"""
    if args.dataset:
        return handler.read_dataset(args.dataset)
    return handler.read_tables(args.sellers, args.products, args.items)


def print_reports(reports, summary) -> None:
    """集計結果を表形式で表示"""
    print("=" * 72)
    print(f"{'順位':>4}  {'販売員':<20}{'売上':>14}{'利益':>14}{'件数':>6}{'ボーナス':>10}")
    print("-" * 72)
    for rank, report in enumerate(reports, start=1):
        print(
            f"{rank:>4}  {report.name:<20}{report.revenue:>14,.2f}"
            f"{report.profit:>14,.2f}{report.sales_count:>6}{report.bonus:>10,.2f}"
        )
    print("=" * 72)
    print(f"  販売員数: {summary.seller_count}")
    print(f"  総売上: {summary.total_revenue:,.2f}")
    print(f"  総利益: {summary.total_profit:,.2f}")
    print(f"  ボーナス総額: {summary.total_bonus:,.2f}")


def main(argv=None) -> int:
    """メイン関数"""
    cfg = get_config()
    parser = build_parser(cfg)
    args = parser.parse_args(argv)

    if not args.dataset and not (args.sellers and args.products and args.items):
        parser.error('販売データJSON、または --sellers / --products / --items を指定してください')

    # ロギング設定
    logging.basicConfig(
        level=logging.DEBUG if args.debug else cfg.LOG_LEVEL,
        format=cfg.LOG_FORMAT
    )

    try:
        options = AnalysisOptions(
            sales_count_mode=args.sales_count,
            include_inactive_sellers=args.include_inactive,
            top_products_limit=args.top
        )
        data = load_data(args, FileHandler(cfg.ENCODING))
        reports = SalesAggregator(data, get_policies(args.bonus), options).analyze()
    except (SalesAnalysisError, ValueError, OSError) as e:
        logger.error(f"レポート作成に失敗しました: {e}")
        return 1

    summary = ReportSummary(reports).calculate()

    if args.json:
        print(json.dumps(
            {
                'sellers': [r.to_dict() for r in reports],
                'summary': summary.to_dict()
            },
            ensure_ascii=False,
            indent=2
        ))
    else:
        print_reports(reports, summary)

    if args.excel:
        try:
            filepath = ExcelExporter(reports, output_dir=args.output_dir).export()
        except OSError as e:
            logger.error(f"Excel出力に失敗しました: {e}")
            return 1
        print(f"Excel出力: {filepath}")

    return 0


if __name__ == '__main__':
    sys.exit(main())

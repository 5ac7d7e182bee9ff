"""
Excel出力モジュール
販売員別レポートを集計結果・販売員別・売れ筋商品の3シートに出力する
"""
import pandas as pd
from pathlib import Path
from typing import List, Optional
import logging
from datetime import datetime
from openpyxl.styles import Font, Alignment

from .sales import SellerReport
from .summary import ReportSummary

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "集計結果"
SELLER_SHEET = "販売員別"
PRODUCT_SHEET = "売れ筋商品"

# 金額列の表示形式
MONEY_FORMAT = "#,##0.00"
MONEY_COLUMNS = ("売上", "利益", "ボーナス")


def reports_to_dataframe(reports: List[SellerReport]) -> pd.DataFrame:
    """
    販売員別レポートをデータフレームに変換

    Args:
        reports: 利益の降順に並んだ販売員別レポート

    Returns:
        pd.DataFrame: 1行1販売員（順位は1始まり）
    """
    return pd.DataFrame({
        "順位": list(range(1, len(reports) + 1)),
        "販売員ID": [r.seller_id for r in reports],
        "販売員": [r.name for r in reports],
        "売上": [r.revenue for r in reports],
        "利益": [r.profit for r in reports],
        "販売件数": [r.sales_count for r in reports],
        "ボーナス": [r.bonus for r in reports]
    })


class ExcelExporter:
    """
    Excel出力クラス

    使用例:
        exporter = ExcelExporter(reports, output_dir=Path.home() / "Downloads")
        filepath = exporter.export()
    """

    def __init__(
        self,
        reports: List[SellerReport],
        output_dir: Optional[Path] = None,
        filename: Optional[str] = None
    ):
        """
        Args:
            reports: 販売員別レポート
            output_dir: 出力ディレクトリ（デフォルト: ~/Downloads）
            filename: 出力ファイル名（デフォルト: seller_report_YYYYMM.xlsx）
        """
        self.reports = reports
        self.output_dir = Path(output_dir) if output_dir else Path.home() / "Downloads"

        # ファイル名生成
        if filename:
            self.filename = filename
        else:
            now = datetime.now()
            self.filename = f"seller_report_{now.strftime('%Y%m')}.xlsx"

        self.filepath = self.output_dir / self.filename

    def export(self) -> Path:
        """
        Excelファイルを出力

        Returns:
            Path: 出力ファイルパス
        """
        logger.info(f"Excel出力開始: {self.filepath}")

        # 出力ディレクトリ作成
        self.output_dir.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(self.filepath, engine="openpyxl") as writer:
            self._write_summary_sheet(writer)
            self._write_seller_sheet(writer)
            self._write_product_sheet(writer)

        logger.info(f"Excel出力完了: {self.filepath}")
        return self.filepath

    def _write_summary_sheet(self, writer: pd.ExcelWriter) -> None:
        """集計結果シートを出力"""
        summary = ReportSummary(self.reports).calculate()
        summary_data = {
            "項目": [
                "販売員数",
                "総売上",
                "総利益",
                "ボーナス総額",
                "総販売件数",
                "利益1位",
                "利益/販売員"
            ],
            "集計結果": [
                summary.seller_count,
                summary.total_revenue,
                summary.total_profit,
                summary.total_bonus,
                summary.total_sales_count,
                summary.top_seller,
                summary.profit_per_seller
            ]
        }
        summary_df = pd.DataFrame(summary_data)
        summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
        self._format_header(writer.sheets[SUMMARY_SHEET])

    def _write_seller_sheet(self, writer: pd.ExcelWriter) -> None:
        """販売員別シートを出力"""
        seller_df = reports_to_dataframe(self.reports)
        seller_df.to_excel(writer, sheet_name=SELLER_SHEET, index=False)

        sheet = writer.sheets[SELLER_SHEET]
        self._format_header(sheet)
        # 金額列に桁区切りを設定
        for col_idx, column in enumerate(seller_df.columns, start=1):
            if column not in MONEY_COLUMNS:
                continue
            for row in sheet.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                for cell in row:
                    cell.number_format = MONEY_FORMAT

    def _write_product_sheet(self, writer: pd.ExcelWriter) -> None:
        """売れ筋商品シートを出力"""
        rows = []
        for rank, report in enumerate(self.reports, start=1):
            for product_rank, product in enumerate(report.top_products, start=1):
                rows.append({
                    "販売員順位": rank,
                    "販売員": report.name,
                    "順位": product_rank,
                    "SKU": product.sku,
                    "販売数量": product.quantity
                })

        product_df = pd.DataFrame(
            rows, columns=["販売員順位", "販売員", "順位", "SKU", "販売数量"]
        )
        product_df.to_excel(writer, sheet_name=PRODUCT_SHEET, index=False)
        self._format_header(writer.sheets[PRODUCT_SHEET])

    def _format_header(self, sheet) -> None:
        """見出し行を太字・中央揃えにする"""
        for cell in sheet[1]:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center")

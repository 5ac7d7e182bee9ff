"""
全体集計計算モジュール
販売員別レポートから全体の合計値を算出する
"""
from dataclasses import dataclass
from typing import List
import logging

from .sales import SellerReport, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class ReportSummaryResult:
    """全体集計結果を格納するデータクラス"""
    seller_count: int = 0             # 販売員数
    total_revenue: float = 0.0        # 総売上
    total_profit: float = 0.0         # 総利益
    total_bonus: float = 0.0          # ボーナス総額
    total_sales_count: int = 0        # 総販売件数
    top_seller: str = ""              # 利益1位の販売員
    profit_per_seller: float = 0.0    # 利益/販売員

    def to_dict(self):
        """辞書形式に変換"""
        return {
            'seller_count': self.seller_count,
            'total_revenue': self.total_revenue,
            'total_profit': self.total_profit,
            'total_bonus': self.total_bonus,
            'total_sales_count': self.total_sales_count,
            'top_seller': self.top_seller,
            'profit_per_seller': self.profit_per_seller
        }


class ReportSummary:
    """
    全体集計計算クラス

    使用例:
        summary = ReportSummary(reports)
        result = summary.calculate()
    """

    def __init__(self, reports: List[SellerReport]):
        """
        Args:
            reports: 利益の降順に並んだ販売員別レポート
        """
        self.reports = reports
        self.result = ReportSummaryResult()

    def calculate(self) -> ReportSummaryResult:
        """
        全ての集計を実行

        Returns:
            ReportSummaryResult: 集計結果
        """
        self._calculate_totals()
        self._calculate_per_seller()
        return self.result

    def _calculate_totals(self) -> None:
        """合計値を計算"""
        self.result.seller_count = len(self.reports)
        self.result.total_revenue = round_half_up(sum(r.revenue for r in self.reports))
        self.result.total_profit = round_half_up(sum(r.profit for r in self.reports))
        self.result.total_bonus = round_half_up(sum(r.bonus for r in self.reports))
        self.result.total_sales_count = sum(r.sales_count for r in self.reports)
        self.result.top_seller = self.reports[0].name if self.reports else ""
        logger.info(f"総売上: {self.result.total_revenue:,.2f}")
        logger.info(f"総利益: {self.result.total_profit:,.2f}")

    def _calculate_per_seller(self) -> None:
        """販売員1人あたりの利益を計算"""
        if self.result.seller_count > 0:
            self.result.profit_per_seller = round_half_up(
                self.result.total_profit / self.result.seller_count
            )
        else:
            self.result.profit_per_seller = 0.0
        logger.info(f"利益/販売員: {self.result.profit_per_seller:,.2f}")

"""
集計ロジック
"""

from .sales import (
    SalesAggregator,
    analyze_sales_data,
    AnalysisOptions,
    SalesPolicies,
    SalesData,
    Seller,
    Product,
    Item,
    PurchaseRecord,
    SellerSnapshot,
    SellerReport,
    TopProduct,
    SalesAnalysisError,
    InvalidInputError,
    MissingPolicyError,
    InvalidPolicyTypeError,
)
from .policies import (
    calculate_simple_revenue,
    calculate_bonus_by_profit,
    calculate_tiered_bonus,
    get_policies,
)
from .summary import ReportSummary
from .excel_output import ExcelExporter

__all__ = [
    'SalesAggregator',
    'analyze_sales_data',
    'AnalysisOptions',
    'SalesPolicies',
    'SalesData',
    'Seller',
    'Product',
    'Item',
    'PurchaseRecord',
    'SellerSnapshot',
    'SellerReport',
    'TopProduct',
    'SalesAnalysisError',
    'InvalidInputError',
    'MissingPolicyError',
    'InvalidPolicyTypeError',
    'calculate_simple_revenue',
    'calculate_bonus_by_profit',
    'calculate_tiered_bonus',
    'get_policies',
    'ReportSummary',
    'ExcelExporter'
]

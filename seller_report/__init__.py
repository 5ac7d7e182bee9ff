"""
販売員別売上レポート
"""

from .aggregator import (
    analyze_sales_data,
    SalesAggregator,
    AnalysisOptions,
    SalesPolicies,
    SalesData,
    SellerReport,
    SalesAnalysisError,
    InvalidInputError,
    MissingPolicyError,
    InvalidPolicyTypeError,
)

__version__ = "1.0.0"

__all__ = [
    'analyze_sales_data',
    'SalesAggregator',
    'AnalysisOptions',
    'SalesPolicies',
    'SalesData',
    'SellerReport',
    'SalesAnalysisError',
    'InvalidInputError',
    'MissingPolicyError',
    'InvalidPolicyTypeError'
]

from seller_report.aggregator import ReportSummary, SellerReport, TopProduct


def make_report(seller_id, revenue, profit, bonus, sales_count=1):
    return SellerReport(
        seller_id=seller_id,
        name=f"Seller {seller_id}",
        revenue=revenue,
        profit=profit,
        sales_count=sales_count,
        top_products=(TopProduct(sku="X", quantity=1),),
        bonus=bonus
    )


class TestReportSummary:
    def test_totals(self):
        reports = [
            make_report(1, 400.10, 300.05, 45.01, sales_count=3),
            make_report(2, 290.20, 130.10, 0, sales_count=2),
        ]
        result = ReportSummary(reports).calculate()

        assert result.seller_count == 2
        assert result.total_revenue == 690.3
        assert result.total_profit == 430.15
        assert result.total_bonus == 45.01
        assert result.total_sales_count == 5
        assert result.top_seller == "Seller 1"
        assert result.profit_per_seller == 215.08

    def test_empty(self):
        result = ReportSummary([]).calculate()

        assert result.seller_count == 0
        assert result.total_profit == 0
        assert result.top_seller == ""
        assert result.profit_per_seller == 0

    def test_to_dict(self):
        result = ReportSummary([make_report(1, 10, 5, 1)]).calculate()
        assert result.to_dict() == {
            'seller_count': 1,
            'total_revenue': 10.0,
            'total_profit': 5.0,
            'total_bonus': 1.0,
            'total_sales_count': 1,
            'top_seller': 'Seller 1',
            'profit_per_seller': 5.0
        }

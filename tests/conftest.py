import pytest

from seller_report.aggregator import SalesPolicies, calculate_simple_revenue


@pytest.fixture
def simple_revenue_policies():
    """割引適用売上と、利益をそのまま返すボーナス"""
    return SalesPolicies(
        calculate_revenue=calculate_simple_revenue,
        calculate_bonus=lambda rank, total, seller: seller.profit
    )


@pytest.fixture
def single_seller_data():
    """販売員1人・商品1つ・購買記録1件"""
    return {
        "sellers": [{"id": 1, "first_name": "A", "last_name": "B"}],
        "products": [{"sku": "X", "purchase_price": 10}],
        "purchase_records": [
            {"seller_id": 1, "items": [{"sku": "X", "quantity": 2, "sale_price": 20, "discount": 0}]}
        ],
    }


@pytest.fixture
def store_data():
    """販売員3人（うち1人は購買記録なし）・商品3つ"""
    return {
        "sellers": [
            {"id": "s1", "first_name": "Ivan", "last_name": "Petrov"},
            {"id": "s2", "first_name": "Anna", "last_name": "Smirnova"},
            {"id": "s3", "first_name": "Oleg", "last_name": "Ivanov"},
        ],
        "products": [
            {"sku": "P1", "purchase_price": 50},
            {"sku": "P2", "purchase_price": 10},
            {"sku": "P3", "purchase_price": 100},
        ],
        "purchase_records": [
            {
                "seller_id": "s1",
                "items": [
                    {"sku": "P1", "quantity": 2, "sale_price": 100, "discount": 10},
                    {"sku": "P2", "quantity": 5, "sale_price": 20, "discount": 0},
                ],
            },
            {
                "seller_id": "s2",
                "items": [
                    {"sku": "P3", "quantity": 1, "sale_price": 400, "discount": 0},
                ],
            },
            {
                "seller_id": "s1",
                "items": [
                    {"sku": "P2", "quantity": 1, "sale_price": 20, "discount": 50},
                ],
            },
        ],
    }

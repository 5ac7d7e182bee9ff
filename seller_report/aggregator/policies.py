"""
計算ポリシーモジュール
売上計算・ボーナス計算の差し替え可能な関数群
"""
import logging

from .sales import Item, Product, SellerSnapshot, SalesPolicies, round_half_up

logger = logging.getLogger(__name__)

# 順位連動ボーナスの基準額
BONUS_BASE = 1000

# 段階ボーナスの利益に対する割合
TIER_FIRST_RATE = 0.15      # 1位
TIER_SECOND_RATE = 0.10     # 2位・3位
TIER_DEFAULT_RATE = 0.05    # 4位以降（最下位を除く）
TIER_LAST_RATE = 0          # 最下位


def calculate_simple_revenue(item: Item, product: Product) -> float:
    """
    割引適用後の売上額を計算

    Args:
        item: 購買記録の明細
        product: 商品マスタ（この計算では使用しない）

    Returns:
        float: 販売単価 × 数量 × (1 - 割引率)
    """
    return item.discounted_amount


def calculate_bonus_by_profit(rank: int, total: int, seller: SellerSnapshot) -> int:
    """
    順位に比例して減っていくボーナス（1位が基準額）

    Args:
        rank: 利益順位（0始まり）
        total: 販売員数
        seller: 販売員の集計値

    Returns:
        int: 基準額 × (1 - 順位 / 販売員数) を整数に四捨五入した額
    """
    return int(round_half_up(BONUS_BASE * (1 - rank / total), 0))


def calculate_tiered_bonus(rank: int, total: int, seller: SellerSnapshot) -> float:
    """
    利益順位の区分に応じたボーナス

    1位は利益の15%、最下位は0、2位・3位は10%、それ以外は5%。
    販売員が2人の場合、2位は最下位として扱う。
    """
    if rank == 0:
        return seller.profit * TIER_FIRST_RATE
    if rank == total - 1:
        return seller.profit * TIER_LAST_RATE
    if rank <= 2:
        return seller.profit * TIER_SECOND_RATE
    return seller.profit * TIER_DEFAULT_RATE


# ボーナス計算方法の名前マッピング
BONUS_POLICIES = {
    'linear': calculate_bonus_by_profit,
    'tiered': calculate_tiered_bonus,
}


def get_policies(bonus: str = 'linear') -> SalesPolicies:
    """
    名前からポリシー一式を取得

    Args:
        bonus: ボーナス計算方法（linear / tiered）

    Returns:
        SalesPolicies: 割引適用売上とボーナス計算の組み合わせ

    Raises:
        ValueError: 未知のボーナス計算方法の場合
    """
    if bonus not in BONUS_POLICIES:
        raise ValueError(
            f"ボーナス計算方法が不正です: {bonus}（{' / '.join(BONUS_POLICIES)}）"
        )
    logger.debug(f"ボーナス計算方法: {bonus}")
    return SalesPolicies(
        calculate_revenue=calculate_simple_revenue,
        calculate_bonus=BONUS_POLICIES[bonus]
    )

"""
販売員別売上分析モジュール
購買記録から販売員ごとの売上・利益・ボーナス・売れ筋商品を集計する
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# 売れ筋商品の最大件数
TOP_PRODUCTS_LIMIT = 10

# 販売件数のカウント方法
SALES_COUNT_RECORDS = "records"   # 購買記録1件につき1
SALES_COUNT_UNITS = "units"       # 販売数量の合計
SALES_COUNT_MODES = (SALES_COUNT_RECORDS, SALES_COUNT_UNITS)

REQUIRED_COLLECTIONS = ("sellers", "products", "purchase_records")
REQUIRED_POLICIES = ("calculate_revenue", "calculate_bonus")


class SalesAnalysisError(Exception):
    """売上分析の例外基底クラス"""


class InvalidInputError(SalesAnalysisError):
    """入力データの形式が不正な場合の例外"""
    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class MissingPolicyError(SalesAnalysisError):
    """必須の計算ポリシーが指定されていない場合の例外"""
    def __init__(self, missing: list):
        self.missing = missing
        message = f"計算ポリシーが指定されていません: {', '.join(missing)}"
        super().__init__(message)


class InvalidPolicyTypeError(SalesAnalysisError):
    """計算ポリシーが呼び出し可能でない場合の例外"""
    def __init__(self, policy_name: str, value: Any):
        self.policy_name = policy_name
        message = f"計算ポリシー {policy_name} が関数ではありません: {type(value).__name__}"
        super().__init__(message)


def round_half_up(value: float, places: int = 2) -> float:
    """四捨五入（0から遠い方向へ丸める）"""
    number = Decimal(str(value))
    if not number.is_finite():
        return float(value)
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # 桁数の大きい値でも quantize できる精度にする
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        return float(number.quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Seller:
    """販売員"""
    id: Any
    first_name: str = ""
    last_name: str = ""

    @property
    def name(self) -> str:
        """表示名"""
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_dict(cls, raw: Mapping) -> "Seller":
        return cls(
            id=raw["id"],
            first_name=raw.get("first_name", ""),
            last_name=raw.get("last_name", "")
        )


@dataclass(frozen=True)
class Product:
    """商品マスタ"""
    sku: str
    purchase_price: float
    name: Optional[str] = None
    category: Optional[str] = None
    sale_price: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Mapping) -> "Product":
        return cls(
            sku=raw["sku"],
            purchase_price=raw["purchase_price"],
            name=raw.get("name"),
            category=raw.get("category"),
            sale_price=raw.get("sale_price")
        )


@dataclass(frozen=True)
class Item:
    """購買記録の明細"""
    sku: str
    quantity: int
    sale_price: float
    discount: float = 0  # パーセンテージ（0〜100）

    @property
    def discounted_amount(self) -> float:
        """割引適用後の販売額"""
        return self.sale_price * self.quantity * (1 - self.discount / 100)

    @classmethod
    def from_dict(cls, raw: Mapping) -> "Item":
        return cls(
            sku=raw["sku"],
            quantity=raw["quantity"],
            sale_price=raw["sale_price"],
            discount=raw.get("discount", 0)
        )


@dataclass(frozen=True)
class PurchaseRecord:
    """購買記録（レシート1枚分）"""
    seller_id: Any
    items: Tuple[Item, ...] = ()
    total_amount: Optional[float] = None
    receipt_id: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping) -> "PurchaseRecord":
        items = raw["items"]
        if not isinstance(items, (list, tuple)):
            raise TypeError(f"items がリストではありません: {type(items).__name__}")
        return cls(
            seller_id=raw["seller_id"],
            items=tuple(_to_model(Item, item) for item in items),
            total_amount=raw.get("total_amount"),
            receipt_id=raw.get("receipt_id")
        )


@dataclass
class SalesData:
    """分析対象データ一式"""
    sellers: List[Seller] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    purchase_records: List[PurchaseRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Mapping) -> "SalesData":
        """
        辞書（JSONデータ）から生成

        Raises:
            InvalidInputError: 必須項目がない、または要素の形式が不正な場合
        """
        missing = [name for name in REQUIRED_COLLECTIONS if name not in raw]
        if missing:
            raise InvalidInputError(f"必須項目がありません: {missing}", missing[0])
        return cls(**{name: _convert_collection(name, raw[name]) for name in REQUIRED_COLLECTIONS})


@dataclass(frozen=True)
class SellerSnapshot:
    """ボーナス計算ポリシーに渡す販売員の集計値（丸め前）"""
    seller_id: Any
    name: str
    revenue: float
    profit: float
    sales_count: int


@dataclass(frozen=True)
class TopProduct:
    """売れ筋商品"""
    sku: str
    quantity: int

    def to_dict(self):
        """辞書形式に変換"""
        return {'sku': self.sku, 'quantity': self.quantity}


@dataclass(frozen=True)
class SellerReport:
    """販売員別レポート"""
    seller_id: Any
    name: str
    revenue: float
    profit: float
    sales_count: int
    top_products: Tuple[TopProduct, ...]
    bonus: float

    def to_dict(self):
        """辞書形式に変換"""
        return {
            'seller_id': self.seller_id,
            'name': self.name,
            'revenue': self.revenue,
            'profit': self.profit,
            'sales_count': self.sales_count,
            'top_products': [p.to_dict() for p in self.top_products],
            'bonus': self.bonus
        }


RevenuePolicy = Callable[[Item, Product], float]
BonusPolicy = Callable[[int, int, SellerSnapshot], float]


@dataclass
class SalesPolicies:
    """売上・ボーナス計算ポリシー"""
    calculate_revenue: Optional[RevenuePolicy] = None
    calculate_bonus: Optional[BonusPolicy] = None


@dataclass(frozen=True)
class AnalysisOptions:
    """
    集計オプション

    sales_count_mode: 販売件数を購買記録数で数えるか（records）、販売数量で数えるか（units）
    include_inactive_sellers: 購買記録のない販売員もレポートに含めるか
    top_products_limit: 売れ筋商品の最大件数
    """
    sales_count_mode: str = SALES_COUNT_RECORDS
    include_inactive_sellers: bool = False
    top_products_limit: int = TOP_PRODUCTS_LIMIT

    def __post_init__(self):
        if self.sales_count_mode not in SALES_COUNT_MODES:
            raise ValueError(
                f"販売件数のカウント方法が不正です: {self.sales_count_mode} "
                f"（{' / '.join(SALES_COUNT_MODES)}）"
            )
        if self.top_products_limit < 1:
            raise ValueError(f"売れ筋商品の件数は1以上を指定してください: {self.top_products_limit}")

    @classmethod
    def from_config(cls, cfg) -> "AnalysisOptions":
        """設定クラスからオプションを生成"""
        return cls(
            sales_count_mode=cfg.SALES_COUNT_MODE,
            include_inactive_sellers=cfg.INCLUDE_INACTIVE_SELLERS,
            top_products_limit=cfg.TOP_PRODUCTS_LIMIT
        )


@dataclass
class SellerAccumulator:
    """販売員ごとの集計途中の値（集計処理の内部でのみ使用）"""
    seller: Seller
    revenue: float = 0.0
    profit: float = 0.0
    sales_count: int = 0
    record_count: int = 0
    product_sales: Dict[str, int] = field(default_factory=dict)  # sku -> 数量

    def snapshot(self) -> SellerSnapshot:
        return SellerSnapshot(
            seller_id=self.seller.id,
            name=self.seller.name,
            revenue=self.revenue,
            profit=self.profit,
            sales_count=self.sales_count
        )

    def top_products(self, limit: int) -> Tuple[TopProduct, ...]:
        # 同数の場合は先に売れた商品が先
        ranked = sorted(self.product_sales.items(), key=lambda kv: kv[1], reverse=True)
        return tuple(TopProduct(sku=sku, quantity=qty) for sku, qty in ranked[:limit])


def _to_model(model, raw):
    if isinstance(raw, model):
        return raw
    if isinstance(raw, Mapping):
        return model.from_dict(raw)
    raise TypeError(f"{model.__name__} に変換できません: {type(raw).__name__}")


MODEL_TYPES = {
    "sellers": Seller,
    "products": Product,
    "purchase_records": PurchaseRecord,
}


def _convert_collection(name: str, elements: Any) -> list:
    """コレクションの各要素をデータクラスに変換"""
    if not isinstance(elements, (list, tuple)):
        raise InvalidInputError(f"{name} がリストではありません: {type(elements).__name__}", name)
    converted = []
    for index, raw in enumerate(elements):
        try:
            converted.append(_to_model(MODEL_TYPES[name], raw))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"{name}[{index}] の形式が不正です: {e}", name) from e
    return converted


class SalesAggregator:
    """
    販売員別売上集計クラス

    使用例:
        aggregator = SalesAggregator(data, SalesPolicies(calculate_simple_revenue, calculate_bonus_by_profit))
        reports = aggregator.analyze()
    """

    def __init__(
        self,
        data: Any,
        policies: Any,
        options: Optional[AnalysisOptions] = None,
        progress_callback: Optional[Callable[[str, int], None]] = None
    ):
        """
        Args:
            data: SalesData または sellers / products / purchase_records を持つ辞書
            policies: SalesPolicies または calculate_revenue / calculate_bonus を持つ辞書
            options: 集計オプション
            progress_callback: 進捗通知用コールバック (message, percentage)
        """
        self.data = data
        self.policies = policies
        self.options = options or AnalysisOptions()
        self.progress_callback = progress_callback

        self.sales_data: Optional[SalesData] = None
        self.revenue_policy: Optional[RevenuePolicy] = None
        self.bonus_policy: Optional[BonusPolicy] = None
        # スキップ件数
        self.skipped_records: int = 0
        self.skipped_items: int = 0

        self._collections: Dict[str, Any] = {}
        self._accumulators: Dict[Any, SellerAccumulator] = {}
        self._products: Dict[Any, Product] = {}

    def _notify_progress(self, message: str, percentage: int):
        """進捗を通知"""
        logger.info(f"[{percentage}%] {message}")
        if self.progress_callback:
            self.progress_callback(message, percentage)

    def analyze(self) -> List[SellerReport]:
        """
        全ての集計を実行

        Returns:
            List[SellerReport]: 利益の降順に並んだ販売員別レポート

        Raises:
            InvalidInputError: 入力データの形式が不正な場合
            MissingPolicyError: 計算ポリシーが不足している場合
            InvalidPolicyTypeError: 計算ポリシーが関数でない場合
        """
        self._notify_progress("入力データの検証を開始", 0)

        # Step 1: 入力チェック（集計開始前に全て行う）
        self._validate_data()
        self._validate_policies()
        self._convert_data()
        self._notify_progress("入力データ検証完了", 10)

        # Step 2: 販売員・商品の索引作成
        self._build_indexes()
        self._notify_progress("索引作成完了", 20)

        # Step 3: 購買記録の集計
        self._fold_records()
        self._notify_progress("購買記録の集計完了", 60)

        # Step 4: 利益順の並べ替え
        ranked = self._rank_sellers()
        self._notify_progress("利益順の並べ替え完了", 70)

        # Step 5: ボーナス計算
        bonuses = self._assign_bonuses(ranked)
        self._notify_progress("ボーナス計算完了", 85)

        # Step 6: レポート作成
        reports = self._build_reports(ranked, bonuses)
        self._accumulators = {}
        self._notify_progress("集計完了", 100)
        return reports

    def _validate_data(self) -> None:
        """
        入力データの形式チェック

        Raises:
            InvalidInputError: データがない、コレクションが不足・空・シーケンスでない場合
        """
        data = self.data
        if data is None:
            raise InvalidInputError("入力データが指定されていません")

        if isinstance(data, SalesData):
            raw = {name: getattr(data, name) for name in REQUIRED_COLLECTIONS}
        elif isinstance(data, Mapping):
            raw = data
        else:
            raise InvalidInputError(f"入力データの形式が不正です: {type(data).__name__}")

        for name in REQUIRED_COLLECTIONS:
            collection = raw.get(name)
            if collection is None:
                raise InvalidInputError(f"{name} がありません", name)
            if not isinstance(collection, (list, tuple)):
                raise InvalidInputError(
                    f"{name} がリストではありません: {type(collection).__name__}", name
                )
            if len(collection) == 0:
                raise InvalidInputError(f"{name} が空です", name)
            self._collections[name] = collection

    def _get_policy(self, name: str) -> Any:
        if self.policies is None:
            return None
        if isinstance(self.policies, Mapping):
            return self.policies.get(name)
        return getattr(self.policies, name, None)

    def _validate_policies(self) -> None:
        """
        計算ポリシーのチェック

        Raises:
            MissingPolicyError: ポリシーが不足している場合
            InvalidPolicyTypeError: ポリシーが関数でない場合
        """
        found = {name: self._get_policy(name) for name in REQUIRED_POLICIES}

        missing = [name for name, policy in found.items() if policy is None]
        if missing:
            raise MissingPolicyError(missing)

        for name, policy in found.items():
            if not callable(policy):
                raise InvalidPolicyTypeError(name, policy)

        self.revenue_policy = found["calculate_revenue"]
        self.bonus_policy = found["calculate_bonus"]

    def _convert_data(self) -> None:
        """辞書形式の要素をデータクラスに変換"""
        self.sales_data = SalesData(**{
            name: _convert_collection(name, self._collections[name])
            for name in REQUIRED_COLLECTIONS
        })
        logger.info(
            f"入力データ: 販売員{len(self.sales_data.sellers)}件, "
            f"商品{len(self.sales_data.products)}件, "
            f"購買記録{len(self.sales_data.purchase_records)}件"
        )

    def _build_indexes(self) -> None:
        """販売員ID→集計値、SKU→商品の索引を作成"""
        self._accumulators = {}
        self._products = {}
        self.skipped_records = 0
        self.skipped_items = 0

        for seller in self.sales_data.sellers:
            if seller.id in self._accumulators:
                logger.warning(f"販売員IDが重複しています（最初の登録を使用）: {seller.id}")
                continue
            self._accumulators[seller.id] = SellerAccumulator(seller=seller)

        for product in self.sales_data.products:
            if product.sku in self._products:
                logger.warning(f"SKUが重複しています（最初の登録を使用）: {product.sku}")
                continue
            self._products[product.sku] = product

    def _fold_records(self) -> None:
        """購買記録を1回走査して販売員ごとに集計"""
        count_units = self.options.sales_count_mode == SALES_COUNT_UNITS

        for record in self.sales_data.purchase_records:
            accumulator = self._accumulators.get(record.seller_id)
            if accumulator is None:
                logger.debug(f"未登録の販売員のためスキップ: seller_id={record.seller_id}")
                self.skipped_records += 1
                continue

            accumulator.record_count += 1
            if not count_units:
                accumulator.sales_count += 1

            has_total = record.total_amount is not None
            if has_total:
                accumulator.revenue += record.total_amount

            for item in record.items:
                product = self._products.get(item.sku)
                if product is None:
                    logger.debug(f"未登録の商品のためスキップ: sku={item.sku}")
                    self.skipped_items += 1
                    continue

                cost = product.purchase_price * item.quantity
                revenue = self.revenue_policy(item, product)
                accumulator.profit += revenue - cost

                if not has_total:
                    accumulator.revenue += item.discounted_amount
                if count_units:
                    accumulator.sales_count += item.quantity

                accumulator.product_sales[item.sku] = (
                    accumulator.product_sales.get(item.sku, 0) + item.quantity
                )

        if self.skipped_records or self.skipped_items:
            logger.info(
                f"スキップ: 購買記録{self.skipped_records}件（未登録の販売員）, "
                f"明細{self.skipped_items}件（未登録の商品）"
            )

    def _rank_sellers(self) -> List[SellerAccumulator]:
        """利益の降順に並べ替え（同額は入力順）"""
        if self.options.include_inactive_sellers:
            targets = list(self._accumulators.values())
        else:
            targets = [a for a in self._accumulators.values() if a.record_count > 0]
        return sorted(targets, key=lambda a: a.profit, reverse=True)

    def _assign_bonuses(self, ranked: List[SellerAccumulator]) -> List[float]:
        """順位に応じたボーナスを計算"""
        total = len(ranked)
        bonuses = []
        for rank, accumulator in enumerate(ranked):
            bonus = self.bonus_policy(rank, total, accumulator.snapshot())
            bonuses.append(bonus)
            logger.debug(f"{rank + 1}位 {accumulator.seller.name}: 利益{accumulator.profit:,.2f} ボーナス{bonus}")
        return bonuses

    def _build_reports(
        self, ranked: List[SellerAccumulator], bonuses: List[float]
    ) -> List[SellerReport]:
        """販売員別レポートを作成（金額はここで初めて丸める）"""
        limit = self.options.top_products_limit
        reports = []
        for accumulator, bonus in zip(ranked, bonuses):
            reports.append(SellerReport(
                seller_id=accumulator.seller.id,
                name=accumulator.seller.name,
                revenue=round_half_up(accumulator.revenue),
                profit=round_half_up(accumulator.profit),
                sales_count=accumulator.sales_count,
                top_products=accumulator.top_products(limit),
                bonus=round_half_up(bonus)
            ))
        logger.info(f"販売員別レポート: {len(reports)}件")
        return reports


def analyze_sales_data(
    data: Any,
    policies: Any,
    options: Optional[AnalysisOptions] = None
) -> List[SellerReport]:
    """
    販売データを分析して販売員別レポートを返す

    Args:
        data: SalesData または sellers / products / purchase_records を持つ辞書
        policies: SalesPolicies または calculate_revenue / calculate_bonus を持つ辞書
        options: 集計オプション（省略時はデフォルト）

    Returns:
        List[SellerReport]: 利益の降順に並んだ販売員別レポート
    """
    return SalesAggregator(data, policies, options).analyze()

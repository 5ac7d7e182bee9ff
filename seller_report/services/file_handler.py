"""
ファイル処理サービス
"""
import json
import pandas as pd
from pathlib import Path
from typing import List
import logging

from ..aggregator.sales import (
    SalesData, Seller, Product, Item, PurchaseRecord, InvalidInputError
)

logger = logging.getLogger(__name__)


class FileHandler:
    """
    ファイル処理クラス

    JSON/CSV/Excelファイルの読み込みとバリデーションを担当
    """

    # ファイルエンコーディング
    ENCODING = "utf-8"

    # 表形式で読み込める拡張子
    TABLE_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

    def __init__(self, encoding: str = None):
        """
        Args:
            encoding: JSON/CSVファイルのエンコーディング
        """
        self.encoding = encoding or self.ENCODING

    def read_dataset(self, filepath: Path) -> SalesData:
        """
        販売データJSONを読み込み

        Args:
            filepath: sellers / products / purchase_records を持つJSONファイル

        Returns:
            SalesData: 販売データ
        """
        filepath = Path(filepath)
        with open(filepath, encoding=self.encoding) as f:
            raw = json.load(f)

        if not isinstance(raw, dict):
            raise InvalidInputError(f"販売データの形式が不正です: {filepath.name}")

        data = SalesData.from_dict(raw)
        logger.info(
            f"販売データ読み込み: 販売員{len(data.sellers)}件, "
            f"商品{len(data.products)}件, 購買記録{len(data.purchase_records)}件"
        )
        return data

    def read_sellers_table(self, filepath: Path) -> List[Seller]:
        """
        販売員マスタを読み込み

        Args:
            filepath: CSV/Excelファイルパス

        Returns:
            List[Seller]: 販売員
        """
        df = self._read_table(filepath)
        logger.info(f"販売員マスタ読み込み: {len(df)}件")

        required_cols = ["id", "first_name", "last_name"]
        self._validate_columns(df, required_cols, "販売員マスタ")
        self._validate_values(df, ["id"], "販売員マスタ")
        name_cols = ["first_name", "last_name"]
        df[name_cols] = df[name_cols].fillna("")

        return [Seller.from_dict(row) for row in df.to_dict(orient="records")]

    def read_products_table(self, filepath: Path) -> List[Product]:
        """
        商品マスタを読み込み

        Args:
            filepath: CSV/Excelファイルパス

        Returns:
            List[Product]: 商品
        """
        df = self._read_table(filepath)
        logger.info(f"商品マスタ読み込み: {len(df)}件")

        required_cols = ["sku", "purchase_price"]
        self._validate_columns(df, required_cols, "商品マスタ")
        self._validate_values(df, required_cols, "商品マスタ")

        # 任意列の空欄はNoneにする
        df = df.astype(object).where(pd.notna(df), None)
        return [Product.from_dict(row) for row in df.to_dict(orient="records")]

    def read_purchase_items_table(self, filepath: Path) -> List[PurchaseRecord]:
        """
        購買明細を読み込み、レシート単位の購買記録にまとめる

        1行1明細の表をreceipt_idでまとめる。レシートの順序は最初に現れた順。
        total_amount列がある場合、レシート内の最初の値を使う。

        Args:
            filepath: CSV/Excelファイルパス

        Returns:
            List[PurchaseRecord]: 購買記録
        """
        df = self._read_table(filepath)
        logger.info(f"購買明細読み込み: {len(df)}件")

        required_cols = ["receipt_id", "seller_id", "sku", "quantity", "sale_price"]
        self._validate_columns(df, required_cols, "購買明細")
        self._validate_values(df, required_cols, "購買明細")

        if "discount" not in df.columns:
            df["discount"] = 0
        df["discount"] = df["discount"].fillna(0)

        records = []
        for _, group in df.groupby("receipt_id", sort=False):
            lines = group.to_dict(orient="records")
            if group["seller_id"].nunique() > 1:
                raise InvalidInputError(
                    f"購買明細のレシート{lines[0]['receipt_id']}に複数の販売員が含まれています: "
                    f"{group['seller_id'].unique().tolist()}",
                    "seller_id"
                )
            items = tuple(Item.from_dict(line) for line in lines)

            total_amount = None
            if "total_amount" in group.columns:
                totals = group["total_amount"].dropna()
                if not totals.empty:
                    total_amount = float(totals.iloc[0])

            records.append(PurchaseRecord(
                seller_id=lines[0]["seller_id"],
                items=items,
                total_amount=total_amount,
                receipt_id=lines[0]["receipt_id"]
            ))

        logger.info(f"購買記録: {len(records)}件")
        return records

    def read_tables(
        self, sellers_path: Path, products_path: Path, items_path: Path
    ) -> SalesData:
        """
        3つの表から販売データを作成

        Args:
            sellers_path: 販売員マスタ
            products_path: 商品マスタ
            items_path: 購買明細

        Returns:
            SalesData: 販売データ
        """
        return SalesData(
            sellers=self.read_sellers_table(sellers_path),
            products=self.read_products_table(products_path),
            purchase_records=self.read_purchase_items_table(items_path)
        )

    def _read_table(self, filepath: Path) -> pd.DataFrame:
        """拡張子に応じてCSV/Excelを読み込み"""
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()
        if suffix not in self.TABLE_EXTENSIONS:
            raise ValueError(f"対応していないファイル形式です: {filepath.name}")
        if suffix == ".csv":
            return pd.read_csv(filepath, encoding=self.encoding)
        return pd.read_excel(filepath, sheet_name=0)

    def _validate_columns(
        self, df: pd.DataFrame, required: list, name: str
    ) -> None:
        """
        必須カラムの存在チェック

        Args:
            df: データフレーム
            required: 必須カラムリスト
            name: データ名（エラーメッセージ用）

        Raises:
            InvalidInputError: 必須カラムが不足している場合
        """
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise InvalidInputError(
                f"{name}に必須カラムがありません: {missing}", missing[0]
            )

    def _validate_values(
        self, df: pd.DataFrame, required: list, name: str
    ) -> None:
        """
        必須カラムの空欄チェック

        Args:
            df: データフレーム
            required: 空欄を許さないカラムリスト
            name: データ名（エラーメッセージ用）

        Raises:
            InvalidInputError: 必須カラムに空欄がある場合
        """
        for col in required:
            blank = df[col].isna()
            if blank.any():
                # 見出し行を含めたファイル上の行番号
                rows = (df.index[blank] + 2).tolist()
                raise InvalidInputError(
                    f"{name}の{col}に空欄があります: {rows}行目", col
                )

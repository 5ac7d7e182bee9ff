"""
アプリケーション設定
"""
import os
from pathlib import Path


class Config:
    """アプリケーション設定クラス"""

    # 集計設定
    TOP_PRODUCTS_LIMIT = int(os.getenv('SELLER_REPORT_TOP_PRODUCTS', 10))
    SALES_COUNT_MODE = os.getenv('SELLER_REPORT_SALES_COUNT', 'records')
    INCLUDE_INACTIVE_SELLERS = os.getenv('SELLER_REPORT_INCLUDE_INACTIVE', 'false').lower() == 'true'
    BONUS_POLICY = os.getenv('SELLER_REPORT_BONUS', 'linear')

    # パス設定
    OUTPUT_DIR = Path(os.getenv('SELLER_REPORT_OUTPUT_DIR', str(Path.home() / 'Downloads')))

    # ファイルエンコーディング
    ENCODING = os.getenv('SELLER_REPORT_ENCODING', 'utf-8')

    # ログ設定
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DevelopmentConfig(Config):
    """開発環境設定"""
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """本番環境設定"""


class TestingConfig(Config):
    """テスト環境設定"""
    TOP_PRODUCTS_LIMIT = 10
    SALES_COUNT_MODE = 'records'
    INCLUDE_INACTIVE_SELLERS = False
    BONUS_POLICY = 'linear'
    LOG_LEVEL = 'WARNING'


# 設定マッピング
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig
}


def get_config():
    """現在の設定を取得"""
    env = os.getenv('SELLER_REPORT_ENV', 'default')
    return config.get(env, config['default'])

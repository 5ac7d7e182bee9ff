"""
入出力サービス
"""

from .file_handler import FileHandler

__all__ = ['FileHandler']

"""
エラーハンドリングパッケージ
"""

from .exceptions import (
    ActionsReportError,
    InputError,
    FileProcessingError,
    ConfigurationError,
    EncodingDetectionError
)
from .error_handler import ErrorHandler

__all__ = [
    'ActionsReportError',
    'InputError',
    'FileProcessingError',
    'ConfigurationError',
    'EncodingDetectionError',
    'ErrorHandler'
]

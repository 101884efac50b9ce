"""
Actionsレポート フィルター・コミッション集計パッケージ
"""

from .file_handlers.json_handler import JSONReportHandler
from .file_handlers.report_exporter import ReportExporter
from .error_handling.exceptions import (
    ActionsReportError,
    InputError,
    FileProcessingError,
    ConfigurationError,
    EncodingDetectionError
)
from .error_handling.error_handler import ErrorHandler
from .logging.unified_logger import UnifiedLogger
from .config.config_manager import ConfigManager
from .utils.encoding_detector import EncodingDetector
from .data_models import (
    ActionRecord,
    DateRange,
    FilterCriteria,
    RecordSkip,
    AggregationResult,
    CommissionSplit,
    ReconciliationResult
)
from .report_filter import ReportFilter, DEFAULT_SAMPLE_SIZE
from .commission import split_commission, net_commission, reconcile

__all__ = [
    'JSONReportHandler',
    'ReportExporter',
    'ActionsReportError',
    'InputError',
    'FileProcessingError',
    'ConfigurationError',
    'EncodingDetectionError',
    'ErrorHandler',
    'UnifiedLogger',
    'ConfigManager',
    'EncodingDetector',
    'ActionRecord',
    'DateRange',
    'FilterCriteria',
    'RecordSkip',
    'AggregationResult',
    'CommissionSplit',
    'ReconciliationResult',
    'ReportFilter',
    'DEFAULT_SAMPLE_SIZE',
    'split_commission',
    'net_commission',
    'reconcile'
]

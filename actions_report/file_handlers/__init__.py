from .json_handler import JSONReportHandler
from .report_exporter import ReportExporter

__all__ = ['JSONReportHandler', 'ReportExporter']

"""
集計結果の出力（サマリー表示・CSV/Excel出力）
"""
import pandas as pd
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..data_models import ActionRecord, AggregationResult, CommissionSplit, ReconciliationResult, format_money
from ..error_handling.exceptions import FileProcessingError


EXPORT_COLUMNS = ['Id', 'EventDate', 'SubId1', 'Payout', 'Amount', 'PayoutValue']


class ReportExporter:
    """集計結果の表示・ファイル出力クラス"""

    def __init__(self, logger=None, error_handler=None):
        self.logger = logger
        self.error_handler = error_handler

    def summary_lines(self, result: AggregationResult, label: Optional[str] = None) -> List[str]:
        """集計結果を表示用の行に整形"""
        prefix = f"{label} - " if label else ""
        lines = [
            f"{prefix}Total actions in response: {result.total_records}",
            f"{prefix}Actions matching criteria: {result.matched_records}",
            f"{prefix}Commissionable actions: {result.commissionable_count}",
            f"{prefix}Total commission: ${result.formatted_commission()}",
        ]

        if result.sample:
            lines.append("")
            lines.append(f"{prefix}Sample actions:")
            for i, record in enumerate(result.sample, 1):
                lines.append(
                    f"{i}. Date: {record.event_date}, Payout: ${record.payout}, Amount: ${record.amount}"
                )

        return lines

    def split_lines(self, split: CommissionSplit) -> List[str]:
        """コミッション配分を表示用の行に整形"""
        return [
            f"Gross commission: ${format_money(split.gross_amount)}",
            f"Creator share ({split.creator_rate}%): ${format_money(split.creator_amount)}",
            f"Platform share ({split.platform_rate}%): ${format_money(split.platform_amount)}",
        ]

    def reconciliation_lines(self, reconciliation: ReconciliationResult) -> List[str]:
        """期待値との照合結果を表示用の行に整形"""
        status = "OK" if reconciliation.matches else "MISMATCH"
        return [
            f"Expected commission: ${format_money(reconciliation.expected)}",
            f"Commission match: {status} "
            f"({format_money(reconciliation.actual)} vs {format_money(reconciliation.expected)})",
            f"Missing commission: ${format_money(reconciliation.missing)}",
        ]

    def to_dataframe(self, records: Iterable[ActionRecord]) -> pd.DataFrame:
        """レコードをDataFrameに変換"""
        rows = []
        for record in records:
            row = {
                'Id': record.action_id,
                'EventDate': record.event_date,
                'SubId1': record.subject_id,
                'Payout': record.payout,
                'Amount': record.amount,
                'PayoutValue': float(record.payout_value),
            }
            rows.append(row)

        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def export_csv(self, records: Iterable[ActionRecord], output_path: Union[str, Path]) -> Path:
        """レコードをCSVに出力"""
        output_path = Path(output_path)
        df = self.to_dataframe(records)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(output_path, index=False, encoding='utf-8-sig')
        except OSError as e:
            self._handle_export_error(e, output_path)

        if self.logger:
            self.logger.info(f"CSV出力完了: {output_path.name} ({len(df)}件)")
        return output_path

    def export_excel(self, records: Iterable[ActionRecord], output_path: Union[str, Path],
                     sheet_name: str = 'Actions') -> Path:
        """レコードをExcelに出力"""
        output_path = Path(output_path)
        df = self.to_dataframe(records)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_excel(output_path, index=False, sheet_name=sheet_name, engine='openpyxl')
        except OSError as e:
            self._handle_export_error(e, output_path)

        if self.logger:
            self.logger.info(f"Excel出力完了: {output_path.name} ({len(df)}件)")
        return output_path

    def export(self, records: Iterable[ActionRecord], output_path: Union[str, Path]) -> Path:
        """拡張子に応じてCSVまたはExcelに出力"""
        output_path = Path(output_path)
        suffix = output_path.suffix.lower()
        if suffix == '.csv':
            return self.export_csv(records, output_path)
        if suffix in ('.xlsx', '.xlsm'):
            return self.export_excel(records, output_path)
        raise FileProcessingError(f"未対応の出力形式です: {output_path.name}")

    def _handle_export_error(self, error: Exception, output_path: Path) -> None:
        if self.error_handler:
            self.error_handler.handle_file_processing_error(error, output_path)
        raise FileProcessingError(f"ファイル出力エラー: {output_path.name} - {str(error)}")

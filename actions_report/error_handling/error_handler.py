"""
統一エラーハンドリングシステム
"""
import logging
import traceback
from pathlib import Path
from typing import Dict, Any, Iterable, Optional


class ErrorHandler:
    """エラーハンドリングの統一クラス"""

    def __init__(self, logger=None):
        # logger未指定時はモジュールロガーにフォールバック
        self.logger = logger or logging.getLogger(__name__)

    def handle_file_processing_error(self, error: Exception, file_path: Optional[Path]) -> None:
        """ファイル処理エラーを処理"""
        error_context = {
            'error_type': type(error).__name__,
            'file_path': str(file_path) if file_path else 'Unknown',
            'file_name': file_path.name if file_path else 'Unknown',
            'error_message': str(error)
        }

        self.log_error_with_context(error, error_context)

    def handle_record_skip(self, skip) -> None:
        """レコード単位のスキップを診断ログとして出力（処理は継続）"""
        self.logger.debug(
            f"レコード除外: index={skip.index}, field={skip.field}, "
            f"reason={skip.reason}, value={skip.value!r}"
        )

    def log_and_continue(self, error: Exception, context: str) -> None:
        """エラーをログ出力して処理を継続"""
        self.logger.error(f"処理継続エラー [{context}]: {str(error)}")
        self.logger.debug(f"エラー詳細: {traceback.format_exc()}")

    def log_and_raise(self, error: Exception, context: str) -> None:
        """エラーをログ出力して例外を再発生"""
        self.logger.error(f"致命的エラー [{context}]: {str(error)}")
        self.logger.debug(f"エラー詳細: {traceback.format_exc()}")

        raise error

    def log_error_with_context(self, error: Exception, context: Dict[str, Any]) -> None:
        """コンテキスト情報付きでエラーをログ出力"""
        context_str = ", ".join([f"{k}={v}" for k, v in context.items()])
        self.logger.error(f"エラー詳細: {context_str}")
        self.logger.debug(f"スタックトレース: {traceback.format_exc()}")

    def create_error_summary(self, errors: list) -> Dict[str, Any]:
        """エラーリストから統計情報を作成"""
        if not errors:
            return {'total_errors': 0, 'error_types': {}}

        error_types = {}
        for error in errors:
            error_type = type(error).__name__
            error_types[error_type] = error_types.get(error_type, 0) + 1

        return {
            'total_errors': len(errors),
            'error_types': error_types,
            'first_error': str(errors[0]),
            'last_error': str(errors[-1])
        }

    def create_skip_summary(self, skips: Iterable) -> Dict[str, Any]:
        """除外レコードを項目別に集計"""
        by_field = {}
        total = 0
        for skip in skips:
            by_field[skip.field] = by_field.get(skip.field, 0) + 1
            total += 1

        return {
            'total_skipped': total,
            'by_field': by_field
        }

"""
Actionsレポート（JSON）の読み込みハンドラー
"""
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from ..data_models import ActionRecord
from ..error_handling.exceptions import EncodingDetectionError, FileProcessingError, InputError
from ..utils.encoding_detector import EncodingDetector


DEFAULT_ACTIONS_KEY = 'Actions'


class JSONReportHandler:
    """APIレスポンスのJSONファイルからActionRecordを読み込むクラス"""

    def __init__(self, logger=None, error_handler=None, actions_key: str = DEFAULT_ACTIONS_KEY):
        self.logger = logger
        self.error_handler = error_handler
        self.actions_key = actions_key
        self.encoding_detector = EncodingDetector(logger)

    def read_json(self, file_path: Union[str, Path]) -> Any:
        """JSONファイルを読み込んでデコード"""
        file_path = Path(file_path)
        if not file_path.is_file():
            raise FileProcessingError(f"レポートファイルが見つかりません: {file_path}")

        try:
            text = self.encoding_detector.read_text(file_path)
        except EncodingDetectionError as e:
            raise FileProcessingError(f"レポートファイル読み込みエラー: {file_path.name} - {str(e)}")

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FileProcessingError(f"JSON形式が無効です: {file_path.name} - {str(e)}")

    def records_from_payload(self, payload: Any, source: str = '<payload>') -> List[Any]:
        """
        デコード済みのレスポンスからレコードを生成

        レコード形式ではない要素は件数に含めるためそのまま残し、
        集計側で除外として記録する。
        """
        if isinstance(payload, Mapping):
            actions = payload.get(self.actions_key)
            if actions is None:
                # Actionsフィールドが無い場合は空として扱う
                if self.logger:
                    self.logger.warning(f"{self.actions_key}フィールドがありません: {source}")
                return []
        elif isinstance(payload, list):
            actions = payload
        else:
            raise InputError(f"レポートの形式が無効です: {source} ({type(payload).__name__})")

        if not isinstance(actions, list):
            raise InputError(
                f"{self.actions_key}がリスト形式ではありません: {source} ({type(actions).__name__})"
            )

        records = []
        for index, action in enumerate(actions):
            if not isinstance(action, Mapping):
                if self.logger:
                    self.logger.debug(f"レコード形式ではない要素: {source}[{index}]")
                records.append(action)
                continue
            records.append(ActionRecord.from_dict(action))

        return records

    def load_actions(self, file_path: Union[str, Path]) -> List[Any]:
        """1ページ分のレポートを読み込み"""
        file_path = Path(file_path)
        try:
            records = self.records_from_payload(self.read_json(file_path), file_path.name)
        except FileProcessingError as e:
            if self.error_handler:
                self.error_handler.handle_file_processing_error(e, file_path)
            raise

        if self.logger:
            self.logger.info(f"レポート読み込み成功: {file_path.name} ({len(records)}件)")
        return records

    def load_pages(self, file_paths: Iterable[Union[str, Path]]) -> List[Any]:
        """複数ページのレポートを指定順に連結して読み込み"""
        all_records = []
        page_count = 0
        for page_number, file_path in enumerate(file_paths, 1):
            records = self.load_actions(file_path)
            if self.logger:
                self.logger.info(f"ページ{page_number}: {len(records)}件")
            all_records.extend(records)
            page_count += 1

        if self.logger:
            self.logger.info(f"全ページ合計: {len(all_records)}件 ({page_count}ページ)")
        return all_records

    def load_actions_safe(self, file_path: Union[str, Path]) -> Optional[List[Any]]:
        """安全な読み込み（エラー時はNoneを返す）"""
        try:
            return self.load_actions(file_path)
        except (FileProcessingError, InputError) as e:
            if self.logger:
                self.logger.error(f"レポート読み込みエラー: {Path(file_path).name} - {str(e)}")
            return None

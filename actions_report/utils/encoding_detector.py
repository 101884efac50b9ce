"""
エンコーディング検出ユーティリティ
"""
import chardet
from pathlib import Path
from typing import List, Optional
from ..error_handling.exceptions import EncodingDetectionError


class EncodingDetector:
    """レポートファイルのエンコーディングを検出するユーティリティクラス"""

    DEFAULT_ENCODINGS = ['utf-8-sig', 'utf-8', 'utf-16', 'cp1252', 'latin-1']

    def __init__(self, logger=None):
        self.logger = logger

    def detect_encoding(self, file_path: Path) -> str:
        """ファイルのエンコーディングを検出"""
        try:
            with open(file_path, 'rb') as f:
                raw_data = f.read()
        except OSError as e:
            if self.logger:
                self.logger.error(f"エンコーディング検出エラー: {file_path.name} - {str(e)}")
            raise EncodingDetectionError(f"エンコーディング検出に失敗: {str(e)}")

        return self.detect_bytes_encoding(raw_data, file_path.name)

    def detect_bytes_encoding(self, raw_data: bytes, label: str = '<bytes>') -> str:
        """バイト列のエンコーディングを検出"""
        if raw_data.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        result = chardet.detect(raw_data)
        if result['encoding']:
            detected_encoding = result['encoding'].lower()
            # ASCIIと判定された場合はUTF-8として読む
            if detected_encoding == 'ascii':
                detected_encoding = 'utf-8'
            if self.logger:
                self.logger.info(f"エンコーディング検出: {label} -> {detected_encoding} (信頼度: {result['confidence']:.2f})")
            return detected_encoding

        if self.logger:
            self.logger.warning(f"エンコーディング検出失敗: {label}")
        return 'utf-8'  # デフォルト

    def try_encodings(self, file_path: Path, encodings: Optional[List[str]] = None) -> str:
        """複数のエンコーディングを順次試行して最初に成功したものを返す"""
        if encodings is None:
            encodings = self.DEFAULT_ENCODINGS

        for encoding in encodings:
            try:
                with open(file_path, 'r', encoding=encoding) as f:
                    f.read()

                if self.logger:
                    self.logger.info(f"エンコーディング試行成功: {file_path.name} -> {encoding}")
                return encoding

            except (UnicodeDecodeError, UnicodeError, LookupError):
                continue

        raise EncodingDetectionError(f"すべてのエンコーディングで読み込みに失敗: {file_path.name}")

    def read_text(self, file_path: Path) -> str:
        """エンコーディングを自動判定してテキストを読み込み"""
        encoding = self.detect_encoding(file_path)
        try:
            return file_path.read_text(encoding=encoding)
        except (UnicodeDecodeError, UnicodeError, LookupError):
            if self.logger:
                self.logger.debug(f"検出エンコーディングで読み込み失敗: {file_path.name} ({encoding})")
            encoding = self.try_encodings(file_path)
            return file_path.read_text(encoding=encoding)

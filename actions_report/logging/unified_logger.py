"""
統一ロギングシステム
"""
import logging
from pathlib import Path
from typing import Dict, Any, Optional


class UnifiedLogger:
    """統一ロギングシステムクラス"""

    def __init__(self, name: str = 'actions_report', level: str = "INFO", log_file: Optional[Path] = None):
        self.logger = self.setup_logger(name, level, log_file)

    def setup_logger(self, name: str, level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
        """ロガーをセットアップ"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

        # 既存のハンドラーをクリア
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        # ファイルハンドラーを追加（指定されている場合）
        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def log_processing_summary(self, total_records: int, matched_records: int,
                               commissionable_count: int, skipped_count: int,
                               duration_seconds: float) -> None:
        """処理結果サマリーのログ出力"""
        match_rate = (matched_records / total_records) * 100 if total_records > 0 else 0

        self.logger.info("="*50)
        self.logger.info("処理結果サマリー")
        self.logger.info(f"対象レコード数: {total_records}")
        self.logger.info(f"一致レコード数: {matched_records}")
        self.logger.info(f"コミッション対象数: {commissionable_count}")
        self.logger.info(f"除外・ゼロ扱い数: {skipped_count}")
        self.logger.info(f"一致率: {match_rate:.1f}%")
        self.logger.info(f"処理時間: {duration_seconds:.2f}秒")
        self.logger.info("="*50)

    def log_configuration_info(self, config: Dict[str, Any]) -> None:
        """設定情報のログ出力"""
        self.logger.info("設定情報:")
        for key, value in config.items():
            # パスワードや秘密情報をマスク
            if any(secret in key.lower() for secret in ['password', 'secret', 'token']):
                value = '*' * len(str(value)) if value else 'None'
            self.logger.info(f"  {key}: {value}")

    def log_data_statistics(self, data_stats: Dict[str, Any]) -> None:
        """データ統計のログ出力"""
        self.logger.info("データ統計:")
        for key, value in data_stats.items():
            self.logger.info(f"  {key}: {value}")

    def log_file_list(self, files: list, operation: str) -> None:
        """ファイルリストのログ出力"""
        self.logger.info(f"{operation}対象ファイル ({len(files)}件):")
        for i, file_path in enumerate(files, 1):
            if isinstance(file_path, Path):
                self.logger.info(f"  {i}. {file_path.name}")
            else:
                self.logger.info(f"  {i}. {file_path}")

    # 既存のロガーメソッドのプロキシ
    def info(self, message: str) -> None:
        """情報レベルのログ出力"""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """警告レベルのログ出力"""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """エラーレベルのログ出力"""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """デバッグレベルのログ出力"""
        self.logger.debug(message)

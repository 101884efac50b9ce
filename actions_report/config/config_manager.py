"""
中央集約設定管理システム
"""
import json
from pathlib import Path
from typing import Dict, Any, Optional
from ..data_models import FilterCriteria
from ..error_handling.exceptions import ConfigurationError


class ConfigManager:
    """設定管理の統一クラス"""

    DEFAULT_CONFIG_FILES = [
        'actions_report_config.json',
        'config.json'
    ]

    def __init__(self, config_path: Optional[Path] = None, logger=None):
        self.logger = logger
        self.config_path = config_path
        self.config_data = {}
        self.load_config(config_path)

    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """設定ファイルを読み込み"""
        if config_path:
            self.config_data = self._merge_defaults(self._load_single_config(Path(config_path)))
            self.config_path = Path(config_path)
        else:
            # デフォルトの設定ファイルを順次試行
            for config_file in self.DEFAULT_CONFIG_FILES:
                candidate = Path(config_file)
                if not candidate.exists():
                    continue
                try:
                    self.config_data = self._merge_defaults(self._load_single_config(candidate))
                    self.config_path = candidate
                    break
                except ConfigurationError as e:
                    if self.logger:
                        self.logger.debug(f"設定ファイル読み込み失敗: {config_file} - {str(e)}")
                    continue

            if not self.config_data:
                if self.logger:
                    self.logger.warning("設定ファイルが見つかりません。デフォルト設定を使用します。")
                self.config_data = self._get_default_config()

        return self.config_data

    def _load_single_config(self, config_path: Path) -> Dict[str, Any]:
        """単一の設定ファイルを読み込み"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"設定ファイルが見つかりません: {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"設定ファイルの形式が無効です: {config_path} - {str(e)}")
        except OSError as e:
            raise ConfigurationError(f"設定ファイル読み込みエラー: {config_path} - {str(e)}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"設定ファイルの形式が無効です: {config_path} - オブジェクトではありません")

        if self.logger:
            self.logger.info(f"設定ファイル読み込み成功: {config_path.name}")

        return config_data

    def _get_default_config(self) -> Dict[str, Any]:
        """デフォルト設定を取得"""
        return {
            'actions_key': 'Actions',
            'date_range': {'start': None, 'end': None},
            'subject_id_equals': None,
            'sample_size': 5,
            'creator_rate': 70,
            'net_rate': 90,
            'log_level': 'INFO',
            'log_file': None
        }

    def _merge_defaults(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        merged = self._get_default_config()
        merged.update(config_data)
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得"""
        return self.config_data.get(key, default)

    def get_filter_criteria(self) -> FilterCriteria:
        """設定からフィルター条件を生成"""
        date_range = self.get('date_range') or {}
        if not isinstance(date_range, dict):
            raise ConfigurationError(f"date_rangeの形式が無効です: {date_range!r}")

        return FilterCriteria.from_options(
            start=date_range.get('start'),
            end=date_range.get('end'),
            subject_id=self.get('subject_id_equals')
        )

    def get_sample_size(self) -> int:
        """サンプル件数を取得"""
        sample_size = self.get('sample_size', 5)
        if isinstance(sample_size, bool) or not isinstance(sample_size, int) or sample_size < 0:
            raise ConfigurationError(f"sample_sizeが無効です: {sample_size!r}")
        return sample_size

    def get_logging_settings(self) -> Dict[str, Any]:
        """ログ関連の設定を取得"""
        log_file = self.get('log_file')
        return {
            'log_level': self.get('log_level', 'INFO'),
            'log_file': Path(log_file) if log_file else None
        }

    def get_commission_settings(self) -> Dict[str, Any]:
        """コミッション配分関連の設定を取得"""
        return {
            'creator_rate': self.get('creator_rate', 70),
            'net_rate': self.get('net_rate', 90)
        }

    def validate_configuration(self) -> bool:
        """設定の妥当性を検証"""
        try:
            self.get_filter_criteria()
            self.get_sample_size()
        except ConfigurationError as e:
            if self.logger:
                self.logger.error(str(e))
            raise

        creator_rate = self.get('creator_rate', 70)
        if isinstance(creator_rate, bool) or not isinstance(creator_rate, int) or not 0 <= creator_rate <= 100:
            error_msg = f"creator_rateは0〜100の整数で指定してください: {creator_rate!r}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        if self.logger:
            self.logger.info("設定の妥当性検証完了")

        return True

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """設定をファイルに保存"""
        if config_path is None:
            config_path = self.config_path or Path('actions_report_config.json')

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config_data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            error_msg = f"設定ファイル保存エラー: {config_path} - {str(e)}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        if self.logger:
            self.logger.info(f"設定ファイル保存完了: {config_path}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """設定を更新"""
        self.config_data.update(updates)

        if self.logger:
            self.logger.info(f"設定更新: {list(updates.keys())}")

    def get_all_settings(self) -> Dict[str, Any]:
        """すべての設定を取得"""
        return self.config_data.copy()

"""
統一例外クラス定義
"""


class ActionsReportError(Exception):
    """Actionsレポート処理の基本例外クラス"""
    pass


class InputError(ActionsReportError):
    """レコード集合の構造が不正な場合のエラー（リスト形式でない等）"""
    pass


class FileProcessingError(ActionsReportError):
    """ファイル処理関連のエラー"""
    pass


class ConfigurationError(ActionsReportError):
    """設定関連のエラー"""
    pass


class EncodingDetectionError(ActionsReportError):
    """エンコーディング検出関連のエラー"""
    pass

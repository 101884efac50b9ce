"""
Actionsレポートのフィルター・コミッション集計

レコード集合に期間・クリエイターIDの条件を適用し、件数・コミッション合計・
サンプルを集計する。個々のレコードの不正値は除外またはゼロ扱いとし、
処理全体を失敗させない。
"""
from collections.abc import Mapping
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .data_models import ActionRecord, AggregationResult, FilterCriteria, RecordSkip
from .error_handling.error_handler import ErrorHandler
from .error_handling.exceptions import ConfigurationError, InputError
from .utils.value_parsers import money_context, parse_payout, truncate_to_second


DEFAULT_SAMPLE_SIZE = 5


def ensure_record_collection(records) -> Sequence:
    """レコード集合がリスト形式であることを確認"""
    if records is None:
        raise InputError("レコード集合がありません")
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, (list, tuple)):
        raise InputError(f"レコード集合がリスト形式ではありません: {type(records).__name__}")
    return records


def validate_sample_size(sample_size) -> int:
    """サンプル件数を検証"""
    if isinstance(sample_size, bool) or not isinstance(sample_size, int) or sample_size < 0:
        raise ConfigurationError(f"サンプル件数が無効です: {sample_size!r}")
    return sample_size


class ReportFilter:
    """Actionsレコードのフィルター・集計クラス"""

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE, logger=None, error_handler=None):
        self.sample_size = validate_sample_size(sample_size)
        self.logger = logger
        self.error_handler = error_handler or ErrorHandler(logger)

    def filter(self, records: Sequence[ActionRecord], criteria: FilterCriteria) -> List[ActionRecord]:
        """条件に一致するレコードを元の順序のまま返す"""
        matched, _ = self._select(ensure_record_collection(records), criteria)
        return matched

    def _normalize(self, records: Sequence) -> Tuple[List[Tuple[int, ActionRecord]], List[RecordSkip]]:
        """辞書形式の要素をActionRecordに変換（変換できない要素は除外）"""
        normalized = []
        skips = []

        for index, item in enumerate(records):
            if isinstance(item, ActionRecord):
                normalized.append((index, item))
            elif isinstance(item, Mapping):
                normalized.append((index, ActionRecord.from_dict(item)))
            else:
                skips.append(self._skip(index, 'record', 'レコード形式ではありません', item))

        return normalized, skips

    def _select(self, records: Sequence,
                criteria: FilterCriteria) -> Tuple[List[ActionRecord], List[RecordSkip]]:
        normalized, skips = self._normalize(records)
        matched = []

        for index, record in normalized:
            if criteria.subject_id_equals is not None and record.subject_id != criteria.subject_id_equals:
                continue

            if criteria.date_range is not None:
                instant = record.event_instant
                if instant is None:
                    skips.append(self._skip(index, 'EventDate', '日時を解析できません', record.event_date))
                    continue
                # 境界は秒単位で比較
                if not criteria.date_range.contains(truncate_to_second(instant)):
                    continue

            matched.append(record)

        return matched, skips

    def _skip(self, index: int, field: str, reason: str, value) -> RecordSkip:
        skip = RecordSkip(index=index, field=field, reason=reason, value=value)
        self.error_handler.handle_record_skip(skip)
        return skip

    def aggregate(self, matched: Sequence[ActionRecord], total_records: Optional[int] = None,
                  sample_size: Optional[int] = None) -> AggregationResult:
        """一致したレコードのコミッションを集計"""
        normalized, skips = self._normalize(ensure_record_collection(matched))
        records = [record for _, record in normalized]
        return self._aggregate(records, total_records, sample_size, skips)

    def _aggregate(self, matched: Sequence[ActionRecord], total_records: Optional[int],
                   sample_size: Optional[int], skips: List[RecordSkip]) -> AggregationResult:
        if sample_size is None:
            sample_size = self.sample_size
        else:
            sample_size = validate_sample_size(sample_size)

        total_commission = Decimal('0')
        total_amount = Decimal('0')
        commissionable_count = 0

        with money_context():
            for index, record in enumerate(matched):
                payout = parse_payout(record.payout)
                if payout is None:
                    # 欠損はそのままゼロ扱い、非数値・範囲外のみ記録
                    if record.payout not in (None, ''):
                        skips.append(self._skip(index, 'Payout', '数値ではありません', record.payout))
                elif payout > 0:
                    total_commission += payout
                    commissionable_count += 1

                amount = record.amount_value
                if amount is not None:
                    total_amount += amount

        return AggregationResult(
            total_records=len(matched) if total_records is None else total_records,
            matched_records=len(matched),
            commissionable_count=commissionable_count,
            total_commission=total_commission,
            total_amount=total_amount,
            sample=tuple(matched[:sample_size]),
            skipped=tuple(skips),
        )

    def run(self, records: Sequence[ActionRecord], criteria: Optional[FilterCriteria] = None,
            sample_size: Optional[int] = None) -> AggregationResult:
        """フィルターと集計をまとめて実行"""
        records = ensure_record_collection(records)
        if criteria is None:
            criteria = FilterCriteria()

        matched, skips = self._select(records, criteria)
        result = self._aggregate(matched, len(records), sample_size, skips)

        if self.logger:
            self.logger.info(
                f"フィルター結果: {result.matched_records}/{result.total_records}件一致, "
                f"コミッション対象{result.commissionable_count}件, "
                f"合計${result.formatted_commission()}"
            )
            if result.skipped:
                self.logger.info(f"除外・ゼロ扱いレコード: {len(result.skipped)}件")

        return result

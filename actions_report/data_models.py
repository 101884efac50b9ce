"""
標準化されたデータモデル
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .error_handling.exceptions import ConfigurationError
from .utils.value_parsers import (
    parse_amount,
    parse_event_date,
    money_context,
    parse_payout,
    to_instant_bound,
)


CENTS = Decimal('0.01')


def format_money(value: Decimal) -> str:
    """金額を小数点以下2桁で表示用に整形"""
    with money_context():
        return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def _is_blank(value: Any) -> bool:
    """未設定として扱う値か（None・空文字・False・数値の0・NaN）"""
    if value is None or value is False or value == '':
        return True
    if isinstance(value, Decimal):
        return value.is_nan() or value.is_zero()
    if isinstance(value, (int, float)):
        return value == 0 or value != value
    return False


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """最初に値が入っているキーの値を返す（文字列の"0"は値ありとする）"""
    for key in keys:
        value = data.get(key)
        if not _is_blank(value):
            return value
    return None


@dataclass(frozen=True)
class ActionRecord:
    """Actionsレポートの1レコード（読み込み後は変更しない）"""
    event_date: Any = None
    payout: Any = None
    amount: Any = None
    subject_id: Optional[str] = None
    action_id: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ActionRecord':
        """APIレスポンスの1要素からレコードを生成"""
        subject_id = data.get('SubId1')
        action_id = data.get('Id')
        return cls(
            event_date=data.get('EventDate'),
            payout=_first_present(data, 'Payout', 'Commission'),
            amount=_first_present(data, 'Amount', 'SaleAmount', 'IntendedAmount'),
            subject_id=str(subject_id) if subject_id is not None else None,
            action_id=str(action_id) if action_id is not None else None,
            raw=MappingProxyType(dict(data)),
        )

    @property
    def event_instant(self) -> Optional[datetime]:
        """EventDateをUTC日時として取得（解析できない場合はNone）"""
        return parse_event_date(self.event_date)

    @property
    def payout_value(self) -> Decimal:
        """Payoutの数値（欠損・非数値は0）"""
        value = parse_payout(self.payout)
        return value if value is not None else Decimal('0')

    @property
    def amount_value(self) -> Optional[Decimal]:
        """Amountの数値（表示用）"""
        return parse_amount(self.amount)

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'Id': self.action_id,
            'EventDate': self.event_date,
            'SubId1': self.subject_id,
            'Payout': self.payout,
            'Amount': self.amount,
        }


@dataclass(frozen=True)
class DateRange:
    """両端を含む期間（UTC、秒単位）"""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ConfigurationError(
                f"期間の開始が終了より後です: {self.start.isoformat()} > {self.end.isoformat()}"
            )

    @classmethod
    def from_bounds(cls, start: Any, end: Any) -> 'DateRange':
        """文字列・日付・日時から期間を生成（日付のみの終了日は23:59:59まで）"""
        return cls(to_instant_bound(start), to_instant_bound(end, end=True))

    def contains(self, instant: datetime) -> bool:
        """境界を含めて期間内か判定"""
        return self.start <= instant <= self.end

    def to_dict(self) -> Dict[str, str]:
        """辞書形式で出力"""
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}


@dataclass(frozen=True)
class FilterCriteria:
    """フィルター条件（未指定の条件は適用しない）"""
    date_range: Optional[DateRange] = None
    subject_id_equals: Optional[str] = None

    @classmethod
    def from_options(cls, start: Any = None, end: Any = None,
                     subject_id: Optional[str] = None) -> 'FilterCriteria':
        """設定値から条件を生成（開始・終了のどちらかが無ければ期間条件なし）"""
        date_range = None
        if start not in (None, '') and end not in (None, ''):
            date_range = DateRange.from_bounds(start, end)
        return cls(date_range=date_range, subject_id_equals=subject_id or None)

    @property
    def is_empty(self) -> bool:
        return self.date_range is None and self.subject_id_equals is None

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'date_range': self.date_range.to_dict() if self.date_range else None,
            'subject_id_equals': self.subject_id_equals,
        }


@dataclass(frozen=True)
class RecordSkip:
    """レコード単位の除外・ゼロ扱いの記録（例外ではない）"""
    index: int
    field: str
    reason: str
    value: Any = None


@dataclass
class AggregationResult:
    """フィルター・集計結果の統一データモデル"""
    total_records: int = 0
    matched_records: int = 0
    commissionable_count: int = 0
    total_commission: Decimal = Decimal('0')
    total_amount: Decimal = Decimal('0')
    sample: Tuple[ActionRecord, ...] = ()
    skipped: Tuple[RecordSkip, ...] = ()

    def formatted_commission(self) -> str:
        """合計コミッションを表示用に整形"""
        return format_money(self.total_commission)

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'total_records': self.total_records,
            'matched_records': self.matched_records,
            'commissionable_count': self.commissionable_count,
            'total_commission': self.formatted_commission(),
            'total_amount': format_money(self.total_amount),
            'sample': [record.to_dict() for record in self.sample],
            'skipped_count': len(self.skipped),
        }


@dataclass(frozen=True)
class CommissionSplit:
    """クリエイター・プラットフォーム間のコミッション配分"""
    gross_amount: Decimal
    creator_amount: Decimal
    platform_amount: Decimal
    creator_rate: int
    platform_rate: int

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'gross_amount': format_money(self.gross_amount),
            'creator_amount': format_money(self.creator_amount),
            'platform_amount': format_money(self.platform_amount),
            'creator_rate': self.creator_rate,
            'platform_rate': self.platform_rate,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """集計値と期待値の照合結果"""
    actual: Decimal
    expected: Decimal
    tolerance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.actual - self.expected

    @property
    def missing(self) -> Decimal:
        """期待値に対する不足額"""
        return self.expected - self.actual

    @property
    def matches(self) -> bool:
        return abs(self.difference) < self.tolerance

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'actual': format_money(self.actual),
            'expected': format_money(self.expected),
            'missing': format_money(self.missing),
            'matches': self.matches,
        }

"""
コミッション配分・照合計算
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Union

from .data_models import CENTS, CommissionSplit, ReconciliationResult
from .utils.value_parsers import parse_decimal


DEFAULT_CREATOR_RATE = 70
DEFAULT_NET_RATE = 90
DEFAULT_TOLERANCE = Decimal('0.01')

Number = Union[int, float, str, Decimal]


def _to_decimal(value: Any) -> Decimal:
    parsed = parse_decimal(value)
    return parsed if parsed is not None else Decimal('0')


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def split_commission(gross: Number, creator_rate: int = DEFAULT_CREATOR_RATE) -> CommissionSplit:
    """総コミッションをクリエイター分とプラットフォーム分に配分"""
    gross_amount = _to_decimal(gross)
    rate = int(creator_rate)

    if gross_amount <= 0 or rate < 0 or rate > 100:
        return CommissionSplit(
            gross_amount=Decimal('0'),
            creator_amount=Decimal('0'),
            platform_amount=Decimal('0'),
            creator_rate=rate,
            platform_rate=0,
        )

    creator_amount = gross_amount * rate / 100
    platform_amount = gross_amount - creator_amount

    return CommissionSplit(
        gross_amount=gross_amount,
        creator_amount=_quantize(creator_amount),
        platform_amount=_quantize(platform_amount),
        creator_rate=rate,
        platform_rate=100 - rate,
    )


def net_commission(gross: Number, net_rate: Number = DEFAULT_NET_RATE) -> Decimal:
    """手数料控除後のコミッション（丸めなし）"""
    return _to_decimal(gross) * _to_decimal(net_rate) / 100


def reconcile(actual: Number, expected: Number, tolerance: Number = DEFAULT_TOLERANCE) -> ReconciliationResult:
    """集計値と期待値を照合"""
    return ReconciliationResult(
        actual=_to_decimal(actual),
        expected=_to_decimal(expected),
        tolerance=_to_decimal(tolerance),
    )

"""
レコード値の寛容なパーサー

EventDate・Payout等の生値を型付きの値に変換する。変換できない値は
例外にせずNoneを返し、呼び出し側で除外またはゼロ扱いとする。
"""
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation, getcontext, localcontext
from typing import Any, Optional

from ..error_handling.exceptions import ConfigurationError


DATE_ONLY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
# 先頭の数値部分のみを採用する（"10.50 USD" -> 10.50）
LEADING_NUMBER_PATTERN = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')

END_OF_DAY = time(23, 59, 59)

# 金額として扱う桁の範囲（指数部）と集計時の有効桁数
MAX_ADJUSTED_EXPONENT = 15
MIN_ADJUSTED_EXPONENT = -15
MONEY_PRECISION = 60


def _to_utc(value: datetime) -> datetime:
    """タイムゾーン無しの日時はUTCとして扱う"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_second(value: datetime) -> datetime:
    """秒未満を切り捨て"""
    return value.replace(microsecond=0)


def parse_event_date(value: Any) -> Optional[datetime]:
    """EventDateをUTCの日時に変換（失敗時はNone）"""
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if DATE_ONLY_PATTERN.match(text):
        try:
            parsed_date = date.fromisoformat(text)
        except ValueError:
            return None
        return datetime.combine(parsed_date, time.min, tzinfo=timezone.utc)

    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    return _to_utc(parsed)


def parse_decimal(value: Any) -> Optional[Decimal]:
    """金額の生値をDecimalに変換（数値でない・有限でない場合はNone）"""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # 二進小数の誤差を持ち込まないよう文字列表現から変換
        result = Decimal(repr(value))
    elif isinstance(value, str):
        match = LEADING_NUMBER_PATTERN.match(value.strip())
        if not match:
            return None
        try:
            result = Decimal(match.group(0))
        except InvalidOperation:
            return None
    else:
        return None

    if not result.is_finite():
        return None
    # 桁外れの値は金額として扱わない
    if result and not MIN_ADJUSTED_EXPONENT <= result.adjusted() <= MAX_ADJUSTED_EXPONENT:
        return None
    return result


def money_context():
    """金額の集計・丸め用のDecimalコンテキスト"""
    context = getcontext().copy()
    context.prec = MONEY_PRECISION
    return localcontext(context)


def parse_payout(value: Any) -> Optional[Decimal]:
    """Payoutを変換"""
    return parse_decimal(value)


def parse_amount(value: Any) -> Optional[Decimal]:
    """Amountを変換（表示用）"""
    return parse_decimal(value)


def to_instant_bound(value: Any, end: bool = False) -> datetime:
    """
    期間指定の境界値を秒単位のUTC日時に変換

    日付のみの指定は開始側を00:00:00、終了側を23:59:59とする。
    """
    if isinstance(value, str) and DATE_ONLY_PATTERN.match(value.strip()):
        try:
            value = date.fromisoformat(value.strip())
        except ValueError:
            raise ConfigurationError(f"期間指定の日付が無効です: {value}")

    if isinstance(value, date) and not isinstance(value, datetime):
        boundary_time = END_OF_DAY if end else time.min
        return datetime.combine(value, boundary_time, tzinfo=timezone.utc)

    parsed = parse_event_date(value)
    if parsed is None:
        raise ConfigurationError(f"期間指定の日時が無効です: {value!r}")

    return truncate_to_second(parsed)

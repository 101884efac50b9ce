"""
ReportFilterのテスト
"""
import unittest
import logging
import random
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
import sys

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from actions_report import (
    ActionRecord,
    AggregationResult,
    ConfigurationError,
    DateRange,
    FilterCriteria,
    InputError,
    ReportExporter,
    ReportFilter,
)


def make_record(event_date=None, payout=None, amount=None, subject_id=None):
    return ActionRecord(event_date=event_date, payout=payout, amount=amount, subject_id=subject_id)


AUG_TO_SEP = FilterCriteria.from_options(start='2025-08-11', end='2025-09-10')


class TestDateRange(unittest.TestCase):
    """期間条件のテスト"""

    def test_date_only_end_is_end_of_day(self):
        """日付のみの終了日は23:59:59まで含む"""
        date_range = DateRange.from_bounds('2025-08-11', '2025-09-10')
        self.assertEqual(date_range.start, datetime(2025, 8, 11, 0, 0, 0, tzinfo=timezone.utc))
        self.assertEqual(date_range.end, datetime(2025, 9, 10, 23, 59, 59, tzinfo=timezone.utc))

    def test_date_objects(self):
        """date型の境界"""
        date_range = DateRange.from_bounds(date(2025, 8, 11), date(2025, 9, 10))
        self.assertEqual(date_range.end, datetime(2025, 9, 10, 23, 59, 59, tzinfo=timezone.utc))

    def test_explicit_instants_are_kept(self):
        """時刻付きの境界はそのまま使う"""
        date_range = DateRange.from_bounds('2025-08-11T00:00:00Z', '2025-09-10T12:00:00Z')
        self.assertEqual(date_range.end, datetime(2025, 9, 10, 12, 0, 0, tzinfo=timezone.utc))

    def test_start_after_end(self):
        """開始が終了より後ならエラー"""
        with self.assertRaises(ConfigurationError):
            DateRange.from_bounds('2025-09-10', '2025-08-11')

    def test_invalid_bound(self):
        """解析できない境界はエラー"""
        with self.assertRaises(ConfigurationError):
            DateRange.from_bounds('not-a-date', '2025-08-11')

    def test_missing_bound_disables_range(self):
        """どちらかの境界が無ければ期間条件なし"""
        criteria = FilterCriteria.from_options(start='2025-08-11', end=None)
        self.assertIsNone(criteria.date_range)
        self.assertTrue(criteria.is_empty)


class TestReportFilter(unittest.TestCase):
    """フィルター・集計のテスト"""

    def setUp(self):
        self.report_filter = ReportFilter()

    def test_end_to_end_example(self):
        """期間フィルターとコミッション集計"""
        records = [
            make_record('2025-08-15', '10.50'),
            make_record('2025-08-20', '0'),
            make_record('2025-07-01', '5.00'),
        ]

        result = self.report_filter.run(records, AUG_TO_SEP)

        self.assertIsInstance(result, AggregationResult)
        self.assertEqual(result.total_records, 3)
        self.assertEqual(result.matched_records, 2)
        self.assertEqual(result.commissionable_count, 1)
        self.assertEqual(result.total_commission, Decimal('10.50'))
        self.assertEqual(result.formatted_commission(), '10.50')

    def test_inclusive_boundaries(self):
        """境界の日時は両端とも含む"""
        records = [
            make_record('2025-08-11T00:00:00Z', '1'),
            make_record('2025-09-10T23:59:59Z', '2'),
            make_record('2025-09-11T00:00:00Z', '4'),
        ]
        criteria = FilterCriteria(date_range=DateRange.from_bounds(
            '2025-08-11T00:00:00Z', '2025-09-10T23:59:59Z'))

        matched = self.report_filter.filter(records, criteria)

        self.assertEqual(matched, records[:2])

    def test_sub_second_timestamp_compared_by_second(self):
        """秒未満は切り捨てて比較する"""
        records = [
            make_record('2025-09-10T23:59:59.500Z', '1'),
            make_record('2025-09-10T23:59:59.999Z', '1'),
            make_record('2025-08-10T23:59:59.999Z', '1'),
        ]

        matched = self.report_filter.filter(records, AUG_TO_SEP)

        self.assertEqual(matched, records[:2])

    def test_offset_timestamps_are_normalized(self):
        """タイムゾーン付きの日時はUTCに変換して比較"""
        records = [
            make_record('2025-09-11T01:00:00+02:00', '1'),  # 2025-09-10T23:00:00Z
            make_record('2025-08-10T23:00:00-02:00', '1'),  # 2025-08-11T01:00:00Z
            make_record('2025-09-11T00:30:00+00:00', '1'),
        ]

        matched = self.report_filter.filter(records, AUG_TO_SEP)

        self.assertEqual(matched, records[:2])

    def test_identity_filter_preserves_order(self):
        """クリエイターIDの完全一致と順序の保持"""
        records = [
            make_record('2025-08-12', '1', subject_id='X'),
            make_record('2025-08-13', '2', subject_id='Y'),
            make_record('2025-08-14', '3', subject_id='X'),
        ]
        criteria = FilterCriteria(subject_id_equals='X')

        result = self.report_filter.run(records, criteria)

        self.assertEqual(result.matched_records, 2)
        self.assertEqual(list(result.sample), [records[0], records[2]])

    def test_identity_filter_is_exact(self):
        """部分一致・大文字小文字違いは一致しない"""
        records = [
            make_record(subject_id='abc'),
            make_record(subject_id='ABC'),
            make_record(subject_id='abcd'),
            make_record(subject_id=None),
        ]

        matched = self.report_filter.filter(records, FilterCriteria(subject_id_equals='abc'))

        self.assertEqual(matched, [records[0]])

    def test_both_criteria(self):
        """期間とクリエイターIDの両方を適用"""
        records = [
            make_record('2025-08-15', '3.00', subject_id='X'),
            make_record('2025-07-15', '4.00', subject_id='X'),
            make_record('2025-08-15', '5.00', subject_id='Y'),
        ]
        criteria = FilterCriteria.from_options('2025-08-11', '2025-09-10', 'X')

        result = self.report_filter.run(records, criteria)

        self.assertEqual(result.matched_records, 1)
        self.assertEqual(result.total_commission, Decimal('3.00'))

    def test_no_criteria_matches_everything(self):
        """条件なしは全件一致"""
        records = [make_record('garbage', '1'), make_record(None, '2')]

        result = self.report_filter.run(records, FilterCriteria())

        self.assertEqual(result.matched_records, 2)
        self.assertEqual(result.skipped, ())

    def test_unparseable_event_date_is_excluded(self):
        """解析できない日時は期間条件で除外され、処理は継続する"""
        records = [
            make_record('2025-08-15', '1.00'),
            make_record('not a date', '100.00'),
            make_record(None, '100.00'),
            make_record('2025-13-45', '100.00'),
        ]

        result = self.report_filter.run(records, AUG_TO_SEP)

        self.assertEqual(result.matched_records, 1)
        self.assertEqual(result.total_commission, Decimal('1.00'))
        self.assertEqual([skip.index for skip in result.skipped], [1, 2, 3])
        self.assertTrue(all(skip.field == 'EventDate' for skip in result.skipped))

    def test_malformed_payout_counts_as_zero(self):
        """非数値・欠損のPayoutはゼロ扱い"""
        records = [
            make_record(payout='abc'),
            make_record(payout=None),
            make_record(payout=''),
            make_record(payout='-3.00'),
            make_record(payout='NaN'),
            make_record(payout='2.25'),
            make_record(payout=1.25),
            make_record(payout=True),
        ]

        result = self.report_filter.run(records)

        self.assertEqual(result.matched_records, 8)
        self.assertEqual(result.commissionable_count, 2)
        self.assertEqual(result.total_commission, Decimal('3.50'))
        self.assertEqual([skip.field for skip in result.skipped], ['Payout', 'Payout', 'Payout'])

    def test_leading_numeric_payout(self):
        """数値で始まるPayoutは先頭の数値を採用"""
        result = self.report_filter.run([make_record(payout='10.50 USD')])
        self.assertEqual(result.total_commission, Decimal('10.50'))

    def test_out_of_range_payout_is_skipped(self):
        """桁外れのPayoutは例外にせずゼロ扱い"""
        records = [
            make_record(payout='1e1000000'),
            make_record(payout='1e30'),
            make_record(payout=Decimal('-1e30')),
            make_record(payout='1e-30'),
            make_record(payout='2.00'),
        ]
        logger = logging.getLogger('test_report_filter')

        result = ReportFilter(logger=logger).run(records)

        self.assertEqual(result.matched_records, 5)
        self.assertEqual(result.commissionable_count, 1)
        self.assertEqual(result.total_commission, Decimal('2.00'))
        self.assertEqual([skip.index for skip in result.skipped if skip.field == 'Payout'], [0, 1, 2, 3])
        self.assertEqual(result.formatted_commission(), '2.00')
        self.assertIn("Total commission: $2.00", ReportExporter().summary_lines(result))
        self.assertEqual(result.to_dict()['total_commission'], '2.00')

    def test_large_payout_is_formatted(self):
        """上限内の大きな金額は集計・表示できる"""
        records = [make_record(payout='999999999999999.99', amount='1e15'),
                   make_record(payout='999999999999999.99')]

        result = self.report_filter.run(records)

        self.assertEqual(result.total_commission, Decimal('1999999999999999.98'))
        self.assertEqual(result.formatted_commission(), '1999999999999999.98')
        self.assertEqual(result.total_amount, Decimal('1e15'))
        self.assertEqual(result.to_dict()['total_amount'], '1000000000000000.00')

    def test_long_fraction_sum_is_exact(self):
        """有効桁数の多い金額も丸めずに合計"""
        records = [make_record(payout='0.1234567890123456789012345678901'), make_record(payout='1')]

        result = self.report_filter.run(records)

        self.assertEqual(result.total_commission, Decimal('1.1234567890123456789012345678901'))
        self.assertEqual(result.formatted_commission(), '1.12')

    def test_total_amount_uses_amount_fallbacks(self):
        """Amountの合計は代替フィールドも含める"""
        records = [
            ActionRecord.from_dict({'Payout': '1', 'Amount': '10.00'}),
            ActionRecord.from_dict({'Payout': '1', 'SaleAmount': '20.00'}),
            ActionRecord.from_dict({'Payout': '1', 'IntendedAmount': '30.00'}),
            ActionRecord.from_dict({'Payout': '1', 'Amount': 'n/a'}),
        ]

        result = self.report_filter.run(records)

        self.assertEqual(result.total_amount, Decimal('60.00'))

    def test_decimal_accumulation_is_exact(self):
        """少額の積み上げで誤差が出ない"""
        records = [make_record(payout='0.10') for _ in range(1000)]

        result = self.report_filter.run(records)

        self.assertEqual(result.total_commission, Decimal('100.00'))
        self.assertEqual(result.commissionable_count, 1000)

    def test_total_is_order_independent(self):
        """入力順を入れ替えても合計は同じ"""
        records = [make_record('2025-08-%02d' % (i % 28 + 1), '%d.%02d' % (i, i % 100)) for i in range(60)]
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)

        first = self.report_filter.run(records, AUG_TO_SEP)
        second = self.report_filter.run(shuffled, AUG_TO_SEP)

        self.assertEqual(first.total_commission, second.total_commission)
        self.assertEqual(first.commissionable_count, second.commissionable_count)

    def test_filter_is_idempotent(self):
        """フィルターを2回適用しても結果は同じ"""
        records = [
            make_record('2025-08-15', '1', subject_id='X'),
            make_record('bad', '1', subject_id='X'),
            make_record('2025-09-15', '1', subject_id='X'),
            make_record('2025-08-20', '1', subject_id='Y'),
        ]
        criteria = FilterCriteria.from_options('2025-08-11', '2025-09-10', 'X')

        once = self.report_filter.filter(records, criteria)
        twice = self.report_filter.filter(once, criteria)

        self.assertEqual(once, twice)

    def test_counts_are_bounded(self):
        """一致件数・コミッション対象件数の上限"""
        records = [
            make_record('2025-08-15', '1'),
            make_record('2025-08-16', '0'),
            make_record('2025-10-01', '1'),
            make_record('oops', 'x'),
        ]
        for criteria in (FilterCriteria(), AUG_TO_SEP, FilterCriteria(subject_id_equals='none')):
            result = self.report_filter.run(records, criteria)
            self.assertLessEqual(result.matched_records, result.total_records)
            self.assertLessEqual(result.commissionable_count, result.matched_records)

    def test_empty_input(self):
        """空の入力はゼロ件の結果"""
        result = self.report_filter.run([], AUG_TO_SEP)

        self.assertEqual(result.total_records, 0)
        self.assertEqual(result.matched_records, 0)
        self.assertEqual(result.commissionable_count, 0)
        self.assertEqual(result.total_commission, Decimal('0'))
        self.assertEqual(result.sample, ())

    def test_sample_size(self):
        """サンプルは先頭からN件"""
        records = [make_record('2025-08-%02d' % day, '1') for day in range(11, 21)]

        default_result = self.report_filter.run(records, AUG_TO_SEP)
        custom_result = self.report_filter.run(records, AUG_TO_SEP, sample_size=3)
        zero_result = ReportFilter(sample_size=0).run(records, AUG_TO_SEP)

        self.assertEqual(list(default_result.sample), records[:5])
        self.assertEqual(list(custom_result.sample), records[:3])
        self.assertEqual(zero_result.sample, ())

    def test_sample_larger_than_matches(self):
        """一致件数がサンプル件数より少ない場合"""
        records = [make_record('2025-08-15', '1')]
        result = ReportFilter(sample_size=10).run(records, AUG_TO_SEP)
        self.assertEqual(list(result.sample), records)

    def test_invalid_sample_size(self):
        """負のサンプル件数はエラー"""
        with self.assertRaises(ConfigurationError):
            ReportFilter(sample_size=-1)
        with self.assertRaises(ConfigurationError):
            self.report_filter.run([], sample_size=-2)

    def test_structurally_invalid_input(self):
        """リスト形式でない入力はInputError"""
        for invalid in (None, {'Actions': []}, 'records', 42):
            with self.assertRaises(InputError):
                self.report_filter.run(invalid, AUG_TO_SEP)

    def test_mapping_entries_are_accepted(self):
        """辞書形式のレコードも扱える"""
        records = [
            {'EventDate': '2025-08-15T10:00:00Z', 'Payout': '2.50', 'SubId1': 'X'},
            {'EventDate': '2025-08-16T10:00:00Z', 'Commission': '1.50', 'SubId1': 'X'},
            'not a record',
        ]

        result = self.report_filter.run(records, FilterCriteria(subject_id_equals='X'))

        self.assertEqual(result.total_records, 3)
        self.assertEqual(result.matched_records, 2)
        self.assertEqual(result.total_commission, Decimal('4.00'))
        self.assertEqual(result.skipped[0].field, 'record')

    def test_aggregate_without_total(self):
        """aggregate単体では一致件数を総件数とする"""
        matched = [make_record(payout='1.00'), make_record(payout='2.00')]

        result = self.report_filter.aggregate(matched)

        self.assertEqual(result.total_records, 2)
        self.assertEqual(result.total_commission, Decimal('3.00'))

    def test_records_are_not_modified(self):
        """入力レコードは変更されない"""
        records = [make_record('2025-08-15', '1.00'), make_record('2025-07-01', '2.00')]
        before = list(records)

        self.report_filter.run(records, AUG_TO_SEP)

        self.assertEqual(records, before)

    def test_to_dict(self):
        """辞書形式の出力"""
        result = self.report_filter.run([make_record('2025-08-15', '10.505')], AUG_TO_SEP)

        summary = result.to_dict()

        self.assertEqual(summary['total_commission'], '10.51')
        self.assertEqual(summary['matched_records'], 1)
        self.assertEqual(summary['sample'][0]['EventDate'], '2025-08-15')


class TestActionRecord(unittest.TestCase):
    """ActionRecordのテスト"""

    def test_from_dict_field_fallbacks(self):
        """Payout・Amountの代替フィールド"""
        record = ActionRecord.from_dict({
            'Id': 123,
            'EventDate': '2025-08-15T00:00:00Z',
            'Commission': '3.10',
            'SaleAmount': '40.00',
            'SubId1': 'creator-1',
        })

        self.assertEqual(record.action_id, '123')
        self.assertEqual(record.payout, '3.10')
        self.assertEqual(record.amount, '40.00')
        self.assertEqual(record.subject_id, 'creator-1')
        self.assertEqual(record.payout_value, Decimal('3.10'))

    def test_numeric_zero_payout_falls_back(self):
        """数値の0・NaN・Falseは未設定として代替フィールドを使う"""
        for empty in (0, 0.0, Decimal('0'), float('nan'), False):
            record = ActionRecord.from_dict({'Payout': empty, 'Commission': '2.5'})
            self.assertEqual(record.payout, '2.5')
            self.assertEqual(record.payout_value, Decimal('2.5'))

        record = ActionRecord.from_dict({'Payout': 0, 'SaleAmount': '0', 'Amount': 0})
        self.assertIsNone(record.payout)
        self.assertEqual(record.amount, '0')

    def test_string_zero_payout_is_kept(self):
        """文字列の"0"は値ありとして代替フィールドを使わない"""
        record = ActionRecord.from_dict({'Payout': '0', 'Commission': '2.5'})
        self.assertEqual(record.payout, '0')
        self.assertEqual(record.payout_value, Decimal('0'))

    def test_record_is_immutable(self):
        """レコードは変更できない"""
        record = ActionRecord.from_dict({'EventDate': '2025-08-15', 'Payout': '1'})
        with self.assertRaises(AttributeError):
            record.payout = '2'
        with self.assertRaises(TypeError):
            record.raw['Payout'] = '2'

    def test_event_instant(self):
        """EventDateの解析"""
        self.assertEqual(
            make_record('2025-08-15').event_instant,
            datetime(2025, 8, 15, tzinfo=timezone.utc)
        )
        self.assertEqual(
            make_record('2025-08-15T10:20:30').event_instant,
            datetime(2025, 8, 15, 10, 20, 30, tzinfo=timezone.utc)
        )
        self.assertIsNone(make_record('15/08/2025').event_instant)
        self.assertIsNone(make_record(20250815).event_instant)


if __name__ == '__main__':
    unittest.main()

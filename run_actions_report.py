#!/usr/bin/env python3
"""
Actionsレポート集計の実行スクリプト

APIレスポンスのJSON（1ページ以上）を読み込み、期間・クリエイターIDで
フィルターしてコミッションを集計する。
"""

import argparse
import sys
import time
from pathlib import Path

from actions_report import (
    ActionsReportError,
    ConfigManager,
    ConfigurationError,
    ErrorHandler,
    FilterCriteria,
    JSONReportHandler,
    ReportExporter,
    ReportFilter,
    UnifiedLogger,
    net_commission,
    reconcile,
    split_commission,
)
from actions_report.data_models import format_money


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Actions Report Filter - 期間・クリエイター別コミッション集計ツール"
    )

    parser.add_argument(
        "files",
        nargs="+",
        help="ActionsレポートのJSONファイル（複数指定時はページ順に連結）"
    )

    parser.add_argument(
        "--start", "-s",
        type=str,
        help="期間の開始（YYYY-MM-DD またはISO 8601）"
    )

    parser.add_argument(
        "--end", "-e",
        type=str,
        help="期間の終了（日付のみの場合は23:59:59まで含む）"
    )

    parser.add_argument(
        "--subject-id", "-u",
        type=str,
        help="クリエイターID（SubId1）の完全一致"
    )

    parser.add_argument(
        "--sample-size", "-n",
        type=int,
        help="表示するサンプル件数（既定: 5）"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="設定ファイル（JSON）のパス"
    )

    parser.add_argument(
        "--creator-rate",
        type=int,
        help="クリエイター配分率（%%）を指定すると配分を表示"
    )

    parser.add_argument(
        "--split",
        action="store_true",
        help="設定の配分率でクリエイター・プラットフォーム配分を表示"
    )

    parser.add_argument(
        "--expected-total",
        type=str,
        help="期待するコミッション合計（照合結果を表示）"
    )

    parser.add_argument(
        "--export", "-o",
        type=str,
        help="一致レコードの出力先（.csv / .xlsx）"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="ログレベル（DEBUG/INFO/WARNING/ERROR）"
    )

    return parser


def resolve_criteria(args, config: ConfigManager) -> FilterCriteria:
    """コマンドライン引数を優先してフィルター条件を決定"""
    if args.start is None and args.end is None and args.subject_id is None:
        return config.get_filter_criteria()

    start, end = args.start, args.end
    # 引数で指定されていない境界のみ設定ファイルから補う
    if start is None or end is None:
        date_range = config.get('date_range') or {}
        if not isinstance(date_range, dict):
            raise ConfigurationError(f"date_rangeの形式が無効です: {date_range!r}")
        if start is None:
            start = date_range.get('start')
        if end is None:
            end = date_range.get('end')
    subject_id = args.subject_id if args.subject_id is not None else config.get('subject_id_equals')
    return FilterCriteria.from_options(start=start, end=end, subject_id=subject_id)


def main(argv=None) -> int:
    """メイン関数"""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(Path(args.config) if args.config else None)
    except ConfigurationError as e:
        print(f"設定エラー: {e}", file=sys.stderr)
        return 1

    logging_settings = config.get_logging_settings()
    unified_logger = UnifiedLogger(
        'actions_report',
        args.log_level or logging_settings['log_level'],
        logging_settings['log_file']
    )
    logger = unified_logger.logger
    error_handler = ErrorHandler(logger)

    start_time = time.time()

    try:
        criteria = resolve_criteria(args, config)
        unified_logger.log_configuration_info({
            **criteria.to_dict(),
            'config_file': str(config.config_path) if config.config_path else None
        })
        unified_logger.log_file_list([Path(f) for f in args.files], '読み込み')
        sample_size = args.sample_size if args.sample_size is not None else config.get_sample_size()

        handler = JSONReportHandler(logger, error_handler, actions_key=config.get('actions_key', 'Actions'))
        records = handler.load_pages(args.files)

        report_filter = ReportFilter(sample_size, logger, error_handler)
        result = report_filter.run(records, criteria)
        exporter = ReportExporter(logger, error_handler)

        for line in exporter.summary_lines(result):
            print(line)

        if args.split or args.creator_rate is not None:
            commission_settings = config.get_commission_settings()
            creator_rate = args.creator_rate if args.creator_rate is not None else commission_settings['creator_rate']
            net_rate = commission_settings['net_rate']
            print("")
            for line in exporter.split_lines(split_commission(result.total_commission, creator_rate)):
                print(line)
            print(f"Net commission ({net_rate}%): ${format_money(net_commission(result.total_commission, net_rate))}")

        if args.expected_total is not None:
            print("")
            for line in exporter.reconciliation_lines(reconcile(result.total_commission, args.expected_total)):
                print(line)

        if args.export:
            matched = report_filter.filter(records, criteria)
            exporter.export(matched, args.export)

        if result.skipped:
            unified_logger.log_data_statistics(error_handler.create_skip_summary(result.skipped))

        unified_logger.log_processing_summary(
            result.total_records,
            result.matched_records,
            result.commissionable_count,
            len(result.skipped),
            time.time() - start_time
        )
        return 0

    except ActionsReportError as e:
        error_handler.log_and_continue(e, "Actionsレポート集計")
        return 1
    except KeyboardInterrupt:
        logger.warning("処理が中断されました")
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
记录库运维 CLI

使用方式:
    python scripts/records_db.py init                     # 建表和索引
    python scripts/records_db.py stats                    # 标签使用统计
    python scripts/records_db.py stats --format json
    python scripts/records_db.py renormalize --dry-run    # 预览按当前规则重新规范化的变更
    python scripts/records_db.py renormalize              # 执行变更

数据库地址读取 RECORDS_DB_URL / DATABASE_URL（支持项目根目录 .env）。
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "backend"))

from dotenv import load_dotenv
load_dotenv(PROJECT_ROOT / ".env")

from domains.core.exceptions import ApplicationError, DuplicateRecordError
from domains.core.logging import LogConfig, configure_logging
from domains.core.settings import RecordsSettings, get_settings
from domains.record_hub.core.search_query import RecordSearchOptions
from domains.record_hub.hub import RecordHub, open_record_hub

PAGE_SIZE = 500


async def cmd_init(hub: RecordHub, args) -> int:
    await hub.store.ensure_schema()
    print(f"表结构已就绪，当前记录数: {await hub.store.count()}")
    return 0


async def cmd_stats(hub: RecordHub, args) -> int:
    stats = await hub.tags.statistics()
    if args.limit:
        stats = stats[:args.limit]

    if args.format == "json":
        print(json.dumps([s.to_dict() for s in stats], ensure_ascii=False, indent=2))
        return 0

    if not stats:
        print("(无标签)")
        return 0

    width = max(len(s.tag) for s in stats)
    print(f"{'标签'.ljust(width)}  次数")
    print("-" * (width + 6))
    for s in stats:
        print(f"{s.tag.ljust(width)}  {s.count}")
    print(f"\n共 {len(stats)} 个标签, {await hub.store.count()} 条记录")
    return 0


async def cmd_renormalize(hub: RecordHub, args) -> int:
    """按当前规范化规则重新计算每条记录的标签"""
    factory = hub.records.record_factory

    changes = []
    offset = 0
    while True:
        page = await hub.store.find_all(RecordSearchOptions(limit=PAGE_SIZE, offset=offset))
        for record in page.records:
            try:
                revised = factory.revise(record, record.content)
            except ApplicationError as e:
                print(f"  [SKIP] ID={record.id}: {e.message}")
                continue
            if revised.sorted_normalized_tags != record.sorted_normalized_tags:
                changes.append((record, revised))
        if not page.has_more:
            break
        offset += PAGE_SIZE

    if not changes:
        print("没有需要重新规范化的记录")
        return 0

    print(f"需要重新规范化 {len(changes)} 条记录:\n")
    for i, (old, new) in enumerate(changes, 1):
        print(f"[{i}] ID={old.id}")
        print(f"    旧: {' '.join(old.sorted_normalized_tags)}")
        print(f"    新: {' '.join(new.sorted_normalized_tags)}")

    if args.dry_run:
        print("\n=== DRY RUN 模式，未执行实际变更 ===")
        return 0

    print("\n开始执行变更...")
    success_count = 0
    conflict_count = 0
    for _, revised in changes:
        try:
            await hub.store.update(revised)
            success_count += 1
            print(f"  [OK] ID={revised.id}")
        except DuplicateRecordError as e:
            conflict_count += 1
            print(f"  [CONFLICT] ID={revised.id}: {e.message}")

    print(f"\n完成: 成功 {success_count} 条, 冲突 {conflict_count} 条")
    return 1 if conflict_count else 0


COMMANDS = {
    "init": cmd_init,
    "stats": cmd_stats,
    "renormalize": cmd_renormalize,
}


def build_log_config(settings: RecordsSettings, log_level: str | None = None) -> LogConfig:
    """日志配置取自 RECORDS_LOG_*，命令行 --log-level 只覆盖级别"""
    config = LogConfig.from_settings(settings.logging, service_name=settings.service_name)
    if log_level:
        config.level = log_level.upper()
    return config


async def run(args, settings: RecordsSettings) -> int:
    # init 自己建表，其他命令要求表已存在
    async with open_record_hub(settings, ensure_schema=False) as hub:
        return await COMMANDS[args.command](hub, args)


def main():
    parser = argparse.ArgumentParser(description='记录库运维工具')
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='日志级别（默认读取 RECORDS_LOG_LEVEL）',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init', help='建表和索引')

    stats_parser = subparsers.add_parser('stats', help='标签使用统计')
    stats_parser.add_argument('--format', choices=['table', 'json'], default='table', help='输出格式')
    stats_parser.add_argument('--limit', type=int, default=0, help='只显示前 N 个标签')

    renorm_parser = subparsers.add_parser('renormalize', help='按当前规则重新规范化标签')
    renorm_parser.add_argument('--dry-run', action='store_true', help='预览变更，不实际执行')

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(build_log_config(settings, args.log_level))

    try:
        sys.exit(asyncio.run(run(args, settings)))
    except ApplicationError as e:
        print(f"错误: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()

"""キーワード順位更新 — コマンドラインエントリーポイント.

処理フロー:
  1. 設定を読み込む
  2. 対象キーワードを取得 (ID 指定 / ドメイン指定 / 再試行キュー)
  3. 対象を updating にしてから順位更新を実行
  4. サマリをログに出す

実行タイミング (cron など) は外部で管理する。
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime

from rank_refresher.config import LOG_DIR, load_settings
from rank_refresher.db import find_keywords, update_keywords
from rank_refresher.refresh import refresh_and_update_keywords
from rank_refresher.retry_queue import default_queue


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"refresh_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def _parse_ids(value: str) -> list[int]:
    """カンマ区切りの ID 文字列. 数値でないものは捨てる."""
    return [int(part) for part in value.split(",") if part.strip().isdigit()]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="キーワードの検索順位を更新する")
    parser.add_argument("--domain", help="このドメインのキーワードだけを更新する")
    parser.add_argument("--ids", type=_parse_ids, help="更新するキーワード ID (カンマ区切り)")
    parser.add_argument("--retry-failed", action="store_true",
                        help="再試行キューにあるキーワードを更新する")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    """メイン処理. 終了コードを返す."""
    args = parse_args(argv)
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("=== 検索順位更新 開始 ===")
    start_time = time.time()

    settings = load_settings()
    if args.retry_failed:
        ids = default_queue().read()
        if not ids:
            logger.info("再試行キューは空です。終了します。")
            return 0
        keywords = find_keywords(ids=ids)
    elif args.ids is not None:
        if not args.ids:
            logger.error("有効なキーワード ID が指定されていません")
            return 2
        keywords = find_keywords(ids=args.ids, domain=args.domain)
    else:
        keywords = find_keywords(domain=args.domain)

    if not keywords:
        logger.warning("対象のキーワードがありません。終了します。")
        return 0

    logger.info("対象キーワード: %d 件 (scraper=%s)", len(keywords), settings.scraper_type)
    ids = [kw.id for kw in keywords]
    update_keywords(ids, {"updating": True})

    try:
        updated = refresh_and_update_keywords(keywords, settings)
    except Exception:
        # 中断時は対象すべての updating を戻す
        logger.exception("順位更新が中断されました")
        try:
            update_keywords(ids, {"updating": False})
        except Exception:
            logger.exception("updating の解除に失敗: %d 件", len(ids))
        return 1

    error_count = sum(1 for kw in updated if kw.last_update_error is not None)
    elapsed = time.time() - start_time
    logger.info("=== 検索順位更新 完了 ===")
    logger.info("更新: %d 件, エラー: %d 件, スキップ: %d 件, 所要時間: %.1f 秒",
                len(updated), error_count, len(keywords) - len(updated), elapsed)
    return 0


if __name__ == "__main__":
    sys.exit(run())

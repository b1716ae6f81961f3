"""キーワード順位更新のオーケストレーション.

処理フロー:
  1. 対象キーワードのドメインを一括取得し、取得停止中のドメインを判定
  2. 停止中ドメインのキーワードは updating を解除し、再試行キューから一括削除
  3. 並列対応プロバイダならワーカープールで同時取得、それ以外は逐次取得
  4. 各結果を入力順に updater で反映
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from rank_refresher.config import MAX_SCRAPE_DELAY_MS, REFRESH_MAX_WORKERS
from rank_refresher.db import find_domains_by_names, update_keyword, update_keywords
from rank_refresher.errors import ScraperError, serialize_error
from rank_refresher.models import Keyword, RefreshResult, Settings
from rank_refresher.retry_queue import RetryQueue, default_queue
from rank_refresher.scraper import scrape_keyword
from rank_refresher.scrapers import get_scraper
from rank_refresher.updater import update_keyword_position

logger = logging.getLogger(__name__)


def refresh_and_update_keywords(
    keywords: list[Keyword],
    settings: Settings,
    queue: RetryQueue | None = None,
) -> list[Keyword]:
    """キーワードの順位を取得して DB に反映する.

    ドメイン情報の取得に失敗した場合だけ例外を送出する。
    キーワード単位の失敗は各キーワードのエラーとして記録される。

    Args:
        keywords: 更新対象のキーワード
        settings: スクレイパー設定
        queue: 再試行キュー (省略時は設定パスのキュー)

    Returns:
        実際に取得を試みたキーワード (更新後)
    """
    if not keywords:
        return []
    queue = queue or default_queue()

    eligible, skipped = _partition(keywords)
    if skipped:
        skipped_ids = [kw.id for kw in skipped]
        logger.info("取得停止中ドメインのキーワードをスキップ: %d 件", len(skipped_ids))
        try:
            update_keywords(skipped_ids, {"updating": False})
        except Exception:
            logger.exception("スキップ分の updating 解除に失敗: %d 件", len(skipped_ids))
        queue.remove_many(skipped_ids)

    if not eligible:
        return []

    start = time.time()
    if _is_parallel_safe(settings.scraper_type):
        updated = _refresh_parallel(eligible, settings, queue)
    else:
        updated = _refresh_sequential(eligible, settings, queue)

    logger.info("順位更新 完了: %d 件, 所要時間: %.1f 秒", len(updated), time.time() - start)
    return updated


def _partition(keywords: list[Keyword]) -> tuple[list[Keyword], list[Keyword]]:
    """(取得対象, スキップ) に分ける. ドメインが見つからなければ取得対象."""
    domain_names = sorted({kw.domain for kw in keywords if kw.domain})
    permissions: dict[str, bool] = {}
    if domain_names:
        permissions = {d.domain: d.scrape_enabled for d in find_domains_by_names(domain_names)}

    eligible: list[Keyword] = []
    skipped: list[Keyword] = []
    for kw in keywords:
        if permissions.get(kw.domain) is False:
            skipped.append(kw)
        else:
            eligible.append(kw)
    return eligible, skipped


def _is_parallel_safe(scraper_type: str) -> bool:
    try:
        return get_scraper(scraper_type).parallel_safe
    except ScraperError:
        return False


def _failed_result(keyword: Keyword, error: BaseException) -> RefreshResult:
    return RefreshResult(
        keyword_id=keyword.id,
        position=keyword.position,
        url=keyword.url,
        organic=keyword.last_result,
        map_pack_top3=keyword.map_pack_top3,
        error=serialize_error(error),
    )


def _apply_result(keyword: Keyword, result: RefreshResult, settings: Settings, queue: RetryQueue) -> Keyword:
    """updater で反映する. 想定外の例外でも updating を解除して返す."""
    try:
        return update_keyword_position(keyword, result, settings, queue)
    except Exception:
        logger.exception("結果の反映に失敗: id=%s, keyword=%s", keyword.id, keyword.keyword)
        try:
            update_keywords([keyword.id], {"updating": False})
        except Exception:
            logger.exception("updating の解除に失敗: id=%s", keyword.id)
        return replace(keyword, updating=False)


def _refresh_parallel(keywords: list[Keyword], settings: Settings, queue: RetryQueue) -> list[Keyword]:
    """ワーカープールで同時に取得し、入力順に反映する."""
    workers = max(1, min(REFRESH_MAX_WORKERS, len(keywords)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(scrape_keyword, kw, settings) for kw in keywords]

    results: list[RefreshResult] = []
    for kw, future in zip(keywords, futures):
        try:
            results.append(future.result())
        except Exception as e:
            logger.error("SERP 取得で想定外のエラー: keyword=%s, error=%s", kw.keyword, e)
            results.append(_failed_result(kw, e))

    return [_apply_result(kw, result, settings, queue) for kw, result in zip(keywords, results)]


def _refresh_sequential(keywords: list[Keyword], settings: Settings, queue: RetryQueue) -> list[Keyword]:
    """1件ずつ取得・反映する. 設定された待機はリクエストの間にだけ入れる."""
    delay_ms = min(settings.scrape_delay or 0, MAX_SCRAPE_DELAY_MS)
    updated: list[Keyword] = []
    for index, kw in enumerate(keywords):
        if index > 0 and delay_ms > 0:
            time.sleep(delay_ms / 1000)
        logger.info("取得開始: keyword=%s", kw.keyword)
        updated.append(_refresh_one(kw, settings, queue))
    return updated


def _refresh_one(keyword: Keyword, settings: Settings, queue: RetryQueue) -> Keyword:
    """1件取得する. 反映の前に updating を先に解除しておく."""
    try:
        result = scrape_keyword(keyword, settings)
    except Exception as e:
        logger.error("SERP 取得で想定外のエラー: keyword=%s, error=%s", keyword.keyword, e)
        result = _failed_result(keyword, e)

    # エラー記録は直後の updater がまとめて書く
    try:
        update_keyword(keyword.id, {"updating": False})
    except Exception:
        logger.exception("updating の解除に失敗: id=%s", keyword.id)

    return _apply_result(keyword, result, settings, queue)

"""取得結果をキーワードに反映するモジュール.

順位・URL・履歴・最終結果・エラー状態を計算して keyword 行を更新し、
正規化済みの Keyword を返す。DB 更新に失敗してもログだけ出して返す。
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from rank_refresher.db import update_keyword
from rank_refresher.errors import serialize_error
from rank_refresher.models import Keyword, RefreshResult, Settings, UpdateError, to_int
from rank_refresher.retry_queue import RetryQueue, default_queue

logger = logging.getLogger(__name__)

NO_ERROR = "false"


def today_key(now: datetime | None = None) -> str:
    """履歴の日付キー (ローカル日付, ゼロ埋めなし). 例: 2026-3-7"""
    now = now or datetime.now()
    return f"{now.year}-{now.month}-{now.day}"


def iso_now() -> str:
    """ミリ秒精度の UTC ISO 8601 文字列."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_position(fresh: Any, stored: Any) -> int:
    """新しい順位 → 保存済み順位 → 0 の順に採用する. 数値文字列は変換する."""
    fresh_pos = to_int(fresh)
    if fresh_pos is not None:
        return fresh_pos
    return to_int(stored) or 0


def serialise_last_result(result: Any) -> str:
    """lastResult 列に保存する JSON 文字列."""
    if result is None:
        return "[]"
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning("検索結果をシリアライズできません: %s", e)
        return "[]"


def _parse_last_result(serialised: str) -> list:
    try:
        parsed = json.loads(serialised)
    except json.JSONDecodeError:
        return []
    return parsed if isinstance(parsed, list) else []


def update_keyword_position(
    keyword: Keyword,
    result: RefreshResult,
    settings: Settings,
    queue: RetryQueue | None = None,
) -> Keyword:
    """取得結果をキーワードに反映する.

    Args:
        keyword: 保存済みのキーワード
        result: 今回の取得結果 (error 付きのこともある)
        settings: スクレイパー設定
        queue: 再試行キュー (省略時は設定パスのキュー)

    Returns:
        更新後の Keyword。updating は必ず False。
    """
    queue = queue or default_queue()
    now = datetime.now()
    timestamp = iso_now()

    new_pos = resolve_position(result.position, keyword.position)
    history = dict(keyword.history)
    history[today_key(now)] = new_pos

    last_result = serialise_last_result(result.organic)
    url = result.url if isinstance(result.url, str) else None
    map_pack = result.map_pack_top3 is True

    payload: dict[str, Any] = {
        "position": new_pos,
        "updating": False,
        "url": url,
        "lastResult": last_result,
        "history": json.dumps(history),
        "mapPackTop3": map_pack,
    }
    if result.error:
        update_error = UpdateError(
            date=timestamp,
            error=serialize_error(result.error),
            scraper=settings.scraper_type,
        )
        payload["lastUpdateError"] = update_error.to_json()
        last_updated = keyword.last_updated
    else:
        update_error = None
        payload["lastUpdateError"] = NO_ERROR
        payload["lastUpdated"] = timestamp
        last_updated = timestamp

    if result.error and settings.scrape_retry:
        queue.add(keyword.id)
    else:
        queue.remove(keyword.id)

    try:
        update_keyword(keyword.id, payload)
        logger.info("キーワード更新: %s → %s", keyword.keyword, new_pos or "圏外")
    except Exception:
        logger.exception("キーワード更新失敗: id=%s, keyword=%s", keyword.id, keyword.keyword)

    return replace(
        keyword,
        position=new_pos,
        url=url,
        history=history,
        last_result=_parse_last_result(last_result),
        last_updated=last_updated,
        last_update_error=update_error,
        updating=False,
        map_pack_top3=map_pack,
    )

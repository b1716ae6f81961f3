"""データモデル定義.

DB の行は from_row() で一度だけ正規化する。履歴が配列で保存されている、
真偽値が 0/1 や "true"/"false" で保存されている、といった旧形式の揺れは
ここで吸収し、以降のロジックでは扱わない。
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def to_bool(value: Any) -> bool:
    """0/1・文字列・ネイティブ bool を bool に揃える."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def to_int(value: Any) -> int | None:
    """数値または数値文字列を int に変換する. 変換できなければ None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def normalise_history(raw: Any) -> dict[str, int]:
    """履歴を {日付キー: 順位} の dict に揃える.

    JSON 文字列・dict を受け付ける。配列など dict 以外は空履歴とみなす。
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("history の JSON を解析できません: %r", raw[:80])
            return {}
    if not isinstance(raw, dict):
        return {}

    history: dict[str, int] = {}
    for key, value in raw.items():
        if not key:
            continue
        number = to_int(value)
        if number is not None:
            history[str(key)] = number
    return history


def _parse_last_result(raw: Any) -> list[dict]:
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


@dataclass
class SerpItem:
    """検索結果の1件 (オーガニック)."""

    title: str
    url: str
    position: int | None  # プロバイダが返した順位 (1始まり)

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url, "position": self.position}


@dataclass
class ScrapeOutcome:
    """アダプタの抽出結果."""

    organic: list[SerpItem] = field(default_factory=list)
    map_pack_top3: bool = False


@dataclass
class UpdateError:
    """最後の更新失敗の記録. DB には JSON 文字列で保存する."""

    date: str
    error: str
    scraper: str

    def to_json(self) -> str:
        return json.dumps({"date": self.date, "error": self.error, "scraper": self.scraper})

    @classmethod
    def from_raw(cls, raw: Any) -> UpdateError | None:
        """DB 値から復元する. "false" や空値はエラーなし (None)."""
        if isinstance(raw, dict):
            return cls(
                date=str(raw.get("date", "")),
                error=str(raw.get("error", "")),
                scraper=str(raw.get("scraper", "")),
            )
        if not isinstance(raw, str) or raw == "false" or "{" not in raw:
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("lastUpdateError を解析できません: %r", raw[:80])
            return cls(date="", error=raw, scraper="")
        if not isinstance(parsed, dict):
            return None
        return cls.from_raw(parsed)


@dataclass
class Keyword:
    """追跡対象キーワード (正規化済み)."""

    id: int
    keyword: str
    device: str = "desktop"  # "desktop" or "mobile"
    country: str = "US"
    location: str = ""  # "city,state,countryCode"
    domain: str = ""
    position: int = 0  # 0 = 圏外
    url: str | None = None
    history: dict[str, int] = field(default_factory=dict)
    last_result: list[dict] = field(default_factory=list)
    last_updated: str | None = None  # ISO 8601
    last_update_error: UpdateError | None = None
    updating: bool = False
    map_pack_top3: bool = False

    @classmethod
    def from_row(cls, row: dict) -> Keyword:
        """keyword テーブルの行から生成する."""
        location = row.get("location")
        return cls(
            id=int(row["ID"]),
            keyword=row.get("keyword") or "",
            device=row.get("device") or "desktop",
            country=row.get("country") or "US",
            location=location if isinstance(location, str) else "",
            domain=row.get("domain") or "",
            position=to_int(row.get("position")) or 0,
            url=row.get("url") or None,
            history=normalise_history(row.get("history")),
            last_result=_parse_last_result(row.get("lastResult")),
            last_updated=row.get("lastUpdated") or None,
            last_update_error=UpdateError.from_raw(row.get("lastUpdateError")),
            updating=to_bool(row.get("updating")),
            map_pack_top3=to_bool(row.get("mapPackTop3", row.get("map_pack_top3"))),
        )


@dataclass
class Domain:
    """追跡対象ドメイン."""

    id: int | None
    domain: str
    scrape_enabled: bool = True

    @classmethod
    def from_row(cls, row: dict) -> Domain:
        """domain テーブルの行から生成する. フラグ未設定は有効扱い."""
        raw_flag = row.get("scrapeEnabled", row.get("scrape_enabled"))
        return cls(
            id=to_int(row.get("ID")),
            domain=row.get("domain") or "",
            scrape_enabled=True if raw_flag is None else to_bool(raw_flag),
        )


@dataclass
class Settings:
    """スクレイパー関連のアプリ設定."""

    scraper_type: str
    scraping_api: str = ""
    scrape_delay: int = 0  # ミリ秒 (逐次実行時のみ)
    scrape_retry: bool = False


@dataclass
class RefreshResult:
    """1キーワード1回分の取得結果."""

    keyword_id: int
    position: Any = None  # 未取得なら None. 文字列で来ることもある
    url: str | None = None
    organic: Any = None  # list[dict] が基本. 旧データ由来の文字列もありうる
    map_pack_top3: bool | None = None
    error: str | None = None

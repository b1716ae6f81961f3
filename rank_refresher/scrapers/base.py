"""スクレイパーアダプタの共通定義.

アダプタはクラス継承ではなく、URL 生成・ヘッダー生成・結果抽出の3関数を
束ねた値 (ScraperAdapter) として表す。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from rank_refresher.errors import ScraperError
from rank_refresher.map_pack import compute_map_pack_top3
from rank_refresher.models import Keyword, ScrapeOutcome, SerpItem, Settings

UrlBuilder = Callable[[Keyword, Settings], str]
HeaderBuilder = Callable[[Keyword, Settings], dict]
Extractor = Callable[[Any, Any, Keyword], ScrapeOutcome]


@dataclass(frozen=True)
class ScraperAdapter:
    """外部 SERP プロバイダ1件分の能力記述."""

    id: str
    name: str
    website: str
    build_url: UrlBuilder
    build_headers: HeaderBuilder
    extract: Extractor
    result_key: str | None = None  # レスポンス内のオーガニック結果の配列キー
    allows_city: bool = False
    supports_map_pack: bool = False
    parallel_safe: bool = False  # 全キーワード同時リクエストに耐えるか
    timeout: int | None = None  # 秒. None なら REQUEST_TIMEOUT


def json_headers(**extra: str) -> dict:
    headers = {"Content-Type": "application/json"}
    headers.update(extra)
    return headers


def load_results(raw: Any, response: Any, result_key: str | None, provider_name: str) -> list:
    """抽出対象の結果配列を取り出す.

    raw は JSON 文字列・配列・レスポンス dict のいずれか。
    解析できない文字列は ScraperError、キーが無いだけなら空リスト。
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ScraperError(f"Invalid JSON response for {provider_name}: {e}") from e

    if isinstance(raw, list):
        return raw
    for source in (raw, response):
        if isinstance(source, dict) and result_key:
            items = source.get(result_key)
            if isinstance(items, list):
                return items
    return []


def collect_organic(results: list, rank_key: str = "position") -> list[SerpItem]:
    """タイトルとリンクが揃った項目だけを SerpItem にする."""
    organic: list[SerpItem] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        link = item.get("link")
        if title and link:
            organic.append(SerpItem(title=title, url=link, position=item.get(rank_key)))
    return organic


def make_extractor(
    provider_name: str,
    result_key: str | None,
    rank_key: str = "position",
    detect_map_pack: bool = False,
) -> Extractor:
    """プロバイダ名と結果キーから extract 関数を組み立てる.

    detect_map_pack が False のアダプタは判定を呼ばず常に False を返す。
    """

    def extract(raw: Any, response: Any, keyword: Keyword) -> ScrapeOutcome:
        results = load_results(raw, response, result_key, provider_name)
        organic = collect_organic(results, rank_key)
        map_pack = compute_map_pack_top3(keyword.domain, response) if detect_map_pack else False
        return ScrapeOutcome(organic=organic, map_pack_top3=map_pack)

    return extract

"""SERP プロバイダ呼び出しモジュール.

処理フロー:
  1. アダプタで URL・ヘッダーを組み立てる
  2. GET (アダプタ毎のタイムアウト)
  3. JSON としてパース。HTML などはテキストのまま扱う
  4. アダプタで抽出し、追跡ドメインの順位を照合する
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from bs4 import BeautifulSoup

from rank_refresher.config import REQUEST_TIMEOUT
from rank_refresher.errors import ScraperError, serialize_error
from rank_refresher.map_pack import normalise_host
from rank_refresher.models import Keyword, RefreshResult, SerpItem, Settings
from rank_refresher.scrapers import get_scraper

logger = logging.getLogger(__name__)


def _read_payload(resp: requests.Response) -> Any:
    """レスポンスボディを JSON として読む. 失敗したらテキストを返す."""
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _describe_html(html: str) -> str:
    """HTML エラーページから <title> か最初の見出しを取り出す."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in (soup.title, soup.find("h1")):
        if tag and tag.get_text(strip=True):
            return tag.get_text(strip=True)
    text = soup.get_text(" ", strip=True)
    return text[:200] if text else "Empty response"


def _http_error(status: int, payload: Any) -> ScraperError:
    if isinstance(payload, dict):
        body = {**payload, "status": status}
        message = serialize_error(body)
    elif isinstance(payload, str) and "<" in payload:
        message = f"[{status}] {_describe_html(payload)}"
    else:
        message = f"[{status}] {serialize_error(payload)}"
    return ScraperError(message)


def find_domain_position(domain: str, organic: list[SerpItem]) -> tuple[int, str | None]:
    """オーガニック結果から追跡ドメインの順位と URL を探す.

    Returns:
        (順位, URL)。見つからなければ (0, None)。
    """
    target = normalise_host(domain)
    if not target:
        return 0, None
    for index, item in enumerate(organic, start=1):
        if normalise_host(item.url) == target:
            position = item.position if isinstance(item.position, int) and item.position > 0 else index
            return position, item.url
    return 0, None


def scrape_keyword(keyword: Keyword, settings: Settings) -> RefreshResult:
    """1キーワード分の SERP を取得して RefreshResult にする.

    失敗しても例外は投げず、保存済みの値を引き継いだ error 付きの結果を返す。
    """
    failed = RefreshResult(
        keyword_id=keyword.id,
        position=keyword.position,
        url=keyword.url,
        organic=keyword.last_result,
        map_pack_top3=keyword.map_pack_top3,
    )

    try:
        scraper = get_scraper(settings.scraper_type)
        url = scraper.build_url(keyword, settings)
        headers = scraper.build_headers(keyword, settings)
        resp = requests.get(url, headers=headers, timeout=scraper.timeout or REQUEST_TIMEOUT)
        payload = _read_payload(resp)
        if resp.status_code >= 400:
            raise _http_error(resp.status_code, payload)

        if isinstance(payload, dict) and scraper.result_key:
            raw = payload.get(scraper.result_key)
        else:
            raw = payload
        outcome = scraper.extract(raw, payload, keyword)
    except (requests.RequestException, ScraperError) as e:
        failed.error = serialize_error(e)
        logger.error("SERP 取得失敗: keyword=%s, scraper=%s, error=%s",
                     keyword.keyword, settings.scraper_type, failed.error)
        return failed

    position, ranking_url = find_domain_position(keyword.domain, outcome.organic)
    logger.info("SERP 取得: keyword=%s, device=%s, 結果=%d 件, 順位=%s",
                keyword.keyword, keyword.device, len(outcome.organic), position or "圏外")
    return RefreshResult(
        keyword_id=keyword.id,
        position=position,
        url=ranking_url,
        organic=[item.to_dict() for item in outcome.organic],
        map_pack_top3=outcome.map_pack_top3 if scraper.supports_map_pack else False,
    )

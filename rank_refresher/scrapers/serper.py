"""Serper.dev アダプタ.

Serper は空白を "+" で受け取る。既にパーセントエンコード済みの入力は
一度デコードしてから組み立てる。
"""

from __future__ import annotations

from urllib.parse import unquote, urlencode

from rank_refresher.locales import country_info, parse_location, resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "Serper.dev"
_RESULT_KEY = "organic"


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country)
    country_name, _, lang, _ = country_info(country)
    parsed = parse_location(keyword.location, keyword.country)

    params = {"q": unquote(keyword.keyword)}
    if parsed["city"] or parsed["state"]:
        parts = [parsed["city"], parsed["state"], country_name]
        params["location"] = ",".join(unquote(part) for part in parts if part)
    params.update({"gl": country, "hl": lang, "apiKey": settings.scraping_api or ""})
    # urlencode の既定 (quote_plus) で空白は "+" になる
    return f"https://google.serper.dev/search?{urlencode(params)}"


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    return json_headers()


serper = ScraperAdapter(
    id="serper",
    name=_NAME,
    website="serper.dev",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY),
    result_key=_RESULT_KEY,
    allows_city=True,
)

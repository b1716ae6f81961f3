"""Serply.io アダプタ. デバイスと国はヘッダーで指定する."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from rank_refresher.locales import resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "Serply"
_RESULT_KEY = "results"

# X-Proxy-Location に指定できる国
SUPPORTED_COUNTRIES = ["US", "CA", "IE", "GB", "FR", "DE", "SE", "IN", "JP", "KR", "SG", "AU", "BR"]


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country)
    params = {"q": keyword.keyword, "num": 100, "hl": country}
    return f"https://api.serply.io/v1/search?{urlencode(params, quote_via=quote)}"


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    country = resolve_country_code(keyword.country, SUPPORTED_COUNTRIES).upper()
    return json_headers(**{
        "X-User-Agent": "mobile" if keyword.device == "mobile" else "desktop",
        "X-Proxy-Location": country,
        "X-Api-Key": settings.scraping_api,
    })


serply = ScraperAdapter(
    id="serply",
    name=_NAME,
    website="serply.io",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY, rank_key="realPosition"),
    result_key=_RESULT_KEY,
)

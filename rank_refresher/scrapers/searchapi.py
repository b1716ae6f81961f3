"""SearchApi.io アダプタ."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from rank_refresher.locales import build_location_param, resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "SearchApi.io"
_RESULT_KEY = "organic_results"


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country)
    params = {
        "engine": "google",
        "q": keyword.keyword,
        "num": 100,
        "gl": country,
        "device": keyword.device,
    }
    location = build_location_param(keyword.location, country)
    if location:
        params["location"] = location
    return f"https://www.searchapi.io/api/v1/search?{urlencode(params, quote_via=quote)}"


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    return json_headers(Authorization=f"Bearer {settings.scraping_api}")


searchapi = ScraperAdapter(
    id="searchapi",
    name=_NAME,
    website="searchapi.io",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY),
    result_key=_RESULT_KEY,
    allows_city=True,
    parallel_safe=True,
)

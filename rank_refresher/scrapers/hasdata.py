"""HasData (scrape-it.cloud) アダプタ."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from rank_refresher.locales import build_location_param, resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "HasData"
_RESULT_KEY = "organicResults"


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country)
    params = {"q": keyword.keyword}
    location = build_location_param(keyword.location, country)
    if location:
        params["location"] = location
    params.update({"num": 100, "gl": country.lower(), "deviceType": keyword.device})
    return f"https://api.scrape-it.cloud/scrape/google/serp?{urlencode(params, quote_via=quote)}"


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    return json_headers(**{"x-api-key": settings.scraping_api})


hasdata = ScraperAdapter(
    id="hasdata",
    name=_NAME,
    website="hasdata.com",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY),
    result_key=_RESULT_KEY,
    allows_city=True,
    timeout=60,
)

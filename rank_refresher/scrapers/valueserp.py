"""Value Serp アダプタ. ローカルパック判定に対応する唯一のプロバイダ."""

from __future__ import annotations

from urllib.parse import quote, urlencode

from rank_refresher.locales import build_location_param, country_info, resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "Value Serp"
_RESULT_KEY = "organic_results"


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country)
    params = {
        "api_key": settings.scraping_api,
        "q": keyword.keyword,
        "gl": country,
        "hl": country_info(country)[2],
    }
    # デスクトップは既定値なので mobile のときだけ付ける
    if keyword.device == "mobile":
        params["device"] = "mobile"
    location = build_location_param(keyword.location, country)
    if location:
        params["location"] = location
    params.update({
        "output": "json",
        "include_answer_box": "false",
        "include_advertiser_info": "false",
    })
    return f"https://api.valueserp.com/search?{urlencode(params, quote_via=quote)}"


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    return json_headers()


valueserp = ScraperAdapter(
    id="valueserp",
    name=_NAME,
    website="valueserp.com",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY, detect_map_pack=True),
    result_key=_RESULT_KEY,
    allows_city=True,
    supports_map_pack=True,
)

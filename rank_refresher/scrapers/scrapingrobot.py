"""Scraping Robot アダプタ.

Google 検索 URL を丸ごと url パラメータに渡す。地域 (市区) 指定は非対応。
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from rank_refresher.locales import country_info, resolve_country_code
from rank_refresher.models import Keyword, Settings
from rank_refresher.scrapers.base import ScraperAdapter, json_headers, make_extractor

_NAME = "Scraping Robot"
_RESULT_KEY = "result"


def _build_url(keyword: Keyword, settings: Settings) -> str:
    country = resolve_country_code(keyword.country).upper()
    lang = country_info(country)[2]
    google_url = "https://www.google.com/search?" + urlencode({
        "num": "100",
        "hl": lang,
        "gl": country,
        "q": keyword.keyword,
    })
    device = "&mobile=true" if keyword.device == "mobile" else ""
    return (
        f"https://api.scrapingrobot.com/?token={quote(settings.scraping_api or '', safe='')}"
        f"&proxyCountry={country}&render=false{device}"
        f"&url={quote(google_url, safe='')}"
    )


def _build_headers(keyword: Keyword, settings: Settings) -> dict:
    return json_headers()


scrapingrobot = ScraperAdapter(
    id="scrapingrobot",
    name=_NAME,
    website="scrapingrobot.com",
    build_url=_build_url,
    build_headers=_build_headers,
    extract=make_extractor(_NAME, _RESULT_KEY),
    result_key=_RESULT_KEY,
)

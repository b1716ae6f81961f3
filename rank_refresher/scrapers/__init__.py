"""SERP プロバイダアダプタ一覧."""

from rank_refresher.errors import ScraperError
from rank_refresher.scrapers.base import ScraperAdapter
from rank_refresher.scrapers.hasdata import hasdata
from rank_refresher.scrapers.scrapingrobot import scrapingrobot
from rank_refresher.scrapers.searchapi import searchapi
from rank_refresher.scrapers.serpapi import serpapi
from rank_refresher.scrapers.serper import serper
from rank_refresher.scrapers.serply import serply
from rank_refresher.scrapers.valueserp import valueserp

SCRAPERS: dict[str, ScraperAdapter] = {
    adapter.id: adapter
    for adapter in (serpapi, searchapi, serper, valueserp, hasdata, scrapingrobot, serply)
}


def get_scraper(scraper_id: str) -> ScraperAdapter:
    """ID からアダプタを取得する. 未登録なら ScraperError."""
    try:
        return SCRAPERS[scraper_id]
    except KeyError:
        raise ScraperError(f"Unsupported scraper: {scraper_id}") from None


__all__ = ["SCRAPERS", "ScraperAdapter", "get_scraper"]

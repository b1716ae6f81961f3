"""ローカルパック (マップ上位3件) 判定モジュール."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

# レスポンス内でローカルパックが入りうるキー (プロバイダ共通)
_LOCAL_BLOCK_KEYS = ("local_results", "local_pack", "local_map", "localResults", "places")
_ENTRY_URL_KEYS = ("website", "link", "url", "domain")


def normalise_host(value: str | None) -> str:
    """URL またはドメイン文字列から www. なしの小文字ホスト名を取り出す."""
    if not value or not isinstance(value, str):
        return ""
    text = value.strip().lower()
    if "://" not in text:
        text = f"http://{text}"
    host = urlparse(text).hostname or ""
    return host.removeprefix("www.")


def _local_entries(response: Any) -> list[dict]:
    if not isinstance(response, dict):
        return []
    for key in _LOCAL_BLOCK_KEYS:
        block = response.get(key)
        # SerpApi は {"places": [...]} で包んで返す
        if isinstance(block, dict):
            block = block.get("places") or block.get("results")
        if isinstance(block, list) and block:
            return [entry for entry in block if isinstance(entry, dict)]
    return []


def _entry_hosts(entry: dict) -> set[str]:
    hosts = {normalise_host(entry.get(key)) for key in _ENTRY_URL_KEYS}
    links = entry.get("links")
    if isinstance(links, dict):
        hosts.add(normalise_host(links.get("website")))
    hosts.discard("")
    return hosts


def compute_map_pack_top3(domain: str, response: Any) -> bool:
    """追跡ドメインがローカルパックの上位3件に含まれるか判定する.

    Args:
        domain: 追跡ドメイン (例: example.com)
        response: プロバイダのレスポンス全体 (パース済み)

    Returns:
        上位3件のいずれかのホスト名が一致すれば True。ブロックがなければ False。
    """
    target = normalise_host(domain)
    if not target:
        return False

    entries = _local_entries(response)
    for entry in entries[:3]:
        hosts = _entry_hosts(entry)
        if any(host == target or host.endswith(f".{target}") for host in hosts):
            return True
    return False

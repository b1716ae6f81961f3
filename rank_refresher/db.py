"""Supabase データベース操作モジュール.

keyword / domain テーブルへの参照・更新だけを提供する。
クライアントは初回アクセス時に生成する。
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable

from supabase import Client, create_client

from rank_refresher.config import SUPABASE_SECRET_KEY, SUPABASE_URL
from rank_refresher.models import Domain, Keyword

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _client() -> Client:
    return create_client(SUPABASE_URL, SUPABASE_SECRET_KEY)


def _table(name: str):
    """テーブルを参照する."""
    return _client().table(name)


def find_keywords(ids: Iterable[int] | None = None, domain: str | None = None) -> list[Keyword]:
    """キーワードを取得する.

    Args:
        ids: キーワード ID で絞り込む (任意)
        domain: ドメイン名で絞り込む (任意)

    Returns:
        正規化済みの Keyword のリスト
    """
    id_list = list(ids) if ids is not None else None
    if id_list == []:
        return []

    query = _table("keyword").select("*")
    if id_list is not None:
        query = query.in_("ID", id_list)
    if domain:
        query = query.eq("domain", domain)
    resp = query.execute()
    return [Keyword.from_row(row) for row in resp.data]


def find_domains_by_names(names: Iterable[str]) -> list[Domain]:
    """ドメイン名のリストからドメインを一括取得する."""
    name_list = list(names)
    if not name_list:
        return []
    resp = _table("domain").select("*").in_("domain", name_list).execute()
    return [Domain.from_row(row) for row in resp.data]


def update_keywords(ids: Iterable[int], fields: dict) -> None:
    """複数キーワードの同じ列をまとめて更新する."""
    id_list = list(ids)
    if not id_list:
        return
    _table("keyword").update(fields).in_("ID", id_list).execute()
    logger.info("keyword を %d 件更新: %s", len(id_list), ", ".join(fields))


def update_keyword(keyword_id: int, fields: dict) -> None:
    """キーワード1件を更新する."""
    _table("keyword").update(fields).eq("ID", keyword_id).execute()

"""rank_refresher — SERP プロバイダ経由のキーワード順位更新."""

"""再試行キューモジュール.

失敗したキーワード ID を JSON 配列として1ファイルに保持する。
読み込み→更新→書き込みはストア毎のロックで直列化し、書き込みは一時ファイル
からの置き換えで行う (途中で落ちても壊れたファイルを残さない)。
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from rank_refresher.config import RETRY_QUEUE_PATH

logger = logging.getLogger(__name__)


class RetryQueueReadError(Exception):
    """キューファイルが読めない (存在しない場合を除く)."""


class RetryQueue:
    """再試行待ちキーワード ID の永続集合."""

    def __init__(self, path: Path | str = RETRY_QUEUE_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()

    def read_queue(self) -> list[int]:
        """キューを読む. ファイルがなければ空リスト.

        Raises:
            RetryQueueReadError: 権限エラー・JSON 破損・配列以外の内容
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RetryQueueReadError(f"{self.path}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as e:
            raise RetryQueueReadError(f"{self.path}: invalid JSON ({e})") from e
        if not isinstance(data, list):
            raise RetryQueueReadError(f"{self.path}: expected a JSON array")
        return data

    def write_queue(self, ids: list[int]) -> None:
        """キュー全体を書き込む."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".retry_queue_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(ids, f)
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def read(self) -> list[int]:
        """現在のキュー. 読めなければログを出して空リスト."""
        with self._lock:
            try:
                return self.read_queue()
            except RetryQueueReadError as e:
                logger.error("再試行キューの読み込みに失敗: %s", e)
                return []

    def add(self, keyword_id: int) -> None:
        """ID を追加する (重複はしない)."""
        with self._lock:
            try:
                queue = self.read_queue()
                if keyword_id in queue:
                    return
                queue.append(keyword_id)
                self.write_queue(queue)
            except (RetryQueueReadError, OSError) as e:
                logger.error("再試行キューへの追加に失敗: id=%s, error=%s", keyword_id, e)
                return
        logger.info("再試行キューに追加: id=%s", keyword_id)

    def remove(self, keyword_id: int) -> None:
        """ID を1件取り除く. なければ何もしない."""
        self.remove_many([keyword_id])

    def remove_many(self, ids: Iterable[int]) -> None:
        """複数の ID をまとめて取り除く.

        読み込み・書き込みは1回ずつ。件数が変わらなければ書き込まない。
        """
        to_remove = set(ids)
        if not to_remove:
            return
        with self._lock:
            try:
                queue = self.read_queue()
                filtered = [item for item in queue if item not in to_remove]
                if len(filtered) == len(queue):
                    return
                self.write_queue(filtered)
            except (RetryQueueReadError, OSError) as e:
                logger.error("再試行キューの更新に失敗: %s", e)
                return
        logger.info("再試行キューから %d 件削除", len(queue) - len(filtered))


@lru_cache(maxsize=1)
def default_queue() -> RetryQueue:
    """設定パスのキュー. プロセス内で1インスタンスを共有し、ロックも共有する."""
    return RetryQueue(RETRY_QUEUE_PATH)

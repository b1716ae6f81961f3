"""retry_queue モジュールのテスト."""

import json
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from rank_refresher.retry_queue import RetryQueue


def _queue(tmp_path, content=None) -> RetryQueue:
    path = tmp_path / "failed_queue.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    return RetryQueue(path)


class TestRemoveMany:
    """remove_many のテスト."""

    def test_single_write(self, tmp_path):
        """1回の書き込みで残りの ID だけになること."""
        queue = _queue(tmp_path, "[1,2,3,4,5]")
        with patch.object(queue, "write_queue", wraps=queue.write_queue) as mock_write:
            queue.remove_many([1, 2, 3])

        mock_write.assert_called_once_with([4, 5])
        assert json.loads(queue.path.read_text()) == [4, 5]

    def test_no_write_when_nothing_removed(self, tmp_path):
        queue = _queue(tmp_path, "[1,2,3]")
        with patch.object(queue, "write_queue") as mock_write:
            queue.remove_many([99])

        mock_write.assert_not_called()

    def test_missing_file_is_empty_queue(self, tmp_path, caplog):
        queue = _queue(tmp_path)
        with patch.object(queue, "write_queue") as mock_write:
            queue.remove_many([1])

        mock_write.assert_not_called()
        assert not queue.path.exists()
        assert "ERROR" not in caplog.text

    def test_corrupt_file_logs_and_aborts(self, tmp_path, caplog):
        queue = _queue(tmp_path, "{not json")
        with patch.object(queue, "write_queue") as mock_write:
            queue.remove_many([1])

        mock_write.assert_not_called()
        assert "再試行キューの更新に失敗" in caplog.text
        assert queue.path.read_text() == "{not json"


class TestAdd:
    """add / remove のテスト."""

    def test_add_creates_file(self, tmp_path):
        queue = _queue(tmp_path)
        queue.add(3)
        queue.add(5)

        assert queue.read() == [3, 5]

    def test_add_avoids_duplicates(self, tmp_path):
        queue = _queue(tmp_path, "[3]")
        with patch.object(queue, "write_queue") as mock_write:
            queue.add(3)

        mock_write.assert_not_called()

    def test_remove_single(self, tmp_path):
        queue = _queue(tmp_path, "[3,4]")
        queue.remove(3)

        assert queue.read() == [4]

    def test_non_list_document(self, tmp_path):
        queue = _queue(tmp_path, '{"ids": [1]}')
        queue.add(2)

        assert queue.path.read_text() == '{"ids": [1]}'
        assert queue.read() == []


class TestConcurrency:
    """同じキューへの同時更新のテスト."""

    def test_concurrent_add_and_remove_lose_nothing(self, tmp_path):
        """複数スレッドから add / remove しても更新が失われないこと."""
        queue = _queue(tmp_path, json.dumps(list(range(100, 120))))
        original_read = queue.read_queue

        def slow_read():
            # 読み込みと書き込みの間に他スレッドが割り込める隙間を作る
            ids = original_read()
            time.sleep(0.005)
            return ids

        with patch.object(queue, "read_queue", side_effect=slow_read), \
                ThreadPoolExecutor(max_workers=8) as pool:
            for keyword_id in range(20):
                pool.submit(queue.add, keyword_id)
                pool.submit(queue.remove, keyword_id + 100)

        assert sorted(queue.read()) == list(range(20))

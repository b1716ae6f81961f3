"""main モジュールのテスト."""

from unittest.mock import MagicMock, call, patch

from rank_refresher.main import parse_args, run
from rank_refresher.models import Keyword, Settings


class TestParseArgs:
    """parse_args のテスト."""

    def test_ids_drop_invalid(self):
        assert parse_args(["--ids", "1,abc,3"]).ids == [1, 3]

    def test_defaults(self):
        args = parse_args([])
        assert args.ids is None
        assert args.domain is None
        assert args.retry_failed is False


@patch("rank_refresher.main.setup_logging")
@patch("rank_refresher.main.load_settings", return_value=Settings(scraper_type="serper"))
@patch("rank_refresher.main.refresh_and_update_keywords")
@patch("rank_refresher.main.update_keywords")
@patch("rank_refresher.main.find_keywords")
class TestRun:
    """run のテスト."""

    def test_marks_updating_then_refreshes(self, mock_find, mock_update, mock_refresh, _settings, _logging):
        keywords = [Keyword(id=1, keyword="a"), Keyword(id=2, keyword="b")]
        mock_find.return_value = keywords
        mock_refresh.return_value = keywords

        assert run(["--domain", "example.com"]) == 0

        mock_find.assert_called_once_with(domain="example.com")
        mock_update.assert_called_once_with([1, 2], {"updating": True})
        mock_refresh.assert_called_once_with(keywords, Settings(scraper_type="serper"))

    def test_refresh_failure_releases_updating(self, mock_find, mock_update, mock_refresh, _settings, _logging):
        """順位更新が例外で中断しても updating が解除されること."""
        mock_find.return_value = [Keyword(id=1, keyword="a"), Keyword(id=2, keyword="b")]
        mock_refresh.side_effect = RuntimeError("db down")

        assert run([]) == 1

        assert mock_update.call_args_list == [
            call([1, 2], {"updating": True}),
            call([1, 2], {"updating": False}),
        ]

    def test_no_valid_ids(self, mock_find, mock_update, mock_refresh, _settings, _logging):
        assert run(["--ids", "abc"]) == 2
        mock_find.assert_not_called()

    def test_retry_failed_uses_queue(self, mock_find, mock_update, mock_refresh, _settings, _logging):
        mock_find.return_value = []
        queue = MagicMock()
        queue.read.return_value = [4, 5]
        with patch("rank_refresher.main.default_queue", return_value=queue):
            assert run(["--retry-failed"]) == 0

        mock_find.assert_called_once_with(ids=[4, 5])
        mock_refresh.assert_not_called()

"""updater モジュールのテスト."""

import json
from datetime import datetime
from unittest.mock import MagicMock, patch

from rank_refresher.models import Keyword, RefreshResult, Settings, UpdateError
from rank_refresher.updater import resolve_position, serialise_last_result, today_key, update_keyword_position

SETTINGS = Settings(scraper_type="serpapi", scrape_retry=True)


def _keyword(**overrides) -> Keyword:
    values = {"id": 1, "keyword": "coffee", "domain": "example.com", "position": 5,
              "history": {"2024-1-1": 8}, "last_updated": "2024-01-01T00:00:00.000Z",
              "updating": True}
    values.update(overrides)
    return Keyword(**values)


class TestHelpers:
    """補助関数のテスト."""

    def test_today_key_has_no_zero_padding(self):
        assert today_key(datetime(2026, 3, 7)) == "2026-3-7"

    def test_resolve_position(self):
        assert resolve_position(3, 5) == 3
        assert resolve_position("4", 5) == 4
        assert resolve_position(None, 5) == 5
        assert resolve_position("invalid", None) == 0
        assert resolve_position(None, None) == 0

    def test_serialise_last_result(self):
        assert serialise_last_result(None) == "[]"
        assert serialise_last_result('[{"a": 1}]') == '[{"a": 1}]'
        assert serialise_last_result([]) == "[]"


@patch("rank_refresher.updater.update_keyword")
class TestUpdateKeywordPosition:
    """update_keyword_position のテスト."""

    def test_success(self, mock_update):
        queue = MagicMock()
        result = RefreshResult(keyword_id=1, position=2, url="https://example.com/a",
                               organic=[{"title": "t", "url": "https://example.com/a", "position": 2}])

        updated = update_keyword_position(_keyword(), result, SETTINGS, queue)

        payload = mock_update.call_args.args[1]
        history = json.loads(payload["history"])
        assert payload["position"] == 2
        assert payload["updating"] is False
        assert payload["lastUpdateError"] == "false"
        assert payload["lastUpdated"].endswith("Z")
        assert history["2024-1-1"] == 8
        assert history[today_key()] == 2
        assert updated.updating is False
        assert updated.last_update_error is None
        assert updated.last_updated == payload["lastUpdated"]
        assert updated.history == history
        queue.remove.assert_called_once_with(1)
        queue.add.assert_not_called()

    def test_failure_keeps_last_updated(self, mock_update):
        queue = MagicMock()
        result = RefreshResult(keyword_id=1, position=5, error="boom")

        updated = update_keyword_position(_keyword(), result, SETTINGS, queue)

        payload = mock_update.call_args.args[1]
        error = json.loads(payload["lastUpdateError"])
        assert "lastUpdated" not in payload
        assert error["error"] == "boom"
        assert error["scraper"] == "serpapi"
        assert updated.last_updated == "2024-01-01T00:00:00.000Z"
        assert isinstance(updated.last_update_error, UpdateError)
        assert updated.updating is False
        queue.add.assert_called_once_with(1)

    def test_failure_without_retry_dequeues(self, mock_update):
        queue = MagicMock()
        result = RefreshResult(keyword_id=1, error="boom")

        update_keyword_position(_keyword(), result, Settings(scraper_type="serpapi"), queue)

        queue.remove.assert_called_once_with(1)
        queue.add.assert_not_called()

    def test_position_fallbacks(self, mock_update):
        """結果に順位がなければ保存済みの順位、それも無ければ 0."""
        queue = MagicMock()
        update_keyword_position(_keyword(position=5), RefreshResult(keyword_id=1), SETTINGS, queue)
        assert mock_update.call_args.args[1]["position"] == 5

        update_keyword_position(_keyword(position=None), RefreshResult(keyword_id=1, position="invalid"),
                                SETTINGS, queue)
        assert mock_update.call_args.args[1]["position"] == 0

    def test_empty_result_round_trip(self, mock_update):
        result = RefreshResult(keyword_id=1, position=3, organic=[])
        updated = update_keyword_position(_keyword(), result, SETTINGS, MagicMock())

        payload = mock_update.call_args.args[1]
        assert json.loads(payload["lastResult"]) == []
        assert updated.last_result == []

    def test_url_and_map_pack_normalised(self, mock_update):
        result = RefreshResult(keyword_id=1, position=3, url=None, map_pack_top3=None)
        update_keyword_position(_keyword(), result, SETTINGS, MagicMock())

        payload = mock_update.call_args.args[1]
        assert "url" in payload and payload["url"] is None
        assert payload["mapPackTop3"] is False

    def test_legacy_array_history(self, mock_update):
        keyword = Keyword.from_row({"ID": 1, "keyword": "coffee", "history": "[1, 2]"})
        update_keyword_position(keyword, RefreshResult(keyword_id=1, position=4), SETTINGS, MagicMock())

        assert json.loads(mock_update.call_args.args[1]["history"]) == {today_key(): 4}

    def test_persistence_failure_still_returns(self, mock_update):
        mock_update.side_effect = RuntimeError("db down")
        result = RefreshResult(keyword_id=1, position=3, organic=[])

        updated = update_keyword_position(_keyword(), result, SETTINGS, MagicMock())

        assert updated.position == 3
        assert updated.updating is False

"""models モジュールのユニットテスト."""

from rank_refresher.models import Domain, Keyword, UpdateError, normalise_history, to_bool, to_int


class TestToBool:
    """to_bool のテスト."""

    def test_values(self):
        assert to_bool(True) is True
        assert to_bool(1) is True
        assert to_bool(0) is False
        assert to_bool("true") is True
        assert to_bool(" Yes ") is True
        assert to_bool("false") is False
        assert to_bool("off") is False
        assert to_bool("maybe") is False
        assert to_bool(None) is False


class TestToInt:
    """to_int のテスト."""

    def test_values(self):
        assert to_int("5") == 5
        assert to_int(4.0) == 4
        assert to_int("invalid") is None
        assert to_int(None) is None
        assert to_int("") is None
        assert to_int(float("nan")) is None


class TestNormaliseHistory:
    """normalise_history のテスト."""

    def test_array_becomes_empty(self):
        assert normalise_history([1, 2]) == {}
        assert normalise_history("[1, 2]") == {}

    def test_drops_non_numeric(self):
        assert normalise_history({"2024-1-1": "3", "2024-1-2": "x", "": 1}) == {"2024-1-1": 3}


class TestKeywordFromRow:
    """Keyword.from_row のテスト."""

    def test_legacy_row(self):
        keyword = Keyword.from_row({
            "ID": "3",
            "keyword": "coffee",
            "position": "7",
            "history": "not json",
            "lastResult": '[{"title": "t"}]',
            "lastUpdateError": "false",
            "updating": "0",
            "map_pack_top3": 1,
            "location": None,
        })

        assert keyword.id == 3
        assert keyword.position == 7
        assert keyword.history == {}
        assert keyword.last_result == [{"title": "t"}]
        assert keyword.last_update_error is None
        assert keyword.updating is False
        assert keyword.map_pack_top3 is True
        assert keyword.location == ""

    def test_update_error_json(self):
        raw = '{"date": "2024-01-01T00:00:00.000Z", "error": "boom", "scraper": "serper"}'
        keyword = Keyword.from_row({"ID": 1, "lastUpdateError": raw})

        assert keyword.last_update_error == UpdateError("2024-01-01T00:00:00.000Z", "boom", "serper")


class TestDomainFromRow:
    """Domain.from_row のテスト."""

    def test_missing_flag_is_enabled(self):
        assert Domain.from_row({"domain": "a.com"}).scrape_enabled is True

    def test_string_flag(self):
        assert Domain.from_row({"domain": "a.com", "scrapeEnabled": "false"}).scrape_enabled is False

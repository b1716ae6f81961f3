"""errors モジュールのユニットテスト."""

from rank_refresher.errors import ScraperError, serialize_error


class TestSerializeError:
    """serialize_error のテスト."""

    def test_status_and_nested_request_info(self):
        """ステータスと request_info.error.message を平坦化すること."""
        payload = {
            "status": 400,
            "error": "rate limit",
            "request_info": {"success": False, "error": {"code": "RATE_LIMITED", "message": "Too many"}},
        }
        result = serialize_error(payload)

        assert "[400]" in result
        assert "rate limit" in result
        assert "Too many" in result

    def test_exception_with_cause(self):
        root = ConnectionError("Network unreachable")
        try:
            raise ScraperError("Failed to refresh keyword") from root
        except ScraperError as e:
            result = serialize_error(e)

        assert "Failed to refresh keyword" in result
        assert "Network unreachable" in result

    def test_plain_object_falls_back_to_json(self):
        assert serialize_error({"meta": {"attempt": 1}}) == '{"meta":{"attempt":1}}'

    def test_circular_object(self):
        circular = {"prop": "value"}
        circular["self"] = circular

        assert serialize_error(circular) == "Unserializable error object"

    def test_nullish_and_empty(self):
        assert serialize_error(None) == "Unknown error"
        assert serialize_error("") == "Unknown error"

    def test_primitives(self):
        assert serialize_error(404) == "404"
        assert serialize_error(True) == "true"

    def test_readable_string_unchanged(self):
        assert serialize_error("Simple error message") == "Simple error message"

    def test_status_only_uses_json(self):
        assert serialize_error({"status": 500}) == '{"status":500}'

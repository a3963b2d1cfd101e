"""Tests for CORS header building and merging."""

from switchyard.config import CORSConfig
from switchyard.http.cors import apply_cors, cors_headers, preflight_response


class TestCorsHeaders:
    def test_defaults(self) -> None:
        headers = cors_headers(CORSConfig())
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert headers["Access-Control-Allow-Methods"] == "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        assert headers["Access-Control-Allow-Headers"] == (
            "Content-Type,Authorization,X-Amz-Date,X-Api-Key,X-Amz-Security-Token"
        )
        assert "Access-Control-Max-Age" not in headers
        assert "Access-Control-Allow-Credentials" not in headers

    def test_preflight_includes_max_age(self) -> None:
        headers = cors_headers(CORSConfig(max_age=120), preflight=True)
        assert headers["Access-Control-Max-Age"] == "120"

    def test_allowed_origin_echoed(self) -> None:
        config = CORSConfig(allow_origins=("https://a.example", "https://b.example"))
        headers = cors_headers(config, origin="https://b.example")
        assert headers["Access-Control-Allow-Origin"] == "https://b.example"
        assert headers["Vary"] == "Origin"

    def test_foreign_origin_gets_no_allow_origin(self) -> None:
        config = CORSConfig(allow_origins=("https://a.example", "https://b.example"))
        assert "Access-Control-Allow-Origin" not in cors_headers(config, origin="https://evil.example")
        assert "Access-Control-Allow-Origin" not in cors_headers(config)

    def test_single_origin_always_sent(self) -> None:
        config = CORSConfig(allow_origins=("https://a.example",))
        assert cors_headers(config)["Access-Control-Allow-Origin"] == "https://a.example"

    def test_wildcard_with_credentials_echoes_origin(self) -> None:
        config = CORSConfig(allow_credentials=True)
        headers = cors_headers(config, origin="https://a.example")
        assert headers["Access-Control-Allow-Origin"] == "https://a.example"
        assert headers["Vary"] == "Origin"

    def test_wildcard_has_no_vary(self) -> None:
        headers = cors_headers(CORSConfig(), origin="https://a.example")
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert "Vary" not in headers

    def test_credentials_and_expose(self) -> None:
        config = CORSConfig(allow_credentials=True, expose_headers=("X-Request-Id",))
        headers = cors_headers(config)
        assert headers["Access-Control-Allow-Credentials"] == "true"
        assert headers["Access-Control-Expose-Headers"] == "X-Request-Id"


class TestPreflight:
    def test_response(self) -> None:
        response = preflight_response(CORSConfig())
        assert response["statusCode"] == 204
        assert response["body"] == ""
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"


class TestApplyCors:
    def test_adds_headers(self) -> None:
        result = apply_cors({"statusCode": 200, "body": "ok"}, CORSConfig())
        assert result["headers"]["Access-Control-Allow-Origin"] == "*"
        assert result["body"] == "ok"

    def test_handler_headers_win(self) -> None:
        response = {"statusCode": 200, "headers": {"Access-Control-Allow-Origin": "https://mine"}}
        result = apply_cors(response, CORSConfig())
        assert result["headers"]["Access-Control-Allow-Origin"] == "https://mine"

    def test_handler_headers_win_case_insensitively(self) -> None:
        response = {"statusCode": 200, "headers": {"access-control-allow-origin": "https://mine"}}
        result = apply_cors(response, CORSConfig())
        assert "Access-Control-Allow-Origin" not in result["headers"]
        assert result["headers"]["access-control-allow-origin"] == "https://mine"

    def test_other_handler_headers_kept(self) -> None:
        response = {"statusCode": 200, "headers": {"Content-Type": "text/plain"}}
        result = apply_cors(response, CORSConfig())
        assert result["headers"]["Content-Type"] == "text/plain"
        assert "Access-Control-Allow-Methods" in result["headers"]

    def test_input_not_mutated(self) -> None:
        response = {"statusCode": 200, "headers": {}}
        apply_cors(response, CORSConfig())
        assert response["headers"] == {}

    def test_non_mapping_untouched(self) -> None:
        assert apply_cors("plain", CORSConfig()) == "plain"
        assert apply_cors(None, CORSConfig()) is None

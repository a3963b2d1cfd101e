"""Tests for switchyard.routing.router — route tables and resolution."""

import pytest

from switchyard.errors import ConfigurationError
from switchyard.routing.route import RouteEntry
from switchyard.routing.router import Router, Routes
from switchyard.triggers import Segment, Trigger


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


def _mw(request):
    return None


def _compile(table: dict) -> Router:
    return Routes.from_mapping(table).compile()


class TestFlatTable:
    def test_param_route_is_public(self) -> None:
        router = _compile({"apigateway": {"get": {"/users/{id}": _handler}}})
        match = router.resolve("GET", "/users/42")
        assert match is not None
        assert match.params == {"id": "42"}
        assert match.segment is Segment.PUBLIC
        assert match.middleware == ()
        assert match.handler is _handler

    def test_method_is_case_insensitive(self) -> None:
        router = _compile({"apigateway": {"GET": {"/users": _handler}}})
        assert router.resolve("get", "/users") is not None

    def test_wrong_method_is_not_found(self) -> None:
        router = _compile({"apigateway": {"get": {"/users": _handler}}})
        assert router.resolve("POST", "/users") is None

    def test_unknown_path_is_not_found(self) -> None:
        router = _compile({"apigateway": {"get": {"/users": _handler}}})
        assert router.resolve("GET", "/orders") is None

    def test_no_prefix_match(self) -> None:
        router = _compile({"apigateway": {"get": {"/users": _handler}}})
        assert router.resolve("GET", "/users/42") is None

    def test_mapping_entry_with_middleware(self) -> None:
        router = _compile(
            {"apigateway": {"get": {"/users": {"handler": _handler, "middleware": [_mw]}}}}
        )
        match = router.resolve("GET", "/users")
        assert match is not None
        assert match.route_middleware == (_mw,)


class TestSegmentedTable:
    def test_resolves_segment(self) -> None:
        router = _compile(
            {
                "apigateway": {
                    "public": {"get": {"/health": _handler}},
                    "private": {"get": {"/profile": _other}},
                }
            }
        )
        match = router.resolve("GET", "/profile")
        assert match is not None
        assert match.segment is Segment.PRIVATE
        assert match.handler is _other

    def test_earlier_segment_wins_for_identical_route(self) -> None:
        router = _compile(
            {
                "apigateway": {
                    "internal": {"get": {"/items/{id}": _other}},
                    "private": {"get": {"/items/{id}": _handler}},
                }
            }
        )
        match = router.resolve("GET", "/items/1")
        assert match is not None
        assert match.segment is Segment.PRIVATE
        assert match.handler is _handler

    def test_search_stops_at_first_matching_segment(self) -> None:
        router = _compile(
            {
                "apigateway": {
                    "public": {"get": {"/items/{id}": _handler}},
                    "backoffice": {"get": {"/items/special": _other}},
                }
            }
        )
        match = router.resolve("GET", "/items/special")
        assert match is not None
        assert match.segment is Segment.PUBLIC
        assert match.params == {"id": "special"}

    def test_segment_config_with_middleware(self) -> None:
        router = _compile(
            {
                "apigateway": {
                    "private": {"routes": {"get": {"/me": _handler}}, "middleware": [_mw]},
                }
            }
        )
        match = router.resolve("GET", "/me")
        assert match is not None
        assert match.middleware == (_mw,)

    def test_mixed_keys_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="mixes segment keys"):
            Routes.from_mapping({"apigateway": {"public": {}, "get": {}}})


class TestPrecedenceWithinSegment:
    def test_literal_before_parametric(self) -> None:
        routes = Routes()
        routes.add("GET", "/users/{id}", _handler)
        routes.add("GET", "/users/me", _other)
        router = routes.compile()

        match = router.resolve("GET", "/users/me")
        assert match is not None
        assert match.handler is _other
        assert match.params == {}

    def test_parametric_in_declaration_order(self) -> None:
        routes = Routes()
        routes.add("GET", "/a/{x}", _handler)
        routes.add("GET", "/{y}/b", _other)
        router = routes.compile()

        match = router.resolve("GET", "/a/b")
        assert match is not None
        assert match.handler is _handler
        assert match.params == {"x": "b"}

    def test_route_key_looked_up_first(self) -> None:
        routes = Routes()
        routes.add("GET", "/a/{x}", _handler)
        routes.add("GET", "/{y}/b", _other)
        router = routes.compile()

        match = router.resolve("GET", "/a/b", route_key="/{y}/b")
        assert match is not None
        assert match.handler is _other
        assert match.params == {"y": "a"}

    def test_route_key_beats_literal(self) -> None:
        routes = Routes()
        routes.add("GET", "/users/{id}", _handler)
        routes.add("GET", "/users/me", _other)
        router = routes.compile()

        match = router.resolve("GET", "/users/me", route_key="/users/{id}")
        assert match is not None
        assert match.handler is _handler
        assert match.params == {"id": "me"}


class TestParamMerging:
    def test_upstream_params_preserved(self) -> None:
        router = _compile({"apigateway": {"get": {"/users/{id}": _handler}}})
        match = router.resolve("GET", "/users/42", upstream_params={"stage": "prod"})
        assert match is not None
        assert match.params == {"stage": "prod", "id": "42"}

    def test_local_params_win(self) -> None:
        router = _compile({"apigateway": {"get": {"/users/{id}": _handler}}})
        match = router.resolve("GET", "/users/42", upstream_params={"id": "stale"})
        assert match is not None
        assert match.params["id"] == "42"


class TestKeyedRoutes:
    def test_event_bus_exact(self) -> None:
        router = _compile({"eventbridge": {"user.created": _handler, "default": _other}})
        match = router.resolve_key(Trigger.EVENT_BUS, "user.created")
        assert match is not None
        assert match.handler is _handler
        assert match.fallback is False

    def test_event_bus_falls_back_to_default(self) -> None:
        router = _compile({"eventbridge": {"default": _other}})
        match = router.resolve_key(Trigger.EVENT_BUS, "user.created")
        assert match is not None
        assert match.handler is _other
        assert match.fallback is True

    def test_missing_default_is_not_found(self) -> None:
        router = _compile({"sqs": {"orders": _handler}})
        assert router.resolve_key(Trigger.QUEUE, "notification-queue") is None

    def test_direct_uses_default_only(self) -> None:
        router = _compile({"lambda": {"default": _handler}})
        match = router.resolve_key(Trigger.DIRECT, "anything")
        assert match is not None
        assert match.handler is _handler

    def test_no_table(self) -> None:
        router = Routes().compile()
        assert router.resolve_key(Trigger.QUEUE, "q") is None
        assert router.resolve("GET", "/") is None


class TestBuilder:
    def test_decorators(self) -> None:
        routes = Routes()

        @routes.get("/users/{id}", segment=Segment.PRIVATE, middleware=[_mw])
        def get_user(request):
            return request

        @routes.event("user.created")
        def on_created(request):
            return request

        @routes.queue("notification-queue")
        def on_message(request):
            return request

        @routes.direct
        def on_invoke(request):
            return request

        routes.use(Segment.PRIVATE, _mw)
        router = routes.compile()

        match = router.resolve("GET", "/users/1")
        assert match is not None
        assert match.handler is get_user
        assert match.middleware == (_mw,)
        assert match.route_middleware == (_mw,)
        assert router.resolve_key(Trigger.EVENT_BUS, "user.created").handler is on_created
        assert router.resolve_key(Trigger.QUEUE, "notification-queue").handler is on_message
        assert router.resolve_key(Trigger.DIRECT, None).handler is on_invoke

    def test_route_with_multiple_methods(self) -> None:
        routes = Routes()
        routes.route("/items", methods=["GET", "POST"])(_handler)
        router = routes.compile()
        assert router.resolve("GET", "/items") is not None
        assert router.resolve("POST", "/items") is not None

    def test_route_entry_accepted(self) -> None:
        routes = Routes()
        routes.add("GET", "/x", RouteEntry(_handler, (_mw,)))
        match = routes.compile().resolve("GET", "/x")
        assert match is not None
        assert match.route_middleware == (_mw,)

    def test_duplicate_route_rejected(self) -> None:
        routes = Routes()
        routes.add("GET", "/x", _handler)
        routes.add("GET", "/x/", _other)
        with pytest.raises(ConfigurationError, match="registered twice"):
            routes.compile()

    def test_same_route_in_two_segments_allowed(self) -> None:
        routes = Routes()
        routes.add("GET", "/x", _handler, segment=Segment.PUBLIC)
        routes.add("GET", "/x", _other, segment=Segment.PRIVATE)
        assert routes.compile().resolve("GET", "/x").segment is Segment.PUBLIC

    def test_unknown_method_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported HTTP method"):
            Routes().add("FETCH", "/x", _handler)

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Routes().add("GET", "/x", {"handler": "nope"})

    def test_unknown_trigger_table_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown trigger table"):
            Routes.from_mapping({"kinesis": {}})

    def test_add_after_compile_raises(self) -> None:
        routes = Routes()
        routes.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            routes.add("GET", "/x", _handler)

    def test_routes_introspection(self) -> None:
        routes = Routes()
        routes.add("GET", "/b", _handler, segment=Segment.PRIVATE)
        routes.add("GET", "/a", _handler)
        assert [r.pattern for r in routes.compile().routes] == ["/a", "/b"]

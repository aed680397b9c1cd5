"""Tests for wren.routing.router — ordered route lists and registration verbs."""

import pytest

from wren.http.request import Request
from wren.http.response import ServerResponse
from wren.middleware.protocol import Continuation
from wren.routing.route import Route
from wren.routing.router import Router


async def _dispatch(
    router: Router,
    method: str,
    url: str,
    error: BaseException | None = None,
) -> tuple[Continuation, ServerResponse]:
    response = ServerResponse()
    cont = Continuation()
    await router.handle(error, Request.build(method, url), response, cont)
    return cont, response


class TestRouterDispatch:
    @pytest.mark.asyncio
    async def test_empty_router_passes_through(self) -> None:
        error = ValueError("x")
        cont, _ = await _dispatch(Router(), "GET", "/", error)
        assert cont.called
        assert cont.error is error

    @pytest.mark.asyncio
    async def test_first_finishing_route_wins(self) -> None:
        router = Router()
        router.get("/a", lambda req, res, nxt: res.send("first"))
        router.get("/a", lambda req, res, nxt: res.send("second"))
        cont, response = await _dispatch(router, "GET", "/a")
        assert response.body == b"first"
        assert cont.called is False

    @pytest.mark.asyncio
    async def test_no_match_continues(self) -> None:
        router = Router()
        router.get("/a", lambda req, res, nxt: res.send("a"))
        cont, response = await _dispatch(router, "GET", "/b")
        assert cont.called
        assert cont.error is None
        assert response.finished is False

    @pytest.mark.asyncio
    async def test_middleware_then_route(self) -> None:
        log: list[str] = []

        def middleware(request, response, next):
            log.append("mw")
            next()

        router = Router()
        router.use(middleware)
        router.get("/", lambda req, res, nxt: res.send("home"))
        _, response = await _dispatch(router, "GET", "/")
        assert log == ["mw"]
        assert response.body == b"home"

    @pytest.mark.asyncio
    async def test_error_passed_through_to_next_route(self) -> None:
        boom = RuntimeError("boom")
        router = Router()
        router.get("/missing", lambda req, res, nxt: nxt(boom))
        cont, _ = await _dispatch(router, "POST", "/", boom)
        assert cont.error is boom

    @pytest.mark.asyncio
    async def test_error_reaches_error_route_after_pass_through(self) -> None:
        caught: list[BaseException] = []
        boom = RuntimeError("boom")

        def on_error(error, request, response, next):
            caught.append(error)
            response.send_status(500)

        router = Router()
        router.get("/other", lambda req, res, nxt: res.send("other"))
        router.use(on_error)
        cont, response = await _dispatch(router, "GET", "/", boom)
        assert caught == [boom]
        assert response.status_code == 500
        assert cont.called is False

    @pytest.mark.asyncio
    async def test_raising_route_propagates(self) -> None:
        def fail(request, response, next):
            raise KeyError("k")

        router = Router()
        router.use(fail)
        router.use(lambda e, req, res, nxt: res.send("unreached"))
        with pytest.raises(KeyError):
            await _dispatch(router, "GET", "/")

    @pytest.mark.asyncio
    async def test_seed_handlers(self) -> None:
        log: list[str] = []

        def first(request, response, next):
            log.append("first")
            next()

        router = Router(first, lambda req, res, nxt: res.send("done"))
        assert len(router) == 1
        _, response = await _dispatch(router, "GET", "/anything")
        assert log == ["first"]
        assert response.body == b"done"

    @pytest.mark.asyncio
    async def test_routes_added_during_dispatch_are_not_visited(self) -> None:
        router = Router()

        def grow(request, response, next):
            router.get("/", lambda req, res, nxt: res.send("late"))
            next()

        router.use(grow)
        cont, response = await _dispatch(router, "GET", "/")
        assert cont.called
        assert response.finished is False
        assert len(router) == 2


class TestRouterNesting:
    @pytest.mark.asyncio
    async def test_router_mounted_under_prefix(self) -> None:
        seen: list[str | None] = []

        def show(request, response, next):
            seen.append(request.base_url)
            response.json(request.params)

        api = Router()
        api.get("/users/:id", show)
        router = Router()
        router.use("/api", api)

        _, response = await _dispatch(router, "GET", "/api/users/7")
        assert response.body == b'{"id": "7"}'
        assert seen == ["/api/users/7"]

    @pytest.mark.asyncio
    async def test_prefix_matches_bare_path(self) -> None:
        api = Router()
        api.get("/", lambda req, res, nxt: res.send("index"))
        router = Router()
        router.use("/api", api)
        _, response = await _dispatch(router, "GET", "/api")
        assert response.body == b"index"

    @pytest.mark.asyncio
    async def test_prefix_with_trailing_slash(self) -> None:
        api = Router()
        api.get("/ping", lambda req, res, nxt: res.send("pong"))
        router = Router()
        router.use("/api/", api)
        _, response = await _dispatch(router, "GET", "/api/ping")
        assert response.body == b"pong"

    @pytest.mark.asyncio
    async def test_nested_router_miss_falls_through(self) -> None:
        api = Router()
        api.get("/users", lambda req, res, nxt: res.send("users"))
        router = Router()
        router.use("/api", api)
        router.use(lambda req, res, nxt: res.send("fallback"))
        _, response = await _dispatch(router, "GET", "/api/teams")
        assert response.body == b"fallback"


class TestRegistration:
    @pytest.mark.parametrize(
        "verb",
        ["get", "post", "head", "put", "delete", "patch", "options"],
    )
    @pytest.mark.asyncio
    async def test_verb_registers_method(self, verb: str) -> None:
        router = Router()
        getattr(router, verb)("/x", lambda req, res, nxt: res.send(verb))
        route = router.routes[0]
        assert route.methods == frozenset({verb.upper()})
        _, response = await _dispatch(router, verb.upper(), "/x")
        assert response.body == verb.encode()

    @pytest.mark.asyncio
    async def test_all_accepts_any_method(self) -> None:
        router = Router()
        router.all("/x", lambda req, res, nxt: res.send("any"))
        assert router.routes[0].methods is None
        _, response = await _dispatch(router, "PATCH", "/x")
        assert response.body == b"any"

    @pytest.mark.asyncio
    async def test_verb_decorator(self) -> None:
        router = Router()

        @router.post("/items")
        async def create(request, response, next):
            response.status(201).send("created")

        assert create is not None
        _, response = await _dispatch(router, "POST", "/items")
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_route_decorator_with_methods_and_id(self) -> None:
        router = Router()

        @router.route("/items/:id", methods=["get", "head"], id="item")
        def show(request, response, next):
            response.send(request.params["id"])

        route = router.routes[0]
        assert route.methods == frozenset({"GET", "HEAD"})
        assert route.id == "item"
        _, response = await _dispatch(router, "HEAD", "/items/3")
        assert response.body == b"3"

    def test_verbs_are_chainable(self) -> None:
        router = Router()
        result = router.use(lambda req, res, nxt: nxt()).get("/", lambda req, res, nxt: None)
        assert result is router
        assert len(router) == 2

    def test_use_without_prefix_is_catch_all(self) -> None:
        router = Router()
        router.use(lambda req, res, nxt: nxt())
        route = router.routes[0]
        assert route.pattern is None
        assert route.methods is None

    def test_add_appends_route(self) -> None:
        router = Router()
        route = Route("/x")
        router.add(route)
        assert router.routes == [route]

    def test_repr(self) -> None:
        router = Router()
        router.use(lambda req, res, nxt: nxt())
        assert repr(router) == "<Router: #routes=1>"

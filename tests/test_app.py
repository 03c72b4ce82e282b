"""Tests for App — registration, dispatch, negotiation, fallback, lifecycle."""

import json
import logging

import pytest

from guildhall.app import App
from guildhall.config import AppConfig
from guildhall.errors import ConfigurationError, HTTPError
from guildhall.http.request import Request
from guildhall.http.response import Redirect, Response
from guildhall.routing.route import Access
from guildhall.templating.returns import Template
from guildhall.testing import TestClient


class TestFallback:
    async def test_unmatched_path_gets_hello(self) -> None:
        app = App()

        async with TestClient(app) as client:
            response = await client.get("/nothing/here")
        assert response.status == 200
        assert response.text == "Hello!"

    async def test_fallback_body_is_configurable(self) -> None:
        app = App(AppConfig(fallback_body="Hi there"))

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.text == "Hi there"

    async def test_wrong_verb_falls_back(self) -> None:
        app = App()

        @app.route("stats/")
        def stats():
            return {"ok": True}

        async with TestClient(app) as client:
            response = await client.post("/stats/")
        assert response.status == 200
        assert response.text == "Hello!"


class TestHandlerArguments:
    async def test_path_params_by_name(self) -> None:
        app = App()

        @app.route("guilds/:guildID/members/:memberID")
        def member(memberID: str, guildID: str):  # noqa: N803
            return {"guild": guildID, "member": memberID}

        async with TestClient(app) as client:
            response = await client.get("/guilds/1/members/2")
        assert json.loads(response.text) == {"guild": "1", "member": "2"}

    async def test_request_and_params(self) -> None:
        app = App()

        @app.route("echo/:id")
        def echo(request: Request, params: dict):
            return {"path": request.path, "params": params, "q": request.query.get("q")}

        async with TestClient(app) as client:
            response = await client.get("/echo/7?q=x")
        assert json.loads(response.text) == {"path": "/echo/7", "params": {"id": "7"}, "q": "x"}

    async def test_unresolved_parameter_uses_default(self) -> None:
        app = App()

        @app.route("ping")
        def ping(suffix: str = "!"):
            return f"pong{suffix}"

        async with TestClient(app) as client:
            response = await client.get("/ping")
        assert response.text == "pong!"

    async def test_async_handler(self) -> None:
        app = App()

        @app.route("async")
        async def handler():
            return "awaited"

        async with TestClient(app) as client:
            response = await client.get("/async")
        assert response.text == "awaited"


class TestNegotiation:
    async def test_dict_is_json(self) -> None:
        app = App()

        @app.route("d")
        def d():
            return {"a": 1}

        async with TestClient(app) as client:
            response = await client.get("/d")
        assert response.content_type.startswith("application/json")
        assert json.loads(response.text) == {"a": 1}

    async def test_list_is_json(self) -> None:
        app = App()

        @app.route("l")
        def items():
            return ["x", "y"]

        async with TestClient(app) as client:
            response = await client.get("/l")
        assert json.loads(response.text) == ["x", "y"]

    async def test_str_is_html(self) -> None:
        app = App()

        @app.route("s")
        def s():
            return "<p>hi</p>"

        async with TestClient(app) as client:
            response = await client.get("/s")
        assert response.content_type.startswith("text/html")

    async def test_redirect(self) -> None:
        app = App()

        @app.route("go")
        def go():
            return Redirect("/elsewhere")

        async with TestClient(app) as client:
            response = await client.get("/go")
        assert response.status == 302
        assert response.location == "/elsewhere"

    async def test_status_tuple(self) -> None:
        app = App()

        @app.route("made")
        def made():
            return {"created": True}, 201

        async with TestClient(app) as client:
            response = await client.get("/made")
        assert response.status == 201

    async def test_template_uses_renderer(self, renderer) -> None:
        app = App(renderer=renderer)

        @app.route("page")
        def page():
            return Template("page.html", title="Hi")

        async with TestClient(app) as client:
            response = await client.get("/page")
        assert response.text == "<page.html>"
        assert renderer.last.context == {"title": "Hi"}

    async def test_template_without_renderer_fails(self) -> None:
        app = App()

        @app.route("page")
        def page():
            return Template("page.html")

        async with TestClient(app) as client:
            response = await client.get("/page")
        assert response.status == 500


class TestErrors:
    async def test_http_error_keeps_status(self) -> None:
        app = App()

        @app.route("teapot")
        def teapot():
            raise HTTPError(status=418, detail="short and stout")

        async with TestClient(app) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.text == "short and stout"

    async def test_unexpected_error_is_logged_500(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()

        @app.route("boom")
        def boom():
            raise RuntimeError("upstream down")

        with caplog.at_level(logging.ERROR, logger="guildhall.server"):
            async with TestClient(app) as client:
                response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "500 GET /boom" in caplog.text


class TestMiddleware:
    async def test_runs_in_registration_order(self) -> None:
        app = App()
        seen: list[str] = []

        def tagging(label: str):
            async def mw(request: Request, next):
                seen.append(label)
                response = await next(request)
                return response.with_header(f"X-{label}", "1")

            return mw

        app.add_middleware(tagging("outer"))
        app.add_middleware(tagging("inner"))

        @app.route("x")
        def x():
            return "x"

        async with TestClient(app) as client:
            response = await client.get("/x")
        assert seen == ["outer", "inner"]
        assert response.header("x-outer") == "1"

    async def test_middleware_sees_fallback(self) -> None:
        app = App()

        async def stamp(request: Request, next):
            response = await next(request)
            return response.with_header("X-Stamp", "yes")

        app.add_middleware(stamp)

        async with TestClient(app) as client:
            response = await client.get("/unrouted")
        assert response.header("x-stamp") == "yes"


class TestFreezing:
    async def test_route_after_first_request_raises(self) -> None:
        app = App()

        async with TestClient(app) as client:
            await client.get("/")

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.route("late/")(lambda: "late")

    def test_non_public_route_requires_gate(self) -> None:
        app = App()

        @app.route("secret", access=Access.LOGIN)
        def secret():
            return "s"

        with pytest.raises(ConfigurationError, match="no gate"):
            app._ensure_frozen()

    def test_routes_property_lists_compiled_routes(self) -> None:
        app = App()
        app.route("a/")(lambda: "a")
        app.route("b/", methods=["GET", "POST"])(lambda: "b")
        assert [r.pattern for r in app.routes] == ["a/", "b/"]
        assert app.routes[1].methods == frozenset({"GET", "POST"})


class TestLifespan:
    async def test_startup_and_shutdown_hooks(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def up():
            events.append("up")

        @app.on_shutdown
        def down():
            events.append("down")

        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive():
            return next(messages)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert events == ["up", "down"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_failed_startup_reported(self) -> None:
        app = App()

        @app.on_startup
        def broken():
            raise ValueError("no database")

        sent: list[dict] = []

        async def receive():
            return {"type": "lifespan.startup"}

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]


class TestResponseShape:
    async def test_content_length_and_body(self) -> None:
        app = App()

        @app.route("r")
        def r():
            return Response(body="abc").with_header("X-Extra", "1")

        async with TestClient(app) as client:
            response = await client.get("/r")
        assert response.body_bytes == b"abc"
        assert response.header("x-extra") == "1"

"""guildhall application class.

Mutable during setup (route registration, middleware, hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from guildhall._internal.asgi import Receive, Scope, Send
from guildhall._internal.types import Handler
from guildhall.config import AppConfig
from guildhall.errors import ConfigurationError
from guildhall.http.response import Response
from guildhall.middleware.protocol import Middleware
from guildhall.routing.route import Access, Route
from guildhall.routing.router import Router
from guildhall.server.handler import Gate, handle_request
from guildhall.templating.render import Renderer

logger = logging.getLogger("guildhall.server")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    access: Access
    name: str | None


class App:
    """The guildhall application.

    Mutable during setup (routes, middleware, hooks). Frozen at runtime
    when ``app.run()`` or ``__call__()`` is first invoked; any later
    registration raises ``RuntimeError``.

    Thread safety:
        The setup phase is single-threaded. The freeze transition uses a
        Lock + double-check so exactly one thread compiles the app.

    Usage::

        app = App()

        @app.route("guilds/:guildID")
        def guild(guildID: str):
            return {"id": guildID}
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "gate",
        "renderer",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        gate: Gate | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.gate = gate
        self.renderer = renderer
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock = threading.Lock()

        # Compiled state
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        access: Access = Access.PUBLIC,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Path pattern. ``:name`` segments bind path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            access: Who may reach the route. Anything but ``PUBLIC``
                is checked by the app's gate before the handler runs.
            name: Optional route name.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, access, name))
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline. First added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    @property
    def routes(self) -> list[Route]:
        """The compiled routes, freezing the app if needed."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and serve it with pounce.

        Requires the ``serve`` extra.
        """
        self._ensure_frozen()

        from pounce.config import ServerConfig
        from pounce.server import Server

        _host = host or self.config.host
        _port = port or self.config.port
        logger.info("Serving on http://%s:%d", _host, _port)
        server = Server(ServerConfig(host=_host, port=_port, workers=1, reload=False), self)
        server.run()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            fallback=Response(body=self.config.fallback_body),
            gate=self.gate,
            renderer=self.renderer,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered startup/shutdown hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        router = Router()
        for pending in self._pending_routes:
            if pending.access is not Access.PUBLIC and self.gate is None:
                msg = (
                    f"Route {pending.path!r} requires {pending.access.value} access "
                    "but the app has no gate. Pass gate= to App()."
                )
                raise ConfigurationError(msg)
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(
                Route(
                    pattern=pending.path,
                    handler=pending.handler,
                    methods=methods,
                    access=pending.access,
                    name=pending.name,
                )
            )
        router.compile()
        self._router = router
        self._middleware = tuple(self._middleware_list)
        self._frozen = True
        logger.debug("App frozen with %d routes", len(router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and middleware before calling app.run()."
            )
            raise RuntimeError(msg)

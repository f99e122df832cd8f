"""
Host lifecycle: named phases that plugins hook into.
The host runs its phases in a fixed order for every request; a plugin can also own
private phases (the CMS runs its `retrieve` phase from the host's `setup` phase).
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]

APP_PHASES = ("setup", "request", "handler", "response")


class Middleware:
    """An ordered list of handlers run as one phase."""

    def __init__(self, name: str):
        self.name = name
        self.handlers: list[Handler] = []

    def use(self, handler: Handler) -> "Middleware":
        self.handlers.append(handler)
        return self

    def remove(self, handler: Handler) -> None:
        self.handlers = [h for h in self.handlers if h != handler]

    def run(self, context, concurrent: bool = False) -> None:
        """
        Run every handler with `context`. Sequential runs stop at the first error.
        Concurrent runs wait for all handlers, then re-raise the first error in
        registration order.
        """
        if not self.handlers:
            return
        logger.debug("Running phase %s (%d handlers, concurrent=%s)", self.name, len(self.handlers), concurrent)
        if not concurrent or len(self.handlers) == 1:
            for handler in self.handlers:
                handler(context)
            return

        with ThreadPoolExecutor(max_workers=len(self.handlers)) as pool:
            futures = [pool.submit(handler, context) for handler in self.handlers]
        for future in futures:
            error = future.exception()
            if error is not None:
                raise error


class Plugin(ABC):
    """Base for anything installed into an App (or into another plugin)."""

    @abstractmethod
    def install(self, parent) -> None:
        ...

    def uninstall(self, parent) -> None:
        pass


class App:
    """Minimal host: owns the request phases and runs them in APP_PHASES order."""

    def __init__(self, phases: tuple[str, ...] = APP_PHASES):
        self.phases = {name: Middleware(name) for name in phases}
        self.plugins: list[Plugin] = []

    def middleware(self, name: str) -> Middleware:
        return self.phases[name]

    def use(self, *plugins: Plugin) -> "App":
        for plugin in plugins:
            plugin.install(self)
            self.plugins.append(plugin)
        return self

    def remove(self, plugin: Plugin) -> None:
        plugin.uninstall(self)
        self.plugins.remove(plugin)

    def handle(self, context: "RequestContext") -> "RequestContext":
        for phase in self.phases.values():
            phase.run(context)
        return context


@dataclass
class RequestContext:
    """Per-request state. Plugins publish data for the request into `cms`."""

    request: Any = None
    cms: dict[str, Any] = field(default_factory=dict)

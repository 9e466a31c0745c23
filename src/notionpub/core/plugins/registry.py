"""Plugin registry: macro name -> handler lookup"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from notionpub.core.plugins.expander import RenderContext


class PluginHandler(Protocol):
    """Anything exposing a ``name`` and ``render(parameter, context) -> str``."""
    name: str

    def render(self, parameter: str, context: "RenderContext") -> str:  # pragma: no cover - structural protocol
        """Render the macro's markup fragment."""


@dataclass(frozen=True)
class Plugin:
    """A named macro handler backed by a plain function."""
    name: str
    func: Callable[[str, "RenderContext"], str]

    def render(self, parameter: str, context: "RenderContext") -> str:
        return self.func(parameter, context)


class PluginRegistry:
    """Name-keyed handler store; registering an existing name overwrites it.

    Not synchronized: registration is expected to finish before expansion starts.
    """

    def __init__(self, plugins: list[PluginHandler] = None):
        self._plugins: dict[str, PluginHandler] = {}
        for plugin in plugins or []:
            self.register(plugin)

    def register(self, plugin: PluginHandler) -> None:
        """Insert or overwrite the handler stored under plugin.name."""
        if not isinstance(getattr(plugin, 'name', None), str) or not callable(getattr(plugin, 'render', None)):
            raise TypeError(f"Plugin must expose a str name and a render() method, got {plugin!r}")
        self._plugins[plugin.name] = plugin

    def resolve(self, name: str) -> PluginHandler | None:
        """Return the handler registered under name (exact, case-sensitive), else None."""
        return self._plugins.get(name)

    def names(self) -> set[str]:
        """Registered plugin names; callers must not rely on any order."""
        return set(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

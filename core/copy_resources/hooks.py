"""
Extension hooks around a copy.

Two kinds of hook:

* pre-persist, event ``copy_resources.<resource_name>.pre``: receives the
  pending tree right before creation and has the final say on it.
* post-copy, event ``copy_resources.copy_<kind>``: runs after the copy is
  persisted so an extension can duplicate its own side-data.

Hooks run synchronously in registration order. A hook that raises aborts
the copy; its exception reaches the caller unchanged.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from core.copy_resources.tree import ResourceTree

logger = logging.getLogger(__name__)


def pre_persist_event_name(resource_name: str) -> str:
    return f'copy_resources.{resource_name}.pre'


def post_copy_event_name(kind: str) -> str:
    return f'copy_resources.copy_{kind}'


@dataclass
class PrePersistEvent:
    """Payload of a pre-persist hook. Replace or mutate `tree` freely."""

    name: str
    resource: Any
    tree: ResourceTree
    copier: Any = field(default=None, repr=False)


@dataclass
class CopyEvent:
    """Payload of a post-copy hook.

    `extra` holds kind-specific data; a site copy passes `site_page_map`.
    """

    name: str
    resource: Any
    copy: Any
    copier: Any = field(default=None, repr=False)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def site_page_map(self) -> dict:
        return self.extra.get('site_page_map', {})


PrePersistHook = Callable[[PrePersistEvent], None]
PostCopyHook = Callable[[CopyEvent], None]


class HookBus:
    """Registry and dispatcher for copy hooks."""

    def __init__(self):
        self._hooks: dict[str, list[Callable]] = defaultdict(list)

    def register(self, event_name: str, hook: Callable) -> Callable:
        self._hooks[event_name].append(hook)
        return hook

    def on_pre_persist(self, resource_name: str, hook: PrePersistHook) -> PrePersistHook:
        return self.register(pre_persist_event_name(resource_name), hook)

    def on_copied(self, kind: str, hook: PostCopyHook) -> PostCopyHook:
        return self.register(post_copy_event_name(kind), hook)

    def pre_persist(self, resource_name: str):
        """Decorator form of on_pre_persist."""
        def decorator(hook: PrePersistHook) -> PrePersistHook:
            return self.on_pre_persist(resource_name, hook)
        return decorator

    def copied(self, kind: str):
        """Decorator form of on_copied."""
        def decorator(hook: PostCopyHook) -> PostCopyHook:
            return self.on_copied(kind, hook)
        return decorator

    def unregister(self, event_name: str, hook: Callable) -> None:
        self._hooks[event_name].remove(hook)

    def listeners(self, event_name: str) -> tuple[Callable, ...]:
        return tuple(self._hooks.get(event_name, ()))

    def clear(self) -> None:
        self._hooks.clear()

    def trigger(self, event_name: str, event):
        """Call every hook registered for event_name with event.

        Returns the event so callers can read back what hooks changed.
        """
        for hook in self.listeners(event_name):
            logger.debug('Dispatching %s to %r', event_name, hook)
            hook(event)
        return event

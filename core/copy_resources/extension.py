"""
Flask wiring for the copy service.

init_app() reads the COPY_RESOURCES_* settings, loads the core layout
allow-lists once, and keeps an app-wide HookBus that extensions register
on. get_copier() builds a CopyResources for the current request.
"""
from __future__ import annotations

import os

from flask import current_app

from core.copy_resources.copier import (
    CopyResources, DEFAULT_PAGE_SIZE, DEFAULT_SLUG_RETRIES,
)
from core.copy_resources.hooks import HookBus
from core.copy_resources.layouts import load_core_config
from core.copy_resources.slugs import DEFAULT_MAX_ATTEMPTS
from core.copy_resources.store import ResourceStore

EXTENSION_KEY = 'copy_resources'

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def default_settings() -> dict:
    """COPY_RESOURCES_* settings from the environment."""
    return {
        'COPY_RESOURCES_CORE_CONFIG': os.environ.get('COPY_RESOURCES_CORE_CONFIG') or None,
        'COPY_RESOURCES_SLUG_MAX_ATTEMPTS': int(
            os.environ.get('COPY_RESOURCES_SLUG_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS)
        ),
        'COPY_RESOURCES_SLUG_RETRIES': int(
            os.environ.get('COPY_RESOURCES_SLUG_RETRIES', DEFAULT_SLUG_RETRIES)
        ),
        'COPY_RESOURCES_PAGE_SIZE': int(
            os.environ.get('COPY_RESOURCES_PAGE_SIZE', DEFAULT_PAGE_SIZE)
        ),
        'COPY_RESOURCES_CLEANUP_ON_FAILURE': _env_bool('COPY_RESOURCES_CLEANUP_ON_FAILURE'),
    }


def init_app(app, hooks: HookBus | None = None) -> HookBus:
    """Register the copy service on app and return its hook bus."""
    for key, value in default_settings().items():
        app.config.setdefault(key, value)

    hooks = hooks if hooks is not None else HookBus()
    app.extensions[EXTENSION_KEY] = {
        'hooks': hooks,
        'core_config': load_core_config(app.config['COPY_RESOURCES_CORE_CONFIG']),
    }
    return hooks


def get_hooks(app=None) -> HookBus:
    app = app or current_app
    return app.extensions[EXTENSION_KEY]['hooks']


def get_copier(owner_id: int | None = None, app=None) -> CopyResources:
    """A CopyResources whose copies are owned by owner_id."""
    app = app or current_app
    state = app.extensions[EXTENSION_KEY]
    return CopyResources(
        store=ResourceStore(owner_id=owner_id),
        hooks=state['hooks'],
        core_config=state['core_config'],
        slug_max_attempts=app.config['COPY_RESOURCES_SLUG_MAX_ATTEMPTS'],
        slug_retries=app.config['COPY_RESOURCES_SLUG_RETRIES'],
        page_size=app.config['COPY_RESOURCES_PAGE_SIZE'],
        cleanup_on_failure=app.config['COPY_RESOURCES_CLEANUP_ON_FAILURE'],
    )

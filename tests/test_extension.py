"""
Tests for the Flask wiring of the copy service.
"""
import json

import pytest
from flask import Flask

from core.copy_resources import HookBus, get_copier, get_hooks, init_app
from core.copy_resources.extension import default_settings


@pytest.mark.copy
class TestExtension:

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv('COPY_RESOURCES_SLUG_MAX_ATTEMPTS', '50')
        monkeypatch.setenv('COPY_RESOURCES_CLEANUP_ON_FAILURE', 'yes')
        monkeypatch.delenv('COPY_RESOURCES_PAGE_SIZE', raising=False)

        settings = default_settings()
        assert settings['COPY_RESOURCES_SLUG_MAX_ATTEMPTS'] == 50
        assert settings['COPY_RESOURCES_CLEANUP_ON_FAILURE'] is True
        assert settings['COPY_RESOURCES_PAGE_SIZE'] == 1000

    def test_init_app_keeps_explicit_config(self, tmp_path):
        path = tmp_path / 'core.json'
        path.write_text(json.dumps({'block_layouts': {'invokables': {'html': 'HTML'}}}))

        app = Flask(__name__)
        app.config['COPY_RESOURCES_CORE_CONFIG'] = str(path)
        app.config['COPY_RESOURCES_PAGE_SIZE'] = 10
        bus = HookBus()

        assert init_app(app, hooks=bus) is bus
        assert get_hooks(app) is bus

        copier = get_copier(owner_id=7, app=app)
        assert copier.hooks is bus
        assert copier.store.owner_id == 7
        assert copier.page_size == 10
        assert copier.core_config.block_layouts.names == frozenset({'html'})
        assert len(copier.core_config.navigation_links) == 0

    def test_app_copier_uses_defaults(self, app):
        copier = get_copier(app=app)
        assert copier.core_config.block_layouts.is_core('html')
        assert copier.hooks is get_hooks(app)
        assert copier.store.owner_id is None

"""
Core layout classification and the "__copy" stub convention.

Block layouts and navigation link types registered by the base platform are
"core". Anything else was contributed by an extension and usually carries
data that only makes sense on the original site, so a site copy renames it
to "<name>__copy" instead of dropping it. The owning extension repairs its
data and then reverts the name (see CopyResources.revert_site_block_layouts
and CopyResources.revert_site_navigation_link_types).

The allow-lists come from the host's own configuration, never from
extension configuration, and are loaded once into an immutable CoreConfig.
"""
from __future__ import annotations

import errno
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

STUB_SUFFIX = '__copy'

REGISTRATION_STYLES = ('invokables', 'factories')

# Layouts and link types shipped with the platform.
DEFAULT_CORE_CONFIG = {
    'block_layouts': {
        'invokables': {
            'browsePreview': 'Browse preview',
            'itemShowCase': 'Item showcase',
            'itemWithMetadata': 'Item with metadata',
            'lineBreak': 'Line break',
            'listOfSites': 'List of sites',
            'media': 'Media embed',
            'pageDateTime': 'Page date/time',
            'pageTitle': 'Page title',
            'searchForm': 'Search form',
            'tableOfContents': 'Table of contents',
        },
        'factories': {
            'asset': 'Asset',
            'html': 'HTML',
            'listOfPages': 'List of pages',
            'oembed': 'oEmbed',
        },
    },
    'navigation_links': {
        'invokables': {
            'browse': 'Browse items',
            'browseItemSets': 'Browse item sets',
            'url': 'Custom URL',
        },
        'factories': {
            'page': 'Page',
        },
    },
}


def stub_name(name: str) -> str:
    return f'{name}{STUB_SUFFIX}'


class LayoutClassifier:
    """Immutable allow-list of core names for one kind of registration."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = frozenset(names)

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def __contains__(self, name) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self):
        return f'LayoutClassifier({sorted(self._names)!r})'

    def is_core(self, name: str) -> bool:
        return name in self._names

    def stub(self, name: str) -> str:
        """Stub a foreign name; core names pass through unchanged."""
        if self.is_core(name):
            return name
        return stub_name(name)

    @staticmethod
    def revert(name: str, original: str) -> str:
        """Undo stub(original); any other name is returned unchanged."""
        if name == stub_name(original):
            return original
        return name


def service_names(config: Mapping, section: str) -> list[str]:
    """Names registered under section, across both registration styles."""
    section_config = config.get(section) or {}
    names = []
    for style in REGISTRATION_STYLES:
        names.extend((section_config.get(style) or {}).keys())
    return names


@dataclass(frozen=True)
class CoreConfig:
    """Core block layouts and navigation link types of the host."""

    block_layouts: LayoutClassifier
    navigation_links: LayoutClassifier

    @classmethod
    def from_mapping(cls, config: Mapping) -> CoreConfig:
        return cls(
            block_layouts=LayoutClassifier(service_names(config, 'block_layouts')),
            navigation_links=LayoutClassifier(service_names(config, 'navigation_links')),
        )


def load_core_config(path: str | Path | None = None) -> CoreConfig:
    """Load the core allow-lists from a JSON file, or the built-in defaults.

    Raises:
        FileNotFoundError: If path does not point to a file.
        ValueError: If the file is not valid JSON.
        TypeError: If the top level is not a JSON object.
    """
    if path is None:
        return CoreConfig.from_mapping(DEFAULT_CORE_CONFIG)

    path_obj = Path(path).expanduser()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    try:
        data = json.loads(path_obj.read_text(encoding='utf-8'))
    except json.JSONDecodeError as exc:
        raise ValueError(f'Invalid JSON in {path_obj}: {exc}') from exc
    if not isinstance(data, dict):
        raise TypeError(
            f'Core config must be a JSON object, got {type(data).__name__}'
        )
    return CoreConfig.from_mapping(data)

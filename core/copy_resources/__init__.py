"""
core.copy_resources: duplicate items, item sets, site pages, and sites.

Copies are independent of their source: owner and reverse relations are
dropped, slugs are renumbered, and block layouts / navigation link types
contributed by extensions are stubbed as "<name>__copy" so the owning
extension can repair and revert them.

Public API:
    CopyResources   copy service
    copy_item, copy_item_set   CopyResources methods
    copy_site_page, copy_site   CopyResources methods
    HookBus, PrePersistEvent, CopyEvent   extension hooks
    ResourceStore, ResourceTree   resource layer and tree type
    CoreConfig, LayoutClassifier   core allow-lists
    load_core_config   allow-list loading
    SiteCopyOrchestrator, SiteCopyStage   site copy stages
    init_app, get_copier, get_hooks   Flask wiring
"""

from core.copy_resources.copier import CopyResources
from core.copy_resources.errors import (
    CopyResourcesError,
    InvalidOptionError,
    ResourceNotFoundError,
    SiteCopyError,
    SlugCollisionError,
    SlugExhaustedError,
    UnresolvedReferenceError,
)
from core.copy_resources.extension import get_copier, get_hooks, init_app
from core.copy_resources.hooks import CopyEvent, HookBus, PrePersistEvent
from core.copy_resources.identifiers import IdentifierMap
from core.copy_resources.layouts import CoreConfig, LayoutClassifier, load_core_config
from core.copy_resources.navigation import NavigationLink
from core.copy_resources.site_copy import SiteCopyOrchestrator, SiteCopyStage
from core.copy_resources.store import ResourceStore
from core.copy_resources.tree import ResourceTree
from core.copy_resources.visibility import Visibility

__all__ = [
    'CopyResources',
    'CopyResourcesError',
    'InvalidOptionError',
    'ResourceNotFoundError',
    'SiteCopyError',
    'SlugCollisionError',
    'SlugExhaustedError',
    'UnresolvedReferenceError',
    'get_copier',
    'get_hooks',
    'init_app',
    'CopyEvent',
    'HookBus',
    'PrePersistEvent',
    'IdentifierMap',
    'CoreConfig',
    'LayoutClassifier',
    'load_core_config',
    'NavigationLink',
    'SiteCopyOrchestrator',
    'SiteCopyStage',
    'ResourceStore',
    'ResourceTree',
    'Visibility',
]

"""
Copy API: REST endpoints for duplicating content.

Endpoints:
    POST /api/copy/items/<id>   copy an item
    POST /api/copy/item-sets/<id>   copy an item set
    POST /api/copy/site-pages/<id>   copy a site page
    POST /api/copy/sites/<id>   copy a site
    POST /api/copy/sites/<id>/revert-block-layouts   revert stubbed block layouts
    POST /api/copy/sites/<id>/revert-link-types   revert stubbed link types

Copy body (optional):
    visibility (str): "public", "private", or "inherit" (default).
"""
from functools import wraps

from flask import jsonify, request, session

from models import db
from rate_limiter import copy_limit, limiter


# ---------------------------------------------------------------------------
# Auth helper (matches existing codebase pattern)
# ---------------------------------------------------------------------------

def _require_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user_id = session.get('user_id')
        if not user_id:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated


# Resource name -> CopyResources method
_COPY_METHODS = {
    'items': 'copy_item',
    'item_sets': 'copy_item_set',
    'site_pages': 'copy_site_page',
    'sites': 'copy_site',
}


def _copy_options():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return {}
    return {'visibility': data.get('visibility')}


def _run_copy(resource_name, resource_id):
    """Copy one resource for the session user and build the JSON response."""
    from core.copy_resources import (
        InvalidOptionError, SiteCopyError, SlugCollisionError,
        SlugExhaustedError, UnresolvedReferenceError, get_copier,
    )

    user_id = session['user_id']
    copier = get_copier(owner_id=user_id)

    source = copier.store.get(resource_name, resource_id)
    if source is None:
        return jsonify({'error': 'Resource not found'}), 404

    try:
        copy = getattr(copier, _COPY_METHODS[resource_name])(source, _copy_options())
    except InvalidOptionError as e:
        return jsonify({'error': str(e)}), 400
    except (SlugExhaustedError, SlugCollisionError) as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 409
    except UnresolvedReferenceError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 422
    except SiteCopyError as e:
        print(f"[copy_api] site {resource_id} copy failed: {e}: {e.original!r}")
        if isinstance(e.original, (SlugExhaustedError, SlugCollisionError)):
            status = 409
        elif isinstance(e.original, UnresolvedReferenceError):
            status = 422
        else:
            status = 500
        return jsonify(e.to_dict()), status
    except Exception as e:
        db.session.rollback()
        print(f"[copy_api] {resource_name} {resource_id} copy error: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500

    return jsonify({
        'success': True,
        'copy': copy.to_json_ld(),
    }), 201


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------

def register_copy_routes(app):
    """Register content copy API routes."""

    @app.route('/api/copy/items/<int:item_id>', methods=['POST'])
    @_require_auth
    @limiter.limit(copy_limit)
    def copy_item_api(item_id):
        """Copy an item (owner and media are not copied)."""
        return _run_copy('items', item_id)

    @app.route('/api/copy/item-sets/<int:item_set_id>', methods=['POST'])
    @_require_auth
    @limiter.limit(copy_limit)
    def copy_item_set_api(item_set_id):
        """Copy an item set and its item memberships."""
        return _run_copy('item_sets', item_set_id)

    @app.route('/api/copy/site-pages/<int:page_id>', methods=['POST'])
    @_require_auth
    @limiter.limit(copy_limit)
    def copy_site_page_api(page_id):
        """Copy a page within its site."""
        return _run_copy('site_pages', page_id)

    @app.route('/api/copy/sites/<int:site_id>', methods=['POST'])
    @_require_auth
    @limiter.limit(copy_limit)
    def copy_site_api(site_id):
        """Copy a site with its pages, navigation, settings, and item links."""
        return _run_copy('sites', site_id)

    # ===================================================================
    # Stub reversal
    # ===================================================================

    @app.route('/api/copy/sites/<int:site_id>/revert-block-layouts', methods=['POST'])
    @_require_auth
    def revert_block_layouts_api(site_id):
        """Rename "<layout>__copy" blocks back to <layout>.

        Body:
            layout (str): The original block layout name.
        """
        from core.copy_resources import get_copier

        data = request.get_json(silent=True) or {}
        layout = (data.get('layout') or '').strip()
        if not layout:
            return jsonify({'error': 'layout is required'}), 400

        copier = get_copier(owner_id=session['user_id'])
        if copier.store.get('sites', site_id) is None:
            return jsonify({'error': 'Site not found'}), 404

        try:
            reverted = copier.revert_site_block_layouts(site_id, layout)
        except Exception as e:
            db.session.rollback()
            print(f"[copy_api] revert block layouts error: {e}")
            return jsonify({'error': 'An internal error occurred'}), 500

        return jsonify({'success': True, 'reverted': reverted})

    @app.route('/api/copy/sites/<int:site_id>/revert-link-types', methods=['POST'])
    @_require_auth
    def revert_link_types_api(site_id):
        """Rename "<type>__copy" navigation links back to <type>.

        Body:
            link_type (str): The original link type name.
        """
        from core.copy_resources import get_copier

        data = request.get_json(silent=True) or {}
        link_type = (data.get('link_type') or '').strip()
        if not link_type:
            return jsonify({'error': 'link_type is required'}), 400

        copier = get_copier(owner_id=session['user_id'])
        if copier.store.get('sites', site_id) is None:
            return jsonify({'error': 'Site not found'}), 404

        try:
            links = copier.revert_site_navigation_link_types(site_id, link_type)
        except Exception as e:
            db.session.rollback()
            print(f"[copy_api] revert link types error: {e}")
            return jsonify({'error': 'An internal error occurred'}), 500

        return jsonify({
            'success': True,
            'navigation': [link.to_dict() for link in links or []],
        })

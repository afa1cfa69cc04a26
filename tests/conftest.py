"""
Pytest configuration and shared fixtures for Copy Resources tests
"""
import pytest
import json
import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment before importing app; the engine is built at import
# time, so the database URL has to be in place first.
os.environ['FLASK_ENV'] = 'testing'
os.environ['TESTING'] = 'true'
_db_fd, _db_path = tempfile.mkstemp(suffix='.db')
os.environ['DATABASE_URL'] = f'sqlite:///{_db_path}'


@pytest.fixture(scope='session')
def app():
    """Create and configure a test Flask application instance"""
    from server import app as flask_app
    from models import db
    from rate_limiter import limiter

    flask_app.config.update({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
    })

    # Disable rate limiting for tests (must be done after init_limiter ran)
    limiter.enabled = False

    # Create tables inside a persistent app context
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()

    # Close and remove temporary database
    os.close(_db_fd)
    os.unlink(_db_path)


@pytest.fixture(autouse=True)
def _clean_db(app):
    """Clean up data between tests to avoid UNIQUE constraint violations."""
    from models import db
    yield
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()


@pytest.fixture(autouse=True)
def _clean_hooks(app):
    """Drop hooks registered by a test on the app-wide bus."""
    from core.copy_resources import get_hooks
    yield
    get_hooks(app).clear()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def user(app):
    """Create a test user"""
    from models import User, db

    user = User(
        email='test@example.com',
        name='Test User',
        created_at=datetime.utcnow(),
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_client(client, user):
    """Create a test client with an authenticated session"""
    with client.session_transaction() as sess:
        sess['user_id'] = user.id
        sess['user_email'] = user.email
    return client


@pytest.fixture
def copier(app, user):
    """CopyResources acting as the test user, on the app-wide hook bus"""
    from core.copy_resources import get_copier
    return get_copier(owner_id=user.id, app=app)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------

@pytest.fixture
def item_set(app, user):
    from models import ItemSet, db

    item_set = ItemSet(
        owner_id=user.id,
        title='Posters',
        is_public=False,
        is_open=True,
        values=[{'property': 'dcterms:subject', 'value': 'posters'}],
    )
    db.session.add(item_set)
    db.session.commit()
    return item_set


@pytest.fixture
def item(app, user, item_set):
    """A private item with two media, in one item set"""
    from models import Item, Media, db

    item = Item(
        owner_id=user.id,
        title='Poster 1921',
        is_public=False,
        values=[{'property': 'dcterms:title', 'value': 'Poster 1921'}],
        media=[
            Media(ingester='upload', source='front.jpg', position=0),
            Media(ingester='url', source='https://example.com/back.jpg', position=1),
        ],
        item_sets=[item_set],
    )
    db.session.add(item)
    db.session.flush()
    item.primary_media_id = item.media[0].id
    db.session.commit()
    return item


def _make_site(slug, title=None, is_public=True, owner_id=None, navigation=None):
    """A bare site row with no pages (bypasses the store's site defaults)"""
    from models import Site, db

    site = Site(
        owner_id=owner_id,
        slug=slug,
        title=title or slug.title(),
        is_public=is_public,
        navigation=json.dumps(navigation or []),
    )
    db.session.add(site)
    db.session.commit()
    return site


def _make_page(site, slug, blocks=(), title=None, is_public=True):
    """A page of site; blocks are (layout, data) pairs"""
    from models import SitePage, SitePageBlock, db

    page = SitePage(
        site_id=site.id,
        slug=slug,
        title=title or slug.title(),
        is_public=is_public,
        blocks=[
            SitePageBlock(layout=layout, data=data, position=position)
            for position, (layout, data) in enumerate(blocks)
        ],
    )
    db.session.add(page)
    db.session.commit()
    return page


@pytest.fixture
def make_site(app):
    return _make_site


@pytest.fixture
def make_page(app):
    return _make_page


@pytest.fixture
def expo(app, user, item):
    """Site "expo": home page P1, page P2 with a foreign gallery block,
    nested navigation with a foreign link type, one setting, one item.
    """
    from models import db, site_setting

    site = _make_site('expo', title='Expo', is_public=False, owner_id=user.id)
    home = _make_page(site, 'intro', blocks=[
        ('pageTitle', {}),
        ('html', {'html': '<p>Hello</p>'}),
    ])
    gallery = _make_page(site, 'gallery', blocks=[
        ('customGallery', {'images': [1, 2, 3]}),
        ('html', {'html': '<p>Pictures</p>'}),
    ])

    site.homepage_id = home.id
    site.navigation = json.dumps([
        {'type': 'page', 'data': {'label': 'Intro', 'id': home.id}, 'links': [
            {'type': 'page', 'data': {'label': 'Gallery', 'id': gallery.id}, 'links': []},
            {'type': 'mapLink', 'data': {'label': 'Map', 'zoom': 4}, 'links': []},
        ]},
        {'type': 'url', 'data': {'label': 'Home', 'url': 'https://example.com'}, 'links': []},
    ])
    site.items = [item]
    db.session.execute(site_setting.insert().values(
        id='attachment_link_type', site_id=site.id, value='item',
    ))
    db.session.commit()

    return {'site': site, 'home': home, 'gallery': gallery}

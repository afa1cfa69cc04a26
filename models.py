"""
Database models for the Copy Resources content store
"""
import json
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


# ---------------------------------------------------------------------------
# Link tables (copied row-for-row by core.copy_resources.link_tables)
# ---------------------------------------------------------------------------

item_item_set = db.Table(
    'item_item_set',
    db.Column('item_id', db.Integer, db.ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
    db.Column('item_set_id', db.Integer, db.ForeignKey('item_sets.id', ondelete='CASCADE'), primary_key=True),
)

item_site = db.Table(
    'item_site',
    db.Column('item_id', db.Integer, db.ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
    db.Column('site_id', db.Integer, db.ForeignKey('sites.id', ondelete='CASCADE'), primary_key=True),
)

site_setting = db.Table(
    'site_setting',
    db.Column('id', db.String(190), primary_key=True),
    db.Column('site_id', db.Integer, db.ForeignKey('sites.id', ondelete='CASCADE'), primary_key=True),
    db.Column('value', db.JSON, nullable=False),
)


def _ref(resource_id):
    """JSON-LD reference to another resource, or None."""
    if resource_id is None:
        return None
    return {'o:id': resource_id}


def _timestamp(value):
    return value.isoformat() if value else None


class User(db.Model):
    """Account that owns content"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255))
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<User {self.email}>'


class Item(db.Model):
    """A single content record"""
    __tablename__ = 'items'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), index=True)
    title = db.Column(db.String(255))
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    values = db.Column(db.JSON, default=list)
    # Plain column: media rows point back at the item, so a real FK would be circular.
    primary_media_id = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    owner = db.relationship('User', backref=db.backref('items', lazy='dynamic'))
    media = db.relationship(
        'Media', backref='item', cascade='all, delete-orphan',
        order_by='Media.position',
    )
    primary_media = db.relationship(
        'Media', primaryjoin='foreign(Item.primary_media_id) == Media.id',
        viewonly=True,
    )
    item_sets = db.relationship('ItemSet', secondary=item_item_set, back_populates='items')
    sites = db.relationship('Site', secondary=item_site, back_populates='items')

    def __repr__(self):
        return f'<Item {self.id} {self.title!r}>'

    def to_json_ld(self):
        return {
            'o:id': self.id,
            'o:owner': _ref(self.owner_id),
            'o:is_public': self.is_public,
            'o:title': self.title,
            'o:values': self.values or [],
            'o:item_set': [_ref(s.id) for s in self.item_sets],
            'o:site': [_ref(s.id) for s in self.sites],
            'o:media': [_ref(m.id) for m in self.media],
            'o:primary_media': _ref(self.primary_media_id),
            'o:created': _timestamp(self.created_at),
        }


class Media(db.Model):
    """A media file attached to an item (never duplicated by a copy)"""
    __tablename__ = 'media'

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id', ondelete='CASCADE'), nullable=False, index=True)
    ingester = db.Column(db.String(255), nullable=False, default='upload')
    source = db.Column(db.String(1024))
    position = db.Column(db.Integer, default=0, nullable=False)
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    data = db.Column(db.JSON)

    def __repr__(self):
        return f'<Media {self.id} item={self.item_id}>'


class ItemSet(db.Model):
    """A named collection of items"""
    __tablename__ = 'item_sets'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), index=True)
    title = db.Column(db.String(255))
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    is_open = db.Column(db.Boolean, default=False, nullable=False)
    values = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    owner = db.relationship('User', backref=db.backref('item_sets', lazy='dynamic'))
    items = db.relationship('Item', secondary=item_item_set, back_populates='item_sets')

    def __repr__(self):
        return f'<ItemSet {self.id} {self.title!r}>'

    def to_json_ld(self):
        return {
            'o:id': self.id,
            'o:owner': _ref(self.owner_id),
            'o:is_public': self.is_public,
            'o:title': self.title,
            'o:is_open': self.is_open,
            'o:values': self.values or [],
            'o:created': _timestamp(self.created_at),
        }


class Site(db.Model):
    """A site: pages, navigation, settings, and item membership"""
    __tablename__ = 'sites'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), index=True)
    slug = db.Column(db.String(190), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    summary = db.Column(db.Text)
    theme = db.Column(db.String(190), nullable=False, default='default')
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    item_pool = db.Column(db.JSON, default=dict)
    # Serialized navigation tree, read and written raw by core.copy_resources.navigation
    navigation = db.Column(db.Text, nullable=False, default='[]')
    # Plain column: pages point back at the site, so a real FK would be circular.
    homepage_id = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    owner = db.relationship('User', backref=db.backref('sites', lazy='dynamic'))
    pages = db.relationship(
        'SitePage', back_populates='site', cascade='all, delete-orphan',
        order_by='SitePage.id',
    )
    homepage = db.relationship(
        'SitePage', primaryjoin='foreign(Site.homepage_id) == SitePage.id',
        viewonly=True,
    )
    items = db.relationship('Item', secondary=item_site, back_populates='sites')

    def __repr__(self):
        return f'<Site {self.slug}>'

    @property
    def navigation_links(self):
        return json.loads(self.navigation or '[]')

    def to_json_ld(self):
        return {
            'o:id': self.id,
            'o:owner': _ref(self.owner_id),
            'o:slug': self.slug,
            'o:title': self.title,
            'o:summary': self.summary,
            'o:theme': self.theme,
            'o:is_public': self.is_public,
            'o:item_pool': self.item_pool or {},
            'o:navigation': self.navigation_links,
            'o:homepage': _ref(self.homepage_id),
            'o:page': [_ref(p.id) for p in self.pages],
            'o:created': _timestamp(self.created_at),
        }


class SitePage(db.Model):
    """A page of a site, made of ordered blocks"""
    __tablename__ = 'site_page'
    __table_args__ = (
        db.UniqueConstraint('site_id', 'slug', name='uq_site_page_site_slug'),
    )

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False, index=True)
    slug = db.Column(db.String(190), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    site = db.relationship('Site', back_populates='pages')
    blocks = db.relationship(
        'SitePageBlock', back_populates='page', cascade='all, delete-orphan',
        order_by='SitePageBlock.position',
    )

    def __repr__(self):
        return f'<SitePage {self.slug} site={self.site_id}>'

    def to_json_ld(self):
        return {
            'o:id': self.id,
            'o:slug': self.slug,
            'o:title': self.title,
            'o:is_public': self.is_public,
            'o:site': _ref(self.site_id),
            'o:block': [block.to_json_ld() for block in self.blocks],
            'o:created': _timestamp(self.created_at),
        }


class SitePageBlock(db.Model):
    """One content block of a page; `layout` names its renderer"""
    __tablename__ = 'site_page_block'

    id = db.Column(db.Integer, primary_key=True)
    page_id = db.Column(db.Integer, db.ForeignKey('site_page.id', ondelete='CASCADE'), nullable=False, index=True)
    layout = db.Column(db.String(80), nullable=False, index=True)
    data = db.Column(db.JSON, default=dict)
    position = db.Column(db.Integer, default=0, nullable=False)

    page = db.relationship('SitePage', back_populates='blocks')

    def __repr__(self):
        return f'<SitePageBlock {self.id} {self.layout}>'

    def to_json_ld(self):
        return {
            'o:id': self.id,
            'o:layout': self.layout,
            'o:data': self.data or {},
        }

"""
Errors raised by the copy engine.

Listener exceptions and SQLAlchemy errors are not wrapped at the object
level; they reach the caller unchanged. Only the multi-stage site copy adds
context, via SiteCopyError chained to the original exception.
"""
from __future__ import annotations


class CopyResourcesError(Exception):
    """Base class for copy engine errors."""


class InvalidOptionError(CopyResourcesError, ValueError):
    """A copy option has a value the engine does not understand."""


class ResourceNotFoundError(CopyResourcesError, LookupError):
    """A resource referenced by id does not exist."""

    def __init__(self, resource_name: str, resource_id):
        self.resource_name = resource_name
        self.resource_id = resource_id
        super().__init__(f'{resource_name} {resource_id} not found')


class UnresolvedReferenceError(CopyResourcesError, LookupError):
    """An identifier map has no entry for a referenced source id."""

    def __init__(self, source_id, what: str = 'reference'):
        self.source_id = source_id
        self.what = what
        super().__init__(f'Cannot resolve {what}: source id {source_id!r} was not copied')


class SlugExhaustedError(CopyResourcesError):
    """No free "<slug>-<n>" was found within the attempt budget."""

    def __init__(self, base_slug: str, attempts: int):
        self.base_slug = base_slug
        self.attempts = attempts
        super().__init__(
            f'No unique slug for {base_slug!r} after {attempts} attempts'
        )


class SlugCollisionError(CopyResourcesError):
    """The store rejected a slug that was free when it was probed."""

    def __init__(self, resource_name: str, slug: str | None):
        self.resource_name = resource_name
        self.slug = slug
        super().__init__(f'Slug {slug!r} is already used by another {resource_name} row')


class SiteCopyError(CopyResourcesError):
    """A site copy stage failed after earlier stages were committed.

    Attributes:
        stage: The SiteCopyStage that failed.
        completed_stages: Stages committed before the failure.
        site_copy_id: Id of the partially built copy, or None if the
            site row itself was never created.
        site_page_map: Source page id -> copy page id for pages copied so far.
        cleaned_up: True if the partial copy was deleted before raising.
    """

    def __init__(self, stage, completed_stages=(), site_copy_id=None,
                 site_page_map=None, cleaned_up=False):
        self.stage = stage
        self.completed_stages = tuple(completed_stages)
        self.site_copy_id = site_copy_id
        self.site_page_map = dict(site_page_map or {})
        self.cleaned_up = cleaned_up
        stage_name = getattr(stage, 'value', stage)
        super().__init__(
            f'Site copy failed at stage {stage_name!r} '
            f'(completed: {[getattr(s, "value", s) for s in self.completed_stages]}, '
            f'site copy id: {site_copy_id})'
        )

    @property
    def original(self):
        """The exception that aborted the stage."""
        return self.__cause__

    def to_dict(self):
        cause = self.original
        if isinstance(cause, CLIENT_ERRORS):
            message = str(cause)
        else:
            message = 'An internal error occurred'
        return {
            'error': message,
            'stage': getattr(self.stage, 'value', self.stage),
            'completed_stages': [getattr(s, 'value', s) for s in self.completed_stages],
            'site_copy_id': None if self.cleaned_up else self.site_copy_id,
            'cleaned_up': self.cleaned_up,
        }


# Causes whose message may be returned to an HTTP client.
CLIENT_ERRORS = (
    InvalidOptionError, UnresolvedReferenceError, SlugExhaustedError, SlugCollisionError,
)

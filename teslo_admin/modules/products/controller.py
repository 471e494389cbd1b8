"""
Product Form Controller
=======================

Owns the draft behind the product edit page for one editing session.

Collaborators:
- store: ``get_by_slug(slug)``, ``create(payload)``, ``update(id, payload)``
  (``ProductStore`` or ``ApiProductStore``)
- uploader: ``upload(file) -> reference`` (``LocalAssetUploader`` or
  ``ApiAssetUploader``)

Every draft edit goes through ``_update`` which swaps the draft value,
re-validates the touched fields and notifies subscribers once.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import draft as drafts
from .draft import DraftProduct, MIN_IMAGES, MSG_MIN_IMAGES
from .exceptions import NotFoundError, ProductAdminError, UploadError, ValidationError

logger = logging.getLogger(__name__)

IDLE = 'idle'
SUBMITTING = 'submitting'
NAVIGATING = 'navigating'

NOTICE_FIX_FIELDS = 'Please correct the highlighted fields'
NOTICE_SAVE_FAILED = 'The product could not be saved, please try again'
NOTICE_SAVED = 'Product saved'


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading one file from a batch"""
    filename: str
    reference: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _filename_of(file) -> str:
    return getattr(file, 'filename', None) or getattr(file, 'name', None) or repr(file)


class ProductFormController:
    """Editable product form state for a single session"""

    def __init__(self, store, uploader, draft: Optional[DraftProduct] = None):
        self.store = store
        self.uploader = uploader
        self._draft = draft if draft is not None else drafts.blank_draft()
        self.pending_tag = ''
        self.state = IDLE
        self.errors = {}
        self.notice = None
        self.navigate_to = None
        self._subscribers: List[Callable] = []

    @classmethod
    def for_slug(cls, store, uploader, slug):
        """Open the editor for ``slug``; ``'new'`` starts from the blank template.

        Raises NotFoundError when the store has no such product.
        """
        if slug == 'new':
            return cls(store, uploader)
        record = store.get_by_slug(slug)
        if not record:
            raise NotFoundError(f"No product with slug '{slug}'")
        return cls(store, uploader, drafts.from_record(record))

    @property
    def draft(self) -> DraftProduct:
        return self._draft

    @property
    def submitting(self) -> bool:
        return self.state != IDLE

    # ===== Change notification =====

    def subscribe(self, callback):
        """Call ``callback(draft, field)`` after every change; returns an unsubscribe function"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, field):
        for callback in list(self._subscribers):
            callback(self._draft, field)

    def _update(self, fields, mutate, *args):
        new_draft = mutate(self._draft, *args)
        if new_draft == self._draft:
            return
        self._draft = new_draft
        self._revalidate(fields)
        self._notify(fields[0])

    def _revalidate(self, fields):
        current = drafts.field_errors(drafts.to_payload(self._draft))
        for name in fields:
            if name == 'images':
                if len(self._draft.images) < MIN_IMAGES:
                    self.errors['images'] = MSG_MIN_IMAGES
                else:
                    self.errors.pop('images', None)
            elif name in current:
                self.errors[name] = current[name]
            else:
                self.errors.pop(name, None)

    # ===== Field edits =====

    def set_title(self, text):
        # slug follows the title on every edit, overwriting manual slugs
        self._update(('title', 'slug'), drafts.with_title, text)

    def set_slug(self, text):
        self._update(('slug',), drafts.with_slug, text)

    def set_description(self, text):
        self._update(('description',), drafts.with_description, text)

    def set_in_stock(self, value):
        try:
            quantity = drafts.coerce_in_stock(value)
        except ValidationError as e:
            self.errors.update(e.errors)
            return
        self._update(('in_stock',), drafts.with_in_stock, quantity)

    def set_price(self, value):
        try:
            price = drafts.coerce_price(value)
        except ValidationError as e:
            self.errors.update(e.errors)
            return
        self._update(('price',), drafts.with_price, price)

    def toggle_size(self, size):
        self._update(('sizes',), drafts.with_size_toggled, size)

    def select_category(self, value):
        self._update(('category',), drafts.with_category, value)

    def select_audience(self, value):
        self._update(('audience',), drafts.with_audience, value)

    # ===== Tags =====

    def stage_tag(self, text):
        self.pending_tag = text

    def commit_tag(self):
        """Insert the pending tag at the front; duplicates are dropped silently"""
        tag = self.pending_tag.strip()
        self.pending_tag = ''
        if not tag:
            return
        self._update(('tags',), drafts.with_tag, tag)

    def remove_tag(self, text):
        self._update(('tags',), drafts.without_tag, text)

    # ===== Images =====

    def request_image_upload(self, files) -> List[UploadOutcome]:
        """Upload each file independently, appending every stored reference.

        Returns one UploadOutcome per file, in input order.
        """
        outcomes = []
        for file in files:
            filename = _filename_of(file)
            try:
                reference = self.uploader.upload(file)
            except UploadError as e:
                logger.warning("Upload failed for %s: %s", filename, e)
                outcomes.append(UploadOutcome(filename=filename, error=str(e) or 'Upload failed'))
                continue
            except Exception as e:
                logger.exception("Unexpected error uploading %s", filename)
                outcomes.append(UploadOutcome(filename=filename, error=f"Upload failed: {e}"))
                continue
            self._update(('images',), drafts.with_images_appended, (reference,))
            outcomes.append(UploadOutcome(filename=filename, reference=reference))

        failed = [o for o in outcomes if not o.ok]
        if failed:
            self.notice = 'Could not upload: ' + ', '.join(f"{o.filename} ({o.error})" for o in failed)
        return outcomes

    def remove_image(self, reference):
        self._update(('images',), drafts.without_image, reference)

    # ===== Submission =====

    def submit(self) -> bool:
        """Validate and send the draft to the store.

        Returns True when the store accepted it. Calls made while a
        submission is in flight (or after a create succeeded) are ignored.
        """
        if self.state != IDLE:
            return False

        draft = self._draft
        if len(draft.images) < MIN_IMAGES:
            self.errors['images'] = MSG_MIN_IMAGES
            self.notice = MSG_MIN_IMAGES
            return False
        self.errors.pop('images', None)

        payload = drafts.to_payload(draft)
        errors = drafts.field_errors(payload)
        if errors:
            self.errors = errors
            self.notice = NOTICE_FIX_FIELDS
            return False
        self.errors = {}

        self.state = SUBMITTING
        self._notify('submitting')
        try:
            if draft.is_new:
                stored = self.store.create(payload)
            else:
                stored = self.store.update(draft.id, payload)
        except ProductAdminError as e:
            logger.warning("Saving product '%s' failed: %s", draft.slug, e)
            if isinstance(e, ValidationError):
                self.errors = dict(e.errors)
            return self._submit_failed()
        except Exception:
            logger.exception("Unexpected error saving product '%s'", draft.slug)
            return self._submit_failed()

        if draft.is_new:
            self.state = NAVIGATING
            self.navigate_to = (stored or {}).get('slug') or draft.slug
            logger.info("Created product '%s'", self.navigate_to)
        else:
            self.state = IDLE
            logger.info("Updated product '%s'", draft.slug)
        self.notice = NOTICE_SAVED
        self._notify('submitting')
        return True

    def _submit_failed(self):
        self.state = IDLE
        self.notice = NOTICE_SAVE_FAILED
        self._notify('submitting')
        return False

"""
Product Draft
=============

The in-memory, single-session editable copy of a product.

A draft is an immutable value: every edit produces a new ``DraftProduct``
through one of the pure functions below, so the form controller can swap
the whole value and notify subscribers from a single place.
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from .exceptions import ValidationError

VALID_CATEGORIES = ('shirts', 'pants', 'hoodies', 'hats')
VALID_AUDIENCES = ('men', 'women', 'kid', 'unisex')
VALID_SIZES = ('XS', 'S', 'M', 'L', 'XL', 'XXL', 'XXXL')

MIN_IMAGES = 2
PLACEHOLDER_IMAGES = ('img1.jpg', 'img2.jpg')

MSG_REQUIRED = 'This field is required'
MSG_MIN_LENGTH = 'Minimum 2 characters'
MSG_MIN_ZERO = 'Minimum is 0'
MSG_WHOLE_NUMBER = 'Must be a whole number'
MSG_NUMBER = 'Must be a number'
MSG_NO_WHITESPACE = 'Whitespace is not allowed'
MSG_MIN_IMAGES = f'At least {MIN_IMAGES} images are required'


@dataclass(frozen=True)
class DraftProduct:
    title: str = ''
    slug: str = ''
    description: str = ''
    in_stock: int = 0
    price: float = 0
    category: str = 'shirts'
    audience: str = 'women'
    sizes: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    id: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.id is None


def derive_slug(title: str) -> str:
    """trim, spaces to hyphens, drop apostrophes, lowercase - in that order.

    Consecutive spaces become consecutive hyphens.
    """
    return title.strip().replace(' ', '-').replace("'", '').lower()


def blank_draft() -> DraftProduct:
    """Template for the "new product" page"""
    return DraftProduct(images=PLACEHOLDER_IMAGES)


def from_record(record: Dict[str, Any]) -> DraftProduct:
    """Build a draft from a stored product dict"""
    return DraftProduct(
        id=record.get('id'),
        title=record.get('title') or '',
        slug=record.get('slug') or '',
        description=record.get('description') or '',
        in_stock=record.get('in_stock', 0),
        price=record.get('price', 0),
        category=record.get('category') or DraftProduct.category,
        audience=record.get('audience') or DraftProduct.audience,
        sizes=tuple(record.get('sizes') or ()),
        tags=tuple(record.get('tags') or ()),
        images=tuple(record.get('images') or ()),
    )


def to_payload(draft: DraftProduct) -> Dict[str, Any]:
    """Submission payload; ``id`` is only present in update mode"""
    payload = {
        'title': draft.title,
        'slug': draft.slug,
        'description': draft.description,
        'in_stock': draft.in_stock,
        'price': draft.price,
        'category': draft.category,
        'audience': draft.audience,
        'sizes': list(draft.sizes),
        'tags': list(draft.tags),
        'images': list(draft.images),
    }
    if draft.id is not None:
        payload['id'] = draft.id
    return payload


# ===== Pure mutations =====

def with_title(draft, text):
    return replace(draft, title=text, slug=derive_slug(text))


def with_slug(draft, text):
    return replace(draft, slug=text)


def with_description(draft, text):
    return replace(draft, description=text)


def with_in_stock(draft, quantity):
    return replace(draft, in_stock=quantity)


def with_price(draft, price):
    return replace(draft, price=price)


def with_size_toggled(draft, size):
    if size not in VALID_SIZES:
        raise ValidationError({'sizes': f'Unknown size: {size}'})
    if size in draft.sizes:
        return replace(draft, sizes=tuple(s for s in draft.sizes if s != size))
    return replace(draft, sizes=draft.sizes + (size,))


def with_category(draft, value):
    if value not in VALID_CATEGORIES:
        raise ValidationError({'category': f'Unknown category: {value}'})
    return replace(draft, category=value)


def with_audience(draft, value):
    if value not in VALID_AUDIENCES:
        raise ValidationError({'audience': f'Unknown audience: {value}'})
    return replace(draft, audience=value)


def with_tag(draft, tag):
    """Insert ``tag`` at the front unless it is already present"""
    if tag in draft.tags:
        return draft
    return replace(draft, tags=(tag,) + draft.tags)


def without_tag(draft, tag):
    return replace(draft, tags=tuple(t for t in draft.tags if t != tag))


def with_images_appended(draft, references: Iterable[str]):
    return replace(draft, images=draft.images + tuple(references))


def without_image(draft, reference):
    """Remove the first entry equal to ``reference``"""
    if reference not in draft.images:
        return draft
    images = list(draft.images)
    images.remove(reference)
    return replace(draft, images=tuple(images))


# ===== Validation =====

def _as_int(value):
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


def _as_number(value):
    if isinstance(value, bool):
        raise ValueError(value)
    number = float(value.strip()) if isinstance(value, str) else float(value)
    if not math.isfinite(number):
        raise ValueError(value)
    return int(number) if isinstance(value, int) else number


def coerce_in_stock(value):
    """Parse a stock quantity typed into the form; raises ValidationError"""
    try:
        return _as_int(value)
    except (TypeError, ValueError):
        raise ValidationError({'in_stock': MSG_WHOLE_NUMBER})


def coerce_price(value):
    """Parse a price typed into the form; raises ValidationError"""
    try:
        return _as_number(value)
    except (TypeError, ValueError):
        raise ValidationError({'price': MSG_NUMBER})


def field_errors(data: Dict[str, Any]) -> Dict[str, str]:
    """Field-level rules shared by the form and the store.

    Returns a dict of field name -> message; empty when everything passes.
    """
    errors = {}

    title = data.get('title') or ''
    if not isinstance(title, str) or not title.strip():
        errors['title'] = MSG_REQUIRED
    elif len(title.strip()) < 2:
        errors['title'] = MSG_MIN_LENGTH

    description = data.get('description') or ''
    if not isinstance(description, str) or not description.strip():
        errors['description'] = MSG_REQUIRED

    try:
        if _as_int(data.get('in_stock')) < 0:
            errors['in_stock'] = MSG_MIN_ZERO
    except (TypeError, ValueError):
        errors['in_stock'] = MSG_WHOLE_NUMBER

    try:
        if _as_number(data.get('price')) < 0:
            errors['price'] = MSG_MIN_ZERO
    except (TypeError, ValueError):
        errors['price'] = MSG_NUMBER

    slug = data.get('slug') or ''
    if not isinstance(slug, str) or not slug.strip():
        errors['slug'] = MSG_REQUIRED
    elif any(ch.isspace() for ch in slug.strip()):
        errors['slug'] = MSG_NO_WHITESPACE

    return errors


def clean_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate an incoming product payload and normalise its types.

    Used by the store for create/update; raises ValidationError with every
    failing field at once.
    """
    errors = field_errors(data)

    if data.get('category') not in VALID_CATEGORIES:
        errors['category'] = f"Must be one of: {', '.join(VALID_CATEGORIES)}"
    if data.get('audience') not in VALID_AUDIENCES:
        errors['audience'] = f"Must be one of: {', '.join(VALID_AUDIENCES)}"

    sizes = data.get('sizes') or []
    if not isinstance(sizes, (list, tuple)) or any(s not in VALID_SIZES for s in sizes):
        errors['sizes'] = f"Sizes must be among: {', '.join(VALID_SIZES)}"

    tags = data.get('tags') or []
    if not isinstance(tags, (list, tuple)) or not all(isinstance(t, str) for t in tags):
        errors['tags'] = 'Tags must be a list of strings'

    images = data.get('images') or []
    if not isinstance(images, (list, tuple)) or not all(isinstance(i, str) and i for i in images):
        errors['images'] = 'Images must be a list of references'
    elif len(images) < MIN_IMAGES:
        errors['images'] = MSG_MIN_IMAGES

    if errors:
        raise ValidationError(errors)

    return {
        'title': data['title'].strip(),
        'slug': data['slug'].strip(),
        'description': data['description'].strip(),
        'in_stock': _as_int(data['in_stock']),
        'price': _as_number(data['price']),
        'category': data['category'],
        'audience': data['audience'],
        'sizes': list(dict.fromkeys(sizes)),
        'tags': list(dict.fromkeys(tags)),
        'images': list(images),
    }

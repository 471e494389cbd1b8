"""
Product Form Controller Tests
=============================

Draft editing, derived slug, tags, sizes, images and submission.
Run with: pytest tests/test_product_form.py -v
"""

import pytest

from conftest import FakeStore, FakeUploader, named_file, product_payload
from teslo_admin.modules.products import ProductFormController
from teslo_admin.modules.products.controller import IDLE, NAVIGATING, NOTICE_SAVE_FAILED, UploadOutcome
from teslo_admin.modules.products.draft import (
    MSG_MIN_IMAGES,
    MSG_MIN_LENGTH,
    MSG_MIN_ZERO,
    MSG_NO_WHITESPACE,
    MSG_NUMBER,
    MSG_REQUIRED,
    DraftProduct,
    derive_slug,
    from_record,
)
from teslo_admin.modules.products.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)


def loaded_form(store=None, uploader=None, **overrides):
    """Controller in update mode over a valid stored product."""
    record = dict(product_payload(**overrides), id='p-1')
    store = store or FakeStore([record])
    return ProductFormController(store, uploader or FakeUploader(), from_record(record))


def valid_new_form(store, uploader):
    form = ProductFormController(store, uploader)
    form.set_title('Kids Racing Stripe Tee')
    form.set_description('Soft cotton tee')
    form.set_in_stock('10')
    form.set_price('30')
    return form


# ---------------------------------------------------------------------------
# 1. Slug derivation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("title, expected", [
    ("Men's  T Shirt", "mens--t-shirt"),
    ("  Cybertruck Bulletproof Tee  ", "cybertruck-bulletproof-tee"),
    ("Women's 'Plaid' Shirt", "womens-plaid-shirt"),
    ("HATS", "hats"),
    ("", ""),
])
def test_set_title_derives_slug(store, uploader, title, expected):
    """Title edits derive the slug: trim, spaces to hyphens, drop apostrophes, lowercase."""
    form = ProductFormController(store, uploader)
    form.set_title(title)

    assert form.draft.title == title
    assert form.draft.slug == expected
    assert derive_slug(title) == expected


def test_title_edit_overwrites_manual_slug(store, uploader):
    """A manual slug only lasts until the next title edit."""
    form = ProductFormController(store, uploader)
    form.set_title('Plain Hat')
    form.set_slug('custom-slug')
    assert form.draft.slug == 'custom-slug'

    form.set_title('Plain Hat 2')
    assert form.draft.slug == 'plain-hat-2'


def test_slug_with_whitespace_is_flagged(store, uploader):
    form = ProductFormController(store, uploader)
    form.set_slug('two words')
    assert form.errors['slug'] == MSG_NO_WHITESPACE

    form.set_slug('two-words')
    assert 'slug' not in form.errors


def test_title_length_ignores_surrounding_spaces(store, uploader):
    form = ProductFormController(store, uploader)
    form.set_title(' a ')
    assert form.errors['title'] == MSG_MIN_LENGTH

    form.set_title(' ab ')
    assert 'title' not in form.errors


# ---------------------------------------------------------------------------
# 2. Sizes, category, audience
# ---------------------------------------------------------------------------

def test_toggle_size_twice_restores_sizes(store, uploader):
    form = loaded_form()
    before = form.draft.sizes

    form.toggle_size('XL')
    assert 'XL' in form.draft.sizes
    form.toggle_size('XL')
    assert form.draft.sizes == before

    form.toggle_size('S')
    assert 'S' not in form.draft.sizes
    form.toggle_size('S')
    assert sorted(form.draft.sizes) == sorted(before)


def test_unknown_size_is_rejected(store, uploader):
    form = ProductFormController(store, uploader)
    with pytest.raises(ValidationError):
        form.toggle_size('XXXXL')
    assert form.draft.sizes == ()


def test_select_category_and_audience(store, uploader):
    form = ProductFormController(store, uploader)
    form.select_category('hoodies')
    form.select_audience('kid')
    assert form.draft.category == 'hoodies'
    assert form.draft.audience == 'kid'


def test_out_of_range_choices_are_never_stored(store, uploader):
    form = ProductFormController(store, uploader)
    with pytest.raises(ValidationError):
        form.select_category('shoes')
    with pytest.raises(ValidationError):
        form.select_audience('pets')
    assert form.draft.category == 'shirts'
    assert form.draft.audience == 'women'


def test_non_numeric_stock_keeps_draft_and_reports(store, uploader):
    form = ProductFormController(store, uploader)
    form.set_in_stock('lots')
    assert form.draft.in_stock == 0
    assert 'in_stock' in form.errors

    form.set_in_stock('-1')
    assert form.draft.in_stock == -1
    assert form.errors['in_stock'] == MSG_MIN_ZERO


@pytest.mark.parametrize("value", ['inf', '-inf', 'nan', float('inf')])
def test_non_finite_price_is_rejected(store, uploader, value):
    form = ProductFormController(store, uploader)
    form.set_price(value)
    assert form.draft.price == 0
    assert form.errors['price'] == MSG_NUMBER


# ---------------------------------------------------------------------------
# 3. Tags
# ---------------------------------------------------------------------------

def test_commit_tag_inserts_at_front():
    form = loaded_form(tags=['new'])
    form.stage_tag('sale')
    form.commit_tag()

    assert form.draft.tags == ('sale', 'new')
    assert form.pending_tag == ''


def test_commit_duplicate_tag_is_noop_and_clears_pending():
    form = loaded_form(tags=['new', 'sale'])
    seen = []
    form.subscribe(lambda draft, field: seen.append(field))

    form.stage_tag('sale')
    form.commit_tag()

    assert form.draft.tags == ('new', 'sale')
    assert form.pending_tag == ''
    assert seen == [], "duplicate tag must not notify subscribers"


def test_tag_match_is_case_sensitive():
    form = loaded_form(tags=['sale'])
    form.stage_tag('Sale')
    form.commit_tag()
    assert form.draft.tags == ('Sale', 'sale')


def test_remove_tag_removes_all_matches_and_keeps_pending():
    form = loaded_form(tags=['a', 'b', 'c'])
    form.stage_tag('b')
    form.remove_tag('b')

    assert form.draft.tags == ('a', 'c')
    assert form.pending_tag == 'b'


def test_tag_edits_notify_subscribers():
    form = loaded_form(tags=[])
    seen = []
    unsubscribe = form.subscribe(lambda draft, field: seen.append((field, draft.tags)))

    form.stage_tag('summer')
    form.commit_tag()
    form.remove_tag('summer')
    unsubscribe()
    form.stage_tag('winter')
    form.commit_tag()

    assert seen == [('tags', ('summer',)), ('tags', ())]


# ---------------------------------------------------------------------------
# 4. Images
# ---------------------------------------------------------------------------

def test_upload_appends_in_order_and_reports_failures(store):
    uploader = FakeUploader(failing={'notes.txt'})
    form = ProductFormController(store, uploader, DraftProduct())

    outcomes = form.request_image_upload([
        named_file('front.jpg'),
        named_file('notes.txt'),
        named_file('back.png'),
    ])

    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[1].filename == 'notes.txt'
    assert 'Invalid file type' in outcomes[1].error
    assert form.draft.images == ('/static/products/front.jpg', '/static/products/back.png')
    assert 'notes.txt' in form.notice


def test_upload_revalidates_minimum_images(store):
    form = ProductFormController(store, FakeUploader(), DraftProduct())
    form.request_image_upload([named_file('one.jpg')])
    assert form.errors['images'] == MSG_MIN_IMAGES

    form.request_image_upload([named_file('two.jpg')])
    assert 'images' not in form.errors


def test_remove_image_removes_one_entry_in_place():
    form = loaded_form(images=['a.jpg', 'b.jpg', 'c.jpg', 'd.jpg'])
    form.remove_image('b.jpg')
    assert form.draft.images == ('a.jpg', 'c.jpg', 'd.jpg')

    form.remove_image('missing.jpg')
    assert form.draft.images == ('a.jpg', 'c.jpg', 'd.jpg')


class BrokenReadUploader(FakeUploader):
    """Raises a plain OSError, not UploadError, for one file"""

    def upload(self, file):
        if file.name == 'b.jpg':
            raise OSError('read error')
        return super().upload(file)


def test_unexpected_upload_error_fails_only_that_file(store):
    form = ProductFormController(store, BrokenReadUploader(), DraftProduct())

    outcomes = form.request_image_upload([
        named_file('a.jpg'),
        named_file('b.jpg'),
        named_file('c.jpg'),
    ])

    assert outcomes[0] == UploadOutcome(filename='a.jpg', reference='/static/products/a.jpg')
    assert [o.ok for o in outcomes] == [True, False, True]
    assert 'read error' in outcomes[1].error
    assert form.draft.images == ('/static/products/a.jpg', '/static/products/c.jpg')
    assert 'b.jpg' in form.notice


# ---------------------------------------------------------------------------
# 5. Submission
# ---------------------------------------------------------------------------

def test_submit_with_too_few_images_never_calls_store(store, uploader):
    form = valid_new_form(store, uploader)
    form.remove_image('img1.jpg')

    assert form.submit() is False
    assert store.calls == []
    assert form.notice == MSG_MIN_IMAGES
    assert form.state == IDLE


def test_submit_reports_each_invalid_field(store, uploader):
    form = ProductFormController(store, uploader)
    form.set_title('A')
    form.set_price('-5')

    assert form.submit() is False
    assert store.calls == []
    assert form.errors['title'] == MSG_MIN_LENGTH
    assert form.errors['description'] == MSG_REQUIRED
    assert form.errors['price'] == MSG_MIN_ZERO
    assert 'slug' not in form.errors


def test_submit_new_product_creates_once_and_navigates(store, uploader):
    form = valid_new_form(store, uploader)

    assert form.submit() is True
    assert [c[0] for c in store.calls] == ['create']
    assert 'id' not in store.calls[0][1]
    assert form.state == NAVIGATING
    assert form.submitting is True
    assert form.navigate_to == 'kids-racing-stripe-tee'


def test_submit_after_create_is_ignored(store, uploader):
    form = valid_new_form(store, uploader)
    form.submit()
    assert form.submit() is False
    assert len(store.calls) == 1


def test_submit_existing_product_updates_and_stays_loaded():
    form = loaded_form()
    form.set_price('99.5')
    draft_before = form.draft

    assert form.submit() is True
    assert [c[0] for c in form.store.calls] == ['update']
    assert form.store.calls[0][1] == 'p-1'
    assert form.store.calls[0][2]['price'] == 99.5
    assert form.state == IDLE
    assert form.submitting is False
    assert form.draft is draft_before
    assert form.navigate_to is None


@pytest.mark.parametrize("error", [
    StoreError("connection refused"),
    ConflictError("slug taken"),
    NotFoundError("gone"),
])
def test_failed_store_call_leaves_draft_untouched(error):
    store = FakeStore([dict(product_payload(), id='p-1')], fail_with=error)
    form = loaded_form(store=store)
    form.set_title('Renamed Crew')
    draft_before = form.draft

    assert form.submit() is False
    assert form.submitting is False
    assert form.draft is draft_before
    assert form.draft == draft_before
    assert form.notice == NOTICE_SAVE_FAILED

    # retry with the same state once the store recovers
    store.fail_with = None
    assert form.submit() is True


def test_unexpected_store_error_does_not_lock_the_form():
    store = FakeStore([dict(product_payload(), id='p-1')], fail_with=RuntimeError("malformed reply"))
    form = loaded_form(store=store)
    draft_before = form.draft

    assert form.submit() is False
    assert form.state == IDLE
    assert form.draft is draft_before
    assert form.notice == NOTICE_SAVE_FAILED

    store.fail_with = None
    assert form.submit() is True
    assert [c[0] for c in store.calls] == ['update', 'update']


def test_server_side_validation_errors_are_surfaced():
    store = FakeStore([dict(product_payload(), id='p-1')],
                      fail_with=ValidationError({'slug': 'Already used elsewhere'}))
    form = loaded_form(store=store)

    assert form.submit() is False
    assert form.errors == {'slug': 'Already used elsewhere'}
    assert form.state == IDLE


def test_reentrant_submit_is_ignored(store, uploader):
    form = valid_new_form(store, uploader)
    nested = []
    store.on_call = lambda: nested.append(form.submit())

    assert form.submit() is True
    assert nested == [False]
    assert len([c for c in store.calls if c[0] == 'create']) == 1


def test_submitting_flag_is_announced(store, uploader):
    form = valid_new_form(store, uploader)
    flags = []
    form.subscribe(lambda draft, field: field == 'submitting' and flags.append(form.state))

    form.submit()
    assert flags == ['submitting', 'navigating']


# ---------------------------------------------------------------------------
# 6. Opening the editor
# ---------------------------------------------------------------------------

def test_for_slug_new_starts_from_template(store, uploader):
    form = ProductFormController.for_slug(store, uploader, 'new')
    assert form.draft.is_new
    assert form.draft.images == ('img1.jpg', 'img2.jpg')
    assert store.calls == []


def test_for_slug_loads_snapshot(uploader):
    store = FakeStore([dict(product_payload(), id='p-1')])
    form = ProductFormController.for_slug(store, uploader, 'mens-chill-crew-neck-sweatshirt')
    assert form.draft.id == 'p-1'
    assert form.draft.sizes == ('XS', 'S', 'M')


def test_for_slug_unknown_raises_not_found(store, uploader):
    with pytest.raises(NotFoundError):
        ProductFormController.for_slug(store, uploader, 'nope')

"""Tests for the posts service: slugs, tags and publish timestamps."""

import time

import pytest

from taxclusive.db.models import Post, Tag
from taxclusive.services import posts as posts_service
from taxclusive.services.errors import NotFoundError, StorageError, ValidationError


def _create(db, author, title="Duplicate Title", content="Some **content**.", **kwargs):
    return posts_service.create_post(db, author=author, title=title, content=content, **kwargs)


class TestCreatePost:
    def test_slug_from_title(self, db, admin):
        post = _create(db, admin, title="Understanding GST Returns")
        assert post.slug == "understanding-gst-returns"

    def test_duplicate_title_gets_suffix(self, db, admin):
        first = _create(db, admin)
        second = _create(db, admin)
        assert first.slug == "duplicate-title"
        assert second.slug == "duplicate-title-1"

    def test_custom_slug_used(self, db, admin):
        post = _create(db, admin, slug="  my-custom-slug  ")
        assert post.slug == "my-custom-slug"

    def test_blank_custom_slug_falls_back_to_title(self, db, admin):
        post = _create(db, admin, slug="   ")
        assert post.slug == "duplicate-title"

    def test_custom_slug_is_slugified(self, db, admin):
        post = _create(db, admin, slug="Hello World/../x?")
        assert post.slug == "hello-worldx"

    def test_custom_slug_without_slug_characters_falls_back_to_title(self, db, admin):
        post = _create(db, admin, slug="/// ???")
        assert post.slug == "duplicate-title"

    def test_custom_slug_made_unique(self, db, admin):
        _create(db, admin, title="One", slug="taken")
        post = _create(db, admin, title="Two", slug="taken")
        assert post.slug == "taken-1"

    @pytest.mark.parametrize("title,content,field", [
        ("", "Body", "title"),
        ("   ", "Body", "title"),
        (None, "Body", "title"),
        ("Title", "", "content"),
        ("Title", None, "content"),
    ])
    def test_missing_required_fields(self, db, admin, title, content, field):
        with pytest.raises(ValidationError) as excinfo:
            _create(db, admin, title=title, content=content, tags=["Tax"])

        assert field in excinfo.value.errors
        assert db.query(Post).count() == 0
        assert db.query(Tag).count() == 0

    def test_title_without_slug_characters_rejected(self, db, admin):
        with pytest.raises(ValidationError) as excinfo:
            _create(db, admin, title="!!! ???")
        assert "title" in excinfo.value.errors
        assert db.query(Post).count() == 0

    def test_title_without_slug_characters_allowed_with_custom_slug(self, db, admin):
        post = _create(db, admin, title="???", slug="questions")
        assert post.slug == "questions"

    def test_defaults_to_draft(self, db, admin):
        post = _create(db, admin)
        assert post.status == "DRAFT"
        assert post.published_at is None
        assert post.featured is False

    def test_unknown_status_falls_back_to_draft(self, db, admin):
        post = _create(db, admin, status="LIVE")
        assert post.status == "DRAFT"
        assert post.published_at is None

    def test_published_sets_published_at(self, db, admin):
        post = _create(db, admin, status="PUBLISHED")
        assert post.status == "PUBLISHED"
        assert post.published_at is not None

    def test_archived_has_no_published_at(self, db, admin):
        post = _create(db, admin, status="ARCHIVED")
        assert post.published_at is None

    def test_tags_collapse_to_one_association(self, db, admin):
        post = _create(db, admin, tags=["Tax", "tax", " ", "Audit"])

        assert [tag.slug for tag in post.tags] == ["tax", "audit"]
        assert db.query(Tag).count() == 2

    def test_author_and_rendered_content(self, db, admin):
        post = _create(db, admin, content="# Heading\n\nText")

        assert post.author.email == "admin@taxclusive.com"
        assert "<h1" in post.content_html
        assert post.content_md == "# Heading\n\nText"

    def test_seo_fields_stored(self, db, admin):
        post = _create(
            db, admin,
            meta_title="Meta", meta_description="Desc", focus_keyword="gst", og_image="/og.png"
        )
        assert (post.meta_title, post.meta_description, post.focus_keyword, post.og_image) == (
            "Meta", "Desc", "gst", "/og.png"
        )


class TestUpdatePost:
    def test_not_found(self, db, admin):
        _create(db, admin)
        with pytest.raises(NotFoundError):
            posts_service.update_post(db, 9999, title="Anything", tags=["New Tag"])
        assert db.query(Tag).count() == 0

    def test_content_only_keeps_slug(self, db, admin):
        post = _create(db, admin, slug="custom")
        updated = posts_service.update_post(db, post.id, content="New body")

        assert updated.slug == "custom"
        assert updated.content_md == "New body"

    def test_same_title_keeps_slug(self, db, admin):
        post = _create(db, admin, slug="custom")
        updated = posts_service.update_post(db, post.id, title="Duplicate Title", featured=True)

        assert updated.slug == "custom"
        assert updated.featured is True

    def test_title_change_recomputes_slug(self, db, admin):
        post = _create(db, admin)
        updated = posts_service.update_post(db, post.id, title="Fresh Title")
        assert updated.slug == "fresh-title"
        assert updated.title == "Fresh Title"

    def test_title_change_does_not_collide_with_itself(self, db, admin):
        post = _create(db, admin, title="Tax Tips")
        updated = posts_service.update_post(db, post.id, title="Tax Tips!")
        assert updated.slug == "tax-tips"

    def test_title_change_avoids_other_posts(self, db, admin):
        _create(db, admin, title="Tax Tips")
        post = _create(db, admin, title="Other")
        updated = posts_service.update_post(db, post.id, title="Tax Tips")
        assert updated.slug == "tax-tips-1"

    def test_draft_to_published_sets_timestamp_once(self, db, admin):
        post = _create(db, admin)
        assert post.published_at is None

        first = posts_service.update_post(db, post.id, status="PUBLISHED")
        published_at = first.published_at
        assert published_at is not None

        second = posts_service.update_post(db, post.id, status="PUBLISHED", content="Edited")
        assert second.published_at == published_at

    def test_published_at_survives_archive_and_republish(self, db, admin):
        post = _create(db, admin, status="PUBLISHED")
        published_at = post.published_at

        posts_service.update_post(db, post.id, status="ARCHIVED")
        time.sleep(0.01)
        republished = posts_service.update_post(db, post.id, status="PUBLISHED")

        assert republished.status == "PUBLISHED"
        assert republished.published_at == published_at

    def test_archived_draft_gets_timestamp_on_first_publish(self, db, admin):
        post = _create(db, admin, status="ARCHIVED")
        assert post.published_at is None

        published = posts_service.update_post(db, post.id, status="PUBLISHED")
        assert published.published_at is not None

    def test_unpublish_keeps_timestamp(self, db, admin):
        post = _create(db, admin, status="PUBLISHED")
        published_at = post.published_at
        updated = posts_service.update_post(db, post.id, status="DRAFT")
        assert updated.published_at == published_at

    def test_tags_replaced_not_merged(self, db, admin):
        post = _create(db, admin, tags=["Tax", "Audit"])
        updated = posts_service.update_post(db, post.id, tags=["Audit", "Payroll"])

        assert [tag.slug for tag in updated.tags] == ["audit", "payroll"]
        assert db.query(Tag).filter(Tag.slug == "tax").count() == 1

    def test_tags_untouched_when_not_supplied(self, db, admin):
        post = _create(db, admin, tags=["Tax"])
        updated = posts_service.update_post(db, post.id, excerpt="Short")
        assert [tag.slug for tag in updated.tags] == ["tax"]

    def test_empty_tag_list_clears_tags(self, db, admin):
        post = _create(db, admin, tags=["Tax"])
        updated = posts_service.update_post(db, post.id, tags=[])
        assert updated.tags == []

    def test_invalid_status_rejected(self, db, admin):
        post = _create(db, admin)
        with pytest.raises(ValidationError) as excinfo:
            posts_service.update_post(db, post.id, status="LIVE")
        assert "status" in excinfo.value.errors

    def test_blank_title_rejected(self, db, admin):
        post = _create(db, admin)
        with pytest.raises(ValidationError):
            posts_service.update_post(db, post.id, title="  ")

    def test_updated_at_advances(self, db, admin):
        post = _create(db, admin)
        before = post.updated_at
        updated = posts_service.update_post(db, post.id, excerpt="New excerpt")
        assert updated.updated_at >= before
        assert updated.created_at == post.created_at


class TestDeletePost:
    def test_delete_keeps_tags(self, db, admin):
        post = _create(db, admin, tags=["Tax"])
        posts_service.delete_post(db, post.id)

        assert db.query(Post).count() == 0
        assert db.query(Tag).count() == 1

    def test_delete_missing(self, db, admin):
        with pytest.raises(NotFoundError):
            posts_service.delete_post(db, 12345)


class TestSlugConflictRetry:
    def test_conflict_retried_with_fresh_resolution(self, db, admin, monkeypatch):
        _create(db, admin, title="Race")
        real_resolve = posts_service.resolve_unique_slug
        calls = []

        def stale_then_real(session, candidate, exclude_id=None):
            calls.append(candidate)
            if len(calls) == 1:
                # Another writer took the slug between check and insert
                return "race"
            return real_resolve(session, candidate, exclude_id)

        monkeypatch.setattr(posts_service, "resolve_unique_slug", stale_then_real)
        post = _create(db, admin, title="Race")

        assert post.slug == "race-1"
        assert len(calls) == 2

    def test_persistent_conflict_raises_storage_error(self, db, admin, monkeypatch):
        _create(db, admin, title="Race")
        monkeypatch.setattr(posts_service, "resolve_unique_slug", lambda session, candidate, exclude_id=None: "race")

        with pytest.raises(StorageError):
            _create(db, admin, title="Race", tags=["Orphan"])

        assert db.query(Post).count() == 1
        assert db.query(Tag).filter(Tag.slug == "orphan").count() == 0


class TestReadHelpers:
    def test_published_listing_orders_featured_first(self, db, admin):
        _create(db, admin, title="Old", status="PUBLISHED")
        _create(db, admin, title="Featured", status="PUBLISHED", featured=True)
        _create(db, admin, title="Draft")

        posts, total = posts_service.get_published_posts(db)
        assert total == 2
        assert [post.title for post in posts] == ["Featured", "Old"]

    def test_published_by_slug_hides_drafts(self, db, admin):
        _create(db, admin, title="Hidden")
        assert posts_service.get_published_post_by_slug(db, "hidden") is None
        assert posts_service.get_post_by_slug(db, "hidden") is not None

    def test_public_dict_falls_back_to_created_at(self, db, admin):
        post = _create(db, admin, title="Draft")
        data = posts_service.public_post_dict(post)
        assert data["published_at"] == post.created_at.isoformat()
        assert data["author"] == {"name": "Admin User", "email": "admin@taxclusive.com"}
        assert data["featured_image"] is None

    def test_reading_time(self, db, admin):
        post = _create(db, admin, content=" ".join(["word"] * 450))
        assert post.reading_time == 2

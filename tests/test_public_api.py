"""Tests for the public site API, feed and SEO routes."""

from taxclusive.db.models import Testimonial
from taxclusive.services import posts as posts_service


def _post(db, author, title, **kwargs):
    kwargs.setdefault("status", "PUBLISHED")
    return posts_service.create_post(db, author=author, title=title, content=f"About {title}", **kwargs)


def _testimonial(db, name, approved=True, featured=False):
    testimonial = Testimonial(
        name=name, designation="Director", content="Great service",
        approved=approved, featured=featured,
    )
    db.add(testimonial)
    db.commit()
    return testimonial


class TestPublicBlogs:
    def test_lists_only_published(self, client, db, admin):
        _post(db, admin, "Live Post", tags=["GST"])
        _post(db, admin, "Draft Post", status="DRAFT")
        _post(db, admin, "Old Post", status="ARCHIVED")

        response = client.get("/api/public/blogs")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [blog["title"] for blog in body["data"]] == ["Live Post"]
        assert body["message"] == "Successfully fetched 1 blogs"
        blog = body["data"][0]
        assert blog["slug"] == "live-post"
        assert blog["author"]["name"] == "Admin User"
        assert [tag["name"] for tag in blog["tags"]] == ["GST"]

    def test_featured_default_limit(self, client, db, admin):
        for n in range(5):
            _post(db, admin, f"Featured {n}", featured=True)
        _post(db, admin, "Plain")

        body = client.get("/api/public/blogs", params={"featured": "true"}).json()

        assert len(body["data"]) == 3
        assert all(blog["featured"] for blog in body["data"])

    def test_explicit_limit(self, client, db, admin):
        for n in range(4):
            _post(db, admin, f"Post {n}")
        body = client.get("/api/public/blogs", params={"limit": 2}).json()
        assert len(body["data"]) == 2

    def test_single_published(self, client, db, admin):
        _post(db, admin, "Tax Tips")
        response = client.get("/api/public/blogs/tax-tips")

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Tax Tips"
        assert "<p>" in response.json()["data"]["content_html"]

    def test_draft_slug_is_404(self, client, db, admin):
        _post(db, admin, "Secret", status="DRAFT")
        response = client.get("/api/public/blogs/secret")
        assert response.status_code == 404
        assert response.json() == {"error": "Blog not found"}

    def test_unknown_slug_is_404(self, client):
        assert client.get("/api/public/blogs/nope").status_code == 404


class TestPublicTestimonials:
    def test_only_approved(self, client, db):
        _testimonial(db, "Approved")
        _testimonial(db, "Pending", approved=False)

        body = client.get("/api/public/testimonials").json()

        assert body["success"] is True
        assert body["count"] == 1
        assert body["data"][0]["name"] == "Approved"
        assert "approved" not in body["data"][0]
        assert "author" not in body["data"][0]

    def test_featured_limit(self, client, db):
        for n in range(4):
            _testimonial(db, f"Featured {n}", featured=True)
        _testimonial(db, "Regular")

        body = client.get("/api/public/testimonials", params={"featured": "true", "limit": "2"}).json()
        assert body["count"] == 2
        assert all(item["featured"] for item in body["data"])

    def test_junk_limit_uses_default(self, client, db):
        for n in range(8):
            _testimonial(db, f"Featured {n}", featured=True)
        body = client.get("/api/public/testimonials", params={"featured": "true", "limit": "lots"}).json()
        assert body["count"] == 6


class TestFeedAndSeo:
    def test_rss_feed(self, client, db, admin):
        _post(db, admin, "Budget 2026 <Highlights>", excerpt="What changed")
        _post(db, admin, "Unpublished", status="DRAFT")

        response = client.get("/blog/feed.xml")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/rss+xml")
        assert "<![CDATA[Budget 2026 <Highlights>]]>" in response.text
        assert "https://taxclusive.com/blogs/budget-2026-highlights" in response.text
        assert "Unpublished" not in response.text

    def test_sitemap_lists_pages_and_posts(self, client, db, admin):
        _post(db, admin, "Audit Guide")
        _post(db, admin, "Hidden", status="DRAFT")

        response = client.get("/sitemap.xml")

        assert response.status_code == 200
        assert "<loc>https://taxclusive.com/</loc>" in response.text
        assert "<loc>https://taxclusive.com/blogs/audit-guide</loc>" in response.text
        assert "/blogs/hidden" not in response.text

    def test_robots_disallows_private_paths(self, client):
        response = client.get("/robots.txt")
        assert "Disallow: /admin/" in response.text
        assert "Disallow: /api/" in response.text
        assert "Sitemap: https://taxclusive.com/sitemap.xml" in response.text

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}

    def test_security_headers(self, client):
        response = client.get("/robots.txt")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "https://www.google.com" in response.headers["Content-Security-Policy"]
        assert response.headers["Cache-Control"] == "public, max-age=86400"

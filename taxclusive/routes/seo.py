"""
SEO routes for the Taxclusive site.
Handles sitemap.xml and robots.txt.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from taxclusive import config
from taxclusive.db.database import get_db
from taxclusive.services import posts as posts_service

router = APIRouter(tags=["seo"])

# Public pages with their priorities and change frequencies
STATIC_PAGES = [
    {"loc": "/", "priority": "1.0", "changefreq": "weekly"},
    {"loc": "/about", "priority": "0.8", "changefreq": "monthly"},
    {"loc": "/services", "priority": "0.9", "changefreq": "monthly"},
    {"loc": "/blogs", "priority": "0.9", "changefreq": "daily"},
    {"loc": "/contact", "priority": "0.7", "changefreq": "yearly"},
    {"loc": "/appointment", "priority": "0.7", "changefreq": "yearly"},
    {"loc": "/faq", "priority": "0.5", "changefreq": "monthly"},
]


@router.get("/sitemap.xml")
async def sitemap(db: Session = Depends(get_db)):
    """
    Dynamic XML sitemap including all pages and published blog posts.
    """
    posts, _ = posts_service.get_published_posts(db)

    urls = []
    lastmod = datetime.now().strftime("%Y-%m-%d")
    for page in STATIC_PAGES:
        urls.append(f"""
    <url>
        <loc>{config.SITE_URL}{page['loc']}</loc>
        <lastmod>{lastmod}</lastmod>
        <changefreq>{page['changefreq']}</changefreq>
        <priority>{page['priority']}</priority>
    </url>""")

    for post in posts:
        urls.append(f"""
    <url>
        <loc>{config.SITE_URL}/blogs/{post.slug}</loc>
        <lastmod>{post.updated_at.strftime("%Y-%m-%d")}</lastmod>
        <changefreq>monthly</changefreq>
        <priority>0.7</priority>
    </url>""")

    sitemap_xml = f"""<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{"".join(urls)}
</urlset>"""

    response = Response(content=sitemap_xml.strip(), media_type="application/xml")
    response.headers["Cache-Control"] = "public, max-age=3600"
    return response


@router.get("/robots.txt")
async def robots():
    """
    Robots.txt file for search engine crawlers.
    """
    robots_txt = f"""# {config.SITE_NAME} robots.txt
# {config.SITE_URL}

User-agent: *
Allow: /

# Sitemap location
Sitemap: {config.SITE_URL}/sitemap.xml

# Disallow admin areas and APIs
Disallow: /admin/
Disallow: /api/
"""

    response = Response(content=robots_txt.strip(), media_type="text/plain")
    response.headers["Cache-Control"] = "public, max-age=86400"
    return response

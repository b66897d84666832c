"""
Public blog routes for the Taxclusive site.
"""

from typing import Optional
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from taxclusive import config
from taxclusive.db.database import get_db
from taxclusive.services import posts as posts_service

router = APIRouter(tags=["blog"])

FEATURED_DEFAULT_LIMIT = 3
FEED_SIZE = 20


@router.get("/api/public/blogs")
async def public_blogs(
    featured: bool = False,
    limit: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Published posts, featured first."""
    if featured:
        limit = limit if limit and limit > 0 else FEATURED_DEFAULT_LIMIT
    elif limit is not None and limit < 1:
        limit = None

    posts, _ = posts_service.get_published_posts(db, featured_only=featured, limit=limit)
    blogs = [posts_service.public_post_dict(post) for post in posts]

    response = JSONResponse({
        "success": True,
        "data": blogs,
        "message": f"Successfully fetched {len(blogs)} blogs",
    })
    response.headers["Cache-Control"] = "public, max-age=300"
    return response


@router.get("/api/public/blogs/{slug}")
async def public_blog(slug: str, db: Session = Depends(get_db)):
    """Single published post."""
    post = posts_service.get_published_post_by_slug(db, slug)
    if not post:
        raise HTTPException(status_code=404, detail="Blog not found")

    response = JSONResponse({"success": True, "data": posts_service.public_post_dict(post)})
    response.headers["Cache-Control"] = "public, max-age=300"
    return response


@router.get("/blog/feed.xml")
async def blog_rss_feed(db: Session = Depends(get_db)):
    """RSS 2.0 feed of published blog posts."""
    posts, _ = posts_service.get_published_posts(db, limit=FEED_SIZE)
    posts.sort(key=lambda post: post.published_at or post.created_at, reverse=True)

    items = []
    for post in posts:
        published = post.published_at or post.created_at
        pub_date = published.strftime("%a, %d %b %Y %H:%M:%S +0000")
        link = f"{config.SITE_URL}/blogs/{post.slug}"
        items.append(f"""
        <item>
            <title><![CDATA[{post.title}]]></title>
            <link>{escape(link)}</link>
            <guid isPermaLink="true">{escape(link)}</guid>
            <description><![CDATA[{post.excerpt or ''}]]></description>
            <pubDate>{pub_date}</pubDate>
        </item>""")

    rss = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
    <channel>
        <title>{escape(config.SITE_NAME)} Blog</title>
        <link>{config.SITE_URL}/blogs</link>
        <description>Tax, audit and financial insights from {escape(config.SITE_NAME)}.</description>
        <language>en-in</language>
        <atom:link href="{config.SITE_URL}/blog/feed.xml" rel="self" type="application/rss+xml"/>
        {"".join(items)}
    </channel>
</rss>"""

    response = Response(content=rss.strip(), media_type="application/rss+xml")
    response.headers["Cache-Control"] = "public, max-age=3600"
    return response

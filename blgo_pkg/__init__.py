"""
blgo - a small static blog generator.

blgo reads Markdown posts with YAML frontmatter, renders them through Jinja2
templates into per-post pages, an index page and an RSS feed, and can serve
the result while rebuilding on every change.
"""

__version__ = "1.0.0"

from .core import Blog, build_all
from .models import Index, Post

__all__ = ['Blog', 'build_all', 'Index', 'Post']

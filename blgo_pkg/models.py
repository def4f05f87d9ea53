"""
Post and Index: the data handed to the templates.
"""

import os
import posixpath
from datetime import date, datetime, timezone
from xml.sax.saxutils import escape

from .frontmatter import parse_frontmatter

POST_DIR = 'post'
SOURCE_EXT = '.md'
DESCRIPTION_BYTES = 200

XML_ENTITIES = {'"': '&#34;', "'": '&#39;'}


def xml_escape(text):
    """Escape text for use in XML character data and attribute values."""
    return escape(text, XML_ENTITIES)


def slug_for(filename):
    name = os.path.basename(filename)
    if name.endswith(SOURCE_EXT):
        name = name[:-len(SOURCE_EXT)]
    return name


def post_path(slug, ext=''):
    return posixpath.join(POST_DIR, slug + ext)


def output_filename(filename, ext):
    """Return the output path of ``filename`` relative to the output directory."""
    return post_path(slug_for(filename), ext)


def description_of(body):
    """First DESCRIPTION_BYTES bytes of the raw body, trimmed of blanks and newlines."""
    desc = body[:DESCRIPTION_BYTES].strip(b' \n\r')
    return desc.decode('utf-8', errors='replace')


class Post:
    """A single rendered blog post."""

    def __init__(self, index, slug, title, body, date=None, draft=False, short=False, description=''):
        self.index = index
        self.slug = slug
        self.title = title
        self.body = body
        self.date = date or datetime.min.date()
        self.draft = draft
        self.short = short
        self.description = description
        self.xml_title = xml_escape(title)
        self.xml_desc = xml_escape(description)
        self.output_filename = post_path(slug, '.html')
        self.relative_link = post_path(slug)
        self.link = index.url.rstrip('/') + '/' + self.relative_link
        self.guid = self.link

    @classmethod
    def from_source(cls, index, filename, data, render):
        """
        Build a post from the raw bytes of a source file.

        Args:
            index: The Index the post belongs to.
            filename: Path of the source file, used for the slug and errors.
            data: Raw file contents.
            render: Callable turning Markdown text into HTML.

        Returns:
            The Post. Drafts are returned too; callers decide to skip them.
        """
        frontmatter, body = parse_frontmatter(data, filename)
        title = frontmatter.get_str('title')
        draft = frontmatter.get_bool('draft')
        short = frontmatter.get_bool('short')
        post_date = frontmatter.get_date('date')
        html = render(body.decode('utf-8', errors='replace')) if not draft else ''
        return cls(
            index,
            slug_for(filename),
            title,
            html,
            date=post_date,
            draft=draft,
            short=short,
            description=description_of(body),
        )

    @property
    def has_date(self):
        return self.date != date.min

    def __repr__(self):
        return f"Post({self.slug!r}, date={self.date.isoformat()})"


class Index:
    """Site settings plus every published post of one build."""

    def __init__(self, title='', url='', xml_url='', updated_at=None):
        self.title = title
        self.url = url
        self.xml_url = xml_url
        self.updated_at = updated_at or datetime.now(timezone.utc)
        self.posts = []

    @classmethod
    def from_settings(cls, data, path=None):
        """Read the site title, URL and feed URL from a settings file's frontmatter."""
        frontmatter, _ = parse_frontmatter(data, path)
        return cls(
            title=frontmatter.get_str('title'),
            url=frontmatter.get_str('url'),
            xml_url=frontmatter.get_str('xmlurl'),
            updated_at=datetime.now(timezone.utc),
        )

    @property
    def xml_title(self):
        return xml_escape(self.title)

    def append(self, post):
        self.posts.append(post)

    def sort(self):
        """Order posts most recent first; equal dates keep their input order."""
        self.posts.sort(key=lambda post: post.date, reverse=True)

    def __len__(self):
        return len(self.posts)

    def __iter__(self):
        return iter(self.posts)

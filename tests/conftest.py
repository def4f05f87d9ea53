"""Test configuration and fixtures for blgo tests."""

import pytest
import tempfile
import shutil
from pathlib import Path

SETTINGS = """---
title: Test Blog
url: https://example.com/
xmlurl: https://example.com/index.xml
---
"""

POST_TEMPLATE = """<html><head><title>{{ post.title }} - {{ index.title }}</title></head>
<body><h1>{{ post.title }}</h1>
<p class="date">{{ post.date | isodate }}</p>
{{ post.body }}</body></html>
"""

INDEX_TEMPLATE = """<html><head><title>{{ index.title }}</title></head>
<body><ul>
{% for post in posts %}<li><a href="/{{ post.relative_link }}">{{ post.title }}</a> {{ post.date | isodate }}</li>
{% endfor %}</ul></body></html>
"""

FEED_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel>
<title>{{ index.xml_title }}</title>
<link>{{ index.url }}</link>
<lastBuildDate>{{ index.updated_at | rfc822 }}</lastBuildDate>
{% for post in posts %}<item><title>{{ post.xml_title }}</title><link>{{ post.link }}</link><description>{{ post.xml_desc }}</description><pubDate>{{ post.date | rfc822 }}</pubDate></item>
{% endfor %}</channel></rss>
"""


def write_post(directory, name, title=None, date=None, draft=None, body="Some content.\n"):
    """Write a source post with the given frontmatter fields."""
    lines = ['---']
    if title is not None:
        lines.append(f'title: {title}')
    if date is not None:
        lines.append(f'date: {date}')
    if draft is not None:
        lines.append(f'draft: {"true" if draft else "false"}')
    lines.append('---')
    path = Path(directory) / name
    path.write_text('\n'.join(lines) + '\n' + body, encoding='utf-8')
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def source_dir(temp_dir):
    """Create a source directory with settings, two posts and a draft."""
    src = Path(temp_dir) / 'src'
    src.mkdir()
    (src / '_index.md').write_text(SETTINGS, encoding='utf-8')
    write_post(src, 'first.md', title='First post', date='2020-01-01',
               body="# Hello\n\nThe *first* post.\n")
    write_post(src, 'second.md', title='Second post', date='2021-06-15',
               body="Second post with `code`.\n")
    write_post(src, 'secret.md', title='Secret', date='2022-01-01', draft=True)
    return str(src)


@pytest.fixture
def templates_dir(temp_dir):
    """Create a templates directory with the three blog templates."""
    templates = Path(temp_dir) / 'templates'
    templates.mkdir()
    (templates / 'post.tmpl.html').write_text(POST_TEMPLATE, encoding='utf-8')
    (templates / 'index.tmpl.html').write_text(INDEX_TEMPLATE, encoding='utf-8')
    (templates / 'index.tmpl.xml').write_text(FEED_TEMPLATE, encoding='utf-8')
    return str(templates)


@pytest.fixture
def output_dir(temp_dir):
    """Create an output directory."""
    output = Path(temp_dir) / 'generated'
    output.mkdir()
    return str(output)

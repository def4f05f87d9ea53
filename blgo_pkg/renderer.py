"""
Markdown to HTML rendering for blgo posts.
"""

import re
from typing import Callable, NamedTuple, Tuple

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

TAG_RE = re.compile(r'<[^>]+>')
HEADER_ID_RE = re.compile(r'[^\w\- ]+', re.UNICODE)

FRACTIONS = {'1/4': '\u00bc', '1/2': '\u00bd', '3/4': '\u00be'}
FRACTION_RE = re.compile(r'(?<![\w/])(1/4|1/2|3/4)(?![\w/])')
OPEN_DOUBLE_RE = re.compile(r'(^|[\s(\[{\u2014\u2013])"')
OPEN_SINGLE_RE = re.compile(r"(^|[\s(\[{\u2014\u2013])'(?=\S)")


class RendererConfig(NamedTuple):
    """Options fixed once per process and handed to create_markdown_parser."""

    highlight: bool = True
    smart_typography: bool = True
    header_ids: bool = True
    plugins: Tuple[str, ...] = ('table', 'url', 'strikethrough', 'def_list')


def smarten(text):
    """Replace straight punctuation with typographic glyphs."""
    text = text.replace('---', '\u2014').replace('--', '\u2013')
    text = text.replace('...', '\u2026')
    text = FRACTION_RE.sub(lambda m: FRACTIONS[m.group(1)], text)
    text = OPEN_DOUBLE_RE.sub('\\1\u201c', text)
    text = text.replace('"', '\u201d')
    text = OPEN_SINGLE_RE.sub('\\1\u2018', text)
    return text.replace("'", '\u2019')


def header_id(text):
    """Derive an anchor id from rendered heading HTML."""
    plain = TAG_RE.sub('', text)
    plain = HEADER_ID_RE.sub('', plain).strip().lower()
    return re.sub(r'[\s\-]+', '-', plain) or 'section'


class BlogRenderer(mistune.HTMLRenderer):
    """HTML renderer with per-language handling of fenced code blocks."""

    def __init__(self, config: RendererConfig):
        super().__init__(escape=False)
        self.config = config
        self.formatter = HtmlFormatter(nowrap=True)
        self._seen_ids = {}

    def reset(self):
        self._seen_ids = {}

    def text(self, text):
        if self.config.smart_typography:
            text = smarten(text)
        return super().text(text)

    def heading(self, text, level, **attrs):
        if self.config.header_ids and not attrs.get('id'):
            anchor = header_id(text)
            count = self._seen_ids.get(anchor, 0)
            self._seen_ids[anchor] = count + 1
            attrs['id'] = f"{anchor}-{count}" if count else anchor
        return super().heading(text, level, **attrs)

    def block_code(self, code, info=None):
        lang = info.strip().split(None, 1)[0] if info and info.strip() else ''
        if lang == 'shell':
            return '<div class="shell">' + super().block_code(code, info) + '</div>\n'
        if lang == 'output':
            return '<div class="output">' + super().block_code(code, info) + '</div>\n'
        if lang and self.config.highlight:
            try:
                lexer = get_lexer_by_name(lang)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                return '<pre class="highlight">' + highlight(code, lexer, self.formatter) + '</pre>\n'
        return super().block_code(code, info)


def create_markdown_parser(config: RendererConfig = RendererConfig()) -> Callable[[str], str]:
    """Create a Mistune markdown parser configured by ``config``."""
    renderer = BlogRenderer(config)
    markdown = mistune.create_markdown(renderer=renderer, plugins=list(config.plugins))

    def render(text: str) -> str:
        renderer.reset()
        return markdown(text)

    return render

import logging
import os
import time
from datetime import date, datetime, timezone
from email.utils import format_datetime
from importlib import resources

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from .errors import BuildIOError, RenderError
from .models import SOURCE_EXT, Index, Post
from .renderer import RendererConfig, create_markdown_parser

SETTINGS_FILENAME = '_index.md'
POST_TEMPLATE = 'post.tmpl.html'
INDEX_TEMPLATE = 'index.tmpl.html'
FEED_TEMPLATE = 'index.tmpl.xml'
TEMPLATE_NAMES = (POST_TEMPLATE, INDEX_TEMPLATE, FEED_TEMPLATE)

logger = logging.getLogger('blgo.build')


def setup_logging(verbose=False, log_dir=None):
    """Set up logging configuration for the blgo logger hierarchy."""
    root = logging.getLogger('blgo')
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    if root.handlers:
        return root

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_filename = datetime.now().strftime('blgo_%Y-%m-%d_%H-%M-%S.log')
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        root.addHandler(file_handler)

    return root


def package_templates_dir():
    """Directory of the templates shipped inside the package."""
    return str(resources.files('blgo_pkg') / 'templates')


def rfc822(value):
    """Format a date or datetime for RSS pubDate/lastBuildDate elements."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def isodate(value):
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def list_source_files(source_dir):
    """List files with the Markdown extension in ``source_dir``, sorted by name, dotfiles included."""
    markdown_files = []
    if os.path.isdir(source_dir):
        for file in sorted(os.listdir(source_dir)):
            if file.endswith(SOURCE_EXT):
                markdown_files.append(os.path.join(source_dir, file))
    return markdown_files


def read_source(path):
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise BuildIOError(f"could not read file: {e.strerror or e}", path) from e


def write_output(path, text):
    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
    except OSError as e:
        raise BuildIOError(f"could not write file: {e.strerror or e}", path) from e


class Blog:
    """Builds the whole blog from a source directory and a set of templates."""

    def __init__(self, source_dir='src', templates_dir='templates', output_dir='generated',
                 source_files=None, renderer_config=None):
        self.source_dir = source_dir
        self.templates_dir = templates_dir
        self.output_dir = output_dir
        self.source_files = list(source_files) if source_files else None
        self.renderer_config = renderer_config or RendererConfig()
        self.markdown_parser = create_markdown_parser(self.renderer_config)
        self.posts_generated = 0
        self.drafts_skipped = 0

    @property
    def settings_path(self):
        return os.path.join(self.source_dir, SETTINGS_FILENAME)

    def template_paths(self):
        return [os.path.join(self.templates_dir, name) for name in TEMPLATE_NAMES]

    def source_paths(self):
        """Source posts to build, excluding the settings file."""
        files = self.source_files if self.source_files is not None else list_source_files(self.source_dir)
        return [f for f in files if os.path.basename(f) != SETTINGS_FILENAME]

    def markdown_filter(self, text):
        """Convert markdown text to HTML."""
        return self.markdown_parser(text)

    def create_environment(self):
        env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        env.filters['rfc822'] = rfc822
        env.filters['isodate'] = isodate
        return env

    def load_templates(self):
        """Load the post, index and feed templates; any failure aborts the build."""
        env = self.create_environment()
        templates = {}
        for name in TEMPLATE_NAMES:
            try:
                templates[name] = env.get_template(name)
            except TemplateNotFound as e:
                raise RenderError(f"template not found: {e.name}", self.templates_dir) from e
            except TemplateError as e:
                raise RenderError(f"could not parse template {name}: {e}", self.templates_dir) from e
            except Exception as e:
                raise RenderError(f"could not load template {name}: {e}", self.templates_dir) from e
        return templates

    def read_index(self):
        path = self.settings_path
        return Index.from_settings(read_source(path), path)

    def render_to(self, template, relative_path, **context):
        """Execute ``template`` and write the result under the output directory."""
        output_path = os.path.join(self.output_dir, *relative_path.split('/'))
        try:
            rendered = template.render(**context)
        except TemplateError as e:
            raise RenderError(f"template {template.name} failed: {e}", output_path) from e
        except Exception as e:
            # errors raised by template code itself, e.g. {{ title + 1 }}
            raise RenderError(f"template {template.name} failed: {type(e).__name__}: {e}", output_path) from e
        write_output(output_path, rendered)
        logger.debug(f"Generated {output_path}")
        return output_path

    def build_post(self, index, filename, template):
        """Read, render and write one source file. Returns None for drafts."""
        logger.info(f"Processing {filename}")
        post = Post.from_source(index, filename, read_source(filename), self.markdown_filter)
        if post.draft:
            logger.info(f"Skipping draft {filename}")
            self.drafts_skipped += 1
            return None
        index.append(post)
        self.render_to(template, post.output_filename, post=post, index=index)
        self.posts_generated += 1
        return post

    def build_all(self):
        """
        Build every post, then the index page and the feed.

        Returns:
            The sorted Index of the build.

        Raises:
            BlgoError: on the first error; files written so far are left in place.
        """
        start_time = time.time()
        self.posts_generated = 0
        self.drafts_skipped = 0

        templates = self.load_templates()
        index = self.read_index()

        try:
            os.makedirs(os.path.join(self.output_dir, 'post'), exist_ok=True)
        except OSError as e:
            raise BuildIOError(f"could not create directory: {e.strerror or e}", self.output_dir) from e

        for filename in self.source_paths():
            self.build_post(index, filename, templates[POST_TEMPLATE])

        index.sort()
        self.render_to(templates[INDEX_TEMPLATE], 'index.html', index=index, posts=index.posts)
        self.render_to(templates[FEED_TEMPLATE], 'index.xml', index=index, posts=index.posts)

        logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
        logger.info(f"Total posts generated: {self.posts_generated} ({self.drafts_skipped} drafts skipped)")
        return index


def build_all(templates_dir, output_dir, source_dir):
    """Build the blog in ``source_dir`` with the templates in ``templates_dir``."""
    return Blog(source_dir=source_dir, templates_dir=templates_dir, output_dir=output_dir).build_all()

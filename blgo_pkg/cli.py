#!/usr/bin/env python3
"""
Command-line interface for blgo - static blog generator.
"""

import os
import sys
import argparse
import logging
import shutil
import time
from typing import List, Optional, Tuple

from . import __version__
from .core import Blog, TEMPLATE_NAMES, package_templates_dir, setup_logging
from .errors import BlgoError, ConfigError
from .renderer import RendererConfig
from .server import serve
from .settings import BlgoSettings
from .watcher import Watcher

logger = logging.getLogger('blgo')

DEFAULT_TEMPLATES = BlgoSettings.DEFAULT_SETTINGS['templates']

SAMPLE_INDEX = """---
title: My Blog
url: http://localhost:8080/
xmlurl: http://localhost:8080/index.xml
---
"""

SAMPLE_POST = """---
title: Hello, world
date: 2024-01-01
draft: false
---
This is your first post. Edit `src/hello-world.md` and run `blgo --watch --serve localhost:8080`
to see changes as you save them.

```python
print("highlighted with Pygments")
```

```shell
$ blgo src
```

```output
Site build completed in 0.01 seconds.
```
"""


def create_starter_structure(base_dir: str) -> None:
    """Create the starter templates and sample sources in ``base_dir``."""
    template_dest = os.path.join(base_dir, 'templates')
    source_dest = os.path.join(base_dir, 'src')

    for directory in (template_dest, source_dest):
        if os.path.exists(directory):
            print(f"Directory already exists: {os.path.relpath(directory, base_dir)}")
        else:
            os.makedirs(directory)
            print(f"Created directory: {os.path.relpath(directory, base_dir)}")

    for name in TEMPLATE_NAMES:
        dest_path = os.path.join(template_dest, name)
        if os.path.exists(dest_path):
            print(f"Template already exists: templates/{name}")
        else:
            shutil.copy2(os.path.join(package_templates_dir(), name), dest_path)
            print(f"Created template: templates/{name}")

    for name, content in (('_index.md', SAMPLE_INDEX), ('hello-world.md', SAMPLE_POST)):
        dest_path = os.path.join(source_dest, name)
        if os.path.exists(dest_path):
            print(f"Source already exists: src/{name}")
        else:
            with open(dest_path, 'w', encoding='utf-8') as f:
                f.write(content)
            print(f"Created source: src/{name}")


def resolve_sources(paths: List[str]) -> Tuple[str, Optional[List[str]]]:
    """
    Turn the positional arguments into a source directory and, when single
    files were named, the list of files to build.
    """
    if len(paths) == 1 and os.path.isdir(paths[0]):
        return paths[0], None

    for path in paths:
        if not os.path.isfile(path):
            raise ConfigError("source path doesn't exist or is not a directory or file", path)
        if not path.endswith('.md'):
            raise ConfigError("source files must have the .md extension", path)

    directories = {os.path.dirname(os.path.abspath(path)) for path in paths}
    if len(directories) > 1:
        raise ConfigError("source files must all live in the same directory")
    return os.path.dirname(paths[0]) or '.', list(paths)


def prepare_output(output_dir: str, assets_dir: Optional[str]) -> Tuple[str, str]:
    """Create the output tree; returns the output and assets directories."""
    output_dir = os.path.expanduser(output_dir)
    for path in (output_dir, os.path.join(output_dir, 'post')):
        if os.path.exists(path) and not os.path.isdir(path):
            raise ConfigError("specified output path exists and is not a directory", path)
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"couldn't be created: {e.strerror or e}", path) from e

    if assets_dir:
        assets_dir = os.path.expanduser(assets_dir)
        if not os.path.isdir(assets_dir):
            raise ConfigError("specified path for assets doesn't exist or is not a directory", assets_dir)
        return output_dir, assets_dir

    assets_dir = os.path.join(output_dir, 'assets')
    try:
        os.makedirs(assets_dir, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"couldn't be created: {e.strerror or e}", assets_dir) from e
    return output_dir, assets_dir


def resolve_templates(templates_dir: str) -> str:
    if os.path.isdir(templates_dir):
        return templates_dir
    if templates_dir == DEFAULT_TEMPLATES:
        logger.info("No templates directory, using the bundled templates")
        return package_templates_dir()
    raise ConfigError("templates directory doesn't exist", templates_dir)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='blgo',
        description='blgo - static blog generator',
    )
    parser.add_argument('sources', nargs='*', metavar='SOURCE',
                        help='Source directory, or individual .md files to build')
    parser.add_argument('--watch', action='store_true', default=None,
                        help='Rebuild when sources or templates change')
    parser.add_argument('--serve', type=str, metavar='ADDR',
                        help='Listening address for serving the blog, e.g. localhost:8080')
    parser.add_argument('--output', type=str,
                        help='Output directory for the generated blog')
    parser.add_argument('--assets', type=str,
                        help='Assets directory served under /assets/')
    parser.add_argument('--templates', type=str,
                        help='Templates directory')
    parser.add_argument('--verbose', action='store_true',
                        help='Log every generated file')
    parser.add_argument('--init', action='store_true',
                        help='Create a sample configuration, templates and sources')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.init:
        try:
            settings_loader = BlgoSettings()
            config_path = settings_loader.create_sample_config()
            print(f"Created sample configuration file: {config_path}")
            create_starter_structure(settings_loader.config_dir)
        except (BlgoError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print("\nRun 'blgo --watch --serve localhost:8080' to build and preview your blog.")
        return

    try:
        settings_loader = BlgoSettings()
        settings_loader.load_settings()
        args_dict = {
            'output': args.output,
            'templates': args.templates,
            'assets': args.assets,
            'serve': args.serve,
            'watch': args.watch,
        }
        final_settings = settings_loader.merge_with_args(args_dict)

        setup_logging(verbose=args.verbose, log_dir=final_settings['log_dir'])

        source_dir, source_files = resolve_sources(args.sources or [final_settings['source']])
        output_dir, assets_dir = prepare_output(final_settings['output'], final_settings['assets'])
        blog = Blog(
            source_dir=source_dir,
            templates_dir=resolve_templates(final_settings['templates']),
            output_dir=output_dir,
            source_files=source_files,
            renderer_config=RendererConfig(highlight=bool(final_settings['highlight'])),
        )
    except BlgoError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(e.code)

    watch = bool(final_settings['watch'])
    try:
        blog.build_all()
    except BlgoError as e:
        logger.error(f"Build failed: {e}")
        if not watch:
            sys.exit(e.code)

    watcher = None
    try:
        if watch:
            watcher = Watcher(blog)
            watcher.start()
        if final_settings['serve']:
            serve(final_settings['serve'], output_dir, assets_dir)
        elif watch:
            while True:
                time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping")
    except BlgoError as e:
        logger.error(f"Error: {e}")
        sys.exit(e.code)
    finally:
        if watcher is not None:
            watcher.stop()


if __name__ == '__main__':
    main()

"""Tests for the command-line interface."""

import os
import pytest
from pathlib import Path

from blgo_pkg import cli
from blgo_pkg.errors import ConfigError

from conftest import write_post


class TestMain:

    def test_one_shot_build(self, temp_dir, source_dir, templates_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        cli.main([source_dir, '--templates', templates_dir, '--output', 'out'])

        assert Path(temp_dir, 'out', 'index.html').exists()
        assert Path(temp_dir, 'out', 'index.xml').exists()
        assert Path(temp_dir, 'out', 'post', 'first.html').exists()
        assert Path(temp_dir, 'out', 'assets').is_dir()

    def test_build_error_exits_non_zero(self, temp_dir, source_dir, templates_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        write_post(source_dir, 'untitled.md', date='2020-01-01')

        with pytest.raises(SystemExit) as excinfo:
            cli.main([source_dir, '--templates', templates_dir])
        assert excinfo.value.code == 1

    def test_template_runtime_error_exits_non_zero(self, temp_dir, source_dir, templates_dir,
                                                   monkeypatch, caplog):
        monkeypatch.chdir(temp_dir)
        Path(templates_dir, 'index.tmpl.html').write_text("{{ index.title + 1 }}", encoding='utf-8')

        with pytest.raises(SystemExit) as excinfo:
            cli.main([source_dir, '--templates', templates_dir])
        assert excinfo.value.code == 1
        assert 'Build failed' in caplog.text

    def test_bad_assets_directory_exits(self, temp_dir, source_dir, templates_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        with pytest.raises(SystemExit) as excinfo:
            cli.main([source_dir, '--templates', templates_dir, '--assets', 'missing-assets'])
        assert excinfo.value.code == 1
        assert 'missing-assets' in capsys.readouterr().err

    def test_single_file_source(self, temp_dir, source_dir, templates_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        cli.main([os.path.join(source_dir, 'second.md'), '--templates', templates_dir])

        assert Path(temp_dir, 'generated', 'post', 'second.html').exists()
        assert not Path(temp_dir, 'generated', 'post', 'first.html').exists()

    def test_settings_file_supplies_defaults(self, temp_dir, source_dir, templates_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        Path(temp_dir, 'blgo.yml').write_text(
            f"source: {source_dir}\ntemplates: {templates_dir}\noutput: site\n", encoding='utf-8')
        cli.main([])

        assert Path(temp_dir, 'site', 'index.html').exists()

    def test_init_then_build(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        cli.main(['--init'])

        assert Path(temp_dir, 'blgo.yml').exists()
        assert Path(temp_dir, 'templates', 'post.tmpl.html').exists()
        assert Path(temp_dir, 'src', '_index.md').exists()

        cli.main([])

        post = Path(temp_dir, 'generated', 'post', 'hello-world.html').read_text(encoding='utf-8')
        assert '<div class="shell">' in post
        assert '<pre class="highlight">' in post
        assert Path(temp_dir, 'generated', 'index.xml').read_text(encoding='utf-8').startswith('<?xml')

    def test_bundled_templates_when_directory_missing(self, temp_dir, source_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        cli.main([source_dir])
        assert 'Test Blog' in Path(temp_dir, 'generated', 'index.html').read_text(encoding='utf-8')


class TestHelpers:

    def test_resolve_sources_directory(self, source_dir):
        assert cli.resolve_sources([source_dir]) == (source_dir, None)

    def test_resolve_sources_files(self, source_dir):
        files = [os.path.join(source_dir, 'first.md'), os.path.join(source_dir, 'second.md')]
        assert cli.resolve_sources(files) == (source_dir, files)

    def test_resolve_sources_missing(self, temp_dir):
        with pytest.raises(ConfigError):
            cli.resolve_sources([os.path.join(temp_dir, 'nope')])

    def test_resolve_sources_not_markdown(self, temp_dir):
        path = Path(temp_dir, 'notes.txt')
        path.write_text('x')
        with pytest.raises(ConfigError, match=".md"):
            cli.resolve_sources([str(path)])

    def test_prepare_output_creates_tree(self, temp_dir):
        output, assets = cli.prepare_output(os.path.join(temp_dir, 'out'), None)
        assert os.path.isdir(os.path.join(output, 'post'))
        assert assets == os.path.join(output, 'assets')
        assert os.path.isdir(assets)

    def test_prepare_output_is_a_file(self, temp_dir):
        path = Path(temp_dir, 'out')
        path.write_text('x')
        with pytest.raises(ConfigError):
            cli.prepare_output(str(path), None)

    def test_resolve_templates_explicit_missing(self, temp_dir):
        with pytest.raises(ConfigError):
            cli.resolve_templates(os.path.join(temp_dir, 'nope'))

"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

import asketch_capture.cli as cli
from asketch_capture.api import RunResult
from asketch_capture.config import CONFIG_FILENAME
from asketch_capture.errors import NavigationError
from asketch_capture.targets import FileTarget, ServedTarget, UrlTarget


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def captured(monkeypatch):
    """Replace the capture run and keep the configs it was given."""
    configs = []

    def fake_capture(config):
        configs.append(config)
        files = [config.out_dir / f"page-{v.key}.asketch.json" for v in config.viewports.values()]
        return RunResult(url="https://example.com", out_dir=config.out_dir, files=files,
                         viewports=list(config.viewports))

    monkeypatch.setattr(cli, 'capture', fake_capture)
    return configs


def test_url_capture(runner, captured, tmp_path):
    result = runner.invoke(cli.main, ['--url', 'https://example.com', '--out-dir', 'sketch'])

    assert result.exit_code == 0, result.output
    config = captured[0]
    assert config.target == UrlTarget('https://example.com')
    assert config.out_dir == tmp_path.resolve() / 'sketch'
    assert list(config.viewports) == ['Desktop']
    assert config.launch.wait_until == 'networkidle2'
    assert "Wrote 1 file" in result.output


def test_all_options(runner, captured, tmp_path):
    (tmp_path / 'public').mkdir()

    result = runner.invoke(cli.main, [
        '-s', 'public',
        '-u', '/styleguide.html',
        '-o', 'sketch',
        '-v', 'Desktop=1024x768',
        '-v', 'Mobile=320x568@2',
        '-d',
        '--symbol-middleware', 'middleware.js',
        '--puppeteer-args', '--no-sandbox --disable-setuid-sandbox',
        '--puppeteer-executable-path', '/usr/bin/chromium',
        '--puppeteer-user-data-dir', 'profile',
        '--puppeteer-wait-until', 'domcontentloaded',
        '--navigation-timeout', '12',
        '--extract-timeout', '3',
    ])

    assert result.exit_code == 0, result.output
    config = captured[0]
    assert config.target == ServedTarget('/styleguide.html')
    assert config.serve_dir == tmp_path.resolve() / 'public'
    assert list(config.viewports) == ['Desktop', 'Mobile']
    assert config.viewports['Mobile'].scale == 2.0
    assert config.debug is True
    assert config.launch.args == ('--no-sandbox', '--disable-setuid-sandbox')
    assert config.launch.wait_until == 'domcontentloaded'
    assert config.launch.navigation_timeout == 12
    assert config.extract_timeout == 3


def test_file_option(runner, captured, tmp_path):
    result = runner.invoke(cli.main, ['--file', 'index.html', '--out-dir', 'sketch'])

    assert result.exit_code == 0, result.output
    assert captured[0].target == FileTarget('index.html')


def test_out_dir_required(runner, captured):
    result = runner.invoke(cli.main, ['--url', 'https://example.com'])

    assert result.exit_code != 0
    assert captured == []


def test_invalid_wait_until(runner, captured):
    result = runner.invoke(cli.main, ['--url', 'https://example.com', '-o', 'sketch',
                                      '--puppeteer-wait-until', 'idle'])

    assert result.exit_code != 0
    assert captured == []


def test_no_target(runner, captured):
    """Test that a run with no url, file or serve exits with status 1."""
    result = runner.invoke(cli.main, ['--out-dir', 'sketch'])

    assert result.exit_code == 1
    assert "Nothing to capture" in result.output
    assert captured == []


def test_bad_viewport(runner, captured):
    result = runner.invoke(cli.main, ['--url', 'https://example.com', '-o', 'sketch', '-v', 'Desktop=big'])

    assert result.exit_code == 1
    assert "Invalid viewport" in result.output
    assert captured == []


def test_run_failure_exits_1(runner, monkeypatch):
    def failing_capture(config):
        raise NavigationError("Could not load https://example.com: net::ERR_NAME_NOT_RESOLVED")

    monkeypatch.setattr(cli, 'capture', failing_capture)

    result = runner.invoke(cli.main, ['--url', 'https://example.com', '--out-dir', 'sketch'])

    assert result.exit_code == 1
    assert "NavigationError" in result.output


def test_config_file_defaults(runner, captured, tmp_path):
    """Test that options are read from html-sketchapp.config.json."""
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps({
        "url": "https://example.com/styleguide",
        "outDir": "from-config",
        "viewports": {"Desktop": "1280x800", "Mobile": "375x667@2"},
        "puppeteerWaitUntil": "load",
    }))

    result = runner.invoke(cli.main, [])

    assert result.exit_code == 0, result.output
    config = captured[0]
    assert config.target == UrlTarget("https://example.com/styleguide")
    assert config.out_dir == tmp_path.resolve() / 'from-config'
    assert [v.key for v in config.viewports.values()] == ['1280x800', '375x667@2']
    assert config.launch.wait_until == 'load'


def test_command_line_overrides_config(runner, captured, tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"url": "https://example.com", "outDir": "a"}))

    result = runner.invoke(cli.main, ['--out-dir', 'b'])

    assert result.exit_code == 0, result.output
    assert captured[0].out_dir == tmp_path.resolve() / 'b'


def test_explicit_config_path(runner, captured, tmp_path):
    config_path = tmp_path / 'settings' / 'capture.json'
    config_path.parent.mkdir()
    config_path.write_text(json.dumps({"file": "page.html", "out-dir": "sketch"}))

    result = runner.invoke(cli.main, ['--config', str(config_path)])

    assert result.exit_code == 0, result.output
    assert captured[0].target == FileTarget('page.html')


def test_invalid_config_file(runner, captured, tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("not json")

    result = runner.invoke(cli.main, ['--url', 'https://example.com', '-o', 'sketch'])

    assert result.exit_code == 1
    assert "Could not read config file" in result.output
    assert captured == []


def test_viewports_long_option(runner, captured):
    result = runner.invoke(cli.main, ['--url', 'https://example.com', '-o', 'sketch',
                                      '--viewports', 'Desktop=1024x768', '--viewports', 'Mobile=320x568@2'])

    assert result.exit_code == 0, result.output
    assert [v.key for v in captured[0].viewports.values()] == ['1024x768', '320x568@2']


def test_bracketed_values_printed_verbatim(runner, captured):
    """Test that paths and names containing brackets are not read as console markup."""
    result = runner.invoke(cli.main, ['--file', 'pages/[id].html', '-o', 'sketch', '-v', '[wide]=1440x900'])

    assert result.exit_code == 0, result.output
    assert "pages/[id].html" in result.output
    assert "[wide] (1440x900)" in result.output

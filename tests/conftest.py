"""
Shared fixtures: a fake Pyppeteer browser and page.

The fakes record every call so tests can check ordering, and can be told
to fail at a given step.
"""

import pytest

import asketch_capture.api as api
import asketch_capture.session.browser as browser_module
from asketch_capture.server.static import StaticServer

LAYERS = '{"layers": []}'


class FakePage:
    """Stands in for pyppeteer.page.Page."""

    def __init__(self, documents=None, events=None):
        # viewport width -> document text; LAYERS when not listed
        self.documents = documents or {}
        self.events = events if events is not None else []
        self.viewport = None
        self.goto_error = None
        self.script_error = None
        self.evaluate_error = None
        self.console_handlers = []

    async def goto(self, url, options=None):
        self.events.append(('goto', url, options))
        if self.goto_error:
            raise self.goto_error

    async def addScriptTag(self, options):
        self.events.append(('addScriptTag', options['path']))
        if self.script_error:
            raise self.script_error

    async def setViewport(self, viewport):
        self.events.append(('setViewport', viewport['width'], viewport['height'], viewport['deviceScaleFactor']))
        self.viewport = viewport

    async def evaluate(self, expression, force_expr=False):
        self.events.append(('evaluate', expression))
        if self.evaluate_error:
            raise self.evaluate_error
        return self.documents.get(self.viewport['width'], LAYERS)

    async def bringToFront(self):
        self.events.append(('bringToFront',))

    def on(self, event, handler):
        if event == 'console':
            self.console_handlers.append(handler)


class FakeBrowser:
    """Stands in for pyppeteer.browser.Browser."""

    def __init__(self, page, events):
        self.page = page
        self.events = events
        self.closed = False
        self.close_error = None

    async def newPage(self):
        self.events.append(('newPage',))
        return self.page

    async def close(self):
        self.events.append(('browser.close',))
        if self.close_error:
            raise self.close_error
        self.closed = True


class FakeLauncher:
    """Replaces pyppeteer.launch and remembers what it was asked for."""

    def __init__(self, browser):
        self.browser = browser
        self.calls = []
        self.error = None

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        self.browser.events.append(('launch',))
        if self.error:
            raise self.error
        return self.browser


@pytest.fixture
def events():
    return []


@pytest.fixture
def fake_page(events):
    return FakePage(events=events)


@pytest.fixture
def fake_browser(fake_page, events):
    return FakeBrowser(fake_page, events)


@pytest.fixture
def fake_launch(monkeypatch, fake_browser):
    launcher = FakeLauncher(fake_browser)
    monkeypatch.setattr(browser_module, 'launch', launcher)
    return launcher


@pytest.fixture
def servers(monkeypatch, events):
    """Track static servers started by the run."""
    started = []

    class RecordingServer(StaticServer):
        async def start(self):
            started.append(self)
            result = await super().start()
            events.append(('server.start', self.port))
            return result

        async def stop(self):
            was_running = self.running
            await super().stop()
            if was_running:
                events.append(('server.stop',))

    monkeypatch.setattr(api, 'StaticServer', RecordingServer)
    return started


@pytest.fixture
def extractor_script(tmp_path):
    path = tmp_path / 'page2layers.bundle.js'
    path.write_text('window.page2layers = {run: function () { return {layers: []}; }};')
    return path


@pytest.fixture
def site_dir(tmp_path):
    site = tmp_path / 'public'
    site.mkdir()
    (site / 'index.html').write_text('<html><body><h1>Styleguide</h1></body></html>')
    (site / 'docs').mkdir()
    (site / 'docs' / 'index.html').write_text('<html><body>Docs</body></html>')
    (site / 'app.css').write_text('h1 { color: red; }')
    return site

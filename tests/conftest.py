"""
Shared pytest fixtures for the Project Status Dashboard test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context + table reset (autouse)
    - timers: Manual timer factory standing in for threading.Timer
    - sync: Fresh report synchronizer per test, driven by ``timers`` (autouse)
    - client: Flask test client (function-scoped)
    - make_gateway: FakeGateway factory (in-memory, records every write)
    - make_sync: ReportSynchronizer factory over a FakeGateway + ``timers``
"""

from datetime import date, datetime, timezone

import pytest

from app import create_app
from app.integrations.sheets_gateway import GatewayResult
from app.models import db as _db
from app.services.report_sync import init_report_sync

FIXED_TODAY = date(2025, 3, 14)
FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


# ── Timer doubles ────────────────────────────────────────────────────────


class ManualTimer:
    """threading.Timer stand-in that only fires when a test calls fire()."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback, as the timer thread would (even if cancelled)."""
        self.fired = True
        self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    """Callable with the threading.Timer signature; keeps every timer it made."""

    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_pending(self) -> int:
        """Fire every live timer; returns how many fired."""
        live = self.live
        for timer in live:
            timer.fire()
        return len(live)


# ── Gateway double ───────────────────────────────────────────────────────


class FakeGateway:
    """In-memory gateway: ``stored`` is what read() returns, ``writes`` records write()."""

    def __init__(self, stored=None, *, read_ok=True, write_ok=True, read_exc=None, write_exc=None):
        self.stored = stored if stored is not None else {}
        self.read_ok = read_ok
        self.write_ok = write_ok
        self.read_exc = read_exc
        self.write_exc = write_exc
        self.reads = 0
        self.writes: list[dict] = []

    def read(self):
        self.reads += 1
        if self.read_exc:
            raise self.read_exc
        if not self.read_ok:
            return GatewayResult(ok=False, status_code=500, data=None, error="boom", duration_ms=1)
        return GatewayResult(ok=True, status_code=200, data=dict(self.stored), error=None, duration_ms=1)

    def write(self, document):
        if self.write_exc:
            raise self.write_exc
        self.writes.append(document)
        if not self.write_ok:
            return GatewayResult(ok=False, status_code=500, data=None, error="HTTP 500: quota", duration_ms=1)
        return GatewayResult(ok=True, status_code=200, data={"success": True}, error=None, duration_ms=1)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def timers():
    return ManualTimerFactory()


@pytest.fixture(autouse=True)
def sync(app, timers):
    """Install a fresh synchronizer (local gateway, manual timers) for each test."""
    synchronizer = init_report_sync(
        app,
        timer_factory=timers,
        clock=lambda: FIXED_NOW,
        today=FIXED_TODAY,
    )
    yield synchronizer
    synchronizer.cancel_pending()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def make_gateway():
    """Factory for FakeGateway doubles."""
    return FakeGateway


@pytest.fixture()
def make_sync(timers):
    """Factory: ReportSynchronizer over a FakeGateway, driven by manual timers."""
    from app.services.report_sync import ReportSynchronizer

    def _make(gateway=None, **kwargs):
        options = {
            "timer_factory": timers,
            "clock": lambda: FIXED_NOW,
            "today": FIXED_TODAY,
        }
        options.update(kwargs)
        return ReportSynchronizer(gateway if gateway is not None else FakeGateway(), **options)

    return _make

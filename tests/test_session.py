from __future__ import annotations

import threading
import time

from ddiscan.config import ScanConfig
from ddiscan.core.connection import ConnectionState
from ddiscan.core.models import Batch, Device, Point
from ddiscan.core.wiring import build_session
from ddiscan.headless import LoggingSink

from fakes import FakeLink, FakeProvider


class ScriptedProvider(FakeProvider):
    def __init__(self, steps) -> None:
        super().__init__([Device("/dev/ttyACM0")])
        self._script = list(steps)

    def open(self, device: Device) -> FakeLink:
        link = FakeLink(self._script)
        self.opened.append(link)
        return link


def test_session_streams_batches_until_the_link_faults() -> None:
    provider = ScriptedProvider([b"100,2000\n20", b"0,4000\n", b"garbage\n"])
    wake = threading.Event()
    handles = build_session(ScanConfig(batch_size=4), provider, wakeup=wake.set)
    manager, channel = handles.manager, handles.channel
    seen = []
    manager.add_listener(lambda state, status: seen.append(state))

    manager.discover()
    manager.process_events()

    deadline = time.monotonic() + 2.0
    while manager.state is not ConnectionState.DISCONNECTED and time.monotonic() < deadline:
        wake.wait(0.05)
        wake.clear()
        manager.process_events()

    assert ConnectionState.CONNECTED in seen
    assert ConnectionState.FAULTED in seen
    assert manager.state is ConnectionState.DISCONNECTED
    assert provider.opened[0].closed

    (batch,) = channel.drain()
    assert batch.points == (
        Point(343.0, 0.0),
        Point(343.0, 100.0),
        Point(686.0, 0.0),
        Point(686.0, 200.0),
    )


def test_logging_sink_summarises_batches(caplog) -> None:
    sink = LoggingSink()
    sink.set_range(1500.0, 300.0)
    batch = Batch(
        points=(Point(100.0, 0.0), Point(100.0, 5.0), Point(200.0, 0.0), Point(200.0, 9.0)),
        sequence=3,
    )
    with caplog.at_level("INFO", logger="ddiscan.headless"):
        sink.render(batch)
        sink.render(Batch(points=()))

    assert sink.rendered == 2
    assert (sink.x_max, sink.y_max) == (1500.0, 300.0)
    assert "batch #3: 4 points" in caplog.text
    assert "peak 9.0 at 200.0 mm" in caplog.text

import pathlib
import sys
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ddiscan.core.connection import (  # noqa: E402
    ConnectionManager,
    ConnectionState,
    DeviceDetached,
    DisconnectRequested,
    ReadFault,
)
from ddiscan.core.errors import LinkFault, OpenFailure  # noqa: E402
from ddiscan.core.models import Device, PermissionStatus  # noqa: E402

from fakes import FakePresence, FakeProvider, ReaderFactorySpy  # noqa: E402

SENSOR = Device("/dev/ttyACM0", "USB serial")


class ConnectionManagerTest(unittest.TestCase):
    def _manager(self, provider: FakeProvider) -> ConnectionManager:
        self.readers = ReaderFactorySpy()
        self.presence = FakePresence()
        self.transitions = []
        self.wakeups = 0

        def _wake() -> None:
            self.wakeups += 1

        manager = ConnectionManager(provider, self.readers, presence=self.presence, wakeup=_wake)
        manager.add_listener(lambda state, status: self.transitions.append((state, status)))
        return manager

    def _connected(self) -> tuple:
        provider = FakeProvider([SENSOR])
        manager = self._manager(provider)
        manager.discover()
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.CONNECTED)
        return manager, provider

    # ------------------------------------------------------------ discovery
    def test_no_device_keeps_disconnected(self):
        manager = self._manager(FakeProvider([]))
        state = manager.discover()
        self.assertIs(state, ConnectionState.DISCONNECTED)
        self.assertEqual(manager.status, "No device")
        self.assertEqual(self.presence.watched, [])

    def test_permitted_device_connects(self):
        manager, provider = self._connected()
        self.assertEqual(manager.status, "Connected")
        self.assertEqual(len(self.readers.readers), 1)
        self.assertIs(manager.slot.get(), provider.opened[0])
        self.assertEqual(manager.session, 1)
        self.assertEqual(self.presence.watched, [SENSOR])
        self.assertEqual(
            [state for state, _ in self.transitions],
            [ConnectionState.CONNECTING, ConnectionState.CONNECTED],
        )

    def test_permission_request_then_grant(self):
        provider = FakeProvider([SENSOR], permitted=False)
        manager = self._manager(provider)

        self.assertIs(manager.discover(), ConnectionState.AWAITING_PERMISSION)
        self.assertEqual(manager.status, "Awaiting permission")
        self.assertEqual(provider.permission_requests, [SENSOR])
        self.assertIs(manager.device.permission, PermissionStatus.REQUESTED)

        provider.answer_permission(True)
        self.assertGreater(self.wakeups, 0)
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.CONNECTED)

    def test_permission_denied_returns_to_disconnected(self):
        provider = FakeProvider([SENSOR], permitted=False)
        manager = self._manager(provider)
        manager.discover()
        provider.answer_permission(False)
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(manager.status, "Disconnected")
        self.assertEqual(provider.opened, [])
        self.assertEqual(provider.permission_requests[-1].permission, PermissionStatus.DENIED)

    def test_open_failure_reports_distinct_status(self):
        provider = FakeProvider([SENSOR], open_error=OpenFailure.HANDLE_UNOBTAINABLE)
        manager = self._manager(provider)
        manager.discover()
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(manager.status, "Open failed")
        self.assertEqual(self.readers.readers, [])
        self.assertIsNone(manager.slot.get())

    def test_discover_while_connected_is_ignored(self):
        manager, provider = self._connected()
        self.assertIs(manager.discover(), ConnectionState.CONNECTED)
        self.assertEqual(len(provider.opened), 1)

    # ------------------------------------------------------------ disconnect
    def test_disconnect_when_never_connected_is_noop(self):
        manager = self._manager(FakeProvider([SENSOR]))
        manager.disconnect()
        manager.disconnect()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(self.transitions, [])

    def test_disconnect_twice(self):
        manager, provider = self._connected()
        manager.disconnect()
        manager.disconnect()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(manager.status, "Disconnected")
        self.assertTrue(provider.opened[0].closed)
        self.assertTrue(self.readers.readers[0].stopped)
        self.assertIsNone(manager.slot.get())
        self.assertEqual(self.presence.unwatched, 1)

    def test_close_failure_is_swallowed(self):
        manager, provider = self._connected()
        provider.opened[0].fail_on_close = True
        manager.disconnect()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)

    def test_disconnect_request_event(self):
        manager, _ = self._connected()
        manager.post(DisconnectRequested())
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)

    def test_toggle_connects_then_disconnects(self):
        manager = self._manager(FakeProvider([SENSOR]))
        manager.toggle()
        manager.process_events()
        self.assertTrue(manager.is_connected())
        manager.toggle()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)

    # ------------------------------------------------------------ detach
    def test_detach_while_awaiting_permission(self):
        provider = FakeProvider([SENSOR], permitted=False)
        manager = self._manager(provider)
        manager.discover()
        manager.post(DeviceDetached(SENSOR))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertIsNone(manager.device)

    def test_detach_while_connecting_wins_over_open(self):
        provider = FakeProvider([SENSOR], permitted=False)
        manager = self._manager(provider)
        manager.discover()
        provider.answer_permission(True)
        manager.post(DeviceDetached(SENSOR))
        manager.process_events()

        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(provider.opened, [])
        self.assertIn(ConnectionState.CONNECTING, [state for state, _ in self.transitions])
        self.assertNotIn(ConnectionState.CONNECTED, [state for state, _ in self.transitions])

    def test_detach_while_connected(self):
        manager, provider = self._connected()
        manager.post(DeviceDetached(SENSOR))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertTrue(provider.opened[0].closed)

    def test_detach_of_other_device_is_ignored(self):
        manager, _ = self._connected()
        manager.post(DeviceDetached(Device("/dev/ttyUSB7")))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.CONNECTED)

    def test_detach_when_disconnected_is_noop(self):
        manager = self._manager(FakeProvider([SENSOR]))
        manager.post(DeviceDetached(SENSOR))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(self.transitions, [])

    # ------------------------------------------------------------ read faults
    def test_read_fault_passes_through_faulted(self):
        manager, provider = self._connected()
        self.readers.readers[0].on_fault(LinkFault("cable pulled"))
        manager.process_events()

        self.assertIs(manager.state, ConnectionState.DISCONNECTED)
        self.assertEqual(manager.status, "Disconnected")
        self.assertEqual(
            self.transitions[-2:],
            [
                (ConnectionState.FAULTED, "Read fault"),
                (ConnectionState.DISCONNECTED, "Disconnected"),
            ],
        )
        self.assertTrue(provider.opened[0].closed)

    def test_stale_read_fault_is_ignored(self):
        manager, _ = self._connected()
        manager.disconnect()
        manager.discover()
        manager.process_events()
        self.assertEqual(manager.session, 2)

        manager.post(ReadFault(session=1))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.CONNECTED)

        # The first reader's callback is bound to session 1 as well.
        self.readers.readers[0].on_fault(LinkFault("late"))
        manager.process_events()
        self.assertIs(manager.state, ConnectionState.CONNECTED)


if __name__ == "__main__":
    unittest.main()

import socket
import unittest

import mock

import upnpcp as upnp
from upnpcp import ssdp
from tests.const import (
    TEST_SSDP_RESPONSE,
    TEST_SSDP_RESPONSE_NO_LOCATION,
    RENDERING_CONTROL,
    DEVICE_LOCATION,
)

ADDRESS = ("192.168.1.5", 1900)


class TestSSDPRequest(unittest.TestCase):
    def test_request(self):
        req = ssdp.ssdp_request(RENDERING_CONTROL, 3).decode("utf-8")
        lines = req.split("\r\n")
        self.assertEqual(lines[0], "M-SEARCH * HTTP/1.1")
        self.assertIn("ST: %s" % RENDERING_CONTROL, lines)
        self.assertIn("MX: 3", lines)
        self.assertIn('MAN: "ssdp:discover"', lines)
        self.assertIn("HOST: 239.255.255.250:1900", lines)
        self.assertTrue(req.endswith("\r\n\r\n"))


class TestParseResponse(unittest.TestCase):
    def test_response(self):
        result = ssdp.parse_response(TEST_SSDP_RESPONSE, ADDRESS)
        self.assertIsInstance(result, upnp.DiscoveryResult)
        self.assertEqual(result.location, DEVICE_LOCATION)
        self.assertEqual(result.search_target, RENDERING_CONTROL)
        self.assertEqual(
            result.usn, "uuid:RINCON_000E58000000001400_MR::%s" % RENDERING_CONTROL)
        self.assertEqual(result.server, "Linux UPnP/1.0 Sonos/63.2-88230 (ZPS1)")
        self.assertEqual(result.address, ADDRESS)

    def test_header_case_and_line_endings(self):
        data = (
            "HTTP/1.1 200 OK\n"
            "location: http://10.0.0.1/desc.xml\n"
            "st: upnp:rootdevice\n"
            "Usn: uuid:abc::upnp:rootdevice\n\n"
        ).encode("utf-8")
        result = ssdp.parse_response(data)
        self.assertEqual(result.location, "http://10.0.0.1/desc.xml")
        self.assertEqual(result.search_target, "upnp:rootdevice")
        self.assertIsNone(result.server)

    def test_missing_location(self):
        with self.assertRaises(upnp.MissingElement) as ctx:
            ssdp.parse_response(TEST_SSDP_RESPONSE_NO_LOCATION, ADDRESS)
        self.assertEqual(ctx.exception.name, "LOCATION")
        self.assertEqual(ctx.exception.context, ssdp.RESPONSE_CONTEXT)

    def test_notify_is_not_a_response(self):
        data = b"NOTIFY * HTTP/1.1\r\nLOCATION: http://x/\r\nNT: upnp:rootdevice\r\n\r\n"
        self.assertRaises(upnp.InvalidResponse, ssdp.parse_response, data, ADDRESS)

    def test_error_status(self):
        data = b"HTTP/1.1 500 Internal Server Error\r\n\r\n"
        self.assertRaises(upnp.InvalidResponse, ssdp.parse_response, data, ADDRESS)

    def test_invalid_unicode(self):
        with self.assertRaises(upnp.InvalidResponse) as ctx:
            ssdp.parse_response(b"\xff\xfe\xfa", ADDRESS)
        self.assertIsInstance(ctx.exception.cause, UnicodeDecodeError)

    def test_empty(self):
        self.assertRaises(upnp.InvalidResponse, ssdp.parse_response, b"", ADDRESS)


class TestScan(unittest.TestCase):
    def setUp(self):
        patchers = [
            mock.patch("upnpcp.ssdp.get_addresses_ipv4", return_value=["192.168.1.10"]),
            mock.patch("upnpcp.ssdp.socket.socket"),
            mock.patch("upnpcp.ssdp.select"),
            mock.patch("upnpcp.ssdp.time"),
        ]
        mocks = [p.start() for p in patchers]
        for p in patchers:
            self.addCleanup(p.stop)
        self.mock_addresses, self.mock_socket, self.mock_select, self.mock_time = mocks
        self.sock = self.mock_socket.return_value

    def test_duplicates_within_window(self):
        """
        Two answers with the same USN both come through, then the search
        ends once the timeout has passed.
        """
        self.mock_time.monotonic.side_effect = [0.0, 0.5, 2.0, 3.0]
        self.mock_select.select.side_effect = [
            ([self.sock], [], []),
            ([self.sock], [], []),
        ]
        self.sock.recvfrom.side_effect = [
            (TEST_SSDP_RESPONSE, ADDRESS),
            (TEST_SSDP_RESPONSE, ("192.168.2.5", 1900)),
        ]

        results = list(upnp.discover(RENDERING_CONTROL, timeout=3))

        self.assertEqual(len(results), 2)
        self.assertEqual(results[0].usn, results[1].usn)
        self.assertEqual([r.address for r in results], [ADDRESS, ("192.168.2.5", 1900)])
        self.assertEqual(self.mock_select.select.call_count, 2)
        # The second wait is bounded by what is left of the window.
        self.assertEqual(self.mock_select.select.call_args[0][3], 1.0)
        self.sock.sendto.assert_called_once_with(
            ssdp.ssdp_request(RENDERING_CONTROL, ssdp.SSDP_MX), ssdp.SSDP_TARGET)
        self.sock.close.assert_called_once()

    def test_nothing_received(self):
        self.mock_time.monotonic.side_effect = [0.0, 0.0, 2.0]
        self.mock_select.select.return_value = ([], [], [])
        self.assertEqual(list(ssdp.scan(timeout=2)), [])
        self.sock.close.assert_called_once()

    def test_bad_response_does_not_stop_search(self):
        self.mock_time.monotonic.side_effect = [0.0, 0.1, 0.2, 0.3, 5.0]
        self.mock_select.select.return_value = ([self.sock], [], [])
        self.sock.recvfrom.side_effect = [
            (TEST_SSDP_RESPONSE, ADDRESS),
            (TEST_SSDP_RESPONSE_NO_LOCATION, ADDRESS),
            (TEST_SSDP_RESPONSE, ADDRESS),
        ]
        results = list(upnp.discover(timeout=5))
        self.assertEqual(len(results), 3)
        self.assertIsInstance(results[0], upnp.DiscoveryResult)
        self.assertIsInstance(results[1], upnp.MissingElement)
        self.assertIsInstance(results[2], upnp.DiscoveryResult)

    def test_abandoned_search_closes_sockets(self):
        self.mock_time.monotonic.side_effect = [0.0, 0.1, 0.2]
        self.mock_select.select.return_value = ([self.sock], [], [])
        self.sock.recvfrom.return_value = (TEST_SSDP_RESPONSE, ADDRESS)
        results = upnp.discover(timeout=10)
        next(results)
        self.sock.close.assert_not_called()
        results.close()
        self.sock.close.assert_called_once()

    def test_socket_error(self):
        self.mock_time.monotonic.side_effect = [0.0, 0.1]
        self.mock_select.select.return_value = ([self.sock], [], [])
        self.sock.recvfrom.side_effect = socket.error("reset")
        self.assertEqual(list(ssdp.scan(timeout=2)), [])
        self.sock.close.assert_called_once()

    def test_bind_failure(self):
        self.mock_time.monotonic.return_value = 0.0
        self.sock.bind.side_effect = socket.error("in use")
        self.assertEqual(list(ssdp.scan(timeout=2)), [])
        self.mock_select.select.assert_not_called()
        self.sock.close.assert_called_once()

    def test_socket_creation_failure_skips_interface(self):
        """
        An interface whose socket can't be created doesn't stop the others.
        """
        self.mock_addresses.return_value = ["192.168.1.10", "10.0.0.2"]
        self.mock_socket.side_effect = [socket.error("no buffers"), self.sock]
        self.mock_time.monotonic.side_effect = [0.0, 0.0, 2.0]
        self.mock_select.select.return_value = ([], [], [])
        self.assertEqual(list(ssdp.scan(timeout=2)), [])
        self.sock.bind.assert_called_once_with(("10.0.0.2", 0))
        self.assertEqual(self.mock_select.select.call_args[0][0], [self.sock])
        self.sock.close.assert_called_once()


class TestDiscoverDevices(unittest.TestCase):
    @mock.patch("upnpcp.ssdp.fetch_device")
    @mock.patch("upnpcp.ssdp.discover")
    def test_discover_devices(self, mock_discover, mock_fetch):
        """
        Each location is fetched once, and bad responses are skipped.
        """
        entry = ssdp.parse_response(TEST_SSDP_RESPONSE, ADDRESS)
        mock_discover.return_value = iter(
            [entry, upnp.MissingElement(ssdp.RESPONSE_CONTEXT, "LOCATION"), entry])
        mock_fetch.return_value = "device"
        ret = upnp.discover_devices(timeout=1, http_auth=("user", "pass"))
        mock_fetch.assert_called_once_with(DEVICE_LOCATION, http_auth=("user", "pass"))
        self.assertEqual(ret, ["device"])

    @mock.patch("upnpcp.ssdp.fetch_device", side_effect=upnp.HttpErrorCode(404))
    @mock.patch("upnpcp.ssdp.discover")
    def test_discover_devices_exception(self, mock_discover, mock_fetch):
        """
        If unable to read a discovered device's description, it should not appear in the list.
        """
        mock_discover.return_value = iter([ssdp.parse_response(TEST_SSDP_RESPONSE, ADDRESS)])
        ret = upnp.discover_devices()
        mock_fetch.assert_called_with(DEVICE_LOCATION)
        self.assertEqual(ret, [])

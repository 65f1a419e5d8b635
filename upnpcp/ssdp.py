import socket
import select
import time
from collections import namedtuple

import ifaddr
from requests.structures import CaseInsensitiveDict

from .device import fetch_device
from .util import _getLogger
from .const import DISCOVER_TIMEOUT, SSDP_TARGET, SSDP_MX, SSDP_RECV_SIZE, ST_ALL
from .errors import UPNPError, MissingElement, InvalidResponse

_log = _getLogger("ssdp")

RESPONSE_CONTEXT = "M-SEARCH response"


class DiscoveryResult(namedtuple(
        "DiscoveryResultBase", "location, search_target, usn, server, address")):
    """One answer to an M-SEARCH."""


def ssdp_request(ssdp_st, ssdp_mx=SSDP_MX):
    """Return request bytes for given st and mx."""
    return "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            "ST: {}".format(ssdp_st),
            "MX: {:d}".format(ssdp_mx),
            'MAN: "ssdp:discover"',
            "HOST: {}:{}".format(*SSDP_TARGET),
            "",
            "",
        ]
    ).encode("utf-8")


def get_addresses_ipv4():
    # Get all adapters on current machine
    adapters = ifaddr.get_adapters()
    # Get the ip from the found adapters
    # Ignore localhost und IPv6 addresses
    return list(
        set(
            addr.ip
            for iface in adapters
            for addr in iface.ips
            if addr.is_IPv4 and addr.ip != "127.0.0.1"
        )
    )


def _open_sockets(request, ssdp_mx):
    sockets = []
    for addr in get_addresses_ipv4():
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except socket.error:
            _log.exception("Unable to create a socket")
            continue
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ssdp_mx)
            sock.bind((addr, 0))
            sock.sendto(request, SSDP_TARGET)
            sock.setblocking(False)
        except socket.error:
            _log.debug("Unable to send M-SEARCH from %s", addr)
            sock.close()
            continue
        sockets.append(sock)
    return sockets


def scan(ssdp_st=ST_ALL, timeout=DISCOVER_TIMEOUT, ssdp_mx=SSDP_MX):
    """
    Send an M-SEARCH for `ssdp_st` from every IPv4 interface and yield
    (data, address) for each datagram received until `timeout` seconds have
    passed. The sockets are closed when the generator ends or is closed.
    """
    sockets = _open_sockets(ssdp_request(ssdp_st, ssdp_mx), ssdp_mx)
    stop_wait = time.monotonic() + timeout
    try:
        while sockets:
            seconds_left = stop_wait - time.monotonic()
            if seconds_left <= 0:
                break

            ready = select.select(sockets, [], [], seconds_left)[0]

            for sock in ready:
                try:
                    data, address = sock.recvfrom(SSDP_RECV_SIZE)
                except socket.error:
                    _log.exception("Socket error while discovering SSDP devices")
                    sockets.remove(sock)
                    sock.close()
                    continue
                yield data, address

    finally:
        for s in sockets:
            s.close()


def parse_response(data, address=None):
    """
    Parse an M-SEARCH response datagram into a DiscoveryResult.
    """
    try:
        response = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidResponse(exc) from exc

    lines = response.split("\r\n") if "\r\n" in response else response.split("\n")
    status = lines[0].split(None, 2)
    if len(status) < 2 or not status[0].upper().startswith("HTTP/") or status[1] != "200":
        raise InvalidResponse(ValueError(
            "Unexpected status line from %s: %r" % (address, lines[0])))

    headers = CaseInsensitiveDict()
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if sep:
            headers[name.strip()] = value.strip()

    for name in ("LOCATION", "ST", "USN"):
        if not headers.get(name):
            raise MissingElement(RESPONSE_CONTEXT, name)

    return DiscoveryResult(
        location=headers["LOCATION"],
        search_target=headers["ST"],
        usn=headers["USN"],
        server=headers.get("SERVER"),
        address=address,
    )


def discover(ssdp_st=ST_ALL, timeout=DISCOVER_TIMEOUT):
    """
    Search the network for `ssdp_st` and lazily yield a DiscoveryResult for
    every response received within `timeout` seconds, in arrival order.

    A response which can't be parsed is yielded as the UPNPError describing
    it rather than raised, so one bad device doesn't end the search.
    Responses are not deduplicated: a device answering on several interfaces
    shows up once per answer.
    """
    responses = scan(ssdp_st, timeout)
    try:
        for data, address in responses:
            try:
                result = parse_response(data, address)
            except UPNPError as exc:
                _log.debug("Bad M-SEARCH response from %s: %s", address, exc)
                yield exc
                continue
            _log.debug("%s at %s", result.usn, result.location)
            yield result
    finally:
        responses.close()


def discover_devices(ssdp_st=ST_ALL, timeout=DISCOVER_TIMEOUT, **http_options):
    """
    Convenience method to discover UPnP devices on the network. Returns a
    list of `DeviceDescription` instances, one per description location.
    Any invalid devices are logged and left out.
    """
    devices = {}
    for entry in discover(ssdp_st, timeout):
        if isinstance(entry, UPNPError) or entry.location in devices:
            continue
        try:
            devices[entry.location] = fetch_device(entry.location, **http_options)
        except UPNPError as exc:
            _log.error("Error '%s' for %s", exc, entry.location)
    return list(devices.values())

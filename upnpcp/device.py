from functools import partial
from collections import namedtuple
from urllib.parse import urljoin, urlparse

from .util import _getLogger, http_get, parse_xml, scan_children, find_children, element_text
from .scpd import parse_scpd
from .soap import invoke

_log = _getLogger("device")

_SERVICE_FIELDS = ("serviceType", "serviceId", "controlURL", "SCPDURL", "eventSubURL")
_OPTIONAL_DEVICE_FIELDS = (
    "manufacturer",
    "manufacturerURL",
    "modelDescription",
    "modelName",
    "modelNumber",
    "serialNumber",
    "presentationURL",
    "serviceList",
    "deviceList",
)


class ServiceDescriptor(namedtuple(
        "ServiceDescriptorBase",
        "service_type, service_id, control_url, description_url, event_sub_url")):
    """
    A service as listed in a device description. All URLs are absolute, so a
    descriptor can be used on its own once taken out of its device.
    """

    def __repr__(self):
        return "<Service service_id='%s'>" % (self.service_id)

    @property
    def name(self):
        try:
            return self.service_id[self.service_id.rindex(":") + 1:]
        except ValueError:
            return self.service_id

    def fetch_schema(self, **http_options):
        """
        Retrieve and parse this service's SCPD.
        """
        _log.debug("Reading %s", self.description_url)
        return parse_scpd(parse_xml(http_get(self.description_url, **http_options)))

    def action(self, action_name, arguments=(), schema=None, **http_options):
        """
        Invoke `action_name` on this service. If a `schema` is given, the
        arguments are validated against it before anything is sent.
        """
        if schema is not None:
            arguments = schema.validate_call(action_name, arguments)
        return invoke(
            self.control_url, self.service_type, action_name, arguments, **http_options)


class DeviceDescription(namedtuple(
        "DeviceDescriptionBase",
        "friendly_name, device_type, udn, url_base, services, embedded_devices, "
        "manufacturer, manufacturer_url, model_description, model_name, model_number, "
        "serial_number, presentation_url")):
    """
    UPNP Device represention, as parsed from a device description document.
    `services` and `embedded_devices` are tuples in document order.

    Example:

    >>> device = fetch_device('http://192.168.1.254:80/upnp/IGD.xml')
    >>> for service in device.all_services():
    ...     print(service.service_id)
    ...
    urn:upnp-org:serviceId:layer3f
    urn:upnp-org:serviceId:wancic
    urn:upnp-org:serviceId:wandsllc:pvc_Internet
    urn:upnp-org:serviceId:wanipc:Internet
    """

    def __repr__(self):
        return "<Device '%s'>" % (self.friendly_name)

    @classmethod
    def from_xml(cls, data, location, ignore_urlbase=False):
        return parse_device_description(parse_xml(data), location, ignore_urlbase)

    def all_devices(self):
        """
        This device followed by every embedded device, depth first, in
        document order.
        """
        yield self
        for device in self.embedded_devices:
            for sub in device.all_devices():
                yield sub

    def all_services(self):
        for device in self.all_devices():
            for service in device.services:
                yield service

    def find_service(self, service_type):
        """
        Return the first service of `service_type` on this device or any
        embedded device, or None.
        """
        for service in self.all_services():
            if service.service_type == service_type:
                return service

    def find_service_by_id(self, service_id):
        for service in self.all_services():
            if service.service_id == service_id:
                return service


def _field_text(fields, name, default=None):
    return element_text(fields[name], default)


def _parse_service(node, url_base):
    fields = scan_children(node, required=_SERVICE_FIELDS)
    findtext = partial(_field_text, fields, default="")
    svc = ServiceDescriptor(
        service_type=findtext("serviceType"),
        service_id=findtext("serviceId"),
        control_url=urljoin(url_base, findtext("controlURL")),
        description_url=urljoin(url_base, findtext("SCPDURL")),
        event_sub_url=urljoin(url_base, findtext("eventSubURL")),
    )
    _log.debug("Service %r at %r", svc.service_type, svc.description_url)
    return svc


def _parse_device(node, url_base):
    fields = scan_children(
        node,
        required=("friendlyName", "deviceType", "UDN"),
        optional=_OPTIONAL_DEVICE_FIELDS,
    )
    findtext = partial(_field_text, fields)

    services = ()
    if fields["serviceList"] is not None:
        services = tuple(
            _parse_service(svc_node, url_base)
            for svc_node in find_children(fields["serviceList"], "service")
        )
    embedded_devices = ()
    if fields["deviceList"] is not None:
        embedded_devices = tuple(
            _parse_device(dev_node, url_base)
            for dev_node in find_children(fields["deviceList"], "device")
        )

    presentation_url = findtext("presentationURL")
    if presentation_url:
        presentation_url = urljoin(url_base, presentation_url)

    return DeviceDescription(
        friendly_name=findtext("friendlyName"),
        device_type=findtext("deviceType"),
        udn=findtext("UDN"),
        url_base=url_base,
        services=services,
        embedded_devices=embedded_devices,
        manufacturer=findtext("manufacturer"),
        manufacturer_url=findtext("manufacturerURL"),
        model_description=findtext("modelDescription"),
        model_name=findtext("modelName"),
        model_number=findtext("modelNumber"),
        serial_number=findtext("serialNumber"),
        presentation_url=presentation_url,
    )


def _origin(location):
    parts = urlparse(location)
    return "%s://%s/" % (parts.scheme, parts.netloc)


def parse_device_description(root, location, ignore_urlbase=False):
    """
    Build a DeviceDescription tree from the root element of a device
    description fetched from `location`.
    """
    fields = scan_children(root, required=("device",), optional=("URLBase",))
    url_base = element_text(fields["URLBase"])
    if not url_base or ignore_urlbase:
        url_base = _origin(location)
    device = _parse_device(fields["device"], url_base)
    _log.debug("%s: %r at %s", device.udn, device.friendly_name, url_base)
    return device


def fetch_device(location, ignore_urlbase=False, **http_options):
    """
    Retrieve the device description at `location` and parse it.
    """
    data = http_get(location, **http_options)
    return DeviceDescription.from_xml(data, location, ignore_urlbase)

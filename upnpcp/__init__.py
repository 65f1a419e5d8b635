# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
This module provides an UPnP Control Point (client), and provides an easy
interface to discover and communicate with UPnP devices. It implements SSDP
(Simple Service Discovery Protocol) searches, parsing of device descriptions
and SCPD (Service Control Protocol Description) documents, and a minimal SOAP
(Simple Object Access Protocol) client for calling actions.

The usual flow for working with UPnP devices is:

- Discover UPnP devices using SSDP.

  SSDP is a simple HTTP-over-UDP protocol. An M-SEARCH HTTP request is multi-
  casted over the network and any UPnP devices should respond with an HTTP
  response. This response includes an URL to an XML file describing the
  device. `discover()` yields one `DiscoveryResult` per response (or the
  error describing a response it couldn't read). If you already know the URL
  of the XML file, you can skip this step.

- Inspect device capabilities.

  `fetch_device(location)` reads the description and returns an immutable
  `DeviceDescription`, holding the services of the device and its embedded
  devices. `find_service(service_type)` looks a service up by type.

- Inspect service capabilities using SCPD.

  Each service has a separate XML file listing its actions and state
  variables. `ServiceDescriptor.fetch_schema()` reads it into a
  `ServiceSchema`. A schema may be used to validate a call before it's made
  and to convert the raw values of a response into Python types.

- Call an action using SOAP.

  `ServiceDescriptor.action(name, arguments)` (or `invoke()` with a control
  URL) makes the SOAP call and returns the output arguments as strings.
  Devices reporting a SOAP fault raise `ActionFailed`.

The following example discovers all UPnP devices on the local network and
then dumps all their services and actions:

------------------------------------------------------------------------------
import upnpcp

for device in upnpcp.discover_devices(timeout=5):
    print("%s: %s" % (device.friendly_name, device.model_description))
    for service in device.all_services():
        print("   %s" % (service.service_type))
        schema = service.fetch_schema()
        for action in schema.actions.values():
            print("      %s" % (action))
------------------------------------------------------------------------------

Useful Links:

* https://embeddedinn.wordpress.com/tutorials/upnp-device-architecture/
* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
"""
from upnpcp import const, errors, marshal, scpd, soap, ssdp, util  # noqa: F401
from .errors import (
    UPNPError, TransportError, HttpErrorCode, XmlMalformed, MissingElement, InvalidResponse,
    ActionFailed, InvalidActionException, ValidationError)
from .scpd import (
    DataType, ServiceSchema, ActionSpec, ArgumentSpec, StateVariableSpec, AllowedRange,
    parse_scpd)
from .device import DeviceDescription, ServiceDescriptor, parse_device_description, fetch_device
from .soap import invoke
from .ssdp import DiscoveryResult, discover, discover_devices

__all__ = [
    "UPNPError", "TransportError", "HttpErrorCode", "XmlMalformed", "MissingElement",
    "InvalidResponse", "ActionFailed", "InvalidActionException", "ValidationError",
    "DataType", "ServiceSchema", "ActionSpec", "ArgumentSpec", "StateVariableSpec",
    "AllowedRange", "parse_scpd",
    "DeviceDescription", "ServiceDescriptor", "parse_device_description", "fetch_device",
    "invoke", "DiscoveryResult", "discover", "discover_devices",
]

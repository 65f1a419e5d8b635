#!/usr/bin/env python
#
# Direct UPnP device connect without device discovery.
#

import upnpcp

device = upnpcp.fetch_device('http://192.168.1.254:80/upnp/IGD.xml')
print(device.friendly_name)

for service in device.all_services():
    print(service)

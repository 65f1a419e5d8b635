#!/usr/bin/env python
#
# Demonstrate a simple UPnP device discovery.
#

import upnpcp

# Every response is printed as it arrives, including repeats from devices
# answering on more than one interface.
for result in upnpcp.discover(upnpcp.const.ST_ROOTDEVICE, timeout=5):
    if isinstance(result, upnpcp.UPNPError):
        print("bad response:", result)
        continue
    print(result.usn, '@', result.location)

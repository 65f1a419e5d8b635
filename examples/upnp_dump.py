#!/usr/bin/env python
#
# Dump all the actions on every UPnP device found.
#

import upnpcp

# Do a device discovery on the network by multicasting an HTTPU M-SEARCH
# using UDP. We wait for devices to reply for 5 seconds, then read the
# description of every device which answered.
devices = upnpcp.discover_devices(timeout=5)

# We'll walk through them, print some information on them and list their
# services, actions and the arguments for those actions.
if not devices:
    print("No UPnP devices discovered on your network. Maybe try turning on")
    print("UPnP on one of your devices?")
else:
    for device in devices:
        print("%s: %s (%s)" % (device.friendly_name, device.model_description, device.udn))
        for service in device.all_services():
            print("   %s" % (service.service_type))
            try:
                schema = service.fetch_schema()
            except upnpcp.UPNPError as e:
                print("      unreadable SCPD: %s" % e)
                continue
            for action in schema.actions.values():
                print("      %s" % (action.name))
                for arg in action.arguments:
                    statevar = schema.state_variables[arg.related_state_variable]
                    valid = ', '.join(sorted(statevar.allowed_values or ())) or '*'
                    print("      %5s: %s (%s): %s" % (
                        arg.direction, arg.name, statevar.raw_data_type, valid))

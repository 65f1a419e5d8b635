#!/usr/bin/env python
#
# Show how to actually perform UPnP calls.
#

import upnpcp

RENDERING_CONTROL = 'urn:schemas-upnp-org:service:RenderingControl:1'

# Read the description of a Sonos speaker and pick its RenderingControl
# service, regardless of which embedded device it is on.
device = upnpcp.fetch_device('http://192.168.1.5:1400/xml/device_description.xml')
service = device.find_service(RENDERING_CONTROL)

# Values come back as strings.
response = service.action('GetVolume', [('InstanceID', 0), ('Channel', 'Master')])
print(response)
# Output: OrderedDict([('CurrentVolume', '42')])

# With the SCPD at hand, arguments are checked before the call is made and
# the response can be converted to Python types.
schema = service.fetch_schema()
response = service.action('GetVolume', {'InstanceID': 0, 'Channel': 'Master'}, schema=schema)
print(schema.marshal_response('GetVolume', response))
# Output: OrderedDict([('CurrentVolume', 42)])

# If we don't pass a valid value, a ValidationError is raised and nothing is sent
try:
    service.action('SetVolume', {'InstanceID': 0, 'Channel': 'Master', 'DesiredVolume': 250},
                   schema=schema)
except upnpcp.ValidationError as e:
    print(e.reasons)

# Errors reported by the device itself raise ActionFailed
try:
    service.action('SetVolume', [('InstanceID', 99), ('Channel', 'Master'), ('DesiredVolume', 10)])
except upnpcp.ActionFailed as e:
    print(e.error_code, e.error_description)

# HTTP calls inherit the transport's own timeout policy unless the caller
# passes one.
HTTP_TIMEOUT = None

DISCOVER_TIMEOUT = 2
SSDP_TARGET = ("239.255.255.250", 1900)
SSDP_MX = DISCOVER_TIMEOUT
SSDP_RECV_SIZE = 4096
ST_ALL = "ssdp:all"
ST_ROOTDEVICE = "upnp:rootdevice"

NS_SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
NS_SOAP_ENC = "http://schemas.xmlsoap.org/soap/encoding/"
NS_UPNP_CONTROL = "urn:schemas-upnp-org:control-1-0"

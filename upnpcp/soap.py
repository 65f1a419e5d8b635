from collections import OrderedDict

from lxml import etree

from .util import (
    _getLogger, http_request, parse_xml, local_name, scan_children, element_text, parse_text)
from .const import HTTP_TIMEOUT, NS_SOAP_ENV, NS_SOAP_ENC
from .errors import ActionFailed, InvalidResponse, MissingElement

_log = _getLogger("soap")


def _arg_text(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, bytes):
        return value.decode("utf8")
    return str(value)


def build_envelope(service_type, action_name, arguments=()):
    """
    Return the request body for calling `action_name`. `arguments` is a
    mapping or a sequence of (name, value) pairs; elements are written in
    its order and their text is escaped by the serializer.
    """
    if hasattr(arguments, "items"):
        arguments = arguments.items()
    envelope = etree.Element("{%s}Envelope" % NS_SOAP_ENV, nsmap={"s": NS_SOAP_ENV})
    envelope.set("{%s}encodingStyle" % NS_SOAP_ENV, NS_SOAP_ENC)
    body = etree.SubElement(envelope, "{%s}Body" % NS_SOAP_ENV)
    action = etree.SubElement(
        body, "{%s}%s" % (service_type, action_name), nsmap={"u": service_type})
    for name, value in arguments:
        etree.SubElement(action, name).text = _arg_text(value)
    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")


def _parse_fault(fault):
    """
    Build the ActionFailed for a SOAP fault. Every part of the fault is
    optional; what the device leaves out is reported as empty.
    """
    children = scan_children(fault, optional=("faultcode", "faultstring", "detail"))
    error_code = error_description = None
    if children["detail"] is not None:
        upnp_error = scan_children(children["detail"], optional=("UPnPError",))["UPnPError"]
        if upnp_error is not None:
            error = scan_children(
                upnp_error, optional=("errorCode", "errorDescription"))
            if error["errorCode"] is not None:
                try:
                    error_code = parse_text(error["errorCode"], int)
                except InvalidResponse:
                    _log.warning(
                        "Ignoring invalid UPnP error code %r",
                        element_text(error["errorCode"]))
            error_description = element_text(error["errorDescription"])
    return ActionFailed(
        element_text(children["faultcode"], ""),
        element_text(children["faultstring"], ""),
        error_code,
        error_description,
    )


def parse_response(action_name, data):
    """
    Parse an action response body into an ordered mapping of output argument
    names to their raw text. Raises ActionFailed if the body is a SOAP fault.
    """
    envelope = parse_xml(data)
    if local_name(envelope) != "Envelope":
        raise InvalidResponse(ValueError(
            "Expected a SOAP Envelope, got <%s>" % local_name(envelope)))
    body = scan_children(envelope, required=("Body",))["Body"]

    response_name = "%sResponse" % action_name
    found = scan_children(body, optional=("Fault", response_name))
    if found["Fault"] is not None:
        raise _parse_fault(found["Fault"])
    if found[response_name] is None:
        raise MissingElement(local_name(body), response_name)

    params_out = OrderedDict()
    for param_out_node in found[response_name]:
        if isinstance(param_out_node.tag, str):
            params_out[local_name(param_out_node)] = element_text(param_out_node, "")
    return params_out


class SOAP(object):
    """SOAP (Simple Object Access Protocol) implementation
    This class defines a simple SOAP client.
    """
    def __init__(self, url, service_type):
        self.url = url
        self.service_type = service_type
        self._log = _getLogger('SOAP')

    def call(self, action_name, arg_in=(), http_auth=None, http_headers=None,
             timeout=HTTP_TIMEOUT, session=None):
        body = build_envelope(self.service_type, action_name, arg_in)
        headers = {
            'SOAPAction': '"%s#%s"' % (self.service_type, action_name),
            'Content-Type': 'text/xml; charset="utf-8"',
        }
        if http_headers:
            headers.update(http_headers)

        self._log.debug(">> %s %s", self.url, action_name)
        resp = http_request(
            "POST",
            self.url,
            http_auth=http_auth,
            http_headers=headers,
            timeout=timeout,
            session=session,
            data=body,
        )
        params_out = parse_response(action_name, resp.content)
        self._log.debug("<< %s %s: %s", self.url, action_name, dict(params_out))
        return params_out


def invoke(control_url, service_type, action_name, arguments=(), **kwargs):
    """
    Call `action_name` on the service at `control_url` and return the output
    arguments as a mapping of name to raw string. One HTTP round trip is
    made; nothing is retried. HTTP options (`http_auth`, `http_headers`,
    `timeout`, `session`) are passed to the transport.
    """
    return SOAP(control_url, service_type).call(action_name, arguments, **kwargs)

import logging
from decimal import Decimal, InvalidOperation

import requests
from lxml import etree

from .const import HTTP_TIMEOUT
from .errors import TransportError, HttpErrorCode, XmlMalformed, MissingElement, InvalidResponse

BOOLEAN_TRUE = frozenset(("1", "true", "yes"))
BOOLEAN_FALSE = frozenset(("0", "false", "no"))


def _getLogger(name):
    """
    Retrieve a logger instance. Checks if a handler is defined so we avoid the
    'No handlers could be found' message.
    """
    logger = logging.getLogger(name)
    # if not logging.root.handlers:
    #     logger.disabled = 1
    return logger


def parse_xml(data):
    """
    Parse a document into its root element. Raises XmlMalformed when the
    data isn't well-formed.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        return etree.fromstring(
            data.strip(), parser=etree.XMLParser(resolve_entities=False, no_network=True))
    except etree.XMLSyntaxError as exc:
        raise XmlMalformed(exc) from exc


def local_name(element):
    return etree.QName(element).localname


def _element_children(node):
    # Comments and processing instructions have a non-string tag.
    return (child for child in node if isinstance(child.tag, str))


def scan_children(node, required=(), optional=()):
    """
    Scan the direct children of `node` once and return a dict mapping each
    requested tag name to the first child element with that local name.

    Names in `required` which aren't found raise MissingElement, naming
    `node` as the context. Names in `optional` which aren't found map to None.
    """
    wanted = set(required) | set(optional)
    found = dict.fromkeys(wanted)
    for child in _element_children(node):
        name = local_name(child)
        if name in wanted and found[name] is None:
            found[name] = child
    for name in required:
        if found[name] is None:
            raise MissingElement(local_name(node), name)
    return found


def find_children(node, name):
    """
    All direct child elements of `node` with the local name `name`, in
    document order.
    """
    return [child for child in _element_children(node) if local_name(child) == name]


def element_text(element, default=None):
    if element is None or element.text is None:
        return default
    return element.text.strip()


def parse_bool(text):
    lowered = text.strip().lower()
    if lowered in BOOLEAN_TRUE:
        return True
    if lowered in BOOLEAN_FALSE:
        return False
    raise ValueError("%r is not a valid boolean" % text)


def parse_text(element, type_):
    """
    Parse the text of `element` into `type_` (str, int, float, Decimal or
    bool). Raises InvalidResponse carrying the original error.
    """
    text = element_text(element, "")
    if type_ is str:
        return text
    try:
        if type_ is bool:
            return parse_bool(text)
        if type_ is Decimal:
            return Decimal(text)
        return type_(text)
    except (ValueError, InvalidOperation) as exc:
        raise InvalidResponse(
            ValueError("<%s> %r is not a valid %s: %s" % (
                local_name(element), text, type_.__name__, exc))
        ) from exc


def http_request(method, url, http_auth=None, http_headers=None, timeout=HTTP_TIMEOUT,
                 session=None, **kwargs):
    """
    Perform a single HTTP request and return the response. Raises
    TransportError if the host can't be reached and HttpErrorCode for any
    status other than 200.
    """
    requester = session if session is not None else requests
    try:
        resp = requester.request(
            method, url, auth=http_auth, headers=http_headers, timeout=timeout, **kwargs
        )
    except requests.exceptions.RequestException as exc:
        raise TransportError(exc) from exc
    if resp.status_code != 200:
        raise HttpErrorCode(resp.status_code, resp.content)
    return resp


def http_get(url, **kwargs):
    """
    Retrieve a document and return its body bytes.
    """
    return http_request("GET", url, **kwargs).content

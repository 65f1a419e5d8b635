class UPNPError(Exception):
    """
    Exception class for UPnP errors.
    """

    pass


class TransportError(UPNPError):
    """
    The host could not be reached, or the connection broke down.
    """

    def __init__(self, cause):
        super(TransportError, self).__init__(str(cause))
        self.cause = cause


class HttpErrorCode(UPNPError):
    """
    The host answered with an HTTP status other than 200. The body is kept
    as received and is never parsed.
    """

    def __init__(self, status, body=None):
        super(HttpErrorCode, self).__init__("Did not receive HTTP 200 but %s" % status)
        self.status = status
        self.body = body


class XmlMalformed(UPNPError):
    """
    The document is not well-formed XML.
    """

    def __init__(self, cause):
        super(XmlMalformed, self).__init__("Malformed XML: %s" % cause)
        self.cause = cause


class MissingElement(UPNPError):
    """
    A well-formed document lacks a required element.
    """

    def __init__(self, context, name):
        super(MissingElement, self).__init__(
            "Element %r is missing required child %r" % (context, name)
        )
        self.context = context
        self.name = name


class InvalidResponse(UPNPError):
    """
    A value in a response could not be understood.
    """

    def __init__(self, cause):
        super(InvalidResponse, self).__init__(str(cause))
        self.cause = cause


class ActionFailed(UPNPError):
    """
    The device answered an action call with a SOAP fault.
    """

    def __init__(self, fault_code, fault_string, error_code=None, error_description=None):
        msg = "%s: %s" % (fault_code, fault_string)
        if error_code is not None:
            msg += " (UPnP error %s: %s)" % (
                error_code,
                error_description or ERR_CODE_DESCRIPTIONS.get(error_code, "unknown error"),
            )
        super(ActionFailed, self).__init__(msg)
        self.fault_code = fault_code
        self.fault_string = fault_string
        self.error_code = error_code
        self.error_description = error_description


class InvalidActionException(UPNPError):
    """
    Action doesn't exist.
    """

    pass


class ValidationError(UPNPError):
    """
    Given value didn't validate with the given data type.
    """

    def __init__(self, reasons):
        super(ValidationError, self).__init__(
            "; ".join("%s: %s" % (name, ", ".join(sorted(r))) for name, r in reasons.items())
        )
        self.reasons = reasons


class UPnPErrorCodeDescriptions(object):
    """
    Standard descriptions of the error codes carried in a UPnPError fault
    detail. Ranges without individual codes are looked up by range.
    """

    _descriptions = {
        401: "No action by that name at this service.",
        402: "Invalid Arguments",
        403: "(For future use)",
        501: "Action failed",
        600: "Argument Value Invalid",
        601: "Argument Value Out of Range",
        602: "Optional Action Not Implemented",
        603: "Out of Memory",
        604: "Human Intervention Required",
        605: "String Argument Too Long",
    }

    _ranges = (
        (606, 612, "These ErrorCodes are reserved for UPnP DeviceSecurity."),
        (613, 699, "Common action errors. Defined by UPnP Forum Technical Committee."),
        (700, 799, "Action-specific errors defined by UPnP Forum working committee."),
        (800, 899, "Action-specific errors for non-standard actions. Defined by UPnP vendor."),
    )

    def __getitem__(self, key):
        if not isinstance(key, int):
            raise KeyError("'key' must be an integer")
        try:
            return self._descriptions[key]
        except KeyError:
            pass
        for low, high, desc in self._ranges:
            if low <= key <= high:
                return desc
        raise KeyError(key)

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default


ERR_CODE_DESCRIPTIONS = UPnPErrorCodeDescriptions()

from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse
from uuid import UUID

from dateutil.parser import parse as parse_date

from .errors import InvalidResponse
from .util import parse_bool


def parse_time(value):
    """
    Parse a 'time' or 'time.tz' value into a `datetime.time`, keeping any
    timezone information.
    """
    return parse_date(value).timetz()


MARSHAL_FUNCTIONS = (
    (("ui1", "ui2", "ui4", "ui8", "i1", "i2", "i4", "i8", "int"), int),
    (("r4", "r8", "number", "float"), Decimal),
    (("fixed.14.4",), Decimal),
    (("char", "string", "bin.base64", "bin.hex"), str),
    (("date",), lambda s: parse_date(s).date()),
    (("dateTime", "dateTime.tz"), parse_date),
    (("time", "time.tz"), parse_time),
    (("boolean",), parse_bool),
    (("uri",), urlparse),
    (("uuid",), UUID),
)


def marshal_value(datatype, value):
    """
    Marshal a given string into a relevant Python type given the uPnP
    datatype. `datatype` is either the token from the SCPD or a DataType.
    Returns a tuple containing a boolean (whether the value was marshalled)
    and the value itself. A value that doesn't fit the datatype raises
    InvalidResponse.
    """
    datatype = getattr(datatype, "value", datatype)
    for types, func in MARSHAL_FUNCTIONS:
        if datatype in types:
            if func is str:
                return True, value
            try:
                return True, func(value)
            except (ValueError, TypeError, OverflowError, InvalidOperation) as exc:
                raise InvalidResponse(exc) from exc
    return False, value

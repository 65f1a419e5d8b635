"""
Service Control Protocol Description (SCPD) parsing.

An SCPD document lists the actions a service offers, with their arguments,
and the state variables those arguments are typed by:

    <scpd xmlns="urn:schemas-upnp-org:service-1-0">
      <actionList>
        <action>
          <name>GetVolume</name>
          <argumentList>
            <argument>
              <name>InstanceID</name>
              <direction>in</direction>
              <relatedStateVariable>A_ARG_TYPE_InstanceID</relatedStateVariable>
            </argument>
            ...
          </argumentList>
        </action>
      </actionList>
      <serviceStateTable>
        <stateVariable sendEvents="no">
          <name>Volume</name>
          <dataType>ui2</dataType>
          <allowedValueRange>
            <minimum>0</minimum>
            <maximum>100</maximum>
            <step>1</step>
          </allowedValueRange>
        </stateVariable>
        ...
      </serviceStateTable>
    </scpd>
"""
import re
import enum
import datetime
from decimal import Decimal, InvalidOperation
from base64 import b64decode
from binascii import unhexlify, Error as BinasciiError
from collections import OrderedDict, namedtuple
from urllib.parse import urlparse

from dateutil.parser import parse as parse_date

from .util import _getLogger, parse_xml, scan_children, find_children, element_text, parse_text
from .errors import (
    UPNPError, MissingElement, InvalidResponse, InvalidActionException, ValidationError)
from .marshal import marshal_value

DIRECTION_IN = "in"
DIRECTION_OUT = "out"

_log = _getLogger("scpd")


class DataType(enum.Enum):
    """
    The scalar data types a state variable can be declared with. Tokens
    outside this set map to UNKNOWN and are treated as strings.
    """

    UI1 = "ui1"
    UI2 = "ui2"
    UI4 = "ui4"
    UI8 = "ui8"
    I1 = "i1"
    I2 = "i2"
    I4 = "i4"
    I8 = "i8"
    INT = "int"
    R4 = "r4"
    R8 = "r8"
    NUMBER = "number"
    FIXED_14_4 = "fixed.14.4"
    FLOAT = "float"
    CHAR = "char"
    STRING = "string"
    DATE = "date"
    DATETIME = "dateTime"
    DATETIME_TZ = "dateTime.tz"
    TIME = "time"
    TIME_TZ = "time.tz"
    BOOLEAN = "boolean"
    BIN_BASE64 = "bin.base64"
    BIN_HEX = "bin.hex"
    URI = "uri"
    UUID = "uuid"
    UNKNOWN = None

    @classmethod
    def from_token(cls, token):
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_numeric(self):
        return self in _NUMERIC_TYPES


_NUMERIC_TYPES = frozenset((
    DataType.UI1, DataType.UI2, DataType.UI4, DataType.UI8,
    DataType.I1, DataType.I2, DataType.I4, DataType.I8, DataType.INT,
    DataType.R4, DataType.R8, DataType.NUMBER, DataType.FIXED_14_4, DataType.FLOAT,
))

_INT_RANGES = {
    DataType.UI1: (0, 255),
    DataType.UI2: (0, 65535),
    DataType.UI4: (0, 4294967295),
    DataType.UI8: (0, 18446744073709551615),
    DataType.I1: (-128, 127),
    DataType.I2: (-32768, 32767),
    DataType.I4: (-2147483648, 2147483647),
    DataType.INT: (-2147483648, 2147483647),
    DataType.I8: (-9223372036854775808, 9223372036854775807),
}

_FLOAT_LIMITS = {
    DataType.R4: Decimal("3.40282347E+38"),
    DataType.R8: Decimal("1.79769313486232E308"),
    DataType.NUMBER: Decimal("1.79769313486232E308"),
    DataType.FLOAT: Decimal("1.79769313486232E308"),
    DataType.FIXED_14_4: Decimal("99999999999999.9999"),
}

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}\-[0-9a-f]{4}\-[0-9a-f]{4}\-[0-9a-f]{4}\-[0-9a-f]{12}$", re.I)


class AllowedRange(namedtuple("AllowedRangeBase", "minimum, maximum, step")):
    """Inclusive numeric bounds of a state variable, with an optional step."""

    def __contains__(self, value):
        if not self.minimum <= value <= self.maximum:
            return False
        if self.step:
            return (value - self.minimum) % self.step == 0
        return True


class ArgumentSpec(namedtuple("ArgumentSpecBase", "name, direction, related_state_variable")):
    """An action argument and the state variable typing it."""


class ActionSpec(namedtuple("ActionSpecBase", "name, arguments")):
    """An action and its arguments, in the order the SCPD lists them."""

    @property
    def in_arguments(self):
        return tuple(arg for arg in self.arguments if arg.direction == DIRECTION_IN)

    @property
    def out_arguments(self):
        return tuple(arg for arg in self.arguments if arg.direction == DIRECTION_OUT)

    def __str__(self):
        return "{0}({1}) -> {{{2}}}".format(
            self.name,
            ", ".join(arg.name for arg in self.in_arguments),
            ", ".join(arg.name for arg in self.out_arguments),
        )


class StateVariableSpec(namedtuple(
        "StateVariableSpecBase",
        "name, data_type, raw_data_type, default_value, allowed_values, allowed_range, "
        "send_events")):
    """A state variable: its data type and the constraints on its values."""

    def marshal(self, value):
        _, marshalled = marshal_value(self.raw_data_type, value)
        return marshalled


class ServiceSchema(namedtuple("ServiceSchemaBase", "actions, state_variables")):
    """
    The actions and state variables a service declares. Both are dicts keyed
    by name, in document order.
    """

    @classmethod
    def parse(cls, root):
        return parse_scpd(root)

    @classmethod
    def from_xml(cls, data):
        return parse_scpd(parse_xml(data))

    def find_action(self, action_name):
        return self.actions.get(action_name)

    def validate_call(self, action_name, arguments):
        """
        Check `arguments` (a mapping or a sequence of pairs) against the
        declaration of `action_name`. Returns the in arguments ordered as the
        SCPD lists them.
        """
        action = self.find_action(action_name)
        if action is None:
            raise InvalidActionException(
                "Action with name %r does not exist." % action_name
            )
        values = OrderedDict(arguments)
        arg_reasons = {}
        call_args = []
        for arg in action.in_arguments:
            if arg.name not in values:
                raise UPNPError("Missing required param '%s'" % (arg.name))
            statevar = self.state_variables[arg.related_state_variable]
            valid, reasons = validate_arg(values[arg.name], statevar)
            if not valid:
                arg_reasons[arg.name] = reasons
            call_args.append((arg.name, values[arg.name]))

        if arg_reasons:
            raise ValidationError(arg_reasons)
        return call_args

    def marshal_response(self, action_name, response):
        """
        Convert the raw values of an action response into Python types using
        the data types of the related state variables. Values the action
        doesn't declare are left out.
        """
        action = self.find_action(action_name)
        if action is None:
            raise InvalidActionException(
                "Action with name %r does not exist." % action_name
            )
        out = OrderedDict()
        for arg in action.out_arguments:
            if arg.name in response:
                statevar = self.state_variables[arg.related_state_variable]
                out[arg.name] = statevar.marshal(response[arg.name])
        return out


def _parse_allowed_range(node):
    children = scan_children(node, required=("minimum", "maximum"), optional=("step",))
    step = children["step"]
    return AllowedRange(
        parse_text(children["minimum"], Decimal),
        parse_text(children["maximum"], Decimal),
        parse_text(step, Decimal) if step is not None else None,
    )


def _parse_state_variable(node):
    children = scan_children(
        node,
        required=("name", "dataType"),
        optional=("defaultValue", "allowedValueList", "allowedValueRange"),
    )
    raw_data_type = element_text(children["dataType"], "")
    data_type = DataType.from_token(raw_data_type)
    if data_type is DataType.UNKNOWN:
        _log.debug("Unrecognised data type %r, treating as string", raw_data_type)

    allowed_values = None
    if children["allowedValueList"] is not None:
        allowed_values = frozenset(
            element_text(e, "") for e in find_children(children["allowedValueList"], "allowedValue")
        )
    allowed_range = None
    if children["allowedValueRange"] is not None:
        allowed_range = _parse_allowed_range(children["allowedValueRange"])

    return StateVariableSpec(
        name=element_text(children["name"], ""),
        data_type=data_type,
        raw_data_type=raw_data_type,
        default_value=element_text(children["defaultValue"]),
        allowed_values=allowed_values,
        allowed_range=allowed_range,
        send_events=node.get("sendEvents", "yes").strip().lower() == "yes",
    )


def _parse_argument(node, state_variables):
    children = scan_children(node, required=("name", "direction", "relatedStateVariable"))
    direction = element_text(children["direction"], "")
    if direction not in (DIRECTION_IN, DIRECTION_OUT):
        raise InvalidResponse(ValueError(
            "<direction> must be %r or %r, not %r" % (DIRECTION_IN, DIRECTION_OUT, direction)
        ))
    related = element_text(children["relatedStateVariable"], "")
    if related not in state_variables:
        raise MissingElement("serviceStateTable", related)
    return ArgumentSpec(element_text(children["name"], ""), direction, related)


def _parse_action(node, state_variables):
    children = scan_children(node, required=("name",), optional=("argumentList",))
    arguments = ()
    if children["argumentList"] is not None:
        arguments = tuple(
            _parse_argument(arg_node, state_variables)
            for arg_node in find_children(children["argumentList"], "argument")
        )
    return ActionSpec(element_text(children["name"], ""), arguments)


def parse_scpd(root):
    """
    Parse an SCPD document (its root element) into a ServiceSchema.
    """
    children = scan_children(root, required=("actionList", "serviceStateTable"))

    state_variables = OrderedDict()
    for node in find_children(children["serviceStateTable"], "stateVariable"):
        statevar = _parse_state_variable(node)
        if statevar.name in state_variables:
            _log.warning("Ignoring duplicate state variable %r", statevar.name)
            continue
        state_variables[statevar.name] = statevar

    actions = OrderedDict()
    for node in find_children(children["actionList"], "action"):
        action = _parse_action(node, state_variables)
        if action.name in actions:
            _log.warning("Ignoring duplicate action %r", action.name)
            continue
        actions[action.name] = action

    _log.debug("Parsed %d actions, %d state variables", len(actions), len(state_variables))
    return ServiceSchema(actions, state_variables)


def validate_arg(arg, statevar):
    """
    Validate an incoming (unicode) string argument against a state variable
    declaration. Returns a tuple of (valid, reasons).
    """
    datatype = statevar.data_type
    reasons = set()
    try:
        if datatype in _INT_RANGES:
            v_min, v_max = _INT_RANGES[datatype]
            v = int(arg)
            if not v_min <= v <= v_max:
                reasons.add(
                    "%r datatype must be a number in the range %s to %s"
                    % (datatype.value, v_min, v_max)
                )

        elif datatype in _FLOAT_LIMITS:
            v = Decimal(str(arg))
            if abs(v) > _FLOAT_LIMITS[datatype]:
                reasons.add("%r is out of range for the %r datatype" % (arg, datatype.value))

        elif datatype is DataType.CHAR:
            v = arg.decode("utf8") if isinstance(arg, bytes) else arg
            if len(v) != 1:
                reasons.add("'char' datatype must be a single character")

        elif datatype in (DataType.STRING, DataType.UNKNOWN):
            v = arg.decode("utf8") if isinstance(arg, bytes) else str(arg)

        elif datatype is DataType.DATE:
            v = parse_date(arg)
            if any((v.hour, v.minute, v.second)):
                reasons.add("'date' datatype must not contain a time")

        elif datatype in (DataType.DATETIME, DataType.DATETIME_TZ):
            v = parse_date(arg)
            if datatype is DataType.DATETIME and v.tzinfo is not None:
                reasons.add("'dateTime' datatype must not contain a timezone")

        elif datatype in (DataType.TIME, DataType.TIME_TZ):
            # A date in the value would replace the default's date.
            now = datetime.datetime.now()
            v = parse_date(arg, default=now)
            if not all((v.day == now.day, v.month == now.month, v.year == now.year)):
                reasons.add("%r datatype must not contain a date" % datatype.value)
            if datatype is DataType.TIME and v.tzinfo is not None:
                reasons.add("%r datatype must not have timezone information" % datatype.value)

        elif datatype is DataType.BOOLEAN:
            valid = {"true", "yes", "1", "false", "no", "0"}
            if str(arg).lower() not in valid:
                reasons.add("%r datatype must be one of %s" % (
                    datatype.value, ",".join(sorted(valid))))

        elif datatype is DataType.BIN_BASE64:
            b64decode(arg, validate=True)

        elif datatype is DataType.BIN_HEX:
            unhexlify(arg)

        elif datatype is DataType.URI:
            urlparse(arg)

        elif datatype is DataType.UUID:
            if not _UUID_RE.match(arg):
                reasons.add("%r datatype must contain a valid UUID" % datatype.value)

        if statevar.allowed_values and str(arg) not in statevar.allowed_values:
            reasons.add("Value %r not in allowed values list" % arg)

        if statevar.allowed_range is not None and datatype.is_numeric:
            if Decimal(str(arg)) not in statevar.allowed_range:
                reasons.add("Value %r not in allowed range %s to %s" % (
                    arg, statevar.allowed_range.minimum, statevar.allowed_range.maximum))

    except (ValueError, TypeError, OverflowError, InvalidOperation, BinasciiError) as exc:
        reasons.add(str(exc) or exc.__class__.__name__)

    return not bool(len(reasons)), reasons

import mock

from tests.const import TEST_SCPD_TEMPLATE


def mock_response(content, status_code=200):
    """
    Build a stand-in for a `requests.Response` carrying `content`.
    """
    resp = mock.Mock()
    resp.status_code = status_code
    resp.content = content.encode("utf-8") if isinstance(content, str) else content
    return resp


def scpd_document(actions="", state_variables=""):
    return TEST_SCPD_TEMPLATE.format(actions=actions, state_variables=state_variables)


def state_variable(name, datatype="string", extra=""):
    return (
        "<stateVariable><name>%s</name><dataType>%s</dataType>%s</stateVariable>"
        % (name, datatype, extra)
    )


def argument(name, direction, related):
    return (
        "<argument><name>%s</name><direction>%s</direction>"
        "<relatedStateVariable>%s</relatedStateVariable></argument>"
        % (name, direction, related)
    )

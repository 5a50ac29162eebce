import copy

import pytest

REQUEST_EVENT = {
    "version": "1.0",
    "context": {
        "distributionDomainName": "d111111abcdef8.cloudfront.net",
        "distributionId": "EDFDVBD6EXAMPLE",
        "eventType": "viewer-request",
        "requestId": "4TyzHTaYWb1GX1qTfsHhEqV6HUDd_BzoBZnwfnvQc_1oF26ClkoUSEQ==",
    },
    "viewer": {"ip": "198.51.100.11"},
    "request": {
        "method": "GET",
        "uri": "/media/index.mpd",
        "querystring": {"ID": {"value": "42"}, "exp": {"value": "1", "multiValue": [{"value": "1"}, {"value": "2"}]}},
        "headers": {"Host": {"value": "video.example.com"}, "accept": {"value": "*/*"}},
        "cookies": {"Session": {"value": "abc", "attributes": "Secure"}},
    },
}

RESPONSE = {
    "statusCode": 200,
    "statusDescription": "OK",
    "headers": {"Content-Type": {"value": "text/html; charset=utf-8"}},
    "cookies": {},
}


@pytest.fixture
def request_event() -> dict:
    return copy.deepcopy(REQUEST_EVENT)


@pytest.fixture
def response_event() -> dict:
    raw = copy.deepcopy(REQUEST_EVENT)
    raw["context"]["eventType"] = "viewer-response"
    raw["response"] = copy.deepcopy(RESPONSE)
    return raw

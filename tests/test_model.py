import pytest

from tracking.model import AuthorizationStatus, LocationErrorCode, describe_authorization


@pytest.mark.parametrize("status, text", [
    (AuthorizationStatus.NOT_DETERMINED, "Not Determined"),
    (AuthorizationStatus.RESTRICTED, "Restricted"),
    (AuthorizationStatus.DENIED, "Denied"),
    (AuthorizationStatus.AUTHORIZED_WHEN_IN_USE, "When In Use"),
    (AuthorizationStatus.AUTHORIZED_ALWAYS, "Always"),
])
def test_authorization_descriptions(status, text):
    assert describe_authorization(status) == text


def test_missing_authorization_is_na():
    assert describe_authorization(None) == "N/A"


def test_only_granted_statuses_are_authorized():
    granted = {s for s in AuthorizationStatus if s.is_authorized}
    assert granted == {
        AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
        AuthorizationStatus.AUTHORIZED_ALWAYS,
    }


def test_location_error_messages():
    assert LocationErrorCode.DENIED.message() == "Location access denied by user."
    assert LocationErrorCode.LOCATION_UNKNOWN.message() == "Location data currently unavailable."
    assert LocationErrorCode.NETWORK.message() == "Network error with location services."
    assert LocationErrorCode.OTHER.message("boom") == "Location manager failed with error: boom"

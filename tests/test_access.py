import asyncio
from datetime import datetime

import pytest

from jobboard.errors import ConflictError, ForbiddenError
from jobboard.models.application import (
    AccessGranted,
    AccessHidden,
    AccessRequested,
    Application,
)
from jobboard.services.access import (
    access_flags,
    ensure_can_grant,
    ensure_can_request,
    grant_access,
    request_access,
    save_transition,
)

EMPLOYER_ID = "64b000000000000000000001"
ADMIN_ID = "64b000000000000000000009"
REQUESTED_AT = datetime(2024, 3, 1, 10, 0)
GRANTED_AT = datetime(2024, 3, 2, 9, 30)


def make_application(**overrides):
    data = {
        "_id": "64b0000000000000000000aa",
        "job_id": "64b0000000000000000000bb",
        "applicant_id": "64b0000000000000000000cc",
        "employer_id": EMPLOYER_ID,
        **overrides,
    }
    return Application.model_validate(data)


def test_new_application_starts_hidden():
    assert isinstance(make_application().details_access, AccessHidden)


def test_request_from_hidden():
    result = request_access(AccessHidden(), now=REQUESTED_AT)
    assert result == AccessRequested(requested_at=REQUESTED_AT)


def test_request_twice_conflicts():
    with pytest.raises(ConflictError) as exc:
        request_access(AccessRequested(requested_at=REQUESTED_AT))
    assert exc.value.detail == "Access request already pending"


def test_request_after_grant_conflicts():
    granted = AccessGranted(requested_at=REQUESTED_AT, granted_at=GRANTED_AT, granted_by=ADMIN_ID)
    with pytest.raises(ConflictError) as exc:
        request_access(granted)
    assert exc.value.detail == "Access already granted"


def test_grant_keeps_request_time_and_records_admin():
    result = grant_access(AccessRequested(requested_at=REQUESTED_AT), ADMIN_ID, now=GRANTED_AT)
    assert result.requested_at == REQUESTED_AT
    assert result.granted_at == GRANTED_AT
    assert result.granted_by == ADMIN_ID


def test_grant_without_request_conflicts():
    with pytest.raises(ConflictError) as exc:
        grant_access(AccessHidden(), ADMIN_ID)
    assert exc.value.detail == "No pending access request for this application"


def test_grant_twice_conflicts():
    granted = AccessGranted(requested_at=REQUESTED_AT, granted_at=GRANTED_AT, granted_by=ADMIN_ID)
    with pytest.raises(ConflictError):
        grant_access(granted, ADMIN_ID)


@pytest.mark.parametrize(
    "access, expected",
    [
        (AccessHidden(), (False, False)),
        (AccessRequested(requested_at=REQUESTED_AT), (True, False)),
        (AccessGranted(requested_at=REQUESTED_AT, granted_at=GRANTED_AT, granted_by=ADMIN_ID), (True, True)),
    ],
)
def test_flags_follow_state(access, expected):
    flags = access_flags(access)
    assert (flags["details_access_requested"], flags["details_access_granted"]) == expected


def test_granted_flags_carry_timestamps():
    flags = access_flags(
        AccessGranted(requested_at=REQUESTED_AT, granted_at=GRANTED_AT, granted_by=ADMIN_ID)
    )
    assert flags["details_access_requested_at"] == REQUESTED_AT
    assert flags["details_access_granted_at"] == GRANTED_AT
    assert flags["details_access_granted_by"] == ADMIN_ID


def test_hidden_flags_have_no_timestamps():
    flags = access_flags(AccessHidden())
    assert flags["details_access_requested_at"] is None
    assert flags["details_access_granted_by"] is None


def test_stored_state_round_trips_through_the_model():
    stored = {"state": "requested", "requested_at": REQUESTED_AT}
    application = make_application(details_access=stored)
    assert application.details_access == AccessRequested(requested_at=REQUESTED_AT)
    assert application.to_mongo()["details_access"] == stored


def test_only_owning_employer_may_request():
    application = make_application()
    ensure_can_request(application, {"_id": EMPLOYER_ID, "role": "employer"})

    with pytest.raises(ForbiddenError):
        ensure_can_request(application, {"_id": "64b000000000000000000002", "role": "employer"})


def test_admin_may_not_request():
    with pytest.raises(ForbiddenError):
        ensure_can_request(make_application(), {"_id": ADMIN_ID, "role": "admin"})


def test_only_admin_may_grant():
    ensure_can_grant({"_id": ADMIN_ID, "role": "admin"})
    with pytest.raises(ForbiddenError):
        ensure_can_grant({"_id": EMPLOYER_ID, "role": "employer"})


# ===========================
# PERSISTENCE
# ===========================

def stored_application(db):
    document = make_application().to_mongo()
    document["_id"] = asyncio.run(db.applications.insert_one(document)).inserted_id
    return Application.from_mongo(document)


def test_save_transition_writes_new_state(db):
    application = stored_application(db)

    updated = asyncio.run(save_transition(db, application, AccessRequested(requested_at=REQUESTED_AT)))

    assert updated.details_access.state == "requested"
    stored = asyncio.run(db.applications.find_one({}))
    assert stored["details_access"] == {"state": "requested", "requested_at": REQUESTED_AT}


def test_save_transition_from_stale_state_conflicts(db):
    stale = stored_application(db)
    asyncio.run(save_transition(db, stale, AccessRequested(requested_at=REQUESTED_AT)))

    # Second writer still holds the hidden copy it loaded earlier
    with pytest.raises(ConflictError) as exc:
        asyncio.run(save_transition(db, stale, AccessRequested(requested_at=GRANTED_AT)))
    assert exc.value.status_code == 409

    stored = asyncio.run(db.applications.find_one({}))
    assert stored["details_access"]["requested_at"] == REQUESTED_AT

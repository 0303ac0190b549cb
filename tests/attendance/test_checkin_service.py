from __future__ import annotations

import threading
from datetime import datetime

import pytest

from attendance_hub.attendance.service import CheckInService
from attendance_hub.core.enums import AttendanceStatus, Role
from attendance_hub.core.exceptions import (
    AlreadySignedError,
    DuplicateKeyError,
    ForbiddenError,
    InvalidPinError,
    MissingReferenceError,
    NotFoundError,
    SessionClosedError,
    SessionGoneError,
)
from conftest import DEPT, OTHER_DEPT, add_profile


@pytest.fixture
def session(container, hoc):
    return container.session_service.open("eec 201", DEPT, hoc.profile_id)


class RacingAttendance:
    """Pre-check sees nothing, then the insert loses to a concurrent writer."""

    def __init__(self, error: Exception):
        self._error = error

    def get_for_student_and_session(self, student_id, session_id):
        return None

    def create(self, **kwargs):
        raise self._error


def test_valid_pin_records_one_present_entry(container, session, student):
    entry = container.checkin_service.submit(
        student.profile_id, session.session_id, session.unique_code, now=datetime(2026, 3, 1, 9, 30)
    )

    assert entry.status == AttendanceStatus.PRESENT
    assert entry.department == DEPT
    assert entry.signed_at == datetime(2026, 3, 1, 9, 30)

    roster = container.checkin_service.roster(session.session_id)
    assert [r.matric_no for r in roster] == ["EEE/2021/001"]
    assert roster[0].full_name == "Bola Student"


def test_pin_must_match_exactly(container, session, student):
    with pytest.raises(InvalidPinError):
        container.checkin_service.submit(student.profile_id, session.session_id, f"  {session.unique_code} ")
    assert container.attendance_repo.count_for_session(session.session_id) == 0


def test_pin_of_a_deleted_session_fails_on_its_replacement(container, session, hoc, student):
    container.session_service.delete(session.session_id, hoc.profile_id)
    replacement = container.session_service.open("eec 201", DEPT, hoc.profile_id)
    assert replacement.unique_code != session.unique_code

    with pytest.raises(InvalidPinError):
        container.checkin_service.submit(student.profile_id, replacement.session_id, session.unique_code)
    assert container.attendance_repo.count_for_session(replacement.session_id) == 0


def test_pin_of_a_closed_session_fails_on_a_new_one(container, session, hoc, student):
    container.session_service.close(session.session_id, hoc.profile_id)
    replacement = container.session_service.open("EEC201", DEPT, hoc.profile_id)

    with pytest.raises(InvalidPinError):
        container.checkin_service.submit(student.profile_id, replacement.session_id, session.unique_code)
    container.checkin_service.submit(student.profile_id, replacement.session_id, replacement.unique_code)


def test_second_submission_is_already_signed(container, session, student):
    container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)

    with pytest.raises(AlreadySignedError):
        container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
    assert container.attendance_repo.count_for_session(session.session_id) == 1


def test_wrong_pin_is_rejected_without_writing(container, session, student):
    wrong = "000000" if session.unique_code != "000000" else "111111"
    with pytest.raises(InvalidPinError):
        container.checkin_service.submit(student.profile_id, session.session_id, wrong)
    assert container.attendance_repo.count() == 0


def test_closed_session_rejects_correct_pin(container, session, hoc, student):
    container.session_service.close(session.session_id, hoc.profile_id)

    with pytest.raises(SessionClosedError):
        container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
    assert container.attendance_repo.count() == 0


def test_wrong_pin_on_closed_session_reports_invalid_pin(container, session, hoc, student):
    container.session_service.close(session.session_id, hoc.profile_id)
    with pytest.raises(InvalidPinError):
        container.checkin_service.submit(student.profile_id, session.session_id, "99999x")


def test_deleted_session_reports_session_gone(container, session, hoc, student):
    container.session_service.delete(session.session_id, hoc.profile_id)

    with pytest.raises(SessionGoneError):
        container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)


def test_stale_view_is_rechecked_against_the_store(container, session, hoc, student):
    # the student's screen still shows the session as active
    stale_copy = container.session_service.get(session.session_id)
    container.session_service.close(session.session_id, hoc.profile_id)

    with pytest.raises(SessionClosedError):
        container.checkin_service.submit(student.profile_id, stale_copy.session_id, stale_copy.unique_code)


def test_lost_insert_race_maps_to_already_signed(container, session, student):
    svc = CheckInService(RacingAttendance(DuplicateKeyError()), container.sessions_repo)
    with pytest.raises(AlreadySignedError):
        svc.submit(student.profile_id, session.session_id, session.unique_code)


def test_session_deleted_during_insert_maps_to_session_gone(container, session, student):
    svc = CheckInService(RacingAttendance(MissingReferenceError(column="session_id")), container.sessions_repo)
    with pytest.raises(SessionGoneError):
        svc.submit(student.profile_id, session.session_id, session.unique_code)


def test_unknown_foreign_key_failure_maps_to_session_gone(container, session, student):
    svc = CheckInService(RacingAttendance(MissingReferenceError()), container.sessions_repo)
    with pytest.raises(SessionGoneError):
        svc.submit(student.profile_id, session.session_id, session.unique_code)


def test_missing_student_profile_is_not_found(container, session):
    with pytest.raises(NotFoundError):
        container.checkin_service.submit(4242, session.session_id, session.unique_code)


def test_concurrent_submissions_admit_exactly_one(container, session, student):
    barrier = threading.Barrier(8)
    outcomes = []
    lock = threading.Lock()

    def attempt():
        barrier.wait()
        try:
            container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
            result = "ok"
        except AlreadySignedError:
            result = "dup"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("dup") == 7
    assert container.attendance_repo.count_for_session(session.session_id) == 1


def test_submit_by_pin_finds_the_active_session_in_department(container, session, student):
    entry = container.checkin_service.submit_by_pin(student.profile_id, DEPT, session.unique_code)
    assert entry.session_id == session.session_id


def test_submit_by_pin_does_not_cross_departments(container, session):
    outsider = add_profile(container, "MEE/2021/009", department=OTHER_DEPT)
    with pytest.raises(InvalidPinError):
        container.checkin_service.submit_by_pin(outsider.profile_id, OTHER_DEPT, session.unique_code)


def test_submit_by_pin_ignores_closed_sessions(container, session, hoc, student):
    container.session_service.close(session.session_id, hoc.profile_id)
    with pytest.raises(InvalidPinError):
        container.checkin_service.submit_by_pin(student.profile_id, DEPT, session.unique_code)


def test_void_removes_the_entry_and_allows_signing_again(container, session, hoc, student):
    entry = container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)

    container.checkin_service.void(entry.entry_id, hoc.profile_id)
    assert container.checkin_service.roster(session.session_id) == []

    with pytest.raises(NotFoundError):
        container.checkin_service.void(entry.entry_id, hoc.profile_id)

    container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
    assert container.attendance_repo.count_for_session(session.session_id) == 1


def test_void_is_owner_only(container, session, student):
    other = add_profile(container, "HOC/002", role=Role.HOC)
    entry = container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)

    with pytest.raises(ForbiddenError):
        container.checkin_service.void(entry.entry_id, other.profile_id)


def test_history_lists_signed_sessions_newest_first(container, hoc, student):
    svc = container.session_service
    a = svc.open("EEC201", DEPT, hoc.profile_id)
    b = svc.open("EEC202", DEPT, hoc.profile_id)
    container.checkin_service.submit(student.profile_id, a.session_id, a.unique_code, now=datetime(2026, 3, 1, 9, 0))
    container.checkin_service.submit(student.profile_id, b.session_id, b.unique_code, now=datetime(2026, 3, 2, 9, 0))

    history = container.checkin_service.history_for_student(student.profile_id)
    assert [h.course_code for h in history] == ["EEC202", "EEC201"]

from __future__ import annotations

from datetime import datetime

import pytest

from attendance_hub.container import build_container
from attendance_hub.core.enums import Role
from attendance_hub.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from conftest import DEPT, OTHER_DEPT, add_profile, fixed_pins


def test_open_normalizes_course_code_and_starts_active(container, hoc):
    session = container.session_service.open("eec 201", DEPT, hoc.profile_id)

    assert session.course_code == "EEC201"
    assert session.is_active is True
    assert session.department == DEPT
    assert session.hoc_id == hoc.profile_id
    assert len(session.unique_code) == 6 and session.unique_code.isdigit()


def test_open_rejects_blank_course_code(container, hoc):
    with pytest.raises(ValidationError):
        container.session_service.open("   ", DEPT, hoc.profile_id)


def test_open_rejects_students(container, student):
    with pytest.raises(ForbiddenError):
        container.session_service.open("EEC201", DEPT, student.profile_id)


def test_open_requires_existing_profile(container):
    with pytest.raises(NotFoundError):
        container.session_service.open("EEC201", DEPT, 999)


def test_close_and_reopen_keep_the_pin(container, hoc):
    svc = container.session_service
    session = svc.open("EEC201", DEPT, hoc.profile_id)

    svc.close(session.session_id, hoc.profile_id)
    assert svc.get(session.session_id).is_active is False

    # closing again is a no-op, not an error
    svc.close(session.session_id, hoc.profile_id)

    svc.set_active(session.session_id, True, hoc.profile_id)
    reopened = svc.get(session.session_id)
    assert reopened.is_active is True
    assert reopened.unique_code == session.unique_code


def test_only_the_owner_can_mutate(container, hoc):
    other = add_profile(container, "HOC/002", role=Role.HOC)
    session = container.session_service.open("EEC201", DEPT, hoc.profile_id)

    with pytest.raises(ForbiddenError):
        container.session_service.close(session.session_id, other.profile_id)
    with pytest.raises(ForbiddenError):
        container.session_service.delete(session.session_id, other.profile_id)

    assert container.session_service.get(session.session_id).is_active is True


def test_mutating_a_deleted_session_is_not_found(container, hoc):
    svc = container.session_service
    session = svc.open("EEC201", DEPT, hoc.profile_id)
    svc.delete(session.session_id, hoc.profile_id)

    with pytest.raises(NotFoundError):
        svc.close(session.session_id, hoc.profile_id)
    with pytest.raises(NotFoundError):
        svc.delete(session.session_id, hoc.profile_id)


def test_delete_cascades_to_entries(container, hoc, student):
    session = container.session_service.open("EEC201", DEPT, hoc.profile_id)
    container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
    assert container.attendance_repo.count_for_session(session.session_id) == 1

    container.session_service.delete(session.session_id, hoc.profile_id)

    assert container.sessions_repo.get_by_id(session.session_id) is None
    assert container.attendance_repo.count_for_session(session.session_id) == 0
    assert container.checkin_service.history_for_student(student.profile_id) == []


def test_resume_active_returns_most_recent_active_session(container, hoc):
    svc = container.session_service
    first = svc.open("EEC201", DEPT, hoc.profile_id, now=datetime(2026, 3, 1, 8, 0))
    second = svc.open("EEC202", DEPT, hoc.profile_id, now=datetime(2026, 3, 1, 10, 0))

    assert svc.resume_active(hoc.profile_id).session_id == second.session_id

    svc.close(second.session_id, hoc.profile_id)
    assert svc.resume_active(hoc.profile_id).session_id == first.session_id

    svc.close(first.session_id, hoc.profile_id)
    assert svc.resume_active(hoc.profile_id) is None


def test_list_for_department_is_newest_first_and_scoped(container, hoc):
    other_hoc = add_profile(container, "HOC/ME/1", role=Role.HOC, department=OTHER_DEPT)
    svc = container.session_service
    older = svc.open("EEC201", DEPT, hoc.profile_id, now=datetime(2026, 3, 1, 8, 0))
    newer = svc.open("EEC202", DEPT, hoc.profile_id, now=datetime(2026, 3, 2, 8, 0))
    svc.open("MEE301", OTHER_DEPT, other_hoc.profile_id)

    listed = svc.list_for_department(DEPT)
    assert [s.session_id for s in listed] == [newer.session_id, older.session_id]


def test_new_pin_avoids_codes_already_active_in_department():
    container = build_container(backend="memory", pin_generator=fixed_pins([111111, 111111, 222222]))
    hoc = add_profile(container, "HOC/001", role=Role.HOC)

    first = container.session_service.open("EEC201", DEPT, hoc.profile_id)
    second = container.session_service.open("EEC202", DEPT, hoc.profile_id)

    assert first.unique_code == "111111"
    assert second.unique_code == "222222"


def test_pin_of_a_closed_session_may_be_reused():
    container = build_container(backend="memory", pin_generator=fixed_pins([111111, 111111]))
    hoc = add_profile(container, "HOC/001", role=Role.HOC)

    first = container.session_service.open("EEC201", DEPT, hoc.profile_id)
    container.session_service.close(first.session_id, hoc.profile_id)
    second = container.session_service.open("EEC202", DEPT, hoc.profile_id)

    assert second.unique_code == "111111"


def test_reopening_an_active_session_changes_nothing(container, hoc, student):
    svc = container.session_service
    session = svc.open("EEC201", DEPT, hoc.profile_id)
    container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)

    svc.set_active(session.session_id, True, hoc.profile_id)

    again = svc.get(session.session_id)
    assert again.is_active is True
    assert again.unique_code == session.unique_code
    assert container.attendance_repo.count_for_session(session.session_id) == 1

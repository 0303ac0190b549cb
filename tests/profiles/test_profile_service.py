from __future__ import annotations

import pytest

from attendance_hub.core.enums import Role
from attendance_hub.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from conftest import DEPT, OTHER_DEPT, add_profile


def _register(container, **overrides):
    data = dict(
        full_name="Chidi Okafor",
        matric_no="eee/2021/010",
        level=200,
        department=DEPT,
        password="secret-pw",
        signature="data:image/png;base64,AAAA",
    )
    data.update(overrides)
    return container.auth_service.register(**data)


def test_register_student_and_login(container):
    profile = _register(container)

    assert profile.role == Role.STUDENT
    assert profile.matric_no == "EEE/2021/010"
    assert profile.password_hash != "secret-pw"

    logged_in = container.auth_service.authenticate(" eee/2021/010 ", "secret-pw")
    assert logged_in.profile_id == profile.profile_id


def test_wrong_password_is_rejected(container):
    _register(container)
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("EEE/2021/010", "nope-nope")
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("EEE/2099/999", "secret-pw")


def test_hoc_registration_requires_secret(container):
    with pytest.raises(AuthenticationError):
        _register(container, is_hoc=True, hoc_secret="guess")

    hoc = _register(container, matric_no="HOC/9", is_hoc=True, hoc_secret="secret")
    assert hoc.role == Role.HOC


def test_duplicate_matric_number_is_rejected(container):
    _register(container)
    with pytest.raises(ValidationError):
        _register(container, matric_no="EEE/2021/010")


@pytest.mark.parametrize(
    "field,value",
    [
        ("full_name", " "),
        ("department", ""),
        ("password", "12345"),
        ("signature", ""),
        ("level", 150),
        ("level", "abc"),
    ],
)
def test_register_validates_input(container, field, value):
    with pytest.raises(ValidationError):
        _register(container, **{field: value})


def test_update_level(container, student):
    updated = container.profile_service.update_level(student.profile_id, "300")
    assert updated.level == 300

    with pytest.raises(ValidationError):
        container.profile_service.update_level(student.profile_id, 1000)
    with pytest.raises(NotFoundError):
        container.profile_service.update_level(999, 300)


def test_department_directory_lists_students_only_with_search(container, hoc):
    add_profile(container, "EEE/2021/002", name="Grace Obi")
    add_profile(container, "EEE/2021/001", name="Tunde Bello")
    add_profile(container, "MEE/2021/001", name="Outside Person", department=OTHER_DEPT)

    all_students = container.profile_service.department_students(DEPT)
    assert [s.matric_no for s in all_students] == ["EEE/2021/001", "EEE/2021/002"]

    assert [s.full_name for s in container.profile_service.department_students(DEPT, "grace")] == ["Grace Obi"]
    assert [s.full_name for s in container.profile_service.department_students(DEPT, "2021/001")] == ["Tunde Bello"]

from __future__ import annotations

import itertools
from typing import Iterable

import pytest

from attendance_hub.container import build_container
from attendance_hub.core.enums import Role
from attendance_hub.database.bootstrap import DEMO_SIGNATURE
from attendance_hub.main import create_app
from attendance_hub.sessions.pin import PinGenerator

DEPT = "Electrical Electronics Engineering"
OTHER_DEPT = "Mechanical Engineering"


def fixed_pins(values: Iterable[int]) -> PinGenerator:
    it = iter(values)
    return PinGenerator(randbelow=lambda _upper: next(it))


def add_profile(container, matric_no: str, *, role: Role = Role.STUDENT, department: str = DEPT, name: str = ""):
    return container.profiles_repo.create(
        full_name=name or f"Person {matric_no}",
        matric_no=matric_no,
        level=200,
        department=department,
        role=role,
        signature=DEMO_SIGNATURE,
        password_hash="-",
    )


@pytest.fixture
def container():
    counter = itertools.count(123456)
    return build_container(
        backend="memory",
        hoc_secret="secret",
        public_base_url="http://testserver",
        pin_generator=PinGenerator(randbelow=lambda _upper: next(counter)),
    )


@pytest.fixture
def hoc(container):
    return add_profile(container, "HOC/001", role=Role.HOC, name="Ada HOC")


@pytest.fixture
def student(container):
    return add_profile(container, "EEE/2021/001", name="Bola Student")


@pytest.fixture
def app():
    return create_app("attendance_hub.settings.testing")


@pytest.fixture
def client(app):
    return app.test_client()

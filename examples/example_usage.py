"""Example: drive the service layer directly (no Flask, in-memory store).

An HOC opens a session, a live view follows it, a student signs in twice.
"""

from attendance_hub.container import build_container
from attendance_hub.core.enums import Role
from attendance_hub.core.exceptions import AlreadySignedError
from attendance_hub.database.bootstrap import DEMO_SIGNATURE


def main():
    container = build_container(backend="memory", public_base_url="http://localhost:5000")
    dept = "Electrical Electronics Engineering"

    hoc = container.profiles_repo.create(
        full_name="Ada HOC", matric_no="HOC/001", level=400, department=dept,
        role=Role.HOC, signature=DEMO_SIGNATURE, password_hash="-",
    )
    student = container.profiles_repo.create(
        full_name="Bola Student", matric_no="EEE/2021/001", level=200, department=dept,
        role=Role.STUDENT, signature=DEMO_SIGNATURE, password_hash="-",
    )

    session = container.session_service.open("eec 201", dept, hoc.profile_id)
    print("opened", session.course_code, "PIN", session.unique_code)
    print("join", container.join_resolver.build_join_url(session.unique_code))

    with container.make_projector(dept) as view:
        view.select_session(session.session_id)
        container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
        view.refresh_pending()
        print("roster", [r.full_name for r in view.roster])

        try:
            container.checkin_service.submit(student.profile_id, session.session_id, session.unique_code)
        except AlreadySignedError as exc:
            print("second attempt:", exc)


if __name__ == "__main__":
    main()

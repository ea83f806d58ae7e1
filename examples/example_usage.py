"""Example: drive the sign-in desk through the service layer (no Flask).

Controllers are a thin layer; the operations live on ``SignInDesk``.
"""

from src.signin_desk.signin_desk.container import build_container


def main():
    container = build_container(storage_backend="memory")
    desk = container.desk

    started = desk.start_sign_in_session("Drop-in", None, "individual")
    session_id = started["session"]["id"]
    signed = desk.record_student_sign_in(
        session_id, {"id": "S100", "firstName": "Ana", "lastName": "Lopez", "grade": "9th"}
    )
    print(signed)

    row = signed["rowIndex"]
    print(desk.claim_rows([row], "staffA"))
    print(desk.save_individual_contact_session(None, [{"id": "S100"}], {"topic": "Check-in"}, [row]))
    print(desk.list_queue())


if __name__ == "__main__":
    main()

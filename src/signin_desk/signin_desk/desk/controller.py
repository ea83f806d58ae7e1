from __future__ import annotations

from typing import Any, Callable

from flask import Flask, jsonify, request

from ..app_logger import get_logger
from ..container import Container
from ..core.exceptions import ConfigurationError

logger = get_logger("http")


def register(app: Flask, container: Container) -> None:
    desk = container.desk

    def _body() -> dict[str, Any]:
        return request.get_json(silent=True) or {}

    def _staff() -> str:
        return (request.headers.get("X-Staff-Email") or "").strip()

    def _respond(operation: str, fn: Callable[[], Any]):
        try:
            return jsonify(fn()), 200
        except ConfigurationError:
            logger.exception("%s: configuration error", operation)
            return jsonify({"ok": False, "error": "Server configuration error."}), 500
        except Exception:
            logger.exception("%s: unexpected error", operation)
            return jsonify({"ok": False, "error": "Unexpected server error."}), 500

    @app.route("/ping", methods=["GET"], endpoint="ping")
    def ping():
        return jsonify({"ok": True})

    # ---------- sign-in sessions ----------

    @app.route("/api/sign-in/sessions", methods=["POST"], endpoint="start_sign_in_session")
    def start_sign_in_session():
        data = _body()
        return _respond(
            "startSignInSession",
            lambda: desk.start_sign_in_session(data.get("label"), data.get("date"), data.get("type")),
        )

    @app.route("/api/sign-in/sessions", methods=["GET"], endpoint="list_active_sign_in_sessions")
    def list_active_sign_in_sessions():
        return _respond("listActiveSignInSessions", lambda: desk.list_active_sign_in_sessions(request.args.get("date")))

    @app.route("/api/sign-in/sessions/<session_id>/end", methods=["POST"], endpoint="end_sign_in_session")
    def end_sign_in_session(session_id: str):
        return _respond("endSignInSession", lambda: desk.end_sign_in_session(session_id))

    @app.route("/api/sign-in/sessions/<session_id>/students", methods=["POST"], endpoint="record_student_sign_in")
    def record_student_sign_in(session_id: str):
        data = _body()
        return _respond("recordStudentSignIn", lambda: desk.record_student_sign_in(session_id, data.get("student") or data))

    @app.route("/api/sign-in/sessions/<session_id>/students/batch", methods=["POST"], endpoint="record_student_batch")
    def record_student_batch(session_id: str):
        data = _body()
        return _respond("recordStudentBatch", lambda: desk.record_student_batch(session_id, data.get("students")))

    # ---------- people ----------

    @app.route("/api/people/suggest", methods=["GET"], endpoint="suggest_people")
    def suggest_people():
        return _respond("suggestPeople", lambda: desk.suggest_people(request.args.get("q", ""), request.args.get("limit")))

    @app.route("/api/people/<person_id>", methods=["GET"], endpoint="lookup_sign_in_by_id")
    def lookup_sign_in_by_id(person_id: str):
        return _respond("lookupSignInById", lambda: desk.lookup_sign_in_by_id(person_id))

    @app.route("/api/people/<person_id>/status", methods=["GET"], endpoint="check_id_status")
    def check_id_status(person_id: str):
        return _respond("checkIdStatus", lambda: desk.check_id_status(person_id))

    @app.route("/api/people/names", methods=["POST"], endpoint="get_names_for_ids")
    def get_names_for_ids():
        data = _body()
        return _respond("getNamesForIds", lambda: desk.get_names_for_ids(data.get("ids")))

    @app.route("/api/people/bootstrap", methods=["POST"], endpoint="bootstrap_known_students")
    def bootstrap_known_students():
        return _respond("bootstrapKnownStudents", desk.bootstrap_known_students)

    @app.route("/api/mentors", methods=["GET"], endpoint="get_mentors")
    def get_mentors():
        active_only = request.args.get("active", "1").strip().lower() not in {"0", "false", "no"}
        return _respond("getMentors", lambda: desk.get_mentors(active_only))

    # ---------- queue ----------

    @app.route("/api/queue", methods=["GET"], endpoint="list_queue")
    def list_queue():
        return _respond("listQueue", lambda: desk.list_queue(request.args.get("date"), _staff()))

    @app.route("/api/queue/sign-ins", methods=["GET"], endpoint="get_sign_ins_by_date")
    def get_sign_ins_by_date():
        return _respond("getSignInsByDate", lambda: desk.get_sign_ins_by_date(request.args.get("date")))

    @app.route("/api/queue/claim", methods=["POST"], endpoint="claim_rows")
    def claim_rows():
        data = _body()
        return _respond("claimRows", lambda: desk.claim_rows(data.get("rowKeys"), data.get("claimant") or _staff()))

    @app.route("/api/queue/processed", methods=["POST"], endpoint="mark_processed")
    def mark_processed():
        data = _body()
        return _respond("markProcessed", lambda: desk.mark_processed(data.get("rowKeys"), data.get("contactId")))

    @app.route("/api/queue/processed-by-ids", methods=["POST"], endpoint="mark_processed_by_ids")
    def mark_processed_by_ids():
        data = _body()
        return _respond(
            "markProcessedByIds",
            lambda: desk.mark_processed_by_ids(data.get("date"), data.get("ids"), data.get("contactId"), data.get("status")),
        )

    # ---------- group notes ----------

    @app.route("/api/group-notes/session", methods=["POST"], endpoint="create_or_update_group_contact_session")
    def create_or_update_group_contact_session():
        data = _body()
        return _respond(
            "createOrUpdateGroupContactSession",
            lambda: desk.create_or_update_group_contact_session(
                data.get("date"), data.get("group"), data.get("topic"), data.get("summary"), data.get("durationMinutes")
            ),
        )

    @app.route("/api/group-notes", methods=["POST"], endpoint="save_full_group_note")
    def save_full_group_note():
        data = _body()
        return _respond(
            "saveFullGroupNote",
            lambda: desk.save_full_group_note(
                data.get("date"),
                data.get("group"),
                data.get("topic"),
                data.get("summary"),
                data.get("durationMinutes"),
                data.get("participants"),
                data.get("mentors"),
            ),
        )

    @app.route("/api/group-notes/<contact_id>/participants", methods=["PUT"], endpoint="save_group_participants")
    def save_group_participants(contact_id: str):
        data = _body()
        return _respond("saveGroupParticipants", lambda: desk.save_group_participants(contact_id, data.get("participants")))

    @app.route("/api/group-notes/<contact_id>/mentors", methods=["PUT"], endpoint="save_group_mentors")
    def save_group_mentors(contact_id: str):
        data = _body()
        return _respond("saveGroupMentors", lambda: desk.save_group_mentors(contact_id, data.get("mentors")))

    @app.route("/api/group-notes/latest", methods=["GET"], endpoint="get_latest_group_contact_session")
    def get_latest_group_contact_session():
        return _respond(
            "getLatestGroupContactSession",
            lambda: desk.get_latest_group_contact_session(request.args.get("date"), request.args.get("group")),
        )

    @app.route("/api/group-notes/prefill", methods=["GET"], endpoint="get_group_prefill")
    def get_group_prefill():
        return _respond(
            "getGroupPrefill",
            lambda: desk.get_group_prefill(request.args.get("date"), request.args.getlist("group")),
        )

    # ---------- individual notes ----------

    @app.route("/api/individual-notes", methods=["POST"], endpoint="save_individual_contact_session")
    def save_individual_contact_session():
        data = _body()
        return _respond(
            "saveIndividualContactSession",
            lambda: desk.save_individual_contact_session(
                data.get("date"), data.get("people"), data.get("payload"), data.get("queueRowKeys")
            ),
        )

    @app.route("/api/individual-notes/recent", methods=["POST"], endpoint="list_recent_contacts_for_ids")
    def list_recent_contacts_for_ids():
        data = _body()
        return _respond(
            "listRecentContactsForIds",
            lambda: desk.list_recent_contacts_for_ids(data.get("ids"), data.get("perId")),
        )

"""Table layouts.

Aliases are normalized header keys (see ``common.text.norm_key``), tried in order.
"""

from __future__ import annotations

from .schema import Column, TableSchema

SIGN_IN_LOG = TableSchema(
    name="sign_in_log",
    columns=(
        Column("timestamp", ("timestamp", "date", "signindate"), "Timestamp"),
        Column("person_id", ("idnumber", "id", "studentid", "cpsid"), "ID number"),
        Column(
            "display_name",
            ("firstnamelastname", "name", "fullname", "studentname", "firstlast", "fullnamestudent"),
            "First Name + Last Name",
        ),
        Column("school", ("school", "site"), "School"),
        Column("mentor", ("mentor", "mentorid", "staff", "advisor"), "Mentor"),
        Column("status", ("status",), "Status"),
        Column("claimed_by", ("claimedby",), "ClaimedBy"),
        Column("claimed_at", ("claimedat",), "ClaimedAt"),
        Column("processed_at", ("processedat",), "ProcessedAt"),
        Column("contact_id", ("contactid",), "ContactID"),
        Column("group", ("group", "sessionlabel"), optional=True),
    ),
)

KNOWN_STUDENTS = TableSchema(
    name="known_students",
    columns=(
        Column("person_id", ("studentid", "id", "cpsid", "cpsidnumber"), "StudentID"),
        Column("first_name", ("firstname", "first"), "FirstName"),
        Column("last_name", ("lastname", "last"), "LastName"),
        Column("school", ("school", "site"), "School"),
        Column("email", ("email", "emailaddress"), "Email"),
        Column("grade", ("grade", "currentgrade", "currentgradelevel"), "Grade"),
        Column("created_at", ("createdat", "created"), "CreatedAt"),
        Column("last_sign_in", ("lastsignin", "lastsignedin"), "LastSignIn"),
    ),
)

SIGN_IN_SESSIONS = TableSchema(
    name="sign_in_sessions",
    columns=(
        Column("session_id", ("sessionid", "id"), "SessionID"),
        Column("label", ("label", "group", "name"), "Label"),
        Column("type", ("type", "sessiontype"), "Type"),
        Column("date", ("date", "ymd"), "Date"),
        Column("is_active", ("isactive", "active"), "IsActive"),
        Column("created_at", ("createdat",), "CreatedAt"),
        Column("closed_at", ("closedat", "closed"), "ClosedAt"),
        Column("last_sign_in_at", ("lastsigninat", "lastsignin"), "LastSignInAt"),
        Column("sign_in_count", ("signincount", "signins"), "SignInCount"),
    ),
)

GROUP_CONTACT_SESSIONS = TableSchema(
    name="group_contact_sessions",
    columns=(
        Column("contact_id", ("contactid",), "ContactID"),
        Column("date", ("date",), "Date"),
        Column("group", ("group",), "Group"),
        Column("topic", ("topic", "subject"), "Topic"),
        Column("summary", ("summary", "note", "notes", "description"), "Summary"),
        Column("duration_minutes", ("durationminutes", "duration", "minutes", "mins"), "DurationMinutes"),
        Column("created_at", ("createdat",), "CreatedAt"),
        Column("edited_at", ("editedat", "lastedited", "updated"), "EditedAt"),
    ),
)

GROUP_CONTACT_PARTICIPANTS = TableSchema(
    name="group_contact_participants",
    columns=(
        Column("contact_id", ("contactid",), "ContactID"),
        Column("student_id", ("studentid", "id", "cpsid"), "StudentID"),
        Column("first_name", ("firstname", "first"), "FirstName"),
        Column("last_name", ("lastname", "last"), "LastName"),
        Column("created_at", ("createdat",), "CreatedAt"),
        Column("edited_at", ("editedat", "lastedited", "updated"), "EditedAt"),
    ),
)

GROUP_CONTACT_MENTORS = TableSchema(
    name="group_contact_mentors",
    columns=(
        Column("contact_id", ("contactid",), "ContactID"),
        Column("mentor_id", ("mentorid", "id", "staffid"), "MentorID"),
        Column("name", ("name", "mentorname", "fullname"), "Name"),
        Column("created_at", ("createdat",), "CreatedAt"),
        Column("edited_at", ("editedat", "lastedited", "updated"), "EditedAt"),
    ),
)

INDIVIDUAL_CONTACT_SESSIONS = TableSchema(
    name="individual_contact_sessions",
    columns=(
        Column("contact_id", ("contactid",), "ContactID"),
        Column("date", ("date",), "Date"),
        Column("duration_minutes", ("durationminutes", "minutes", "duration"), "DurationMinutes"),
        Column("contact_with", ("contactwith", "with"), "ContactWith"),
        Column("type_of_contact", ("typeofcontact", "channel", "type"), "TypeOfContact"),
        Column("topic", ("topic", "topicprimary"), "Topic"),
        Column("success", ("success", "outcome"), "Success"),
        Column("notes", ("notes", "summary", "description"), "Notes"),
        Column("referrals", ("referrals", "referralsmade"), "Referrals"),
        Column("location", ("location", "place"), "Location"),
        Column("mentor_id", ("mentorid", "mentor"), "MentorID"),
        Column("created_at", ("createdat", "created"), "CreatedAt"),
        Column("edited_at", ("editedat", "lastedited", "updated"), "EditedAt"),
    ),
)

INDIVIDUAL_CONTACT_PARTICIPANTS = TableSchema(
    name="individual_contact_participants",
    columns=(
        Column("contact_id", ("contactid",), "ContactID"),
        Column("student_id", ("studentid", "id", "cpsid", "participantid"), "StudentID"),
        Column("notes_student", ("notesstudent", "studentnotes"), "NotesStudent"),
        Column("created_at", ("createdat",), "CreatedAt"),
    ),
)

OWNED_TABLES = (
    SIGN_IN_LOG,
    KNOWN_STUDENTS,
    SIGN_IN_SESSIONS,
    GROUP_CONTACT_SESSIONS,
    GROUP_CONTACT_PARTICIPANTS,
    GROUP_CONTACT_MENTORS,
    INDIVIDUAL_CONTACT_SESSIONS,
    INDIVIDUAL_CONTACT_PARTICIPANTS,
)


def attendance_schema(name: str = "attendance") -> TableSchema:
    """Externally managed attendance table. Must exist; its header is never extended."""
    return TableSchema(
        name=name,
        columns=(
            Column("timestamp", ("timestamp", "date"), "Timestamp"),
            Column("first_name", ("firstname", "first"), "First Name", optional=True),
            Column("last_name", ("lastname", "last"), "Last Name", optional=True),
            Column("contact", ("contact", "email", "emailaddress"), "Contact", optional=True),
            Column("school_year", ("schoolyear", "grade"), "School Year", optional=True),
            Column("school", ("school", "site"), "School", optional=True),
            Column("person_id", ("idnumber", "id", "studentid", "cpsid"), "ID Number"),
            Column("group", ("group", "session", "label"), "Group", optional=True),
        ),
        create_if_missing=False,
        extend_header=False,
    )


def roster_schema(name: str) -> TableSchema:
    """Intake/roster form submissions. Read-only."""
    return TableSchema(
        name=name,
        columns=(
            Column("timestamp", ("timestamp",), "Timestamp"),
            Column("email", ("emailaddress", "email"), "Email Address"),
            Column("first_name", ("firstname", "first", "givenname"), "First Name"),
            Column("last_name", ("lastname", "last", "surname", "familyname"), "Last Name"),
            Column("full_name", ("firstnamelastname", "fullname", "name", "studentname")),
            Column("alt_email", ("participantemails", "participantemail")),
            Column("grade", ("currentgradelevel", "currentgrade", "grade"), "Current Grade Level"),
            Column("grade_at_intake", ("gradeatintake",), "Grade at Intake"),
            Column("school", ("school", "site"), "School"),
            Column("person_id", ("cpsidnumber", "cpsid", "idnumber", "studentid", "id"), "CPS ID Number"),
        ),
        create_if_missing=False,
        extend_header=False,
    )


def mentors_schema(name: str = "mentors") -> TableSchema:
    return TableSchema(
        name=name,
        columns=(
            Column("mentor_id", ("mentorid", "id", "employeeid", "staffid"), "MentorID"),
            Column("first_name", ("firstname", "first"), "FirstName"),
            Column("last_name", ("lastname", "last"), "LastName"),
            Column("active", ("active", "isactive", "enabled", "status"), "Active"),
        ),
        create_if_missing=False,
        extend_header=False,
    )

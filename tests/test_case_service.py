import datetime

from app.services.case_service import CaseService

OWNER = "demo@entrada.app"


def _full_record():
    return {f"field_{i}": "answered" for i in range(95)}


def test_create_case_defaults(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER, minor_name="John Doe")
    assert case.id
    assert case.status == "draft"
    assert case.form_data == {"minor_name": "John Doe"}
    assert case.minor_name == "John Doe"
    assert case.completion_percentage == 1
    assert case.collaborators == []


def test_save_form_data_moves_between_draft_and_ready(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER)

    saved = svc.save_form_data(case.id, _full_record())
    assert saved.completion_percentage == 100
    assert saved.status == "ready"

    saved = svc.save_form_data(case.id, {"minor_name": "John Doe"})
    assert saved.completion_percentage == 1
    assert saved.status == "draft"
    assert saved.minor_name == "John Doe"


def test_save_form_data_keeps_generated_status(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER, initial_data={"minor_name": "John Doe"})
    svc.mark_generated(case.id, {"GC-210": {"name": "GC-210.pdf", "size": 10, "s3_key": None}})

    saved = svc.save_form_data(case.id, {"minor_name": "John Doe", "minor_dob": "2010-05-15"})
    assert saved.status == "generated"
    assert saved.generated_pdfs["GC-210"]["size"] == 10


def test_save_form_data_uses_given_percentage(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER)
    assert svc.save_form_data(case.id, {"a": "b"}, completion_percentage=42).completion_percentage == 42


def test_save_form_data_missing_case(db_session):
    assert CaseService(db_session).save_form_data("missing", {"a": "b"}) is None


def test_update_case_sets_metadata_and_answers(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER)
    updated = svc.update_case(case.id, {
        "notes": "Call the aunt on Friday",
        "last_section_completed": "guardian",
        "collaborators": ["paralegal@entrada.app"],
        "form_data": {"minor_name": "Ana Lopez"},
        "owner": "someone-else@entrada.app",
    })
    assert updated.notes == "Call the aunt on Friday"
    assert updated.last_section_completed == "guardian"
    assert updated.collaborators == ["paralegal@entrada.app"]
    assert updated.minor_name == "Ana Lopez"
    assert updated.owner == OWNER


def test_list_cases_scoped_sorted_and_searchable(db_session):
    svc = CaseService(db_session)
    older = svc.create_case(OWNER, initial_data={"minor_name": "John Doe", "country_of_birth": "Guatemala"})
    newer = svc.create_case(OWNER, initial_data={"minor_name": "Ana Lopez"})
    svc.create_case("other@entrada.app", initial_data={"minor_name": "John Other"})

    older.updated_at = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)
    newer.updated_at = datetime.datetime(2026, 2, 1, tzinfo=datetime.timezone.utc)
    db_session.commit()

    assert [c.id for c in svc.list_cases(OWNER)] == [newer.id, older.id]
    assert [c.id for c in svc.list_cases(OWNER, q="john")] == [older.id]
    assert [c.id for c in svc.list_cases(OWNER, q="guatemala")] == [older.id]
    assert svc.list_cases(OWNER, q="nobody") == []
    assert [c.id for c in svc.list_cases(OWNER, skip=1, limit=1)] == [older.id]


def test_delete_case(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER)
    assert svc.delete_case(case.id)
    assert svc.get_case(case.id) is None
    assert not svc.delete_case(case.id)


def test_get_owned_case(db_session):
    svc = CaseService(db_session)
    case = svc.create_case(OWNER)
    assert svc.get_owned_case(case.id, OWNER).id == case.id
    assert svc.get_owned_case(case.id, "stranger@example.com") is None
    assert svc.get_owned_case("missing", OWNER) is None

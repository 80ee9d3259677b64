import pytest
from lupon_client.complaints import (
    ComplaintDraft,
    Party,
    Referral,
    next_case_id,
    residents_from_payload,
    validate_parties,
)
from lupon_client.errors import ValidationError
from pydantic import ValidationError as PydanticValidationError


def test_party_identity_prefers_resident_id():
    assert Party(id=12, firstname="Juan").identity == "id:12"
    assert Party(firstname=" Juan ", lastname="Dela  Cruz").identity == "name:dela cruz juan"
    assert Party(name="JUAN DELA CRUZ").identity == "name:juan dela cruz"
    assert Party().identity is None


def test_party_display_name():
    assert Party(firstname="Juan", lastname="Dela Cruz", middlename="Santos").display_name == (
        "DELA CRUZ, JUAN SANTOS"
    )
    assert Party(name="Maria Reyes ").display_name == "Maria Reyes"
    assert Party(id=3).display_name == "RESIDENT #3"


@pytest.mark.parametrize(
    ("complainant", "respondent", "witness", "message"),
    [
        (Party(id=1), Party(id=1), None, "Complainant and respondent cannot be the same person"),
        (Party(id=1), Party(id=2), Party(id=1), "Complainant and witness cannot be the same person"),
        (
            Party(id=1),
            Party(firstname="Ana", lastname="Cruz"),
            Party(firstname="ana", lastname="CRUZ"),
            "Respondent and witness cannot be the same person",
        ),
    ],
)
def test_duplicate_parties_rejected(complainant, respondent, witness, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_parties(complainant, respondent, witness)
    assert excinfo.value.message == message
    assert excinfo.value.code == "DUPLICATE_PARTY"


def test_distinct_parties_pass():
    validate_parties(Party(id=1), Party(id=2), Party(name="Pedro"))
    validate_parties(Party(id=1), Party(id=2), Party())


@pytest.mark.parametrize(
    ("year", "last_id", "expected"),
    [
        (2025, None, 2025001),
        (2025, 2025001, 2025002),
        (2025, "2025041", 2025042),
        (2026, 2025999, 2026001),
    ],
)
def test_next_case_id(year, last_id, expected):
    assert next_case_id(year, last_id) == expected


def test_draft_requires_title():
    with pytest.raises(PydanticValidationError):
        ComplaintDraft(case_title="   ", complainant=Party(id=1), respondent=Party(id=2))


def test_draft_requires_both_parties():
    draft = ComplaintDraft(case_title="Noise", complainant=Party(id=1), respondent=Party())
    with pytest.raises(ValidationError) as excinfo:
        draft.validate_parties()
    assert excinfo.value.code == "MISSING_PARTY"


def test_draft_form_fields():
    draft = ComplaintDraft(
        case_title="  Unpaid debt ",
        nature_of_case="Civil",
        complainant=Party(id=1),
        respondent=Party(firstname="Ana", lastname="Cruz", purok="3"),
        witness=Party(),
        user_id=9,
    )
    draft.validate_parties()
    fields = draft.form_fields()

    assert fields["case_title"] == "Unpaid debt"
    assert fields["complainant"] == {"id": 1}
    assert fields["respondent"] == {"firstname": "Ana", "lastname": "Cruz", "purok": "3"}
    assert "witness" not in fields
    assert fields["user_id"] == 9


def test_referral_row_parses_parties_and_local_date():
    referral = Referral.model_validate(
        {
            "id": 4,
            "original_complaint_id": 2025003,
            "case_title": "Unpaid debt",
            "complainant": {"id": 1, "firstname": "Juan", "lastname": "Dela Cruz"},
            "respondent": {"id": 2, "firstname": "Pedro", "lastname": "Reyes"},
            "witness": None,
            "referred_to": "Municipal Trial Court",
            "date_referred": "2025-07-14T17:30:00.000Z",
            "status": "Pending",
        }
    )
    assert referral.complainant.display_name == "DELA CRUZ, JUAN"
    assert referral.witness is None
    assert referral.date_referred == "2025-07-15"


def test_residents_from_payload():
    residents = residents_from_payload(
        [{"id": 1, "firstname": "Ana", "lastname": "Cruz", "purok": "3"}, {"id": 2, "name": "Ben Go"}]
    )
    assert [r.identity for r in residents] == ["id:1", "id:2"]
    assert residents[0].purok == "3"

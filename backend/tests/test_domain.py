"""
Tests for application entities and value objects
"""
from datetime import date
from uuid import uuid4

import pytest

from core.exceptions import ValidationException
from domain.entities import NewApplication, TimelineEntry, normalize_patch
from domain.enums import ApplicationStatus, LocationType, Platform, SalaryCurrency, SalaryPeriod
from domain.value_objects import Location, SalaryRange, WalletAddress


class TestNewApplication:
    """Creation payload"""

    def test_from_dict_coerces_values(self, acme_fields):
        draft = NewApplication.from_dict(acme_fields).validate()
        assert draft.platform == Platform.LINKEDIN
        assert draft.application_date == date(2024, 3, 1)
        assert draft.status == ApplicationStatus.PENDIENTE
        assert draft.is_priority is False

    def test_owner_key_is_ignored(self, acme_fields):
        draft = NewApplication.from_dict({**acme_fields, "wallet_address": "SOMEONE", "id": "x"})
        assert not hasattr(draft, "wallet_address")

    @pytest.mark.parametrize("field", ["company_name", "position_title", "platform"])
    def test_missing_required_field(self, acme_fields, field):
        data = dict(acme_fields)
        data.pop(field)
        with pytest.raises(ValidationException) as exc_info:
            NewApplication.from_dict(data)
        assert exc_info.value.field == field

    def test_blank_company_rejected(self, acme_fields):
        with pytest.raises(ValidationException):
            NewApplication.from_dict({**acme_fields, "company_name": "   "})

    def test_unknown_field_rejected(self, acme_fields):
        with pytest.raises(ValidationException) as exc_info:
            NewApplication.from_dict({**acme_fields, "salary": 100})
        assert exc_info.value.field == "salary"

    def test_invalid_enum_rejected(self, acme_fields):
        with pytest.raises(ValidationException) as exc_info:
            NewApplication.from_dict({**acme_fields, "status": "ghosted"}).validate()
        assert exc_info.value.field == "status"

    def test_negative_salary_rejected(self, acme_fields):
        with pytest.raises(ValidationException):
            NewApplication.from_dict({**acme_fields, "salary_min": -1}).validate()

    def test_inverted_salary_is_accepted(self, acme_fields):
        draft = NewApplication.from_dict({**acme_fields, "salary_min": 5000, "salary_max": 1000}).validate()
        assert draft.salary_min == 5000
        assert draft.salary_max == 1000

    def test_platform_other_only_for_otro(self, acme_fields):
        draft = NewApplication.from_dict({**acme_fields, "platform_other": "Meetup"}).validate()
        assert draft.platform_other is None

        draft = NewApplication.from_dict(
            {**acme_fields, "platform": "otro", "platform_other": " Meetup "}
        ).validate()
        assert draft.platform_other == "Meetup"

    def test_city_only_for_presencial(self, acme_fields):
        draft = NewApplication.from_dict(
            {**acme_fields, "location_type": "remoto", "location_city": "CDMX"}
        ).validate()
        assert draft.location_city is None

        draft = NewApplication.from_dict(
            {**acme_fields, "location_type": "presencial", "location_city": "CDMX"}
        ).validate()
        assert draft.location_city == "CDMX"


class TestNormalizePatch:
    """Full-update payload"""

    def test_empty_patch(self):
        with pytest.raises(ValidationException):
            normalize_patch({})

    @pytest.mark.parametrize("field", ["id", "wallet_address", "created_at", "updated_at"])
    def test_protected_fields(self, field):
        with pytest.raises(ValidationException) as exc_info:
            normalize_patch({field: "x"})
        assert exc_info.value.field == field

    def test_required_field_cannot_be_blanked(self):
        with pytest.raises(ValidationException):
            normalize_patch({"position_title": ""})

    def test_values_are_normalized(self):
        patch = normalize_patch({
            "status": "en_revision",
            "application_date": "2024-05-02",
            "salary_currency": "MXN",
            "personal_notes": "  ",
            "company_name": " Acme ",
        })
        assert patch == {
            "status": ApplicationStatus.EN_REVISION,
            "application_date": date(2024, 5, 2),
            "salary_currency": SalaryCurrency.MXN,
            "personal_notes": None,
            "company_name": "Acme",
        }


class TestApplicationEntity:
    """Derived properties"""

    def test_salary_absent(self, make_application):
        assert make_application().salary is None

    def test_salary_not_specified(self, make_application):
        app = make_application(salary_not_specified=True)
        assert str(app.salary) == "No especificado"

    def test_salary_inverted_does_not_raise(self, make_application):
        app = make_application(salary_min=2000.0, salary_max=1000.0)
        assert app.salary.is_inverted

    def test_platform_label(self, make_application):
        assert make_application().platform_label == "LinkedIn"
        assert make_application(platform=Platform.OTRO, platform_other="Meetup").platform_label == "Meetup"
        assert make_application(platform=Platform.OTRO).platform_label == "Otro"

    def test_response_and_interview(self, make_application):
        app = make_application(status=ApplicationStatus.ACEPTADA)
        assert app.has_response()
        assert app.has_interview()
        assert not make_application(status=ApplicationStatus.EN_REVISION).has_response()

    def test_empty_wallet_rejected(self, make_application):
        with pytest.raises(ValueError):
            make_application(wallet_address="  ")


class TestValueObjects:
    """Salary, location and wallet"""

    def test_salary_str(self):
        salary = SalaryRange(1000, 2000, SalaryCurrency.USD, SalaryPeriod.MENSUAL)
        assert str(salary) == "$1,000 - $2,000 USD /mensual"
        assert salary.contains(1500)
        assert not salary.contains(2500)

    def test_location_drops_city_unless_presencial(self):
        assert Location(LocationType.REMOTO, "CDMX").city is None
        assert Location(LocationType.PRESENCIAL, "CDMX").city == "CDMX"
        assert str(Location(LocationType.PRESENCIAL, "CDMX")) == "presencial (CDMX)"

    @pytest.mark.parametrize("address,valid", [
        ("GBTESTWALLET", True),
        ("", False),
        ("has space", False),
        ("x" * 129, False),
    ])
    def test_wallet_address(self, address, valid):
        assert WalletAddress.is_valid(address) is valid

    def test_timeline_describe(self):
        entry = TimelineEntry(
            id=uuid4(),
            application_id=uuid4(),
            old_status=ApplicationStatus.PENDIENTE,
            new_status=ApplicationStatus.ENTREVISTA_PROGRAMADA,
        )
        assert entry.describe() == "Pendiente → Entrevista Programada"


class TestTextFields:
    """Non-text values for text fields"""

    @pytest.mark.parametrize("field,value", [
        ("company_name", 42),
        ("personal_notes", ["a", "b"]),
        ("job_url", 3.5),
    ])
    def test_patch_rejects_non_text(self, field, value):
        with pytest.raises(ValidationException) as exc_info:
            normalize_patch({field: value})
        assert exc_info.value.field == field
        assert exc_info.value.message == "must be text"

    def test_create_rejects_non_text(self, acme_fields):
        with pytest.raises(ValidationException) as exc_info:
            NewApplication.from_dict({**acme_fields, "position_title": 7}).validate()
        assert exc_info.value.field == "position_title"

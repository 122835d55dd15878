import io
from datetime import date

import pytest

from conftest import make_csv
from skillcheck.application.csv_import import import_skill_checks_csv, read_skill_check_csv
from skillcheck.domain.schemas import SkillCheckRowInput, validate_input
from skillcheck.infrastructure.exceptions import ImportError as CsvImportError
from skillcheck.infrastructure.exceptions import MultipleValidationError
from skillcheck.infrastructure.repositories import CustomerRepo, SkillCheckRepo


def test_import_summary(session, sample_csv):
    summary = import_skill_checks_csv(session, sample_csv)
    assert summary.processed == 2
    assert summary.created_customers == 2
    assert summary.updated_customers == 0
    assert summary.skipped == 2
    assert {(e["row"], e["field"]) for e in summary.errors} == {
        (4, "customer_number"),
        (5, "age"),
    }


def test_import_stores_profile_and_record(session, sample_csv):
    import_skill_checks_csv(session, sample_csv)
    customer = CustomerRepo(session).get_by_number("C-001")
    assert customer.name == "Hanako Sato"
    assert customer.age == 29
    assert customer.experience == "3 years"
    assert customer.application_date == date(2024, 5, 1)
    assert customer.status == "New"

    (check,) = SkillCheckRepo(session).list_for_customer(customer.id)
    assert check.to_record() == {
        "care_1_1": 10.0,
        "care_1_2": 15.0,
        "color_14_1": 10.0,
        "time_33_1": "22分30秒",
        "total_time": "104分54秒",
    }
    assert check.counseling_comment == "Great progress"


def test_import_normalises_stored_rank(session, sample_csv):
    import_skill_checks_csv(session, sample_csv)
    customer = CustomerRepo(session).get_by_number("C-002")
    (check,) = SkillCheckRepo(session).list_for_customer(customer.id)
    assert check.rank == "AA"
    assert check.total_score == 1000
    assert check.art_score == 140


def test_reimport_appends_history_and_updates_profile(session, sample_csv):
    import_skill_checks_csv(session, sample_csv)
    summary = import_skill_checks_csv(
        session, make_csv([{"customer_number": "C-001", "name": "Hanako S.", "care_1_1": "5"}])
    )
    assert (summary.created_customers, summary.updated_customers) == (0, 1)

    customer = CustomerRepo(session).get_by_number("C-001")
    assert customer.name == "Hanako S."
    assert customer.prefecture == "Tokyo"
    assert len(SkillCheckRepo(session).list_for_customer(customer.id)) == 2


def test_strict_import_rejects_whole_file(session, sample_csv):
    with pytest.raises(MultipleValidationError) as exc_info:
        import_skill_checks_csv(session, sample_csv, strict=True)
    error = exc_info.value
    assert [e.field for e in error.validation_errors] == ["customer_number", "age"]
    assert "row 5" in error.details["errors"][1]["message"]
    assert error.user_message == "Please correct the following errors and try again."


def test_strict_import_of_clean_file(session):
    summary = import_skill_checks_csv(
        session, make_csv([{"customer_number": "C-009", "care_1_1": "8"}]), strict=True
    )
    assert summary.processed == 1
    assert summary.errors == []


def test_read_csv_drops_blank_rows_and_lowercases_headers():
    text = "Customer_Number,Name\nC-001,A\n,\nC-002,B\n"
    frame = read_skill_check_csv(io.StringIO(text))
    assert list(frame.columns) == ["customer_number", "name"]
    assert list(frame["customer_number"]) == ["C-001", "C-002"]
    assert list(frame.index) == [0, 2]


def test_read_csv_accepts_bom_bytes():
    frame = read_skill_check_csv("\ufeffcustomer_number\nC-001\n".encode("utf-8"))
    assert list(frame.columns) == ["customer_number"]


def test_read_csv_requires_customer_number_column():
    with pytest.raises(CsvImportError) as exc_info:
        read_skill_check_csv(b"name\nA\n")
    assert exc_info.value.details["columns"] == ["name"]


def test_read_csv_missing_file(tmp_path):
    with pytest.raises(CsvImportError):
        read_skill_check_csv(tmp_path / "missing.csv")


class TestSkillCheckRowInput:
    def test_valid_row(self):
        result = validate_input(
            SkillCheckRowInput,
            {
                "customer_number": " C-001 ",
                "name": "<b>Hanako</b>",
                "age": "29",
                "application_date": "2024年5月1日",
                "total_score": "1,050",
                "rank": "a.a.",
            },
        )
        assert result.success
        assert result.data["customer_number"] == "C-001"
        assert result.data["name"] == "Hanako"
        assert result.data["age"] == 29
        assert result.data["application_date"] == date(2024, 5, 1)
        assert result.data["total_score"] == 1050
        assert result.data["rank"] == "AA"

    def test_unknown_rank_is_dropped(self):
        result = validate_input(SkillCheckRowInput, {"customer_number": "C-1", "rank": "S"})
        assert result.success
        assert result.data["rank"] is None

    @pytest.mark.parametrize(
        "field, value",
        [
            ("age", "abc"),
            ("age", "150"),
            ("total_score", "-1"),
            ("care_score", "lots"),
            ("application_date", "May first"),
        ],
    )
    def test_invalid_fields(self, field, value):
        result = validate_input(SkillCheckRowInput, {"customer_number": "C-1", field: value})
        assert not result.success
        assert result.errors[0].field == field

    def test_customer_number_required(self):
        result = validate_input(SkillCheckRowInput, {"customer_number": "   "})
        assert not result.success

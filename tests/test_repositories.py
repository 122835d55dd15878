from datetime import date, datetime

import pytest

from skillcheck.infrastructure.exceptions import (
    CustomerNotFoundError,
    IntegrityError,
    ValidationError,
)
from skillcheck.infrastructure.models import CustomerORM
from skillcheck.infrastructure.repositories import CustomerRepo, SkillCheckRepo


class TestCustomerRepo:
    def test_upsert_creates_then_updates(self, session):
        repo = CustomerRepo(session)
        customer, created = repo.upsert_by_number(
            "C-001", {"name": "Hanako", "nail_technician_experience": "3 years", "age": 29}
        )
        assert created
        assert customer.id is not None
        assert customer.status == "New"
        assert customer.experience == "3 years"

        same, created = repo.upsert_by_number("C-001", {"name": "Hanako Sato", "age": None})
        assert not created
        assert same.id == customer.id
        assert same.name == "Hanako Sato"
        assert same.age == 29
        assert repo.count() == 1

    def test_upsert_without_profile_defaults_name(self, session):
        customer, created = CustomerRepo(session).upsert_by_number("C-009")
        assert created
        assert customer.name == ""

    def test_get_required_raises_for_unknown_id(self, session):
        with pytest.raises(CustomerNotFoundError) as exc_info:
            CustomerRepo(session).get_required(404)
        assert exc_info.value.user_message == "The selected customer could not be found."

    def test_duplicate_customer_number_maps_to_integrity_error(self, session):
        repo = CustomerRepo(session)
        repo.create(customer_number="C-001", name="A")
        with pytest.raises(IntegrityError):
            repo.create(customer_number="C-001", name="B")

    def test_list_with_latest_pairs_newest_check(self, session):
        customers = CustomerRepo(session)
        checks = SkillCheckRepo(session)
        a, _ = customers.upsert_by_number("C-002", {"name": "B"})
        b, _ = customers.upsert_by_number("C-001", {"name": "A"})
        checks.add(a.id, {"total_score": 700}, imported_at=datetime(2024, 5, 1))
        checks.add(a.id, {"total_score": 900}, imported_at=datetime(2024, 6, 1))
        checks.add(a.id, {"total_score": 800}, imported_at=datetime(2024, 4, 1))

        rows = customers.list_with_latest()
        assert [c.customer_number for c, _ in rows] == ["C-001", "C-002"]
        assert rows[0][1] is None
        assert rows[1][1].total_score == 900

    def test_set_status(self, session):
        repo = CustomerRepo(session)
        customer, _ = repo.upsert_by_number("C-001", {"name": "A"})
        assert repo.set_status(customer, "Completion").status == "Completion"


class TestSkillCheckRepo:
    @pytest.fixture
    def customer(self, session) -> CustomerORM:
        customer, _ = CustomerRepo(session).upsert_by_number(
            "C-001", {"name": "A", "application_date": date(2024, 5, 1)}
        )
        return customer

    def test_add_splits_scores_and_columns(self, session, customer):
        check = SkillCheckRepo(session).add(
            customer.id,
            {
                "care_1_1": 10,
                "time_33_1": "22分30秒",
                "total_score": 950,
                "rank": "AA",
                "unknown_column": "dropped",
                "care_1_2": None,
            },
            counseling_comment="Nice",
        )
        assert check.scores == {"care_1_1": 10, "time_33_1": "22分30秒"}
        assert check.total_score == 950
        assert check.counseling_comment == "Nice"
        assert check.to_record() == {
            "care_1_1": 10,
            "time_33_1": "22分30秒",
            "total_score": 950,
            "rank": "AA",
        }

    def test_list_for_customer_newest_first(self, session, customer):
        repo = SkillCheckRepo(session)
        same_time = datetime(2024, 5, 1)
        first = repo.add(customer.id, {"total_score": 1}, imported_at=same_time)
        second = repo.add(customer.id, {"total_score": 2}, imported_at=same_time)
        older = repo.add(customer.id, {"total_score": 3}, imported_at=datetime(2024, 1, 1))

        assert [c.id for c in repo.list_for_customer(customer.id)] == [
            second.id,
            first.id,
            older.id,
        ]
        current, previous = repo.latest_two(customer.id)
        assert (current.id, previous.id) == (second.id, first.id)

    def test_latest_two_with_no_history(self, session, customer):
        assert SkillCheckRepo(session).latest_two(customer.id) == (None, None)

    def test_list_for_customer_rejects_bad_id(self, session):
        with pytest.raises(ValidationError):
            SkillCheckRepo(session).list_for_customer(0)

    def test_to_domain(self, session, customer):
        check = SkillCheckRepo(session).add(customer.id, {"care_score": 300})
        domain = check.to_domain()
        assert domain.customer_id == customer.id
        assert domain.record == {"care_score": 300}
        assert customer.to_domain().application_date == date(2024, 5, 1)

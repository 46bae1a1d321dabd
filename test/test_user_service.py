"""
Tests for the user lifecycle service: create, read, update, soft delete and
restore.
"""

from datetime import date, timedelta

import pytest

from user_management.database.models import User, UserSetting
from user_management.database.repositories import UserRepository
from user_management.dates import years_before
from user_management.errors import (
    DuplicateResourceError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from user_management.schemas import UpdateUserRequest
from user_management.settings_schema import default_settings


def _update_request(**overrides) -> UpdateUserRequest:
    fields = {
        "first_name": "Jane",
        "middle_name": "Marie",
        "last_name": "Doe",
        "birth_date": date(1990, 5, 17),
    }
    fields.update(overrides)
    return UpdateUserRequest(**fields)


class TestCreateUser:
    def test_creates_active_user_with_default_settings(self, user_service, make_request):
        response = user_service.create_user(make_request())

        assert response.user_data.id is not None
        assert response.user_data.ssn == "0000000000002945"
        assert response.user_data.first_name == "John"
        assert response.user_data.last_name == "Smith"
        assert response.user_data.is_active is True
        assert response.user_data.deleted_time is None
        assert response.user_data.created_by == "SYSTEM"
        assert response.user_data.created_time is not None
        assert response.settings_map() == default_settings()
        assert len(response.user_settings) == 5

    def test_settings_are_persisted(self, user_service, make_request, session):
        response = user_service.create_user(make_request())

        rows = session.query(UserSetting).filter(UserSetting.user_id == response.user_data.id).all()
        assert {row.key: row.value for row in rows} == default_settings()

    def test_each_user_gets_own_defaults(self, user_service, make_request, session):
        user_service.create_user(make_request(ssn="1"))
        user_service.create_user(make_request(ssn="2"))

        assert session.query(UserSetting).count() == 10

    def test_duplicate_ssn_after_normalization(self, user_service, make_request):
        user_service.create_user(make_request(ssn="2945"))

        with pytest.raises(DuplicateResourceError) as exc_info:
            user_service.create_user(make_request(ssn="0000000000002945"))

        assert exc_info.value.errors == [
            "Record with unique value 0000000000002945 already exists in the system"
        ]
        assert exc_info.value.code == 30001

    def test_ssn_of_deleted_user_stays_reserved(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_service.delete_user(created.user_data.id)

        with pytest.raises(DuplicateResourceError):
            user_service.create_user(make_request())

    def test_duplicate_leaves_no_extra_rows(self, user_service, make_request, session):
        user_service.create_user(make_request())
        with pytest.raises(DuplicateResourceError):
            user_service.create_user(make_request(first_name="Other"))

        assert session.query(User).count() == 1
        assert session.query(UserSetting).count() == 5

    def test_birth_date_older_than_max_age_rejected(self, user_service, make_request, session):
        too_old = years_before(date.today(), 101)

        with pytest.raises(InvalidRequestError) as exc_info:
            user_service.create_user(make_request(birth_date=too_old))

        assert str(too_old) in exc_info.value.errors[0]
        assert session.query(User).count() == 0

    def test_birth_date_one_day_past_bound_rejected(self, user_service, make_request):
        bound = years_before(date.today(), 100)

        with pytest.raises(InvalidRequestError):
            user_service.create_user(make_request(birth_date=bound - timedelta(days=1)))

    def test_birth_date_exactly_at_bound_accepted(self, user_service, make_request):
        bound = years_before(date.today(), 100)

        response = user_service.create_user(make_request(birth_date=bound))

        assert response.user_data.birth_date == bound

    def test_configured_max_age_applies(self, user_service, make_request, config):
        config.user_policy.max_age_years = 50

        with pytest.raises(InvalidRequestError):
            user_service.create_user(make_request(birth_date=years_before(date.today(), 60)))


class TestGetUser:
    def test_returns_active_user(self, user_service, make_request):
        created = user_service.create_user(make_request(middle_name="Paul"))

        fetched = user_service.get_user(created.user_data.id)

        assert fetched.user_data.middle_name == "Paul"
        assert fetched.settings_map() == default_settings()

    def test_unknown_id(self, user_service):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            user_service.get_user(999)
        assert exc_info.value.errors == ["Cannot find resource with id 999"]

    def test_deleted_user_not_found_but_still_stored(self, user_service, make_request, session):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id
        user_service.delete_user(user_id)

        with pytest.raises(ResourceNotFoundError):
            user_service.get_user(user_id)

        stored = UserRepository(session).find_any_by_id(user_id)
        assert stored is not None
        assert stored.is_active is False
        assert stored.deleted_at is not None


class TestListUsers:
    def test_lists_only_active_users_in_id_order(self, user_service, make_request):
        ids = [user_service.create_user(make_request(ssn=str(n))).user_data.id for n in range(1, 5)]
        user_service.delete_user(ids[1])

        page = user_service.list_users(max_records=10, offset=0)

        assert [u.id for u in page.user_data] == [ids[0], ids[2], ids[3]]
        assert page.max_records == 10
        assert page.offset == 0

    def test_offset_and_limit(self, user_service, make_request):
        ids = [user_service.create_user(make_request(ssn=str(n))).user_data.id for n in range(1, 6)]

        page = user_service.list_users(max_records=2, offset=2)

        assert [u.id for u in page.user_data] == ids[2:4]
        assert page.max_records == 2
        assert page.offset == 2

    def test_empty(self, user_service):
        page = user_service.list_users(max_records=5, offset=0)
        assert page.user_data == []


class TestUpdateUser:
    def test_overwrites_allowed_fields(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id

        updated = user_service.update_user(user_id, _update_request())

        assert updated.user_data.first_name == "Jane"
        assert updated.user_data.middle_name == "Marie"
        assert updated.user_data.last_name == "Doe"
        assert updated.user_data.birth_date == date(1990, 5, 17)
        assert updated.user_data.ssn == created.user_data.ssn
        assert updated.settings_map() == default_settings()

    def test_clears_middle_name(self, user_service, make_request):
        created = user_service.create_user(make_request(middle_name="Paul"))

        updated = user_service.update_user(created.user_data.id, _update_request(middle_name=None))

        assert updated.user_data.middle_name is None

    def test_deleted_user_not_found(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_service.delete_user(created.user_data.id)

        with pytest.raises(ResourceNotFoundError):
            user_service.update_user(created.user_data.id, _update_request())

    def test_too_old_birth_date_leaves_user_unchanged(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id

        with pytest.raises(InvalidRequestError):
            user_service.update_user(
                user_id,
                _update_request(birth_date=years_before(date.today(), 120)),
            )

        assert user_service.get_user(user_id).user_data.first_name == "John"


class TestDeleteUser:
    def test_soft_deletes(self, user_service, make_request, session):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id

        assert user_service.delete_user(user_id) is None

        stored = UserRepository(session).find_any_by_id(user_id)
        assert stored.is_active is False
        assert stored.deleted_at is not None
        assert len(stored.settings) == 5

    def test_delete_twice_not_found(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_service.delete_user(created.user_data.id)

        with pytest.raises(ResourceNotFoundError):
            user_service.delete_user(created.user_data.id)

    def test_unknown_id(self, user_service):
        with pytest.raises(ResourceNotFoundError):
            user_service.delete_user(42)


class TestRestoreUser:
    def test_restore_then_restore_again(self, user_service, make_request, session):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id
        user_service.delete_user(user_id)

        restored = user_service.restore_user(user_id)

        assert restored.user_data.is_active is True
        assert restored.user_data.deleted_time is None
        assert restored.settings_map() == default_settings()

        with pytest.raises(InvalidRequestError) as exc_info:
            user_service.restore_user(user_id)
        assert exc_info.value.errors == ["User is already active"]

        stored = UserRepository(session).find_any_by_id(user_id)
        assert stored.is_active is True
        assert stored.deleted_at is None

    def test_active_user_cannot_be_restored(self, user_service, make_request):
        created = user_service.create_user(make_request())

        with pytest.raises(InvalidRequestError):
            user_service.restore_user(created.user_data.id)

    def test_unknown_id(self, user_service):
        with pytest.raises(ResourceNotFoundError):
            user_service.restore_user(404)

    def test_active_flag_with_deleted_timestamp_is_restored(self, user_service, make_request, session):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id
        user_service.delete_user(user_id)

        stored = UserRepository(session).find_any_by_id(user_id)
        stored.is_active = True
        session.commit()

        restored = user_service.restore_user(user_id)

        assert restored.user_data.is_active is True
        assert restored.user_data.deleted_time is None

    def test_restored_user_visible_again(self, user_service, make_request):
        created = user_service.create_user(make_request())
        user_id = created.user_data.id
        user_service.delete_user(user_id)
        user_service.restore_user(user_id)

        assert user_service.get_user(user_id).user_data.id == user_id
        assert [u.id for u in user_service.list_users(5, 0).user_data] == [user_id]

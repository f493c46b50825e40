import uuid

import pytest

from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from shared.errors import Conflict


def make_user(email="user@example.com"):
    return User(id=str(uuid.uuid4()), email=email, hashed_password="hash", open_categories=[], purchased_stages=[])


async def test_create_and_lookup(db):
    user = await UserRepository.create(db, make_user())

    assert (await UserRepository.get_by_email(db, "user@example.com")).id == user.id
    assert (await UserRepository.get_by_id(db, user.id)).email == "user@example.com"


async def test_duplicate_email_insert_is_a_conflict(db):
    await UserRepository.create(db, make_user())

    # Skips the service's pre-check, as a concurrent registration would
    with pytest.raises(Conflict, match="User exists"):
        await UserRepository.create(db, make_user())


async def test_update_fields(db):
    user = await UserRepository.create(db, make_user())

    updated = await UserRepository.update_fields(db, user.id, {"user_name": "Anna", "purchased_stages": [2, 2]})

    assert updated.user_name == "Anna"
    assert updated.purchased_stages == [2, 2]
    assert await UserRepository.update_fields(db, "missing", {"user_name": "x"}) is None

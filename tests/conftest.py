import mongomock
import pytest

# The app binds its MongoClient at import time, so the mock must be in place first.
mongomock.patch(servers=(("localhost", 27017),)).start()

import resend  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import auth  # noqa: E402
from database import create_document, db  # noqa: E402
from main import app  # noqa: E402
from schemas import Shop, User  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def clean_db():
    yield
    for name in db.list_collection_names():
        db[name].drop()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def sent_mail(monkeypatch):
    sent = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "mail-1"})
    return sent


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_user(name="Alice", email="alice@shopmail.com", role="user"):
    user_id = create_document("user", User(
        name=name, email=email, password_hash=auth.hash_password(PASSWORD), role=role,
    ))
    return user_id, bearer(auth.create_session(user_id, "user"))


def make_shop(name="Gadget Hub", email="hub@shopmail.com", balance=0):
    shop_id = create_document("shop", Shop(
        name=name, email=email, password_hash=auth.hash_password(PASSWORD),
        address="12 Market St", phone_number="555-0100", zip_code="10001", available_balance=balance,
    ))
    return shop_id, bearer(auth.create_session(shop_id, "seller"))


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def admin():
    return make_user(name="Root", email="root@shopmail.com", role="admin")


@pytest.fixture
def shop():
    return make_shop()

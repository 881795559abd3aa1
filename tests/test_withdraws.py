import resend

from conftest import make_shop
from database import db


def test_withdraw_debits_balance_and_mails_seller(client, sent_mail):
    shop_id, headers = make_shop(balance=500)
    res = client.post("/api/withdraw/create-withdraw-request", headers=headers, json={"amount": 200})
    assert res.status_code == 201
    withdraw = res.json()["withdraw"]
    assert withdraw["status"] == "Processing"
    assert withdraw["seller"] == {"id": shop_id, "name": "Gadget Hub", "email": "hub@shopmail.com"}
    assert db["shop"].find_one({})["available_balance"] == 300
    assert sent_mail[0]["subject"] == "Withdraw Request"
    assert "200.0$" in sent_mail[0]["text"]


def test_withdraw_more_than_balance(client, sent_mail):
    _, headers = make_shop(balance=50)
    res = client.post("/api/withdraw/create-withdraw-request", headers=headers, json={"amount": 200})
    assert res.status_code == 400
    assert res.json()["message"] == "Insufficient balance"
    assert db["withdraw"].count_documents({}) == 0
    assert sent_mail == []


def test_withdraw_amount_must_be_positive(client, sent_mail):
    _, headers = make_shop(balance=50)
    res = client.post("/api/withdraw/create-withdraw-request", headers=headers, json={"amount": 0})
    assert res.json()["message"] == "Invalid withdraw amount"


def test_mail_failure_leaves_balance_untouched(client, monkeypatch):
    def boom(params):
        raise RuntimeError("down")

    monkeypatch.setattr(resend.Emails, "send", boom)
    _, headers = make_shop(balance=500)
    res = client.post("/api/withdraw/create-withdraw-request", headers=headers, json={"amount": 100})
    assert res.status_code == 500
    assert res.json()["message"] == "Failed to send mail"
    assert db["shop"].find_one({})["available_balance"] == 500
    assert db["withdraw"].count_documents({}) == 0


def test_admin_approves_withdraw(client, sent_mail, admin):
    shop_id, headers = make_shop(balance=500)
    _, admin_headers = admin
    withdraw = client.post("/api/withdraw/create-withdraw-request", headers=headers,
                           json={"amount": 120}).json()["withdraw"]

    listed = client.get("/api/withdraw/get-all-withdraw-request", headers=admin_headers)
    assert listed.status_code == 201
    assert len(listed.json()["withdraws"]) == 1

    res = client.put(f"/api/withdraw/update-withdraw-request/{withdraw['id']}", headers=admin_headers,
                     json={"seller_id": shop_id})
    assert res.status_code == 201
    assert res.json()["withdraw"]["status"] == "succeed"
    transactions = db["shop"].find_one({})["transactions"]
    assert [(t["id"], t["amount"], t["status"]) for t in transactions] == [(withdraw["id"], 120, "succeed")]
    assert sent_mail[-1]["subject"] == "Payment confirmation"


def test_approve_unknown_withdraw_or_seller(client, sent_mail, admin):
    shop_id, headers = make_shop(balance=500)
    _, admin_headers = admin
    missing = client.put("/api/withdraw/update-withdraw-request/65f000000000000000000000", headers=admin_headers,
                         json={"seller_id": shop_id})
    assert missing.status_code == 404
    assert missing.json()["message"] == "Withdraw not found"

    withdraw = client.post("/api/withdraw/create-withdraw-request", headers=headers,
                           json={"amount": 10}).json()["withdraw"]
    no_seller = client.put(f"/api/withdraw/update-withdraw-request/{withdraw['id']}", headers=admin_headers,
                           json={"seller_id": "65f000000000000000000000"})
    assert no_seller.status_code == 404
    assert no_seller.json()["message"] == "Seller not found"


def test_withdraw_admin_routes_need_admin(client, user):
    _, headers = user
    assert client.get("/api/withdraw/get-all-withdraw-request", headers=headers).status_code == 403


def test_withdraw_cannot_be_approved_twice(client, sent_mail, admin):
    shop_id, headers = make_shop(balance=500)
    _, admin_headers = admin
    withdraw = client.post("/api/withdraw/create-withdraw-request", headers=headers,
                           json={"amount": 50}).json()["withdraw"]
    url = f"/api/withdraw/update-withdraw-request/{withdraw['id']}"
    assert client.put(url, headers=admin_headers, json={"seller_id": shop_id}).status_code == 201
    again = client.put(url, headers=admin_headers, json={"seller_id": shop_id})
    assert again.status_code == 400
    assert again.json()["message"] == "Withdraw request already processed"
    assert len(db["shop"].find_one({})["transactions"]) == 1
    assert [m["subject"] for m in sent_mail].count("Payment confirmation") == 1

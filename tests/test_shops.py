from conftest import PASSWORD, bearer
from database import db

SHOP = {
    "name": "Book Nook",
    "email": "nook@shopmail.com",
    "password": PASSWORD,
    "address": "4 Library Ln",
    "phone_number": "555-0199",
    "zip_code": "20002",
}


def test_shop_signup_and_activation(client, sent_mail):
    res = client.post("/api/shop/create-shop", json=SHOP)
    assert res.status_code == 201
    assert res.json()["message"] == "please check your email:- nook@shopmail.com to activate your shop!"
    assert sent_mail[0]["subject"] == "Activate your Shop"
    assert "/seller/activation/" in sent_mail[0]["text"]

    token = sent_mail[0]["text"].rsplit("/activation/", 1)[1]
    res = client.post("/api/shop/activation", json={"activation_token": token})
    assert res.status_code == 201
    seller = res.json()["seller"]
    assert seller["name"] == "Book Nook"
    assert seller["available_balance"] == 0
    assert "password_hash" not in seller

    me = client.get("/api/shop/getSeller", headers=bearer(res.json()["token"]))
    assert me.json()["seller"]["email"] == "nook@shopmail.com"


def test_user_activation_token_does_not_activate_shop(client, sent_mail):
    client.post("/api/user/create-user", json={"name": "Bob", "email": "bob@shopmail.com", "password": PASSWORD})
    token = sent_mail[0]["text"].rsplit("/activation/", 1)[1]
    res = client.post("/api/shop/activation", json={"activation_token": token})
    assert res.status_code == 400
    assert db["shop"].count_documents({}) == 0


def test_duplicate_shop_rejected(client, sent_mail, shop):
    res = client.post("/api/shop/create-shop", json=dict(SHOP, email="hub@shopmail.com"))
    assert res.status_code == 400
    assert res.json()["message"] == "User already exists"


def test_login_and_logout(client, shop):
    res = client.post("/api/shop/login-shop", json={"email": "hub@shopmail.com", "password": PASSWORD})
    assert res.status_code == 201
    headers = bearer(res.json()["token"])
    assert client.get("/api/shop/getSeller", headers=headers).status_code == 200
    client.get("/api/shop/logout", headers=headers)
    assert client.get("/api/shop/getSeller", headers=headers).status_code == 401


def test_login_wrong_password(client, shop):
    res = client.post("/api/shop/login-shop", json={"email": "hub@shopmail.com", "password": "nope"})
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide the correct information"


def test_user_token_is_not_a_seller_session(client, user):
    _, headers = user
    assert client.get("/api/shop/getSeller", headers=headers).status_code == 401


def test_get_shop_info(client, shop):
    shop_id, _ = shop
    res = client.get(f"/api/shop/get-shop-info/{shop_id}")
    assert res.status_code == 201
    assert res.json()["shop"]["name"] == "Gadget Hub"
    assert client.get("/api/shop/get-shop-info/65f000000000000000000000").status_code == 404


def test_update_shop_profile(client, shop):
    _, headers = shop
    res = client.put("/api/shop/update-shop-avatar", headers=headers, json={"avatar": "https://cdn.shop/logo.png"})
    assert res.json()["seller"]["avatar"] == "https://cdn.shop/logo.png"

    res = client.put("/api/shop/update-seller-info", headers=headers, json={"description": "All things gadgets"})
    assert res.status_code == 201
    assert res.json()["shop"]["description"] == "All things gadgets"
    assert res.json()["shop"]["name"] == "Gadget Hub"


def test_withdraw_method(client, shop):
    _, headers = shop
    method = {"bank_name": "First Bank", "account_number": "0042"}
    res = client.put("/api/shop/update-payment-methods", headers=headers, json={"withdraw_method": method})
    assert res.json()["seller"]["withdraw_method"] == method
    res = client.delete("/api/shop/delete-withdraw-method", headers=headers)
    assert res.json()["seller"]["withdraw_method"] is None


def test_admin_seller_management(client, shop, admin):
    shop_id, shop_headers = shop
    _, admin_headers = admin
    assert len(client.get("/api/shop/admin-all-sellers", headers=admin_headers).json()["sellers"]) == 1
    res = client.delete(f"/api/shop/delete-seller/{shop_id}", headers=admin_headers)
    assert res.json()["message"] == "Seller deleted successfully!"
    assert client.get("/api/shop/getSeller", headers=shop_headers).status_code == 401
    again = client.delete(f"/api/shop/delete-seller/{shop_id}", headers=admin_headers)
    assert again.json()["message"] == "Seller is not available with this id"


def test_admin_routes_need_admin(client, shop, user):
    _, headers = user
    assert client.get("/api/shop/admin-all-sellers", headers=headers).status_code == 403

from conftest import make_shop
from database import db


def line(shop_id, price, qty=1, name="Keyboard", product_id="p1"):
    return {"product_id": product_id, "name": name, "shop_id": shop_id, "price": price, "qty": qty}


def create_coupon(client, headers, **overrides):
    body = {"name": "SAVE10", "value": 10}
    body.update(overrides)
    return client.post("/api/coupon/create-coupon-code", headers=headers, json=body)


def test_create_coupon(client, shop):
    shop_id, headers = shop
    res = create_coupon(client, headers)
    assert res.status_code == 201
    assert res.json()["coupon_code"]["shop_id"] == shop_id


def test_coupon_names_are_unique(client, shop):
    _, headers = shop
    _, other_headers = make_shop(name="Other", email="other@shopmail.com")
    create_coupon(client, headers)
    res = create_coupon(client, other_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Coupon code already exists!"


def test_coupon_value_is_a_percentage(client, shop):
    _, headers = shop
    assert create_coupon(client, headers, value=150).status_code == 400


def test_list_and_delete_own_coupons(client, shop):
    shop_id, headers = shop
    other_id, other_headers = make_shop(name="Other", email="other@shopmail.com")
    coupon = create_coupon(client, headers).json()["coupon_code"]
    create_coupon(client, other_headers, name="OTHER5", value=5)

    listed = client.get(f"/api/coupon/get-coupon/{other_id}", headers=headers).json()["coupon_codes"]
    assert [c["name"] for c in listed] == ["SAVE10"]

    stolen = client.delete(f"/api/coupon/delete-coupon/{coupon['id']}", headers=other_headers)
    assert stolen.json()["message"] == "Coupon code doesn't exists!"
    res = client.delete(f"/api/coupon/delete-coupon/{coupon['id']}", headers=headers)
    assert res.json()["message"] == "Coupon code deleted successfully!"
    assert db["couponcode"].count_documents({}) == 1


def test_get_coupon_value(client, shop):
    _, headers = shop
    create_coupon(client, headers)
    assert client.get("/api/coupon/get-coupon-value/SAVE10").json()["coupon_code"]["value"] == 10
    assert client.get("/api/coupon/get-coupon-value/NOPE").json()["coupon_code"] is None


def test_apply_coupon_discounts_only_issuing_shop(client, shop):
    shop_id, headers = shop
    create_coupon(client, headers)
    cart = [line(shop_id, 50, qty=2), line("someone-else", 300, name="Monitor", product_id="p2")]
    res = client.post("/api/coupon/apply-coupon", json={"name": "SAVE10", "cart": cart})
    assert res.json() == {"success": True, "name": "SAVE10", "eligible_price": 100, "discount": 10}


def test_apply_coupon_respects_selected_product(client, shop):
    shop_id, headers = shop
    create_coupon(client, headers, selected_product="Mouse")
    cart = [line(shop_id, 40), line(shop_id, 20, name="Mouse", product_id="p2")]
    res = client.post("/api/coupon/apply-coupon", json={"name": "SAVE10", "cart": cart})
    assert res.json()["eligible_price"] == 20
    assert res.json()["discount"] == 2


def test_apply_coupon_rejections(client, shop):
    shop_id, headers = shop
    create_coupon(client, headers, min_amount=100, max_amount=500)

    wrong_shop = client.post("/api/coupon/apply-coupon", json={"name": "SAVE10", "cart": [line("x", 200)]})
    assert wrong_shop.json()["message"] == "Coupon code is not valid for this shop"
    too_small = client.post("/api/coupon/apply-coupon", json={"name": "SAVE10", "cart": [line(shop_id, 50)]})
    assert too_small.status_code == 400
    too_big = client.post("/api/coupon/apply-coupon", json={"name": "SAVE10", "cart": [line(shop_id, 600)]})
    assert too_big.status_code == 400
    unknown = client.post("/api/coupon/apply-coupon", json={"name": "NOPE", "cart": [line(shop_id, 200)]})
    assert unknown.json()["message"] == "Coupon code doesn't exists!"

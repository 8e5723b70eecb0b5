"""
End-to-end flow: register, verify, log in, list a product, view it, delete it.
"""
VIDEO = ("demo.mp4", b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64, "video/mp4")


async def test_seller_lifecycle(client, email_provider, media_store):
    resp = await client.post(
        "/auth/register",
        json={"email": "a@b.com", "password": "secret1", "firstName": "A", "lastName": "B", "role": "seller"},
    )
    assert resp.status_code == 201
    user_id = resp.json()["user"]["id"]

    token = email_provider.token_for("a@b.com")
    resp = await client.get(f"/auth/verify-email/{token}")
    assert resp.status_code == 200

    resp = await client.post("/auth/login", json={"email": "a@b.com", "password": "secret1"})
    assert resp.status_code == 200
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    resp = await client.post(
        "/products/create_product",
        data={"title": "Handmade mug", "description": "Stoneware, 350ml", "price": "18.50"},
        files={"video": VIDEO},
        headers=headers,
    )
    assert resp.status_code == 201
    product = resp.json()
    assert product["owner"] == user_id
    assert product["views"] == 0

    resp = await client.get(f"/products/product/{product['id']}")
    assert resp.status_code == 200
    assert resp.json()["views"] == 1
    assert resp.json()["owner"]["email"] == "a@b.com"

    resp = await client.delete(f"/products/delete_product/{product['id']}", headers=headers)
    assert resp.status_code == 200
    assert media_store.objects == {}

    resp = await client.get(f"/products/product/{product['id']}")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Product not found"}


async def test_default_role_cannot_sell(client, email_provider):
    await client.post(
        "/auth/register",
        json={"email": "a@b.com", "password": "secret1", "firstName": "A", "lastName": "B"},
    )
    await client.get(f"/auth/verify-email/{email_provider.token_for('a@b.com')}")
    resp = await client.post("/auth/login", json={"email": "a@b.com", "password": "secret1"})
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    resp = await client.post(
        "/products/create_product",
        data={"title": "Mug", "description": "Mug", "price": "1"},
        files={"video": VIDEO},
        headers=headers,
    )

    assert resp.status_code == 403

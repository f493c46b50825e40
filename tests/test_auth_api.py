def register(client, email="user@example.com", password="hunter22"):
    return client.post("/register", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_returns_token_and_defaults(client):
    response = register(client)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Registered"
    assert body["token"]
    user = body["user"]
    assert user["email"] == "user@example.com"
    assert user["userName"] == "John Doe"
    assert user["avatar"].startswith("https://")
    assert user["openCategories"] == []
    assert user["purchasedStages"] == []
    assert "password" not in user
    assert "hashed_password" not in user


def test_register_duplicate_email(client):
    register(client)

    response = register(client)

    assert response.status_code == 409
    assert response.json() == {"message": "User exists"}


def test_register_requires_password(client):
    response = client.post("/register", json={"email": "user@example.com"})

    assert response.status_code == 400
    assert "message" in response.json()


def test_login(client):
    register(client)

    response = client.post("/login", json={"email": "user@example.com", "password": "hunter22"})

    assert response.status_code == 200
    assert response.json()["message"] == "Login OK"
    assert response.json()["token"]


def test_login_wrong_password(client):
    register(client)

    response = client.post("/login", json={"email": "user@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials"}


def test_login_unknown_email(client):
    response = client.post("/login", json={"email": "ghost@example.com", "password": "x"})

    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers=bearer("garbage")).status_code == 401


def test_me_returns_profile(client):
    token = register(client).json()["token"]

    response = client.get("/me", headers=bearer(token))

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "user@example.com"


def test_update_profile(client):
    token = register(client).json()["token"]

    response = client.patch(
        "/me",
        headers=bearer(token),
        json={"userName": "Anna", "avatar": None, "openCategories": [3, "1", 3], "purchasedStages": [7]},
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["userName"] == "Anna"
    assert user["avatar"] is None
    # Order and duplicates are preserved
    assert user["openCategories"] == [3, 1, 3]
    assert user["purchasedStages"] == [7]

    again = client.get("/me", headers=bearer(token)).json()["user"]
    assert again["openCategories"] == [3, 1, 3]


def test_update_profile_requires_fields(client):
    token = register(client).json()["token"]

    response = client.patch("/me", headers=bearer(token), json={})

    assert response.status_code == 400
    assert response.json() == {"message": "No updateable fields provided"}


def test_update_profile_rejects_bad_arrays(client):
    token = register(client).json()["token"]

    not_array = client.patch("/me", headers=bearer(token), json={"openCategories": 5})
    bad_item = client.patch("/me", headers=bearer(token), json={"purchasedStages": [1, "abc"]})

    assert not_array.status_code == 400
    assert not_array.json() == {"message": "Expected an array of numbers"}
    assert bad_item.status_code == 400
    assert bad_item.json() == {"message": "Array values must be numbers"}


def test_update_profile_rejects_huge_integers(client):
    token = register(client).json()["token"]

    response = client.patch("/me", headers=bearer(token), json={"openCategories": [10**400]})

    assert response.status_code == 400
    assert response.json() == {"message": "Array values must be numbers"}

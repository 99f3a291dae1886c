from sqlalchemy.exc import OperationalError

from heritage_nest import crud


def seed(make_property):
    return {
        "villa": make_property(title="Sunny villa", description="sea view", location="Dhaka",
                               property_type="villa", price=500000),
        "flat": make_property(title="City apartment", description="near metro", location="Dhaka",
                              property_type="apartment", price=150000),
        "farm": make_property(title="Old farmhouse", description="quiet countryside villa style",
                              location="Sylhet", property_type="house", price=90000),
    }

def ids(resp):
    assert resp.status_code == 200, resp.text
    return {p["_id"] for p in resp.json()}


def test_server_status(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Server is running smoothly"
    assert "timestamp" in resp.json()

def test_create_stamps_timestamps(client):
    resp = client.post("/properties", json={"title": "Lake house", "price": 1200, "bedrooms": 4,
                                            "created_at": "1999-01-01T00:00:00.000Z"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["acknowledged"] is True

    prop = client.get(f"/properties/{body['inserted_id']}").json()
    assert prop["_id"] == body["inserted_id"]
    assert prop["title"] == "Lake house"
    assert prop["bedrooms"] == 4
    assert prop["created_at"] == prop["updated_at"]
    assert prop["created_at"] != "1999-01-01T00:00:00.000Z"
    assert prop["created_at"].endswith("Z")

def test_create_rejects_too_many_extra_fields(client):
    payload = {f"field_{i}": i for i in range(40)}
    assert client.post("/properties", json=payload).status_code == 422

def test_create_rejects_bad_price(client):
    assert client.post("/properties", json={"price": "cheap"}).status_code == 422

def test_list_all(client, make_property):
    created = seed(make_property)
    assert ids(client.get("/properties")) == set(created.values())

def test_get_missing_property(client):
    resp = client.get("/properties/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "not_found", "message": "Property not found"}

def test_search_without_filters_matches_list(client, make_property):
    seed(make_property)
    assert ids(client.get("/properties/search-query")) == ids(client.get("/properties"))
    assert ids(client.get("/properties/search-query", params={"budget": "", "searchText": "  "})) == ids(client.get("/properties"))

def test_search_filters(client, make_property):
    p = seed(make_property)
    assert ids(client.get("/properties/search-query", params={"budget": "200000"})) == {p["flat"], p["farm"]}
    assert ids(client.get("/properties/search-query", params={"budget": 150000})) == {p["flat"], p["farm"]}
    assert ids(client.get("/properties/search-query", params={"propertyType": "apartment"})) == {p["flat"]}
    assert ids(client.get("/properties/search-query", params={"location": "Dhaka", "budget": "200000"})) == {p["flat"]}
    # exact match only
    assert ids(client.get("/properties/search-query", params={"location": "Dhak"})) == set()

def test_search_text(client, make_property):
    p = seed(make_property)
    assert ids(client.get("/properties/search-query", params={"searchText": "villa"})) == {p["villa"], p["farm"]}
    assert ids(client.get("/properties/search-query", params={"searchText": "sea villa"})) == {p["villa"]}
    assert ids(client.get("/properties/search-query",
                          params={"searchText": "villa", "location": "Sylhet"})) == {p["farm"]}

def test_search_with_no_match_is_empty(client, make_property):
    seed(make_property)
    resp = client.get("/properties/search-query", params={"propertyType": "castle"})
    assert resp.status_code == 200
    assert resp.json() == []

def test_search_rejects_non_numeric_budget(client, make_property):
    seed(make_property)
    resp = client.get("/properties/search-query", params={"budget": "lots"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_filter"

def test_update_is_partial_merge(client, make_property):
    pid = make_property(title="Cottage", description="stone walls", price=300, bedrooms=2)
    before = client.get(f"/properties/{pid}").json()

    resp = client.patch(f"/properties/{pid}", json={"price": 250, "garden": True,
                                                   "updated_at": "1999-01-01T00:00:00.000Z"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Property updated successfully"
    assert body["result"]["matched_count"] == 1

    after = client.get(f"/properties/{pid}").json()
    assert after["price"] == 250
    assert after["garden"] is True
    assert after["title"] == "Cottage"
    assert after["description"] == "stone walls"
    assert after["bedrooms"] == 2
    assert after["created_at"] == before["created_at"]
    assert after["updated_at"] != "1999-01-01T00:00:00.000Z"
    assert after["updated_at"] >= before["updated_at"]

def test_update_missing_property(client):
    resp = client.patch("/properties/nope", json={"title": "x"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"

def test_delete_then_delete_again(client, make_property):
    pid = make_property(title="Short lived")
    resp = client.delete(f"/properties/{pid}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Property deleted successfully"}
    assert client.get(f"/properties/{pid}").status_code == 404
    assert client.delete(f"/properties/{pid}").status_code == 404

def test_delete_unknown_twice(client):
    for _ in range(2):
        resp = client.delete("/properties/0123456789abcdef")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

def test_store_failure_hides_driver_message(client, monkeypatch):
    def broken(db):
        raise OperationalError("SELECT * FROM properties", {}, Exception("disk secret exploded"))

    monkeypatch.setattr(crud, "list_properties", broken)
    resp = client.get("/properties")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "store_failure", "message": "Internal storage error"}
    assert "secret" not in resp.text

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_update_cannot_grow_extra_past_limit(client, make_property):
    pid = make_property(**{f"first_{i}": i for i in range(32)})
    resp = client.patch(f"/properties/{pid}", json={f"second_{i}": i for i in range(32)})
    assert resp.status_code == 422
    assert resp.json()["error"] == "invalid_attributes"

    stored = client.get(f"/properties/{pid}").json()
    assert not any(k.startswith("second_") for k in stored)
    assert sum(k.startswith("first_") for k in stored) == 32

    # overwriting existing keys stays within the limit
    resp = client.patch(f"/properties/{pid}", json={"first_0": "changed"})
    assert resp.status_code == 200
    assert client.get(f"/properties/{pid}").json()["first_0"] == "changed"

def test_update_writes_contact_fields(client, make_property):
    pid = make_property(title="Villa", name="Villa Rose")
    assert client.get(f"/properties/{pid}").json()["name"] == "Villa Rose"

    resp = client.patch(f"/properties/{pid}", json={"name": "Villa Lily", "phone": "123"})
    assert resp.status_code == 200
    assert resp.json()["result"]["modified_count"] == 1
    prop = client.get(f"/properties/{pid}").json()
    assert prop["name"] == "Villa Lily"
    assert prop["phone"] == "123"
    assert prop["title"] == "Villa"

def test_update_with_same_values_reports_no_modification(client, make_property):
    pid = make_property(title="Same", price=10)
    resp = client.patch(f"/properties/{pid}", json={"title": "Same", "price": 10})
    assert resp.status_code == 200
    assert resp.json()["result"] == {"acknowledged": True, "matched_count": 1, "modified_count": 0}

def test_listing_numbers_must_be_finite(client, make_property):
    headers = {"content-type": "application/json"}
    assert client.post("/properties", content='{"price": NaN}', headers=headers).status_code == 422
    assert client.post("/properties", content='{"starting_bid": Infinity}', headers=headers).status_code == 422
    pid = make_property(price=10)
    assert client.patch(f"/properties/{pid}", content='{"current_bid": NaN}', headers=headers).status_code == 422

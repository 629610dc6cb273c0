"""
nextra/test_properties.py

Property endpoints: DTO create/update, role checks, generic verbs and queries.

Run:
    pytest nextra/test_properties.py -v
"""

from nextra.models import Account, AccountRole, Category, Property

VALID_PROPERTY = {
    "title": "Sea-view apartment",
    "location": "Lisbon",
    "address": "Rua Augusta 10",
    "price": 350000,
    "size": 95.5,
    "propertyType": "APARTMENT",
    "bedrooms": 2,
    "bathrooms": 1,
    "yearBuilt": 1998,
}


def create_property(client, headers, **overrides):
    payload = {**VALID_PROPERTY, **overrides}
    response = client.post("/api/properties/new", json=payload, headers=headers)
    assert response.status_code == 201, f"Expected 201, got {response.status_code}: {response.json()}"
    return response.json()["data"]


class TestPropertyCreate:
    """POST /api/properties/new"""

    def test_agent_can_create(self, client, agent_headers):
        data = create_property(client, agent_headers)

        assert data["title"] == "Sea-view apartment"
        assert data["price"] == 350000.0
        assert data["status"] == "AVAILABLE"
        assert data["images"] == []
        assert data["mainImage"] is None
        assert data["createdBy"] == "agent"
        assert data["updatedBy"] == "agent"

    def test_normal_user_forbidden(self, client, normal_headers):
        response = client.post("/api/properties/new", json=VALID_PROPERTY, headers=normal_headers)
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_blank_title_and_non_positive_price_rejected(self, client, agent_headers):
        response = client.post(
            "/api/properties/new",
            json={**VALID_PROPERTY, "title": "   ", "price": 0},
            headers=agent_headers,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert set(body["data"]) >= {"title", "price"}

    def test_links_owner_and_category(self, client, agent_headers, session):
        owner = Account(name="Owner", email="owner@example.com", role=AccountRole.CLIENT)
        category = Category(name="Coastal")
        session.add_all([owner, category])
        session.commit()

        data = create_property(client, agent_headers, ownerId=owner.id, categoryId=category.id)

        assert data["ownerId"] == owner.id
        assert data["ownerName"] == "Owner"
        assert data["categoryName"] == "Coastal"

    def test_unknown_owner_is_404(self, client, agent_headers):
        response = client.post("/api/properties/new", json={**VALID_PROPERTY, "ownerId": 999}, headers=agent_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Account not found with id: 999"

    def test_generic_create_is_disabled(self, client, admin_headers):
        response = client.post("/api/properties", json=VALID_PROPERTY, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Use POST /api/properties/new instead"


class TestPropertyUpdate:
    """PUT /api/properties/{id}/update"""

    def test_update_keeps_creator(self, client, agent_headers, admin_headers):
        created = create_property(client, agent_headers)

        response = client.put(
            f"/api/properties/{created['id']}/update",
            json={**VALID_PROPERTY, "title": "Renovated apartment", "status": "RESERVED"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Renovated apartment"
        assert data["status"] == "RESERVED"
        assert data["createdBy"] == "agent"
        assert data["updatedBy"] == "admin"

    def test_update_missing_is_404(self, client, agent_headers):
        response = client.put("/api/properties/12345/update", json=VALID_PROPERTY, headers=agent_headers)
        assert response.status_code == 404

    def test_generic_update_is_disabled(self, client, admin_headers, agent_headers):
        created = create_property(client, agent_headers)
        response = client.put(f"/api/properties/{created['id']}", json=VALID_PROPERTY, headers=admin_headers)
        assert response.status_code == 400


class TestPropertyGenericVerbs:
    """List / get / delete / restore through the generic router."""

    def test_list_is_paginated(self, client, agent_headers, session):
        session.add_all(Property(title=f"Plot {i}", price=1000 + i, images=[]) for i in range(25))
        session.commit()

        response = client.get("/api/properties?page=0&size=10", headers=agent_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["items"]) == 10
        assert data["page"] == 0
        assert data["size"] == 10
        assert data["totalElements"] == 25
        assert data["totalPages"] == 3

    def test_delete_requires_admin(self, client, agent_headers):
        created = create_property(client, agent_headers)
        response = client.delete(f"/api/properties/{created['id']}", headers=agent_headers)
        assert response.status_code == 403

    def test_delete_then_restore(self, client, agent_headers, admin_headers, session):
        created = create_property(client, agent_headers)
        property_id = created["id"]

        response = client.delete(f"/api/properties/{property_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OK", "data": None}

        missing = client.get(f"/api/properties/{property_id}", headers=agent_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Entity not found"
        assert session.get(Property, property_id).deleted is True

        restored = client.patch(f"/api/properties/{property_id}/restore", headers=admin_headers)
        assert restored.status_code == 200

        again = client.get(f"/api/properties/{property_id}", headers=agent_headers)
        assert again.status_code == 200
        assert again.json()["data"]["title"] == "Sea-view apartment"
        assert again.json()["data"]["updatedBy"] == "admin"

    def test_get_unknown_is_404(self, client, agent_headers):
        response = client.get("/api/properties/777", headers=agent_headers)
        assert response.status_code == 404


class TestPropertyQueries:
    def test_price_range(self, client, agent_headers):
        create_property(client, agent_headers, title="Cheap", price=100000)
        create_property(client, agent_headers, title="Mid", price=250000)
        create_property(client, agent_headers, title="Dear", price=900000)

        response = client.get("/api/properties/price?min=150000&max=500000", headers=agent_headers)

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["data"]] == ["Mid"]

    def test_price_range_inverted_is_400(self, client, agent_headers):
        response = client.get("/api/properties/price?min=500&max=100", headers=agent_headers)
        assert response.status_code == 400

    def test_by_owner_and_category_skip_deleted(self, client, agent_headers, admin_headers, session):
        owner = Account(name="Owner", email="o@example.com", role=AccountRole.CLIENT)
        category = Category(name="Urban")
        session.add_all([owner, category])
        session.commit()

        kept = create_property(client, agent_headers, ownerId=owner.id, categoryId=category.id)
        dropped = create_property(client, agent_headers, title="Gone", ownerId=owner.id, categoryId=category.id)
        client.delete(f"/api/properties/{dropped['id']}", headers=admin_headers)

        by_owner = client.get(f"/api/properties/owner/{owner.id}", headers=agent_headers).json()["data"]
        by_category = client.get(f"/api/properties/category/{category.id}", headers=agent_headers).json()["data"]

        assert [p["id"] for p in by_owner] == [kept["id"]]
        assert [p["id"] for p in by_category] == [kept["id"]]

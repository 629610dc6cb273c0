"""
nextra/test_accounts_categories.py

Accounts and categories use the generic CRUD verbs end to end.

Tests:
1. ADMIN-only writes, reads for any authenticated user
2. Uniqueness (account email, category name) -> 400
3. Paginated listing metadata and sort parameters
4. Update keeps creation audit fields; delete/restore round-trip

Run:
    pytest nextra/test_accounts_categories.py -v
"""

ACCOUNT = {"name": "Ana Agent", "email": "ana@agency.com", "phone": "555-0101", "role": "AGENT"}


def create_account(client, headers, **overrides):
    response = client.post("/api/accounts", json={**ACCOUNT, **overrides}, headers=headers)
    assert response.status_code == 201, f"Expected 201, got {response.status_code}: {response.json()}"
    return response.json()["data"]


class TestAccountCrud:
    def test_admin_creates_account(self, client, admin_headers):
        data = create_account(client, admin_headers)

        assert data["name"] == "Ana Agent"
        assert data["role"] == "AGENT"
        assert data["createdBy"] == "admin"
        assert data["createdAt"] is not None

    def test_role_defaults_to_client(self, client, admin_headers):
        data = create_account(client, admin_headers, name="Carl", email="carl@example.com", role="CLIENT")
        omitted = client.post(
            "/api/accounts",
            json={"name": "Dina", "email": "dina@example.com"},
            headers=admin_headers,
        )
        assert data["role"] == "CLIENT"
        assert omitted.json()["data"]["role"] == "CLIENT"

    def test_non_admin_cannot_write(self, client, normal_headers):
        response = client.post("/api/accounts", json=ACCOUNT, headers=normal_headers)
        assert response.status_code == 403

    def test_anyone_authenticated_can_read(self, client, admin_headers, normal_headers):
        created = create_account(client, admin_headers)
        response = client.get(f"/api/accounts/{created['id']}", headers=normal_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "ana@agency.com"

    def test_duplicate_email_rejected(self, client, admin_headers):
        create_account(client, admin_headers)
        response = client.post("/api/accounts", json={**ACCOUNT, "name": "Other"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Account email already in use: ana@agency.com"

    def test_invalid_email_fails_validation(self, client, admin_headers):
        response = client.post("/api/accounts", json={**ACCOUNT, "email": "nope"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["data"]["email"] == "must be a well-formed email address"

    def test_update_preserves_creation_audit(self, client, admin_headers, make_user, headers_for):
        created = create_account(client, admin_headers)
        make_user("boss", ["ROLE_ADMIN"])

        response = client.put(
            f"/api/accounts/{created['id']}",
            json={**ACCOUNT, "name": "Ana Maria", "phone": None},
            headers=headers_for("boss"),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == created["id"]
        assert data["name"] == "Ana Maria"
        assert data["phone"] is None
        assert data["createdBy"] == "admin"
        assert data["createdAt"] == created["createdAt"]
        assert data["updatedBy"] == "boss"

    def test_update_missing_is_404(self, client, admin_headers):
        response = client.put("/api/accounts/999", json=ACCOUNT, headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Account not found with id: 999"

    def test_update_missing_with_taken_email_is_404(self, client, admin_headers):
        create_account(client, admin_headers)

        response = client.put("/api/accounts/999", json={**ACCOUNT, "name": "Someone"}, headers=admin_headers)

        assert response.status_code == 404, f"Expected 404, got {response.status_code}: {response.json()}"
        assert response.json()["message"] == "Account not found with id: 999"

    def test_list_by_role(self, client, admin_headers):
        create_account(client, admin_headers)
        create_account(client, admin_headers, email="c@example.com", role="CLIENT")

        agents = client.get("/api/accounts/role/AGENT", headers=admin_headers).json()["data"]

        assert [a["email"] for a in agents] == ["ana@agency.com"]


class TestCategoryCrud:
    def test_duplicate_name_rejected(self, client, admin_headers):
        assert client.post("/api/categories", json={"name": "Villas"}, headers=admin_headers).status_code == 201
        response = client.post("/api/categories", json={"name": "Villas"}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_missing_with_taken_name_is_404(self, client, admin_headers):
        client.post("/api/categories", json={"name": "Villas"}, headers=admin_headers)

        response = client.put("/api/categories/999", json={"name": "Villas"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found with id: 999"

    def test_blank_name_rejected(self, client, admin_headers):
        response = client.post("/api/categories", json={"name": "   "}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["data"]["name"] == "name must not be blank"

    def test_delete_and_restore(self, client, admin_headers, normal_headers):
        created = client.post("/api/categories", json={"name": "Lofts"}, headers=admin_headers).json()["data"]
        category_id = created["id"]

        deleted = client.delete(f"/api/categories/{category_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json()["data"] is None
        assert client.get(f"/api/categories/{category_id}", headers=normal_headers).status_code == 404

        restored = client.patch(f"/api/categories/{category_id}/restore", headers=admin_headers)
        assert restored.status_code == 200
        assert restored.json()["message"] == "Restored"
        assert client.get(f"/api/categories/{category_id}", headers=normal_headers).status_code == 200

    def test_restore_unknown_is_404(self, client, admin_headers):
        response = client.patch("/api/categories/4242/restore", headers=admin_headers)
        assert response.status_code == 404


class TestPaginationOverHttp:
    def test_page_metadata(self, client, admin_headers, normal_headers):
        for i in range(25):
            client.post("/api/categories", json={"name": f"Category {i:02d}"}, headers=admin_headers)

        response = client.get("/api/categories?page=2&size=10&sort=name,desc", headers=normal_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["page"] == 2
        assert data["size"] == 10
        assert data["totalElements"] == 25
        assert data["totalPages"] == 3
        assert [c["name"] for c in data["items"]] == [f"Category {i:02d}" for i in range(4, -1, -1)]

    def test_defaults(self, client, normal_headers):
        data = client.get("/api/categories", headers=normal_headers).json()["data"]
        assert data["page"] == 0
        assert data["size"] == 10
        assert data["items"] == []
        assert data["totalPages"] == 0

    def test_bad_sort_field(self, client, normal_headers):
        response = client.get("/api/categories?sort=password", headers=normal_headers)
        assert response.status_code == 400

    def test_zero_size_rejected(self, client, normal_headers):
        response = client.get("/api/categories?size=0", headers=normal_headers)
        assert response.status_code == 400

"""Tests for the owner document endpoints."""

from esign.lifecycle.errors import ACCESS_DENIED_MESSAGE

CONTRACT = {
    "title": "Website redesign",
    "client_name": "Jane Client",
    "client_email": "jane@example.com",
    "content": {
        "contract_title": "Website redesign",
        "scope_of_work": "Design and build a marketing site",
        "contract_amount": 2500,
        "payment_schedule": [{"description": "Deposit", "amount": 1000}],
    },
}


def create_document(api_client, headers, **overrides):
    response = api_client.post("/api/documents", json={**CONTRACT, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    def test_missing_token(self, api_client):
        response = api_client.get("/api/documents")
        assert response.status_code == 401

    def test_invalid_token(self, api_client):
        response = api_client.get("/api/documents", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"


class TestAuthoring:
    def test_create_returns_draft(self, api_client, owner_headers):
        data = create_document(api_client, owner_headers)
        assert data["status"] == "draft"
        assert data["owner_id"] == "owner-1"
        assert data["content_version"] == 1
        assert data["content_schema"] == "contract/v1"
        assert data["content"]["scope_of_work"] == "Design and build a marketing site"
        assert data["has_secret_key"] is False
        assert "secret_key" not in data

    def test_create_rejects_blank_title(self, api_client, owner_headers):
        response = api_client.post("/api/documents", json={"title": "  "}, headers=owner_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_list_and_filter(self, api_client, owner_headers, other_owner_headers):
        first = create_document(api_client, owner_headers, title="First")
        second = create_document(api_client, owner_headers, title="Second")
        create_document(api_client, other_owner_headers, title="Not mine")
        api_client.post(f"/api/documents/{second['id']}/share", headers=owner_headers)

        listing = api_client.get("/api/documents", headers=owner_headers).json()
        assert listing["total"] == 2
        assert {d["id"] for d in listing["items"]} == {first["id"], second["id"]}

        drafts = api_client.get("/api/documents?status=draft", headers=owner_headers).json()
        assert [d["id"] for d in drafts["items"]] == [first["id"]]

    def test_other_owner_gets_404(self, api_client, owner_headers, other_owner_headers):
        doc = create_document(api_client, owner_headers)
        response = api_client.get(f"/api/documents/{doc['id']}", headers=other_owner_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_patch_content_creates_version(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        response = api_client.patch(
            f"/api/documents/{doc['id']}",
            json={"content": {"scope_of_work": "Just the landing page"}},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["content_version"] == 2

        versions = api_client.get(f"/api/documents/{doc['id']}/versions", headers=owner_headers).json()
        assert len(versions) == 1
        assert versions[0]["version_number"] == 1
        assert versions[0]["snapshot_data"]["scope_of_work"] == "Design and build a marketing site"


class TestSharing:
    def test_share_returns_link_and_key(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        response = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["document"]["status"] == "sent_for_signature"
        assert data["document"]["has_secret_key"] is True
        assert data["link"].endswith(f"/contract/view/{doc['id']}")
        assert len(data["secret_key"]) == 12

    def test_share_without_client_contact(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers, client_name=None, client_email=None)
        response = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

        response = api_client.post(
            f"/api/documents/{doc['id']}/share",
            json={"client_name": "Jane", "client_email": "jane@example.com"},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["document"]["client_name"] == "Jane"

    def test_reshare_invalidates_previous_key(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        k1 = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers).json()["secret_key"]
        k2 = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers).json()["secret_key"]
        assert k1 != k2

        old = api_client.post(f"/api/client/documents/{doc['id']}/access", json={"secret_key": k1})
        assert old.status_code == 403
        assert old.json()["detail"] == ACCESS_DENIED_MESSAGE
        new = api_client.post(f"/api/client/documents/{doc['id']}/access", json={"secret_key": k2})
        assert new.status_code == 200

    def test_cancel_then_share_is_409(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        cancelled = api_client.post(f"/api/documents/{doc['id']}/cancel", headers=owner_headers)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

        response = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers)
        assert response.status_code == 409
        assert response.json() == {
            "error": "invalid_transition",
            "detail": "Cannot share a document that is cancelled",
        }

    def test_edit_while_awaiting_signature_is_409(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers)
        response = api_client.patch(
            f"/api/documents/{doc['id']}", json={"title": "Sneaky"}, headers=owner_headers
        )
        assert response.status_code == 409


class TestKeyReveal:
    def test_reveal_limit_and_reset(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        key = api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers).json()["secret_key"]
        headers = {**owner_headers, "X-Client-Instance": "browser-a"}
        url = f"/api/documents/{doc['id']}/key/reveal"

        for remaining in (2, 1, 0):
            response = api_client.post(url, headers=headers)
            assert response.status_code == 200
            assert response.json() == {
                "secret_key": key,
                "views_used": 3 - remaining,
                "views_remaining": remaining,
            }

        limited = api_client.post(url, headers=headers)
        assert limited.status_code == 429
        assert limited.json()["error"] == "reveal_limit_reached"

        reset = api_client.post(f"/api/documents/{doc['id']}/key/reset", headers=headers)
        assert reset.status_code == 204
        assert api_client.post(url, headers=headers).status_code == 200

    def test_reveal_requires_client_instance_header(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        api_client.post(f"/api/documents/{doc['id']}/share", headers=owner_headers)
        response = api_client.post(f"/api/documents/{doc['id']}/key/reveal", headers=owner_headers)
        assert response.status_code == 422

    def test_reveal_before_share_is_404(self, api_client, owner_headers):
        doc = create_document(api_client, owner_headers)
        response = api_client.post(
            f"/api/documents/{doc['id']}/key/reveal",
            headers={**owner_headers, "X-Client-Instance": "browser-a"},
        )
        assert response.status_code == 404

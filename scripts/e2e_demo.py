#!/usr/bin/env python3
"""
End-to-end demo for the contract signing API.

Walks one contract through the whole negotiation: draft, share, revision
request, edit, re-share, sign.

Prerequisites:
    1. API running: uvicorn esign.main:app
    2. JWT_SECRET in the environment matches the API's

Usage:
    python scripts/e2e_demo.py

    # Against another deployment:
    python scripts/e2e_demo.py --base-url https://api.example.com

    # Output the final document as raw JSON:
    python scripts/e2e_demo.py --json
"""

import argparse
import json
import sys
import uuid

import httpx

from esign.core.security import create_access_token

API_BASE = "http://localhost:8000"

SAMPLE_CONTRACT = {
    "title": "Website redesign",
    "client_name": "Jane Client",
    "client_email": "jane@example.com",
    "content": {
        "contract_title": "Website Redesign Agreement",
        "freelancer_name": "Sam Freelancer",
        "scope_of_work": "Design and build a five page marketing site.",
        "contract_amount": 2500,
        "payment_terms": "50% upfront, 50% on delivery",
    },
}


def check_health(client: httpx.Client) -> bool:
    """Check if API is healthy."""
    try:
        resp = client.get("/health")
        return resp.status_code == 200
    except httpx.RequestError:
        return False


def expect(resp: httpx.Response, status: int) -> dict:
    """Fail the demo with the API's error body unless `status` came back."""
    if resp.status_code != status:
        print(f"  Error: expected {status}, got {resp.status_code}: {resp.text}")
        sys.exit(1)
    return resp.json() if resp.content else {}


def main():
    parser = argparse.ArgumentParser(description="E2E demo for the contract signing API")
    parser.add_argument("--base-url", default=API_BASE, help="API base URL")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")
    args = parser.parse_args()

    owner = {"Authorization": f"Bearer {create_access_token(f'demo-{uuid.uuid4()}')}"}

    print("=" * 60)
    print("CONTRACT SIGNING - E2E DEMO")
    print("=" * 60)

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        print("\n[1/7] Checking API health...")
        if not check_health(client):
            print("  Error: API is not responding.")
            sys.exit(1)
        print("  API is healthy")

        print("\n[2/7] Creating a draft...")
        doc = expect(client.post("/api/documents", json=SAMPLE_CONTRACT, headers=owner), 201)
        doc_id = doc["id"]
        print(f"  Document ID: {doc_id} ({doc['status']})")

        print("\n[3/7] Sharing with the client...")
        share = expect(client.post(f"/api/documents/{doc_id}/share", headers=owner), 200)
        first_key = share["secret_key"]
        print(f"  Link: {share['link']}")
        print(f"  Secret key: {first_key}")

        print("\n[4/7] Client asks for a change...")
        expect(
            client.post(
                f"/api/client/documents/{doc_id}/revisions",
                json={"secret_key": first_key, "author_name": "Jane Client", "message": "Please add a blog page."},
            ),
            201,
        )
        pending = expect(client.get("/api/revisions", headers=owner), 200)
        print(f"  Pending revision requests: {len(pending)}")

        print("\n[5/7] Owner edits, resolves and re-shares...")
        content = {**SAMPLE_CONTRACT["content"], "scope_of_work": "Design and build a six page site with a blog."}
        updated = expect(client.patch(f"/api/documents/{doc_id}", json={"content": content}, headers=owner), 200)
        print(f"  Content version: {updated['content_version']}")
        for request in pending:
            expect(client.post(f"/api/revisions/{request['id']}/resolve", headers=owner), 200)
        second_key = expect(client.post(f"/api/documents/{doc_id}/share", headers=owner), 200)["secret_key"]
        print(f"  New secret key: {second_key}")

        print("\n[6/7] Old key no longer opens the document...")
        expect(client.post(f"/api/client/documents/{doc_id}/access", json={"secret_key": first_key}), 403)
        print("  Access denied as expected")

        print("\n[7/7] Client signs...")
        signed = expect(
            client.post(
                f"/api/client/documents/{doc_id}/sign",
                json={"secret_key": second_key, "signer_name": "Jane Client"},
            ),
            200,
        )
        print(f"  Status: {signed['status']} by {signed['signed_by_name']}")
        expect(
            client.post(
                f"/api/client/documents/{doc_id}/sign",
                json={"secret_key": second_key, "signer_name": "Jane Client"},
            ),
            409,
        )
        print("  Second signature rejected")

        final = expect(client.get(f"/api/documents/{doc_id}", headers=owner), 200)

    print("\n" + "=" * 60)
    print("LIFECYCLE COMPLETED SUCCESSFULLY!")
    print("=" * 60)

    if args.json:
        print(json.dumps(final, indent=2, default=str))
    else:
        print(f"Document ID: {final['id']}")
        print(f"Status: {final['status']}")
        print(f"Signed At: {final['signed_at']}")
        print(f"Content Version: {final['content_version']}")

    sys.exit(0)


if __name__ == "__main__":
    main()

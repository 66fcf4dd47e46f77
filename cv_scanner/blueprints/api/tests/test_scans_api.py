"""
Tests for the scan, rescan, batch and scanned-CV endpoints.

Uploads carry plain text; the app fixture swaps PDF extraction for a UTF-8
decoder so the routes can be driven without real PDF fixtures.
"""

from __future__ import annotations

import io
import zipfile

import pytest

ALICE_CV = b"""Alice Martin
alice@example.com
Profile
Skills: Python and SQL
"""


def _upload(data: bytes, filename: str, content_type: str):
    return {"file": (io.BytesIO(data), filename, content_type)}


def _zip(files):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def keywords(client, auth_headers):
    for name in ("Python", "SQL", "Docker"):
        resp = client.post("/api/v1/keywords", json={"name": name}, headers=auth_headers)
        assert resp.status_code == 201


def _scan(client, headers, data=ALICE_CV, filename="alice.pdf"):
    return client.post(
        "/api/v1/scan",
        data=_upload(data, filename, "application/pdf"),
        content_type="multipart/form-data",
        headers=headers,
    )


class TestScanEndpoint:
    def test_scan_pdf(self, client, auth_headers, keywords):
        resp = _scan(client, auth_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["email"] == "alice@example.com"
        assert body["extractedName"] == "Alice Martin"
        assert set(body["matchedKeywords"]) == {"Python", "SQL"}
        assert body["scannedAt"]

    def test_missing_file(self, client, auth_headers):
        resp = client.post(
            "/api/v1/scan", data={}, content_type="multipart/form-data", headers=auth_headers
        )
        assert resp.status_code == 400
        assert resp.get_json() == {
            "error": "No CV file uploaded. Please upload a PDF file."
        }

    def test_wrong_file_type(self, client, auth_headers):
        resp = client.post(
            "/api/v1/scan",
            data=_upload(b"hello", "cv.txt", "text/plain"),
            content_type="multipart/form-data",
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Only PDF and ZIP files are allowed!"}

    def test_document_without_email(self, client, auth_headers):
        resp = _scan(client, auth_headers, b"Profile\nSkills\nExperience\n")
        assert resp.status_code == 400
        assert "No email address found" in resp.get_json()["error"]

    def test_document_that_is_not_a_cv(self, client, auth_headers):
        resp = _scan(client, auth_headers, b"Invoice for bob@example.com")
        assert resp.status_code == 400
        assert "does not appear to be a CV" in resp.get_json()["error"]

    def test_unreadable_pdf(self, client, auth_headers):
        resp = _scan(client, auth_headers, b"BROKEN pdf")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Failed to read PDF: corrupted document"}

    def test_upload_too_large(self, client, auth_headers, app):
        app.config["MAX_CONTENT_LENGTH"] = 1024 * 1024
        resp = _scan(client, auth_headers, b"x" * (2 * 1024 * 1024))
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "File too large. Maximum size is 1MB."}

    def test_requires_token(self, client):
        resp = _scan(client, {})
        assert resp.status_code == 401


class TestRescanEndpoint:
    def test_rescan_after_keyword_added(self, client, auth_headers, keywords):
        first = _scan(client, auth_headers).get_json()
        client.post("/api/v1/keywords", json={"name": "Profile"}, headers=auth_headers)

        resp = client.post(
            "/api/v1/rescan", json={"email": "alice@example.com"}, headers=auth_headers
        )

        body = resp.get_json()
        assert resp.status_code == 200
        assert "Profile" in body["matchedKeywords"]
        assert body["scannedAt"] == first["scannedAt"]

    def test_rescan_unknown(self, client, auth_headers):
        resp = client.post(
            "/api/v1/rescan", json={"email": "ghost@example.com"}, headers=auth_headers
        )
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "CV with email 'ghost@example.com' not found."}

    def test_rescan_body_must_be_an_object(self, client, auth_headers):
        resp = client.post("/api/v1/rescan", json=["a@b.com"], headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Request body must be a JSON object."}

    def test_rescan_without_email(self, client, auth_headers):
        resp = client.post("/api/v1/rescan", json={}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Valid email address is required for rescan."}


class TestBatchEndpoint:
    def test_batch_with_one_failure(self, client, auth_headers, keywords):
        archive = _zip(
            {
                "alice.pdf": ALICE_CV,
                "anon.pdf": b"Profile\nSkills\nno contact",
                "bob.pdf": b"Bob Stone\nbob@example.com\nDocker",
                "readme.txt": b"ignored",
            }
        )
        resp = client.post(
            "/api/v1/batch/scan",
            data=_upload(archive, "cvs.zip", "application/zip"),
            content_type="multipart/form-data",
            headers=auth_headers,
        )

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["processed"] == 2
        assert body["failed"] == 1
        assert body["errors"] == [{"file": "anon.pdf", "error": "No email found"}]
        assert {r["email"] for r in body["results"]} == {
            "alice@example.com",
            "bob@example.com",
        }

    def test_zip_without_pdfs(self, client, auth_headers):
        resp = client.post(
            "/api/v1/batch/scan",
            data=_upload(_zip({"a.txt": b"x"}), "cvs.zip", "application/zip"),
            content_type="multipart/form-data",
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "No PDF files found in ZIP" in resp.get_json()["error"]

    def test_missing_zip(self, client, auth_headers):
        resp = client.post(
            "/api/v1/batch/scan",
            data={},
            content_type="multipart/form-data",
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "No ZIP file uploaded" in resp.get_json()["error"]


class TestScannedCvs:
    def test_list_and_delete(self, client, auth_headers, keywords):
        _scan(client, auth_headers)

        listing = client.get("/api/v1/scanned-cvs", headers=auth_headers).get_json()
        assert [item["email"] for item in listing["items"]] == ["alice@example.com"]
        assert listing["items"][0]["fullText"].startswith("Alice Martin")

        resp = client.delete("/api/v1/scanned-cvs/Alice@Example.com", headers=auth_headers)
        assert resp.get_json() == {"success": True}
        listing = client.get("/api/v1/scanned-cvs", headers=auth_headers).get_json()
        assert listing["items"] == []

    def test_delete_unknown(self, client, auth_headers):
        resp = client.delete("/api/v1/scanned-cvs/nobody@example.com", headers=auth_headers)
        assert resp.status_code == 404

"""
HTTP tests for the loan, upload and calculator endpoints.
Run from project root: python -m pytest tests/test_api.py -v
"""
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from config import settings
from main import app

client: TestClient


def setUpModule():
    # One client (and event loop) for the module: the in-memory DB lives on a single connection
    global client
    client = TestClient(app)
    client.__enter__()


def tearDownModule():
    client.__exit__(None, None, None)


def _payload(**overrides):
    body = {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john@x.com",
        "income": 5000,
        "amount": 10000,
        "duration": 24,
        "currency": "EUR",
        "iban": "DE89370400440532013000",
    }
    body.update(overrides)
    return body


class TestLoansApi(unittest.TestCase):
    def test_create_returns_persisted_record(self):
        res = client.post("/api/loans", json=_payload())
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertIsInstance(body["id"], int)
        self.assertEqual(body["status"], "pending")
        self.assertTrue(body["createdAt"])
        self.assertEqual(body["paymentMethodType"], "bank_transfer")
        self.assertIsNone(body["identityFileUrl"])
        self.assertEqual(
            set(body),
            {
                "id", "firstName", "lastName", "email", "income", "identityFileUrl", "amount",
                "duration", "currency", "iban", "paymentMethodType", "status", "createdAt",
            },
        )

    def test_round_trip_by_id(self):
        created = client.post("/api/loans", json=_payload(identityFileUrl="/uploads/abc.pdf")).json()
        fetched = client.get(f"/api/loans/{created['id']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json(), created)

    def test_each_submit_creates_a_new_record(self):
        first = client.post("/api/loans", json=_payload()).json()
        second = client.post("/api/loans", json=_payload()).json()
        self.assertNotEqual(first["id"], second["id"])

    def test_status_in_body_is_ignored(self):
        res = client.post("/api/loans", json=_payload(status="approved", id=999999))
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["status"], "pending")
        self.assertNotEqual(res.json()["id"], 999999)

    def test_missing_income_is_400_with_field(self):
        body = _payload()
        del body["income"]
        res = client.post("/api/loans", json=body)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["field"], "income")
        self.assertTrue(res.json()["message"])

    def test_numeric_strings_are_accepted(self):
        res = client.post("/api/loans", json=_payload(income="4200", amount="15000", duration="36"))
        self.assertEqual(res.status_code, 201)
        self.assertEqual((res.json()["income"], res.json()["amount"], res.json()["duration"]), (4200, 15000, 36))

    def test_invalid_iban_is_400(self):
        res = client.post("/api/loans", json=_payload(iban="DE89370400440532013001"))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"message": "Invalid IBAN", "field": "iban"})

    def test_malformed_json_is_400(self):
        res = client.post("/api/loans", content=b"{not json", headers={"Content-Type": "application/json"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("message", res.json())
        self.assertNotIn("field", res.json())

    def test_unknown_id_is_404(self):
        res = client.get("/api/loans/987654321")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"message": "Application not found"})


class TestUploadApi(unittest.TestCase):
    def test_upload_stores_file_and_serves_it(self):
        res = client.post("/api/upload", files={"file": ("passport.pdf", b"%PDF-1.4 data", "application/pdf")})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["filename"], "passport.pdf")
        self.assertTrue(body["url"].startswith("/uploads/"))
        self.assertTrue(body["url"].endswith(".pdf"))
        stored = Path(settings.upload_dir) / body["url"].rsplit("/", 1)[-1]
        self.assertEqual(stored.read_bytes(), b"%PDF-1.4 data")

        served = client.get(body["url"])
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"%PDF-1.4 data")

    def test_same_name_gets_distinct_urls(self):
        a = client.post("/api/upload", files={"file": ("id.png", b"a", "image/png")}).json()
        b = client.post("/api/upload", files={"file": ("id.png", b"b", "image/png")}).json()
        self.assertNotEqual(a["url"], b["url"])

    def test_missing_file_is_400(self):
        res = client.post("/api/upload", data={"note": "no file here"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"message": "No file uploaded"})

    def test_oversize_file_is_400(self):
        before = set(Path(settings.upload_dir).iterdir())
        big = b"x" * (settings.max_upload_bytes + 1)
        res = client.post("/api/upload", files={"file": ("big.pdf", big, "application/pdf")})
        self.assertEqual(res.status_code, 400)
        self.assertIn("maximum size", res.json()["message"])
        self.assertEqual(set(Path(settings.upload_dir).iterdir()), before)

    def test_unknown_upload_is_404(self):
        res = client.get("/uploads/does-not-exist.pdf")
        self.assertEqual(res.status_code, 404)

    def test_upload_limits(self):
        res = client.get("/api/upload/limits")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"maxSizeBytes": settings.max_upload_bytes, "allowedExtensions": [".jpg", ".pdf", ".png"]})


class TestCalculatorApi(unittest.TestCase):
    def test_quote(self):
        res = client.get("/api/calculator/quote", params={"amount": 10000, "duration": 24, "currency": "EUR"})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["annualRate"], 0.045)
        self.assertAlmostEqual(body["totalPayback"], body["monthlyPayment"] * 24, places=6)
        self.assertEqual(body["formatted"]["monthlyPayment"], "€436")

    def test_quote_out_of_range_is_400(self):
        res = client.get("/api/calculator/quote", params={"amount": 500})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["field"], "amount")

    def test_currencies(self):
        res = client.get("/api/calculator/currencies")
        self.assertEqual([c["code"] for c in res.json()], ["EUR", "USD", "GBP", "CHF", "JPY"])


class TestHealth(unittest.TestCase):
    def test_health(self):
        self.assertEqual(client.get("/health").json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()

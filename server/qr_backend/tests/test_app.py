import unittest

from flyer_pipeline.pdf_utils import QrBounds, count_pages
from qr_backend.tests.helpers import QR_BOUNDS, ApiTestCase, decode_qr_region, make_pdf


class AuthApiTests(ApiTestCase):
    def test_signup_then_signin(self):
        self.sign_up("Owner@Example.com")

        response = self.client.post(
            "/api/auth/signin",
            json={"email": "owner@example.com", "password": "correct-horse"},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["token_type"], "bearer")
        self.assertEqual(payload["user"]["email"], "owner@example.com")
        self.assertNotIn("password_hash", payload["user"])

    def test_signin_with_wrong_password(self):
        self.sign_up()
        response = self.client.post(
            "/api/auth/signin",
            json={"email": "owner@example.com", "password": "wrong-password"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid email or password"})

    def test_signup_rejects_short_password_and_duplicates(self):
        response = self.client.post(
            "/api/auth/signup", json={"email": "a@example.com", "password": "short"}
        )
        self.assertEqual(response.status_code, 400)

        self.sign_up("a@example.com")
        response = self.client.post(
            "/api/auth/signup",
            json={"email": "a@example.com", "password": "another-password"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Email is already registered")

    def test_protected_routes_require_a_session(self):
        self.assertEqual(self.client.get("/api/campaigns").status_code, 401)
        response = self.client.get(
            "/api/campaigns", headers={"Authorization": "Bearer forged"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Not authenticated"})


class ProcessPdfTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.sign_up()

    def test_creates_campaign_with_one_flyer_per_copy(self):
        response = self.create_campaign(
            self.headers, count=4, pdf_bytes=make_pdf(pages=2)
        )
        self.assertEqual(response.status_code, 200, response.text)
        payload = response.json()

        campaign = payload["campaign"]
        self.assertEqual(campaign["name"], "spring-sale")
        self.assertEqual(campaign["flyers"], 4)
        self.assertEqual(campaign["scans"], 0)

        flyers = payload["flyers"]
        self.assertEqual([f["number"] for f in flyers], [1, 2, 3, 4])
        urls = [f["url"] for f in flyers]
        self.assertEqual(len(set(urls)), 4)
        self.assertEqual(urls[0], "http://testserver/r/spring-sale/1")
        for flyer in flyers:
            self.assertEqual(flyer["redirect_url"], "https://example.com/landing")
            self.assertTrue(self.storage.exists(flyer["s3_key"]))
            self.assertIn(flyer["s3_key"], flyer["signed_url"])

        self.assertEqual(len(self.db.list_flyers(campaign["id"])), 4)

    def test_merged_pdf_contains_every_flyer_in_order(self):
        response = self.create_campaign(
            self.headers, count=3, pdf_bytes=make_pdf(pages=2)
        )
        payload = response.json()

        merged_key = payload["mergedPdfKey"]
        self.assertTrue(merged_key.endswith(f"campaign-{payload['campaign']['id']}-all-flyers.pdf"))
        self.assertIn(merged_key, payload["mergedPdfUrl"])
        merged = self.storage.get_bytes(merged_key)
        self.assertEqual(count_pages(merged), 6)

        bounds = QrBounds.from_mapping(QR_BOUNDS)
        self.assertEqual(
            decode_qr_region(merged, bounds, page_index=4),
            payload["flyers"][2]["url"],
        )

    def test_flyer_pdf_carries_its_own_url(self):
        payload = self.create_campaign(self.headers, count=2).json()
        second = payload["flyers"][1]

        flyer_pdf = self.storage.get_bytes(second["s3_key"])
        decoded = decode_qr_region(flyer_pdf, QrBounds.from_mapping(QR_BOUNDS))
        self.assertEqual(decoded, second["url"])

    def test_original_pdf_is_stored(self):
        pdf = make_pdf()
        campaign = self.create_campaign(self.headers, pdf_bytes=pdf).json()["campaign"]

        self.assertTrue(campaign["pdf_key"].startswith("pdfs/"))
        self.assertTrue(campaign["pdf_key"].endswith("-spring-sale-original.pdf"))
        self.assertEqual(self.storage.get_bytes(campaign["pdf_key"]), pdf)

    def test_requires_authentication(self):
        response = self.create_campaign({})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.db.campaigns, {})

    def test_missing_fields(self):
        response = self.client.post(
            "/api/process-pdf",
            headers=self.headers,
            data={"campaignName": "spring-sale", "flyerCount": "2"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields"})

    def test_rejects_invalid_campaign_names(self):
        for name in ("Spring-Sale", "spring_sale", "spring sale", "a" * 65):
            with self.subTest(name=name):
                response = self.create_campaign(self.headers, name=name)
                self.assertEqual(response.status_code, 400)
                self.assertIn("Campaign name", response.json()["error"])
        self.assertEqual(self.db.campaigns, {})

    def test_rejects_duplicate_campaign_name(self):
        self.assertEqual(self.create_campaign(self.headers).status_code, 200)
        other = self.sign_up("other@example.com")

        response = self.create_campaign(other)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Campaign name is already taken")

    def test_enforces_campaign_quota(self):
        for index in range(self.settings.max_campaigns_per_user):
            response = self.create_campaign(self.headers, name=f"run-{index}", count=1)
            self.assertEqual(response.status_code, 200, response.text)

        response = self.create_campaign(self.headers, name="one-too-many", count=1)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Campaign limit reached (5)")

        listing = self.client.get("/api/campaigns", headers=self.headers).json()
        self.assertEqual(listing["remaining"], 0)

    def test_rejects_bad_flyer_count(self):
        for count in ("0", "three", "501"):
            with self.subTest(count=count):
                response = self.client.post(
                    "/api/process-pdf",
                    headers=self.headers,
                    files={"file": ("flyer.pdf", make_pdf(), "application/pdf")},
                    data={
                        "baseUrl": "http://testserver",
                        "targetUrl": "https://example.com",
                        "campaignName": "spring-sale",
                        "flyerCount": count,
                        "qrBounds": '{"x": 1, "y": 1, "width": 50, "height": 50}',
                    },
                )
                self.assertEqual(response.status_code, 400)

    def test_rejects_bad_urls(self):
        response = self.create_campaign(self.headers, target_url="javascript:alert(1)")
        self.assertEqual(response.status_code, 400)

    def test_rejects_unusable_pdf_and_bounds(self):
        response = self.create_campaign(self.headers, pdf_bytes=b"plain text")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invalid or corrupted PDF file")

        response = self.create_campaign(
            self.headers, bounds={"x": 500, "y": 700, "width": 200, "height": 200}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "qrBounds must lie inside the page")
        self.assertEqual(self.db.campaigns, {})
        self.assertEqual(self.storage.stored_objects, {})

    def test_off_page_bounds_leave_name_and_quota_free(self):
        response = self.create_campaign(
            self.headers, bounds={"x": 500, "y": 700, "width": 200, "height": 200}
        )
        self.assertEqual(response.status_code, 400)

        response = self.create_campaign(self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        listing = self.client.get("/api/campaigns", headers=self.headers).json()
        self.assertEqual(listing["remaining"], 4)

    def test_rejects_non_finite_bounds(self):
        response = self.client.post(
            "/api/process-pdf",
            headers=self.headers,
            files={"file": ("flyer.pdf", make_pdf(), "application/pdf")},
            data={
                "baseUrl": "http://testserver",
                "targetUrl": "https://example.com",
                "campaignName": "spring-sale",
                "flyerCount": "1",
                "qrBounds": '{"x": NaN, "y": 10, "width": 50, "height": 50}',
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "qrBounds values must be finite numbers")
        self.assertEqual(self.db.campaigns, {})

    def test_storage_failure_returns_500_and_keeps_partial_rows(self):
        original_upload = self.storage.upload_bytes
        uploads = []

        def flaky_upload(path, data, content_type="application/pdf"):
            uploads.append(path)
            if len(uploads) == 3:
                raise RuntimeError("storage unavailable")
            return original_upload(path, data, content_type)

        self.storage.upload_bytes = flaky_upload

        response = self.create_campaign(self.headers, count=3)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})
        campaign = self.db.get_campaign_by_name("spring-sale")
        self.assertIsNotNone(campaign)
        flyers = self.db.list_flyers(campaign.id)
        self.assertEqual(len(flyers), 2)
        self.assertIsNotNone(flyers[0].s3_key)
        self.assertIsNone(flyers[1].s3_key)


class TokenUrlProcessPdfTests(ApiTestCase):
    settings_overrides = {"tracking_url_style": "token"}

    def test_token_urls_redirect_to_target(self):
        headers = self.sign_up()
        payload = self.create_campaign(headers, count=2).json()

        url = payload["flyers"][1]["url"]
        self.assertTrue(url.startswith("http://testserver/r/"))
        self.assertNotIn("spring-sale", url)

        # Mark the flyer as located so the scan goes straight to the target.
        self.db.update_flyer(payload["flyers"][1]["id"], lat=1.0, long=2.0)
        response = self.client.get(url.replace("http://testserver", ""))
        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], "https://example.com/landing")


if __name__ == "__main__":
    unittest.main()

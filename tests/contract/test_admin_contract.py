"""Contract tests for back-office endpoints: users, prescriptions, refills,
payment methods, white labels and shipping."""

import httpx
import pytest
from httpx import AsyncClient

from pharmacy.api.main import app
from pharmacy.api.routes.white_labels import get_website_parser
from pharmacy.services.website_parser import WebsiteThemeParser

DESTINATION = {
    "name": "Pat Jones",
    "street1": "1 Main St",
    "city": "Denver",
    "state": "CO",
    "zip": "80202",
}


@pytest.mark.contract
class TestUsersContract:
    """Contract tests for /api/users."""

    @pytest.mark.asyncio
    async def test_list_requires_admin(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that only administrators list accounts."""
        denied = await client.get("/api/users", headers=auth_headers(patient))
        allowed = await client.get("/api/users", headers=auth_headers(admin))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert {u["username"] for u in allowed.json()} == {"patient", "pharmacist"}

    @pytest.mark.asyncio
    async def test_patient_cannot_promote_self(
        self, client: AsyncClient, patient, auth_headers
    ) -> None:
        """Test that users cannot change their own role."""
        response = await client.put(
            f"/api/users/{patient.id}", json={"role": "admin"}, headers=auth_headers(patient)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, client: AsyncClient, admin, auth_headers) -> None:
        """Test that administrators cannot remove their own account."""
        response = await client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_deletes_user(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that deleted users are gone."""
        headers = auth_headers(admin)

        deleted = await client.delete(f"/api/users/{patient.id}", headers=headers)
        missing = await client.get(f"/api/users/{patient.id}", headers=headers)

        assert deleted.status_code == 204
        assert missing.status_code == 404


@pytest.mark.contract
class TestPrescriptionsContract:
    """Contract tests for /api/prescriptions and /api/refills."""

    async def _upload(self, client: AsyncClient, user, headers) -> dict:
        response = await client.post(
            "/api/prescriptions",
            json={"user_id": user.id, "doctor_name": "Dr. Who", "file_url": "/uploads/rx.pdf"},
            headers=headers,
        )
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_upload_is_pending(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that an uploaded prescription awaits verification."""
        prescription = await self._upload(client, patient, auth_headers(patient))

        assert prescription["status"] == "pending"
        assert prescription["verification_status"] == "unverified"
        assert prescription["security_code"] is None

    @pytest.mark.asyncio
    async def test_upload_for_someone_else_forbidden(
        self, client: AsyncClient, patient, make_user, auth_headers
    ) -> None:
        """Test that users cannot upload prescriptions for other accounts."""
        other = await make_user("other")

        response = await client.post(
            "/api/prescriptions", json={"user_id": other.id}, headers=auth_headers(patient)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_verify_and_queue(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that verification approves the prescription and empties the queue."""
        prescription = await self._upload(client, patient, auth_headers(patient))
        admin_headers = auth_headers(admin)

        queue = await client.get("/api/prescriptions/verification/queue", headers=admin_headers)
        assert [p["id"] for p in queue.json()] == [prescription["id"]]

        verified = await client.post(
            f"/api/prescriptions/{prescription['id']}/verify",
            json={"verification_method": "phone", "verification_notes": "Called office"},
            headers=admin_headers,
        )

        assert verified.status_code == 200
        body = verified.json()
        assert body["status"] == "approved"
        assert body["verification_status"] == "verified"
        assert body["verified_by"] == admin.id
        assert len(body["security_code"]) == 8
        queue = await client.get("/api/prescriptions/verification/queue", headers=admin_headers)
        assert queue.json() == []

    @pytest.mark.asyncio
    async def test_patient_cannot_verify(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that verification is reserved to administrators."""
        headers = auth_headers(patient)
        prescription = await self._upload(client, patient, headers)

        response = await client.post(
            f"/api/prescriptions/{prescription['id']}/verify", json={}, headers=headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_revoke(self, client: AsyncClient, patient, admin, auth_headers) -> None:
        """Test that revoking reports the reason and the number of cancelled orders."""
        prescription = await self._upload(client, patient, auth_headers(patient))

        response = await client.post(
            f"/api/prescriptions/{prescription['id']}/revoke",
            json={"reason": "Forged signature"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["orders_revoked"] == 0
        assert body["prescription"]["revoked"] is True
        assert body["prescription"]["revoked_reason"] == "Forged signature"

    @pytest.mark.asyncio
    async def test_revoke_needs_reason(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that a too-short revocation reason fails validation."""
        prescription = await self._upload(client, patient, auth_headers(patient))

        response = await client.post(
            f"/api/prescriptions/{prescription['id']}/revoke",
            json={"reason": "no"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_refill_decision_notifies_patient(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that an approved refill produces a notification the patient can read."""
        headers = auth_headers(patient)
        prescription = await self._upload(client, patient, headers)

        refill = await client.post(
            "/api/refills", json={"prescription_id": prescription["id"]}, headers=headers
        )
        assert refill.status_code == 201
        refill_id = refill.json()["id"]

        decided = await client.put(
            f"/api/refills/{refill_id}",
            json={"status": "approved", "notes": "Ready Friday."},
            headers=auth_headers(admin),
        )
        assert decided.json()["status"] == "approved"

        notifications = await client.get(
            f"/api/refills/notifications/{patient.id}", headers=headers
        )
        [notification] = notifications.json()
        assert notification["message"] == f"Your refill request #{refill_id} is now approved. Ready Friday."
        assert notification["read"] is False

        read = await client.post(
            f"/api/refills/notifications/{notification['id']}/read", headers=headers
        )
        assert read.json()["read"] is True

    @pytest.mark.asyncio
    async def test_patient_cannot_decide_refill(
        self, client: AsyncClient, patient, auth_headers
    ) -> None:
        """Test that refill decisions are reserved to administrators."""
        headers = auth_headers(patient)
        prescription = await self._upload(client, patient, headers)
        refill = await client.post(
            "/api/refills", json={"prescription_id": prescription["id"]}, headers=headers
        )

        response = await client.put(
            f"/api/refills/{refill.json()['id']}", json={"status": "approved"}, headers=headers
        )

        assert response.status_code == 403


@pytest.mark.contract
class TestPaymentMethodsContract:
    """Contract tests for /api/payment-methods."""

    @pytest.mark.asyncio
    async def test_add_card_keeps_metadata_only(
        self, client: AsyncClient, patient, auth_headers
    ) -> None:
        """Test that saved cards expose the brand and last four digits only."""
        headers = auth_headers(patient)

        response = await client.post(
            "/api/payment-methods",
            json={
                "card_number": "4111 1111 1111 1111",
                "card_holder": "Pat Jones",
                "expiry_date": "12/39",
                "cvv": "123",
            },
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["brand"] == "visa"
        assert body["last4"] == "1111"
        assert body["expiry_year"] == 2039
        assert body["is_default"] is True
        assert "card_number" not in body
        assert "cvv" not in body

        listed = await client.get(f"/api/payment-methods/{patient.id}", headers=headers)
        assert [m["id"] for m in listed.json()] == [body["id"]]

    @pytest.mark.asyncio
    async def test_invalid_card_rejected(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that a card failing the checksum fails validation."""
        response = await client.post(
            "/api/payment-methods",
            json={
                "card_number": "4111111111111112",
                "card_holder": "Pat Jones",
                "expiry_date": "12/39",
                "cvv": "123",
            },
            headers=auth_headers(patient),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_missing_card(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that deleting an unknown card is a 404."""
        response = await client.delete("/api/payment-methods/999", headers=auth_headers(patient))

        assert response.status_code == 404


@pytest.mark.contract
class TestWhiteLabelsContract:
    """Contract tests for /api/white-labels."""

    @pytest.mark.asyncio
    async def test_storefront_defaults(self, client: AsyncClient) -> None:
        """Test that the storefront gets built-in branding when nothing is configured."""
        response = await client.get("/api/white-labels/config")

        assert response.status_code == 200
        assert response.json()["name"] == "BoltEHR Pharmacy"

    @pytest.mark.asyncio
    async def test_theme_css(self, client: AsyncClient) -> None:
        """Test that the theme is served as a stylesheet."""
        response = await client.get("/api/white-labels/theme.css")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/css")
        assert ":root {" in response.text

    @pytest.mark.asyncio
    async def test_create_requires_admin(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that only administrators create configurations."""
        payload = {"name": "Acme Pharmacy", "primary_color": "#123456"}

        denied = await client.post("/api/white-labels", json=payload, headers=auth_headers(patient))
        created = await client.post("/api/white-labels", json=payload, headers=auth_headers(admin))

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json()["is_active"] is False

    @pytest.mark.asyncio
    async def test_activate_changes_storefront(
        self, client: AsyncClient, admin, auth_headers
    ) -> None:
        """Test that the activated configuration is what the storefront sees."""
        headers = auth_headers(admin)
        created = await client.post(
            "/api/white-labels", json={"name": "Acme Pharmacy"}, headers=headers
        )

        activated = await client.post(
            f"/api/white-labels/{created.json()['id']}/activate", headers=headers
        )
        storefront = await client.get("/api/white-labels/config")

        assert activated.json()["is_active"] is True
        assert storefront.json()["name"] == "Acme Pharmacy"

    @pytest.mark.asyncio
    async def test_patch_config(self, client: AsyncClient, admin, auth_headers) -> None:
        """Test that patching the storefront config creates an active configuration."""
        response = await client.patch(
            "/api/white-labels/config", json={"tagline": "Fast refills"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is True
        storefront = await client.get("/api/white-labels/config")
        assert storefront.json()["tagline"] == "Fast refills"

    @pytest.mark.asyncio
    async def test_unknown_config(self, client: AsyncClient, admin, auth_headers) -> None:
        """Test that a missing configuration is a 404."""
        response = await client.get("/api/white-labels/404", headers=auth_headers(admin))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_parse_website(self, client: AsyncClient, admin, auth_headers) -> None:
        """Test that a fetched page is turned into a theme suggestion."""
        page = (
            "<html><head><title>Acme Drugs</title>"
            "<style>:root { --primary-color: #0055aa; }</style></head><body></body></html>"
        )
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=page))
        app.dependency_overrides[get_website_parser] = lambda: WebsiteThemeParser(
            http_client=httpx.AsyncClient(transport=transport)
        )
        try:
            response = await client.post(
                "/api/white-labels/parse-website",
                json={"url": "acme.com"},
                headers=auth_headers(admin),
            )
        finally:
            app.dependency_overrides.pop(get_website_parser, None)

        assert response.status_code == 200
        assert response.json()["primary_color"] == "#0055aa"

    @pytest.mark.asyncio
    async def test_parse_website_upstream_failure(
        self, client: AsyncClient, admin, auth_headers
    ) -> None:
        """Test that an unreachable website is reported as a bad gateway."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        app.dependency_overrides[get_website_parser] = lambda: WebsiteThemeParser(
            http_client=httpx.AsyncClient(transport=transport)
        )
        try:
            response = await client.post(
                "/api/white-labels/parse-website",
                json={"url": "https://acme.com"},
                headers=auth_headers(admin),
            )
        finally:
            app.dependency_overrides.pop(get_website_parser, None)

        assert response.status_code == 502
        assert response.json()["error"]["type"] == "upstream_error"


@pytest.mark.contract
class TestShippingContract:
    """Contract tests for /api/shipping."""

    @pytest.mark.asyncio
    async def test_rates(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that every carrier service is quoted, cheapest first."""
        response = await client.post(
            "/api/shipping/rates",
            json={"destination": DESTINATION, "package": {"weight": 2}},
            headers=auth_headers(patient),
        )

        assert response.status_code == 200
        rates = response.json()
        assert len(rates) == 8
        amounts = [rate["price"] for rate in rates]
        assert amounts == sorted(amounts)

    @pytest.mark.asyncio
    async def test_rates_require_authentication(self, client: AsyncClient) -> None:
        """Test that anonymous callers cannot request quotes."""
        response = await client.post("/api/shipping/rates", json={"destination": DESTINATION})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_label_requires_admin(
        self, client: AsyncClient, patient, admin, auth_headers
    ) -> None:
        """Test that only administrators buy labels."""
        payload = {"destination": DESTINATION, "carrier_id": "fedex", "service_code": "twoday"}

        denied = await client.post("/api/shipping/label", json=payload, headers=auth_headers(patient))
        created = await client.post("/api/shipping/label", json=payload, headers=auth_headers(admin))

        assert denied.status_code == 403
        assert created.status_code == 200
        assert created.json()["tracking_number"]

    @pytest.mark.asyncio
    async def test_track(self, client: AsyncClient, patient, auth_headers) -> None:
        """Test that tracking infers the carrier from the number."""
        response = await client.get(
            "/api/shipping/track/1Z0000000005", headers=auth_headers(patient)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Delivered"

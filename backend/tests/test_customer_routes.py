"""
ANGAGU Backend — Customer Route Tests (login, catalogue, signup)
=================================================================

What:  HTTP-level tests for /customer login, the public catalogue and the
       SMS → verification token → signup flow.
How:   httpx AsyncClient over ASGITransport against an in-memory database;
       the SMS provider is patched and codes are read from the database.

What we test:
    ✅ malformed email → 101 (HTTP 202 on login, 404 on signup/email check)
    ✅ wrong password → 405, and no response ever contains the password
    ✅ round trip: request code → confirm code → signup with the token
    ✅ codes sent as numbers or full-width digits; wrong guesses use up a code
    ✅ duplicate signup → 306, distinct from 307
    ✅ product detail assembles ordered images; unknown product → 300
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from angagu.config import settings
from angagu.exceptions import SmsGatewayError
from angagu.models import Customer, SmsVerification
from angagu.security import create_verification_token, decode_token, verified_phone_number
from angagu.services.customer_service import CustomerService

from conftest import PASSWORD, error_code

PHONE = "01055556666"


async def _pending_code(session_factory, phone=PHONE) -> str:
    async with session_factory() as session:
        return (await session.get(SmsVerification, phone)).code


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, test_client, seed):
        """Correct credentials return a customer access token."""
        customer_id = await seed.customer(email="buyer@angagu.kr")

        response = await test_client.post(
            "/customer/login", json={"email": "buyer@angagu.kr", "password": PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["message"] == "OK"
        user = body["data"]["user"]
        assert user["id"] == customer_id
        assert user["type"] == "customer"
        assert "password" not in user
        claims = decode_token(body["data"]["token"])
        assert claims["id"] == customer_id
        assert claims["type"] == "customer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["not-an-email", "", None])
    async def test_malformed_email_is_101(self, test_client, email):
        """A malformed email is refused with 101."""
        response = await test_client.post("/customer/login", json={"email": email, "password": "x"})
        assert response.status_code == 202
        assert error_code(response) == 101

    @pytest.mark.asyncio
    async def test_unknown_account_is_102(self, test_client):
        """An unknown email returns 102."""
        response = await test_client.post(
            "/customer/login", json={"email": "ghost@angagu.kr", "password": PASSWORD}
        )
        assert response.status_code == 202
        assert error_code(response) == 102

    @pytest.mark.asyncio
    async def test_wrong_password_is_405_without_password(self, test_client, seed):
        """A wrong password returns 405 and no account data."""
        await seed.customer(email="buyer@angagu.kr")

        response = await test_client.post(
            "/customer/login", json={"email": "buyer@angagu.kr", "password": "wrong12!@"}
        )

        assert response.status_code == 405
        assert response.json()["data"] == {"errCode": 405}
        assert "$2b$" not in response.text

    @pytest.mark.asyncio
    async def test_database_failure_is_100(self, test_client, monkeypatch):
        """A database failure during login returns 100."""
        from angagu.services.result import ServiceResult

        monkeypatch.setattr(
            CustomerService,
            "get_customer_by_email",
            AsyncMock(return_value=ServiceResult.error(err="OperationalError")),
        )
        response = await test_client.post(
            "/customer/login", json={"email": "buyer@angagu.kr", "password": PASSWORD}
        )
        assert response.status_code == 500
        assert response.json()["data"] == {"errCode": 100, "err": "OperationalError"}


class TestCatalogue:

    @pytest.mark.asyncio
    async def test_products_lists_approved_only(self, test_client, seed):
        """The catalogue lists approved products only."""
        company_id = await seed.company()
        approved = await seed.product(company_id, name="Sofa", approved=True)
        await seed.product(company_id, name="Pending", approved=False)

        response = await test_client.get("/customer/products")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]] == [approved]

    @pytest.mark.asyncio
    async def test_product_detail_attaches_ordered_images(self, test_client, seed):
        """Product detail includes its images in order."""
        company_id = await seed.company()
        product_id = await seed.product(company_id, approved=True, images=("1.jpg", "2.jpg", "3.jpg"))

        response = await test_client.get(f"/customer/products/{product_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == product_id
        assert [i["url"] for i in data["images"]] == ["1.jpg", "2.jpg", "3.jpg"]
        assert [i["position"] for i in data["images"]] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_unknown_product_is_300(self, test_client):
        """An unknown product id returns 300."""
        response = await test_client.get("/customer/products/999")
        assert response.status_code == 404
        assert error_code(response) == 300

    @pytest.mark.asyncio
    async def test_non_integer_id_is_504(self, test_client):
        """A non-integer product id returns 504."""
        response = await test_client.get("/customer/products/abc")
        assert response.status_code == 422
        assert error_code(response) == 504

    @pytest.mark.asyncio
    async def test_model_url(self, test_client, seed):
        """The model URL of a product is returned."""
        company_id = await seed.company()
        product_id = await seed.product(company_id, approved=True, model_url="https://cdn/x.glb")

        response = await test_client.get(f"/customer/products/{product_id}/ar")

        assert response.json()["data"] == {"model_url": "https://cdn/x.glb"}


class TestSmsSignup:

    @pytest.mark.asyncio
    async def test_round_trip_creates_customer(self, test_client, session_factory, sms_provider):
        """Code request, confirmation and signup create a customer."""
        sent = await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})
        assert sent.status_code == 200
        assert sent.json()["status"] == "success"
        sms_provider.assert_awaited_once()

        code = await _pending_code(session_factory)
        confirmed = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": code}
        )
        assert confirmed.status_code == 200
        token = confirmed.json()["data"]["token"]

        created = await test_client.post(
            "/customer/signup",
            json={"email": "new@angagu.kr", "password": PASSWORD, "name": "New"},
            headers={"verification": token},
        )
        assert created.status_code == 200
        new_id = created.json()["data"]["id"]

        async with session_factory() as session:
            customer = (await session.execute(select(Customer).where(Customer.id == new_id))).scalar_one()
        assert customer.phone_number == PHONE
        assert customer.password != PASSWORD

    @pytest.mark.asyncio
    async def test_invalid_phone_is_104(self, test_client, sms_provider):
        """An invalid phone returns 104 without sending an SMS."""
        response = await test_client.post("/customer/signup/sms/code", json={"phone_number": "12345"})
        assert response.status_code == 404
        assert error_code(response) == 104
        sms_provider.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_rejection_is_403(self, test_client, sms_provider):
        """A provider status other than 202 returns 403."""
        sms_provider.return_value = "400"
        response = await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})
        assert response.status_code == 404
        assert error_code(response) == 403

    @pytest.mark.asyncio
    async def test_provider_unreachable_is_403(self, test_client, sms_provider):
        """An unreachable provider returns 403."""
        sms_provider.side_effect = SmsGatewayError()
        response = await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})
        assert response.status_code == 404
        assert error_code(response) == 403

    @pytest.mark.asyncio
    async def test_wrong_code_is_400(self, test_client, session_factory, sms_provider):
        """A wrong code returns 400."""
        await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})
        code = await _pending_code(session_factory)
        wrong = "000000" if code != "000000" else "111111"

        response = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": wrong}
        )
        assert response.status_code == 404
        assert error_code(response) == 400

    @pytest.mark.asyncio
    async def test_full_width_code_is_400(self, test_client, sms_provider):
        """Full-width digits are answered as a wrong code, not a server error."""
        await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})

        response = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": "１２３４５６"}
        )
        assert response.status_code == 404
        assert error_code(response) == 400

    @pytest.mark.asyncio
    async def test_numeric_code_is_accepted(self, test_client, sms_provider):
        """A code sent as a JSON number is matched by its digits."""
        with patch("angagu.services.sms_gateway.generate_code", return_value="123456"):
            await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})

        response = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": 123456}
        )
        assert response.status_code == 200
        assert verified_phone_number(response.json()["data"]["token"]) == PHONE

    @pytest.mark.asyncio
    async def test_wrong_guesses_use_up_the_code(self, test_client, session_factory, sms_provider, monkeypatch):
        """After sms_max_attempts wrong codes even the right one is refused."""
        monkeypatch.setattr(settings, "sms_max_attempts", 2)
        await test_client.post("/customer/signup/sms/code", json={"phone_number": PHONE})
        code = await _pending_code(session_factory)
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(2):
            response = await test_client.post(
                "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": wrong}
            )
            assert error_code(response) == 400

        response = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": code}
        )
        assert response.status_code == 404
        assert error_code(response) == 401

    @pytest.mark.asyncio
    async def test_no_pending_code_is_401(self, test_client):
        """Confirming without a pending code returns 401."""
        response = await test_client.post(
            "/customer/signup/sms/verification", json={"phone_number": PHONE, "code": "123456"}
        )
        assert response.status_code == 404
        assert error_code(response) == 401

    @pytest.mark.asyncio
    async def test_signup_without_token_is_404(self, test_client):
        """Signup without a verification token returns 404."""
        response = await test_client.post(
            "/customer/signup", json={"email": "new@angagu.kr", "password": PASSWORD}
        )
        assert response.status_code == 404
        assert error_code(response) == 404

    @pytest.mark.asyncio
    async def test_signup_with_garbage_token_is_404(self, test_client):
        """Signup with an unreadable token returns 404."""
        response = await test_client.post(
            "/customer/signup",
            json={"email": "new@angagu.kr", "password": PASSWORD},
            headers={"verification": "garbage"},
        )
        assert error_code(response) == 404

    @pytest.mark.asyncio
    async def test_signup_checks_password_before_email(self, test_client):
        """Password policy is checked before the email."""
        headers = {"verification": create_verification_token(PHONE)}
        response = await test_client.post(
            "/customer/signup", json={"email": "bad", "password": "weak"}, headers=headers
        )
        assert error_code(response) == 103

        response = await test_client.post(
            "/customer/signup", json={"email": "bad", "password": PASSWORD}, headers=headers
        )
        assert response.status_code == 404
        assert error_code(response) == 101

    @pytest.mark.asyncio
    async def test_duplicate_signup_is_306(self, test_client, seed):
        """Signing up with a taken email returns 306."""
        await seed.customer(email="taken@angagu.kr", phone_number="01011112222")

        response = await test_client.post(
            "/customer/signup",
            json={"email": "taken@angagu.kr", "password": PASSWORD},
            headers={"verification": create_verification_token(PHONE)},
        )
        assert response.status_code == 404
        assert error_code(response) == 306

    @pytest.mark.asyncio
    async def test_other_insert_failure_is_307(self, test_client, monkeypatch):
        """Any other insert failure returns 307."""
        from angagu.services.result import ServiceResult

        monkeypatch.setattr(
            CustomerService, "customer_signup", AsyncMock(return_value=ServiceResult.error(err="boom"))
        )
        response = await test_client.post(
            "/customer/signup",
            json={"email": "new@angagu.kr", "password": PASSWORD},
            headers={"verification": create_verification_token(PHONE)},
        )
        assert error_code(response) == 307


class TestEmailCheck:

    @pytest.mark.asyncio
    async def test_free_email(self, test_client):
        """An unused email passes the check."""
        response = await test_client.post("/customer/signup/email", json={"email": "free@angagu.kr"})
        assert response.status_code == 200
        assert response.json()["status"] == "success"

    @pytest.mark.asyncio
    async def test_malformed_email_is_101(self, test_client):
        """A malformed email is refused with 101."""
        response = await test_client.post("/customer/signup/email", json={"email": "free@"})
        assert response.status_code == 404
        assert error_code(response) == 101

    @pytest.mark.asyncio
    async def test_taken_email_is_402(self, test_client, seed):
        """A registered email returns 402."""
        await seed.customer(email="taken@angagu.kr")
        response = await test_client.post("/customer/signup/email", json={"email": "taken@angagu.kr"})
        assert response.status_code == 404
        assert error_code(response) == 402

"""
ANGAGU Backend — Address Book Route Tests
==========================================

What:  /customer/address CRUD, the default address, and the ownership gates.

Gate order on every write to /address/{id}:
    lookup (≠1 row → 404/503) → owner (→ 403/502) → body (→ 400/501) → write
"""

import pytest

from conftest import bearer, error_code

ROAD = {"road": "12 Teheran-ro", "recipient": "Kim", "detail": "Apt 101", "zip_code": "06234"}
LAND = {"land": "Yeoksam-dong 123", "recipient": "Lee", "detail": "2F"}


class TestPostAddress:

    @pytest.mark.asyncio
    async def test_road_address_is_created(self, test_client, seed):
        """A road address is stored and listed for its owner."""
        customer_id = await seed.customer()

        response = await test_client.post("/customer/address", json=ROAD, headers=bearer(customer_id, "customer"))

        assert response.status_code == 200
        address_id = response.json()["data"]["id"]

        listed = await test_client.get("/customer/address", headers=bearer(customer_id, "customer"))
        rows = listed.json()["data"]
        assert [a["id"] for a in rows] == [address_id]
        assert rows[0]["road"] == "12 Teheran-ro"
        assert rows[0]["land"] is None
        assert rows[0]["is_default"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"road": "A", "land": "B", "recipient": "Kim", "detail": "1"},
        {"recipient": "Kim", "detail": "1"},
        {"road": "A", "detail": "1"},
        {"land": "B", "recipient": "Kim"},
    ])
    async def test_invalid_shape_is_501(self, test_client, seed, body):
        """Bodies mixing or missing address kinds are rejected with 501."""
        customer_id = await seed.customer()

        response = await test_client.post("/customer/address", json=body, headers=bearer(customer_id, "customer"))

        assert response.status_code == 400
        assert error_code(response) == 501

    @pytest.mark.asyncio
    async def test_company_token_is_200(self, test_client, seed):
        """A company token cannot post a customer address."""
        company_id = await seed.company()

        response = await test_client.post("/customer/address", json=ROAD, headers=bearer(company_id, "company"))

        assert response.status_code == 403
        assert error_code(response) == 200

    @pytest.mark.asyncio
    async def test_missing_token_is_201(self, test_client):
        """Posting an address without a token is refused with 201."""
        response = await test_client.post("/customer/address", json=ROAD)
        assert response.status_code == 403
        assert error_code(response) == 201

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_caller(self, test_client, seed):
        """Each customer sees only their own addresses."""
        mine = await seed.customer()
        other = await seed.customer(email="other@angagu.kr", phone_number="01099998888")
        await seed.address(other)

        response = await test_client.get("/customer/address", headers=bearer(mine, "customer"))
        assert response.json()["data"] == []


class TestOwnershipGates:

    @pytest.mark.asyncio
    async def test_nonexistent_address_is_503(self, test_client, seed):
        """An unknown address id returns 503."""
        customer_id = await seed.customer()

        response = await test_client.put("/customer/address/999", json=ROAD, headers=bearer(customer_id, "customer"))

        assert response.status_code == 404
        assert error_code(response) == 503

    @pytest.mark.asyncio
    async def test_foreign_address_is_502(self, test_client, seed):
        """Another customer's address returns 502."""
        owner = await seed.customer()
        intruder = await seed.customer(email="other@angagu.kr", phone_number="01099998888")
        address_id = await seed.address(owner)

        for method in ("put", "delete"):
            kwargs = {"json": ROAD} if method == "put" else {}
            response = await getattr(test_client, method)(
                f"/customer/address/{address_id}", headers=bearer(intruder, "customer"), **kwargs
            )
            assert response.status_code == 403
            assert error_code(response) == 502

        response = await test_client.post(
            f"/customer/address/default/{address_id}", headers=bearer(intruder, "customer")
        )
        assert error_code(response) == 502

    @pytest.mark.asyncio
    async def test_ownership_is_checked_before_body(self, test_client, seed):
        """Ownership fails before an invalid body is looked at."""
        owner = await seed.customer()
        intruder = await seed.customer(email="other@angagu.kr", phone_number="01099998888")
        address_id = await seed.address(owner)

        response = await test_client.put(
            f"/customer/address/{address_id}", json={}, headers=bearer(intruder, "customer")
        )
        assert error_code(response) == 502


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_put_replaces_fields(self, test_client, seed):
        """PUT overwrites the stored address fields."""
        customer_id = await seed.customer()
        address_id = await seed.address(customer_id)
        headers = bearer(customer_id, "customer")

        response = await test_client.put(f"/customer/address/{address_id}", json=LAND, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"id": address_id}

        row = (await test_client.get("/customer/address", headers=headers)).json()["data"][0]
        assert row["road"] is None
        assert row["land"] == "Yeoksam-dong 123"
        assert row["recipient"] == "Lee"

    @pytest.mark.asyncio
    async def test_put_with_invalid_body_is_501(self, test_client, seed):
        """PUT with an invalid address shape returns 501."""
        customer_id = await seed.customer()
        address_id = await seed.address(customer_id)

        response = await test_client.put(
            f"/customer/address/{address_id}", json={"recipient": "Kim"}, headers=bearer(customer_id, "customer")
        )
        assert response.status_code == 400
        assert error_code(response) == 501

    @pytest.mark.asyncio
    async def test_delete_removes_address(self, test_client, seed):
        """DELETE removes the address row."""
        customer_id = await seed.customer()
        address_id = await seed.address(customer_id)
        headers = bearer(customer_id, "customer")

        response = await test_client.delete(f"/customer/address/{address_id}", headers=headers)
        assert response.status_code == 200

        again = await test_client.delete(f"/customer/address/{address_id}", headers=headers)
        assert again.status_code == 404
        assert error_code(again) == 503


class TestDefaultAddress:

    @pytest.mark.asyncio
    async def test_no_default_is_503(self, test_client, seed):
        """A customer without a default address gets 503."""
        customer_id = await seed.customer()
        await seed.address(customer_id)

        response = await test_client.get("/customer/address/default", headers=bearer(customer_id, "customer"))

        assert response.status_code == 404
        assert error_code(response) == 503

    @pytest.mark.asyncio
    async def test_set_default_moves_the_flag(self, test_client, seed):
        """Setting a new default clears the old one."""
        customer_id = await seed.customer()
        first = await seed.address(customer_id, is_default=True)
        second = await seed.address(customer_id, road="99 Gangnam-daero")
        headers = bearer(customer_id, "customer")

        response = await test_client.post(f"/customer/address/default/{second}", headers=headers)
        assert response.status_code == 200

        default = (await test_client.get("/customer/address/default", headers=headers)).json()["data"]
        assert default["id"] == second
        assert default["road"] == "99 Gangnam-daero"

        flags = {a["id"]: a["is_default"] for a in (await test_client.get("/customer/address", headers=headers)).json()["data"]}
        assert flags == {first: False, second: True}

from mdfury.core.config import config

ADMIN_KEY = config.INVITE_KEY


async def generate(client, **payload):
    response = await client.post("/api/v1/admin/invite/generate", json={"invite_key": ADMIN_KEY, **payload})
    assert response.status_code == 200, response.text
    return response.json()["data"]


class TestAdminInviteRoutes:
    async def test_verify(self, client):
        ok = await client.post("/api/v1/admin/invite/verify", json={"invite_key": ADMIN_KEY})
        assert ok.status_code == 200
        assert ok.json()["success"] is True

        bad = await client.post("/api/v1/admin/invite/verify", json={"invite_key": "nope"})
        assert bad.status_code == 403
        assert bad.json()["error"]["message"] == "Invalid invite key"

    async def test_generate_with_bad_key(self, client):
        response = await client.post("/api/v1/admin/invite/generate", json={"invite_key": "nope"})
        assert response.status_code == 403

    async def test_generate(self, client):
        data = await generate(client)
        assert len(data["code"]) == 12
        assert data["expires_at"] is None

        expiring = await generate(client, expiry_hours=48)
        assert expiring["expires_at"] is not None

    async def test_generate_with_unrepresentable_expiry(self, client):
        response = await client.post("/api/v1/admin/invite/generate",
                                     json={"invite_key": ADMIN_KEY, "expiry_hours": 1e12})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Expiry is too far in the future"

    async def test_stats(self, client):
        first = await generate(client)
        await generate(client)
        await client.post("/api/v1/invite/use", json={"invite_code": first["code"]})

        response = await client.post("/api/v1/admin/invite/stats", json={"invite_key": ADMIN_KEY})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stats"] == {"total": 2, "active": 1, "used": 1, "expired": 0}
        assert len(data["recent_codes"]) == 2

    async def test_stats_with_bad_key(self, client):
        response = await client.post("/api/v1/admin/invite/stats", json={"invite_key": "nope"})
        assert response.status_code == 403


class TestPublicInviteRoutes:
    async def test_validate_requires_code(self, client):
        response = await client.post("/api/v1/invite/validate", json={"invite_code": "   "})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invite code is required"

    async def test_validate_unknown_code(self, client):
        response = await client.post("/api/v1/invite/validate", json={"invite_code": "NOSUCHCODE00"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid invite code"

    async def test_validate_after_generate_without_expiry(self, client):
        code = (await generate(client, expiry_hours=0))["code"]
        response = await client.post("/api/v1/invite/validate", json={"invite_code": code.lower()})
        assert response.status_code == 200
        assert response.json()["data"]["code"] == code

    async def test_use_twice(self, client, make_user):
        user, _ = await make_user("newcomer")
        code = (await generate(client))["code"]

        first = await client.post("/api/v1/invite/use", json={"invite_code": code, "used_by": user.id})
        assert first.status_code == 200
        assert first.json()["data"]["is_used"] is True
        assert first.json()["data"]["used_by_user_id"] == user.id

        second = await client.post("/api/v1/invite/use", json={"invite_code": code, "used_by": user.id})
        assert second.status_code == 400
        assert second.json()["error"]["message"] == "Invite code has already been used"

        validate = await client.post("/api/v1/invite/validate", json={"invite_code": code})
        assert validate.json()["error"]["message"] == "Invite code has already been used"

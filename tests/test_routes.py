"""
HTTP-level tests for /signup, /signin and /me.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from auth.errors import MissingSecretError
from main import create_app

DAVIDE = {
    "fullName": "davide d'antonio",
    "username": "davide",
    "password": "davide",
}


async def _signup(client, body=None):
    return await client.post("/signup", json=body or DAVIDE)


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup(self, client):
        res = await _signup(client)
        assert res.status_code == 200
        assert res.json()["token"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["password", "username", "fullName"])
    async def test_missing_field(self, client, missing):
        body = {k: v for k, v in DAVIDE.items() if k != missing}
        res = await _signup(client, body)
        assert res.status_code == 400
        assert res.json() == {
            "statusCode": 400,
            "error": "Bad Request",
            "message": f"body should have required property '{missing}'",
        }

    @pytest.mark.asyncio
    async def test_double_signup(self, client):
        assert (await _signup(client)).status_code == 200
        res = await _signup(client)
        assert res.status_code == 400
        assert res.json()["message"] == "username already registered"

    @pytest.mark.asyncio
    async def test_empty_password(self, client):
        res = await _signup(client, {**DAVIDE, "password": ""})
        assert res.status_code == 400
        assert res.json()["error"] == "Bad Request"


class TestSignin:
    @pytest.mark.asyncio
    async def test_signup_and_login(self, client):
        await _signup(client)
        res = await client.post("/signin", json={"username": "davide", "password": "davide"})
        assert res.status_code == 200
        assert res.json()["token"]

    @pytest.mark.asyncio
    async def test_wrong_credentials(self, client):
        await _signup(client)
        res = await client.post("/signin", json={"username": "davide", "password": "davide2"})
        assert res.status_code == 400
        assert res.json() == {"status": "Invalid password"}

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        res = await client.post("/signin", json={"username": "nobody", "password": "x"})
        assert res.status_code == 400
        assert res.json() == {"status": "Invalid password"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,missing",
        [({"username": "davide"}, "password"), ({"password": "aaaaa"}, "username")],
    )
    async def test_missing_field(self, client, body, missing):
        res = await client.post("/signin", json=body)
        assert res.status_code == 400
        assert res.json()["message"] == f"body should have required property '{missing}'"


class TestMe:
    @pytest.mark.asyncio
    async def test_signup_and_use_token(self, client):
        token = (await _signup(client)).json()["token"]
        res = await client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 200
        assert res.json() == {"username": "davide"}

    @pytest.mark.asyncio
    async def test_signin_token(self, client):
        await _signup(client)
        signin = await client.post("/signin", json={"username": "davide", "password": "davide"})
        res = await client.get(
            "/me", headers={"Authorization": f"Bearer {signin.json()['token']}"},
        )
        assert res.status_code == 200
        assert res.json() == {"username": "davide"}

    @pytest.mark.asyncio
    async def test_missing_header(self, client):
        res = await client.get("/me")
        assert res.status_code == 401
        assert res.json()["error"] == "Unauthorized"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Bearer garbage", "Basic abc", "Bearer "])
    async def test_bad_header(self, client, header):
        res = await client.get("/me", headers={"Authorization": header})
        assert res.status_code == 401

    @pytest.mark.asyncio
    async def test_tampered_token(self, client):
        token = (await _signup(client)).json()["token"]
        tampered = token[:-1] + ("0" if token[-1] != "0" else "1")
        res = await client.get("/me", headers={"Authorization": f"Bearer {tampered}"})
        assert res.status_code == 401


class TestAppFactory:
    def test_missing_secret_is_fatal(self, settings, session_factory):
        settings.jwt_secret = None
        with pytest.raises(MissingSecretError):
            create_app(settings, session_factory=session_factory)

    @pytest.mark.asyncio
    async def test_prefix(self, settings, session_factory):
        settings.auth_prefix = "/auth"
        app = create_app(settings, session_factory=session_factory)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as ac:
            assert (await ac.post("/auth/signup", json=DAVIDE)).status_code == 200
            assert (await ac.post("/signup", json=DAVIDE)).status_code == 404

    @pytest.mark.asyncio
    async def test_owned_engine_lifecycle(self, settings, tmp_path):
        settings.database_url = f"sqlite+aiosqlite:///{tmp_path / 'owned.db'}"
        app = create_app(settings)
        async with app.router.lifespan_context(app):
            async with AsyncClient(
                transport=ASGITransport(app=app), base_url="http://test",
            ) as ac:
                signup = await ac.post("/signup", json=DAVIDE)
                assert signup.status_code == 200
                assert "X-Process-Time" in signup.headers
                assert signup.headers["Cache-Control"] == "no-store"

                me = await ac.get(
                    "/me", headers={"Authorization": f"Bearer {signup.json()['token']}"},
                )
                assert me.status_code == 200
                assert me.json() == {"username": "davide"}
                assert float(me.headers["X-Process-Time"]) >= 0

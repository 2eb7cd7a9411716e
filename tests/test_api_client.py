import json
from urllib.parse import parse_qs

import httpx
import pytest

from tourdesk.app.config import Settings
from tourdesk.app.services.api_client import ApiError, TourApiClient


def _client(handler, **overrides):
    settings = Settings(api_base_url="http://api.test", **overrides)
    return TourApiClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_encodes_nested_params_and_bearer():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"data": [], "meta": {"total": 0}})

    client = _client(handler, access_token="abc")
    response = await client.get_prices("hotels", [{"hotel_id": 1, "start_date": "2024-01-01 12:00:01"}])
    await client.close()

    request = seen["request"]
    assert request.url.path == "/prices"
    query = parse_qs(request.url.query.decode())
    assert query["hotels[0][hotel_id]"] == ["1"]
    assert query["hotels[0][start_date]"] == ["2024-01-01 12:00:01"]
    assert request.headers["Authorization"] == "Bearer abc"
    assert response["meta"] == {"total": 0}


@pytest.mark.asyncio
async def test_put_is_sent_as_post_with_method_override():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = parse_qs(request.content.decode())
        seen["content_type"] = request.headers["Content-Type"]
        return httpx.Response(200, json={"data": {"id": 3}})

    client = _client(handler)
    await client.put("/hotels/3", {"name": "Renamed"})
    await client.close()

    assert seen["method"] == "POST"
    assert seen["body"] == {"name": ["Renamed"], "_method": ["PUT"]}
    assert seen["content_type"] == "application/x-www-form-urlencoded"


@pytest.mark.asyncio
async def test_method_override_can_be_disabled():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        return httpx.Response(204)

    client = _client(handler, method_override=False)
    response = await client.delete("/hotels/3")
    await client.close()
    assert seen["method"] == "DELETE"
    assert response == {}


@pytest.mark.asyncio
async def test_validation_errors_are_transformed():
    def handler(request):
        body = {
            "error": {
                "message": "The given data was invalid.",
                "errors": {"email": ["Email is required", "Email is invalid"]},
            }
        }
        return httpx.Response(422, content=json.dumps(body))

    client = _client(handler)
    with pytest.raises(ApiError) as info:
        await client.post("/users", {})
    await client.close()

    assert info.value.status_code == 422
    assert info.value.message == "The given data was invalid."
    assert info.value.formik_errors == {"email": "Email is required, Email is invalid"}


@pytest.mark.asyncio
async def test_unstructured_errors_keep_status():
    client = _client(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(ApiError) as info:
        await client.get("/hotels")
    await client.close()
    assert info.value.status_code == 500
    assert info.value.formik_errors is None


@pytest.mark.asyncio
async def test_login_stores_token_in_file(tmp_path):
    token_file = tmp_path / "token"

    def handler(request):
        if request.url.path == "/login":
            return httpx.Response(200, json={"access_token": "fresh"})
        if request.url.path == "/me":
            return httpx.Response(200, json={"data": {"id": 1, "name": "A", "email": "a@b.c"}})
        return httpx.Response(204)

    client = _client(handler, token_file=token_file)
    await client.login({"email": "a@b.c", "password": "x"})
    assert client.token == "fresh"
    assert token_file.read_text() == "fresh"
    assert (await client.get_current_user())["email"] == "a@b.c"

    await client.logout()
    assert client.token is None
    assert not token_file.exists()
    await client.close()


def test_token_is_loaded_from_file(tmp_path):
    token_file = tmp_path / "token"
    token_file.write_text("saved\n")
    client = _client(lambda request: httpx.Response(204), token_file=token_file)
    assert client.token == "saved"


@pytest.mark.asyncio
async def test_transport_errors_become_api_errors():
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    client = _client(refuse)
    with pytest.raises(ApiError) as info:
        await client.get("/hotels")
    await client.close()
    assert info.value.status_code is None
    assert "Connection refused" in info.value.message
    assert isinstance(info.value.__cause__, httpx.ConnectError)

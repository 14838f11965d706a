"""Build routes — HTTP translation of store results.

Invariants:
    - Success → {status, message, data} with camelCase data keys
    - Failure → error.http_status with the structured error envelope
    - Binary routes stream bytes with the right media type
"""

import json

from tests.services.build_payloads import PNG_BYTES, create_body


async def _submit(client, **overrides) -> str:
    res = await client.post("/build/submit", json=create_body(**overrides))
    assert res.status_code == 201
    return res.json()["data"]["shortcode"]


async def test_submit_returns_links(client):
    res = await client.post("/build/submit", json=create_body())
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "Success"
    data = body["data"]
    assert data["downloadUrl"].endswith(f"/build/download/{data['shortcode']}")
    assert data["schemaUrl"] == f"mrb://{data['shortcode']}"
    assert data["expiresAt"].endswith("Z")


async def test_submit_blank_archetype_is_400(client):
    res = await client.post("/build/submit", json=create_body(archetype=" "))
    assert res.status_code == 400
    body = res.json()
    assert body["status"] == "Failed"
    assert body["error"]["code"] == "VALIDATION_ERROR"


async def test_submit_missing_field_is_400(client):
    body = create_body()
    del body["buildData"]
    res = await client.post("/build/submit", json=body)
    assert res.status_code == 400
    assert res.json()["status"] == "Failed"
    assert res.json()["error"]["details"]


async def test_retrieve_and_lookup(client):
    code = await _submit(client)
    res = await client.get(f"/build/retrieve/{code}")
    assert res.status_code == 200
    assert res.json()["data"]["primary"] == "Fire Blast"
    assert (await client.get(f"/build/lookup/{code}")).status_code == 200
    assert (await client.get("/build/lookup/unknown")).status_code == 404


async def test_update_then_delete(client):
    code = await _submit(client)
    update = {k: v for k, v in create_body(name="Renamed").items()
              if k in ("name", "buildData", "imageData")}
    res = await client.patch(f"/build/update/{code}", json=update)
    assert res.status_code == 200
    assert res.json()["data"]["shortcode"] == code

    assert (await client.delete(f"/build/delete/{code}")).status_code == 200
    res = await client.get(f"/build/retrieve/{code}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RECORD_NOT_FOUND"


async def test_download_is_attachment(client):
    code = await _submit(client)
    res = await client.get(f"/build/download/{code}")
    assert res.status_code == 200
    assert "attachment" in res.headers["content-disposition"]
    assert "Blasty [Blaster]" in res.headers["content-disposition"]
    assert json.loads(res.content)["Class"] == "Class_Blaster"


async def test_download_corrupt_build_is_422(client):
    code = await _submit(client, build_data="@@@")
    res = await client.get(f"/build/download/{code}")
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "DATA_CORRUPTION"


async def test_image_png_only(client):
    code = await _submit(client)
    res = await client.get(f"/build/image/{code}.png")
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert res.content == PNG_BYTES
    assert (await client.get(f"/build/image/{code}.jpg")).status_code == 404


async def test_preview_missing_page_is_404(client):
    code = await _submit(client)
    assert (await client.get(f"/build/preview/{code}.htm")).status_code == 404


async def test_schema_and_request_redirect(client):
    code = await _submit(client)
    res = await client.get(f"/build/schema/{code}")
    assert res.status_code == 200
    assert res.json()["data"]["data"]

    res = await client.get(f"/build/request/{code}")
    assert res.status_code == 301
    assert res.headers["location"] == f"mrb://{code}"
    assert (await client.get("/build/request/unknown")).status_code == 404


async def test_search(client):
    await _submit(client)
    res = await client.get("/build/search", params={"value": "Blaster,Fire Blast"})
    assert res.status_code == 200
    assert len(res.json()["data"]) == 1

    res = await client.get("/build/search", params={"value": "Fire Blast,Blaster"})
    assert res.status_code == 400
    assert (await client.get("/build/search")).status_code == 400
    res = await client.get("/build/search", params={"value": "Defender"})
    assert res.status_code == 404


async def test_health(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_errors_raised_outside_the_store_use_the_failure_envelope(client):
    from buildshare.api.routes.builds import get_build_store
    from buildshare.core.errors import InfrastructureError
    from buildshare.main import app

    def unavailable():
        raise InfrastructureError("pool exhausted", "connect")

    app.dependency_overrides[get_build_store] = unavailable
    res = await client.get("/build/retrieve/abc")
    assert res.status_code == 503
    body = res.json()
    assert body["status"] == "Failed"
    assert body["message"] == "Database connect failed: pool exhausted"
    assert body["error"]["code"] == "DATABASE_ERROR"

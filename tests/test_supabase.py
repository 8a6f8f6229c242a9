"""Tests for the Supabase item writer."""

import json

import httpx
import pytest

from crawler.extractors import ItemRecord
from database.supabase import SupabaseItemSync, SyncResponse

from conftest import api_transport

ITEM = ItemRecord(
    game_id=100300,
    name_en="Flame Elementium",
    icon_url="https://cdn.tlidb.com/UI/Textures/Item/Flame_Elementium.webp",
    description="An ember-crafting material",
    source_url="https://tlidb.com/en/Flame_Elementium",
)


async def test_upsert_request_shape(settings):
    requests = []
    transport = api_transport(lambda request: httpx.Response(201), requests)

    async with SupabaseItemSync(settings.supabase, transport=transport) as syncer:
        response = await syncer.upsert_item(ITEM)

    assert response.status_code == 201
    assert response.ok

    request = requests[0]
    assert request.method == "POST"
    assert request.url.scheme == "https"
    assert request.url.host == "project.supabase.co"
    assert request.url.path == "/rest/v1/tli_game_items"
    assert request.url.params["on_conflict"] == "game_id"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["apikey"] == "test-anon-key"
    assert request.headers["Authorization"] == "Bearer test-anon-key"
    assert int(request.headers["Content-Length"]) == len(request.content)
    assert json.loads(request.content) == {
        "game_id": 100300,
        "name_en": "Flame Elementium",
        "icon_url": "https://cdn.tlidb.com/UI/Textures/Item/Flame_Elementium.webp",
    }


async def test_repeated_upserts_always_request_merge(settings):
    requests = []
    transport = api_transport(lambda request: httpx.Response(200), requests)

    async with SupabaseItemSync(settings.supabase, transport=transport) as syncer:
        await syncer.upsert_item(ITEM)
        await syncer.upsert_item(ITEM)

    assert len(requests) == 2
    for request in requests:
        assert request.url.params["on_conflict"] == "game_id"
        assert request.headers["Prefer"] == "resolution=merge-duplicates"
    assert requests[0].content == requests[1].content


async def test_error_status_is_returned(settings):
    requests = []
    transport = api_transport(
        lambda request: httpx.Response(409, text='{"code":"23505"}'), requests
    )

    async with SupabaseItemSync(settings.supabase, transport=transport) as syncer:
        response = await syncer.upsert_item(ITEM)

    assert response == SyncResponse(status_code=409, body='{"code":"23505"}')
    assert not response.ok


async def test_transport_errors_propagate(settings):
    def respond(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with SupabaseItemSync(settings.supabase, transport=api_transport(respond, [])) as syncer:
        with pytest.raises(httpx.ConnectTimeout):
            await syncer.upsert_item(ITEM)


async def test_missing_key_is_logged(settings, log_records):
    settings.supabase.anon_key = ""

    syncer = SupabaseItemSync(settings.supabase, transport=api_transport(lambda r: httpx.Response(401), []))
    await syncer.close()

    assert any(record["level"].name == "WARNING" for record in log_records)

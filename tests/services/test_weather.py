from datetime import date

import httpx
import pytest

from sowcal.core.errors import UpstreamTimeout, UpstreamUnavailable
from sowcal.services.frost import find_last_frost
from sowcal.services.weather import OpenMeteoArchiveSource, parse_archive_response


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_fetch_parses_series_and_sends_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={
            "daily": {
                "time": ["2025-01-01", "2025-01-02", "2025-01-03", "2025-01-04"],
                "temperature_2m_min": [-3.2, None, "n/a", 1.5],
            }
        })

    async with _client(handler) as client:
        source = OpenMeteoArchiveSource(client, base_url="https://archive.test/v1")
        series = await source.fetch_daily_min_temperatures(45.5, -122.6, date(2025, 1, 1), date(2025, 6, 30))

    assert seen["url"] == "https://archive.test/v1/archive"
    assert seen["params"]["start_date"] == "2025-01-01"
    assert seen["params"]["end_date"] == "2025-06-30"
    assert seen["params"]["daily"] == "temperature_2m_min"
    assert [r.min_temp_c for r in series] == [-3.2, None, None, 1.5]
    assert series[0].date == date(2025, 1, 1)


async def test_empty_response_is_empty_series():
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        series = await OpenMeteoArchiveSource(client).fetch_daily_min_temperatures(
            0.0, 0.0, date(2025, 1, 1), date(2025, 6, 30)
        )
    assert series == []


async def test_timeout_maps_to_upstream_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with _client(handler) as client:
        with pytest.raises(UpstreamTimeout):
            await OpenMeteoArchiveSource(client).fetch_daily_min_temperatures(
                0.0, 0.0, date(2025, 1, 1), date(2025, 6, 30)
            )


async def test_server_error_maps_to_upstream_unavailable():
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(UpstreamUnavailable):
            await OpenMeteoArchiveSource(client).fetch_daily_min_temperatures(
                0.0, 0.0, date(2025, 1, 1), date(2025, 6, 30)
            )


def test_parse_handles_short_value_list_and_bad_dates():
    series = parse_archive_response({
        "daily": {"time": ["2025-02-01", "not-a-date", "2025-02-03"], "temperature_2m_min": [-1]}
    })
    assert [(r.date, r.min_temp_c) for r in series] == [
        (date(2025, 2, 1), -1.0),
        (date(2025, 2, 3), None),
    ]


@pytest.mark.parametrize("body", [b"null", b"[]", b'["2025-01-01", -2.0]', b"42"])
async def test_non_object_body_maps_to_upstream_unavailable(body):
    headers = {"content-type": "application/json"}
    async with _client(lambda request: httpx.Response(200, content=body, headers=headers)) as client:
        with pytest.raises(UpstreamUnavailable):
            await OpenMeteoArchiveSource(client).fetch_daily_min_temperatures(
                0.0, 0.0, date(2025, 1, 1), date(2025, 6, 30)
            )


def test_parse_treats_junk_readings_as_missing_and_frost_scan_skips_them():
    series = parse_archive_response({
        "daily": {
            "time": [
                "2025-03-01", "2025-03-10", "2025-04-02", "2025-04-20",
                "2025-05-01", "2025-05-09", "2025-05-20",
            ],
            "temperature_2m_min": [-4.0, -1.5, "n/a", True, float("nan"), None, 6.0],
        }
    })
    assert [r.min_temp_c for r in series] == [-4.0, -1.5, None, None, None, None, 6.0]
    assert find_last_frost(series) == date(2025, 3, 10)


def test_parse_ignores_daily_block_that_is_not_an_object():
    assert parse_archive_response({"daily": ["2025-01-01"]}) == []

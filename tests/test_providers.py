from __future__ import annotations

import pytest

from netpick.providers import get_provider, get_provider_map


def test_registry_lists_five_providers() -> None:
    assert sorted(get_provider_map()) == ["freegeoip_app", "ip_api_com", "ipapi_co", "ipinfo_io", "ipwho_is"]


def test_unknown_provider_raises() -> None:
    with pytest.raises(ValueError, match="Unknown provider"):
        get_provider("nope")


def test_ipinfo_splits_loc_field() -> None:
    fields = get_provider("ipinfo_io").parse({"country": "US", "city": "Austin", "loc": "30.2672, -97.7431"})
    assert fields["latitude"] == "30.2672"
    assert fields["longitude"] == "-97.7431"


def test_ipinfo_rejects_malformed_loc() -> None:
    with pytest.raises(ValueError):
        get_provider("ipinfo_io").parse({"country": "US", "city": "Austin", "loc": "30.2672"})


@pytest.mark.parametrize(
    "slug, body, expected",
    [
        ("ipapi_co", {"error": True, "reason": "RateLimited"}, "RateLimited"),
        ("ip_api_com", {"status": "fail", "message": "private range"}, "private range"),
        ("ipinfo_io", {"error": {"title": "Wrong ip", "message": "Please provide a valid IP address"}}, "Please provide a valid IP address"),
        ("ipwho_is", {"success": False, "message": "Invalid IP address"}, "Invalid IP address"),
    ],
)
def test_error_fields_are_detected(slug, body, expected) -> None:
    assert get_provider(slug).error_message(body) == expected


@pytest.mark.parametrize("slug", ["ipapi_co", "ipinfo_io", "freegeoip_app"])
def test_clean_bodies_have_no_error(slug) -> None:
    assert get_provider(slug).error_message({"city": "Austin"}) is None


def test_ipwho_is_reads_nested_isp() -> None:
    fields = get_provider("ipwho_is").parse(
        {"country": "Japan", "city": "Tokyo", "latitude": 35.68, "longitude": 139.69, "connection": {"isp": "NTT"}}
    )
    assert fields["isp"] == "NTT"

"""
E2E tests running the facade against the mock legacy proxy.

The mock proxy app is mounted in-process through httpx's ASGI transport, so no
server has to be running. Fixtures live in mocks/legacy_stub, one file per
channel (the X-Channel-Id header, forwarded as Canal).
"""

import pytest
import httpx
from fastapi.testclient import TestClient
from mocks.legacy_proxy.main import app as legacy_proxy_app


RETRIEVE_URL = "/api/bian/v1/credit-card/customer/CUST-123/retrieve"


@pytest.fixture
def facade(proxied_client) -> TestClient:
    return proxied_client(transport=httpx.ASGITransport(app=legacy_proxy_app))


@pytest.mark.integration
def test_web_channel_returns_paged_facilities(facade: TestClient, headers: dict[str, str]):
    """
    web channel: two facilities on this page, seven in total
    Expected: body carries the page, Total-Count the proxy's total
    """
    response = facade.get(RETRIEVE_URL, headers=headers)

    assert response.status_code == 200
    assert response.headers["Total-Count"] == "7"
    facilities = response.json()["creditCardFacilities"]
    assert len(facilities) == 2
    assert facilities[0]["issuedDevice"]["devicePropertySetting"] == "4562 **** **** 7781"
    assert facilities[0]["billingTransactionAmount"]["amountValue"] == {"Value": "310.75"}
    assert facilities[1]["billingTransactionMinimumRequiredPayment"] is None
    assert facilities[1]["productInstanceReference"] is None


@pytest.mark.integration
def test_branch_channel_has_no_facilities(facade: TestClient, headers: dict[str, str]):
    headers["X-Channel-Id"] = "branch"
    response = facade.get(RETRIEVE_URL, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"creditCardFacilities": []}
    assert response.headers["Total-Count"] == "0"


@pytest.mark.integration
def test_unknown_channel_error_relayed(facade: TestClient, headers: dict[str, str]):
    headers["X-Channel-Id"] = "kiosk"
    response = facade.get(RETRIEVE_URL, headers=headers)

    assert response.status_code == 404
    assert response.json() == {"detail": "channel not found"}


@pytest.mark.integration
def test_broken_channel_payload_rejected(facade: TestClient, headers: dict[str, str]):
    """
    broken channel: proxy sends an unknown card role
    Expected: 502 instead of passing bad data through
    """
    headers["X-Channel-Id"] = "broken"
    response = facade.get(RETRIEVE_URL, headers=headers)

    assert response.status_code == 502
    assert response.json()["message"] == "Invalid JSON from proxy"

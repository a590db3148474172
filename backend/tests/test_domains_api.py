import pytest
from fastapi.testclient import TestClient

from app.services.domains.provisioning import get_provisioning_service
from main import app

OWNER = {"Authorization": "Bearer owner-token"}


@pytest.fixture
def client(provisioning_service):
    app.dependency_overrides[get_provisioning_service] = lambda: provisioning_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_create_full_zone(client, zone_provider, redis_server):
    response = client.post(
        "/api/domains/zones",
        json={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["createZoneResult"]["result"]["name"] == "example.com"
    assert body["insertKeyPairResult"] is True
    assert "addWwwDnsResult" in body
    assert redis_server.data["www.example.com"]["siteId"] == "site-1"


def test_create_full_zone_missing_parameters(client, zone_provider):
    response = client.post("/api/domains/zones", json={"siteId": "site-1"}, headers=OWNER)

    assert response.status_code == 400
    assert response.json() == {"detail": "One or more required parameters missing: {domainName, siteId}"}
    assert zone_provider.calls == []


def test_create_full_zone_without_body(client):
    response = client.post("/api/domains/zones", headers=OWNER)

    assert response.status_code == 400
    assert response.json()["detail"] == "One or more required parameters missing: {domainName, siteId}"


def test_create_full_zone_unauthorized(client, zone_provider):
    response = client.post(
        "/api/domains/zones",
        json={"siteId": "site-1", "domainName": "example.com"},
    )

    assert response.status_code == 401
    assert response.json() == {"detail": "Not allowed. Current user does not own resource"}
    assert zone_provider.calls == []


def test_create_full_zone_failed_rollback_reports_both_errors(client, zone_provider):
    zone_provider.fail("set_always_use_https", "https setting rejected")
    zone_provider.fail("delete_zone", "zone delete rejected")

    response = client.post(
        "/api/domains/zones",
        json={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 400
    assert response.json() == {
        "detail": {"error": "https setting rejected", "deleteZoneError": "zone delete rejected"}
    }


def test_delete_full_zone(client, zone_provider):
    zone_provider.zones["zone-stored"] = {"id": "zone-stored", "name": "example.com", "records": []}

    response = client.delete("/api/domains/zones", params={"siteId": "site-1"}, headers=OWNER)

    assert response.status_code == 200
    assert response.json() == {"message": "Domain deleted successfully"}
    assert zone_provider.zones == {}


def test_delete_full_zone_provider_failure(client, zone_provider):
    zone_provider.fail("delete_zone", "zone not found")

    response = client.delete(
        "/api/domains/zones",
        params={"siteId": "site-1", "zoneId": "zone-9"},
        headers=OWNER,
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "zone not found"}


def test_insert_key_pair(client, redis_server):
    response = client.post(
        "/api/domains/key-pairs",
        json={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Key pair inserted for example.com"}
    assert redis_server.data["example.com"] == {"siteId": "site-1", "landingPageId": "page-home"}


def test_insert_key_pair_store_failure(client, redis_server):
    redis_server.fail("hset")

    response = client.post(
        "/api/domains/key-pairs",
        json={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 400
    assert "failed" in response.json()["detail"]


def test_clear_landing_page_id(client, redis_server):
    redis_server.data["example.com"] = {"siteId": "site-1", "landingPageId": "page-home"}

    response = client.delete(
        "/api/domains/key-pairs/landing-page",
        params={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert redis_server.data["example.com"] == {"siteId": "site-1"}


def test_delete_key_pair(client, redis_server):
    redis_server.data["example.com"] = {"siteId": "site-1"}

    response = client.delete(
        "/api/domains/key-pairs",
        params={"siteId": "site-1", "domainName": "example.com"},
        headers=OWNER,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert "example.com" not in redis_server.data


def test_delete_key_pair_missing_parameters(client):
    response = client.delete("/api/domains/key-pairs", params={"siteId": "site-1"}, headers=OWNER)

    assert response.status_code == 400
    assert response.json() == {"detail": "One or more required parameters missing: {domainName, siteId}"}


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"status": "healthy"}

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "domains_operations_total" in metrics.text


def test_invalid_domain_name_is_a_bad_request(client, zone_provider):
    response = client.post(
        "/api/domains/zones",
        json={"siteId": "site-1", "domainName": "exa mple.com"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid domain name: exa mple.com"}
    assert zone_provider.calls == []


def test_delete_key_pair_canonicalizes_query_domain(client, redis_server):
    redis_server.data["example.com"] = {"siteId": "site-1"}

    response = client.delete(
        "/api/domains/key-pairs",
        params={"siteId": "site-1", "domainName": "EXAMPLE.com."},
        headers=OWNER,
    )

    assert response.status_code == 200
    assert redis_server.data == {}


def test_request_metrics_are_labelled_by_route_template(client):
    client.delete("/api/domains/key-pairs", params={"siteId": "site-1"}, headers=OWNER)
    client.get("/no/such/path")

    text = client.get("/metrics").text
    assert 'route="/api/domains/key-pairs"' in text
    assert 'route="unmatched"' in text
    assert "/no/such/path" not in text

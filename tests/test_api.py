from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

import main


@pytest.fixture
def client() -> TestClient:
    return TestClient(main.app)


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_extract_returns_listings_and_summary(client: TestClient, results_page: str) -> None:
    resp = client.post("/extract", json={"html": results_page, "category": "srodmiescie/three_rooms"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["articles_count"] == 3
    assert body["reported_count"] == 3
    assert [l["price"] for l in body["listings"]] == [1350000, 1750000, 0]
    summary = body["summary"]["srodmiescie/three_rooms"]
    assert summary["count"] == 2
    assert summary["avg_price"] == 1550000
    assert summary["avg_price_per_area"] == 19234.5


def test_summary_endpoint(client: TestClient) -> None:
    listings = [
        {"category": "wola", "price": 600000, "area": 40, "price_per_area": 15000},
        {"category": "wola", "price": 700000, "area": 50, "price_per_area": 14000},
        {"category": "ochota", "price": 0, "area": 50},
    ]

    resp = client.post("/summary", json={"listings": listings})

    assert resp.status_code == 200
    assert resp.json() == {
        "wola": {"count": 2, "avg_price": 650000.0, "avg_area": 45.0, "avg_price_per_area": 14500.0}
    }


def test_summary_rejects_negative_price(client: TestClient) -> None:
    resp = client.post("/summary", json={"listings": [{"category": "wola", "price": -1, "area": 40}]})
    assert resp.status_code == 422


def test_scrape_rejects_other_domains(client: TestClient) -> None:
    resp = client.get("/scrape", params={"url": "https://www.domain.com.au/x", "category": "c"})
    assert resp.status_code == 400


def test_scrape_fetches_and_extracts(client: TestClient, results_page: str, monkeypatch: Any) -> None:
    calls: list[str] = []

    class _FakeHttp:
        async def get_text(self, url: str) -> str:
            calls.append(url)
            return results_page

        async def close(self) -> None:
            calls.append("closed")

    monkeypatch.setattr(main, "Http", _FakeHttp)
    url = "https://www.otodom.pl/pl/wyniki/sprzedaz/mieszkanie/mazowieckie/warszawa/srodmiescie"

    resp = client.get("/scrape", params={"url": url, "category": "srodmiescie"})

    assert resp.status_code == 200
    assert calls == [url, "closed"]
    first = resp.json()["listings"][0]
    assert first["url"] == "https://www.otodom.pl/pl/oferta/sloneczne-3-pokoje-ID4aa1"


def test_scrape_upstream_failure_is_502(client: TestClient, monkeypatch: Any) -> None:
    class _FailingHttp:
        async def get_text(self, url: str) -> str:
            raise httpx.ConnectError("connection refused")

        async def close(self) -> None:
            pass

    monkeypatch.setattr(main, "Http", _FailingHttp)

    resp = client.get("/scrape", params={"url": "https://www.otodom.pl/pl/wyniki", "category": "c"})

    assert resp.status_code == 502


def test_scrape_save_writes_snapshot(client: TestClient, results_page: str, monkeypatch: Any, tmp_path) -> None:
    class _FakeHttp:
        async def get_text(self, url: str) -> str:
            return results_page

        async def close(self) -> None:
            pass

    monkeypatch.setattr(main, "Http", _FakeHttp)
    monkeypatch.setattr(main.config, "RESULTS_DIR", str(tmp_path))
    url = "https://www.otodom.pl/pl/wyniki/sprzedaz/mieszkanie/warszawa"

    assert client.get("/scrape", params={"url": url, "category": "c"}).status_code == 200
    assert list(tmp_path.iterdir()) == []

    resp = client.get("/scrape", params={"url": url, "category": "c", "save": "true"})

    assert resp.status_code == 200
    saved = list(tmp_path.glob("listings_*.json"))
    assert len(saved) == 1
    data = json.loads(saved[0].read_text(encoding="utf-8"))
    assert data["url"] == url
    assert data["summary"]["c"]["count"] == 2


def test_scrape_walks_result_pages(client: TestClient, results_page: str, monkeypatch: Any) -> None:
    pagination = '<nav><a href="/pl/wyniki?page=2">2</a><a href="/pl/wyniki?page=3">3</a></nav>'
    first_page = results_page.replace("</body>", pagination + "</body>")
    calls: list[str] = []

    class _FakeHttp:
        async def get_text(self, url: str) -> str:
            calls.append(url)
            return first_page if "page=" not in url else results_page

        async def close(self) -> None:
            pass

    monkeypatch.setattr(main, "Http", _FakeHttp)
    url = "https://www.otodom.pl/pl/wyniki?limit=72"

    resp = client.get("/scrape", params={"url": url, "category": "c", "pages": 5})

    assert resp.status_code == 200
    assert calls == [url, url + "&page=2", url + "&page=3"]
    body = resp.json()
    assert body["articles_count"] == 9
    assert body["summary"]["c"]["count"] == 6


def test_scrape_single_page_by_default(client: TestClient, results_page: str, monkeypatch: Any) -> None:
    first_page = results_page.replace("</body>", '<nav><a href="/pl/wyniki?page=2">2</a></nav></body>')
    calls: list[str] = []

    class _FakeHttp:
        async def get_text(self, url: str) -> str:
            calls.append(url)
            return first_page

        async def close(self) -> None:
            pass

    monkeypatch.setattr(main, "Http", _FakeHttp)

    resp = client.get("/scrape", params={"url": "https://www.otodom.pl/pl/wyniki", "category": "c"})

    assert resp.status_code == 200
    assert len(calls) == 1


def test_scrape_rejects_too_many_pages(client: TestClient) -> None:
    resp = client.get(
        "/scrape",
        params={"url": "https://www.otodom.pl/pl/wyniki", "category": "c", "pages": main.config.MAX_PAGES + 1},
    )
    assert resp.status_code == 422


def test_running_main_serves_app_with_uvicorn(monkeypatch: Any) -> None:
    import runpy

    import uvicorn

    served: list[dict[str, Any]] = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: served.append({"app": app, **kwargs}))

    runpy.run_path(main.__file__, run_name="__main__")

    assert len(served) == 1
    assert served[0]["host"] == main.config.API_HOST
    assert served[0]["port"] == main.config.API_PORT

"""
Pytest fixtures for the disc collection tests.

Provides sample upstream payloads, detail pages and an httpx mock transport
that records every request it serves.
"""
from typing import Callable, List

import httpx
import pytest

from cache import CollectionCache, MemoryCacheStore
from disc_service import DiscService
from dizzylab_client import DizzylabClient


class FakeClock:
    """Manually advanced clock for TTL tests"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """MockTransport handler that remembers requests and delegates responses"""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture
def sample_payload():
    """Bulk listing payload for account 42."""
    return {
        "discs": [
            {
                "id": "1",
                "title": "Album A",
                "cover": "http://x/a.jpg",
                "label": "Label A",
                "labelid": 5,
                "labelcover": "",
                "boost": None,
                "comment": "",
                "onlyhavegift": False,
            }
        ]
    }


@pytest.fixture
def multi_disc_payload():
    return {
        "discs": [
            {"id": "30", "title": "Third", "cover": "", "label": "L", "labelid": 2,
             "labelcover": "", "boost": 1.5, "comment": "c", "onlyhavegift": True},
            {"id": "10", "title": "First", "cover": "http://x/1.jpg", "label": "L",
             "labelid": 2, "labelcover": "http://x/l.png", "boost": 0, "comment": "",
             "onlyhavegift": False},
            {"id": "20", "title": "Second", "cover": None, "label": None, "labelid": None,
             "labelcover": None, "boost": None, "comment": None, "onlyhavegift": None},
        ]
    }


@pytest.fixture
def positional_detail_html():
    """Detail page with the label block in the fixed layout column."""
    return """
    <html><head><link rel="canonical" href="https://www.dizzylab.net/d/999/" /></head>
    <body>
      <div class="container">
        <div class="row">
          <div class="col-md-8">
            <img id="disc-cover" data-src="https://img.example/cover.jpg" src="/static/lazy.gif" />
            <h1>
              Summer Tapes
            </h1>
          </div>
          <div class="col-md-4">
            <a href="/l/77/">
              <img data-src="https://img.example/label.png" />
              <p>  Cold Wave Records </p>
            </a>
          </div>
        </div>
      </div>
    </body></html>
    """


@pytest.fixture
def class_detail_html():
    """Detail page using the class-based label markup."""
    return """
    <html><body>
      <main>
        <img id="disc-cover" src="https://img.example/plain.jpg" />
        <h1>Night Drive</h1>
        <section class="label-box">
          <img class="label-cover" src="https://img.example/label2.png" />
          <span class="label-name">Neon House</span>
          <a href="https://www.dizzylab.net/l/12/">visit</a>
        </section>
      </main>
    </body></html>
    """


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def collection_cache(memory_store):
    return CollectionCache(memory_store)


@pytest.fixture
def make_client():
    """Build a DizzylabClient whose requests are answered by `respond`."""
    def _make(respond):
        handler = RecordingHandler(respond)
        client = DizzylabClient(transport=httpx.MockTransport(handler))
        return client, handler
    return _make


@pytest.fixture
def make_service(collection_cache, make_client):
    """Build a DiscService over the in-memory cache and a mocked upstream."""
    def _make(respond, cache=None):
        client, handler = make_client(respond)
        service = DiscService(cache or collection_cache, client)
        return service, handler
    return _make

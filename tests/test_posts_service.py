"""End-to-end tests for fetching a user's posts over a mocked TikTok."""

from contextlib import asynccontextmanager
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import tiksnap.core.posts_service as posts_service
from conftest import make_items, profile_html
from tiksnap.core.posts_service import PostsService
from tiksnap.models.data_models import FetchFailure, FetchSuccess
from tiksnap.models.schema import Base
from tiksnap.storage.repository import FetchHistoryRepository
from tiksnap.utils.config import ANTI_BOT_MESSAGE, EMPTY_RESULT_MESSAGE, RATE_LIMIT_MESSAGE


class FakeTikTok:
    """Routes profile and item list requests to scripted responses."""

    def __init__(self, pages=(), profile=None):
        self.pages = list(pages)
        self.profile = profile or (lambda: httpx.Response(
            200,
            headers=[("Set-Cookie", "ttwid=abc; Path=/"), ("Set-Cookie", "msToken=boot; Path=/")],
            text=profile_html("SEC_ALICE"),
        ))
        self.profile_requests = []
        self.page_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.startswith("/@"):
            self.profile_requests.append(request)
            return self.profile()

        self.page_requests.append(request)
        page = self.pages.pop(0) if len(self.pages) > 1 else self.pages[0]
        return page() if callable(page) else page

    def page_query(self, index):
        return parse_qs(urlsplit(str(self.page_requests[index].url)).query)


def page(items, has_more=False, cursor=0):
    return lambda: httpx.Response(200, json={"itemList": items, "hasMore": has_more, "cursor": str(cursor)})


def make_service(fake, recording_sleep, **kwargs):
    return PostsService(
        signer=lambda url, ua: "SIGNED",
        sleep=recording_sleep,
        transport=httpx.MockTransport(fake),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_limit_over_single_page(recording_sleep):
    fake = FakeTikTok(pages=[page(make_items(0, 35), has_more=False)])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice", post_limit=10)

    assert isinstance(outcome, FetchSuccess)
    assert outcome.total == 10
    assert [p.desc for p in outcome.records] == [f"post {i}" for i in range(10)]
    assert len(fake.page_requests) == 1

    data = outcome.to_dict()
    assert data["status"] == "success"
    assert data["totalPosts"] == 10
    assert len(data["result"]) == 10


@pytest.mark.asyncio
async def test_pages_follow_cursor_with_bootstrapped_cookies(recording_sleep):
    fake = FakeTikTok(pages=[
        page(make_items(0, 35), has_more=True, cursor=1000),
        page(make_items(35, 30), has_more=True, cursor=900),
        page(make_items(65, 4), has_more=False),
    ])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("@alice")

    assert outcome.total == 69
    assert [fake.page_query(i)["count"] for i in range(3)] == [["35"], ["30"], ["30"]]
    assert [fake.page_query(i)["cursor"] for i in range(3)] == [["0"], ["1000"], ["900"]]
    assert fake.page_query(0)["secUid"] == ["SEC_ALICE"]
    assert fake.page_query(0)["msToken"] == ["boot"]
    assert fake.page_query(0)["X-Bogus"] == ["SIGNED"]
    assert fake.page_requests[0].headers["Cookie"] == "ttwid=abc; msToken=boot"
    # One bootstrap probe, one lookup
    assert len(fake.profile_requests) == 2


@pytest.mark.asyncio
async def test_supplied_cookie_skips_bootstrap(recording_sleep):
    fake = FakeTikTok(pages=[page(make_items(0, 3))])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice", cookie=["sessionid=s1", "msToken=mine"])

    assert outcome.total == 3
    # Only the lookup touched the profile page
    assert len(fake.profile_requests) == 1
    assert fake.page_requests[0].headers["Cookie"] == "sessionid=s1; msToken=mine"
    assert fake.page_query(0)["msToken"] == ["mine"]


@pytest.mark.asyncio
async def test_failed_bootstrap_sends_no_cookies(recording_sleep):
    profile_responses = [
        httpx.Response(403, headers={"Set-Cookie": "ttwid=leak; Path=/"}),
        httpx.Response(
            200,
            headers={"Set-Cookie": "msToken=fromlookup; Path=/"},
            text=profile_html("SEC_ALICE"),
        ),
    ]
    fake = FakeTikTok(pages=[page(make_items(0, 3))], profile=lambda: profile_responses.pop(0))
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert isinstance(outcome, FetchSuccess)
    assert outcome.total == 3
    assert "Cookie" not in fake.page_requests[0].headers
    assert "msToken" not in fake.page_query(0)


@pytest.mark.asyncio
async def test_user_not_found_on_lookup(recording_sleep):
    fake = FakeTikTok(pages=[page([])], profile=lambda: httpx.Response(400))
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("ghost")

    assert outcome == FetchFailure(message="User not found!")
    assert fake.page_requests == []


@pytest.mark.asyncio
async def test_user_not_found_on_first_page(recording_sleep):
    fake = FakeTikTok(pages=[lambda: httpx.Response(400)])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert outcome.to_dict() == {"status": "error", "message": "User not found!"}
    assert len(fake.page_requests) == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_empty_body_every_attempt(recording_sleep):
    fake = FakeTikTok(pages=[lambda: httpx.Response(200, content=b"")])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert outcome == FetchFailure(message=ANTI_BOT_MESSAGE)
    assert len(fake.page_requests) == 3


@pytest.mark.asyncio
async def test_rate_limited_twice_then_success(recording_sleep):
    fake = FakeTikTok(pages=[
        lambda: httpx.Response(429),
        lambda: httpx.Response(429),
        page(make_items(0, 5)),
    ])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert isinstance(outcome, FetchSuccess)
    assert outcome.total == 5
    assert len(fake.page_requests) == 3
    assert recording_sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_persistent_rate_limit(recording_sleep):
    fake = FakeTikTok(pages=[lambda: httpx.Response(429)])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert outcome == FetchFailure(message=RATE_LIMIT_MESSAGE)
    assert len(fake.page_requests) == 3


@pytest.mark.asyncio
async def test_no_posts_is_reported_as_error(recording_sleep):
    fake = FakeTikTok(pages=[page([], has_more=False)])
    service = make_service(fake, recording_sleep)

    outcome = await service.get_user_posts("alice")

    assert outcome == FetchFailure(message=EMPTY_RESULT_MESSAGE)


@pytest.mark.asyncio
async def test_lookup_collaborator_can_be_replaced(recording_sleep):
    looked_up = []

    async def fake_lookup(client, username):
        looked_up.append(username)
        return "CUSTOM_SEC"

    fake = FakeTikTok(pages=[page(make_items(0, 2))])
    service = make_service(fake, recording_sleep, user_lookup=fake_lookup)

    outcome = await service.get_user_posts("@alice", cookie="a=1")

    assert outcome.total == 2
    assert looked_up == ["alice"]
    assert fake.page_query(0)["secUid"] == ["CUSTOM_SEC"]


@pytest.mark.asyncio
async def test_unexpected_error_is_returned_not_raised(recording_sleep):
    async def broken_lookup(client, username):
        raise RuntimeError("lookup exploded")

    fake = FakeTikTok(pages=[page([])])
    service = make_service(fake, recording_sleep, user_lookup=broken_lookup)

    outcome = await service.get_user_posts("alice", cookie="a=1")

    assert outcome == FetchFailure(message="lookup exploded")


@pytest_asyncio.fixture
async def history_db(monkeypatch):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    @asynccontextmanager
    async def fake_session():
        async with session_factory() as session:
            yield session
            await session.commit()

    monkeypatch.setattr(posts_service, "get_async_session", fake_session)
    yield session_factory
    await engine.dispose()


@pytest.mark.asyncio
async def test_history_is_recorded(recording_sleep, history_db):
    fake = FakeTikTok(pages=[page(make_items(0, 4))])
    service = make_service(fake, recording_sleep, record_history=True)

    await service.get_user_posts("@alice", proxy="http://proxy:8080", post_limit=3)

    async with history_db() as session:
        records = await FetchHistoryRepository.get_recent(session)

    assert len(records) == 1
    assert records[0].username == "alice"
    assert records[0].sec_uid == "SEC_ALICE"
    assert records[0].status == "success"
    assert records[0].total_posts == 3
    assert records[0].used_proxy is True
    assert records[0].supplied_cookie is False


@pytest.mark.asyncio
async def test_history_failure_does_not_change_outcome(recording_sleep, monkeypatch):
    @asynccontextmanager
    async def broken_session():
        raise RuntimeError("database is locked")
        yield

    monkeypatch.setattr(posts_service, "get_async_session", broken_session)
    fake = FakeTikTok(pages=[page(make_items(0, 2))])
    service = make_service(fake, recording_sleep, record_history=True)

    outcome = await service.get_user_posts("alice")

    assert outcome.total == 2

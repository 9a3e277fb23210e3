import json
from datetime import date, datetime

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from seasonroom.core.clock import FixedClock
from seasonroom.deps import get_session
from seasonroom.main import create_app
from seasonroom.services.crew_client import CrewApiClient
from seasonroom.services.crew_session import CrewSession
from seasonroom.services.token_store import TokenStore
from seasonroom.schemas.common import TokenPair

CREW_ID = 7
EXPIRED_ACCESS = {"code": 401, "message": "만료된 JWT 토큰입니다.", "data": None}
EXPIRED_REFRESH = {"code": 401, "message": "만료된 리프레시 토큰입니다.", "data": None}


def envelope(data=None, code=200, message="OK"):
    return {"code": code, "message": message, "data": data}


class FakeCrewBackend:
    """In-memory stand-in for the crew backend, served through httpx.MockTransport."""

    def __init__(self):
        self.access_token = "access-1"
        self.refresh_token = "refresh-1"
        self.refresh_count = 0
        self.reservations = []
        self.next_reservation_id = 100
        self.booked = {}
        self.requests = []
        self.crew = {
            "crew_id": CREW_ID,
            "name": "Board Buddies",
            "reservation_day": "FRIDAY",
            "reservation_time": "18:00",
            "dailyCapacity": 20,
            "isCapacityLimited": True,
        }
        self.fail_create = False
        self.fail_cancel = False
        self.fail_teaching = False
        self.fail_refresh = False
        self.fail_calendar = False
        self.failing_details = set()
        self.down = False

    def add_reservation(self, day, status="confirmed", teaching=False):
        self.next_reservation_id += 1
        self.reservations.append(
            {
                "date": day.isoformat(),
                "status": status,
                "reservation_id": self.next_reservation_id,
                "crew_id": CREW_ID,
                "teaching": teaching,
            }
        )
        return self.next_reservation_id

    def expire_access_token(self):
        self.access_token = f"access-expired-{self.refresh_count}"

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path.removeprefix("/api")
        self.requests.append((request.method, path))
        body = json.loads(request.content) if request.content else None
        authorization = request.headers.get("Authorization")

        if path == "/auth/refresh":
            if self.fail_refresh or authorization != f"Bearer {self.refresh_token}":
                return httpx.Response(401, json=EXPIRED_REFRESH)
            self.refresh_count += 1
            self.access_token = f"access-{self.refresh_count + 1}"
            self.refresh_token = f"refresh-{self.refresh_count + 1}"
            return httpx.Response(
                200,
                json=envelope({"accessToken": self.access_token, "refreshToken": self.refresh_token}),
            )

        if authorization != f"Bearer {self.access_token}":
            return httpx.Response(401, json=EXPIRED_ACCESS)

        crew_path = f"/crews/{CREW_ID}"

        if path == "/users/me":
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "userId": 1,
                        "name": "Kim",
                        "crew": {"crewId": CREW_ID, "crewName": "Board Buddies"},
                    }
                ),
            )

        if path == "/users/me/reservations":
            return httpx.Response(200, json=envelope(self.reservations))

        if path == crew_path:
            return httpx.Response(200, json=envelope(self.crew))

        if path == f"{crew_path}/calendar/my":
            if self.fail_calendar:
                return httpx.Response(500, json=envelope(code=500, message="서버 오류"))
            month = request.url.params["date"][:7]
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "my_reservations": [r for r in self.reservations if r["date"].startswith(month)],
                        "usage_count": sum(1 for r in self.reservations if r["status"] == "confirmed"),
                    }
                ),
            )

        if path == f"{crew_path}/reservations/detail":
            day = request.url.params["date"]
            if day in self.failing_details:
                return httpx.Response(500, json=envelope(code=500, message="서버 오류"))
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "date": day,
                        "booked": self.booked.get(day, 0),
                        "capacity": 20,
                        "member_list": [
                            {"user_id": 1, "name": "Kim", "teaching": True},
                            {"user_id": 2, "name": "Lee", "teaching": False},
                        ],
                    }
                ),
            )

        if path == f"{crew_path}/reservations" and request.method == "POST":
            if self.fail_create:
                raise httpx.ConnectError("connection refused", request=request)
            for day in body["dates"]:
                self.add_reservation(date.fromisoformat(day))
            return httpx.Response(
                200,
                json=envelope({"reservationId": self.next_reservation_id, "status": "confirmed"}),
            )

        if path == f"{crew_path}/reservations" and request.method == "DELETE":
            if self.fail_cancel:
                return httpx.Response(500, json=envelope(code=500, message="서버 오류"))
            remaining = [r for r in self.reservations if r["date"] not in body["dates"]]
            if len(remaining) == len(self.reservations):
                return httpx.Response(400, json=envelope(code=400, message="해당 날짜에 예약이 없습니다."))
            self.reservations = remaining
            return httpx.Response(200, json=envelope())

        if path.startswith(f"{crew_path}/reservations/") and path.endswith("/teaching"):
            if self.fail_teaching:
                return httpx.Response(500, json=envelope(code=500, message="서버 오류"))
            reservation_id = int(path.split("/")[-2])
            for reservation in self.reservations:
                if reservation["reservation_id"] == reservation_id:
                    reservation["teaching"] = request.method == "POST"
            return httpx.Response(200, json=envelope())

        if path == "/guests":
            return httpx.Response(200, json=envelope({"id": 5, **body}))

        return httpx.Response(404, json=envelope(code=404, message="Not found"))


@pytest.fixture()
def backend():
    return FakeCrewBackend()


@pytest.fixture()
def clock():
    # Wednesday; the crew opens next week on Friday 18:00
    return FixedClock(datetime(2025, 12, 10, 10, 0))


@pytest.fixture()
def token_store(tmp_path, backend):
    store = TokenStore(str(tmp_path / "tokens.json"))
    store.save(TokenPair(access_token=backend.access_token, refresh_token=backend.refresh_token))
    return store


@pytest.fixture()
async def crew_api(backend, token_store):
    client = CrewApiClient(
        base_url="http://backend.test/api",
        token_store=token_store,
        transport=httpx.MockTransport(backend.handle),
    )
    yield client
    await client.close()


@pytest.fixture()
def session(crew_api, clock):
    return CrewSession(crew_api, clock)


@pytest.fixture()
def app(session) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    yield app
    app.dependency_overrides = {}


@pytest.fixture()
async def async_client(app: FastAPI):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

"""In-memory doubles for the key/value store and the upstream HTTP APIs."""

import json

import httpx
import redis


class InMemoryStore:
    """Async key/value double with the subset of Redis commands jobradar uses.

    Set ``fail`` to make every command raise a connection error.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail = False
        self.calls: list[tuple[str, str]] = []

    def _check(self, command: str, key: str) -> None:
        self.calls.append((command, key))
        if self.fail:
            raise redis.ConnectionError("connection refused")

    async def get(self, key: str) -> str | None:
        self._check("GET", key)
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check("SET", key)
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._check("DEL", key)
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def ping(self) -> bool:
        self._check("PING", "")
        return True

    async def aclose(self) -> None:
        pass

    def expire(self, key: str) -> None:
        """Simulate TTL expiry."""
        self.data.pop(key, None)
        self.ttls.pop(key, None)


def llm_reply(
    stress: int = 80, remote: int = 90, learning: int = 85, explanation: str = "Спокойный темп."
) -> dict:
    """An OpenRouter chat-completion body carrying an analysis JSON object."""
    content = json.dumps(
        {
            "stressFreeScore": stress,
            "remoteFriendlinessScore": remote,
            "learningOpportunitiesScore": learning,
            "explanation": explanation,
        },
        ensure_ascii=False,
    )
    return {"id": "gen-1", "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeUpstream:
    """Routes httpx requests to canned OpenRouter / hh.ru replies and counts them."""

    def __init__(self) -> None:
        self.openrouter_responses: list[httpx.Response] = []
        self.openrouter_default = httpx.Response(200, json=llm_reply())
        self.hh_search = {"items": [], "found": 0, "page": 0, "pages": 0, "per_page": 100}
        self.hh_search_status = 200
        self.hh_vacancies: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []

    def openrouter_calls(self) -> int:
        return sum(1 for r in self.requests if r.url.path.endswith("/chat/completions"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/chat/completions"):
            canned = self.openrouter_responses.pop(0) if self.openrouter_responses else self.openrouter_default
            return httpx.Response(canned.status_code, headers=canned.headers, content=canned.content)
        if path == "/vacancies":
            return httpx.Response(self.hh_search_status, json=self.hh_search)
        if path.startswith("/vacancies/"):
            vacancy = self.hh_vacancies.get(path.rsplit("/", 1)[-1])
            if vacancy is None:
                return httpx.Response(404, json={"errors": [{"type": "not_found"}]})
            return httpx.Response(200, json=vacancy)
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def hh_item(vacancy_id="101", **overrides):
    """An hh.ru vacancy as returned in search results."""
    item = {
        "id": vacancy_id,
        "name": "Python Developer",
        "area": {"id": "1", "name": "Москва"},
        "salary": {"from": 200000, "to": 300000, "currency": "RUR"},
        "experience": {"id": "between1And3", "name": "От 1 года до 3 лет"},
        "schedule": {"id": "remote", "name": "Удаленная работа"},
        "employer": {"id": 77, "name": "Acme", "logo_urls": {"90": "https://img.hh.test/77.png"}, "trusted": True},
        "snippet": {
            "requirement": "Опыт с <highlighttext>Python</highlighttext> от 2 лет",
            "responsibility": "Разработка API",
        },
        "professional_roles": [{"id": "96", "name": "Программист, разработчик"}],
        "published_at": "2026-10-01T10:00:00+0300",
        "alternate_url": "https://hh.ru/vacancy/101",
        "apply_alternate_url": "https://hh.ru/applicant/vacancy_response?vacancyId=101",
    }
    item.update(overrides)
    return item

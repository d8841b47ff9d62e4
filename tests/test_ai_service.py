import asyncio
from types import SimpleNamespace

from liferpg.core.models import UserProfile, UserStats
from liferpg.services.ai_service import (
    BUSY_MESSAGE, CONNECTION_LOST, GREETING, MIST_FALLBACK, AdviceService, welcome_message
)


class FakeCompletions:
    def __init__(self, content="Иди вперед, Артур.", error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(total_tokens=42),
        )


def make_client(**kwargs):
    completions = FakeCompletions(**kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def hero():
    return UserProfile("Артур", 30, "warrior", "Поборник")


def stats():
    return UserStats(xp=250, level=3, physical=40, intellect=10, health=15, professional=0)


def test_advice_is_returned_and_counted():
    client, completions = make_client(content="  Сила твоя растет.  ")
    service = AdviceService(client=client, enabled=True)

    advice = asyncio.run(service.generate_advice(stats(), hero()))

    assert advice == "Сила твоя растет."
    assert len(completions.calls) == 1
    assert completions.calls[0]["messages"][0]["role"] == "user"
    assert service.get_stats()["successful_requests"] == 1
    assert service.get_stats()["total_tokens_used"] == 42
    assert not service.is_busy


def test_prompt_mentions_hero_and_stats():
    prompt = AdviceService.build_prompt(stats(), hero())

    assert "Артур" in prompt
    assert "Поборник" in prompt
    assert "Physical/Body: 40" in prompt
    assert "Current Level: 3" in prompt
    assert "Russian" in prompt


def test_empty_answer_falls_back_to_mist():
    client, _ = make_client(content="   ")
    service = AdviceService(client=client, enabled=True)

    assert asyncio.run(service.generate_advice(stats(), hero())) == MIST_FALLBACK
    assert service.get_stats()["fallback_responses"] == 1


def test_transport_error_falls_back_to_connection_lost():
    client, _ = make_client(error=RuntimeError("network down"))
    service = AdviceService(client=client, enabled=True)

    assert asyncio.run(service.generate_advice(stats(), hero())) == CONNECTION_LOST
    assert service.get_stats()["failed_requests"] == 1
    assert not service.is_busy


def test_without_profile_or_client_returns_greeting():
    client, completions = make_client()
    service = AdviceService(client=client, enabled=True)
    assert asyncio.run(service.generate_advice(stats(), None)) == GREETING

    disabled = AdviceService(client=client, enabled=False)
    assert asyncio.run(disabled.generate_advice(stats(), hero())) == GREETING
    assert completions.calls == []


def test_second_request_while_busy_is_rejected():
    client, completions = make_client()
    service = AdviceService(client=client, enabled=True)
    service._busy = True

    assert asyncio.run(service.generate_advice(stats(), hero())) == BUSY_MESSAGE
    assert completions.calls == []
    assert service.get_stats()["busy_rejections"] == 1


def test_concurrent_requests_allow_only_one_call():
    class SlowCompletions(FakeCompletions):
        async def create(self, **kwargs):
            await self.release.wait()
            return await super().create(**kwargs)

    async def scenario():
        completions = SlowCompletions()
        completions.release = asyncio.Event()
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        service = AdviceService(client=client, enabled=True)

        first = asyncio.create_task(service.generate_advice(stats(), hero()))
        await asyncio.sleep(0)
        second = await service.generate_advice(stats(), hero())
        completions.release.set()
        return await first, second, completions

    first, second, completions = asyncio.run(scenario())
    assert first == "Иди вперед, Артур."
    assert second == BUSY_MESSAGE
    assert len(completions.calls) == 1


def test_welcome_message_names_class():
    assert "Поборник" in welcome_message(hero())
    assert "Артур" in welcome_message(hero())

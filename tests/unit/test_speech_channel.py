"""Unit tests for speech exclusivity"""

import asyncio
import pytest
from inova_gateway.domain.audio import SpeechChannel
from inova_gateway.domain.exceptions import SpeechInterruptedError


def blocking(release: asyncio.Event, audio: bytes):
    async def synthesize() -> bytes:
        await release.wait()
        return audio

    return synthesize


async def test_speak_returns_audio():
    channel = SpeechChannel()

    async def synthesize() -> bytes:
        return b"audio"

    assert await channel.speak("session", synthesize) == b"audio"
    assert channel.is_playing("session") is False


async def test_new_speech_interrupts_previous():
    channel = SpeechChannel()
    release = asyncio.Event()

    first = asyncio.create_task(channel.speak("session", blocking(release, b"first")))
    await asyncio.sleep(0)
    assert channel.is_playing("session") is True

    async def quick() -> bytes:
        return b"second"

    assert await channel.speak("session", quick) == b"second"
    with pytest.raises(SpeechInterruptedError):
        await first


async def test_stop_cancels_in_flight_speech():
    channel = SpeechChannel()
    first = asyncio.create_task(channel.speak("session", blocking(asyncio.Event(), b"never")))
    await asyncio.sleep(0)

    assert channel.stop("session") is True
    with pytest.raises(SpeechInterruptedError):
        await first
    assert channel.stop("session") is False
    assert channel.is_playing("session") is False


async def test_sessions_do_not_interrupt_each_other():
    channel = SpeechChannel()
    release = asyncio.Event()

    first = asyncio.create_task(channel.speak("ana", blocking(release, b"ana")))
    second = asyncio.create_task(channel.speak("joao", blocking(release, b"joao")))
    await asyncio.sleep(0)
    assert channel.is_playing("ana") and channel.is_playing("joao")

    release.set()
    assert await first == b"ana"
    assert await second == b"joao"


async def test_stop_all():
    channel = SpeechChannel()
    tasks = [asyncio.create_task(channel.speak(key, blocking(asyncio.Event(), b""))) for key in ("a", "b")]
    await asyncio.sleep(0)

    channel.stop_all()

    for task in tasks:
        with pytest.raises(SpeechInterruptedError):
            await task

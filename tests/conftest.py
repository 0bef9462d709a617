import asyncio

import pytest

from appforge.utils.config import PipelineConfig


class FakeBackend:
    """Backend double: returns queued outputs or raises queued exceptions."""

    def __init__(self, *outputs, gate=None):
        self.outputs = list(outputs)
        self.calls = []
        self.gate = gate

    async def generate(self, prompt, session_id):
        self.calls.append((prompt, session_id))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        out = self.outputs.pop(0) if self.outputs else ""
        if isinstance(out, Exception):
            raise out
        return out


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def config():
    return PipelineConfig(endpoint="http://webhook.test/generate", user_id="tester")


@pytest.fixture
def scenario_a():
    return '{"explanation":"hi","files":{"/App.tsx":"code"}}'

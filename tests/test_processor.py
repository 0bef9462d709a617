import asyncio
import json

import pytest

from appforge.core.manifest import MANIFEST_PATH
from appforge.core.processor import CONNECTION_ERROR_MESSAGE, GenerationPipeline
from appforge.core.session_store import SessionBusyError, SessionStore
from appforge.core.webhook_client import BackendError, EmptyResponseError, MockBackend
from appforge.utils.config import PipelineConfig
from appforge.utils.file_helpers import save_debug_log


@pytest.mark.asyncio
async def test_send_message_builds_project(config, fake_backend, scenario_a):
    backend = fake_backend(scenario_a)
    pipeline = GenerationPipeline(config, backend=backend)
    reply = await pipeline.send_message("build me something")

    assert backend.calls == [("build me something", pipeline.session_id)]
    assert reply.role == "assistant"
    assert reply.content == "hi"
    assert reply.files["/src/App.tsx"] == "code"
    assert json.loads(reply.files[MANIFEST_PATH])["devDependencies"]["vite"] == "4.4.5"
    roles = [m.role for m in pipeline.store.messages()]
    assert roles == ["user", "assistant"]
    assert pipeline.is_loading is False


@pytest.mark.asyncio
async def test_blank_text_is_ignored(config, fake_backend):
    backend = fake_backend("unused")
    pipeline = GenerationPipeline(config, backend=backend)
    assert await pipeline.send_message("   ") is None
    assert pipeline.store.messages() == ()
    assert backend.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [BackendError("502"), EmptyResponseError("empty"), OSError("socket closed")])
async def test_backend_failure_becomes_fixed_message(config, fake_backend, error):
    pipeline = GenerationPipeline(config, backend=fake_backend(error))
    reply = await pipeline.send_message("hello")
    assert reply.content == CONNECTION_ERROR_MESSAGE
    assert reply.files is None
    assert len(pipeline.store.messages()) == 2
    assert pipeline.is_loading is False


@pytest.mark.asyncio
async def test_text_only_turn_has_no_files(config, fake_backend):
    pipeline = GenerationPipeline(config, backend=fake_backend("Could you describe the layout?"))
    reply = await pipeline.send_message("make a site")
    assert reply.content == "Could you describe the layout?"
    assert reply.files is None
    assert pipeline.store.latest_files() == {}


@pytest.mark.asyncio
async def test_legacy_fence_turn_becomes_single_file_project(config, fake_backend):
    raw = "Here it is:\n```tsx\nexport default function App() { return <p/>; }\n```"
    pipeline = GenerationPipeline(config, backend=fake_backend(raw))
    reply = await pipeline.send_message("tiny app")
    assert reply.content == "Here it is:"
    assert reply.files["/src/App.tsx"] == "export default function App() { return <p/>; }"


@pytest.mark.asyncio
async def test_busy_session_rejects_second_submission(config, fake_backend, scenario_a):
    gate = asyncio.Event()
    pipeline = GenerationPipeline(config, backend=fake_backend(scenario_a, gate=gate))
    first = asyncio.create_task(pipeline.send_message("first"))
    await asyncio.sleep(0)
    assert pipeline.is_loading is True

    with pytest.raises(SessionBusyError):
        await pipeline.send_message("second")
    assert [m.content for m in pipeline.store.messages()] == ["first"]

    gate.set()
    reply = await first
    assert reply.content == "hi"
    assert pipeline.is_loading is False
    assert len(pipeline.store.messages()) == 2


@pytest.mark.asyncio
async def test_mock_mode_without_endpoint():
    pipeline = GenerationPipeline(PipelineConfig())
    assert isinstance(pipeline.backend, MockBackend)
    reply = await pipeline.send_message("anything")
    assert reply.content.startswith("[MOCK]")
    assert "Webhook URL not configured" in reply.files["/src/App.tsx"]


def test_recover_is_synchronous_and_pure(config, fake_backend, scenario_a):
    store = SessionStore()
    pipeline = GenerationPipeline(config, store=store, backend=fake_backend())
    payload, tree = pipeline.recover(scenario_a)
    assert payload.strategy == "strict"
    assert tree["/src/App.tsx"] == "code"
    assert store.messages() == ()
    payload, tree = pipeline.recover("just text")
    assert tree is None


def test_custom_pins_flow_into_project(fake_backend):
    cfg = PipelineConfig(endpoint="http://hook.test", pinned_versions={"vite": "4.5.3"})
    pipeline = GenerationPipeline(cfg, backend=fake_backend())
    _, tree = pipeline.recover('{"explanation":"x","files":{"/package.json":"{\\"devDependencies\\":{\\"vite\\":\\"5\\"}}"}}')
    assert json.loads(tree[MANIFEST_PATH])["devDependencies"]["vite"] == "4.5.3"


@pytest.mark.asyncio
async def test_reset_clears_and_renames(config, fake_backend, scenario_a):
    pipeline = GenerationPipeline(config, backend=fake_backend(scenario_a))
    await pipeline.send_message("one")
    old = pipeline.session_id
    new = pipeline.reset()
    assert new != old
    assert pipeline.session_id == new
    assert pipeline.store.messages() == ()


@pytest.mark.asyncio
async def test_reset_refused_while_request_in_flight(config, fake_backend, scenario_a):
    gate = asyncio.Event()
    pipeline = GenerationPipeline(config, backend=fake_backend(scenario_a, gate=gate))
    sid = pipeline.session_id
    first = asyncio.create_task(pipeline.send_message("first"))
    await asyncio.sleep(0)

    with pytest.raises(SessionBusyError):
        pipeline.reset()
    assert pipeline.session_id == sid

    gate.set()
    reply = await first
    assert reply.content == "hi"
    assert [m.role for m in pipeline.store.messages()] == ["user", "assistant"]
    assert pipeline.session_id == sid
    assert pipeline.reset() != sid


def test_save_debug_log(tmp_path):
    path = save_debug_log("recovery_scan", {"raw": "x"}, log_dir=str(tmp_path))
    assert path is not None
    assert json.loads(open(path, encoding="utf-8").read()) == {"raw": "x"}


def test_debug_recovery_dump_uses_configured_log_dir(tmp_path, fake_backend):
    cfg = PipelineConfig(endpoint="http://hook.test", debug=True, log_dir=str(tmp_path))
    pipeline = GenerationPipeline(cfg, backend=fake_backend())
    pipeline.recover('noise {"explanation":"x","files":{"/App.tsx":"a"}} tail')
    dumps = [p.name for p in tmp_path.iterdir()]
    assert len(dumps) == 1
    assert dumps[0].endswith("_recovery_scan.json")

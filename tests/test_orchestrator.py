"""Tests for the generation orchestrator."""

import asyncio

import pytest

from conftest import FakeConverter, FakeGenerator, IMAGE_URI
from knife_forge.config import APIKeys, Config
from knife_forge.core import HuggingFaceConverter, ModelLoadingError, PlaceholderConverter
from knife_forge.generators import GenerationError
from knife_forge.generators.gemini import GeminiGenerator
from knife_forge.models import Completed, Failed, Idle, ModelReference, StatusKind
from knife_forge.orchestrator import (
    EmptyPromptError,
    ForgeSession,
    GenerationInProgressError,
    build_session,
)


def kinds(session):
    return [status.kind for status in session.history]


class TestGenerate:
    def test_success_walks_every_stage(self, generator, converter):
        session = ForgeSession(generator, converter)
        status = asyncio.run(session.generate("obsidian dagger"))

        assert isinstance(status, Completed)
        assert kinds(session) == [
            StatusKind.IDLE,
            StatusKind.GENERATING_IMAGE,
            StatusKind.GENERATING_MESH,
            StatusKind.COMPLETED,
        ]
        assert status.image_ref == IMAGE_URI
        assert status.model_ref == converter.result
        assert status.message == "Forge complete!"
        assert generator.calls == ["obsidian dagger"]
        assert converter.calls == [IMAGE_URI]

    def test_progress_messages(self, generator, converter):
        session = ForgeSession(generator, converter)
        asyncio.run(session.generate("dagger"))

        assert session.history[1].message == "Forging blade concept with Gemini..."
        assert session.history[2].message == "Casting 3D mesh via Hugging Face..."
        assert session.history[2].image_ref == IMAGE_URI

    def test_listeners_see_each_status(self, generator, converter):
        session = ForgeSession(generator, converter)
        seen = []
        session.subscribe(lambda status: seen.append(status.kind))

        asyncio.run(session.generate("dagger"))

        assert seen == [StatusKind.GENERATING_IMAGE, StatusKind.GENERATING_MESH, StatusKind.COMPLETED]

    def test_unsubscribe(self, generator, converter):
        session = ForgeSession(generator, converter)
        seen = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()

        asyncio.run(session.generate("dagger"))
        assert seen == []

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    def test_empty_prompt_leaves_idle(self, generator, converter, prompt):
        session = ForgeSession(generator, converter)

        with pytest.raises(EmptyPromptError):
            asyncio.run(session.generate(prompt))

        assert session.status == Idle()
        assert len(session.history) == 1
        assert generator.calls == []

    def test_empty_prompt_leaves_failed(self, converter):
        session = ForgeSession(FakeGenerator(error=RuntimeError("quota")), converter)
        asyncio.run(session.generate("dagger"))
        failed = session.status

        with pytest.raises(EmptyPromptError):
            asyncio.run(session.generate("  "))

        assert session.status is failed

    def test_empty_prompt_keeps_stored_prompt(self, generator, converter):
        session = ForgeSession(generator, converter)
        session.prompt = "karambit"

        with pytest.raises(EmptyPromptError):
            asyncio.run(session.generate("   "))

        assert session.prompt == "karambit"

    def test_stored_prompt_used(self, generator, converter):
        session = ForgeSession(generator, converter)
        session.prompt = "karambit"

        asyncio.run(session.generate())
        assert generator.calls == ["karambit"]

    def test_image_failure_skips_mesh(self, converter):
        session = ForgeSession(FakeGenerator(error=GenerationError("Failed to generate image data from Gemini.")), converter)
        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Failed)
        assert status.error == "Failed to generate image data from Gemini."
        assert converter.calls == []
        assert kinds(session) == [StatusKind.IDLE, StatusKind.GENERATING_IMAGE, StatusKind.FAILED]

    def test_mesh_failure(self, generator):
        error = ModelLoadingError("The 3D generation model is currently loading. Please try again in a minute.")
        session = ForgeSession(generator, FakeConverter(error=error))
        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Failed)
        assert "model is currently loading" in status.error
        assert kinds(session)[-2:] == [StatusKind.GENERATING_MESH, StatusKind.FAILED]

    def test_error_without_message_gets_generic_text(self, converter):
        session = ForgeSession(FakeGenerator(error=RuntimeError()), converter)
        status = asyncio.run(session.generate("dagger"))

        assert status.error == "An unexpected error occurred during forging."

    def test_resubmit_after_failure_restarts_from_idle(self, converter):
        generator = FakeGenerator(error=RuntimeError("network down"))
        session = ForgeSession(generator, converter)
        asyncio.run(session.generate("dagger"))

        generator.error = None
        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Completed)
        assert kinds(session) == [
            StatusKind.IDLE,
            StatusKind.GENERATING_IMAGE,
            StatusKind.GENERATING_MESH,
            StatusKind.COMPLETED,
        ]

    def test_second_submit_while_running_rejected(self, converter):
        release = None

        class SlowGenerator(FakeGenerator):
            async def generate(self, prompt):
                await release.wait()
                return await super().generate(prompt)

        session = ForgeSession(SlowGenerator(), converter)

        async def scenario():
            nonlocal release
            release = asyncio.Event()
            first = asyncio.create_task(session.generate("dagger"))
            await asyncio.sleep(0)
            assert session.busy
            with pytest.raises(GenerationInProgressError):
                await session.generate("other")
            with pytest.raises(EmptyPromptError):
                await session.generate("  ")
            with pytest.raises(GenerationInProgressError):
                session.reset()
            release.set()
            return await first

        status = asyncio.run(scenario())
        assert isinstance(status, Completed)
        assert session.prompt == "dagger"

    def test_failing_listener_does_not_break_generation(self, generator, converter):
        session = ForgeSession(generator, converter)

        def listener(status):
            if status.kind == StatusKind.COMPLETED:
                raise OSError("disk full")

        seen = []
        session.subscribe(listener)
        session.subscribe(lambda status: seen.append(status.kind))

        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Completed)
        assert session.status is status
        assert seen[-1] == StatusKind.COMPLETED

    def test_failing_listener_during_image_stage(self, generator, converter):
        session = ForgeSession(generator, converter)

        def listener(status):
            raise RuntimeError("redraw failed")

        session.subscribe(listener)
        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Completed)
        assert converter.calls == [IMAGE_URI]


class TestReset:
    def test_reset_after_completed(self, generator, converter):
        session = ForgeSession(generator, converter)
        asyncio.run(session.generate("dagger"))

        status = session.reset()

        assert status.to_dict() == {"status": "idle"}
        assert session.prompt == ""

    def test_reset_after_failed(self, converter):
        session = ForgeSession(FakeGenerator(error=RuntimeError("x")), converter)
        asyncio.run(session.generate("dagger"))

        session.reset()

        assert session.status == Idle()
        assert session.prompt == ""

    def test_reset_when_idle_is_harmless(self, generator, converter):
        session = ForgeSession(generator, converter)
        session.prompt = "draft"

        session.reset()

        assert session.status == Idle()
        assert session.prompt == ""
        assert len(session.history) == 1


    def test_reset_drops_previous_results(self, generator):
        big = ModelReference(content=b"\x00" * 1024)
        session = ForgeSession(generator, FakeConverter(result=big))

        for _ in range(5):
            asyncio.run(session.generate("dagger"))
            session.reset()

        assert session.history == [Idle()]

    def test_restart_keeps_only_current_run(self, generator, converter):
        session = ForgeSession(generator, converter)
        for _ in range(3):
            asyncio.run(session.generate("dagger"))

        assert len(session.history) == 4
        assert sum(isinstance(s, Completed) for s in session.history) == 1


class TestLifecycle:
    def test_context_manager_closes_clients(self, generator, converter):
        async def scenario():
            async with ForgeSession(generator, converter) as session:
                await session.generate("dagger")

        asyncio.run(scenario())
        assert generator.closed
        assert converter.closed


class TestBuildSession:
    def test_without_hf_key_uses_placeholder(self):
        config = Config(api_keys=APIKeys(google="g-key"))
        session = build_session(config)

        assert isinstance(session.image_generator, GeminiGenerator)
        assert isinstance(session.mesh_converter, PlaceholderConverter)
        assert session.mesh_converter.delay == config.defaults.fallback_delay
        asyncio.run(session.aclose())

    def test_with_hf_key_uses_provider(self):
        config = Config(api_keys=APIKeys(google="g-key", huggingface="hf-key"))
        session = build_session(config)

        assert isinstance(session.mesh_converter, HuggingFaceConverter)
        assert session.mesh_converter.model_id == "google/shap-e"
        asyncio.run(session.aclose())

    def test_placeholder_completes_without_network(self, generator):
        session = ForgeSession(generator, PlaceholderConverter(delay=0, placeholder_url="https://example.com/duck.glb"))
        status = asyncio.run(session.generate("dagger"))

        assert isinstance(status, Completed)
        assert status.model_ref == ModelReference(url="https://example.com/duck.glb")

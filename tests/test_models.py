"""Tests for data models."""

import pytest

from knife_forge.models import (
    Completed,
    Failed,
    GeneratingImage,
    GeneratingMesh,
    Idle,
    ModelReference,
    StatusKind,
    TRANSITIONS,
    can_transition,
)


class TestModelReference:
    def test_remote(self):
        ref = ModelReference(url="https://example.com/duck.glb")
        assert ref.is_remote
        assert ref.to_dict() == {"url": "https://example.com/duck.glb"}

    def test_inline(self):
        ref = ModelReference(content=b"glTF1234")
        assert not ref.is_remote
        assert ref.to_dict() == {"bytes": 8}

    def test_needs_exactly_one_source(self):
        with pytest.raises(ValueError):
            ModelReference()
        with pytest.raises(ValueError):
            ModelReference(url="https://example.com/a.glb", content=b"glTF")

    def test_empty_url_rejected(self):
        with pytest.raises(ValueError):
            ModelReference(url="")


class TestStatusVariants:
    def test_idle_dict_is_exact(self):
        assert Idle().to_dict() == {"status": "idle"}

    def test_kinds(self):
        ref = ModelReference(url="https://example.com/a.glb")
        assert Idle().kind == StatusKind.IDLE
        assert GeneratingImage("working").kind == StatusKind.GENERATING_IMAGE
        assert GeneratingMesh("data:image/png;base64,AA==", "working").kind == StatusKind.GENERATING_MESH
        assert Completed("data:image/png;base64,AA==", ref, "done").kind == StatusKind.COMPLETED
        assert Failed("boom").kind == StatusKind.FAILED

    def test_completed_requires_references(self):
        ref = ModelReference(url="https://example.com/a.glb")
        with pytest.raises(ValueError):
            Completed("", ref, "done")
        with pytest.raises(ValueError):
            Completed("data:image/png;base64,AA==", None, "done")

    def test_generating_mesh_requires_image(self):
        with pytest.raises(ValueError):
            GeneratingMesh("", "working")

    def test_failed_requires_error(self):
        with pytest.raises(ValueError):
            Failed("")

    def test_completed_to_dict(self):
        status = Completed("data:image/png;base64,AA==", ModelReference(content=b"abc"), "done")
        d = status.to_dict()
        assert d["status"] == "completed"
        assert d["model_ref"] == {"bytes": 3}
        assert d["message"] == "done"

    def test_variants_are_immutable(self):
        status = Failed("boom")
        with pytest.raises(AttributeError):
            status.error = "other"

    def test_flags(self):
        assert StatusKind.GENERATING_IMAGE.in_flight
        assert StatusKind.GENERATING_MESH.in_flight
        assert not StatusKind.IDLE.in_flight
        assert StatusKind.COMPLETED.terminal
        assert StatusKind.FAILED.terminal
        assert not StatusKind.GENERATING_MESH.terminal


class TestTransitions:
    def test_forward_path(self):
        assert can_transition(StatusKind.IDLE, StatusKind.GENERATING_IMAGE)
        assert can_transition(StatusKind.GENERATING_IMAGE, StatusKind.GENERATING_MESH)
        assert can_transition(StatusKind.GENERATING_MESH, StatusKind.COMPLETED)

    def test_failure_only_from_generating(self):
        sources = [kind for kind, targets in TRANSITIONS.items() if StatusKind.FAILED in targets]
        assert set(sources) == {StatusKind.GENERATING_IMAGE, StatusKind.GENERATING_MESH}

    def test_no_skipped_stages(self):
        assert not can_transition(StatusKind.IDLE, StatusKind.GENERATING_MESH)
        assert not can_transition(StatusKind.IDLE, StatusKind.COMPLETED)
        assert not can_transition(StatusKind.GENERATING_IMAGE, StatusKind.COMPLETED)

    def test_no_retry_from_failed(self):
        assert TRANSITIONS[StatusKind.FAILED] == frozenset({StatusKind.IDLE})
        assert not can_transition(StatusKind.FAILED, StatusKind.GENERATING_IMAGE)

    def test_every_kind_has_entry(self):
        assert set(TRANSITIONS) == set(StatusKind)

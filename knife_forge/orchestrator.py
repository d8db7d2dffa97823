"""
Generation orchestrator for Knife Forge.

Runs one prompt through the image generator and then the mesh converter,
moving the session status forward after each step:

    Idle -> GeneratingImage -> GeneratingMesh -> Completed
                     \\                \\
                      +-> Failed        +-> Failed

A failed or completed session only goes back to Idle through a reset.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from .config import Config
from .core import MeshConverter, get_mesh_converter
from .generators import ImageGenerator, get_gemini_generator
from .models import (
    Completed,
    Failed,
    GeneratingImage,
    GeneratingMesh,
    GenerationStatus,
    Idle,
    can_transition,
)

logger = logging.getLogger(__name__)

StatusListener = Callable[[GenerationStatus], None]


class EmptyPromptError(ValueError):
    """Submitted prompt is empty or whitespace-only."""
    pass


class GenerationInProgressError(RuntimeError):
    """A generation is already running for this session."""
    pass


class InvalidTransitionError(RuntimeError):
    """The requested status change is not allowed by the status machine."""
    pass


@dataclass(frozen=True)
class ForgeMessages:
    """User-facing progress messages."""

    generating_image: str = "Forging blade concept with Gemini..."
    generating_mesh: str = "Casting 3D mesh via Hugging Face..."
    completed: str = "Forge complete!"
    unexpected_error: str = "An unexpected error occurred during forging."


class ForgeSession:
    """Owns the generation status of one user session.

    Only this class changes `status`. Listeners registered with `subscribe`
    are called after every change, in order. A listener that raises is logged
    and does not affect the status.

    `history` holds the statuses of the current run only; it starts over
    whenever the session returns to Idle.

    Usage:
        async with build_session(config) as session:
            status = await session.generate("obsidian dagger, neon handle")
            if isinstance(status, Completed):
                ...
    """

    def __init__(
        self,
        image_generator: ImageGenerator,
        mesh_converter: MeshConverter,
        messages: Optional[ForgeMessages] = None,
    ):
        self.image_generator = image_generator
        self.mesh_converter = mesh_converter
        self.messages = messages or ForgeMessages()
        self.prompt = ""
        self._status: GenerationStatus = Idle()
        self.history: list[GenerationStatus] = [self._status]
        self._listeners: list[StatusListener] = []

    @property
    def status(self) -> GenerationStatus:
        return self._status

    @property
    def busy(self) -> bool:
        return self._status.kind.in_flight

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _advance(self, new_status: GenerationStatus) -> None:
        if not can_transition(self._status.kind, new_status.kind):
            raise InvalidTransitionError(
                f"Cannot move from {self._status.kind.value} to {new_status.kind.value}"
            )
        logger.debug("Status %s -> %s", self._status.kind.value, new_status.kind.value)
        self._status = new_status
        if isinstance(new_status, Idle):
            self.history = [new_status]
        else:
            self.history.append(new_status)
        for listener in list(self._listeners):
            try:
                listener(new_status)
            except Exception:
                logger.exception("Status listener failed on %s", new_status.kind.value)

    async def generate(self, prompt: Optional[str] = None) -> GenerationStatus:
        """
        Run the prompt through image and mesh generation.

        Args:
            prompt: Prompt to use. When omitted, the session's stored prompt is used.

        Returns:
            The final status, Completed or Failed

        Raises:
            EmptyPromptError: If the prompt is blank (status unchanged)
            GenerationInProgressError: If a generation is already running
        """
        text = self.prompt if prompt is None else prompt
        if not text or not text.strip():
            raise EmptyPromptError("Prompt must not be empty")

        if self.busy:
            raise GenerationInProgressError("A generation is already in progress")

        self.prompt = text

        # A new submission from a finished session is a user-initiated restart
        if self._status.kind.terminal:
            self._advance(Idle())

        self._advance(GeneratingImage(message=self.messages.generating_image))

        try:
            image_ref = await self.image_generator.generate(self.prompt)
            self._advance(GeneratingMesh(image_ref=image_ref, message=self.messages.generating_mesh))

            model_ref = await self.mesh_converter.convert(image_ref)
            self._advance(Completed(
                image_ref=image_ref,
                model_ref=model_ref,
                message=self.messages.completed,
            ))
        except InvalidTransitionError:
            raise
        except Exception as e:
            logger.exception("Generation failed during %s", self._status.kind.value)
            self._advance(Failed(error=str(e) or self.messages.unexpected_error))

        return self._status

    def reset(self) -> GenerationStatus:
        """Return to Idle and clear the prompt.

        Raises:
            GenerationInProgressError: If a generation is still running
        """
        if self.busy:
            raise GenerationInProgressError("Cannot reset while a generation is in progress")

        self.prompt = ""
        if not isinstance(self._status, Idle):
            self._advance(Idle())
        return self._status

    async def aclose(self) -> None:
        """Close both clients."""
        try:
            await self.image_generator.aclose()
        finally:
            await self.mesh_converter.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def build_session(config: Config) -> ForgeSession:
    """Create a session wired to Gemini and the converter the config selects."""
    defaults = config.defaults
    GeminiGenerator = get_gemini_generator()

    image_generator = GeminiGenerator(
        api_key=config.api_keys.google,
        model=defaults.image_model,
        timeout=defaults.request_timeout,
    )
    mesh_converter = get_mesh_converter(
        api_key=config.api_keys.huggingface,
        model_id=defaults.mesh_model,
        base_url=defaults.inference_url,
        fallback_delay=defaults.fallback_delay,
        placeholder_url=defaults.placeholder_url,
        timeout=defaults.request_timeout,
    )
    return ForgeSession(image_generator, mesh_converter)

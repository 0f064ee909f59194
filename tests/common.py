import io
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image

from models.request_models import ReplyTarget
from models.session_models import ImageBlob


def png_bytes(color: Tuple[int, int, int] = (255, 0, 0), size: Tuple[int, int] = (4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_blob(color: Tuple[int, int, int] = (255, 0, 0)) -> ImageBlob:
    return ImageBlob(data=png_bytes(color), mime_type="image/png")


class FakeStatusMessage:
    def __init__(self, message_id: str, content: str):
        self.id = message_id
        self.content = content
        self.images: Tuple = ()
        self.edits: List[Tuple[str, Tuple]] = []

    async def edit(self, content: str, images: Sequence = ()) -> str:
        self.content = content
        self.images = tuple(images)
        self.edits.append((content, self.images))
        return self.id


class FakeChannel:
    def __init__(self, targets: Optional[Dict[str, ReplyTarget]] = None, fetch_error: Optional[Exception] = None):
        self.targets = targets or {}
        self.fetch_error = fetch_error
        self.replies: List[Tuple[str, FakeStatusMessage]] = []
        self.typing_count = 0
        self._next_id = 0

    async def fetch_reply_target(self, message_id: str) -> Optional[ReplyTarget]:
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.targets.get(message_id)

    async def reply(self, message_id: str, content: str) -> FakeStatusMessage:
        self._next_id += 1
        status = FakeStatusMessage(f"bot-{self._next_id}", content)
        self.replies.append((message_id, status))
        return status

    async def send_typing(self) -> None:
        self.typing_count += 1

    @property
    def last_status(self) -> FakeStatusMessage:
        return self.replies[-1][1]


class FakeImageGenerator:
    """Returns one scripted outcome per call, in call order.

    An outcome is either an exception to raise or a `(text, image)` tuple.
    """

    def __init__(self, outcomes, model: str = "image-model"):
        self.outcomes = list(outcomes)
        self.model = model
        self.calls: List[Tuple[str, Tuple[ImageBlob, ...]]] = []

    async def generate(self, prompt, images=()):
        outcome = self.outcomes[len(self.calls) % len(self.outcomes)]
        self.calls.append((prompt, tuple(images)))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeTextGenerator:
    def __init__(self, answers=None, model: str = "text-model", error: Optional[Exception] = None):
        self.answers = list(answers or ["ok"])
        self.model = model
        self.error = error
        self.replies: List[Tuple] = []
        self.prompts: List[str] = []

    async def complete(self, prompt: str):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answers[(len(self.prompts) - 1) % len(self.answers)]

    async def reply(self, turns):
        self.replies.append(tuple(turns))
        if self.error is not None:
            raise self.error
        return self.answers[(len(self.replies) - 1) % len(self.answers)]

import io
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from problem_solver.core.interfaces.ai_service import AIResponse, SolutionProvider
from problem_solver.services.image.image_preprocessor import ImagePreprocessor
from problem_solver.services.problem_service import ProblemService
from problem_solver.storage.memory_store import InMemoryProblemStore
from problem_solver.utils.dependencies import get_problem_service


class FakeSolutionProvider(SolutionProvider):
    """Records calls and returns a canned response"""

    def __init__(self, response: Optional[AIResponse] = None, exc: Optional[Exception] = None):
        self.response = response or AIResponse(success=True, content="The answer is $x=2$.")
        self.exc = exc
        self.calls: List[dict] = []

    async def solve(self, prompt, image_data=None, mime_type="image/jpeg"):
        self.calls.append({"prompt": prompt, "image_data": image_data, "mime_type": mime_type})
        if self.exc is not None:
            raise self.exc
        return self.response

    def get_service_name(self) -> str:
        return "Fake"

    def is_available(self) -> bool:
        return True


def make_image(size=(1600, 1200), fmt="PNG", mode="RGB", color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def provider():
    return FakeSolutionProvider()


@pytest.fixture
def store():
    return InMemoryProblemStore()


@pytest.fixture
def service(store, provider):
    return ProblemService(
        store=store,
        solution_provider=provider,
        image_preprocessor=ImagePreprocessor(max_dimension=800),
        solution_timeout=5,
    )


@pytest.fixture
def client(service):
    from main import app

    app.dependency_overrides[get_problem_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

import base64
import io

from PIL import Image

from problem_solver.core.interfaces.ai_service import AIResponse

from conftest import make_image


def test_submit_text_question(client, provider):
    response = client.post("/api/problems", data={"question": "What is $2+2$?"})

    assert response.status_code == 200
    assert response.json() == {
        "id": 1,
        "question": "What is $2+2$?",
        "imageUrl": None,
        "solution": {"text": "The answer is $x=2$."},
        "status": "solved",
    }


def test_submit_with_image(client, provider):
    response = client.post(
        "/api/problems",
        data={"question": "Solve the equation in the picture"},
        files={"image": ("homework.png", make_image((1200, 1600)), "image/png")},
    )

    assert response.status_code == 200
    image_url = response.json()["imageUrl"]
    assert image_url.startswith("data:image/jpeg;base64,")
    image = Image.open(io.BytesIO(base64.b64decode(image_url.split(",", 1)[1])))
    assert image.size == (600, 800)
    assert provider.calls[0]["image_data"] is not None


def test_ids_increase_across_requests(client):
    ids = [client.post("/api/problems", data={"question": f"q{i}"}).json()["id"] for i in range(3)]

    assert ids == [1, 2, 3]


def test_blank_question_is_rejected(client, store):
    for data in ({"question": "   "}, {}):
        response = client.post("/api/problems", data=data)

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}

    assert store._problems == {}


def test_unreadable_image_is_rejected(client, store):
    response = client.post(
        "/api/problems",
        data={"question": "What is this?"},
        files={"image": ("broken.png", b"garbage", "image/png")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Failed to process image"}
    assert store._problems == {}


def test_oversized_image_is_rejected(client, store):
    response = client.post(
        "/api/problems",
        data={"question": "What is this?"},
        files={"image": ("huge.png", b"\0" * (5 * 1024 * 1024 + 1), "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("File too large")
    assert store._problems == {}


def test_non_image_upload_is_rejected(client):
    response = client.post(
        "/api/problems",
        data={"question": "What is this?"},
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only image uploads are supported"}


def test_provider_failure_still_returns_record(client, provider):
    provider.response = AIResponse(success=False, error="API key not valid")

    response = client.post("/api/problems", data={"question": "Integrate $x^2$"})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    assert body["question"] == "Integrate $x^2$"
    assert body["status"] == "failed"
    assert body["solution"] == {"text": "Unable to process request", "error": "API key not valid"}


def test_unexpected_error_is_reported_as_400(client, service, monkeypatch):
    async def explode(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(service.store, "create", explode)

    response = client.post("/api/problems", data={"question": "2 + 2?"})

    assert response.status_code == 400
    assert response.json() == {"error": "store unavailable"}


def test_get_problem(client):
    created = client.post("/api/problems", data={"question": "2 + 2?"}).json()

    assert client.get(f"/api/problems/{created['id']}").json() == created

    missing = client.get("/api/problems/999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Problem not found"}


def test_api_root_lists_endpoints(client):
    body = client.get("/api").json()

    assert body["endpoints"]["problems"]["submit"] == "POST /api/problems"


def test_text_image_field_gets_error_body(client, store):
    response = client.post("/api/problems", data={"question": "2+2?", "image": "not-a-file"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid image")
    assert store._problems == {}


def test_malformed_problem_id_gets_error_body(client):
    response = client.get("/api/problems/abc")

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid path.problem_id")

"""Tests for the image and voice routes."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

from fastapi.testclient import TestClient


# ---------------------------------------------------------------------------
# POST /api/image
# ---------------------------------------------------------------------------


def test_image_missing_prompt(client: TestClient, api_key) -> None:
    response = client.post("/api/image", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing prompt"}


def test_image_missing_key(client: TestClient) -> None:
    response = client.post("/api/image", json={"prompt": "a red fox"})
    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY not set"}


def test_image_generation(client: TestClient, api_key) -> None:
    payload = {"created": 1, "data": [{"url": "https://img.example/fox.png"}]}
    with patch("chatrelay.proxies.images.litellm.image_generation", return_value=payload) as mock_gen:
        response = client.post(
            "/api/image", json={"prompt": "a red fox", "model": "ignored", "size": "1792x1024"}
        )

    assert response.status_code == 200
    assert response.json() == payload
    kwargs = mock_gen.call_args.kwargs
    assert kwargs["model"] == "dall-e-3"
    assert kwargs["size"] == "1792x1024"
    assert kwargs["n"] == 1


# ---------------------------------------------------------------------------
# POST /api/image/edit
# ---------------------------------------------------------------------------


def test_image_edit_missing_file(client: TestClient, api_key) -> None:
    response = client.post("/api/image/edit", data={"operation": "variation"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing image file"}


def test_image_edit_requires_prompt(client: TestClient, api_key) -> None:
    response = client.post(
        "/api/image/edit",
        data={"operation": "edit"},
        files={"image": ("fox.png", b"\x89PNG", "image/png")},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Missing prompt for image edit"}


def test_image_variation(client: TestClient, api_key) -> None:
    payload = {"created": 1, "data": [{"url": "https://img.example/v.png"}]}
    with patch("chatrelay.proxies.images.litellm.image_variation", return_value=payload) as mock_var:
        response = client.post(
            "/api/image/edit",
            data={"operation": "anything"},
            files={"image": ("fox.png", b"\x89PNG", "image/png")},
        )

    assert response.json() == payload
    assert mock_var.call_args.kwargs["image"] == ("fox.png", b"\x89PNG", "image/png")


# ---------------------------------------------------------------------------
# POST /api/voice
# ---------------------------------------------------------------------------


def test_voice_missing_key_checked_first(client: TestClient) -> None:
    response = client.post("/api/voice", data={"operation": "dance"})
    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY not set"}


def test_voice_invalid_operation(client: TestClient, api_key) -> None:
    response = client.post("/api/voice", data={"operation": "dance"})
    assert response.status_code == 400
    assert response.json() == {"error": 'Invalid operation. Use "transcribe" or "speak"'}


def test_voice_speak_returns_mp3(client: TestClient, api_key) -> None:
    with patch(
        "chatrelay.proxies.voice.litellm.speech",
        return_value=SimpleNamespace(content=b"ID3audio"),
    ):
        response = client.post("/api/voice", data={"operation": "speak", "text": "Hello"})

    assert response.status_code == 200
    assert response.content == b"ID3audio"
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.headers["content-disposition"] == 'attachment; filename="speech.mp3"'


def test_voice_speak_missing_text(client: TestClient, api_key) -> None:
    response = client.post("/api/voice", data={"operation": "speak"})
    assert response.status_code == 400
    assert response.json() == {"error": "No text provided"}


def test_voice_transcribe(client: TestClient, api_key) -> None:
    with patch(
        "chatrelay.proxies.voice.litellm.transcription",
        return_value=SimpleNamespace(text="hello there"),
    ):
        response = client.post(
            "/api/voice",
            data={"operation": "transcribe"},
            files={"audio": ("clip.webm", b"\x1aE\xdf\xa3", "audio/webm")},
        )

    assert response.json() == {"text": "hello there"}


def test_voice_transcribe_missing_audio(client: TestClient, api_key) -> None:
    response = client.post("/api/voice", data={"operation": "transcribe"})
    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}

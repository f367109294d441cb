"""
API端点测试
"""

import os
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from recap.config import Settings
from recap.main import create_app
from recap.services.ai.base import TranscriptionResult


def audio_files(data: bytes, filename: str = "call.wav", media_type: str = "audio/wav"):
    return {"audio": (filename, data, media_type)}


async def upload(client, data: bytes, **form) -> dict:
    response = await client.post("/api/recordings", files=audio_files(data), data=form)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert "X-Request-ID" in response.headers
        assert "X-Process-Time" in response.headers


class TestRecordingsAPI:
    """录音API测试"""

    async def test_create_and_process_recording(self, client, app, fake_ai, wav_bytes):
        """测试上传录音并完成处理"""
        created = await upload(client, wav_bytes, title="Weekly sync", duration="10")

        assert created["title"] == "Weekly sync"
        assert created["duration"] == 10
        assert created["processed"] is False
        assert created["transcribed"] is False
        assert "createdAt" in created

        await app.state.container.task_manager.wait_idle()

        status = await client.get(f"/api/recordings/{created['id']}/status")
        assert status.json() == {"progress": 100, "status": "Completed"}

        transcript = (await client.get(f"/api/recordings/{created['id']}/transcript")).json()
        assert len(transcript) == 1
        assert transcript[0]["timestamp"] == 0
        assert transcript[0]["recordingId"] == created["id"]
        assert transcript[0]["speaker"] == "Speaker"

        summaries = await app.state.container.store.list_summaries(created["id"])
        assert len(summaries) == 5

    async def test_create_defaults(self, client, wav_bytes):
        created = await upload(client, wav_bytes, duration="ten")
        assert created["title"] == "Untitled Recording"
        assert created["duration"] == 0

    async def test_upload_uses_file_stem_as_title(self, client, app, fake_ai, wav_bytes):
        fake_ai.transcription = TranscriptionResult(text="hi", duration=12.6)

        response = await client.post(
            "/api/recordings/upload",
            files=audio_files(wav_bytes, filename="Board Meeting.mp3", media_type="audio/mpeg")
        )

        assert response.status_code == 201
        created = response.json()
        assert created["title"] == "Board Meeting"
        assert created["duration"] == 0

        await app.state.container.task_manager.wait_idle()
        fetched = (await client.get(f"/api/recordings/{created['id']}")).json()
        assert fetched["duration"] == 13
        assert fake_ai.transcribe_calls[0][1] == "audio/mpeg"

    async def test_missing_audio_file(self, client):
        response = await client.post("/api/recordings", data={"title": "Nothing"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"] == "No audio file provided"

    async def test_rejects_non_audio_file(self, client, app):
        response = await client.post(
            "/api/recordings",
            files=audio_files(b"just text", filename="notes.txt", media_type="text/plain")
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only audio files are allowed"
        assert await app.state.container.store.list_recordings() == []

    async def test_file_too_large(self, tmp_path, fake_ai, wav_bytes):
        settings = Settings(
            upload_dir=str(tmp_path / "small"),
            log_to_file=False,
            max_file_size=1024,
            http_proxy=None,
            https_proxy=None
        )
        app = create_app(settings=settings, ai_service=fake_ai)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/recordings", files=audio_files(wav_bytes))

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"
        assert os.listdir(settings.upload_dir) == []
        assert await app.state.container.store.list_recordings() == []

    async def test_list_recordings_newest_first(self, client, wav_bytes):
        first = await upload(client, wav_bytes, title="First")
        second = await upload(client, wav_bytes, title="Second")

        response = await client.get("/api/recordings")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [second["id"], first["id"]]

    async def test_get_missing_recording(self, client):
        response = await client.get("/api/recordings/404")
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "RESOURCE_NOT_FOUND"
        assert body["message"] == "Recording not found"

    async def test_status_of_missing_recording(self, client):
        response = await client.get("/api/recordings/404/status")
        assert response.status_code == 404

    async def test_delete_recording(self, client, app, test_settings, wav_bytes):
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()
        filename = created["filename"]

        response = await client.delete(f"/api/recordings/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Recording deleted successfully"}
        assert (await client.get(f"/api/recordings/{created['id']}")).status_code == 404
        assert (await client.get(f"/api/recordings/{created['id']}/transcript")).json() == []
        assert not os.path.exists(os.path.join(test_settings.upload_dir, filename))

    async def test_delete_missing_recording(self, client):
        response = await client.delete("/api/recordings/404")
        assert response.status_code == 404

    async def test_delete_keeps_recording_when_file_removal_fails(self, client, app, wav_bytes):
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()

        with patch("recap.utils.file_utils.os.remove", side_effect=PermissionError("read-only")):
            response = await client.delete(f"/api/recordings/{created['id']}")

        assert response.status_code == 500
        assert response.json()["code"] == "STORAGE_ERROR"
        assert (await client.get(f"/api/recordings/{created['id']}")).status_code == 200
        assert len((await client.get(f"/api/recordings/{created['id']}/transcript")).json()) == 1

    async def test_non_integer_id(self, client):
        response = await client.get("/api/recordings/abc")
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "recording_id" in body["message"]

    async def test_failed_transcription_still_completes(self, client, app, fake_ai, wav_bytes):
        fake_ai.transcribe_error = RuntimeError("quota exceeded")
        created = await upload(client, wav_bytes)

        await app.state.container.task_manager.wait_idle()

        status = await client.get(f"/api/recordings/{created['id']}/status")
        assert status.json() == {"progress": 100, "status": "Completed"}
        assert (await client.get(f"/api/recordings/{created['id']}/transcript")).json() == []


class TestSummaryAPI:
    """摘要API测试"""

    async def test_get_generated_summary(self, client, app, fake_ai, wav_bytes):
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()
        calls = len(fake_ai.summarize_calls)

        response = await client.get(f"/api/recordings/{created['id']}/summary/general")

        assert response.status_code == 200
        assert response.json().startswith("summary #")
        assert len(fake_ai.summarize_calls) == calls

    async def test_missing_summary_generated_once(self, client, app, fake_ai, wav_bytes):
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()
        calls = len(fake_ai.summarize_calls)

        first = await client.get(f"/api/recordings/{created['id']}/summary/retro")
        second = await client.get(f"/api/recordings/{created['id']}/summary/retro")

        assert first.status_code == 200
        assert first.json() == second.json()
        assert len(fake_ai.summarize_calls) == calls + 1

    async def test_summary_without_transcript(self, client, app, fake_ai, wav_bytes):
        fake_ai.transcribe_error = RuntimeError("bad audio")
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()

        response = await client.get(f"/api/recordings/{created['id']}/summary/general")

        assert response.status_code == 404
        assert response.json()["message"] == "Transcript not found"

    async def test_summary_generation_error(self, client, app, fake_ai):
        store = app.state.container.store
        recording = await store.create_recording(title="Manual", filename="m.wav")
        await store.create_segment(recording.id, timestamp=0, text="hello")
        fake_ai.failing_prompts.add("Analyze this sales conversation")

        response = await client.get(f"/api/recordings/{recording.id}/summary/sales")

        assert response.status_code == 500
        assert response.json()["code"] == "AI_SERVICE_ERROR"


class TestChatAPI:
    """问答API测试"""

    async def test_chat(self, client, app, fake_ai, wav_bytes):
        created = await upload(client, wav_bytes)
        await app.state.container.task_manager.wait_idle()

        response = await client.post(
            f"/api/recordings/{created['id']}/chat",
            json={"message": "When do we ship?"}
        )

        assert response.status_code == 200
        assert response.json() == {"response": fake_ai.answer}

        history = (await client.get(f"/api/recordings/{created['id']}/chat")).json()
        assert [m["role"] for m in history] == ["user", "assistant"]
        assert history[0]["recordingId"] == created["id"]

    @pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
    async def test_chat_requires_message(self, client, payload):
        response = await client.post("/api/recordings/1/chat", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_chat_without_body(self, client):
        response = await client.post("/api/recordings/1/chat")
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"] == "Message is required"

    async def test_chat_with_form_body(self, client):
        response = await client.post("/api/recordings/1/chat", data={"message": "Hi?"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"]

    async def test_chat_without_transcript(self, client, app):
        store = app.state.container.store
        recording = await store.create_recording(title="Silent", filename="s.wav")

        response = await client.post(f"/api/recordings/{recording.id}/chat", json={"message": "Hi?"})

        assert response.status_code == 404
        assert await store.list_chat_messages(recording.id) == []

    async def test_chat_missing_recording(self, client):
        response = await client.post("/api/recordings/404/chat", json={"message": "Hi?"})
        assert response.status_code == 404


class TestServiceInitialization:

    async def test_requests_fail_without_services(self, test_settings):
        """未经过启动阶段时服务不可用"""
        app = create_app(settings=test_settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/recordings")

        assert response.status_code == 500
        assert response.json()["code"] == "CONFIGURATION_ERROR"

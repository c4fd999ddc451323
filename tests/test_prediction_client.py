"""Tests for :mod:`stylecast.services.prediction_client` against a local aiohttp server."""

import contextlib

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from stylecast.errors import PollError, ResultFetchError, SubmissionError
from stylecast.models.media import EncodedImage
from stylecast.models.prediction import PredictionJob, PredictionStatus
from stylecast.services.prediction_client import PredictionClient
from stylecast.utils.config import AppSettings, GenerationSettings, PredictionSettings

ENCODED = EncodedImage(data=b"\xff\xd8\xff\xe0jpeg", content_type="image/jpeg", width=768, height=384)


class _Collaborator:
    """In-process stand-in for the prediction proxy."""

    def __init__(self):
        self.submissions = []
        self.status_queries = []
        self.submit_status = 200
        self.submit_body = {"id": "abc", "status": "starting", "urls": {"get": None}}
        self.status_body = {"id": "abc", "status": "processing"}
        self.status_code = 200
        self.raw_status_text = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/replicate", self.submit)
        app.router.add_get("/api/check-prediction", self.check)
        app.router.add_get("/v1/predictions/{job_id}", self.check)
        app.router.add_get("/result.jpg", self.result)
        return app

    async def submit(self, request):
        self.submissions.append(await request.json())
        if self.submit_status != 200:
            return web.json_response({"error": "upstream exploded"}, status=self.submit_status)
        if isinstance(self.submit_body, str):
            return web.Response(text=self.submit_body)
        return web.json_response(self.submit_body)

    async def check(self, request):
        self.status_queries.append((request.path, request.query.get("id")))
        if self.raw_status_text is not None:
            return web.Response(text=self.raw_status_text, status=self.status_code)
        return web.json_response(self.status_body, status=self.status_code)

    async def result(self, request):
        return web.Response(body=b"\xff\xd8result-bytes", content_type="image/jpeg")


@contextlib.asynccontextmanager
async def _serve(collaborator: _Collaborator, **prediction_overrides):
    server = TestServer(collaborator.app())
    await server.start_server()
    try:
        prediction = PredictionSettings(base_url=str(server.make_url("/api")), **prediction_overrides)
        settings = AppSettings(prediction=prediction, generation=GenerationSettings())
        async with PredictionClient(settings) as client:
            yield client, server
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_submit_posts_encoded_image_prompt_and_style():
    collaborator = _Collaborator()
    async with _serve(collaborator) as (client, _):
        job = await client.submit(ENCODED, "A beautiful painting", "impressionism")

    assert job.job_id == "abc"
    assert job.status is PredictionStatus.QUEUED
    body = collaborator.submissions[0]
    assert body["image"].startswith("data:image/jpeg;base64,")
    assert body["prompt"] == "A beautiful painting"
    assert body["style"] == "impressionism"
    assert body["parameters"] == {
        "num_inference_steps": 28,
        "guidance_scale": 3.5,
        "output_format": "jpg",
        "output_quality": 90,
        "control_strength": 0.5,
    }


@pytest.mark.asyncio
async def test_submit_http_error_raises_submission_error():
    collaborator = _Collaborator()
    collaborator.submit_status = 500
    async with _serve(collaborator) as (client, _):
        with pytest.raises(SubmissionError) as exc_info:
            await client.submit(ENCODED, "prompt")

    assert exc_info.value.status == 500
    assert "upstream exploded" in exc_info.value.body
    assert collaborator.status_queries == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["<html>gateway</html>", {"status": "starting"}, {"id": "abc", "status": "??"}])
async def test_malformed_submission_response(body):
    collaborator = _Collaborator()
    collaborator.submit_body = body
    async with _serve(collaborator) as (client, _):
        with pytest.raises(SubmissionError):
            await client.submit(ENCODED, "prompt")


@pytest.mark.asyncio
async def test_submit_connection_refused():
    collaborator = _Collaborator()
    server = TestServer(collaborator.app())
    await server.start_server()
    base_url = str(server.make_url("/api"))
    await server.close()

    settings = AppSettings(prediction=PredictionSettings(base_url=base_url, request_timeout=5))
    async with PredictionClient(settings) as client:
        with pytest.raises(SubmissionError):
            await client.submit(ENCODED, "prompt")


@pytest.mark.asyncio
async def test_get_status_queries_fixed_endpoint_by_id():
    collaborator = _Collaborator()
    collaborator.status_body = {"status": "succeeded", "output": ["https://x/result.jpg"]}
    async with _serve(collaborator) as (client, _):
        job = await client.get_status(PredictionJob.from_response({"id": "abc", "status": "starting"}))

    assert collaborator.status_queries == [("/api/check-prediction", "abc")]
    assert job.job_id == "abc"
    assert job.status is PredictionStatus.SUCCEEDED
    assert job.output_url == "https://x/result.jpg"


@pytest.mark.asyncio
async def test_get_status_uses_job_handle_when_enabled():
    collaborator = _Collaborator()
    async with _serve(collaborator, use_status_url=True) as (client, server):
        job = PredictionJob.from_response({
            "id": "abc",
            "status": "starting",
            "urls": {"get": str(server.make_url("/v1/predictions/abc"))},
        })
        await client.get_status(job)

    assert collaborator.status_queries == [("/v1/predictions/abc", None)]


@pytest.mark.asyncio
async def test_get_status_http_error_raises_poll_error():
    collaborator = _Collaborator()
    collaborator.status_code = 502
    async with _serve(collaborator) as (client, _):
        with pytest.raises(PollError) as exc_info:
            await client.get_status(PredictionJob.from_response({"id": "abc", "status": "processing"}))

    assert exc_info.value.status == 502


@pytest.mark.asyncio
async def test_get_status_non_json_raises_poll_error():
    collaborator = _Collaborator()
    collaborator.raw_status_text = "not json"
    async with _serve(collaborator) as (client, _):
        with pytest.raises(PollError):
            await client.get_status(PredictionJob.from_response({"id": "abc", "status": "processing"}))


@pytest.mark.asyncio
async def test_get_status_for_another_job_raises_poll_error():
    collaborator = _Collaborator()
    collaborator.status_body = {"id": "other", "status": "processing"}
    async with _serve(collaborator) as (client, _):
        with pytest.raises(PollError) as exc_info:
            await client.get_status(PredictionJob.from_response({"id": "abc", "status": "processing"}))

    assert "other" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_output_returns_bytes_and_content_type():
    collaborator = _Collaborator()
    async with _serve(collaborator) as (client, server):
        data, content_type = await client.fetch_output(str(server.make_url("/result.jpg")))

    assert data == b"\xff\xd8result-bytes"
    assert content_type == "image/jpeg"


@pytest.mark.asyncio
async def test_fetch_output_missing_raises():
    collaborator = _Collaborator()
    async with _serve(collaborator) as (client, server):
        with pytest.raises(ResultFetchError) as exc_info:
            await client.fetch_output(str(server.make_url("/missing.jpg")))

    assert exc_info.value.status == 404


@pytest.mark.asyncio
async def test_injected_session_is_not_closed():
    import aiohttp

    async with aiohttp.ClientSession() as session:
        client = PredictionClient(AppSettings(), session=session)
        await client.close()
        assert not session.closed

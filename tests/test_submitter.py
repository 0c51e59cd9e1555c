from __future__ import annotations

import json

import httpx
import pytest

from conftest import TRANSPORT_ERROR, ScriptedBackend, corrupt_gzip_response, run
from igplanner_jobs.errors import (
    InvalidInputError,
    PaymentRequiredError,
    ServerRejectedError,
    SubmissionTransportError,
)
from igplanner_jobs.models.schemas import (
    AvatarBatchRequest,
    TextToImageRequest,
    VideoFilterRequest,
)


def _urls(count: int) -> list[str]:
    return [f"https://cdn.test/source_{i}.jpg" for i in range(count)]


def _accepted(job_id: str = "job-1") -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "job_id": job_id, "status_url": f"/ai/status?job_id={job_id}"})


@pytest.mark.parametrize("count", [0, 1, 14, 51, 80])
def test_batch_source_count_rejected_without_network(make_client, count: int) -> None:
    backend = ScriptedBackend([])
    client = make_client(backend)
    request = AvatarBatchRequest(image_urls=_urls(count), prompt="avatar style")

    with pytest.raises(InvalidInputError) as excinfo:
        run(client.submit(request))

    assert "15-50" in excinfo.value.reason
    assert backend.requests == []


@pytest.mark.parametrize("variants", [-1, 0, 5, 10])
def test_batch_variants_rejected_without_network(make_client, variants: int) -> None:
    backend = ScriptedBackend([])
    client = make_client(backend)
    request = AvatarBatchRequest(image_urls=_urls(20), prompt="avatar style", variants_per_image=variants)

    with pytest.raises(InvalidInputError) as excinfo:
        run(client.submit(request))

    assert "variants_per_image" in excinfo.value.reason
    assert backend.requests == []


@pytest.mark.parametrize("count,variants", [(15, 1), (50, 4), (32, 2)])
def test_batch_bounds_are_inclusive(make_client, count: int, variants: int) -> None:
    backend = ScriptedBackend([_accepted()])
    client = make_client(backend)
    request = AvatarBatchRequest(image_urls=_urls(count), prompt="avatar style", variants_per_image=variants)

    handle = run(client.submit(request))

    assert handle.id == "job-1"
    assert len(backend.requests) == 1


def test_submit_posts_body_and_builds_handle(make_client) -> None:
    backend = ScriptedBackend([_accepted("abc")])
    client = make_client(backend)
    request = AvatarBatchRequest(
        image_urls=_urls(15),
        prompt="avatar style",
        strength=0.55,
        variants_per_image=2,
        gender="Female",
    )

    handle = run(client.submit(request))

    sent = backend.requests[0]
    assert sent.method == "POST"
    assert sent.url.path == "/ai/generate/batch"
    body = json.loads(sent.content)
    assert body["prompt"] == "avatar style, female portrait"
    assert body["variants_per_image"] == 2
    assert "gender" not in body
    assert "seed" not in body
    assert handle.id == "abc"
    assert handle.kind == "avatar_batch"
    assert handle.status_path == "/ai/status"
    assert handle.status_url == "/ai/status?job_id=abc"


def test_media_job_polls_media_status_endpoint(make_client) -> None:
    backend = ScriptedBackend([_accepted("vid-9")])
    client = make_client(backend)

    handle = run(client.submit(VideoFilterRequest(url="https://cdn.test/clip.mp4", preset="warm")))

    assert backend.requests[0].url.path == "/media/filter/video"
    assert handle.status_path == "/media/filter/status"


def test_payment_required_is_distinct(make_client) -> None:
    backend = ScriptedBackend([httpx.Response(402, json={"detail": "no credits"})])
    client = make_client(backend)

    with pytest.raises(PaymentRequiredError) as excinfo:
        run(client.submit(TextToImageRequest(prompt="a cat")))

    assert excinfo.value.status_code == 402
    assert "no credits" in excinfo.value.body


def test_server_rejection_keeps_status_and_body(make_client) -> None:
    backend = ScriptedBackend([httpx.Response(500, text="upstream exploded")])
    client = make_client(backend)

    with pytest.raises(ServerRejectedError) as excinfo:
        run(client.submit(TextToImageRequest(prompt="a cat")))

    assert not isinstance(excinfo.value, PaymentRequiredError)
    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "upstream exploded"


def test_transport_failure_is_not_retried(make_client) -> None:
    backend = ScriptedBackend([TRANSPORT_ERROR])
    client = make_client(backend)

    with pytest.raises(SubmissionTransportError):
        run(client.submit(TextToImageRequest(prompt="a cat")))

    assert len(backend.requests) == 1


def test_success_without_job_id_is_rejected(make_client) -> None:
    backend = ScriptedBackend([httpx.Response(200, json={"ok": False})])
    client = make_client(backend)

    with pytest.raises(ServerRejectedError) as excinfo:
        run(client.submit(TextToImageRequest(prompt="a cat")))

    assert excinfo.value.status_code == 200


def test_blank_prompt_rejected(make_client) -> None:
    backend = ScriptedBackend([])
    client = make_client(backend)

    with pytest.raises(InvalidInputError):
        run(client.submit(TextToImageRequest(prompt="   ")))

    assert backend.requests == []


def test_corrupt_encoded_body_is_a_transport_error(make_client) -> None:
    backend = ScriptedBackend([corrupt_gzip_response()])
    client = make_client(backend)

    with pytest.raises(SubmissionTransportError):
        run(client.submit(TextToImageRequest(prompt="a cat")))

    assert len(backend.requests) == 1

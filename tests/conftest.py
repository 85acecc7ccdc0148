"""Shared pytest fixtures — in-memory stand-ins for the S3 and CloudWatch Logs clients."""

from __future__ import annotations

import io
import json

import pytest
from botocore.exceptions import ClientError


def make_client_error(code: str, message: str = "", operation: str = "GetLogEvents") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeS3Client:
    """Serves canned ListObjectsV2 pages and object bodies.

    ``errors`` holds exceptions raised, in order, before the next call of the
    named operation succeeds.
    """

    def __init__(self, pages: list[dict], objects: dict[str, bytes], errors: dict | None = None):
        self._pages = list(pages)
        self._objects = objects
        self._errors = {name: list(excs) for name, excs in (errors or {}).items()}
        self.list_calls: list[dict] = []
        self.get_calls: list[dict] = []

    def _maybe_fail(self, operation: str):
        pending = self._errors.get(operation)
        if pending:
            raise pending.pop(0)

    def list_objects_v2(self, **kwargs):
        self.list_calls.append(kwargs)
        self._maybe_fail("list_objects_v2")
        return self._pages.pop(0)

    def get_object(self, **kwargs):
        self.get_calls.append(kwargs)
        self._maybe_fail("get_object")
        return {"Body": io.BytesIO(self._objects[kwargs["Key"]])}


class FakeLogsClient:
    """Serves canned GetLogEvents responses in order."""

    def __init__(self, responses: list, errors: list | None = None):
        self._responses = list(responses)
        self._errors = list(errors or [])
        self.calls: list[dict] = []

    def get_log_events(self, **kwargs):
        self.calls.append(kwargs)
        if self._errors:
            raise self._errors.pop(0)
        return self._responses.pop(0)


def envelope_lines(*payloads: str) -> bytes:
    return "".join(json.dumps({"log": p}) + "\n" for p in payloads).encode("utf-8")


@pytest.fixture()
def fake_s3():
    return FakeS3Client


@pytest.fixture()
def fake_logs():
    return FakeLogsClient


@pytest.fixture()
def client_error():
    return make_client_error


@pytest.fixture()
def throttle_error():
    return lambda: make_client_error("ThrottlingException", "Rate exceeded")


@pytest.fixture()
def envelope():
    return envelope_lines

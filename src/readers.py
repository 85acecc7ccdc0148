"""Destination readers — page through a destination and yield raw log lines."""

import gzip
import logging
from abc import ABC, abstractmethod
from typing import Callable, Generator

import boto3
from botocore.exceptions import BotoCoreError

from src.config import DESTINATION_CLOUDWATCH, DESTINATION_S3, Config
from src.errors import DestinationError, MalformedRecordError
from src.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


class DestinationReader(ABC):
    """One traversal over a destination's delivered lines.

    ``lines()`` may be consumed once; a fresh traversal needs a fresh reader.
    """

    # Whether each line is a JSON envelope around the payload.
    enveloped = True

    def __init__(self, retry_policy: RetryPolicy | None = None, sleep: Callable[[float], None] | None = None):
        self._retry = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._started = False
        self.pages = 0

    def lines(self) -> Generator[str, None, None]:
        """Yield every non-empty line at the destination, in delivery order."""
        if self._started:
            raise RuntimeError(f"{type(self).__name__} has already been traversed")
        self._started = True
        yield from self._iter_lines()

    @abstractmethod
    def _iter_lines(self) -> Generator[str, None, None]:
        ...

    @abstractmethod
    def summary_lines(self) -> list[str]:
        """Human-readable counters gathered during the traversal."""

    def _call(self, operation, description: str, **kwargs):
        extra = {"sleep": self._sleep} if self._sleep is not None else {}
        return call_with_retry(operation, self._retry, description=description, **extra, **kwargs)


class S3ObjectReader(DestinationReader):
    """Lists every object under a prefix and yields the lines of each object."""

    enveloped = True

    def __init__(self, client, bucket: str, prefix: str, retry_policy: RetryPolicy | None = None, sleep=None):
        super().__init__(retry_policy, sleep)
        self._client = client
        self._bucket = bucket
        self._prefix = prefix
        self.objects = 0

    def _iter_lines(self) -> Generator[str, None, None]:
        continuation_token = None
        while True:
            request = {"Bucket": self._bucket, "Prefix": self._prefix}
            if continuation_token is not None:
                request["ContinuationToken"] = continuation_token
            response = self._call(
                self._client.list_objects_v2,
                f"get the objects from bucket {self._bucket!r}",
                **request,
            )
            self.pages += 1
            contents = response.get("Contents", [])
            logger.debug("Listing page %d: %d objects", self.pages, len(contents))

            for obj in contents:
                yield from self._object_lines(obj["Key"])

            if not response.get("IsTruncated"):
                break
            continuation_token = response.get("NextContinuationToken")
            if not continuation_token:
                raise DestinationError(
                    f"Listing of bucket {self._bucket!r} is truncated but carries no continuation token"
                )

        logger.info("Read %d objects from s3://%s/%s", self.objects, self._bucket, self._prefix)

    def _object_lines(self, key: str) -> Generator[str, None, None]:
        response = self._call(
            self._client.get_object,
            f"get s3 object {key!r}",
            Bucket=self._bucket,
            Key=key,
        )
        self.objects += 1
        try:
            data = response["Body"].read()
        except (BotoCoreError, OSError) as e:
            raise DestinationError(f"Error to read GetObject response for {key!r}: {e}") from e

        if key.endswith(".gz"):
            try:
                data = gzip.decompress(data)
            except (OSError, EOFError) as e:
                raise DestinationError(f"Object {key!r} is not valid gzip: {e}") from e

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRecordError(f"Object {key!r} is not UTF-8 text: {e}") from e

        for line in text.split("\n"):
            if line:
                yield line

    def summary_lines(self) -> list[str]:
        return [f"Total object in S3:  {self.objects}"]


class CloudWatchStreamReader(DestinationReader):
    """Pages forward through one log stream from its head.

    The stream is exhausted when the returned forward token equals the one
    that was sent; the API never signals the end any other way.
    """

    enveloped = False

    def __init__(self, client, log_group: str, log_stream: str, retry_policy: RetryPolicy | None = None, sleep=None):
        super().__init__(retry_policy, sleep)
        self._client = client
        self._log_group = log_group
        self._log_stream = log_stream
        self.events = 0

    def _iter_lines(self) -> Generator[str, None, None]:
        forward_token = None
        while True:
            request = {
                "logGroupName": self._log_group,
                "logStreamName": self._log_stream,
                "startFromHead": True,
            }
            if forward_token is not None:
                request["nextToken"] = forward_token
            response = self._call(
                self._client.get_log_events,
                f"get the log events from log group {self._log_group!r}",
                **request,
            )
            self.pages += 1
            events = response.get("events", [])
            logger.debug("Log event page %d: %d events", self.pages, len(events))

            for event in events:
                message = event.get("message")
                if message:
                    self.events += 1
                    yield message

            next_token = response.get("nextForwardToken")
            if not next_token:
                raise DestinationError(
                    f"Log events page from {self._log_group!r} carries no forward token"
                )
            if next_token == forward_token:
                break
            forward_token = next_token

        logger.info(
            "Read %d events from %s/%s in %d pages",
            self.events, self._log_group, self._log_stream, self.pages,
        )

    def summary_lines(self) -> list[str]:
        return [f"Total log event pages:  {self.pages}"]


def default_client_factory(service_name: str, region: str):
    """Build a boto3 client for ``service_name`` in ``region``."""
    session = boto3.session.Session(region_name=region)
    return session.client(service_name)


def _build_s3(config: Config, client_factory) -> DestinationReader:
    return S3ObjectReader(
        client_factory("s3", config.region),
        bucket=config.bucket,
        prefix=config.prefix,
        retry_policy=config.retry,
    )


def _build_cloudwatch(config: Config, client_factory) -> DestinationReader:
    return CloudWatchStreamReader(
        client_factory("logs", config.region),
        log_group=config.log_group,
        log_stream=config.log_stream,
        retry_policy=config.retry,
    )


READERS: dict[str, Callable[[Config, Callable], DestinationReader]] = {
    DESTINATION_S3: _build_s3,
    DESTINATION_CLOUDWATCH: _build_cloudwatch,
}


def build_reader(config: Config, client_factory=default_client_factory) -> DestinationReader:
    """Factory that returns the reader for ``config.destination``."""
    builder = READERS.get(config.destination)
    if builder is None:
        raise DestinationError(f"No reader registered for destination {config.destination!r}")
    try:
        return builder(config, client_factory)
    except BotoCoreError as e:
        raise DestinationError(f"Unable to create {config.destination} client: {e}") from e

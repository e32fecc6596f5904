"""S3Options class for building boto3 S3 clients from parsed addresses."""

import functools
import logging
import threading
from typing import Any
from urllib.parse import SplitResult

import boto3
from botocore.config import Config

from .parts import S3URLParts
from .s3_utils import S3_ESSENTIAL_HOST_PART, strip_port

logger = logging.getLogger(__name__)


@functools.cache
def _get_default_frozen_credentials():
    """Get frozen credentials from default boto3 session with caching.

    This function is cached to avoid repeatedly creating sessions and
    retrieving credentials, which can be expensive operations.

    Returns:
        Frozen credentials from the default boto3 session
    """
    session = boto3.Session()
    return session.get_credentials().get_frozen_credentials()


def _address_client_kwargs(parts: S3URLParts) -> dict[str, Any]:
    """Translate a parsed address into boto3 S3 client keyword arguments.

    AWS hosts reached over plain https are left to botocore's own endpoint
    resolution; any other endpoint, including an AWS host with an explicit
    port or an http scheme, is passed through as ``endpoint_url``. ``s3://``
    addresses carry no endpoint and only contribute the addressing style.
    """
    client_kwargs: dict[str, Any] = {}

    if parts.endpoint:
        is_aws = S3_ESSENTIAL_HOST_PART in parts.endpoint
        has_port = strip_port(parts.endpoint) != parts.endpoint
        if not is_aws or has_port or parts.scheme.lower() != "https":
            client_kwargs["endpoint_url"] = f"{parts.scheme}://{parts.endpoint}"
    if parts.region:
        client_kwargs["region_name"] = parts.region

    if parts.scheme.lower() == "s3":
        addressing_style = "auto"
    elif parts.is_path_style:
        addressing_style = "path"
    else:
        addressing_style = "virtual"

    s3_config: dict[str, Any] = {"addressing_style": addressing_style}
    if parts.is_dual_stack:
        s3_config["use_dualstack_endpoint"] = True
    client_kwargs["config"] = Config(s3=s3_config)

    return client_kwargs


class S3Options:
    """Options for creating an S3 client that talks to a parsed address.

    This class manages S3 credentials and client configuration with thread-safe
    caching and support for serialization (pickling) for distributed computing.

    Attributes:
        _session_kwargs: Keyword arguments for creating boto3 Session
        _s3_client_kwargs: Keyword arguments for creating S3 client
        _s3_client: Cached S3 client instance (not serialized)
        _lock: Thread lock for safe client initialization
        parts: Address the options were derived from, if any
    """

    def __init__(
        self,
        session_kwargs: dict[str, Any],
        s3_client_kwargs: dict[str, Any],
        parts: S3URLParts | None = None,
    ) -> None:
        """Initialize S3Options with configuration parameters.

        Args:
            session_kwargs: Keyword arguments for boto3.Session
            s3_client_kwargs: Keyword arguments for S3 client creation
            parts: Parsed address the client kwargs were derived from
        """
        self._session_kwargs = session_kwargs
        self._s3_client_kwargs = s3_client_kwargs
        self.parts = parts
        self._s3_client: Any | None = None
        self._lock = threading.Lock()

    @classmethod
    def for_url(
        cls,
        url: str | SplitResult | S3URLParts,
        session_kwargs: dict[str, Any] | None = None,
        config: Config | None = None,
    ) -> "S3Options":
        """Create S3Options whose client targets the endpoint of an S3 URL.

        Args:
            url: S3 URL or an already parsed address
            session_kwargs: Keyword arguments for boto3.Session
            config: Extra botocore Config; URL derived settings are merged
                over it

        Returns:
            S3Options instance for the address

        Raises:
            InvalidS3URLError: If the URL is not an S3 URL
        """
        parts = url if isinstance(url, S3URLParts) else S3URLParts.parse(url)
        s3_client_kwargs = _address_client_kwargs(parts)
        if config is not None:
            s3_client_kwargs["config"] = config.merge(s3_client_kwargs["config"])

        logger.debug(
            "S3 client kwargs for %s: endpoint_url=%s region_name=%s",
            parts,
            s3_client_kwargs.get("endpoint_url"),
            s3_client_kwargs.get("region_name"),
        )
        return cls(
            session_kwargs=dict(session_kwargs or {}),
            s3_client_kwargs=s3_client_kwargs,
            parts=parts,
        )

    @classmethod
    def default(cls, url: str | SplitResult | S3URLParts | None = None) -> "S3Options":
        """Create S3Options with default settings using boto3 default session.

        Uses frozen credentials from the default boto3 session and configures
        adaptive retry mode with 3 retries. When a URL is given, its endpoint,
        region and addressing style are applied as in :meth:`for_url`.

        Args:
            url: Optional S3 URL or parsed address to target

        Returns:
            S3Options instance with default configuration
        """
        # Get frozen credentials from default session (cached)
        frozen_creds = _get_default_frozen_credentials()

        session_kwargs = {
            "aws_access_key_id": frozen_creds.access_key,
            "aws_secret_access_key": frozen_creds.secret_key,
        }

        if frozen_creds.token:
            session_kwargs["aws_session_token"] = frozen_creds.token

        # Configure adaptive retry mode with 3 retries
        config = Config(
            retries={
                "mode": "adaptive",
                "max_attempts": 3,
            }
        )

        if url is not None:
            return cls.for_url(url, session_kwargs=session_kwargs, config=config)

        return cls(
            session_kwargs=session_kwargs,
            s3_client_kwargs={"config": config},
        )

    @property
    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments passed to ``Session.client("s3", ...)``."""
        return dict(self._s3_client_kwargs)

    @property
    def s3_client(self) -> Any:
        """Get or create S3 client with thread-safe lazy initialization.

        Returns:
            Boto3 S3 client instance
        """
        if self._s3_client is None:
            with self._lock:
                # Double-check pattern for thread safety
                if self._s3_client is None:
                    session = boto3.Session(**self._session_kwargs)
                    self._s3_client = session.client("s3", **self._s3_client_kwargs)
        return self._s3_client

    def __getstate__(self) -> dict[str, Any]:
        """Get state for pickling.

        Excludes the S3 client and lock which cannot be pickled.

        Returns:
            Dictionary of pickleable attributes
        """
        state = self.__dict__.copy()
        state.pop("_s3_client", None)
        state.pop("_lock", None)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        """Set state after unpickling.

        Restores all attributes and creates a new lock.

        Args:
            state: Dictionary of attributes from pickling
        """
        self.__dict__.update(state)
        self._s3_client = None
        self._lock = threading.Lock()

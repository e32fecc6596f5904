"""Structured S3 addresses.

S3URLParts splits an S3 URL into endpoint, bucket, key, region and version
and rebuilds a URL from those fields. Supported layouts:

Virtual-hosted-style (the bucket name is part of the host):
    http://bucket.s3.amazonaws.com
    http://bucket.s3-aws-region.amazonaws.com
    http://bucket.minio.local:9000

Path-style (the bucket name is the first path segment):
    http://s3.amazonaws.com/bucket
    http://s3-aws-region.amazonaws.com/bucket
    http://minio.local:9000/bucket/object

Dual-stack AWS endpoints (bucket.s3.dualstack.aws-region.amazonaws.com) and
the ``s3://bucket/key`` scheme are accepted as well.
"""

import logging
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlunsplit

from .exceptions import InvalidS3URLError
from .s3_utils import (
    S3_SCHEMES,
    find_s3_url_matches,
    is_bucket_label,
    is_s3_url,
    split_url,
    strip_port,
    url_host,
    url_path,
)

logger = logging.getLogger(__name__)

VERSION_QUERY_PARAM_KEY = "versionId"
S3_KEYWORD_AMAZON_AWS = "amazonaws"
S3_KEYWORD_DUAL_STACK = "dualstack"


class S3URLParts:
    """Components of an S3 service, bucket or object URL.

    Instances are created by :meth:`parse` (or :func:`new_s3_url_parts`) and
    are read-only afterwards.

    Attributes:
        scheme: "http", "https" or "s3"
        host: Lower-cased host including any port
        endpoint: Service host without the bucket label, "" for s3://
        bucket_name: Lower-cased bucket name, "" for the service itself
        object_key: Object key, "" for a bucket or the service
        version: Object version from the versionId query parameter
        region: AWS region, "" for the global endpoint or non-AWS hosts
        unparsed_params: Query string without the version parameter
    """

    def __init__(
        self,
        *,
        scheme: str,
        host: str,
        endpoint: str = "",
        bucket_name: str = "",
        object_key: str = "",
        version: str = "",
        region: str = "",
        unparsed_params: str = "",
        path_style: bool = False,
        dual_stack: bool = False,
    ) -> None:
        self._scheme = scheme
        self._host = host
        self._endpoint = endpoint
        self._bucket_name = bucket_name
        self._object_key = object_key
        self._version = version
        self._region = region
        self._unparsed_params = unparsed_params
        self._path_style = path_style
        self._dual_stack = dual_stack

    @classmethod
    def parse(cls, url: str | SplitResult) -> "S3URLParts":
        """Parse a URL into its S3 components.

        AWS hosts are recognized by their host grammar first; any other
        http(s) URL must pass :func:`is_s3_url` and is then split as
        path-style when it has a path, virtual-host-style when its first host
        label is a bucket label, or treated as a bare service endpoint.

        Args:
            url: URL string or already split URL (not modified)

        Returns:
            A new S3URLParts instance

        Raises:
            InvalidS3URLError: If the URL is not an S3 URL
        """
        try:
            split = split_url(url)
        except ValueError as e:
            raise InvalidS3URLError(str(url)) from e

        scheme = split.scheme.lower()
        host = url_host(split).lower()
        if scheme not in S3_SCHEMES or not host:
            raise InvalidS3URLError(split.geturl())

        path = url_path(split)
        fields: dict = {}

        if scheme == "s3":
            logger.debug("Parsing %s as s3:// address", split.geturl())
            fields.update(bucket_name=host, object_key=path)
        else:
            groups, is_aws = find_s3_url_matches(host)
            if is_aws:
                logger.debug("Parsing %s as AWS S3 address", split.geturl())
                fields.update(_aws_fields(host, path, groups))
            elif is_s3_url(split):
                logger.debug("Parsing %s as S3-compatible address", split.geturl())
                fields.update(_generic_fields(host, path))
            else:
                raise InvalidS3URLError(split.geturl())

        # A key needs a bucket, e.g. "//key" has an empty bucket segment.
        if fields.get("object_key") and not fields.get("bucket_name"):
            raise InvalidS3URLError(split.geturl())

        version, unparsed_params = _split_version(split.query)
        return cls(
            scheme=split.scheme,
            host=host,
            version=version,
            unparsed_params=unparsed_params,
            **fields,
        )

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def host(self) -> str:
        return self._host

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    @property
    def object_key(self) -> str:
        return self._object_key

    @property
    def version(self) -> str:
        return self._version

    @property
    def region(self) -> str:
        return self._region

    @property
    def unparsed_params(self) -> str:
        return self._unparsed_params

    @property
    def is_path_style(self) -> bool:
        return self._path_style

    @property
    def is_dual_stack(self) -> bool:
        return self._dual_stack

    def url(self) -> SplitResult:
        """Return a URL built from the parts.

        The bucket only appears in the path for path-style addresses; for
        virtual-host-style addresses it stays in the host. The version is
        appended after the unparsed parameters.

        Returns:
            SplitResult with scheme, host, path and query
        """
        path = ""
        if self._bucket_name:
            if self._path_style:
                path += "/" + self._bucket_name
            if self._object_key:
                path += "/" + self._object_key

        query = self._unparsed_params
        if self._version:
            if query:
                query += "&"
            query += urlencode({VERSION_QUERY_PARAM_KEY: self._version})

        return SplitResult(
            scheme=self._scheme,
            netloc=self._host,
            path=quote(path, safe="/"),
            query=query,
            fragment="",
        )

    def geturl(self) -> str:
        """Return the URL built from the parts as a string."""
        return urlunsplit(self.url())

    def is_service_syntactically(self) -> bool:
        return bool(self._host) and not self._bucket_name

    def is_bucket_syntactically(self) -> bool:
        return bool(self._bucket_name) and not self._object_key

    def is_object_syntactically(self) -> bool:
        return bool(self._object_key)

    def is_directory_syntactically(self) -> bool:
        """Check whether the address names a directory.

        Directories in S3 are a naming convention: an object key ending in
        '/'.
        """
        return self.is_object_syntactically() and self._object_key.endswith("/")

    @property
    def kind(self) -> str:
        """Classification of the address: service, bucket, directory or object."""
        if self.is_directory_syntactically():
            return "directory"
        if self.is_object_syntactically():
            return "object"
        if self.is_bucket_syntactically():
            return "bucket"
        return "service"

    def _key(self) -> tuple:
        return (
            self._scheme,
            self._host,
            self._endpoint,
            self._bucket_name,
            self._object_key,
            self._version,
            self._region,
            self._unparsed_params,
            self._path_style,
            self._dual_stack,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, S3URLParts):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.geturl()

    def __repr__(self) -> str:
        return (
            f"S3URLParts(scheme={self._scheme!r}, host={self._host!r}, "
            f"endpoint={self._endpoint!r}, bucket_name={self._bucket_name!r}, "
            f"object_key={self._object_key!r}, version={self._version!r}, "
            f"region={self._region!r})"
        )


def _split_path_style(path: str) -> tuple[str, str]:
    """Split "bucket/key" into (lower-cased bucket, key)."""
    bucket, _, key = path.partition("/")
    return bucket.lower(), key


def _aws_fields(host: str, path: str, groups: tuple[str, str, str]) -> dict:
    bucket_with_dot, dualstack_or_region, region_or_domain = groups
    fields: dict = {}

    if bucket_with_dot:
        fields["bucket_name"] = bucket_with_dot[:-1]
        fields["object_key"] = path
        fields["endpoint"] = host[len(bucket_with_dot) :]
    else:
        fields["path_style"] = True
        fields["bucket_name"], fields["object_key"] = _split_path_style(path)
        fields["endpoint"] = host

    if dualstack_or_region == S3_KEYWORD_DUAL_STACK:
        fields["dual_stack"] = True
        if region_or_domain != S3_KEYWORD_AMAZON_AWS:
            fields["region"] = region_or_domain
    elif dualstack_or_region != S3_KEYWORD_AMAZON_AWS:
        fields["region"] = dualstack_or_region

    return fields


def _generic_fields(host: str, path: str) -> dict:
    if path:
        bucket, key = _split_path_style(path)
        return {
            "path_style": True,
            "bucket_name": bucket,
            "object_key": key,
            "endpoint": host,
        }

    host_no_port = strip_port(host)
    if "." in host_no_port:
        first_label = host_no_port.split(".", 1)[0]
        if is_bucket_label(first_label):
            # Endpoint keeps any port suffix.
            return {"bucket_name": first_label, "endpoint": host.split(".", 1)[1]}

    return {"endpoint": host}


def _split_version(query: str) -> tuple[str, str]:
    """Extract the versionId parameter (any key casing) from a query string.

    Returns:
        Tuple of (version or "", remaining query re-encoded in order)
    """
    version = ""
    found = False
    remaining = []
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key.lower() == VERSION_QUERY_PARAM_KEY.lower():
            if not found:
                version = value
                found = True
            continue
        remaining.append((key, value))
    return version, urlencode(remaining)


def new_s3_url_parts(url: str | SplitResult) -> S3URLParts:
    """Parse a URL into S3URLParts.

    Raises:
        InvalidS3URLError: If the URL is not an S3 URL
    """
    return S3URLParts.parse(url)


def parse_s3_url(url: str | SplitResult) -> tuple[str, str] | None:
    """Parse S3 URL into bucket and key.

    Args:
        url: Any URL accepted by S3URLParts.parse

    Returns:
        Tuple of (bucket, key) if valid S3 URL, None otherwise

    Examples:
        >>> parse_s3_url("s3://my-bucket/path/to/file.txt")
        ('my-bucket', 'path/to/file.txt')
        >>> parse_s3_url("https://my-bucket.s3.us-west-2.amazonaws.com/file.txt")
        ('my-bucket', 'file.txt')
        >>> parse_s3_url("ftp://example.com") is None
        True
    """
    try:
        parts = S3URLParts.parse(url)
    except InvalidS3URLError:
        return None
    return parts.bucket_name, parts.object_key

"""S3 URL detection utilities.

This module holds the building blocks shared by detection and parsing:
port stripping, the permissive bucket-label check, the AWS host matcher and
the ordered decision procedure behind is_s3_url().

The bucket-label check is looser than the AWS bucket naming rules on purpose
so that S3-compatible services (MinIO, appliances, local test servers) are
accepted as well.
"""

import logging
import re
from collections.abc import Callable
from urllib.parse import SplitResult, unquote, urlsplit

logger = logging.getLogger(__name__)

S3_HOST_PATTERN = re.compile(
    r"^(?P<bucket>.+\.)?s3[.-]"
    r"(?P<dualstack_or_region>[a-z0-9-]+)\."
    r"(?P<region_or_domain>[a-z0-9-]+)"
)
IPV4_PATTERN = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")

S3_ESSENTIAL_HOST_PART = "amazonaws.com"
S3_SCHEMES = ("http", "https", "s3")

# Virtual-host URLs of these services share the bucket.endpoint shape.
NON_S3_HOST_SUFFIXES = (
    ".blob.core.windows.net",
    ".file.core.windows.net",
    ".dfs.core.windows.net",
)

MAX_BUCKET_LABEL_LENGTH = 63


def split_url(url: str | SplitResult) -> SplitResult:
    """Return url as a SplitResult, splitting strings with urlsplit.

    Raises:
        ValueError: If the string cannot be split (e.g. unbalanced brackets)
    """
    if isinstance(url, SplitResult):
        return url
    return urlsplit(str(url))


def url_host(url: SplitResult) -> str:
    """Return the host of a split URL including any port, without userinfo."""
    return url.netloc.rpartition("@")[2]


def url_path(url: SplitResult) -> str:
    """Return the percent-decoded path of a split URL without its leading '/'."""
    path = unquote(url.path)
    if path.startswith("/"):
        path = path[1:]
    return path


def strip_port(host: str) -> str:
    """Remove an explicit :port suffix from a host when present.

    Bracketed IPv6 literals keep their brackets. Outside brackets the text
    after the last colon is only treated as a port when it is all digits.

    Examples:
        >>> strip_port("minio.local:9000")
        'minio.local'
        >>> strip_port("[::1]:9000")
        '[::1]'
        >>> strip_port("[::1]")
        '[::1]'
        >>> strip_port("host:abc")
        'host:abc'
    """
    if host.startswith("["):
        end = host.find("]")
        if end == -1:
            return host
        rest = host[end + 1 :]
        if not rest or (rest.startswith(":") and _is_digits(rest[1:])):
            return host[: end + 1]
        return host

    head, sep, tail = host.rpartition(":")
    if sep and _is_digits(tail):
        return head
    return host


def _is_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def is_bucket_label(label: str) -> bool:
    """Check whether a string is a plausible S3 bucket label.

    Rules, in order: non-empty and at most 63 characters, not an IPv4
    dotted quad, only ``[a-z0-9.-]`` after lower-casing, and starting with a
    letter or digit. Consecutive dots and AWS-reserved prefixes are accepted.

    Args:
        label: Candidate label

    Returns:
        True if the label looks like a bucket name, False otherwise
    """
    label = label.strip().lower()
    if not label or len(label) > MAX_BUCKET_LABEL_LENGTH:
        return False
    if IPV4_PATTERN.match(label):
        return False
    for ch in label:
        if not (("a" <= ch <= "z") or ("0" <= ch <= "9") or ch in ".-"):
            return False
    return label[0].isalnum()


def find_s3_url_matches(host: str) -> tuple[tuple[str, str, str] | None, bool]:
    """Match a host against the AWS S3 host grammar.

    The host must also contain ``amazonaws.com``; lookalike domains with the
    same shape are rejected.

    Args:
        host: Lower-cased host, optionally with a port

    Returns:
        Tuple of (groups, True) where groups is (bucket with trailing dot or
        "", dual-stack-or-region token, region-or-domain token), or
        (None, False) when the host is not an AWS S3 host
    """
    host_no_port = strip_port(host)
    match = S3_HOST_PATTERN.match(host_no_port)
    if match is None or S3_ESSENTIAL_HOST_PART not in host_no_port:
        return None, False
    return (
        match.group("bucket") or "",
        match.group("dualstack_or_region"),
        match.group("region_or_domain"),
    ), True


def first_path_segment(path: str) -> str:
    """Return the text before the first '/' of a path without leading '/'."""
    return path.split("/", 1)[0]


# Each rule returns True or False when it decides, None to defer to the next.
DetectionRule = Callable[[SplitResult], bool | None]


def _accept_s3_scheme(url: SplitResult) -> bool | None:
    if url.scheme.lower() == "s3":
        return True
    return None


def _reject_other_schemes(url: SplitResult) -> bool | None:
    if url.scheme.lower() not in ("http", "https"):
        return False
    return None


def _reject_empty_host(url: SplitResult) -> bool | None:
    if not url_host(url):
        return False
    return None


def _accept_aws_host(url: SplitResult) -> bool | None:
    _, is_aws = find_s3_url_matches(url_host(url).lower())
    if is_aws:
        return True
    return None


def _accept_path_style(url: SplitResult) -> bool | None:
    segment = first_path_segment(url_path(url))
    if segment and is_bucket_label(segment):
        return True
    return None


def _accept_virtual_host_style(url: SplitResult) -> bool | None:
    host_no_port = strip_port(url_host(url).lower())
    if "." not in host_no_port:
        return None
    if host_no_port.rstrip(".").endswith(NON_S3_HOST_SUFFIXES):
        return False
    if is_bucket_label(host_no_port.split(".", 1)[0]):
        return True
    return None


DETECTION_RULES: tuple[DetectionRule, ...] = (
    _accept_s3_scheme,
    _reject_other_schemes,
    _reject_empty_host,
    _accept_aws_host,
    _accept_path_style,
    _accept_virtual_host_style,
)


def is_s3_url(url: str | SplitResult) -> bool:
    """Check if a URL points to S3 or an S3-compatible service.

    Rules are evaluated in order and the first decisive one wins: ``s3``
    scheme, http/https only, non-empty host, AWS host grammar, path-style
    bucket segment, then virtual-host bucket label (excluding Azure storage
    domains).

    Args:
        url: URL string or already split URL

    Returns:
        True if the URL looks like an S3 address, False otherwise

    Examples:
        >>> is_s3_url("s3://bucket/file.txt")
        True
        >>> is_s3_url("https://bucket.s3.amazonaws.com/file.txt")
        True
        >>> is_s3_url("http://minio.local:9000/bucket/object")
        True
        >>> is_s3_url("ftp://bucket.s3.amazonaws.com")
        False
        >>> is_s3_url("http://s3-test.blob.core.windows.net")
        False
    """
    try:
        split = split_url(url)
    except ValueError:
        logger.debug("URL %r could not be split", url)
        return False

    for rule in DETECTION_RULES:
        verdict = rule(split)
        if verdict is not None:
            logger.debug("URL %r decided %s by %s", url, verdict, rule.__name__)
            return verdict
    return False

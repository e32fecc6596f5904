"""S3 URL Parts - Detect, parse and rebuild S3 and S3-compatible URLs."""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("s3-url-parts")
except (ImportError, PackageNotFoundError):
    __version__ = "unknown"

# Export core functionality
from .exceptions import InvalidS3URLError, S3URLDataFrameError
from .parts import S3URLParts, new_s3_url_parts, parse_s3_url
from .s3_options import S3Options
from .s3_utils import is_bucket_label, is_s3_url, strip_port
from .url_dataframe import addresses_dataframe, parse_url_column

__all__ = [
    "InvalidS3URLError",
    "S3Options",
    "S3URLDataFrameError",
    "S3URLParts",
    "__version__",
    "addresses_dataframe",
    "is_bucket_label",
    "is_s3_url",
    "new_s3_url_parts",
    "parse_s3_url",
    "parse_url_column",
    "strip_port",
]

"""Exception classes for S3 URL parsing."""

INVALID_S3_URL_ERROR_MESSAGE = (
    "Invalid S3 URL. Supported are standard virtual-hosted-style or path-style "
    "URLs defined by AWS, e.g. https://bucket.s3.amazonaws.com or "
    "https://s3.amazonaws.com/bucket, as well as S3-compatible endpoints "
    "and s3://bucket/key"
)


class InvalidS3URLError(ValueError):
    """Exception raised when a URL is not a valid S3 address.

    The message is always INVALID_S3_URL_ERROR_MESSAGE; the rejected URL is
    kept on the ``url`` attribute so callers can report it or try another
    address family.
    """

    def __init__(self, url: str = "") -> None:
        """Initialize InvalidS3URLError.

        Args:
            url: The URL that was rejected
        """
        self.url = url
        super().__init__(INVALID_S3_URL_ERROR_MESSAGE)


class S3URLDataFrameError(Exception):
    """Exception raised when rows of a URL DataFrame cannot be parsed.

    This exception contains a mapping of row identifiers to their specific
    error messages, allowing callers to understand which rows failed and why.
    """

    def __init__(
        self,
        row_errors: dict[str, str],
        message: str = "S3 URL DataFrame validation failed",
    ) -> None:
        """Initialize S3URLDataFrameError.

        Args:
            row_errors: Dictionary mapping row identifiers to error messages
            message: Overall error message
        """
        self.row_errors = row_errors
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        error_details = ", ".join(
            f"{row}: {error}" for row, error in self.row_errors.items()
        )
        return f"{super().__str__()}. Row errors: {error_details}"

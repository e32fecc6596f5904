"""Batch parsing of S3 URLs held in pandas objects.

A URL DataFrame is any DataFrame with a column of URL strings. Rows are
parsed independently; a row that is not an S3 URL is logged and reported
instead of failing the whole batch.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from .exceptions import InvalidS3URLError, S3URLDataFrameError
from .parts import S3URLParts

logger = logging.getLogger(__name__)

ADDRESS_COLUMNS = [
    "url",
    "scheme",
    "host",
    "endpoint",
    "bucket_name",
    "object_key",
    "version",
    "region",
    "unparsed_params",
    "is_path_style",
    "is_dual_stack",
    "kind",
    "error",
]


def _address_record(url: object) -> dict:
    """Build one addresses_dataframe row for a URL."""
    record: dict = dict.fromkeys(ADDRESS_COLUMNS, "")
    record.update(url=url, is_path_style=False, is_dual_stack=False, kind=None)

    if url is None or pd.isna(url):
        record["error"] = "Missing URL"
        return record

    try:
        parts = S3URLParts.parse(str(url))
    except InvalidS3URLError as e:
        record["error"] = str(e)
        return record

    record.update(
        scheme=parts.scheme,
        host=parts.host,
        endpoint=parts.endpoint,
        bucket_name=parts.bucket_name,
        object_key=parts.object_key,
        version=parts.version,
        region=parts.region,
        unparsed_params=parts.unparsed_params,
        is_path_style=parts.is_path_style,
        is_dual_stack=parts.is_dual_stack,
        kind=parts.kind,
        error=None,
    )
    return record


def addresses_dataframe(urls: Iterable[object]) -> pd.DataFrame:
    """Parse URLs into a DataFrame with one row per URL.

    Args:
        urls: URL strings (a list, Series or any iterable)

    Returns:
        DataFrame with ADDRESS_COLUMNS. Invalid URLs keep empty fields,
        ``kind`` None and the error message in ``error``.

    Examples:
        >>> df = addresses_dataframe(["s3://bucket/key", "ftp://host"])
        >>> df["kind"].tolist()
        ['object', None]
    """
    index = urls.index if isinstance(urls, pd.Series) else None
    records = [_address_record(url) for url in urls]
    # Object dtype keeps None in text columns instead of a missing-string NaN.
    dataframe = pd.DataFrame(
        records, columns=ADDRESS_COLUMNS, index=index, dtype=object
    )
    return dataframe.astype({"is_path_style": bool, "is_dual_stack": bool})


def parse_url_column(
    dataframe: pd.DataFrame, column: str, *, strict: bool = False
) -> list[S3URLParts | None]:
    """Parse every URL of a DataFrame column.

    Args:
        dataframe: DataFrame holding the URLs
        column: Name of the URL column
        strict: Raise instead of returning None for rows that fail

    Returns:
        List aligned with the DataFrame rows; None where a row failed

    Raises:
        ValueError: If the column is missing
        S3URLDataFrameError: If strict and any row failed
    """
    validate_url_column(dataframe, column)

    results: list[S3URLParts | None] = []
    row_errors: dict[str, str] = {}

    for idx, row in dataframe.iterrows():
        # Get row identifier for logging
        row_id = str(row.get("id", idx))
        url = row[column]

        try:
            if url is None or pd.isna(url):
                raise InvalidS3URLError("")
            results.append(S3URLParts.parse(str(url)))
        except InvalidS3URLError as e:
            logger.warning("Failed to parse row %s (%r): %s", row_id, url, e)
            row_errors[row_id] = str(e)
            results.append(None)

    if strict and row_errors:
        raise S3URLDataFrameError(
            row_errors, f"{len(row_errors)} of {len(dataframe)} rows are not S3 URLs"
        )

    return results


def validate_url_column(dataframe: pd.DataFrame, column: str) -> None:
    """Validate DataFrame has the URL column.

    Args:
        dataframe: DataFrame to validate
        column: Name of the URL column

    Raises:
        ValueError: If the column is missing
    """
    if column not in dataframe.columns:
        msg = f"DataFrame must have a '{column}' column"
        raise ValueError(msg)


def validate_url_dataframe(dataframe: pd.DataFrame, column: str) -> None:
    """Perform complete validation of a URL DataFrame.

    Validates that DataFrame has:
    - The URL column
    - Only S3 URLs in that column

    Args:
        dataframe: DataFrame to validate
        column: Name of the URL column

    Raises:
        ValueError: If the column is missing
        S3URLDataFrameError: If any row is not an S3 URL
    """
    parse_url_column(dataframe, column, strict=True)

"""
Build classification for extracted release-information rows.

Each raw row is resolved to a release family, a release type and (for
servers) a named server release, then filtered. Rows are independent, so
classification fans out over a bounded thread pool.
"""

import logging
import concurrent.futures

from core.errors import ClassificationError
from . import catalog
from .models import (
    BuildRecord, parse_build,
    RELEASE_STANDARD, RELEASE_PREVIEW, RELEASE_OUT_OF_BAND, RELEASE_UNKNOWN,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def resolve_release_type(kb_article, history_index):
    """
    Decide the release type of a KB article from the update-history index.

    Args:
        kb_article (str): KB identifier
        history_index (UpdateHistoryIndex): Index of announcement links

    Returns:
        str: One of the RELEASE_* constants

    Raises:
        ClassificationError: If the index is missing or the lookup fails
    """
    if not kb_article:
        return RELEASE_UNKNOWN

    if history_index is None:
        raise ClassificationError(f"No update history index available for {kb_article}")

    try:
        match = history_index.lookup(kb_article)
    except Exception as e:
        raise ClassificationError(f"Update history lookup failed for {kb_article}: {e}") from e

    if match is None:
        return RELEASE_UNKNOWN

    text = match.lower()
    if 'preview' in text:
        return RELEASE_PREVIEW
    if 'out-of-band' in text:
        return RELEASE_OUT_OF_BAND
    return RELEASE_STANDARD


def split_servicing_options(text, delimiter):
    """Split a servicing-option cell into trimmed tags, keeping their order."""
    if not text:
        return ()
    return tuple(token.strip() for token in text.split(delimiter) if token.strip())


def classify_row(row, context):
    """
    Classify one raw row.

    Args:
        row (RawRow): Extracted row
        context (ClassificationContext): Product, filters and update history index

    Returns:
        BuildRecord: The record, or None when the row is dropped

    Raises:
        ClassificationError: If the update-history lookup fails
    """
    try:
        major, _ = parse_build(row.build_version_text)
    except ValueError as e:
        logger.warning(f"Dropping row {row.kb_article_id or '(no KB)'}: {e}")
        return None

    build = row.build_version_text.strip()

    if context.build_filter is not None and context.build_filter != major:
        logger.debug(f"Filtered {build}: build filter {context.build_filter}")
        return None

    product = context.product_name
    if context.server_family:
        product = catalog.server_release_for(major)
        if product is None:
            logger.debug(f"Filtered {build}: no server release for major {major}")
            return None

    if major in catalog.MOBILE_ONLY_MAJORS:
        return None

    release_id = catalog.release_id_for(major)
    if release_id is None:
        logger.warning(f"No release id mapped for major build {major} ({build}, {context.product_name})")
        release_id = ''

    release_type = resolve_release_type(row.kb_article_id, context.history_index)

    if release_type == RELEASE_PREVIEW and not context.include_preview:
        logger.debug(f"Filtered {build}: preview release")
        return None
    if release_type == RELEASE_OUT_OF_BAND and not context.include_out_of_band:
        logger.debug(f"Filtered {build}: out-of-band release")
        return None

    return BuildRecord(
        product=product,
        servicing_options=split_servicing_options(row.servicing_option_text, context.delimiter),
        availability_date=row.availability_date_text,
        release_type=release_type,
        release_id=release_id,
        build=build,
        kb_article=row.kb_article_id,
        kb_url=row.kb_url,
    )


def classify_rows(rows, context, max_workers=DEFAULT_MAX_WORKERS):
    """
    Classify rows concurrently.

    Results keep the order of ``rows`` regardless of which worker finishes
    first. The first ClassificationError raised by any worker propagates.

    Args:
        rows (iterable): RawRow objects
        context (ClassificationContext): Shared read-only context
        max_workers (int): Worker pool size

    Returns:
        list: BuildRecord objects for the rows that were kept
    """
    rows = list(rows)
    if not rows:
        return []

    results = [None] * len(rows)

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_position = {
            executor.submit(classify_row, row, context): position
            for position, row in enumerate(rows)
        }

        for future in concurrent.futures.as_completed(future_to_position):
            results[future_to_position[future]] = future.result()

    records = [record for record in results if record is not None]
    logger.info(f"Classified {len(rows)} rows: kept {len(records)}, dropped {len(rows) - len(records)}")
    return records

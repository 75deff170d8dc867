"""
Final ordering of a product's build records.
"""

import logging

logger = logging.getLogger(__name__)


def deduplicate(records):
    """Keep the first record per build, in input order."""
    seen = set()
    unique = []
    for record in records:
        if record.build in seen:
            logger.debug(f"Dropping duplicate build {record.build}")
            continue
        seen.add(record.build)
        unique.append(record)
    return unique


def sort_records(records):
    """
    Order records by availability date, then numeric major and minor build.

    The raw build string only breaks ties between otherwise equal keys.
    """
    by_build_string = sorted(records, key=lambda record: record.build)
    return sorted(
        by_build_string,
        key=lambda record: (record.availability_date,) + record.build_key,
    )


def assemble(records, newest_only=False):
    """
    Deduplicate and order records for export.

    Args:
        records (list): Reconciled BuildRecord objects
        newest_only (bool): Keep only the last record of the final ordering

    Returns:
        list: Ordered BuildRecord objects
    """
    ordered = sort_records(deduplicate(records))

    if newest_only:
        ordered = ordered[-1:]

    logger.info(f"Assembled {len(ordered)} records")
    return ordered

"""
Static override reconciliation.

Some builds are misclassified by the page heuristics (wrong release type,
missing KB, server builds listed under the wrong release). A hand-kept
JSON dataset per product replaces those records wholesale.
"""

import json
import logging
import os

from core.errors import OverrideConflictError, OverrideDataError
from .models import (
    BuildRecord, parse_build,
    RELEASE_STANDARD, RELEASE_PREVIEW, RELEASE_OUT_OF_BAND, RELEASE_UNKNOWN,
)

logger = logging.getLogger(__name__)

RELEASE_TYPES = (RELEASE_STANDARD, RELEASE_PREVIEW, RELEASE_OUT_OF_BAND, RELEASE_UNKNOWN)

STRING_FIELDS = ('product', 'availabilityDate', 'releaseId', 'kbArticle', 'kbUrl')


def _check_entry(entry):
    """Return a description of what is wrong with an override entry, or None."""
    if not isinstance(entry, dict) or not isinstance(entry.get('build'), str):
        return "no string 'build' key"

    try:
        parse_build(entry['build'])
    except ValueError as e:
        return str(e)

    for key in STRING_FIELDS:
        if key in entry and not isinstance(entry[key], str):
            return f"'{key}' must be a string, got {type(entry[key]).__name__}"

    if 'releaseType' in entry and entry['releaseType'] not in RELEASE_TYPES:
        return f"invalid releaseType '{entry['releaseType']}'"

    options = entry.get('servicingOptions', [])
    if not isinstance(options, list) or not all(isinstance(option, str) for option in options):
        return "'servicingOptions' must be a list of strings"

    return None


def load_overrides(path):
    """
    Load a static override dataset.

    Entries may omit every key but 'build'. Omitted keys take the record
    defaults (empty strings, no servicing options, release type 'Unknown'),
    so a partial entry is exported with all eight keys. The 'build' value is
    trimmed before matching.

    Args:
        path (str): Path to a JSON array of BuildRecord-shaped objects

    Returns:
        tuple: BuildRecord objects, or None when no dataset exists

    Raises:
        OverrideDataError: If the file is not a JSON array of well-formed entries
    """
    if not path or not os.path.exists(path):
        logger.info(f"No override dataset at {path}, reconciliation disabled")
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise OverrideDataError(f"Cannot read override dataset {path}: {e}") from e

    if not isinstance(data, list):
        raise OverrideDataError(f"Override dataset {path} must be a JSON array")

    overrides = []
    for position, entry in enumerate(data):
        problem = _check_entry(entry)
        if problem:
            raise OverrideDataError(f"Override entry #{position + 1} in {path}: {problem}")
        overrides.append(BuildRecord.from_dict(entry))

    logger.info(f"Loaded {len(overrides)} override entries from {path}")
    return tuple(overrides)


def reconcile(records, overrides):
    """
    Replace records that have an override entry with the same build.

    Args:
        records (list): Classified BuildRecord objects
        overrides (tuple): Override BuildRecord objects, or None

    Returns:
        list: Reconciled records, in input order

    Raises:
        OverrideConflictError: If more than one override shares a record's build
    """
    if overrides is None:
        return list(records)

    reconciled = []
    replaced = 0

    for record in records:
        matches = [entry for entry in overrides if entry.build == record.build]

        if len(matches) > 1:
            raise OverrideConflictError(record.build, len(matches))

        if matches:
            reconciled.append(matches[0])
            replaced += 1
        else:
            reconciled.append(record)

    logger.info(f"Reconciled {len(reconciled)} records, {replaced} replaced by overrides")
    return reconciled

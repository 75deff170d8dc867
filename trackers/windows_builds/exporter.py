"""
JSON export of assembled build records.

Each product gets one file with its full ordered record set plus one file
per release family, e.g. ``windows-10.json`` and ``windows-10-22H2.json``.
"""

import glob
import json
import logging
import os
from collections import defaultdict

logger = logging.getLogger(__name__)


def records_to_json(records):
    """Serialize records to the exported JSON text."""
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def group_by_release(records):
    """
    Group records by release id, preserving record order within each group.

    Records without a release id are left out of the groups.

    Returns:
        dict: release id -> list of BuildRecord, in order of first appearance
    """
    groups = defaultdict(list)
    for record in records:
        if not record.release_id:
            continue
        groups[record.release_id].append(record)
    return dict(groups)


def _write_json(path, records):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(records_to_json(records))
        f.write('\n')
    logger.info(f"Wrote {len(records)} records to {path}")


def _remove_stale_exports(slug, export_dir):
    # Only <slug>.json and <slug>-<release>.json; a bare prefix glob would also hit longer slugs
    stale = glob.glob(os.path.join(export_dir, f"{slug}.json"))
    stale += glob.glob(os.path.join(export_dir, f"{slug}-*.json"))
    for path in stale:
        os.remove(path)
        logger.debug(f"Removed previous export {path}")


def export_product(slug, records, export_dir):
    """
    Write the export files for one product.

    Earlier export files of the product are removed first, so a release
    family that no longer has records leaves no file behind.

    Args:
        slug (str): File name stem for the product, e.g. 'windows-10'
        records (list): Ordered BuildRecord objects
        export_dir (str): Target directory, created when missing

    Returns:
        list: Paths of the files written
    """
    os.makedirs(export_dir, exist_ok=True)
    _remove_stale_exports(slug, export_dir)

    paths = []
    full_path = os.path.join(export_dir, f"{slug}.json")
    _write_json(full_path, records)
    paths.append(full_path)

    unassigned = sum(1 for record in records if not record.release_id)
    if unassigned:
        logger.warning(f"{unassigned} {slug} records have no release id and only appear in {full_path}")

    for release_id, group in group_by_release(records).items():
        group_path = os.path.join(export_dir, f"{slug}-{release_id}.json")
        _write_json(group_path, group)
        paths.append(group_path)

    return paths


def validate_exports(export_dir):
    """
    Check that every exported file is valid JSON of the expected shape.

    Args:
        export_dir (str): Directory holding the export files

    Returns:
        list: Problem descriptions, empty when every file is valid
    """
    problems = []
    paths = sorted(glob.glob(os.path.join(export_dir, '*.json')))

    if not paths:
        problems.append(f"No JSON exports found in {export_dir}")
        return problems

    for path in paths:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            problems.append(f"{path}: {e}")
            continue

        if not isinstance(data, list):
            problems.append(f"{path}: top level is not an array")
            continue

        for position, entry in enumerate(data):
            if not isinstance(entry, dict) or 'build' not in entry:
                problems.append(f"{path}: entry #{position + 1} has no 'build' key")
                break

    logger.info(f"Validated {len(paths)} export files, {len(problems)} problems")
    return problems

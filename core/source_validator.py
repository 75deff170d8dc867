"""
Source Validator for WinBuilds

Validates product source configurations and static override datasets,
and optionally tests connectivity to every configured page.
"""

import json
import logging
from typing import Dict, List, Optional, Tuple
from pathlib import Path

import yaml
import requests
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Schema definitions for product entries
# Format: {'field_name': {'required': bool, 'type': expected_type, 'hint': str}}

PRODUCT_FIELDS = {
    'key': {'required': True, 'type': str, 'hint': 'Product selector: windows10, windows11 or windowsserver'},
    'name': {'required': True, 'type': str, 'hint': 'Product name written into each record'},
    'slug': {'required': True, 'type': str, 'hint': 'File name stem for the export files'},
    'release_info_url': {'required': True, 'type': str, 'hint': 'URL of the release-information page'},
    'extraction': {'required': True, 'type': str, 'hint': 'Extraction strategy: table or rows'},
    'update_history_urls': {'required': True, 'type': list, 'hint': 'Update-history pages used to classify KBs'},
    'server_family': {'required': False, 'type': bool, 'hint': 'Refine records to a named server release'},
    'table_class': {'required': False, 'type': str, 'hint': 'Class marker of the build tables (table extraction)'},
    'delimiter': {'required': False, 'type': str, 'hint': 'Separator of the servicing-option column'},
    'overrides': {'required': False, 'type': str, 'hint': 'Path to the static override JSON dataset'},
}

VALID_PRODUCT_KEYS = ['windows10', 'windows11', 'windowsserver']
VALID_EXTRACTIONS = ['table', 'rows']

OVERRIDE_REQUIRED_KEYS = ['product', 'availabilityDate', 'releaseType', 'releaseId', 'build']
VALID_RELEASE_TYPES = ['Standard', 'Preview', 'Out-of-band', 'Unknown']


class ValidationError:
    """Represents a single validation error."""

    def __init__(self, source_name: str, field: str, message: str, hint: Optional[str] = None):
        self.source_name = source_name
        self.field = field
        self.message = message
        self.hint = hint

    def __str__(self):
        result = f"  - {self.message}"
        if self.hint:
            result += f"\n    Hint: {self.hint}"
        return result


class ConnectionResult:
    """Represents a connectivity test result."""

    def __init__(self, source_name: str, url: str, success: bool, message: str):
        self.source_name = source_name
        self.url = url
        self.success = success
        self.message = message

    def __str__(self):
        return f"    {'[OK]' if self.success else '[FAIL]'} {self.source_name} {self.url} - {self.message}"


class SourceValidator:
    """Validates product source configurations for WinBuilds trackers."""

    def __init__(self, trackers_dir: str = None, base_dir: str = None):
        if trackers_dir is None:
            trackers_dir = Path(__file__).parent.parent / 'trackers'
        self.trackers_dir = Path(trackers_dir)
        self.base_dir = Path(base_dir) if base_dir else self.trackers_dir.parent

    def get_tracker_names(self) -> List[str]:
        """Get list of available tracker names."""
        trackers = []
        for item in self.trackers_dir.iterdir():
            if item.is_dir() and not item.name.startswith('_'):
                config_path = item / 'config.yaml'
                if config_path.exists():
                    trackers.append(item.name)
        return sorted(trackers)

    def load_tracker_products(self, tracker_name: str) -> Tuple[List[dict], Optional[str]]:
        """Load products from a tracker's config file.

        Returns:
            Tuple of (products list, error message or None)
        """
        config_path = self.trackers_dir / tracker_name / 'config.yaml'

        if not config_path.exists():
            return [], f"Config file not found: {config_path}"

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return [], f"YAML parse error: {e}"

        products = config.get('products', [])
        if not isinstance(products, list):
            return [], "products must be a list"

        return products, None

    def validate_product(self, product: dict, product_index: int) -> List[ValidationError]:
        """Validate a single product configuration.

        Returns:
            List of ValidationError objects (empty if valid)
        """
        errors = []
        product_name = product.get('name', f'product #{product_index + 1}')

        for field, spec in PRODUCT_FIELDS.items():
            if spec['required'] and field not in product:
                errors.append(ValidationError(
                    product_name, field,
                    f"Missing required field: {field}",
                    spec['hint']
                ))

        # Check for unknown fields (possible typos)
        for field in product.keys():
            if field not in PRODUCT_FIELDS:
                similar = self._find_similar_field(field, PRODUCT_FIELDS.keys())
                hint = f"Did you mean '{similar}'?" if similar else None
                errors.append(ValidationError(
                    product_name, field,
                    f"Unknown field: '{field}'",
                    hint
                ))

        # Validate field types
        for field, value in product.items():
            if field in PRODUCT_FIELDS:
                expected_type = PRODUCT_FIELDS[field]['type']
                if not isinstance(value, expected_type):
                    errors.append(ValidationError(
                        product_name, field,
                        f"Field '{field}' should be {expected_type.__name__}, got {type(value).__name__}",
                        PRODUCT_FIELDS[field].get('hint')
                    ))

        if 'key' in product and product['key'] not in VALID_PRODUCT_KEYS:
            errors.append(ValidationError(
                product_name, 'key',
                f"Invalid product key: '{product.get('key')}'",
                f"Valid keys: {', '.join(VALID_PRODUCT_KEYS)}"
            ))

        if 'extraction' in product and product['extraction'] not in VALID_EXTRACTIONS:
            errors.append(ValidationError(
                product_name, 'extraction',
                f"Invalid extraction strategy: '{product.get('extraction')}'",
                f"Valid strategies: {', '.join(VALID_EXTRACTIONS)}"
            ))

        if isinstance(product.get('overrides'), str):
            errors.extend(self.validate_overrides(product_name, product['overrides']))

        return errors

    def _find_similar_field(self, field: str, valid_fields) -> Optional[str]:
        """Find a similar valid field name (for typo detection)."""
        field_lower = field.lower()
        for valid in valid_fields:
            if field_lower in valid.lower() or valid.lower() in field_lower:
                return valid
            if field_lower.replace('_', '') == valid.lower().replace('_', ''):
                return valid
        return None

    def _resolve(self, path: str) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.base_dir / path

    def validate_overrides(self, product_name: str, path: str) -> List[ValidationError]:
        """Validate a static override dataset. A missing file is not an error.

        Returns:
            List of ValidationError objects (empty if valid)
        """
        full_path = self._resolve(path)
        if not full_path.exists():
            return []

        try:
            with open(full_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return [ValidationError(product_name, 'overrides', f"Cannot read {path}: {e}")]

        if not isinstance(data, list):
            return [ValidationError(product_name, 'overrides', f"{path} must be a JSON array")]

        errors = []
        seen_builds = set()

        for position, entry in enumerate(data):
            label = f"{path} entry #{position + 1}"

            if not isinstance(entry, dict):
                errors.append(ValidationError(product_name, 'overrides', f"{label} is not an object"))
                continue

            for key in OVERRIDE_REQUIRED_KEYS:
                if key not in entry:
                    errors.append(ValidationError(product_name, 'overrides', f"{label} is missing '{key}'"))

            build = entry.get('build')
            if build in seen_builds:
                errors.append(ValidationError(
                    product_name, 'overrides',
                    f"{label} repeats build {build}",
                    "Each build may appear only once; duplicates abort reconciliation"
                ))
            seen_builds.add(build)

            if entry.get('releaseType') not in VALID_RELEASE_TYPES:
                errors.append(ValidationError(
                    product_name, 'overrides',
                    f"{label} has invalid releaseType '{entry.get('releaseType')}'",
                    f"Valid types: {', '.join(VALID_RELEASE_TYPES)}"
                ))

            date_str = entry.get('availabilityDate')
            if date_str:
                try:
                    date_parser.parse(date_str)
                except (ValueError, OverflowError, TypeError):
                    errors.append(ValidationError(
                        product_name, 'overrides',
                        f"{label} has unparseable availabilityDate '{date_str}'"
                    ))

        return errors

    def validate_tracker(self, tracker_name: str) -> Tuple[int, List[ValidationError]]:
        """Validate all products in a tracker.

        Returns:
            Tuple of (product count, list of errors)
        """
        products, load_error = self.load_tracker_products(tracker_name)

        if load_error:
            return 0, [ValidationError(tracker_name, 'config', load_error)]

        all_errors = []
        for i, product in enumerate(products):
            all_errors.extend(self.validate_product(product, i))

        return len(products), all_errors

    def validate_all(self, tracker_filter: Optional[str] = None) -> Dict[str, Tuple[int, List[ValidationError]]]:
        """Validate all trackers (or a specific one).

        Returns:
            Dict mapping tracker name to (product count, errors list)
        """
        results = {}

        trackers = [tracker_filter] if tracker_filter else self.get_tracker_names()

        for tracker_name in trackers:
            results[tracker_name] = self.validate_tracker(tracker_name)

        return results

    def test_url(self, source_name: str, url: str, timeout: int = 10) -> ConnectionResult:
        """Test connectivity to a single page."""
        try:
            response = requests.head(url, timeout=timeout, allow_redirects=True, headers={
                'User-Agent': 'WinBuilds Source Validator/1.0'
            })
            response.raise_for_status()

            return ConnectionResult(source_name, url, True, f"{response.status_code} OK")

        except requests.exceptions.HTTPError as e:
            return ConnectionResult(source_name, url, False, f"HTTP {e.response.status_code}")
        except requests.exceptions.Timeout:
            return ConnectionResult(source_name, url, False, f"Timeout after {timeout}s")
        except requests.exceptions.RequestException as e:
            return ConnectionResult(source_name, url, False, f"Connection error: {type(e).__name__}")

    def test_tracker_connections(self, tracker_name: str, timeout: int = 10) -> List[ConnectionResult]:
        """Test connections for every page of every product in a tracker."""
        products, load_error = self.load_tracker_products(tracker_name)

        if load_error:
            return [ConnectionResult(tracker_name, '', False, load_error)]

        results = []
        for product in products:
            name = product.get('name', 'Unknown')
            urls = [product.get('release_info_url')] + list(product.get('update_history_urls') or [])
            for url in urls:
                if url:
                    results.append(self.test_url(name, url, timeout))

        return results


def print_validation_results(results: Dict[str, Tuple[int, List[ValidationError]]]) -> int:
    """Print validation results in a formatted way.

    Returns:
        Total error count
    """
    total_errors = 0

    print("\nValidating sources...\n")

    for tracker_name, (product_count, errors) in results.items():
        print(f"[{tracker_name}] {product_count} products")

        if errors:
            print("  Schema errors:")
            for error in errors:
                print(f"    {error.source_name}:")
                print(f"      {error}")
            total_errors += len(errors)
        else:
            print("  Schema valid")

        print()

    if total_errors > 0:
        print(f"Summary: {total_errors} error(s) found")
    else:
        print("Summary: All sources valid")

    return total_errors


def print_connection_results(tracker_name: str, results: List[ConnectionResult]) -> int:
    """Print connection test results.

    Returns:
        Number of failures
    """
    failures = sum(1 for r in results if not r.success)

    print(f"\n  Testing connections for {tracker_name}...")
    for result in results:
        print(f"  {result}")

    return failures

import json

import pytest
import yaml

from core.source_validator import SourceValidator

VALID_PRODUCT = {
    'key': 'windows11',
    'name': 'Windows 11',
    'slug': 'windows-11',
    'release_info_url': 'https://learn.example/windows11-release-information',
    'extraction': 'table',
    'update_history_urls': ['https://support.example/5006099'],
    'overrides': 'data/windows11.json',
}


@pytest.fixture
def repo(tmp_path):
    """A trackers/ directory with one tracker config, rooted at tmp_path."""
    tracker_dir = tmp_path / 'trackers' / 'windows_builds'
    tracker_dir.mkdir(parents=True)
    (tmp_path / 'data').mkdir()

    def _write(products, overrides=None):
        (tracker_dir / 'config.yaml').write_text(yaml.safe_dump({'products': products}), encoding='utf-8')
        if overrides is not None:
            (tmp_path / 'data' / 'windows11.json').write_text(json.dumps(overrides), encoding='utf-8')
        return SourceValidator(trackers_dir=str(tmp_path / 'trackers'))
    return _write


def override(build, **extra):
    entry = {'product': 'Windows 11', 'availabilityDate': '2022-09-27', 'releaseType': 'Out-of-band',
             'releaseId': '22H2', 'build': build}
    entry.update(extra)
    return entry


def test_valid_configuration(repo):
    validator = repo([VALID_PRODUCT], overrides=[override('22621.525')])

    count, errors = validator.validate_tracker('windows_builds')

    assert count == 1
    assert errors == []


def test_missing_override_file_is_not_an_error(repo):
    validator = repo([VALID_PRODUCT])

    assert validator.validate_tracker('windows_builds')[1] == []


def test_missing_required_field(repo):
    product = dict(VALID_PRODUCT)
    del product['release_info_url']
    validator = repo([product])

    errors = validator.validate_tracker('windows_builds')[1]

    assert [error.field for error in errors] == ['release_info_url']


def test_unknown_field_suggests_typo(repo):
    product = dict(VALID_PRODUCT, tableclass='cells-centered')
    validator = repo([product])

    errors = validator.validate_tracker('windows_builds')[1]

    assert len(errors) == 1
    assert errors[0].hint == "Did you mean 'table_class'?"


def test_invalid_extraction_and_key(repo):
    product = dict(VALID_PRODUCT, extraction='regex', key='windows95')
    validator = repo([product])

    fields = sorted(error.field for error in validator.validate_tracker('windows_builds')[1])

    assert fields == ['extraction', 'key']


def test_override_problems_are_reported(repo):
    overrides = [
        override('22621.525'),
        override('22621.525'),
        override('22621.600', releaseType='Hotfix'),
        override('22621.700', availabilityDate='not a date'),
        {'build': '22621.800'},
    ]
    validator = repo([VALID_PRODUCT], overrides=overrides)

    errors = validator.validate_tracker('windows_builds')[1]
    messages = ' '.join(error.message for error in errors)

    assert 'repeats build 22621.525' in messages
    assert "invalid releaseType 'Hotfix'" in messages
    assert "unparseable availabilityDate 'not a date'" in messages
    assert "is missing 'product'" in messages


def test_missing_tracker_config(tmp_path):
    (tmp_path / 'trackers').mkdir()
    validator = SourceValidator(trackers_dir=str(tmp_path / 'trackers'))

    count, errors = validator.validate_tracker('windows_builds')

    assert count == 0
    assert errors[0].field == 'config'


def test_shipped_configuration_is_valid():
    count, errors = SourceValidator().validate_tracker('windows_builds')

    assert count == 3
    assert [str(error) for error in errors] == []

from unittest.mock import patch

import pytest
import yaml

import winbuilds
from core.errors import FetchError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({
        'logging': {'file': str(tmp_path / 'logs' / 'winbuilds.log')},
        'export': {'dir': str(tmp_path / 'exports')},
        'trackers': {'windows_builds': {'enabled': True, 'request_delay_seconds': 0}},
    }), encoding='utf-8')
    return str(path)


def test_parse_arguments_defaults():
    args = winbuilds.parse_arguments([])

    assert args.product == 'all'
    assert args.build is None
    assert not args.latest


def test_parse_arguments_rejects_unknown_build():
    with pytest.raises(SystemExit):
        winbuilds.parse_arguments(['--build', '12345'])


def test_missing_config_returns_error(tmp_path):
    assert winbuilds.main(['--config', str(tmp_path / 'missing.yaml')]) == 1


@patch('winbuilds.WindowsBuildsTracker')
def test_main_passes_filters_to_tracker(mock_tracker_class, config_file, tmp_path):
    tracker = mock_tracker_class.return_value
    tracker.products = {'windows10': {}, 'windows11': {}, 'windowsserver': {}}

    exit_code = winbuilds.main([
        '--config', config_file, '--product', 'windows10', '--build', '19045',
        '--skip-preview', '--latest',
    ])

    assert exit_code == 0
    tracker.scrape.assert_called_once_with(
        ['windows10'], build_filter=19045, newest_only=True, include_preview=False
    )
    tracker.report.assert_called_once_with(str(tmp_path / 'exports'))


@patch('winbuilds.WindowsBuildsTracker')
def test_main_fails_visibly_on_fetch_error(mock_tracker_class, config_file):
    tracker = mock_tracker_class.return_value
    tracker.products = {'windows10': {}}
    tracker.scrape.side_effect = FetchError('https://learn.example', '503 Server Error')

    assert winbuilds.main(['--config', config_file]) == 1
    tracker.report.assert_not_called()


def test_validate_exports_flag(config_file, tmp_path):
    exports = tmp_path / 'exports'
    exports.mkdir()
    (exports / 'windows-10.json').write_text('[{"build": "19045.4412"}]', encoding='utf-8')

    assert winbuilds.main(['--config', config_file, '--validate-exports']) == 0

    (exports / 'windows-11.json').write_text('not json', encoding='utf-8')

    assert winbuilds.main(['--config', config_file, '--validate-exports']) == 1

from unittest.mock import MagicMock

import pytest
import requests

from core.errors import FetchError
from trackers.windows_builds.scraper import ReleaseInfoScraper


def test_table_extraction_reads_five_column_rows(release_table_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    rows = list(scraper.extract_rows(release_table_page, 'table'))

    assert [row.build_version_text for row in rows] == ['19045.4412', '19045.4355', '19045.4239']
    first = rows[0]
    assert first.servicing_option_text == 'General Availability Channel • LTSC'
    assert first.availability_date_text == '2024-05-14'
    assert first.kb_article_id == 'KB5037768'
    assert first.kb_url == 'https://support.microsoft.com/help/5037768'


def test_table_extraction_missing_href_gives_empty_url(release_table_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    rows = {row.build_version_text: row for row in scraper.extract_rows(release_table_page, 'table')}

    assert rows['19045.4239'].kb_url == ''
    assert rows['19045.4239'].kb_article_id == 'KB5037422'


def test_table_extraction_ignores_tables_without_marker(release_table_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    builds = [row.build_version_text for row in scraper.extract_rows(release_table_page, 'table')]

    assert '10240.1' not in builds


def test_table_extraction_honours_custom_marker(release_table_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    rows = list(scraper.extract_rows(release_table_page, 'table', table_class='other-table'))

    assert [row.build_version_text for row in rows] == ['10240.1']


def test_rows_extraction_reads_four_cell_rows(server_rows_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    rows = list(scraper.extract_rows(server_rows_page, 'rows'))

    assert [row.build_version_text for row in rows] == ['20348.2461', '17763.5820', '19042.2364']
    assert rows[0].servicing_option_text == 'LTSC'
    assert rows[0].kb_article_id == 'KB5037782'


def test_extract_rows_is_lazy(server_rows_page):
    scraper = ReleaseInfoScraper(session=MagicMock())

    rows = scraper.extract_rows(server_rows_page, 'rows')

    assert next(rows).build_version_text == '20348.2461'


def test_unknown_strategy_raises():
    scraper = ReleaseInfoScraper(session=MagicMock())

    with pytest.raises(ValueError):
        scraper.extract_rows('<html></html>', 'regex')


def test_fetch_page_returns_text():
    session = MagicMock()
    session.get.return_value.text = '<html>ok</html>'
    scraper = ReleaseInfoScraper(session=session, timeout=5, user_agent='test-agent')

    assert scraper.fetch_page('https://example.com/page') == '<html>ok</html>'
    session.get.assert_called_once_with(
        'https://example.com/page', headers={'User-Agent': 'test-agent'}, timeout=5
    )


def test_fetch_page_http_error_is_fatal():
    session = MagicMock()
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError('503 Server Error')
    scraper = ReleaseInfoScraper(session=session)

    with pytest.raises(FetchError) as excinfo:
        scraper.fetch_page('https://example.com/page')

    assert excinfo.value.url == 'https://example.com/page'
    assert session.get.call_count == 1


def test_fetch_page_connection_error_is_fatal():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError('refused')
    scraper = ReleaseInfoScraper(session=session)

    with pytest.raises(FetchError):
        scraper.fetch_page('https://example.com/page')

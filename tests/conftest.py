import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from trackers.windows_builds.models import ClassificationContext, RawRow
from trackers.windows_builds.update_history import UpdateHistoryIndex


RELEASE_TABLE_PAGE = """
<html><body>
<h2>Windows 10 release history</h2>
<table class="cells-centered">
  <tr><th>Servicing option</th><th>Update type</th><th>Availability date</th><th>Build</th><th>KB article</th></tr>
  <tr><td>General Availability Channel &bull; LTSC</td><td>2024-05 B</td><td>2024-05-14</td><td>19045.4412</td>
      <td><a href="https://support.microsoft.com/help/5037768">KB5037768</a></td></tr>
  <tr><td>General Availability Channel</td><td>2024-04 D</td><td>2024-04-23</td><td>19045.4355</td>
      <td><a href="https://support.microsoft.com/help/5036979">KB5036979</a></td></tr>
  <tr><td>General Availability Channel</td><td>2024-04 B</td><td>2024-04-09</td><td>19045.4291</td></tr>
  <tr><td>General Availability Channel</td><td>OOB</td><td>2024-03-21</td><td>19045.4239</td>
      <td><a>KB5037422</a></td></tr>
  <tr><td>General Availability Channel</td><td>2024-03 B</td><td>2024-03-12</td><td>19045.4170</td>
      <td>N/A</td></tr>
</table>
<table class="other-table">
  <tr><th>A</th><th>B</th><th>C</th><th>D</th><th>E</th></tr>
  <tr><td>x</td><td>x</td><td>2020-01-01</td><td>10240.1</td><td><a href="/help/1">KB1</a></td></tr>
</table>
</body></html>
"""

SERVER_ROWS_PAGE = """
<html><body>
<table>
  <tr><th>Servicing option</th><th>Availability date</th><th>Build</th><th>KB article</th></tr>
  <tr><td>LTSC</td><td>2024-05-14</td><td>20348.2461</td>
      <td><a href="https://support.microsoft.com/help/5037782">KB5037782</a></td></tr>
  <tr><td>LTSC</td><td>2024-05-14</td><td>17763.5820</td>
      <td><a href="https://support.microsoft.com/help/5037765">KB5037765</a></td></tr>
  <tr><td>Semi-Annual Channel</td><td>2022-12-13</td><td>19042.2364</td>
      <td><a href="https://support.microsoft.com/help/5021233">KB5021233</a></td></tr>
  <tr><td>LTSC</td><td>2024-05-14</td><td>14393.6981</td><td>no link</td></tr>
</table>
</body></html>
"""

HISTORY_PAGE = """
<html><body><nav>
  <a href="/en-us/help/5037768">May 14, 2024&#x2014;KB5037768 (OS Build 19045.4412)</a>
  <a href="/en-us/topic/april-23-2024-kb5036979-os-build-19045-4355-preview">April 23, 2024&#x2014;KB5036979 (OS Build 19045.4355) Preview</a>
  <a href="/en-us/help/5037422">March 21, 2024&#x2014;KB5037422 (OS Build 19045.4239) Out-of-band</a>
</nav></body></html>
"""


@pytest.fixture
def release_table_page():
    return RELEASE_TABLE_PAGE


@pytest.fixture
def server_rows_page():
    return SERVER_ROWS_PAGE


@pytest.fixture
def history_page():
    return HISTORY_PAGE


@pytest.fixture
def history_index():
    """Index built from a single update history page."""
    return UpdateHistoryIndex.from_pages([('https://support.microsoft.com/history', HISTORY_PAGE)])


@pytest.fixture
def empty_index():
    return UpdateHistoryIndex([])


@pytest.fixture
def make_context(history_index):
    """Factory for classification contexts with Windows 10 defaults."""
    def _make(**overrides):
        params = {
            'product_key': 'windows10',
            'product_name': 'Windows 10',
            'server_family': False,
            'history_index': history_index,
            'build_filter': None,
            'include_preview': True,
            'include_out_of_band': True,
        }
        params.update(overrides)
        return ClassificationContext(**params)
    return _make


def build_row(build, kb='KB5034123', servicing='GA', date='2024-02-13', url=''):
    """Helper to build a raw row with sensible defaults."""
    return RawRow(
        servicing_option_text=servicing,
        availability_date_text=date,
        build_version_text=build,
        kb_url=url,
        kb_article_id=kb,
    )


@pytest.fixture
def make_row():
    return build_row

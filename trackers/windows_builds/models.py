"""
Record types passed between the extraction, classification and export stages.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

RELEASE_STANDARD = 'Standard'
RELEASE_PREVIEW = 'Preview'
RELEASE_OUT_OF_BAND = 'Out-of-band'
RELEASE_UNKNOWN = 'Unknown'

BUILD_PATTERN = re.compile(r'(\d+)\.(\d+)', re.ASCII)

# JSON key -> attribute name, in export order
RECORD_FIELDS = (
    ('product', 'product'),
    ('servicingOptions', 'servicing_options'),
    ('availabilityDate', 'availability_date'),
    ('releaseType', 'release_type'),
    ('releaseId', 'release_id'),
    ('build', 'build'),
    ('kbArticle', 'kb_article'),
    ('kbUrl', 'kb_url'),
)


@dataclass(frozen=True)
class RawRow:
    servicing_option_text: str
    availability_date_text: str
    build_version_text: str
    kb_url: str
    kb_article_id: str


@dataclass(frozen=True)
class BuildRecord:
    product: str
    servicing_options: Tuple[str, ...]
    availability_date: str
    release_type: str
    release_id: str
    build: str
    kb_article: str = ''
    kb_url: str = ''

    @property
    def build_key(self):
        """(major, minor) as integers, used for numeric ordering."""
        return parse_build(self.build)

    def to_dict(self):
        data = {}
        for key, attr in RECORD_FIELDS:
            value = getattr(self, attr)
            data[key] = list(value) if attr == 'servicing_options' else value
        return data

    @classmethod
    def from_dict(cls, data):
        """
        Build a record from its camelCase JSON form.

        The 'build' value is trimmed; every other missing key takes its default.

        Args:
            data (dict): One object from an export or override file

        Returns:
            BuildRecord: The record

        Raises:
            KeyError: If the 'build' key is missing
        """
        options = data.get('servicingOptions') or ()
        if isinstance(options, str):
            options = (options,)
        return cls(
            product=data.get('product') or '',
            servicing_options=tuple(options),
            availability_date=data.get('availabilityDate') or '',
            release_type=data.get('releaseType') or RELEASE_UNKNOWN,
            release_id=data.get('releaseId') or '',
            build=data['build'].strip(),
            kb_article=data.get('kbArticle') or '',
            kb_url=data.get('kbUrl') or '',
        )


@dataclass(frozen=True)
class ClassificationContext:
    """Read-only parameters shared by every classification worker."""
    product_key: str
    product_name: str
    server_family: bool
    history_index: object
    build_filter: Optional[int] = None
    include_preview: bool = False
    include_out_of_band: bool = False
    delimiter: str = '•'


def parse_build(build):
    """
    Split a 'major.minor' build string into integers.

    Args:
        build (str): Build string such as '19045.4046'

    Returns:
        tuple: (major, minor)

    Raises:
        ValueError: If the string is not two dot-separated integers
    """
    match = BUILD_PATTERN.fullmatch((build or '').strip())
    if not match:
        raise ValueError(f"Malformed build version: '{build}'")
    return int(match.group(1)), int(match.group(2))

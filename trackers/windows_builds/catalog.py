"""
Fixed build tables for the Windows release-information pages.

Every supported major build maps to exactly one release family. Server
products are refined to a named server release by major build as well.
"""

from types import MappingProxyType

PRODUCT_WINDOWS_10 = 'windows10'
PRODUCT_WINDOWS_11 = 'windows11'
PRODUCT_WINDOWS_SERVER = 'windowsserver'

PRODUCT_KEYS = (PRODUCT_WINDOWS_10, PRODUCT_WINDOWS_11, PRODUCT_WINDOWS_SERVER)

RELEASE_IDS = MappingProxyType({
    # Windows 10
    10240: '1507',
    10586: '1511',
    14393: '1607',
    15063: '1703',
    16299: '1709',
    17134: '1803',
    17763: '1809',
    18362: '1903',
    18363: '1909',
    19041: '2004',
    19042: '20H2',
    19043: '21H1',
    19044: '21H2',
    19045: '22H2',
    # Windows Server 2022
    20348: '21H2',
    # Windows 11
    22000: '21H2',
    22621: '22H2',
    22631: '23H2',
    26100: '24H2',
    26200: '25H2',
})

SERVER_RELEASES = MappingProxyType({
    14393: 'Windows Server 2016',
    17763: 'Windows Server 2019',
    20348: 'Windows Server 2022',
    26100: 'Windows Server 2025',
})

# Windows 10 Mobile builds share the release pages but are never exported
MOBILE_ONLY_MAJORS = frozenset({15254})

KNOWN_MAJORS = tuple(sorted(RELEASE_IDS))


def release_id_for(major):
    """Release family for a major build, or None when the major is unmapped."""
    return RELEASE_IDS.get(major)


def server_release_for(major):
    """Named server release for a major build, or None."""
    return SERVER_RELEASES.get(major)

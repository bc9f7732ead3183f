import pytest


BASE_TAGS = {
    "Artist": "Jane Doe",
    "Copyright": "© 2026 Jane Doe",
    "Creator": "Jane Doe",
    "Rights": "© 2026 Jane Doe",
    "Credit": "Jane Doe Studio",
    "Description": "A beautiful landscape photograph",
    "ImageDescription": "A beautiful landscape photograph",
    "Caption-Abstract": "A beautiful landscape photograph",
    "By-line": "Jane Doe",
    "CopyrightNotice": "© 2026 Jane Doe",
    "Subject": ["landscape", "nature", "photography"],
    "Keywords": ["landscape", "nature", "photography"],
    "CreatorTool": "ContextEmbed v2.0",
    "Title": "Sunset Over Mountains",
    "ObjectName": "Sunset Over Mountains",
}

IPTC_KEYS = [
    "By-line", "IPTC:By-line",
    "CopyrightNotice", "IPTC:CopyrightNotice",
    "Caption-Abstract", "IPTC:Caption-Abstract",
    "IPTC:Credit",
    "Keywords", "IPTC:Keywords",
    "IPTC:Source",
    "ObjectName", "IPTC:ObjectName",
]


@pytest.fixture
def make_tags():
    """Build a fully authored tag dictionary; an override of None removes the key."""
    def _make(overrides=None):
        tags = dict(BASE_TAGS)
        for key, value in (overrides or {}).items():
            if value is None:
                tags.pop(key, None)
            else:
                tags[key] = value
        return tags
    return _make


@pytest.fixture
def iptc_keys():
    return list(IPTC_KEYS)

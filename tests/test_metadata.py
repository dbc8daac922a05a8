"""Tests for typed, versioned nonprofit metadata."""

import json

from findyouth.models.metadata import (
    METADATA_VERSION,
    NonprofitMetadata,
    dump_user_metadata,
    parse_user_metadata,
)


class TestParseUserMetadata:
    """Tests for parse_user_metadata."""

    def test_none_is_empty(self):
        metadata = parse_user_metadata(None)
        assert metadata.is_empty()
        assert metadata.version == METADATA_VERSION

    def test_garbage_string_is_empty(self):
        """Unparseable JSON yields an empty record, not an error."""
        assert parse_user_metadata("{not json").is_empty()

    def test_non_object_json_is_empty(self):
        assert parse_user_metadata("[1, 2, 3]").is_empty()

    def test_invalid_field_types_are_empty(self):
        assert parse_user_metadata({"version": 2, "causes": "Youth"}).is_empty()

    def test_migrates_v1_blob(self):
        """Legacy blob with camelCase nonprofit_data is flattened."""
        raw = {
            "organization_name": "Vancouver Youth Coalition",
            "nonprofit_data": {
                "phone": "6045551234",
                "socialMedia": "https://instagram.com/vyc",
                "profileImageUrl": "https://cdn.vyc.org/logo.png",
                "bannerImageUrl": "",
                "causes": ["Youth"],
            },
        }

        metadata = parse_user_metadata(raw)

        assert metadata.version == METADATA_VERSION
        assert metadata.organization_name == "Vancouver Youth Coalition"
        assert metadata.phone == "6045551234"
        assert metadata.social_media == "https://instagram.com/vyc"
        assert metadata.profile_image_url == "https://cdn.vyc.org/logo.png"
        assert metadata.banner_image_url is None
        assert metadata.causes == ["Youth"]

    def test_v1_without_nonprofit_data(self):
        metadata = parse_user_metadata({"organization_name": "Org"})
        assert metadata.organization_name == "Org"
        assert not metadata.is_empty()

    def test_parses_current_version_json(self):
        raw = json.dumps({"version": 2, "organization_name": "Org", "location": "Burnaby"})
        metadata = parse_user_metadata(raw)
        assert metadata.location == "Burnaby"


class TestDumpUserMetadata:
    """Tests for dump_user_metadata."""

    def test_always_current_version(self):
        stored = json.loads(dump_user_metadata(NonprofitMetadata(version=1, organization_name="Org")))
        assert stored["version"] == METADATA_VERSION
        assert stored["organization_name"] == "Org"

"""Tests for ConceptRepository over the in-memory store."""

import json

import pytest

from concept_poster.concepts import ConceptConfig, TikTokTokens, video_from_item
from concept_poster.constants import Platform
from concept_poster.storage import JSON_MIME, StoreError, StoreItem

INSTAGRAM_ACCOUNT_ID = "17841400000000001"


class TestConceptConfigModel:
    """ConceptConfig parsing and serialization."""

    def test_aliases_and_enabled_platforms(self, concept_config):
        concept_config["platforms"]["TikTok"] = False
        concept_config["platforms"]["Snapchat"] = True

        config = ConceptConfig.model_validate(concept_config)

        assert config.name == "Cats"
        assert config.post_details.hashtags == "#cat #daily"
        assert config.enabled_platforms() == [Platform.YOUTUBE, Platform.INSTAGRAM]

    def test_has_credentials(self, concept_config):
        config = ConceptConfig.model_validate(concept_config)
        assert all(config.has_credentials(p) for p in Platform)

        empty = ConceptConfig()
        assert not any(empty.has_credentials(p) for p in Platform)

    def test_unknown_keys_survive_round_trip(self, concept_config):
        concept_config["customField"] = {"keep": True}
        config = ConceptConfig.model_validate(concept_config)

        data = config.to_json_dict()

        assert data["customField"] == {"keep": True}
        assert data["postingTimes"] == ["21:00", "09:00"]
        assert data["apiKeys"]["tiktok"]["refresh_token"] == "tt-refresh"


class TestVideoFromItem:
    """Tests for video_from_item function."""

    def test_reads_override_and_metadata(self):
        item = StoreItem(
            id="v1",
            name="clip.mp4",
            mime_type="video/mp4",
            properties={"postDetailsOverride": json.dumps({"title": "Custom"})},
            video_metadata={"width": 1080, "height": "1920", "durationMillis": 15500},
        )

        video = video_from_item(item)

        assert video.post_details_override == {"title": "Custom"}
        assert video.height == 1920
        assert video.duration_seconds == 15.5

    def test_malformed_override_is_ignored(self):
        item = StoreItem(
            id="v1",
            name="clip.mp4",
            mime_type="video/mp4",
            properties={"postDetailsOverride": "{not json"},
        )
        assert video_from_item(item).post_details_override is None


class TestConceptRepository:
    """Tests for ConceptRepository."""

    @pytest.mark.asyncio
    async def test_list_concepts(self, seeded_concept):
        concepts = await seeded_concept.repository.list_concepts()
        assert [c.name for c in concepts] == ["cats"]

    @pytest.mark.asyncio
    async def test_list_concepts_without_root(self, seeded_concept):
        seeded_concept.repository.root_folder_name = "missing"
        assert await seeded_concept.repository.list_concepts() == []

    @pytest.mark.asyncio
    async def test_load_config(self, seeded_concept):
        config = await seeded_concept.repository.load_config(seeded_concept.concept.id)
        assert config is not None
        assert config.api_keys.instagram == INSTAGRAM_ACCOUNT_ID

    @pytest.mark.asyncio
    async def test_load_config_missing(self, seed_store):
        seeded = await seed_store(None)
        assert await seeded.repository.load_config(seeded.concept.id) is None

    @pytest.mark.asyncio
    async def test_load_config_not_an_object(self, seed_store):
        seeded = await seed_store(None)
        await seeded.store.create_file("config.json", seeded.concept.id, b"[1, 2]", JSON_MIME)

        with pytest.raises(StoreError):
            await seeded.repository.load_config(seeded.concept.id)

    @pytest.mark.asyncio
    async def test_update_tiktok_tokens_keeps_other_keys(self, seeded_concept):
        repository = seeded_concept.repository
        concept_id = seeded_concept.concept.id

        await repository.update_tiktok_tokens(
            concept_id,
            TikTokTokens(access_token="new-access", refresh_token="new-refresh", expires_in=86400),
        )

        raw = await repository.load_raw_config(concept_id)
        assert raw["apiKeys"]["tiktok"]["access_token"] == "new-access"
        assert raw["apiKeys"]["tiktok"]["refresh_token"] == "new-refresh"
        assert raw["apiKeys"]["youtube_refresh_token"] == "yt-refresh"
        assert raw["postDetails"]["title"] == "Daily cat"

    @pytest.mark.asyncio
    async def test_save_config_creates_missing_file(self, seed_store):
        seeded = await seed_store(None)

        await seeded.repository.save_config(seeded.concept.id, ConceptConfig(name="Dogs"))

        config = await seeded.repository.load_config(seeded.concept.id)
        assert config.name == "Dogs"

    @pytest.mark.asyncio
    async def test_video_folders_and_listing(self, seeded_concept):
        repository = seeded_concept.repository

        queue, posted = await repository.find_video_folders(seeded_concept.concept.id)
        videos = await repository.list_videos(queue.id)

        assert posted.id == seeded_concept.posted.id
        assert [v.name for v in videos] == ["first.mp4", "second.mp4"]
        assert videos[1].post_details_override == {"title": "Second cat"}

    @pytest.mark.asyncio
    async def test_find_and_move_video(self, seeded_concept):
        repository = seeded_concept.repository
        first = seeded_concept.queued_videos[0]

        assert (await repository.find_video(seeded_concept.queue.id, first.id)).name == "first.mp4"
        assert await repository.find_video(seeded_concept.posted.id, first.id) is None

        await repository.move_video(first.id, seeded_concept.posted.id)

        assert await repository.find_video(seeded_concept.posted.id, first.id) is not None
        assert await repository.download_video(first.id) == b"first-video-bytes"

    @pytest.mark.asyncio
    async def test_load_instagram_accounts(self, seeded_concept):
        accounts = await seeded_concept.repository.load_instagram_accounts()
        assert [(a.id, a.page_access_token) for a in accounts] == [(INSTAGRAM_ACCOUNT_ID, "ig-page-token")]

# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
from media_catalog.core.builder import ItemBuilder
from media_catalog.core.models import MovieEntry, SeriesEntry, entry_to_dict


@pytest.fixture
def fixed_builder():
    return ItemBuilder(clock=lambda: 1700000000.5)

def test_id_is_creation_time_in_milliseconds(fixed_builder):
    entry = fixed_builder.build({"title": "A"}, [])
    assert entry.id == 1700000000500

def test_movie_uses_video_and_image(fixed_builder, make_asset):
    assets = [
        make_asset("video", "/uploads/movies/v.mp4"),
        make_asset("image", "/uploads/images/p.jpg"),
    ]

    entry = fixed_builder.build({"title": "Inception", "category": "Sci-Fi", "type": "movie"}, assets)

    assert isinstance(entry, MovieEntry)
    assert entry.title == "Inception"
    assert entry.category == "Sci-Fi"
    assert entry.video_url == "/uploads/movies/v.mp4"
    assert entry.image == "/uploads/images/p.jpg"

def test_missing_type_defaults_to_movie(fixed_builder, make_asset):
    entry = fixed_builder.build({"title": "A"}, [make_asset("video", "/uploads/movies/v.mp4")])

    assert entry.type == "movie"
    assert "episodes" not in entry_to_dict(entry)

def test_entry_without_assets_is_valid(fixed_builder):
    entry = fixed_builder.build({"title": None, "category": None}, [])

    assert entry.video_url == ""
    assert entry.image == ""
    assert entry.title is None

def test_first_video_wins(fixed_builder, make_asset):
    entry = fixed_builder.build({}, [
        make_asset("video", "/uploads/movies/first.mp4"),
        make_asset("video", "/uploads/movies/second.mp4"),
    ])
    assert entry.video_url == "/uploads/movies/first.mp4"

def test_series_episodes_sorted_by_number(fixed_builder, make_asset):
    assets = [
        make_asset("episode_3", "/uploads/movies/c.mp4"),
        make_asset("episode_1", "/uploads/movies/a.mp4"),
        make_asset("episode_2", "/uploads/movies/b.mp4"),
    ]

    entry = fixed_builder.build({"title": "Show", "type": "series"}, assets)

    assert isinstance(entry, SeriesEntry)
    assert [ep.number for ep in entry.episodes] == [1, 2, 3]
    assert [ep.url for ep in entry.episodes] == [
        "/uploads/movies/a.mp4",
        "/uploads/movies/b.mp4",
        "/uploads/movies/c.mp4",
    ]
    assert entry.episodes[0].title == "Episode 1"

def test_series_episode_numbers_need_not_be_contiguous(fixed_builder, make_asset):
    entry = fixed_builder.build({"type": "series"}, [
        make_asset("episode_10", "/uploads/movies/j.mp4"),
        make_asset("episode_2", "/uploads/movies/b.mp4"),
    ])
    assert [ep.number for ep in entry.episodes] == [2, 10]

def test_duplicate_episode_numbers_are_kept_in_upload_order(fixed_builder, make_asset):
    entry = fixed_builder.build({"type": "series"}, [
        make_asset("episode_2", "/uploads/movies/second-a.mp4"),
        make_asset("episode_1", "/uploads/movies/first.mp4"),
        make_asset("episode_2", "/uploads/movies/second-b.mp4"),
    ])

    assert [ep.url for ep in entry.episodes] == [
        "/uploads/movies/first.mp4",
        "/uploads/movies/second-a.mp4",
        "/uploads/movies/second-b.mp4",
    ]

def test_series_never_has_video_url(fixed_builder, make_asset):
    entry = fixed_builder.build({"type": "series"}, [
        make_asset("video", "/uploads/movies/v.mp4"),
        make_asset("episode_1", "/uploads/movies/a.mp4"),
        make_asset("image", "/uploads/images/p.jpg"),
    ])

    data = entry_to_dict(entry)
    assert "videoUrl" not in data
    assert data["image"] == "/uploads/images/p.jpg"
    assert len(data["episodes"]) == 1

def test_movie_ignores_episode_assets(fixed_builder, make_asset):
    entry = fixed_builder.build({"type": "movie"}, [make_asset("episode_1", "/uploads/movies/a.mp4")])

    data = entry_to_dict(entry)
    assert data["videoUrl"] == ""
    assert "episodes" not in data

def test_episode_title_template(make_asset):
    builder = ItemBuilder(episode_title_template="الحلقة {number}")
    entry = builder.build({"type": "series"}, [make_asset("episode_4", "/uploads/movies/d.mp4")])
    assert entry.episodes[0].title == "الحلقة 4"

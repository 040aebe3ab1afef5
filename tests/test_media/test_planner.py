from sportshub.db.models import CoachingCenter, Reel, StreamHighlight
from sportshub.services.media.planner import MediaReclamationPlanner, PlanItem, PlanItemKind
from tests.fixtures.media import media_item, url

SINGLE = PlanItemKind.SINGLE_OBJECT
PREFIX = PlanItemKind.PREFIX


def test_highlight_plan_covers_every_slot_in_order(planner):
    h = StreamHighlight(
        id="h1",
        title="Final",
        video_url=url("highlights/h1/h1.mp4"),
        thumbnail_url=url("highlights/h1/thumbnail.jpg"),
        preview_url=None,
        master_m3u8_url=url("highlights/h1/hls/master.m3u8"),
        hls_urls={
            "360p": url("highlights/h1/hls/360p/playlist.m3u8"),
            "720p": url("highlights/h1/hls/720p/playlist.m3u8"),
        },
    )

    plan = planner.plan(h.media_slots())

    assert plan.record_type == "highlight"
    assert plan.parent_id == "h1"
    assert list(plan) == [
        PlanItem(SINGLE, "highlights/h1/h1.mp4"),
        PlanItem(SINGLE, "highlights/h1/thumbnail.jpg"),
        PlanItem(SINGLE, "highlights/h1/hls/master.m3u8"),
        PlanItem(PREFIX, "highlights/h1/hls/360p/"),
        PlanItem(PREFIX, "highlights/h1/hls/720p/"),
        PlanItem(PREFIX, "highlights/h1/"),
    ]


def test_record_without_media_still_gets_catch_all(planner):
    plan = planner.plan(Reel(id="r1", title="x").media_slots())
    assert list(plan) == [PlanItem(PREFIX, "reels/r1/")]


def test_playlists_sharing_a_folder_collapse(planner):
    r = Reel(
        id="r1",
        title="x",
        hls_urls={
            "360p": url("reels/r1/hls/360p.m3u8"),
            "720p": url("reels/r1/hls/720p.m3u8"),
        },
    )
    plan = planner.plan(r.media_slots())
    assert [i.locator for i in plan.prefixes] == ["reels/r1/hls/", "reels/r1/"]


def test_undecodable_urls_are_skipped(planner):
    r = Reel(id="r1", title="x", original_path="https://youtube.example/watch?v=1", thumbnail_path="")
    plan = planner.plan(r.media_slots())
    assert plan.singles == []


def test_playlist_at_top_level_is_not_swept_as_folder(planner):
    r = Reel(id="r1", title="x", hls_urls={"360p": url("reels/playlist.m3u8")})
    plan = planner.plan(r.media_slots())
    assert PlanItem(SINGLE, "reels/playlist.m3u8") in plan.singles
    assert PlanItem(PREFIX, "reels/") not in plan.prefixes


def test_every_naming_convention_gets_a_catch_all(codec):
    planner = MediaReclamationPlanner(codec, folder_name_templates=["{id}", "playasport-{id}"])
    plan = planner.plan(Reel(id="r1", title="x").media_slots())
    assert [i.locator for i in plan.prefixes] == ["reels/r1/", "reels/playasport-r1/"]


def test_coaching_centre_nested_media_become_single_objects(planner):
    c = CoachingCenter(
        id="c1",
        name="Academy",
        logo=url("coaching-centres/c1/logo.png"),
        documents=[media_item("d1", "coaching-centres/c1/documents/d1.pdf"), media_item("d2", None)],
        sport_details=[
            {
                "sport_id": "s1",
                "images": [media_item("i1", "coaching-centres/c1/sports/s1/images/i1.jpg")],
                "videos": [
                    media_item(
                        "v1",
                        "coaching-centres/c1/sports/s1/videos/v1.mp4",
                        thumbnail_key="coaching-centres/c1/sports/s1/videos/v1-thumbnail.jpg",
                    )
                ],
            }
        ],
    )

    plan = planner.plan(c.media_slots())

    assert [i.locator for i in plan.singles] == [
        "coaching-centres/c1/logo.png",
        "coaching-centres/c1/documents/d1.pdf",
        "coaching-centres/c1/sports/s1/images/i1.jpg",
        "coaching-centres/c1/sports/s1/videos/v1.mp4",
        "coaching-centres/c1/sports/s1/videos/v1-thumbnail.jpg",
    ]
    assert [i.locator for i in plan.prefixes] == ["coaching-centres/c1/"]

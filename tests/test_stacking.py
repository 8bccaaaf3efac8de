from datetime import datetime, timezone

import pytest

from immichgo.immich.media import DEFAULT_SUPPORTED_MEDIA
from immichgo.metadata.namesdate import take_time_from_name as t
from immichgo.stacking import Stack, StackBuilder, StackType

CASES = [
    (
        "no stack JPG+DNG",
        [
            ("1", "IMG_1234.JPG", t("2023-10-01 10.15.00")),
            ("2", "IMG_1234.DNG", t("2023-10-01 10.45.00")),
        ],
        [],
    ),
    (
        "issue #67",
        [
            ("1", "IMG_5580.HEIC", t("2023-10-01 10.15.00")),
            ("2", "IMG_5580.MP4", t("2023-10-01 10.15.00")),
        ],
        [],
    ),
    (
        "stack JPG+DNG",
        [
            ("1", "IMG_1234.JPG", t("2023-10-01 10.15.00")),
            ("2", "IMG_1234.DNG", t("2023-10-01 10.15.00")),
        ],
        [
            Stack(
                cover_id="1",
                ids=["2"],
                date=t("2023-10-01 10.15.00"),
                names=["IMG_1234.JPG", "IMG_1234.DNG"],
                stack_type=StackType.RAW_JPG,
            )
        ],
    ),
    (
        "stack BURST",
        [
            ("1", "IMG_20231014_183244.jpg", t("IMG_20231014_183244.jpg")),
            ("2", "IMG_20231014_183246_BURST001_COVER.jpg", t("IMG_20231014_183246_BURST001_COVER.jpg")),
            ("3", "IMG_20231014_183246_BURST002.jpg", t("IMG_20231014_183246_BURST002.jpg")),
            ("4", "IMG_20231014_183246_BURST003.jpg", t("IMG_20231014_183246_BURST003.jpg")),
        ],
        [
            Stack(
                cover_id="2",
                ids=["3", "4"],
                date=t("IMG_20231014_183246_BURST001_COVER.jpg"),
                names=[
                    "IMG_20231014_183246_BURST001_COVER.jpg",
                    "IMG_20231014_183246_BURST002.jpg",
                    "IMG_20231014_183246_BURST003.jpg",
                ],
                stack_type=StackType.BURST,
            )
        ],
    ),
    (
        "stack JPG+CR3",
        [
            ("1", "3H2A0018.CR3", t("2023-10-01 10.15.00")),
            ("2", "3H2A0018.JPG", t("2023-10-01 10.15.00")),
            ("3", "3H2A0019.CR3", t("2023-10-01 10.15.00")),
            ("4", "3H2A0019.JPG", t("2023-10-01 10.15.00")),
        ],
        [
            Stack(
                cover_id="2",
                ids=["1"],
                date=t("2023-10-01 10.15.00"),
                names=["3H2A0018.CR3", "3H2A0018.JPG"],
                stack_type=StackType.RAW_JPG,
            ),
            Stack(
                cover_id="4",
                ids=["3"],
                date=t("2023-10-01 10.15.00"),
                names=["3H2A0019.CR3", "3H2A0019.JPG"],
                stack_type=StackType.RAW_JPG,
            ),
        ],
    ),
    (
        "issue #12 example1",
        [
            ("1", "PXL_20231026_210642603.dng", t("PXL_20231026_210642603.dng")),
            ("2", "PXL_20231026_210642603.jpg", t("PXL_20231026_210642603.jpg")),
        ],
        [
            Stack(
                cover_id="2",
                ids=["1"],
                date=t("PXL_20231026_210642603.dng"),
                names=["PXL_20231026_210642603.dng", "PXL_20231026_210642603.jpg"],
                stack_type=StackType.RAW_JPG,
            )
        ],
    ),
    (
        "issue #12 example 2",
        [
            ("3", "20231026_205755225.dng", t("20231026_205755225.dng")),
            ("4", "20231026_205755225.MP.jpg", t("20231026_205755225.MP.jpg")),
        ],
        [
            Stack(
                cover_id="4",
                ids=["3"],
                date=t("20231026_205755225.MP.jpg"),
                names=["20231026_205755225.dng", "20231026_205755225.MP.jpg"],
                stack_type=StackType.RAW_JPG,
            )
        ],
    ),
    (
        "issue #12 example 3",
        [
            ("3", "20231026_205755225.dng", t("20231026_205755225.dng")),
            ("4", "20231026_205755225.MP.jpg", t("20231026_205755225.MP.jpg")),
            ("5", "PXL_20231207_032111247.RAW-02.ORIGINAL.dng", t("PXL_20231207_032111247.RAW-02.ORIGINAL.dng")),
            ("6", "PXL_20231207_032111247.RAW-01.COVER.jpg", t("PXL_20231207_032111247.RAW-01.COVER.jpg")),
            ("7", "PXL_20231207_032108788.RAW-02.ORIGINAL.dng", t("PXL_20231207_032108788.RAW-02.ORIGINAL.dng")),
            ("8", "PXL_20231207_032108788.RAW-01.MP.COVER.jpg", t("PXL_20231207_032108788.RAW-01.MP.COVER.jpg")),
        ],
        [
            Stack(
                cover_id="4",
                ids=["3"],
                date=t("20231026_205755225.dng"),
                names=["20231026_205755225.dng", "20231026_205755225.MP.jpg"],
                stack_type=StackType.RAW_JPG,
            ),
            Stack(
                cover_id="6",
                ids=["5"],
                date=t("PXL_20231207_032111247.RAW-02.ORIGINAL.dng"),
                names=["PXL_20231207_032111247.RAW-02.ORIGINAL.dng", "PXL_20231207_032111247.RAW-01.COVER.jpg"],
                stack_type=StackType.BURST,
            ),
            Stack(
                cover_id="8",
                ids=["7"],
                date=t("PXL_20231207_032108788.RAW-02.ORIGINAL.dng"),
                names=["PXL_20231207_032108788.RAW-02.ORIGINAL.dng", "PXL_20231207_032108788.RAW-01.MP.COVER.jpg"],
                stack_type=StackType.BURST,
            ),
        ],
    ),
    (
        "stack: Samsung #99",
        [
            ("1", "20231207_101605_001.jpg", t("20231207_101605_001.jpg")),
            ("2", "20231207_101605_002.jpg", t("20231207_101605_002.jpg")),
            ("3", "20231207_101605_003.jpg", t("20231207_101605_003.jpg")),
            ("4", "20231207_101605_004.jpg", t("20231207_101605_004.jpg")),
        ],
        [
            Stack(
                cover_id="1",
                ids=["2", "3", "4"],
                date=t("20231207_101605_001.jpg"),
                names=[
                    "20231207_101605_001.jpg",
                    "20231207_101605_002.jpg",
                    "20231207_101605_003.jpg",
                    "20231207_101605_004.jpg",
                ],
                stack_type=StackType.BURST,
            )
        ],
    ),
    (
        " stack: Huawei Nexus 6P #100 ",
        [
            ("1", "00001IMG_00001_BURST20171111030039.jpg", t("00001IMG_00001_BURST20171111030039.jpg")),
            ("2", "00002IMG_00002_BURST20171111030039.jpg", t("00002IMG_00002_BURST20171111030039.jpg")),
            ("3", "00003IMG_00003_BURST20171111030039_COVER.jpg", t("00003IMG_00003_BURST20171111030039_COVER.jpg")),
        ],
        [
            Stack(
                cover_id="1",
                ids=["2", "3"],
                date=t("00001IMG_00001_BURST20171111030039.jpg"),
                names=[
                    "00001IMG_00001_BURST20171111030039.jpg",
                    "00002IMG_00002_BURST20171111030039.jpg",
                    "00003IMG_00003_BURST20171111030039_COVER.jpg",
                ],
                stack_type=StackType.BURST,
            )
        ],
    ),
]


@pytest.mark.parametrize("name,assets,want", CASES, ids=[c[0] for c in CASES])
def test_stack(name, assets, want):
    builder = StackBuilder(DEFAULT_SUPPORTED_MEDIA)
    for asset_id, file_name, date in assets:
        builder.process_asset(asset_id, file_name, date)
    got = sorted(builder.stacks(), key=lambda s: s.cover_id)
    assert got == want


def test_stacks_are_sorted_by_date_then_name():
    builder = StackBuilder(DEFAULT_SUPPORTED_MEDIA)
    late = datetime(2023, 10, 2, 9, 0, 0, tzinfo=timezone.utc)
    early = datetime(2023, 10, 1, 9, 0, 0, tzinfo=timezone.utc)
    for asset_id, name, date in [
        ("1", "B.CR3", early),
        ("2", "B.JPG", early),
        ("3", "A.CR3", late),
        ("4", "A.JPG", late),
        ("5", "C.CR3", early),
        ("6", "C.JPG", early),
    ]:
        builder.process_asset(asset_id, name, date)
    assert [s.cover_id for s in builder.stacks()] == ["2", "6", "4"]


def test_dates_outside_range_are_ignored():
    builder = StackBuilder(DEFAULT_SUPPORTED_MEDIA)
    old = datetime(1800, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    builder.process_asset("1", "IMG_1.JPG", old)
    builder.process_asset("2", "IMG_1.DNG", old)
    assert builder.stacks() == []


def test_stacks_do_not_alter_builder_state():
    builder = StackBuilder(DEFAULT_SUPPORTED_MEDIA)
    date = datetime(2023, 10, 1, 9, 0, 0, tzinfo=timezone.utc)
    builder.process_asset("1", "IMG_1.JPG", date)
    builder.process_asset("2", "IMG_1.DNG", date)
    first = builder.stacks()
    second = builder.stacks()
    assert first == second
    assert first[0].ids == ["2"]
import json

import pytest

from app.services.seed_service import (
    parse_csv_input,
    parse_input,
    parse_json_input,
    seed_restaurants,
)

from conftest import make_record


def test_parse_json_input(tmp_path):
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps([
        {"id": "house_1", "name": "Dim Sum House", "cuisines": ["Chinese", "Dim Sum"], "rating": 4.3,
         "reviewCount": 50, "latitude": 1.5, "longitude": 2.5},
        "Plain Name Bistro",
        {"name": ""},
        {"name": "Bad Rating", "rating": "great"},
        {"name": {"first": "Nested"}},
        {"name": 1915},
    ]), encoding="utf-8")

    records = parse_json_input(str(path))

    assert [r.id for r in records] == ["house_1", "seed_plain-name-bistro", "seed_1915"]
    assert records[0].cuisines == ["Chinese", "Dim Sum"]
    assert records[0].review_count == 50
    assert records[0].rating == 4.3


def test_parse_json_input_requires_array(tmp_path):
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps({"name": "Nope"}), encoding="utf-8")

    with pytest.raises(ValueError):
        parse_json_input(str(path))


def test_parse_csv_input(tmp_path):
    path = tmp_path / "restaurants.csv"
    path.write_text(
        "Name,Cuisines,Rating,Review_Count\n"
        "Taco Truck,\"Mexican, Street Food\",4.6,200\n"
        ",Nameless,1,1\n"
        "Odd One,Thai,five,3\n",
        encoding="utf-8",
    )

    records = parse_csv_input(str(path))

    assert len(records) == 1
    assert records[0].id == "seed_taco-truck"
    assert records[0].cuisines == ["Mexican", "Street Food"]
    assert records[0].rating == 4.6
    assert records[0].review_count == 200


def test_parse_input_rejects_other_extensions(tmp_path):
    with pytest.raises(ValueError):
        parse_input(str(tmp_path / "restaurants.xml"))


def test_parse_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_csv_input(str(tmp_path / "missing.csv"))


def test_seed_strips_origin_ids(store):
    record = make_record("seed_1", "Seeded", yelp_id="y", google_place_id="g")

    report = seed_restaurants(store, [record])

    assert report.saved == 1
    found = store.find_by_id("seed_1")
    assert found.yelp_id is None
    assert found.google_place_id is None


def test_seed_dry_run_writes_nothing(store):
    report = seed_restaurants(store, [make_record("seed_1", "Seeded")], dry_run=True)

    assert report.saved == 1
    assert store.find_by_id("seed_1") is None

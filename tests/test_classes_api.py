import json

import pytest

from conftest import class_payload
from core.store import CLASS_LOCATIONS, CLASSES, INSTRUCTORS

MISSING_ID = "000000000000000000000000"


@pytest.fixture
def parents(make_instructor, make_location):
    return make_instructor(), make_location()


def test_create_links_both_parents(client, api, store, parents):
    instructor_id, location_id = parents

    res = client.post(f"{api}/classes", json=class_payload(instructor_id, location_id))

    assert res.status_code == 201
    class_id = res.json()["id"]
    assert res.json()["message"] == f"Created a new class with id {class_id}"
    assert store.doc(INSTRUCTORS, instructor_id)["classIds"] == [class_id]
    assert store.doc(CLASS_LOCATIONS, location_id)["classIDs"] == [class_id]
    assert "classIDs" not in store.doc(INSTRUCTORS, instructor_id)
    assert "classIds" not in store.doc(CLASS_LOCATIONS, location_id)


def test_create_with_unknown_instructor(client, api, store, parents):
    _, location_id = parents

    res = client.post(f"{api}/classes", json=class_payload(MISSING_ID, location_id))

    assert res.status_code == 404
    assert res.json() == {"message": f"No instructor found with instructor id {MISSING_ID}"}
    assert store.collections[CLASSES] == {}
    assert store.doc(CLASS_LOCATIONS, location_id)["classIDs"] == []


def test_create_with_unknown_location(client, api, store, parents):
    instructor_id, _ = parents

    res = client.post(f"{api}/classes", json=class_payload(instructor_id, MISSING_ID))

    assert res.status_code == 404
    assert res.json() == {"message": f"No class location found with class location id {MISSING_ID}"}
    assert store.collections[CLASSES] == {}
    assert store.doc(INSTRUCTORS, instructor_id)["classIds"] == []


def test_create_with_malformed_reference(client, api, store, parents):
    _, location_id = parents

    res = client.post(f"{api}/classes", json=class_payload("not-an-id", location_id))

    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["instructorId"]
    assert store.collections[CLASSES] == {}


def test_create_reports_all_validation_errors(client, api, store, parents):
    payload = class_payload(*parents, startTime="11:00", endTime="10:00", spacesAvailable=-3, level=["Expert"])

    res = client.post(f"{api}/classes", json=payload)

    assert res.status_code == 400
    assert {e["field"] for e in res.json()["errors"]} == {"endTime", "spacesAvailable", "level.0"}
    assert store.collections[CLASSES] == {}


def test_get_class(client, api, parents, make_class):
    class_id = make_class(*parents)

    res = client.get(f"{api}/classes/{class_id}")

    assert res.status_code == 200
    assert res.json() == {"_id": class_id, **class_payload(*parents)}


def test_get_unknown_class(client, api):
    res = client.get(f"{api}/classes/{MISSING_ID}")

    assert res.status_code == 404
    assert res.json() == {"message": f"Class not found with id: {MISSING_ID}"}
    assert client.get(f"{api}/classes/xyz").status_code == 404


def test_list_in_insertion_order_with_ids(client, api, parents, make_class):
    first = make_class(*parents, description="Sunrise flow for early birds")
    second = make_class(*parents, description="A gentle evening wind down")

    docs = client.get(f"{api}/classes").json()

    assert [d["_id"] for d in docs] == [first, second]


def test_list_filters(client, api, make_instructor, make_location, make_class):
    maya = make_instructor()
    niamh = make_instructor(name="Niamh Walsh", email="niamh@lotusstudio.com")
    location_id = make_location()
    early = make_class(maya, location_id, date="2025-03-01")
    mid = make_class(niamh, location_id, date="2025-03-15", level=["Intermediate", "Advanced"])
    late = make_class(maya, location_id, date="2025-04-02")

    def ids(query):
        res = client.get(f"{api}/classes", params={"filter": json.dumps(query)})
        assert res.status_code == 200, res.text
        return [d["_id"] for d in res.json()]

    assert ids({"instructorId": maya}) == [early, late]
    assert ids({"date": {"from": "2025-03-01", "to": "2025-03-31"}}) == [early, mid]
    assert ids({"level": "Advanced"}) == [mid]
    assert ids({"instructorId": maya, "date": {"$gt": "2025-03-01"}}) == [late]
    assert ids({"spacesAvailable": {"$lte": 12}, "classFormat": "Both"}) == [early, mid, late]


def test_date_filter_skips_unparseable_stored_dates(client, api, parents, make_class):
    good = make_class(*parents, date="2025-03-10")
    patched = make_class(*parents, date="2025-03-12")
    assert client.patch(f"{api}/classes/{patched}", json={"date": "someday"}).status_code == 200

    for query in [{"date": {"from": "2025-03-01", "to": "2025-03-31"}}, {"date": {"$in": ["2025-03-10"]}}]:
        res = client.get(f"{api}/classes", params={"filter": json.dumps(query)})
        assert res.status_code == 200
        assert [d["_id"] for d in res.json()] == [good]

    res = client.get(f"{api}/classes", params={"filter": json.dumps({"date": {"$ne": "2025-03-10"}})})
    assert [d["_id"] for d in res.json()] == [patched]


def test_list_paging(client, api, parents, make_class):
    created = [make_class(*parents, spacesAvailable=n) for n in range(5)]

    res = client.get(f"{api}/classes", params={"page": 3, "pageSize": 2})

    assert [d["_id"] for d in res.json()] == created[4:]


def test_list_rejects_unknown_filter_field(client, api):
    res = client.get(f"{api}/classes", params={"filter": json.dumps({"room": "A"})})
    assert res.status_code == 500


def test_delete_unlinks_both_parents(client, api, store, parents, make_class):
    instructor_id, location_id = parents
    kept = make_class(instructor_id, location_id)
    removed = make_class(instructor_id, location_id)

    res = client.delete(f"{api}/classes/{removed}")

    assert res.status_code == 202
    assert res.json() == {"message": f"Successfully removed class with id {removed}"}
    assert store.doc(CLASSES, removed) is None
    assert store.doc(INSTRUCTORS, instructor_id)["classIds"] == [kept]
    assert store.doc(CLASS_LOCATIONS, location_id)["classIDs"] == [kept]


def test_delete_unknown_class_changes_nothing(client, api, store, parents, make_class):
    class_id = make_class(*parents)
    before = json.dumps(store.collections, sort_keys=True)

    res = client.delete(f"{api}/classes/{MISSING_ID}")

    assert res.status_code == 404
    assert res.json() == {"message": f"No class found with id {MISSING_ID}"}
    assert json.dumps(store.collections, sort_keys=True) == before
    assert store.doc(CLASSES, class_id) is not None


def test_delete_malformed_id(client, api):
    assert client.delete(f"{api}/classes/123").status_code == 400


def test_patch_accepts_arbitrary_fields(client, api, store, parents, make_class):
    class_id = make_class(*parents)

    res = client.patch(f"{api}/classes/{class_id}", json={"spacesAvailable": 3, "room": "B", "_id": MISSING_ID})

    assert res.status_code == 200
    assert res.json() == {"message": f"Successfully updated class with id {class_id}"}
    doc = store.doc(CLASSES, class_id)
    assert doc["spacesAvailable"] == 3
    assert doc["room"] == "B"
    assert "_id" not in doc

    res = client.patch(f"{api}/classes/{class_id}", json={"spacesAvailable": 3})
    assert res.json() == {"message": f"No changes made to class with id {class_id}"}


@pytest.mark.parametrize("body", [{}, {"_id": MISSING_ID}, ["spacesAvailable"]])
def test_patch_needs_at_least_one_field(client, api, parents, make_class, body):
    class_id = make_class(*parents)

    res = client.patch(f"{api}/classes/{class_id}", json=body)

    assert res.status_code == 400


def test_patch_malformed_id(client, api):
    assert client.patch(f"{api}/classes/oops", json={"room": "B"}).status_code == 400


def test_replace_does_not_recheck_references(client, api, store, parents, make_class):
    class_id = make_class(*parents)
    replacement = class_payload(MISSING_ID, parents[1], description="Moved to a guest instructor")

    res = client.put(f"{api}/classes/{class_id}", json=replacement)

    assert res.status_code == 200
    assert store.doc(CLASSES, class_id)["instructorId"] == MISSING_ID


def test_replace_validates_payload(client, api, parents, make_class):
    class_id = make_class(*parents)

    res = client.put(f"{api}/classes/{class_id}", json=class_payload(*parents, classFormat="Hybrid"))

    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["classFormat"]


def test_replace_unknown_class(client, api, parents):
    res = client.put(f"{api}/classes/{MISSING_ID}", json=class_payload(*parents))

    assert res.status_code == 200
    assert res.json() == {"message": f"No changes made to class with id {MISSING_ID}"}

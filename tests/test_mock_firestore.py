"""
File-backed mock Firestore used by the local dev server.
"""

from datetime import datetime

from firebase_admin import firestore

from geocity.config.mock_firestore import MockFirestore


def test_timestamps_survive_a_restart(tmp_path):
    path = str(tmp_path / "mock-db.json")

    MockFirestore(path).collection("raised-issue").document("old").set({
        "location": "MG Road",
        "createdAt": firestore.SERVER_TIMESTAMP,
    })

    reopened = MockFirestore(path)
    reopened.collection("raised-issue").document("new").set({
        "location": "Jayanagar",
        "createdAt": firestore.SERVER_TIMESTAMP,
    })

    query = reopened.collection("raised-issue").order_by("createdAt", direction=firestore.Query.DESCENDING)
    docs = list(query.stream())

    assert [doc.id for doc in docs] == ["new", "old"]
    assert all(isinstance(doc.to_dict()["createdAt"], datetime) for doc in docs)


def test_realtime_tree_is_persisted(tmp_path):
    path = str(tmp_path / "mock-db.json")
    MockFirestore(path).set_realtime("sensors/s1", {"fire": 1})

    assert MockFirestore(path).get_realtime("sensors/s1") == {"fire": 1}

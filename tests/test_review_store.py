"""Tests for quiz review storage."""

import pytest

from core.exceptions import StorageError
from models.base import Base
from schemas.review import QuizReview, Response


def _review(username, *answers):
    return QuizReview(
        username=username,
        responses=[
            Response(question=f"Q{i}", submitted=submitted, answer=answer)
            for i, (submitted, answer) in enumerate(answers)
        ],
    )


def test_correctness_is_derived_from_answers():
    response = Response(question="3x = 12", submitted="4", answer="4", is_correct=False)
    wrong = Response(question="3x = 12", submitted="3", answer="4", is_correct=True)

    assert response.is_correct is True
    assert wrong.is_correct is False


def test_reviews_round_trip_through_database(review_store):
    review_store.add_review(_review("alice", ("4", "4"), ("7", "8")))

    [stored] = review_store.list_for_user("alice")

    assert stored.username == "alice"
    assert [r.is_correct for r in stored.responses] == [True, False]


def test_delete_for_user_only_touches_that_user(review_store):
    review_store.add_review(_review("alice", ("1", "1")))
    review_store.add_review(_review("alice", ("2", "1")))
    review_store.add_review(_review("bob", ("1", "1")))

    assert review_store.delete_for_user("alice") == 2
    assert review_store.delete_for_user("alice") == 0
    assert review_store.list_for_user("alice") == []
    assert len(review_store.list_for_user("bob")) == 1


def test_database_failure_is_storage_error(review_store, engine):
    Base.metadata.drop_all(bind=engine)

    with pytest.raises(StorageError):
        review_store.delete_for_user("alice")

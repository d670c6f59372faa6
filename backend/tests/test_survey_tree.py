from datetime import datetime

import pytest

from survey_api.errors import NotFoundError
from survey_api.services.survey_tree import (
    ChoicePart,
    QuestionPart,
    SurveyRow,
    assemble_survey,
    assemble_surveys,
)

CREATED = datetime(2026, 1, 1, 9, 0, 0)


def _row(survey_id="s1", question=None, choice=None, is_public=1):
    return SurveyRow(
        survey_id=survey_id,
        title=f"Survey {survey_id}",
        description=None,
        owner_id=1,
        created_at=CREATED,
        is_public=is_public,
        access_type="public",
        question=question,
        choice=choice,
    )


def _rows():
    q1 = QuestionPart(1, "Colour?", "SINGLE_CHOICE")
    q2 = QuestionPart(2, "Why?", "TEXT")
    q3 = QuestionPart(3, "Pets?", "MULTIPLE_CHOICE")
    return [
        _row("s1", q1, ChoicePart(10, "Red")),
        _row("s1", q1, ChoicePart(11, "Blue")),
        _row("s1", q2),
        _row("s2", q3, ChoicePart(12, "Cat")),
        _row("s2", q3, ChoicePart(13, "Dog")),
        _row("s3", is_public=0),
    ]


def test_assemble_surveys_nests_in_row_order():
    surveys = assemble_surveys(_rows())

    assert [s["id"] for s in surveys] == ["s1", "s2", "s3"]
    first = surveys[0]
    assert [q["id"] for q in first["questions"]] == [1, 2]
    assert first["questions"][0]["choices"] == [{"id": 10, "text": "Red"}, {"id": 11, "text": "Blue"}]
    assert first["questions"][1]["choices"] == []
    assert [c["text"] for c in surveys[1]["questions"][0]["choices"]] == ["Cat", "Dog"]


def test_zero_question_survey_has_empty_list():
    surveys = assemble_surveys(_rows())
    assert surveys[2]["questions"] == []
    assert surveys[2]["is_public"] is False
    assert surveys[0]["is_public"] is True


def test_assembler_is_idempotent():
    rows = _rows()
    assert assemble_surveys(rows) == assemble_surveys(rows)
    single = [row for row in rows if row.survey_id == "s1"]
    assert assemble_survey(single) == assemble_survey(single)


def test_assemble_single_survey():
    rows = [row for row in _rows() if row.survey_id == "s2"]
    survey = assemble_survey(rows)
    assert survey["id"] == "s2"
    assert len(survey["questions"]) == 1
    assert survey["questions"][0]["type"] == "MULTIPLE_CHOICE"


def test_assemble_single_survey_without_rows_raises():
    with pytest.raises(NotFoundError) as exc_info:
        assemble_survey([])
    assert exc_info.value.code == "SURVEY_NOT_FOUND"


def test_assemble_surveys_without_rows_is_empty():
    assert assemble_surveys([]) == []


def test_rows_without_question_do_not_reset_cursor():
    q1 = QuestionPart(1, "Colour?", "SINGLE_CHOICE")
    rows = [
        _row("s1", q1, ChoicePart(10, "Red")),
        _row("s1"),
        _row("s1", q1, ChoicePart(11, "Blue")),
    ]
    survey = assemble_survey(rows)
    assert len(survey["questions"]) == 1
    assert [c["id"] for c in survey["questions"][0]["choices"]] == [10, 11]

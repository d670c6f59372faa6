import pytest
from sqlalchemy.exc import OperationalError

from survey_api.errors import AggregationError, NotFoundError
from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.survey import Choice, Question, Survey
from survey_api.models.user import User
from survey_api.services import analysis_service
from survey_api.services.analysis_service import analyze_survey, compute_distribution, resolve_option_index
from survey_api.services.auth_service import hash_password
from survey_api.utils.answer_values import encode_answer_value
from tests.conftest import auth_headers, create_survey


def _seed_question(db, owner, question_type, options, title="Analysis"):
    survey = Survey(title=title, owner_id=owner.user_id, is_public=True, access_type="public")
    db.add(survey)
    db.flush()
    question = Question(survey_id=survey.survey_id, question_text="Pick", question_type=question_type)
    db.add(question)
    db.flush()
    for text in options:
        db.add(Choice(question_id=question.question_id, choice_text=text))
    db.commit()
    return survey, question


def _seed_answers(db, survey, question, values, legacy=False):
    for index, value in enumerate(values):
        respondent = User(
            email=f"respondent{index}@{survey.survey_id}.test",
            name=f"Respondent {index}",
            role="student",
            password_hash=hash_password("pw"),
        )
        db.add(respondent)
        db.flush()
        response = SurveyResponse(survey_id=survey.survey_id, respondent_id=respondent.user_id)
        db.add(response)
        db.flush()
        stored, kind = encode_answer_value(value)
        db.add(Answer(
            response_id=response.response_id,
            question_id=question.question_id,
            value=stored,
            value_kind=None if legacy else kind,
        ))
    db.commit()


def test_single_choice_mixed_index_and_text(db, seed_users):
    survey, question = _seed_question(db, seed_users["teacher"], "SINGLE_CHOICE", ["Red", "Blue"])
    _seed_answers(db, survey, question, [0, "Blue", 1])

    result = analyze_survey(db, survey.survey_id)

    node = result["questions"][0]
    assert node["options"] == ["Red", "Blue"]
    assert node["answer_distribution"] == [1, 2]
    assert [item["value"] for item in node["responses"]] == [0, "Blue", 1]
    assert result["total_responses"] == 3


def test_multiple_choice_lists_of_text_and_index(db, seed_users):
    survey, question = _seed_question(db, seed_users["teacher"], "MULTIPLE_CHOICE", ["A", "B", "C"])
    _seed_answers(db, survey, question, [["A", "C"], [1]])

    node = analyze_survey(db, survey.survey_id)["questions"][0]
    assert node["answer_distribution"] == [1, 1, 1]
    assert node["total_responses"] == 2


def test_legacy_untagged_answers_are_sniffed(db, seed_users):
    survey, question = _seed_question(db, seed_users["teacher"], "MULTIPLE_CHOICE", ["A", "B", "C"])
    _seed_answers(db, survey, question, [["A", "C"], ["B"]], legacy=True)

    node = analyze_survey(db, survey.survey_id)["questions"][0]
    assert node["responses"][0]["value"] == ["A", "C"]
    assert node["answer_distribution"] == [1, 1, 1]


def test_distribution_invariants(db, seed_users):
    options = ["Red", "Blue", "Green"]
    survey, question = _seed_question(db, seed_users["teacher"], "SINGLE_CHOICE", options)
    _seed_answers(db, survey, question, ["Red", 7, "Purple", -1, 2, True])

    node = analyze_survey(db, survey.survey_id)["questions"][0]
    assert len(node["answer_distribution"]) == len(node["options"])
    assert sum(node["answer_distribution"]) <= node["total_responses"]
    assert node["answer_distribution"] == [1, 0, 1]


def test_text_question_has_no_distribution(client, seed_users):
    teacher_headers = auth_headers(client, "teacher@example.com")
    created = create_survey(client, teacher_headers)
    survey_id = created["surveyId"]
    client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": [
            {"questionId": created["questions"][0]["id"], "value": "Red"},
            {"questionId": created["questions"][1]["id"], "value": "It is warm"},
        ]},
        headers=auth_headers(client, "student@example.com"),
    )

    resp = client.get(f"/api/surveys/{survey_id}/analysis", headers=teacher_headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["totalResponses"] == 1
    choice_q, text_q = data["questions"]
    assert choice_q["answerDistribution"] == [1, 0]
    assert choice_q["options"] == ["Red", "Blue"]
    assert "answerDistribution" not in text_q
    assert "options" not in text_q
    assert text_q["responses"] == [{"respondentId": seed_users["student"].user_id, "value": "It is warm"}]


def test_analysis_of_unknown_survey_is_404(client, db, seed_users):
    resp = client.get("/api/surveys/nonexistent/analysis", headers=auth_headers(client, "teacher@example.com"))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SURVEY_NOT_FOUND"

    with pytest.raises(NotFoundError):
        analyze_survey(db, "nonexistent")


def test_student_must_participate_before_viewing(client, seed_users):
    created = create_survey(client, auth_headers(client, "teacher@example.com"))
    headers = auth_headers(client, "student@example.com")
    url = f"/api/surveys/{created['surveyId']}/analysis"

    resp = client.get(url, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "PARTICIPATION_REQUIRED"

    client.post(
        f"/api/surveys/{created['surveyId']}/responses",
        json={"answers": [{"questionId": created["questions"][0]["id"], "value": 1}]},
        headers=headers,
    )
    resp = client.get(url, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["questions"][0]["answerDistribution"] == [0, 1]


def test_analysis_requires_authentication(client, seed_users):
    created = create_survey(client, auth_headers(client, "teacher@example.com"))
    resp = client.get(f"/api/surveys/{created['surveyId']}/analysis")
    assert resp.status_code == 401


def test_store_failure_becomes_aggregation_error(client, db, seed_users, monkeypatch):
    survey, _question = _seed_question(db, seed_users["teacher"], "SINGLE_CHOICE", ["Red", "Blue"])

    def _broken(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(analysis_service, "_load_questions", _broken)

    with pytest.raises(AggregationError) as exc_info:
        analyze_survey(db, survey.survey_id)
    assert exc_info.value.survey_id == survey.survey_id

    resp = client.get(
        f"/api/surveys/{survey.survey_id}/analysis",
        headers=auth_headers(client, "teacher@example.com"),
    )
    assert resp.status_code == 500
    body = resp.json()["error"]
    assert body["code"] == "AGGREGATION_ERROR"
    assert body["surveyId"] == survey.survey_id


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (2, 2),
        (1.0, 1),
        (1.5, -1),
        (True, -1),
        ("Blue", 1),
        ("Purple", -1),
        (None, -1),
        (["Red"], -1),
    ],
)
def test_resolve_option_index(value, expected):
    assert resolve_option_index(value, ["Red", "Blue"]) == expected


def test_compute_distribution_skips_non_list_multiple_choice():
    assert compute_distribution("MULTIPLE_CHOICE", ["A", "B"], ["A", ["B", 5, "Z"], 0]) == [0, 1]
    assert compute_distribution("SINGLE_CHOICE", [], ["A", 0]) == []


class _FailingSession:
    def query(self, *_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("unable to open database file"))


def test_failed_survey_lookup_becomes_aggregation_error():
    with pytest.raises(AggregationError) as exc_info:
        analyze_survey(_FailingSession(), "abc")
    assert exc_info.value.code == "AGGREGATION_ERROR"
    assert exc_info.value.survey_id == "abc"

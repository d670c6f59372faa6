"""Seed the database with a demo teacher, student and survey."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from survey_api.database import SessionLocal, engine, Base
import survey_api.models  # noqa: F401

from survey_api.models.user import User
from survey_api.models.survey import Choice, Question, Survey
from survey_api.models.response import Answer, SurveyResponse
from survey_api.models.teacher_student import TeacherStudent
from survey_api.services.auth_service import hash_password
from survey_api.utils.answer_values import encode_answer_value


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        teacher = User(
            email="teacher@example.com",
            name="Demo Teacher",
            role="teacher",
            password_hash=hash_password("teacher123"),
        )
        student = User(
            email="student@example.com",
            name="Demo Student",
            role="student",
            password_hash=hash_password("student123"),
        )
        db.add_all([teacher, student])
        db.flush()

        survey = Survey(
            title="Course feedback",
            description="Tell us how the first module went.",
            owner_id=teacher.user_id,
            is_public=True,
            access_type="public",
        )
        db.add(survey)
        db.flush()

        color = Question(survey_id=survey.survey_id, question_text="Favourite colour?", question_type="SINGLE_CHOICE")
        topics = Question(survey_id=survey.survey_id, question_text="Which topics were useful?", question_type="MULTIPLE_CHOICE")
        remarks = Question(survey_id=survey.survey_id, question_text="Any remarks?", question_type="TEXT")
        db.add_all([color, topics, remarks])
        db.flush()

        db.add_all([
            Choice(question_id=color.question_id, choice_text="Red"),
            Choice(question_id=color.question_id, choice_text="Blue"),
            Choice(question_id=topics.question_id, choice_text="Parsing"),
            Choice(question_id=topics.question_id, choice_text="Testing"),
            Choice(question_id=topics.question_id, choice_text="Deployment"),
        ])

        response = SurveyResponse(survey_id=survey.survey_id, respondent_id=student.user_id)
        db.add(response)
        db.flush()
        for question, value in ((color, "Blue"), (topics, ["Parsing", "Testing"]), (remarks, "Great pace.")):
            stored, kind = encode_answer_value(value)
            db.add(Answer(response_id=response.response_id, question_id=question.question_id, value=stored, value_kind=kind))

        db.add(TeacherStudent(teacher_id=teacher.user_id, student_id=student.user_id, survey_id=survey.survey_id))

        db.commit()
        print("Seed data created successfully.")
        print("  teacher@example.com / teacher123")
        print("  student@example.com / student123")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()

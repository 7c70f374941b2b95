"""Seed database with a demo team, users and an active survey template."""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import app.models  # noqa: F401,E402
from app.core.database import SessionLocal, engine, Base  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.models.team import Team  # noqa: E402
from app.models.template import SurveyTemplate, TemplateCategory, TemplateStatus  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402

DISCOVERY_QUESTIONS = [
    {
        "key": "problems",
        "type": "ranking",
        "question_text": "How serious are these problems for you? (1 = not at all, 5 = very)",
        "options": [
            {"text": "Finding study materials", "value": "study_materials"},
            {"text": "Managing deadlines", "value": "deadlines"},
            {"text": "Group coordination", "value": "group_coordination"},
            {"text": "Exam preparation", "value": "exam_preparation"},
            {"text": "Staying motivated", "value": "motivation"},
        ],
        "required": True,
        "order": 1,
    },
    {
        "key": "satisfaction",
        "type": "rating",
        "question_text": "How satisfied are you with the tools you use today?",
        "required": True,
        "validation": {"min": 1, "max": 5},
        "order": 2,
    },
    {
        "key": "adoption_likelihood",
        "type": "rating",
        "question_text": "How likely are you to use an app that solves your top problem?",
        "required": True,
        "validation": {"min": 1, "max": 5},
        "order": 3,
    },
    {
        "key": "willingness_to_pay",
        "type": "multiple-choice",
        "question_text": "How much would you pay per month?",
        "options": [
            {"text": "Nothing", "value": "0"},
            {"text": "Up to 5", "value": "1-5"},
            {"text": "5 to 10", "value": "5-10"},
            {"text": "More than 10", "value": "10+"},
        ],
        "order": 4,
    },
    {
        "key": "interested_in_trying",
        "type": "multiple-choice",
        "question_text": "Would you like to try an early version?",
        "options": [{"text": "Yes", "value": "yes"}, {"text": "No", "value": "no"}],
        "order": 5,
    },
    {
        "key": "comments",
        "type": "open-ended",
        "question_text": "Anything else we should know?",
        "order": 6,
    },
]


def seed():
    """Create the demo team with one user per role and an active template."""
    db = SessionLocal()

    try:
        if db.query(User).first():
            print("Users already exist. Skipping seed.")
            return

        team = Team(name="Demo Team", description="Field research demo team")
        db.add(team)
        db.flush()

        users = [
            User(
                email="admin@survey.local",
                hashed_password=get_password_hash("admin123"),
                full_name="Admin User",
                team_id=team.id,
                role=UserRole.ADMIN,
            ),
            User(
                email="collector@survey.local",
                hashed_password=get_password_hash("collector123"),
                full_name="Field Collector",
                team_id=team.id,
                role=UserRole.MEMBER,
            ),
            User(
                email="viewer@survey.local",
                hashed_password=get_password_hash("viewer123"),
                full_name="Dashboard Viewer",
                team_id=team.id,
                role=UserRole.VIEWER,
            ),
        ]
        db.add_all(users)
        db.flush()
        team.created_by = users[0].id

        template = SurveyTemplate(
            name="Student Problem Discovery",
            description="Ranks everyday study problems and measures interest in a solution",
            questions=DISCOVERY_QUESTIONS,
            settings={"allow_anonymous": False, "multiple_responses": True, "require_location": False},
            status=TemplateStatus.ACTIVE,
            category=TemplateCategory.STUDENT,
            tags=["discovery", "students"],
            team_id=team.id,
            created_by_id=users[0].id,
        )
        db.add(template)
        db.commit()

        print("✅ Seeded demo data:")
        print(f"  - team '{team.name}' (id {team.id})")
        print("  - admin@survey.local (password: admin123)")
        print("  - collector@survey.local (password: collector123)")
        print("  - viewer@survey.local (password: viewer123)")
        print(f"  - active template '{template.name}' (id {template.id})")

    except Exception as e:
        print(f"❌ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    # Create tables if they don't exist
    Base.metadata.create_all(bind=engine)

    seed()

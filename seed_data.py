import random
from datetime import datetime, timedelta, timezone
from sqlmodel import Session, SQLModel, select

from cache import get_lookup_cache
from dependencies import engine
from models import Category, Topic, TopicStatus
from services.category_service import CategoryService
from services.topic_service import TopicService

# Data pools
CATEGORIES = {
    "Programming": "Languages, tools and practices",
    "Databases": "Storage engines, ORMs and queries",
    "Web": "Frontend and backend development",
    "Notes": "Short notes and links",
}

TAGS = [
    "python", "fastapi", "sqlalchemy", "redis", "postgres", "react",
    "testing", "caching", "deployment", "performance",
]

TOPIC_TITLES = [
    "Getting started with FastAPI",
    "Understanding SQLAlchemy sessions",
    "Caching lookup tables in Redis",
    "Many-to-many relationships with SQLModel",
    "Pagination patterns for JSON APIs",
    "Writing tests against an in-memory database",
    "Structured logging with structlog",
    "Deploying a Python web service",
    "Profiling slow queries in Postgres",
    "A small React admin console",
]

PARAGRAPHS = [
    "This post walks through the setup step by step.",
    "The interesting part is how the pieces fit together.",
    "Most of the work is configuration; the code itself is short.",
    "There are a few sharp edges worth knowing about up front.",
    "Here is the approach that ended up working best in practice.",
]


def random_date(start_date, end_date):
    time_between = end_date - start_date
    days_between = time_between.days
    random_number_of_days = random.randrange(days_between)
    random_time = timedelta(
        hours=random.randint(0, 23),
        minutes=random.randint(0, 59),
        seconds=random.randint(0, 59)
    )
    return start_date + timedelta(days=random_number_of_days) + random_time


def create_test_data():
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        if session.exec(select(Topic)).first():
            print("Sample content already present, skipping")
            return

        cache = get_lookup_cache()
        categories = CategoryService(session, cache)
        topics = TopicService(session, cache)

        for name, description in CATEGORIES.items():
            categories.add(name, description)
        category_ids = [c.id for c in session.exec(select(Category)).all()]

        end_date = datetime.now(timezone.utc)
        start_date = end_date - timedelta(days=365)
        statuses = [TopicStatus.PUBLISHED] * 4 + [TopicStatus.NORMAL, TopicStatus.TRASH]

        for title in TOPIC_TITLES:
            topics.add(
                title=title,
                content="\n\n".join(random.sample(PARAGRAPHS, k=3)),
                status=random.choice(statuses),
                category_list=random.sample(category_ids, k=random.randint(1, 2)),
                tag_list=random.sample(TAGS, k=random.randint(1, 4)),
                alias=title.lower().replace(" ", "-"),
                summary=random.choice(PARAGRAPHS),
                date=random_date(start_date, end_date),
                allow_comment=random.random() > 0.2,
            )

        print(f"Created {len(CATEGORIES)} categories and {len(TOPIC_TITLES)} topics")


if __name__ == "__main__":
    create_test_data()

TAGS = "tags:all"
CATEGORIES = "categories:all"
MONTH_STATISTICS = "topics:month-statistics"
RELATED_TOPICS = "topics:related:"


def related_topics(topic_id: int) -> str:
    return f"{RELATED_TOPICS}{topic_id}"

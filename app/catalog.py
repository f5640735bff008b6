from typing import List, Optional, Tuple

from models import DifficultyTier, ProficiencyLevel, Topic, TopicCategory

DEFAULT_LEVEL = ProficiencyLevel.B1
DEFAULT_TOPIC = "business-proposals"

# least masked -> fully hidden
TIER_PROGRESSION: Tuple[DifficultyTier, ...] = (
    DifficultyTier(masking_percentage=20),
    DifficultyTier(masking_percentage=50),
    DifficultyTier(masking_percentage=100),
)

TOPIC_CATALOG: Tuple[TopicCategory, ...] = (
    TopicCategory(
        category="Business",
        topics=(
            Topic(id="business-email", name="Email Communication"),
            Topic(id="business-agendas", name="Meeting Agendas"),
            Topic(id="business-proposals", name="Strategic Proposals"),
            Topic(id="business-reports", name="Reports"),
        ),
    ),
    TopicCategory(
        category="Academic",
        topics=(
            Topic(id="academic-papers", name="Research Papers"),
            Topic(id="academic-essays", name="Essays"),
            Topic(id="academic-reviews", name="Literature Reviews"),
            Topic(id="academic-grants", name="Grant Proposals"),
        ),
    ),
)


def list_levels() -> List[ProficiencyLevel]:
    return list(ProficiencyLevel)


def all_topics() -> List[Topic]:
    return [t for cat in TOPIC_CATALOG for t in cat.topics]


def find_topic(topic_id: str) -> Optional[Tuple[TopicCategory, Topic]]:
    for cat in TOPIC_CATALOG:
        for t in cat.topics:
            if t.id == topic_id:
                return cat, t
    return None


def lesson_title(topic_id: str) -> str:
    found = find_topic(topic_id)
    if found is None:
        return "Writing Lesson"
    cat, topic = found
    return f"{cat.category}: {topic.name}"

from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROFICIENCY_AXES: Tuple[str, ...] = ("Formality", "Clarity", "Conciseness", "Grammar", "Vocabulary")
MAX_AXIS_SCORE = 5.0


class ProficiencyLevel(str, Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]


_LEVEL_LABELS = {
    ProficiencyLevel.A1: "Beginner",
    ProficiencyLevel.A2: "Elementary",
    ProficiencyLevel.B1: "Intermediate",
    ProficiencyLevel.B2: "Upper-Int.",
    ProficiencyLevel.C1: "Advanced",
    ProficiencyLevel.C2: "Proficient",
}


class Topic(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class TopicCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    topics: Tuple[Topic, ...]


class DifficultyTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    masking_percentage: int = Field(ge=0, le=100)


class Lesson(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_text: str = Field(min_length=1)
    tiers: Tuple[DifficultyTier, ...] = Field(min_length=1)


class WordDiff(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word: str
    is_correct: bool = Field(alias="isCorrect")
    error_type: str = Field("", alias="errorType")


class ProficiencyChartData(BaseModel):
    """Five writing axes scored 0-5. Wire names are capitalised."""

    model_config = ConfigDict(populate_by_name=True)

    formality: float = Field(0.0, alias="Formality")
    clarity: float = Field(0.0, alias="Clarity")
    conciseness: float = Field(0.0, alias="Conciseness")
    grammar: float = Field(0.0, alias="Grammar")
    vocabulary: float = Field(0.0, alias="Vocabulary")

    @field_validator("formality", "clarity", "conciseness", "grammar", "vocabulary")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return max(0.0, min(MAX_AXIS_SCORE, float(v)))

    def as_mapping(self) -> Dict[str, float]:
        return self.model_dump(by_alias=True)


class Feedback(BaseModel):
    score: int = 0
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    word_diffs: List[WordDiff] = Field(default_factory=list)
    proficiency: ProficiencyChartData = Field(default_factory=ProficiencyChartData)

    @classmethod
    def baseline(cls) -> "Feedback":
        return cls()


# --- grading wire format ---
# every field the grading schema marks required has no default here

class GradingNotes(BaseModel):
    strengths: List[str]
    improvements: List[str]


class GradingDiff(BaseModel):
    word: str
    isCorrect: bool
    errorType: str

    def to_word_diff(self) -> WordDiff:
        return WordDiff(word=self.word, is_correct=self.isCorrect, error_type=self.errorType)


class GradingChart(BaseModel):
    Formality: float
    Clarity: float
    Conciseness: float
    Grammar: float
    Vocabulary: float

    def to_chart(self) -> ProficiencyChartData:
        return ProficiencyChartData(**self.model_dump())


class GradingResponse(BaseModel):
    score: int
    feedback: GradingNotes
    diffs: List[GradingDiff]
    proficiencyChartData: GradingChart

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        # floats like 85.0 come back from the model now and then
        try:
            score = int(round(float(v)))
        except (TypeError, ValueError):
            raise ValueError(f"score is not a number: {v!r}")
        return max(0, min(100, score))

    def to_feedback(self) -> Feedback:
        return Feedback(
            score=self.score,
            strengths=list(self.feedback.strengths),
            improvements=list(self.feedback.improvements),
            word_diffs=[d.to_word_diff() for d in self.diffs],
            proficiency=self.proficiencyChartData.to_chart(),
        )

# agents/grader.py
from __future__ import annotations

import json

from mistralai import Mistral

from agents.retry_logic import call_with_retry

GRADING_SCHEMA = {
    "type": "object",
    "properties": {
        "score": {"type": "integer", "description": "Overall score from 0-100."},
        "feedback": {
            "type": "object",
            "properties": {
                "strengths": {
                    "type": "array", "items": {"type": "string"},
                    "description": "Two concise points on what the user did well.",
                },
                "improvements": {
                    "type": "array", "items": {"type": "string"},
                    "description": "Two concise points for the user to improve.",
                },
            },
            "required": ["strengths", "improvements"],
        },
        "diffs": {
            "type": "array",
            "description": (
                "One object for EVERY word of the user's input. If a word is incorrect, "
                "give a brief 'errorType' explaining the mistake."
            ),
            "items": {
                "type": "object",
                "properties": {
                    "word": {"type": "string"},
                    "isCorrect": {"type": "boolean"},
                    "errorType": {
                        "type": "string",
                        "description": (
                            "E.g. 'Grammar: Tense mismatch', 'Vocabulary: Incorrect word choice', "
                            "'Style: Too informal'. Empty string if isCorrect is true."
                        ),
                    },
                },
                "required": ["word", "isCorrect", "errorType"],
            },
        },
        "proficiencyChartData": {
            "type": "object",
            "description": "Scores for five core writing attributes from 1 (poor) to 5 (excellent).",
            "properties": {
                "Formality": {"type": "number"},
                "Clarity": {"type": "number"},
                "Conciseness": {"type": "number"},
                "Grammar": {"type": "number"},
                "Vocabulary": {"type": "number"},
            },
            "required": ["Formality", "Clarity", "Conciseness", "Grammar", "Vocabulary"],
        },
    },
    "required": ["score", "feedback", "diffs", "proficiencyChartData"],
}

GRADER_SYSTEM_PROMPT = """
You are an expert English writing teacher. You compare a student's attempt
to reconstruct a text with the original text.

Focus on:
1. Semantic accuracy: does the student's text convey the same meaning?
2. Grammatical correctness: are there grammatical errors?
3. Vocabulary & style: is the word choice and formality appropriate and close to the original?
4. Proficiency attributes: rate the student's text from 1 (poor) to 5 (excellent)
   for Formality, Clarity, Conciseness, Grammar and Vocabulary.

Return ONLY a JSON object matching this JSON schema:
""" + json.dumps(GRADING_SCHEMA, indent=2) + """

The `diffs` array must contain one object for each word of the student's input,
in order. Mark a new paragraph by putting a newline at the start of the first word.
"""


def build_grading_prompt(reference_text: str, user_html: str) -> str:
    return f"""
ORIGINAL TEXT:
```
{reference_text}
```

USER INPUT (as HTML):
```html
{user_html}
```
""".strip()


async def call_grader_agent(
    client: Mistral,
    *,
    reference_text: str,
    user_html: str,
    model: str = "mistral-small-latest",
    temperature: float = 0.2,
    max_retries: int = 5,
    base_delay: float = 0.8,
    max_delay: float = 8.0,
) -> str:
    """Return the raw JSON string; parsing is up to the caller."""
    resp = await call_with_retry(
        lambda: client.chat.complete_async(
            model=model,
            messages=[
                {"role": "system", "content": GRADER_SYSTEM_PROMPT},
                {"role": "user", "content": build_grading_prompt(reference_text, user_html)},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
        ),
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
    )
    return resp.choices[0].message.content or ""

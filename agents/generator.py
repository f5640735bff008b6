# agents/generator.py
from mistralai import Mistral

from agents.retry_logic import call_with_retry

GENERATOR_SYSTEM_PROMPT = """
You are an English curriculum designer. You write short model paragraphs
that learners will study and then reconstruct from memory.

Rules:
- 2-4 sentences, one paragraph.
- It must be a realistic example of the requested topic.
- Include at least two relevant collocations or idiomatic phrases.
- Grammar and vocabulary must match the CEFR level you are given.
- Return ONLY the paragraph as plain text: no title, no quotes, no markdown.
"""


def build_generation_prompt(level: str, topic: str) -> str:
    return (
        "Generate a short, professional paragraph for an English writing exercise.\n"
        f"PROFICIENCY_LEVEL: {level}\n"
        f"TOPIC: {topic}"
    )


def _clean_paragraph(text: str) -> str:
    text = (text or "").strip()
    # models like to wrap the paragraph in quotes
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text


async def call_generator_agent(
    client: Mistral,
    *,
    level: str,
    topic: str,
    model: str = "mistral-small-latest",
    temperature: float = 0.7,
    max_retries: int = 5,
    base_delay: float = 0.8,
    max_delay: float = 8.0,
) -> str:
    resp = await call_with_retry(
        lambda: client.chat.complete_async(
            model=model,
            messages=[
                {"role": "system", "content": GENERATOR_SYSTEM_PROMPT},
                {"role": "user", "content": build_generation_prompt(level, topic)},
            ],
            temperature=temperature,
        ),
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
    )
    return _clean_paragraph(resp.choices[0].message.content)
